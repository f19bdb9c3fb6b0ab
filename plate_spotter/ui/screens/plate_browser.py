"""Plate browser screen for searching the catalog and logging plates."""

from typing import ClassVar, override

import structlog
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal
from textual.widgets import Button, DataTable, Input, Select, Static

from plate_spotter.models.game import CollectStatus
from plate_spotter.models.plate import PlateCategory, PlateRarity, PlateRecord
from plate_spotter.models.regions import region_name
from plate_spotter.services.catalog import CatalogService
from plate_spotter.services.errors import DuplicateError, GameNotFoundError

from .base import BaseScreen

log = structlog.stdlib.get_logger()

ALL = "all"


def filter_records(
    catalog: CatalogService,
    search_query: str = "",
    region: str | None = None,
    category: PlateCategory | None = None,
    rarity: PlateRarity | None = None,
) -> list[PlateRecord]:
    """Filter catalog records by title text, region, category and rarity.

    Args:
        catalog: Loaded catalog to query
        search_query: Case-insensitive substring of the plate title
        region: Region code, or None for every region
        category: Category, or None for every category
        rarity: Rarity, or None for every rarity

    Returns:
        Matching records in catalog order
    """
    result = catalog.search(search_query)
    if region:
        in_region = set(catalog.by_region(region))
        result = [r for r in result if r in in_region]
    if category is not None:
        in_category = set(catalog.by_category(category))
        result = [r for r in result if r in in_category]
    if rarity is not None:
        in_rarity = set(catalog.by_rarity(rarity))
        result = [r for r in result if r in in_rarity]
    return result


def visible_selection(selected: PlateRecord | None, visible: list[PlateRecord]) -> PlateRecord | None:
    """The selected record, or None once filtering hides it."""
    return selected if selected in visible else None


def region_options(regions: list[str], recent: list[str]) -> list[tuple[str, str]]:
    """Region choices with recently used regions listed first."""
    ordered = [r for r in recent if r in regions] + [r for r in regions if r not in recent]
    return [("All regions", ALL)] + [(f"{code} - {region_name(code)}", code) for code in ordered]


class PlateBrowserScreen(BaseScreen):
    """Catalog browser; collects the selected plate into the active game."""

    SCREEN_TITLE: ClassVar[str] = "Browse Plates"
    SCREEN_NAME: ClassVar[str] = "plate_browser"

    CSS: ClassVar[str] = """
    #browser-container {
        width: 95%;
        height: 95%;
        padding: 1 2;
        border: solid $primary;
    }

    #filter-row {
        height: 3;
    }

    #search-input {
        width: 2fr;
    }

    #region-select, #category-select, #rarity-select {
        width: 1fr;
        margin-left: 1;
    }

    #filter-stats, #active-game {
        color: $text-muted;
    }

    #plates-table {
        height: 1fr;
    }

    #plate-details {
        height: auto;
        padding: 0 1;
        border: solid $secondary;
    }

    #button-row {
        height: auto;
        margin-top: 1;
        align: center middle;
    }

    #button-row Button {
        margin: 0 1;
    }
    """

    BINDINGS: ClassVar[list[Binding]] = [
        Binding("escape", "go_back", "Back", show=True),
        Binding("f", "focus_search", "Search", show=True),
        Binding("c", "collect_selected", "Collect", show=True),
    ]

    def __init__(self) -> None:
        super().__init__()
        self._catalog = CatalogService()
        self._filtered: list[PlateRecord] = []
        self._selected: PlateRecord | None = None

    @override
    def compose(self) -> ComposeResult:
        category_options = [("All categories", ALL)] + [(c.display_name, c.value) for c in PlateCategory]
        rarity_options = [("All rarities", ALL)] + [(r.display_name, r.value) for r in PlateRarity]
        with Container(id="browser-container"):
            yield self.create_title_widget("🔎 Browse Plates")
            yield Static("", id="active-game")
            with Horizontal(id="filter-row"):
                yield Input(placeholder="Search by plate title...", id="search-input")
                yield Select([("All regions", ALL)], value=ALL, id="region-select", allow_blank=False)
                yield Select(category_options, value=ALL, id="category-select", allow_blank=False)
                yield Select(rarity_options, value=ALL, id="rarity-select", allow_blank=False)
            yield Static("", id="filter-stats")
            yield DataTable(id="plates-table", cursor_type="row")
            yield Static("Select a plate to see its details", id="plate-details")
            with Horizontal(id="button-row"):
                yield Button("Collect", id="btn-collect", variant="primary", disabled=True)
                yield Button("Back", id="btn-back")

    @override
    async def on_mount(self) -> None:
        await super().on_mount()
        self.query_one("#plates-table", DataTable).add_columns("Region", "Plate", "Category", "Rarity")
        self._load_records()

    def on_screen_resume(self) -> None:
        self._update_active_game()

    def _load_records(self) -> None:
        state = self.plate_app.app_state
        self._catalog = state.catalog
        manager = self.game_manager
        recent = manager.preferences.recent_regions if manager else []
        self.query_one("#region-select", Select).set_options(region_options(self._catalog.available_regions, recent))
        if state.catalog_error:
            self.notify_error(state.catalog_error)
        self._update_active_game()
        self._apply_filters()

        image_service = self.plate_app.image_service
        if image_service is not None and self._catalog.records:
            _ = self.run_worker(image_service.preload_images(self._catalog.records), exclusive=True)

    def _update_active_game(self) -> None:
        manager = self.game_manager
        game_id = self.plate_app.app_state.active_game_id
        game = manager.get_game(game_id) if manager and game_id else None
        label = f"Logging into: {manager.display_name(game)}" if manager and game else "No active game, open one from My Games"
        self.query_one("#active-game", Static).update(label)
        self.query_one("#btn-collect", Button).disabled = game is None or self._selected is None

    def _apply_filters(self) -> None:
        region_value = self.query_one("#region-select", Select).value
        category_value = self.query_one("#category-select", Select).value
        rarity_value = self.query_one("#rarity-select", Select).value
        self._filtered = filter_records(
            self._catalog,
            self.query_one("#search-input", Input).value,
            region=None if region_value in (ALL, Select.BLANK) else str(region_value),
            category=None if category_value in (ALL, Select.BLANK) else PlateCategory(str(category_value)),
            rarity=None if rarity_value in (ALL, Select.BLANK) else PlateRarity(str(rarity_value)),
        )
        self._selected = visible_selection(self._selected, self._filtered)
        if self._selected is None:
            self.query_one("#plate-details", Static).update("Select a plate to see its details")
            self._update_active_game()

        table = self.query_one("#plates-table", DataTable)
        table.clear()
        for index, record in enumerate(self._filtered):
            table.add_row(
                record.region,
                record.title[:50],
                record.category.display_name if record.category else "",
                record.rarity.display_name if record.rarity else "",
                key=str(index),
            )
        self.query_one("#filter-stats", Static).update(
            f"Showing {len(self._filtered)} of {len(self._catalog.records)} plates"
        )

    async def _show_details(self, record: PlateRecord) -> None:
        self._selected = record
        manager = self.game_manager
        game_id = self.plate_app.app_state.active_game_id
        collected = bool(manager and game_id and manager.is_collected(game_id, record.region, record.title))

        lines = [
            f"{record.title} ({region_name(record.region)})",
            f"Image: {record.image}",
        ]
        if record.rarity:
            lines.append(f"Rarity: {record.rarity.display_name} ({record.rarity.point_value} pts)")
        if record.notes:
            lines.append(f"Notes: {record.notes}")
        if collected:
            lines.append("✔ Already collected in this game")

        image_service = self.plate_app.image_service
        if image_service is not None:
            image = await image_service.load_image(record)
            lines.append(f"Image source: {image.source.value} ({image.size} bytes)")

        self.query_one("#plate-details", Static).update("\n".join(lines))
        self._update_active_game()

    def action_collect_selected(self) -> None:
        manager = self.game_manager
        game_id = self.plate_app.app_state.active_game_id
        record = self._selected
        if manager is None or game_id is None:
            self.notify_warning("Open a game before logging plates")
            return
        if record is None:
            self.notify_warning("No plate selected")
            return

        context: dict[str, str | int | float | bool] = {"region": record.region, "title": record.title}
        try:
            result = manager.collect(game_id, record)
        except GameNotFoundError as e:
            self.handle_exception(e, "collect_plate", context)
            return

        if result.status is CollectStatus.ALREADY_PRESENT:
            self.handle_exception(DuplicateError(record.region, record.title), "collect_plate", context)
        elif result.replaced is not None:
            self.notify_success(f"Collected {record.title}, replacing {result.replaced.title}")
        else:
            self.notify_success(f"Collected {record.title} from {record.region}")
        self._update_active_game()

    def action_focus_search(self) -> None:
        self.query_one("#search-input", Input).focus()

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "search-input":
            self._apply_filters()

    def on_select_changed(self, event: Select.Changed) -> None:
        if event.select.id in ("region-select", "category-select", "rarity-select"):
            self._apply_filters()

    async def on_data_table_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        if event.row_key.value is None:
            return
        index = int(event.row_key.value)
        if 0 <= index < len(self._filtered):
            await self._show_details(self._filtered[index])

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-collect":
            self.action_collect_selected()
        elif event.button.id == "btn-back":
            await self.action_go_back()
