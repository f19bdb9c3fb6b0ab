"""Game detail screen: statistics, region map and collected plates."""

from typing import ClassVar, override

import structlog
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, VerticalScroll
from textual.widgets import Button, DataTable, Static

from plate_spotter.models.game import CollectedRecord, CollectionGame, RemoveStatus
from plate_spotter.models.regions import region_name
from plate_spotter.services.catalog import CatalogService
from plate_spotter.services.errors import GameNotFoundError
from plate_spotter.ui.widgets import GameStatisticsWidget, RegionGridWidget

from .base import BaseScreen

log = structlog.stdlib.get_logger()

ROW_KEY_SEPARATOR = "\x1f"


def record_row_key(record: CollectedRecord) -> str:
    return f"{record.region}{ROW_KEY_SEPARATOR}{record.title}"


def parse_row_key(key: str) -> tuple[str, str]:
    region, _, title = key.partition(ROW_KEY_SEPARATOR)
    return region, title


def sorted_records(game: CollectionGame) -> list[CollectedRecord]:
    """Collected records grouped by region, newest first within a region."""
    return sorted(
        game.records.values(),
        key=lambda r: (r.region, -r.collected_at.timestamp()),
    )


def catalog_details(catalog: CatalogService, region: str, title: str) -> str:
    """Catalog information for a collected plate."""
    record = catalog.find(region, title)
    if record is None:
        return f"{title} ({region}) is no longer in the catalog"
    lines = [f"Image: {record.image}"]
    if record.notes:
        lines.append(f"Notes: {record.notes}")
    return "\n".join(lines)


class GameDetailScreen(BaseScreen):
    """Shows progress for the active game and lets the player undo entries."""

    SCREEN_TITLE: ClassVar[str] = "Game"
    SCREEN_NAME: ClassVar[str] = "game_detail"

    CSS: ClassVar[str] = """
    #detail-container {
        padding: 1 2;
    }

    #records-table {
        height: 16;
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
        Binding("l", "log_plate", "Log Plate", show=True),
        Binding("delete", "remove_selected", "Remove", show=True),
    ]

    @override
    def compose(self) -> ComposeResult:
        with VerticalScroll(id="detail-container"):
            yield Static("", id="game-title", classes="title")
            yield Static("", id="game-mode")
            yield GameStatisticsWidget(id="game-stats")
            yield Static("Collection Map", classes="section-title")
            yield RegionGridWidget(id="region-grid")
            yield Static("Collected Plates", classes="section-title")
            yield DataTable(id="records-table", cursor_type="row")
            yield Static("", id="record-details")
            with Horizontal(id="button-row"):
                yield Button("Log Plate", id="btn-log", variant="primary")
                yield Button("Remove Selected", id="btn-remove", variant="warning")
                yield Button("Back", id="btn-back")

    @override
    async def on_mount(self) -> None:
        await super().on_mount()
        self.query_one("#records-table", DataTable).add_columns(
            "Region", "Plate", "Category", "Rarity", "Collected"
        )
        self._refresh()

    def on_screen_resume(self) -> None:
        self._refresh()

    def _current_game(self) -> CollectionGame | None:
        manager = self.game_manager
        game_id = self.plate_app.app_state.active_game_id
        if manager is None or game_id is None:
            return None
        return manager.get_game(game_id)

    def _refresh(self) -> None:
        manager = self.game_manager
        game = self._current_game()
        if manager is None or game is None:
            self.query_one("#game-title", Static).update("No game selected")
            return

        self.query_one("#game-title", Static).update(manager.display_name(game))
        self.query_one("#game-mode", Static).update(game.mode.description)

        stats = manager.stats(game.id)
        self.query_one("#game-stats", GameStatisticsWidget).update_statistics(stats, game.mode)
        self.query_one("#region-grid", RegionGridWidget).update_progress(stats.region_progress, game.mode)

        self.query_one("#record-details", Static).update("")
        table = self.query_one("#records-table", DataTable)
        table.clear()
        for record in sorted_records(game):
            table.add_row(
                f"{record.region} ({region_name(record.region)})",
                record.title,
                record.category.display_name if record.category else "",
                record.rarity.display_name if record.rarity else "",
                record.collected_at.strftime("%Y-%m-%d %H:%M"),
                key=record_row_key(record),
            )

    async def action_log_plate(self) -> None:
        await self.plate_app.push_screen_with_tracking("plate_browser")

    def action_remove_selected(self) -> None:
        manager = self.game_manager
        game = self._current_game()
        table = self.query_one("#records-table", DataTable)
        if manager is None or game is None or table.row_count == 0:
            self.notify_warning("No plate selected")
            return

        row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        region, title = parse_row_key(str(row_key.value))
        try:
            status = manager.remove(game.id, region, title)
        except GameNotFoundError as e:
            self.handle_exception(e, "remove_plate", {"region": region, "title": title})
            return

        if status is RemoveStatus.REMOVED:
            self.notify_success(f"Removed {title} ({region})")
        else:
            self.notify_warning(f"{title} ({region}) is not in this game")
        self._refresh()

    def on_data_table_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        if event.row_key.value is None:
            return
        region, title = parse_row_key(str(event.row_key.value))
        catalog = self.plate_app.app_state.catalog
        self.query_one("#record-details", Static).update(catalog_details(catalog, region, title))

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id
        if button_id == "btn-log":
            await self.action_log_plate()
        elif button_id == "btn-remove":
            self.action_remove_selected()
        elif button_id == "btn-back":
            await self.action_go_back()
