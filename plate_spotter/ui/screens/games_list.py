"""Games list screen: create, open and delete games."""

from typing import ClassVar, override

import structlog
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal
from textual.widgets import Button, DataTable, Input, Select, Static

from plate_spotter.models.game import CollectionGame, GameMode
from plate_spotter.services.errors import CapacityError
from plate_spotter.services.game_manager import GameManagerService

from .base import BaseScreen

log = structlog.stdlib.get_logger()

MODE_OPTIONS: list[tuple[str, str]] = [(mode.display_name, mode.value) for mode in GameMode]


def game_row(game: CollectionGame, manager: GameManagerService) -> tuple[str, str, str, str, str, str]:
    """Table cells for one game."""
    return (
        manager.display_name(game)[:40],
        game.mode.display_name,
        str(game.plate_count),
        str(game.region_count),
        str(game.score),
        game.last_active_at.strftime("%Y-%m-%d %H:%M"),
    )


class GamesListScreen(BaseScreen):
    """Lists saved games, most recently played first."""

    SCREEN_TITLE: ClassVar[str] = "My Games"
    SCREEN_NAME: ClassVar[str] = "games_list"

    CSS: ClassVar[str] = """
    #games-container {
        width: 95%;
        height: 95%;
        padding: 1 2;
        border: solid $primary;
    }

    #create-row {
        height: 3;
        margin-bottom: 1;
    }

    #mode-select {
        width: 1fr;
    }

    #name-input {
        width: 2fr;
        margin-left: 1;
    }

    #btn-create {
        margin-left: 1;
    }

    #games-table {
        height: 1fr;
    }

    #capacity {
        color: $text-muted;
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
        Binding("n", "focus_name", "New", show=True),
        Binding("delete", "delete_selected", "Delete", show=True),
    ]

    @override
    def compose(self) -> ComposeResult:
        manager = self.game_manager
        default_mode = manager.preferences.default_mode if manager else GameMode.STATE_COLLECTION
        with Container(id="games-container"):
            yield self.create_title_widget("🎯 My Games")
            with Horizontal(id="create-row"):
                yield Select(MODE_OPTIONS, value=default_mode.value, id="mode-select", allow_blank=False)
                yield Input(placeholder="Game name (optional)", id="name-input")
                yield Button("Create", id="btn-create", variant="primary")
            yield Static("", id="capacity")
            yield DataTable(id="games-table", cursor_type="row")
            with Horizontal(id="button-row"):
                yield Button("Open", id="btn-open", variant="primary")
                yield Button("Delete", id="btn-delete", variant="error")
                yield Button("Back", id="btn-back")

    @override
    async def on_mount(self) -> None:
        await super().on_mount()
        table = self.query_one("#games-table", DataTable)
        table.add_columns("Name", "Mode", "Plates", "Regions", "Score", "Last Played")
        self._refresh_games()

    def on_screen_resume(self) -> None:
        self._refresh_games()

    def _refresh_games(self) -> None:
        manager = self.game_manager
        table = self.query_one("#games-table", DataTable)
        table.clear()
        if manager is None:
            return
        for game in manager.games:
            table.add_row(*game_row(game, manager), key=game.id)
        self.query_one("#capacity", Static).update(
            f"{len(manager.games)} of {manager.max_games} games in use"
        )
        self.query_one("#btn-create", Button).disabled = not manager.can_create_game

    def _selected_game_id(self) -> str | None:
        table = self.query_one("#games-table", DataTable)
        if table.row_count == 0:
            return None
        row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        return str(row_key.value) if row_key.value is not None else None

    def _create_game(self) -> None:
        manager = self.game_manager
        if manager is None:
            self.notify_error("Game storage is not available")
            return

        mode = GameMode(str(self.query_one("#mode-select", Select).value))
        name_input = self.query_one("#name-input", Input)
        try:
            game = manager.create_game(mode, name_input.value or None)
        except CapacityError as e:
            self.handle_exception(e, "create_game")
            return

        name_input.value = ""
        self._refresh_games()
        self.notify_success(f"Created {manager.display_name(game)}")

    async def action_open_selected(self) -> None:
        game_id = self._selected_game_id()
        if game_id is None:
            self.notify_warning("No game selected")
            return
        self.plate_app.set_active_game(game_id)
        await self.plate_app.push_screen_with_tracking("game_detail")

    def action_delete_selected(self) -> None:
        manager = self.game_manager
        game_id = self._selected_game_id()
        if manager is None or game_id is None:
            self.notify_warning("No game selected")
            return
        if manager.delete_game(game_id):
            if self.plate_app.app_state.active_game_id == game_id:
                self.plate_app.set_active_game(None)
            self.notify_success("Game deleted")
        self._refresh_games()

    def action_focus_name(self) -> None:
        self.query_one("#name-input", Input).focus()

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id
        if button_id == "btn-create":
            self._create_game()
        elif button_id == "btn-open":
            await self.action_open_selected()
        elif button_id == "btn-delete":
            self.action_delete_selected()
        elif button_id == "btn-back":
            await self.action_go_back()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "name-input":
            self._create_game()

    async def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        if event.row_key.value is not None:
            self.plate_app.set_active_game(str(event.row_key.value))
            await self.plate_app.push_screen_with_tracking("game_detail")
