"""Main menu screen."""

from typing import ClassVar, override

import structlog
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Vertical
from textual.widgets import Button, Static

from .base import BaseScreen

log = structlog.stdlib.get_logger()


class MainMenuScreen(BaseScreen):
    """Entry screen linking to games, the plate catalog and settings."""

    SCREEN_TITLE: ClassVar[str] = "Main Menu"
    SCREEN_NAME: ClassVar[str] = "main_menu"

    CSS: ClassVar[str] = """
    MainMenuScreen {
        align: center middle;
    }

    #menu-container {
        width: 60;
        height: auto;
        padding: 2 4;
        border: solid $primary;
        background: $surface;
    }

    #menu-title {
        text-align: center;
        text-style: bold;
        color: $primary;
        margin-bottom: 1;
    }

    #menu-subtitle {
        text-align: center;
        color: $text-muted;
        margin-bottom: 2;
    }

    .menu-button {
        width: 100%;
        margin-bottom: 1;
    }
    """

    BINDINGS: ClassVar[list[Binding]] = [
        Binding("1", "navigate('games_list')", "Games", show=False),
        Binding("2", "navigate('plate_browser')", "Plates", show=False),
        Binding("3", "navigate('settings')", "Settings", show=False),
    ]

    # (option id, label, target screen)
    MENU_OPTIONS: ClassVar[list[tuple[str, str, str]]] = [
        ("games", "1. My Games", "games_list"),
        ("plates", "2. Browse Plates", "plate_browser"),
        ("settings", "3. Settings", "settings"),
    ]

    @override
    def compose(self) -> ComposeResult:
        with Container(id="menu-container"):
            yield Static("🚗 Plate Spotter", id="menu-title")
            yield Static(self._subtitle(), id="menu-subtitle")
            with Vertical(id="menu-buttons"):
                for option_id, label, _ in self.MENU_OPTIONS:
                    yield Button(label, id=f"btn-{option_id}", classes="menu-button")

    def _subtitle(self) -> str:
        catalog = self.plate_app.app_state.catalog
        manager = self.game_manager
        games = len(manager.games) if manager else 0
        return f"{len(catalog.records)} plates in catalog · {games} active games"

    def on_screen_resume(self) -> None:
        self.query_one("#menu-subtitle", Static).update(self._subtitle())

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        option = (event.button.id or "").removeprefix("btn-")
        for opt_id, _, target in self.MENU_OPTIONS:
            if opt_id == option:
                log.info("Menu option selected", option=option, target=target)
                await self.action_navigate(target)
                return
        log.warning("Unknown menu option", button_id=event.button.id)

    async def action_navigate(self, screen_name: str) -> None:
        await self.plate_app.push_screen_with_tracking(screen_name)

    @override
    async def action_go_back(self) -> None:
        # Back from the root screen quits
        self.plate_app.exit()
