"""Main Textual application with screen management and shared state."""

from dataclasses import dataclass, field
from typing import Any, ClassVar, override

import structlog
from textual.app import App, ComposeResult
from textual.binding import Binding, BindingType
from textual.reactive import reactive
from textual.widgets import Footer, Header

from plate_spotter.services.catalog import CatalogService
from plate_spotter.services.config import ConfigurationService
from plate_spotter.services.game_manager import GameManagerService
from plate_spotter.services.images import PlateImageService

log = structlog.stdlib.get_logger()


@dataclass
class AppState:
    """Shared state read by screens."""

    active_game_id: str | None = None
    catalog: CatalogService = field(default_factory=CatalogService)
    catalog_error: str | None = None


class PlateSpotterApp(App[None]):
    """Root Textual application for the plate spotting game."""

    CSS: ClassVar[str] = """
    Screen {
        background: $surface;
    }

    .title {
        text-align: center;
        text-style: bold;
        color: $primary;
        margin-bottom: 1;
    }

    .section-title {
        text-style: bold;
        color: $secondary;
        margin-top: 1;
    }
    """

    BINDINGS: ClassVar[list[BindingType]] = [
        Binding("q", "quit", "Quit", show=True, priority=True),
        Binding("escape", "go_back", "Back", show=True),
        Binding("?", "show_help", "Help", show=True),
    ]

    app_state: reactive[AppState] = reactive(AppState, init=False)

    _navigation_stack: list[str]

    def __init__(
        self,
        game_manager: GameManagerService | None = None,
        catalog: CatalogService | None = None,
        image_service: PlateImageService | None = None,
        config_service: ConfigurationService | None = None,
    ) -> None:
        """Initialize the application with injected services.

        Args:
            game_manager: Collection tracker
            catalog: Loaded plate catalog
            image_service: Plate image loader
            config_service: Configuration service for the settings screen
        """
        super().__init__()
        self.title = "Plate Spotter"  # type: ignore[assignment]
        self.sub_title = "License Plate Collection Game"  # type: ignore[assignment]
        self._game_manager = game_manager
        self._catalog = catalog
        self._image_service = image_service
        self._config_service = config_service
        self._navigation_stack = []
        self._app_context: Any = None
        self.app_state = AppState()

    @property
    def game_manager(self) -> GameManagerService | None:
        return self._game_manager

    @property
    def catalog(self) -> CatalogService | None:
        return self._catalog

    @property
    def image_service(self) -> PlateImageService | None:
        return self._image_service

    @property
    def config_service(self) -> ConfigurationService | None:
        return self._config_service

    @property
    def app_context(self) -> Any:
        return self._app_context

    def set_app_context(self, context: Any) -> None:
        self._app_context = context

    @property
    def navigation_stack(self) -> list[str]:
        return self._navigation_stack.copy()

    @override
    def compose(self) -> ComposeResult:
        yield Header()
        yield Footer()

    async def on_mount(self) -> None:
        if self._catalog is not None:
            self.set_catalog(self._catalog, getattr(self._app_context, "catalog_error", None))
        await self.push_screen_with_tracking("main_menu")

    async def push_screen_with_tracking(self, screen_name: str) -> None:
        """Push a registered screen and record it on the navigation stack."""
        from plate_spotter.ui.screens import get_screen_by_name

        screen = get_screen_by_name(screen_name)
        if screen is None:
            log.warning("Unknown screen requested", screen=screen_name)
            return
        self._navigation_stack.append(screen_name)
        await self.push_screen(screen)
        log.info("Screen pushed", screen=screen_name, stack_depth=len(self._navigation_stack))

    async def action_go_back(self) -> None:
        if len(self._navigation_stack) > 1:
            current = self._navigation_stack.pop()
            log.info("Navigating back", from_screen=current, stack_depth=len(self._navigation_stack))
            _ = self.pop_screen()

    async def action_show_help(self) -> None:
        self.notify("Press 'q' to quit, 'escape' to go back")

    def set_active_game(self, game_id: str | None) -> None:
        """Select the game that plate logging targets."""
        self.app_state = AppState(
            active_game_id=game_id,
            catalog=self.app_state.catalog,
            catalog_error=self.app_state.catalog_error,
        )
        log.info("Active game changed", game_id=game_id)

    def set_catalog(self, catalog: CatalogService, error: str | None = None) -> None:
        self.app_state = AppState(
            active_game_id=self.app_state.active_game_id,
            catalog=catalog,
            catalog_error=error,
        )
        log.info("Catalog updated", records=len(catalog.records), error=error)
