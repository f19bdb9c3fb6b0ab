"""Base screen class with common functionality for all screens."""

from typing import TYPE_CHECKING, ClassVar

import structlog
from textual.binding import Binding
from textual.screen import Screen
from textual.widgets import Static

from plate_spotter.services.errors import (
    ErrorSeverity,
    UserFriendlyError,
    get_error_service,
    handle_error,
)
from plate_spotter.services.game_manager import GameManagerService

if TYPE_CHECKING:
    from plate_spotter.ui.app import PlateSpotterApp

log = structlog.stdlib.get_logger()


class BaseScreen(Screen[None]):
    """Base class for application screens.

    Provides back navigation, typed access to the parent app and its
    services, and notification helpers that route errors through the
    error handling service.
    """

    BINDINGS: ClassVar[list[Binding]] = [
        Binding("escape", "go_back", "Back", show=True),
    ]

    SCREEN_TITLE: ClassVar[str] = "Screen"
    SCREEN_NAME: ClassVar[str] = "base"

    def __init__(self, name: str | None = None) -> None:
        super().__init__(name=name or self.SCREEN_NAME)

    @property
    def plate_app(self) -> "PlateSpotterApp":
        """The parent PlateSpotterApp.

        Raises:
            RuntimeError: If the screen is attached to another app
        """
        from plate_spotter.ui.app import PlateSpotterApp

        if isinstance(self.app, PlateSpotterApp):
            return self.app
        raise RuntimeError("Screen is not attached to a PlateSpotterApp")

    @property
    def game_manager(self) -> GameManagerService | None:
        return self.plate_app.game_manager

    async def on_mount(self) -> None:
        log.info("Screen mounted", screen=self.SCREEN_NAME)

    async def action_go_back(self) -> None:
        await self.plate_app.action_go_back()

    def create_title_widget(self, title: str | None = None) -> Static:
        return Static(title or self.SCREEN_TITLE, classes="title")

    def notify_error(self, message: str) -> None:
        self.notify(message, severity="error")
        log.error("User notification", message=message, screen=self.SCREEN_NAME)

    def notify_success(self, message: str) -> None:
        self.notify(message, severity="information")
        log.info("User notification", message=message, screen=self.SCREEN_NAME)

    def notify_warning(self, message: str) -> None:
        self.notify(message, severity="warning")
        log.warning("User notification", message=message, screen=self.SCREEN_NAME)

    def handle_exception(
        self,
        error: Exception,
        operation: str,
        context: dict[str, str | int | float | bool] | None = None,
    ) -> UserFriendlyError:
        """Log an exception and show its user-facing message.

        Args:
            error: The exception that occurred
            operation: Description of the operation that failed
            context: Additional context information

        Returns:
            UserFriendlyError with message and suggested actions
        """
        user_error = handle_error(
            error=error,
            operation=operation,
            component=self.SCREEN_NAME,
            context=context,
        )
        message = get_error_service().create_user_message(user_error, include_suggestions=False)

        if user_error.severity == ErrorSeverity.WARNING:
            self.notify_warning(message)
        else:
            self.notify_error(message)
        return user_error
