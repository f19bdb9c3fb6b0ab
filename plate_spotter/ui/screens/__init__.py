"""Screen components for the TUI application."""

from .base import BaseScreen
from .game_detail import GameDetailScreen
from .games_list import GamesListScreen
from .main_menu import MainMenuScreen
from .plate_browser import PlateBrowserScreen
from .settings import SettingsScreen

# Screen registry for navigation
_SCREEN_REGISTRY: dict[str, type[BaseScreen]] = {
    "main_menu": MainMenuScreen,
    "games_list": GamesListScreen,
    "game_detail": GameDetailScreen,
    "plate_browser": PlateBrowserScreen,
    "settings": SettingsScreen,
}


def get_screen_by_name(name: str) -> BaseScreen | None:
    """Create a new instance of the screen registered under `name`."""
    screen_class = _SCREEN_REGISTRY.get(name)
    if screen_class:
        return screen_class()
    return None


def register_screen(name: str, screen_class: type[BaseScreen]) -> None:
    _SCREEN_REGISTRY[name] = screen_class


def get_registered_screens() -> list[str]:
    return list(_SCREEN_REGISTRY.keys())


__all__ = [
    "BaseScreen",
    "GameDetailScreen",
    "GamesListScreen",
    "MainMenuScreen",
    "PlateBrowserScreen",
    "SettingsScreen",
    "get_registered_screens",
    "get_screen_by_name",
    "register_screen",
]
