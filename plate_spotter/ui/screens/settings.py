"""Settings screen: gameplay preferences, configuration and image cache."""

import dataclasses
from pathlib import Path
from typing import ClassVar, override

import structlog
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.widgets import Button, Input, Label, Select, Static

from plate_spotter.models.config import AppConfig
from plate_spotter.models.game import GameMode
from plate_spotter.services.config import VALID_LOG_LEVELS
from plate_spotter.services.errors import ConfigurationError

from .base import BaseScreen

log = structlog.stdlib.get_logger()


def build_config(
    current: AppConfig,
    catalog_path: str,
    image_base_url: str,
    max_games: str,
    log_level: str,
) -> AppConfig:
    """Apply raw form values to a configuration.

    Raises:
        ConfigurationError: If a value cannot be converted
    """
    if not catalog_path.strip():
        raise ConfigurationError("Catalog path cannot be empty", setting="catalog_path")
    try:
        games = int(max_games)
    except ValueError as e:
        raise ConfigurationError("Maximum games must be a whole number", setting="max_games", expected="1-20") from e

    return dataclasses.replace(
        current,
        catalog_path=Path(catalog_path.strip()),
        image_base_url=image_base_url.strip() or None,
        max_games=games,
        log_level=log_level,
    )


class SettingsScreen(BaseScreen):
    """Edits the default game mode and the saved configuration."""

    SCREEN_TITLE: ClassVar[str] = "Settings"
    SCREEN_NAME: ClassVar[str] = "settings"

    CSS: ClassVar[str] = """
    SettingsScreen {
        align: center middle;
    }

    #settings-container {
        width: 80;
        height: auto;
        max-height: 90%;
        padding: 1 2;
        border: solid $primary;
    }

    .form-group {
        height: auto;
        margin-bottom: 1;
    }

    .form-hint {
        color: $text-muted;
        text-style: italic;
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
        Binding("ctrl+s", "save_settings", "Save", show=True),
    ]

    def _current_config(self) -> AppConfig | None:
        context = self.plate_app.app_context
        if context is not None:
            return context.config
        service = self.plate_app.config_service
        return service.load_config() if service else None

    @override
    def compose(self) -> ComposeResult:
        manager = self.game_manager
        default_mode = manager.preferences.default_mode if manager else GameMode.STATE_COLLECTION
        config = self._current_config()

        with VerticalScroll(id="settings-container"):
            yield self.create_title_widget("⚙️ Settings")

            with Vertical(classes="form-group"):
                yield Label("Default game mode")
                yield Select(
                    [(mode.display_name, mode.value) for mode in GameMode],
                    value=default_mode.value,
                    id="default-mode",
                    allow_blank=False,
                )
                yield Static(default_mode.description, id="mode-hint", classes="form-hint")

            if config is not None:
                with Vertical(classes="form-group"):
                    yield Label("Catalog file")
                    yield Input(str(config.catalog_path), id="catalog-path")
                with Vertical(classes="form-group"):
                    yield Label("Image base URL")
                    yield Input(config.image_base_url or "", placeholder="https://...", id="image-base-url")
                with Vertical(classes="form-group"):
                    yield Label("Maximum games")
                    yield Input(str(config.max_games), id="max-games", type="integer")
                with Vertical(classes="form-group"):
                    yield Label("Log level")
                    yield Select(
                        [(level, level) for level in VALID_LOG_LEVELS],
                        value=config.log_level,
                        id="log-level",
                        allow_blank=False,
                    )
                yield Static("Configuration changes apply on next start", classes="form-hint")

            yield Static("", id="cache-stats", classes="form-hint")
            with Horizontal(id="button-row"):
                yield Button("Save", id="btn-save", variant="primary", disabled=config is None)
                yield Button("Clear Image Cache", id="btn-clear-cache")
                yield Button("Back", id="btn-back")

    @override
    async def on_mount(self) -> None:
        await super().on_mount()
        self._update_cache_stats()

    def _update_cache_stats(self) -> None:
        image_service = self.plate_app.image_service
        if image_service is None:
            return
        stats = image_service.cache.stats()
        self.query_one("#cache-stats", Static).update(
            f"Image cache: {stats.count}/{stats.count_limit} images, "
            f"{stats.total_cost // 1024} KB of {stats.cost_limit // (1024 * 1024)} MB"
        )

    def on_select_changed(self, event: Select.Changed) -> None:
        if event.select.id != "default-mode" or event.value is Select.BLANK:
            return
        mode = GameMode(str(event.value))
        self.query_one("#mode-hint", Static).update(mode.description)
        manager = self.game_manager
        if manager is not None and manager.preferences.default_mode is not mode:
            manager.set_default_mode(mode)

    def action_save_settings(self) -> None:
        service = self.plate_app.config_service
        config = self._current_config()
        if service is None or config is None:
            self.notify_error("Configuration is not available")
            return

        try:
            new_config = build_config(
                config,
                self.query_one("#catalog-path", Input).value,
                self.query_one("#image-base-url", Input).value,
                self.query_one("#max-games", Input).value,
                str(self.query_one("#log-level", Select).value),
            )
            validation = service.validate_config(new_config)
            if not validation.is_valid:
                raise ConfigurationError("; ".join(validation.errors))
            service.save_config(new_config)
        except (ConfigurationError, OSError) as e:
            self.handle_exception(e, "save_settings", {"path": str(service.config_path)})
            return

        self.notify_success("Settings saved")

    def action_clear_image_cache(self) -> None:
        image_service = self.plate_app.image_service
        if image_service is None:
            return
        image_service.handle_memory_pressure()
        self._update_cache_stats()
        self.notify_success("Image cache cleared")

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id
        if button_id == "btn-save":
            self.action_save_settings()
        elif button_id == "btn-clear-cache":
            self.action_clear_image_cache()
        elif button_id == "btn-back":
            await self.action_go_back()
