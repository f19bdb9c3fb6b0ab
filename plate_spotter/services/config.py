"""Configuration service for managing application settings."""

import json
from pathlib import Path
from typing import Any

import structlog

from ..models import AppConfig

log = structlog.stdlib.get_logger()

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "plate-spotter" / "config.json"
DEFAULT_DATA_DIRECTORY = Path.home() / ".local" / "share" / "plate-spotter"
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
MAX_GAMES_LIMIT = 20


class ValidationResult:
    """Result of configuration validation."""

    def __init__(self, is_valid: bool, errors: list[str] | None = None) -> None:
        self.is_valid: bool = is_valid
        self.errors: list[str] = errors or []


class ConfigurationService:
    """Loads, validates and saves `AppConfig` as JSON."""

    def __init__(self, config_path: Path | None = None) -> None:
        self.config_path: Path = config_path or DEFAULT_CONFIG_PATH
        log.info("Configuration service initialized", config_path=str(self.config_path))

    def load_config(self) -> AppConfig:
        """Load configuration from file, or defaults when missing or invalid."""
        if not self.config_path.exists():
            log.info("Configuration file not found, using defaults")
            return self.get_default_config()

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data: dict[str, Any] = json.load(f)
            config = self._dict_to_config(data)
        except (json.JSONDecodeError, OSError, KeyError, TypeError, ValueError) as e:
            log.error("Failed to load configuration, using defaults", error=str(e))
            return self.get_default_config()

        validation_result = self.validate_config(config)
        if not validation_result.is_valid:
            log.warning("Invalid configuration loaded, using defaults", errors=validation_result.errors)
            return self.get_default_config()

        log.info("Configuration loaded successfully")
        return config

    def save_config(self, config: AppConfig) -> None:
        """Validate and save configuration.

        Raises:
            ValueError: If the configuration is invalid
            OSError: If the file cannot be written
        """
        validation_result = self.validate_config(config)
        if not validation_result.is_valid:
            raise ValueError(f"Invalid configuration: {', '.join(validation_result.errors)}")

        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with open(self.config_path, "w", encoding="utf-8") as f:
                json.dump(self._config_to_dict(config), f, indent=2, ensure_ascii=False)
        except OSError as e:
            log.error("Failed to save configuration", error=str(e))
            raise

        log.info("Configuration saved successfully")

    def validate_config(self, config: AppConfig) -> ValidationResult:
        """Validate configuration settings."""
        errors = []

        for field_name in ("catalog_path", "data_directory", "image_directory"):
            if not isinstance(getattr(config, field_name), Path):
                errors.append(f"{field_name} must be a Path object")

        if config.image_base_url is not None:
            if not isinstance(config.image_base_url, str) or not config.image_base_url.startswith(("http://", "https://")):
                errors.append("image_base_url must be an http(s) URL or None")

        if not isinstance(config.max_games, int) or isinstance(config.max_games, bool) or config.max_games < 1:
            errors.append("max_games must be a positive integer")
        elif config.max_games > MAX_GAMES_LIMIT:
            errors.append(f"max_games should not exceed {MAX_GAMES_LIMIT}")

        if not isinstance(config.image_cache_count_limit, int) or config.image_cache_count_limit < 1:
            errors.append("image_cache_count_limit must be a positive integer")

        if not isinstance(config.image_cache_cost_limit, int) or config.image_cache_cost_limit < 1:
            errors.append("image_cache_cost_limit must be a positive integer")

        if config.log_level not in VALID_LOG_LEVELS:
            errors.append(f"log_level must be one of: {', '.join(VALID_LOG_LEVELS)}")

        return ValidationResult(len(errors) == 0, errors)

    def get_default_config(self) -> AppConfig:
        return AppConfig(
            catalog_path=Path("plate_metadata.csv"),
            data_directory=DEFAULT_DATA_DIRECTORY,
            image_directory=Path("SourcePlateImages"),
            log_level="INFO",
        )

    def _config_to_dict(self, config: AppConfig) -> dict[str, Any]:
        return {
            "catalog_path": str(config.catalog_path),
            "data_directory": str(config.data_directory),
            "image_directory": str(config.image_directory),
            "image_base_url": config.image_base_url,
            "max_games": config.max_games,
            "image_cache_count_limit": config.image_cache_count_limit,
            "image_cache_cost_limit": config.image_cache_cost_limit,
            "log_level": config.log_level,
        }

    def _dict_to_config(self, data: dict[str, Any]) -> AppConfig:
        defaults = self.get_default_config()

        base_url = data.get("image_base_url")
        return AppConfig(
            catalog_path=Path(str(data.get("catalog_path", defaults.catalog_path))),
            data_directory=Path(str(data.get("data_directory", defaults.data_directory))),
            image_directory=Path(str(data.get("image_directory", defaults.image_directory))),
            image_base_url=str(base_url) if base_url else None,
            max_games=_as_int(data.get("max_games"), defaults.max_games),
            image_cache_count_limit=_as_int(data.get("image_cache_count_limit"), defaults.image_cache_count_limit),
            image_cache_cost_limit=_as_int(data.get("image_cache_cost_limit"), defaults.image_cache_cost_limit),
            log_level=str(data.get("log_level", defaults.log_level)),
        )


def _as_int(value: Any, default: int) -> int:
    # bool is an int subclass; treat it as missing
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return int(value)
