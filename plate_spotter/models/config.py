"""Configuration data models."""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class AppConfig:
    """Application configuration settings."""
    catalog_path: Path
    data_directory: Path
    image_directory: Path
    log_level: str
    image_base_url: str | None = None  # Remote fallback for plate images
    max_games: int = 5
    image_cache_count_limit: int = 200
    image_cache_cost_limit: int = 50 * 1024 * 1024  # bytes
