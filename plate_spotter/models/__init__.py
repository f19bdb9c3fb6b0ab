"""Data models for the Plate Spotter application."""

from .config import AppConfig
from .game import (
    CollectedRecord,
    CollectionGame,
    CollectResult,
    CollectStatus,
    GameMode,
    GameStatistics,
    RemoveStatus,
)
from .plate import PlateCategory, PlateRarity, PlateRecord
from .preferences import UserPreferences
from .regions import REGIONS, Region, region_name

__all__ = [
    "AppConfig",
    "CollectedRecord",
    "CollectionGame",
    "CollectResult",
    "CollectStatus",
    "GameMode",
    "GameStatistics",
    "PlateCategory",
    "PlateRarity",
    "PlateRecord",
    "REGIONS",
    "Region",
    "RemoveStatus",
    "UserPreferences",
    "region_name",
]
