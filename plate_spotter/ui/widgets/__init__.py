"""Custom widgets for the TUI application."""

from .progress import GameStatisticsWidget, RegionGridWidget

__all__ = [
    "GameStatisticsWidget",
    "RegionGridWidget",
]
