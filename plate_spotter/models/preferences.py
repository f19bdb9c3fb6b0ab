"""User preference models."""

from dataclasses import dataclass, field

from .game import GameMode

MAX_RECENT_REGIONS = 3


@dataclass
class UserPreferences:
    """Recent activity and defaults that speed up plate logging."""
    last_selected_region: str | None = None
    recent_regions: list[str] = field(default_factory=list)
    default_mode: GameMode = GameMode.STATE_COLLECTION

    def add_recent_region(self, region: str) -> None:
        """Move a region to the front of the recent list, keeping at most three."""
        self.last_selected_region = region
        self.recent_regions = [region] + [r for r in self.recent_regions if r != region]
        del self.recent_regions[MAX_RECENT_REGIONS:]
