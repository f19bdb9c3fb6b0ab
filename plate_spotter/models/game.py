"""Game and collection data models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .plate import PlateCategory, PlateRarity, rarity_weight
from .regions import REGION_COUNT

# Typical goal used to express plate-collection progress as a percentage
TYPICAL_PLATE_GOAL = 200


class GameMode(Enum):
    """Collection rules for a game."""
    STATE_COLLECTION = "state_collection"  # one plate per region
    PLATE_COLLECTION = "plate_collection"  # unlimited unique plates

    @property
    def display_name(self) -> str:
        if self is GameMode.STATE_COLLECTION:
            return "State Collection"
        return "Plate Collection"

    @property
    def description(self) -> str:
        if self is GameMode.STATE_COLLECTION:
            return f"Collect one plate from each state ({REGION_COUNT} total)"
        return "Collect as many unique plates as possible"

    @property
    def max_completion(self) -> int | None:
        """Number of records that completes the game, None when unbounded."""
        if self is GameMode.STATE_COLLECTION:
            return REGION_COUNT
        return None


@dataclass(frozen=True)
class CollectedRecord:
    """A plate logged into a game, with a snapshot of its classification."""
    region: str
    title: str
    image: str
    collected_at: datetime
    category: PlateCategory | None = None
    rarity: PlateRarity | None = None

    @property
    def key(self) -> tuple[str, str]:
        return (self.region, self.title)


@dataclass
class CollectionGame:
    """A named collection session owning a deduplicated set of records."""
    id: str
    mode: GameMode
    created_at: datetime
    last_active_at: datetime
    name: str | None = None
    records: dict[tuple[str, str], CollectedRecord] = field(default_factory=dict)

    @property
    def plate_count(self) -> int:
        return len(self.records)

    @property
    def region_count(self) -> int:
        return len({region for region, _ in self.records})

    @property
    def region_progress(self) -> dict[str, int]:
        """Number of collected records per region."""
        progress: dict[str, int] = {}
        for record in self.records.values():
            progress[record.region] = progress.get(record.region, 0) + 1
        return progress

    @property
    def score(self) -> int:
        return sum(rarity_weight(record.rarity) for record in self.records.values())

    def has_collected(self, region: str, title: str) -> bool:
        return (region, title) in self.records

    def records_for_region(self, region: str) -> list[CollectedRecord]:
        """Records for one region in collection order."""
        matching = [r for r in self.records.values() if r.region == region]
        return sorted(matching, key=lambda r: r.collected_at)


@dataclass(frozen=True)
class GameStatistics:
    """Derived progress figures for a single game."""
    total_count: int
    distinct_regions: int
    score: int
    region_progress: dict[str, int]
    average_rarity: float
    completion_percentage: float


class CollectStatus(Enum):
    """Outcome of logging a plate into a game."""
    COLLECTED = "collected"
    ALREADY_PRESENT = "already_present"


@dataclass(frozen=True)
class CollectResult:
    """Result of a collect call; `replaced` is set when a region slot was reused."""
    status: CollectStatus
    record: CollectedRecord | None = None
    replaced: CollectedRecord | None = None

    @property
    def collected(self) -> bool:
        return self.status is CollectStatus.COLLECTED


class RemoveStatus(Enum):
    """Outcome of removing a plate from a game."""
    REMOVED = "removed"
    NOT_FOUND = "not_found"
