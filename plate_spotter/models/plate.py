"""Catalog data models for license plate designs."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class PlateCategory(Enum):
    """Plate categories from the enhanced catalog classifications."""
    MILITARY = "military"
    UNIVERSITY = "university"
    CAUSE_CHARITY = "cause_charity"
    SPORTS = "sports"
    PROFESSIONAL = "professional"
    GOVERNMENT = "government"
    SPECIALTY = "specialty"
    STANDARD = "standard"

    @classmethod
    def from_string(cls, value: str | None) -> "PlateCategory | None":
        """Parse a raw catalog value, returning None when unknown."""
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None

    @property
    def display_name(self) -> str:
        return _CATEGORY_NAMES[self]


_CATEGORY_NAMES: dict[PlateCategory, str] = {
    PlateCategory.MILITARY: "Military/Veteran",
    PlateCategory.UNIVERSITY: "University/College",
    PlateCategory.CAUSE_CHARITY: "Cause/Charity",
    PlateCategory.SPORTS: "Sports",
    PlateCategory.PROFESSIONAL: "Professional",
    PlateCategory.GOVERNMENT: "Government",
    PlateCategory.SPECIALTY: "Specialty",
    PlateCategory.STANDARD: "Standard",
}


class PlateRarity(Enum):
    """Rarity tiers used for scoring collected plates."""
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    VERY_RARE = "very_rare"
    LEGENDARY = "legendary"

    @classmethod
    def from_string(cls, value: str | None) -> "PlateRarity | None":
        """Parse a raw catalog value ("Very Rare" -> VERY_RARE)."""
        if not value:
            return None
        try:
            return cls(value.strip().lower().replace(" ", "_"))
        except ValueError:
            return None

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()

    @property
    def point_value(self) -> int:
        """Score weight of a plate with this rarity."""
        return _RARITY_POINTS[self]


_RARITY_POINTS: dict[PlateRarity, int] = {
    PlateRarity.COMMON: 1,
    PlateRarity.UNCOMMON: 2,
    PlateRarity.RARE: 5,
    PlateRarity.VERY_RARE: 10,
    PlateRarity.LEGENDARY: 25,
}

# Weight applied to records that carry no rarity
DEFAULT_RARITY_WEIGHT = 1


def rarity_weight(rarity: PlateRarity | None) -> int:
    """Return the score weight for an optional rarity."""
    return rarity.point_value if rarity is not None else DEFAULT_RARITY_WEIGHT


@dataclass(frozen=True)
class PlateRecord:
    """One license plate design from the catalog."""
    region: str
    title: str
    image: str
    color_background: str | None = None
    text_color: str | None = None
    visual_elements: str | None = None
    category: PlateCategory | None = None
    rarity: PlateRarity | None = None
    layout_style: str | None = None
    confidence_score: float | None = None
    notes: str | None = None
    source: str | None = None

    @property
    def key(self) -> tuple[str, str]:
        """Identity used for duplicate detection."""
        return (self.region, self.title)

    @property
    def has_enhanced_metadata(self) -> bool:
        return self.category is not None or self.rarity is not None or self.confidence_score is not None

    def image_path(self, root: Path) -> Path:
        """Resolve the image file below an image root directory."""
        return root / self.region / self.image
