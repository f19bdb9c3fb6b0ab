"""US regions used for grouping plates and drawing the progress map."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Region:
    """A state or district with its position on the tile-grid map."""
    code: str
    name: str
    row: int
    column: int


REGIONS: tuple[Region, ...] = (
    Region("AK", "Alaska", 0, 0),
    Region("ME", "Maine", 0, 11),
    Region("VT", "Vermont", 1, 10),
    Region("NH", "New Hampshire", 1, 11),
    Region("WA", "Washington", 2, 1),
    Region("ID", "Idaho", 2, 2),
    Region("MT", "Montana", 2, 3),
    Region("ND", "North Dakota", 2, 4),
    Region("MN", "Minnesota", 2, 5),
    Region("IL", "Illinois", 2, 6),
    Region("WI", "Wisconsin", 2, 7),
    Region("MI", "Michigan", 2, 8),
    Region("NY", "New York", 2, 9),
    Region("RI", "Rhode Island", 2, 10),
    Region("MA", "Massachusetts", 2, 11),
    Region("OR", "Oregon", 3, 1),
    Region("NV", "Nevada", 3, 2),
    Region("WY", "Wyoming", 3, 3),
    Region("SD", "South Dakota", 3, 4),
    Region("IA", "Iowa", 3, 5),
    Region("IN", "Indiana", 3, 6),
    Region("OH", "Ohio", 3, 7),
    Region("PA", "Pennsylvania", 3, 8),
    Region("NJ", "New Jersey", 3, 9),
    Region("CT", "Connecticut", 3, 10),
    Region("CA", "California", 4, 1),
    Region("UT", "Utah", 4, 2),
    Region("CO", "Colorado", 4, 3),
    Region("NE", "Nebraska", 4, 4),
    Region("MO", "Missouri", 4, 5),
    Region("KY", "Kentucky", 4, 6),
    Region("WV", "West Virginia", 4, 7),
    Region("VA", "Virginia", 4, 8),
    Region("MD", "Maryland", 4, 9),
    Region("DE", "Delaware", 4, 10),
    Region("AZ", "Arizona", 5, 2),
    Region("NM", "New Mexico", 5, 3),
    Region("KS", "Kansas", 5, 4),
    Region("AR", "Arkansas", 5, 5),
    Region("TN", "Tennessee", 5, 6),
    Region("NC", "North Carolina", 5, 7),
    Region("SC", "South Carolina", 5, 8),
    Region("DC", "District of Columbia", 5, 9),
    Region("OK", "Oklahoma", 6, 4),
    Region("LA", "Louisiana", 6, 5),
    Region("MS", "Mississippi", 6, 6),
    Region("AL", "Alabama", 6, 7),
    Region("GA", "Georgia", 6, 8),
    Region("HI", "Hawaii", 7, 0),
    Region("TX", "Texas", 7, 4),
    Region("FL", "Florida", 7, 9),
)

_BY_CODE: dict[str, Region] = {region.code: region for region in REGIONS}

# One-per-region games are complete when every region above has a plate
REGION_COUNT = len(REGIONS)


def get_region(code: str) -> Region | None:
    return _BY_CODE.get(code.upper())


def region_name(code: str) -> str:
    """Display name for a region code, falling back to the code itself."""
    region = get_region(code)
    return region.name if region else code
