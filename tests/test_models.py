"""Tests for catalog, region and preference models."""

from pathlib import Path

import pytest
from hypothesis import given, strategies as st

from plate_spotter.models import GameMode, PlateCategory, PlateRarity, PlateRecord, UserPreferences
from plate_spotter.models.plate import rarity_weight
from plate_spotter.models.preferences import MAX_RECENT_REGIONS
from plate_spotter.models.regions import REGION_COUNT, REGIONS, get_region, region_name


class TestPlateRarity:
    @pytest.mark.parametrize(
        ("raw", "expected", "points"),
        [
            ("common", PlateRarity.COMMON, 1),
            ("Uncommon", PlateRarity.UNCOMMON, 2),
            (" rare ", PlateRarity.RARE, 5),
            ("Very Rare", PlateRarity.VERY_RARE, 10),
            ("very_rare", PlateRarity.VERY_RARE, 10),
            ("LEGENDARY", PlateRarity.LEGENDARY, 25),
        ],
    )
    def test_parse_and_points(self, raw: str, expected: PlateRarity, points: int) -> None:
        rarity = PlateRarity.from_string(raw)
        assert rarity is expected
        assert rarity.point_value == points

    @pytest.mark.parametrize("raw", [None, "", "mythic"])
    def test_unknown_values(self, raw: str | None) -> None:
        assert PlateRarity.from_string(raw) is None

    def test_missing_rarity_weighs_one(self) -> None:
        assert rarity_weight(None) == 1
        assert rarity_weight(PlateRarity.VERY_RARE) == 10

    def test_display_name(self) -> None:
        assert PlateRarity.VERY_RARE.display_name == "Very Rare"


class TestPlateCategory:
    def test_parse(self) -> None:
        assert PlateCategory.from_string("Cause_Charity") is PlateCategory.CAUSE_CHARITY
        assert PlateCategory.from_string("novelty") is None

    def test_every_category_has_display_name(self) -> None:
        assert all(category.display_name for category in PlateCategory)


class TestPlateRecord:
    def test_image_path(self) -> None:
        record = PlateRecord("CA", "Sequoia", "sequoia.png")
        assert record.image_path(Path("images")) == Path("images/CA/sequoia.png")
        assert record.key == ("CA", "Sequoia")
        assert not record.has_enhanced_metadata


class TestRegions:
    def test_fifty_states_plus_dc(self) -> None:
        assert REGION_COUNT == 51
        assert len({r.code for r in REGIONS}) == REGION_COUNT
        assert GameMode.STATE_COLLECTION.max_completion == REGION_COUNT
        assert GameMode.PLATE_COLLECTION.max_completion is None

    def test_tile_positions_are_unique(self) -> None:
        assert len({(r.row, r.column) for r in REGIONS}) == REGION_COUNT

    def test_lookup(self) -> None:
        region = get_region("ca")
        assert region is not None and region.name == "California"
        assert region_name("DC") == "District of Columbia"
        assert region_name("ZZ") == "ZZ"


class TestUserPreferences:
    def test_recent_regions_example(self) -> None:
        preferences = UserPreferences()
        for region in ["A", "B", "C", "A"]:
            preferences.add_recent_region(region)

        assert preferences.recent_regions == ["A", "C", "B"]
        assert preferences.last_selected_region == "A"

    @given(st.lists(st.sampled_from(["CA", "TX", "NY", "WA", "OR"]), min_size=1, max_size=30))
    def test_recent_regions_bounded_and_unique(self, regions: list[str]) -> None:
        preferences = UserPreferences()
        for region in regions:
            preferences.add_recent_region(region)

        recent = preferences.recent_regions
        assert recent[0] == regions[-1]
        assert len(recent) <= MAX_RECENT_REGIONS
        assert len(recent) == len(set(recent))
