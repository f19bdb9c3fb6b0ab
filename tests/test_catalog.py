"""Tests for catalog loading and filtering."""

from pathlib import Path

import pytest
from hypothesis import given, strategies as st

from plate_spotter.models import PlateCategory, PlateRarity
from plate_spotter.services import CatalogParseError, CatalogService


ENHANCED_HEADER = (
    "state,plate_title,plate_img,color_bg,text_color,visual_elements,"
    "category,rarity,layout_style,confidence_score,notes,source"
)

ENHANCED_CSV = "\n".join([
    ENHANCED_HEADER,
    'CA,Sequoia,sequoia.png,green,white,"trees, mountains",cause_charity,Rare,centered,0.9,Park support,dmv',
    "CA,Gold Rush,gold_rush.png,gold,black,pan,specialty,Very Rare,centered,0.8,,dmv",
    "TX,Lone Star,lone_star.png,white,blue,star,standard,Common,left,1.0,,dmv",
])

MINIMAL_CSV = "\n".join([
    "state,plate_title,plate_img",
    "WA,Mount Rainier,rainier.png",
    "OR,Tree,tree.png",
])


class TestEnhancedSchema:
    def test_enhanced_fields_parsed(self) -> None:
        service = CatalogService()
        records = service.load(ENHANCED_CSV)

        assert service.enhanced
        assert len(records) == 3
        sequoia = records[0]
        assert sequoia.visual_elements == "trees, mountains"
        assert sequoia.category is PlateCategory.CAUSE_CHARITY
        assert sequoia.rarity is PlateRarity.RARE
        assert sequoia.confidence_score == pytest.approx(0.9)
        assert sequoia.notes == "Park support"
        assert records[1].rarity is PlateRarity.VERY_RARE
        assert records[1].notes is None

    def test_bad_confidence_keeps_minimal_record(self) -> None:
        csv_text = "\n".join([
            ENHANCED_HEADER,
            "NV,Sunset,sunset.png,orange,black,sun,specialty,Rare,centered,high,,dmv",
            "NV,Desert,desert.png,tan,black,cactus,standard,Common,centered,0.5,,dmv",
        ])
        records = CatalogService().load(csv_text)

        assert len(records) == 2
        assert records[0].title == "Sunset"
        assert not records[0].has_enhanced_metadata
        assert records[1].rarity is PlateRarity.COMMON

    def test_unknown_classification_values_are_absent(self) -> None:
        csv_text = "\n".join([
            ENHANCED_HEADER,
            "AZ,Cactus,cactus.png,,,,novelty,mythic,,,,",
        ])
        record = CatalogService().load(csv_text)[0]

        assert record.category is None
        assert record.rarity is None
        assert record.color_background is None


class TestMinimalSchema:
    def test_minimal_rows_have_no_enhanced_fields(self) -> None:
        service = CatalogService()
        records = service.load(MINIMAL_CSV)

        assert not service.enhanced
        assert [r.key for r in records] == [("WA", "Mount Rainier"), ("OR", "Tree")]
        for record in records:
            assert record.category is None
            assert record.rarity is None
            assert record.confidence_score is None
            assert not record.has_enhanced_metadata

    def test_positional_columns_without_header_names(self) -> None:
        csv_text = "region,name,file\nID,Potato,potato.png\n"
        records = CatalogService().load(csv_text)

        assert records[0].region == "ID"
        assert records[0].image == "potato.png"

    def test_rows_missing_required_fields_are_skipped(self) -> None:
        csv_text = "\n".join([
            "state,plate_title,plate_img",
            "WA,Mount Rainier,rainier.png",
            "WA,,blank_title.png",
            "OR",
            "",
            "OR,Tree,tree.png",
        ])
        records = CatalogService().load(csv_text)

        assert [r.title for r in records] == ["Mount Rainier", "Tree"]

    @given(
        title=st.text(
            min_size=1,
            max_size=40,
            alphabet=st.characters(whitelist_categories=("Lu", "Ll", "Nd"), whitelist_characters=" ,'"),
        ).filter(lambda s: s.strip() != "")
    )
    def test_quoted_titles_round_trip(self, title: str) -> None:
        """Titles containing commas survive when quoted."""
        csv_text = f'state,plate_title,plate_img\nCA,"{title}",img.png\n'
        records = CatalogService().load(csv_text)

        assert len(records) == 1
        assert records[0].title == title.strip()


class TestLoadErrors:
    def test_header_only_catalog_raises(self) -> None:
        with pytest.raises(CatalogParseError):
            _ = CatalogService().load("state,plate_title,plate_img\n")

    def test_no_usable_rows_raises(self) -> None:
        with pytest.raises(CatalogParseError):
            _ = CatalogService().load("state,plate_title,plate_img\nCA,,\n,,\n")

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(CatalogParseError):
            _ = CatalogService().load(tmp_path / "missing.csv")

    def test_undecodable_file_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "plate_metadata.csv"
        path.write_bytes(b"state,plate_title,plate_img\nCA,Sequoia,a.png\nTX,Lone \xff Star,b.png\n")

        with pytest.raises(CatalogParseError):
            _ = CatalogService().load(path)


class TestLoadFromDirectory:
    def test_prefers_enhanced_file(self, tmp_path: Path) -> None:
        (tmp_path / "plate_metadata_enhanced.csv").write_text(ENHANCED_CSV, encoding="utf-8")
        (tmp_path / "plate_metadata.csv").write_text(MINIMAL_CSV, encoding="utf-8")

        service = CatalogService()
        records = service.load_from_directory(tmp_path)

        assert service.enhanced
        assert len(records) == 3

    def test_skips_file_without_required_columns(self, tmp_path: Path) -> None:
        (tmp_path / "plate_metadata_enhanced.csv").write_text("a,b,c\n1,2,3\n", encoding="utf-8")
        (tmp_path / "plate_metadata.csv").write_text(MINIMAL_CSV, encoding="utf-8")

        records = CatalogService().load_from_directory(tmp_path)

        assert [r.region for r in records] == ["WA", "OR"]

    def test_empty_directory_raises(self, tmp_path: Path) -> None:
        with pytest.raises(CatalogParseError):
            _ = CatalogService().load_from_directory(tmp_path)


class TestQueries:
    @pytest.fixture
    def service(self) -> CatalogService:
        service = CatalogService()
        _ = service.load(ENHANCED_CSV)
        return service

    def test_by_region(self, service: CatalogService) -> None:
        assert [r.title for r in service.by_region("CA")] == ["Sequoia", "Gold Rush"]

    def test_by_category_and_rarity(self, service: CatalogService) -> None:
        assert [r.title for r in service.by_category(PlateCategory.STANDARD)] == ["Lone Star"]
        assert [r.title for r in service.by_rarity(PlateRarity.VERY_RARE)] == ["Gold Rush"]

    def test_available_regions_sorted_unique(self, service: CatalogService) -> None:
        assert service.available_regions == ["CA", "TX"]

    def test_search_is_case_insensitive(self, service: CatalogService) -> None:
        assert [r.title for r in service.search("gold")] == ["Gold Rush"]
        assert len(service.search("  ")) == 3

    def test_find(self, service: CatalogService) -> None:
        found = service.find("TX", "Lone Star")
        assert found is not None and found.image == "lone_star.png"
        assert service.find("TX", "Missing") is None
