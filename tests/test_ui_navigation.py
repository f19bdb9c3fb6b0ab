"""Tests for UI navigation, app state and screen helpers."""

from datetime import datetime
from pathlib import Path

import pytest
from hypothesis import given, settings, strategies as st

from plate_spotter.models import AppConfig, CollectedRecord, CollectionGame, GameMode, GameStatistics, PlateCategory, PlateRarity
from plate_spotter.models.regions import REGIONS
from plate_spotter.services.catalog import CatalogService
from plate_spotter.services.errors import ConfigurationError
from plate_spotter.services.game_manager import GameManagerService
from plate_spotter.ui.app import AppState, PlateSpotterApp
from plate_spotter.ui.screens import (
    BaseScreen,
    MainMenuScreen,
    get_registered_screens,
    get_screen_by_name,
    register_screen,
)
from plate_spotter.ui.screens.game_detail import catalog_details, parse_row_key, record_row_key, sorted_records
from plate_spotter.ui.screens.games_list import game_row
from plate_spotter.ui.screens.plate_browser import ALL, filter_records, region_options, visible_selection
from plate_spotter.ui.screens.settings import build_config
from plate_spotter.ui.widgets.progress import build_region_grid, format_statistics, render_region_grid


CATALOG_CSV = "\n".join([
    "state,plate_title,plate_img,color_bg,text_color,visual_elements,category,rarity,layout_style,confidence_score,notes,source",
    "CA,Sequoia,sequoia.png,green,white,trees,cause_charity,Rare,centered,0.9,Park support,dmv",
    "CA,Gold Rush,gold.png,gold,black,pan,specialty,Very Rare,centered,0.8,,dmv",
    "TX,Lone Star,star.png,white,blue,star,standard,Common,left,1.0,,dmv",
    "WA,Mount Rainier,rainier.png,,,,,,,,,",
])


@pytest.fixture
def catalog() -> CatalogService:
    service = CatalogService()
    _ = service.load(CATALOG_CSV)
    return service


class TestMenuNavigation:
    @given(st.sampled_from([opt[0] for opt in MainMenuScreen.MENU_OPTIONS]))
    @settings(max_examples=20)
    def test_every_menu_option_targets_a_registered_screen(self, option: str) -> None:
        target = next(t for opt_id, _, t in MainMenuScreen.MENU_OPTIONS if opt_id == option)

        assert target in get_registered_screens()
        assert isinstance(get_screen_by_name(target), BaseScreen)

    def test_menu_options_are_unique(self) -> None:
        option_ids = [opt[0] for opt in MainMenuScreen.MENU_OPTIONS]
        targets = [opt[2] for opt in MainMenuScreen.MENU_OPTIONS]

        assert len(option_ids) == len(set(option_ids))
        assert len(targets) == len(set(targets))


class TestScreenRegistry:
    def test_all_screens_registered(self) -> None:
        assert set(get_registered_screens()) >= {
            "main_menu", "games_list", "game_detail", "plate_browser", "settings",
        }

    def test_screen_name_matches_registry_key(self) -> None:
        for name in get_registered_screens():
            screen = get_screen_by_name(name)
            assert screen is not None
            assert screen.SCREEN_NAME == name

    def test_unknown_screen_returns_none(self) -> None:
        assert get_screen_by_name("nonexistent_screen") is None

    def test_register_screen(self) -> None:
        class ExtraScreen(BaseScreen):
            SCREEN_NAME = "extra"

        register_screen("extra", ExtraScreen)
        assert isinstance(get_screen_by_name("extra"), ExtraScreen)


class TestAppState:
    def test_app_state_defaults(self) -> None:
        state = AppState()
        assert state.active_game_id is None
        assert state.catalog.records == []
        assert state.catalog_error is None

    def test_navigation_stack_is_copy(self) -> None:
        app = PlateSpotterApp()
        stack = app.navigation_stack
        stack.append("test")

        assert app.navigation_stack == []

    def test_set_active_game_keeps_catalog(self, catalog: CatalogService) -> None:
        app = PlateSpotterApp()
        app.set_catalog(catalog, error=None)
        app.set_active_game("game-1")

        assert app.app_state.active_game_id == "game-1"
        assert app.app_state.catalog is catalog

    def test_set_catalog_records_error(self) -> None:
        app = PlateSpotterApp()
        app.set_active_game("game-1")
        app.set_catalog(CatalogService(), error="The plate catalog is empty.")

        assert app.app_state.active_game_id == "game-1"
        assert app.app_state.catalog_error == "The plate catalog is empty."


class TestPlateBrowserFilters:
    def test_search_is_case_insensitive(self, catalog: CatalogService) -> None:
        assert [r.title for r in filter_records(catalog, "gOLD")] == ["Gold Rush"]

    def test_region_and_category(self, catalog: CatalogService) -> None:
        assert [r.title for r in filter_records(catalog, region="CA")] == ["Sequoia", "Gold Rush"]
        assert [r.title for r in filter_records(catalog, region="CA", category=PlateCategory.SPECIALTY)] == ["Gold Rush"]

    def test_rarity_combined_with_search(self, catalog: CatalogService) -> None:
        assert [r.title for r in filter_records(catalog, rarity=PlateRarity.COMMON)] == ["Lone Star"]
        assert filter_records(catalog, "sequoia", rarity=PlateRarity.COMMON) == []

    def test_no_filters_returns_everything(self, catalog: CatalogService) -> None:
        assert filter_records(catalog, "  ") == catalog.records

    def test_recent_regions_listed_first(self, catalog: CatalogService) -> None:
        options = region_options(catalog.available_regions, recent=["WA", "NV"])
        values = [value for _, value in options]

        assert values == [ALL, "WA", "CA", "TX"]
        assert options[1][0] == "WA - Washington"

    def test_selection_cleared_when_filtered_out(self, catalog: CatalogService) -> None:
        selected = catalog.find("CA", "Sequoia")
        assert selected is not None

        assert visible_selection(selected, filter_records(catalog, region="CA")) == selected
        assert visible_selection(selected, filter_records(catalog, region="TX")) is None
        assert visible_selection(None, catalog.records) is None


class TestGameDetailHelpers:
    def test_row_key_round_trip_with_punctuation(self) -> None:
        record = CollectedRecord("CA", "Support: Our, Troops - 2", "img.png", datetime(2024, 5, 1))
        assert parse_row_key(record_row_key(record)) == ("CA", "Support: Our, Troops - 2")

    def test_sorted_records_group_by_region_newest_first(self) -> None:
        game = CollectionGame(id="g", mode=GameMode.PLATE_COLLECTION, created_at=datetime(2024, 1, 1), last_active_at=datetime(2024, 1, 1))
        for region, title, day in [("TX", "A", 1), ("CA", "B", 1), ("CA", "C", 2)]:
            record = CollectedRecord(region, title, f"{title}.png", datetime(2024, 1, day))
            game.records[record.key] = record

        assert [r.title for r in sorted_records(game)] == ["C", "B", "A"]

    def test_game_row(self, tmp_path: Path, catalog: CatalogService) -> None:
        manager = GameManagerService(data_directory=tmp_path)
        game = manager.create_game(GameMode.STATE_COLLECTION, name="Road Trip")
        rainier = catalog.find("WA", "Mount Rainier")
        assert rainier is not None
        _ = manager.collect(game.id, rainier)

        row = game_row(game, manager)
        assert row[:5] == ("Road Trip", "State Collection", "1", "1", "1")

    def test_catalog_details(self, catalog: CatalogService) -> None:
        assert catalog_details(catalog, "CA", "Sequoia") == "Image: sequoia.png\nNotes: Park support"
        assert catalog_details(catalog, "TX", "Lone Star") == "Image: star.png"
        assert "no longer in the catalog" in catalog_details(catalog, "TX", "Gone")


class TestProgressWidgets:
    def test_grid_places_every_region_once(self) -> None:
        grid = build_region_grid({"CA": 2})
        cells = [cell for row in grid for cell in row if cell is not None]

        assert len(cells) == len(REGIONS)
        assert ("CA", 2) in cells
        assert ("TX", 0) in cells

    def test_render_highlights_collected_regions(self) -> None:
        text = render_region_grid({"CA": 1}, GameMode.STATE_COLLECTION)

        assert "CA" in text.plain
        assert any(str(span.style) == "bold black on green" for span in text.spans)

    def test_format_statistics(self) -> None:
        stats = GameStatistics(
            total_count=3,
            distinct_regions=2,
            score=8,
            region_progress={"CA": 2, "TX": 1},
            average_rarity=8 / 3,
            completion_percentage=2 / 51 * 100,
        )

        summary = format_statistics(stats, GameMode.STATE_COLLECTION)
        assert f"Regions: 2/{len(REGIONS)}" in summary
        assert "Score: 8" in summary
        assert "Regions: 2 " in format_statistics(stats, GameMode.PLATE_COLLECTION)


class TestSettingsForm:
    @pytest.fixture
    def config(self) -> AppConfig:
        return AppConfig(
            catalog_path=Path("plate_metadata.csv"),
            data_directory=Path("data"),
            image_directory=Path("SourcePlateImages"),
            log_level="INFO",
        )

    def test_build_config_applies_values(self, config: AppConfig) -> None:
        updated = build_config(config, " plates.csv ", "", "3", "DEBUG")

        assert updated.catalog_path == Path("plates.csv")
        assert updated.image_base_url is None
        assert updated.max_games == 3
        assert updated.log_level == "DEBUG"
        assert updated.data_directory == config.data_directory

    @pytest.mark.parametrize(("catalog", "max_games"), [("", "5"), ("plates.csv", "five")])
    def test_build_config_rejects_bad_input(self, config: AppConfig, catalog: str, max_games: str) -> None:
        with pytest.raises(ConfigurationError):
            _ = build_config(config, catalog, "", max_games, "INFO")
