"""Widgets for game progress: statistics summary and the region tile map."""

from typing import ClassVar, override

from rich.text import Text
from textual.app import ComposeResult
from textual.widget import Widget
from textual.widgets import ProgressBar, Static

from plate_spotter.models.game import GameMode, GameStatistics
from plate_spotter.models.regions import REGIONS

CELL_WIDTH = 4


def build_region_grid(progress: dict[str, int]) -> list[list[tuple[str, int] | None]]:
    """Lay regions out on the tile grid as (code, count) cells; None marks a gap."""
    rows = max(r.row for r in REGIONS) + 1
    columns = max(r.column for r in REGIONS) + 1
    grid: list[list[tuple[str, int] | None]] = [[None] * columns for _ in range(rows)]
    for region in REGIONS:
        grid[region.row][region.column] = (region.code, progress.get(region.code, 0))
    return grid


def render_region_grid(progress: dict[str, int], mode: GameMode) -> Text:
    """Render the tile map, highlighting regions with collected plates."""
    text = Text()
    for row in build_region_grid(progress):
        for cell in row:
            if cell is None:
                text.append(" " * CELL_WIDTH)
                continue
            code, count = cell
            if count == 0:
                style = "dim"
            elif mode is GameMode.PLATE_COLLECTION and count > 1:
                style = "bold black on bright_green"
            else:
                style = "bold black on green"
            text.append(f"{code:^{CELL_WIDTH - 1}}", style=style)
            text.append(" ")
        text.append("\n")
    return text


def format_statistics(stats: GameStatistics, mode: GameMode) -> str:
    target = mode.max_completion
    regions = f"{stats.distinct_regions}/{target}" if target else str(stats.distinct_regions)
    return (
        f"Plates: {stats.total_count}   Regions: {regions}   Score: {stats.score}   "
        f"Avg rarity: {stats.average_rarity:.1f}"
    )


class GameStatisticsWidget(Widget):
    """Summary line plus completion bar for a game."""

    DEFAULT_CSS: ClassVar[str] = """
    GameStatisticsWidget {
        height: auto;
        padding: 1;
        border: solid $primary-darken-2;
    }

    GameStatisticsWidget #stats-summary {
        margin-bottom: 1;
    }
    """

    @override
    def compose(self) -> ComposeResult:
        yield Static("", id="stats-summary")
        yield ProgressBar(id="stats-completion", total=100, show_eta=False)

    def update_statistics(self, stats: GameStatistics, mode: GameMode) -> None:
        self.query_one("#stats-summary", Static).update(format_statistics(stats, mode))
        self.query_one("#stats-completion", ProgressBar).update(progress=stats.completion_percentage)


class RegionGridWidget(Static):
    """Tile-grid map of regions coloured by collection progress."""

    DEFAULT_CSS: ClassVar[str] = """
    RegionGridWidget {
        height: auto;
        padding: 1;
        border: solid $secondary;
    }
    """

    def update_progress(self, progress: dict[str, int], mode: GameMode) -> None:
        self.update(render_region_grid(progress, mode))
