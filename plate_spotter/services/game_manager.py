"""Game manager service: collection tracking and snapshot persistence."""

import threading
import uuid
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Any

import structlog

from ..models.game import (
    TYPICAL_PLATE_GOAL,
    CollectedRecord,
    CollectionGame,
    CollectResult,
    CollectStatus,
    GameMode,
    GameStatistics,
    RemoveStatus,
)
from ..models.plate import PlateCategory, PlateRarity, PlateRecord, rarity_weight
from ..models.preferences import MAX_RECENT_REGIONS, UserPreferences
from .errors import CapacityError, GameNotFoundError
from .filesystem import FileSystemService

log = structlog.stdlib.get_logger()

GAMES_FILE = "games.json"
PREFERENCES_FILE = "preferences.json"
SNAPSHOT_VERSION = 1


class GameManagerService:
    """Holds up to `max_games` games and persists them after every mutation.

    Games and preferences are loaded wholesale at construction and written
    wholesale after each change. A failed write is logged and the in-memory
    state stays authoritative for the rest of the session.
    """

    def __init__(
        self,
        data_directory: Path,
        filesystem: FileSystemService | None = None,
        max_games: int = 5,
    ) -> None:
        """Initialize the service and load any saved state.

        Args:
            data_directory: Directory holding games.json and preferences.json
            filesystem: File system service used for snapshots
            max_games: Maximum number of simultaneous games
        """
        self.filesystem = filesystem or FileSystemService()
        self.data_directory = self.filesystem.resolve(data_directory)
        self.max_games = max_games
        self._games: list[CollectionGame] = []
        self._preferences = UserPreferences()
        self._lock = threading.RLock()

        self._load_games()
        self._load_preferences()
        log.info(
            "Game manager initialized",
            data_directory=str(data_directory),
            games=len(self._games),
            max_games=max_games,
        )

    @property
    def games_path(self) -> Path:
        return self.data_directory / GAMES_FILE

    @property
    def preferences_path(self) -> Path:
        return self.data_directory / PREFERENCES_FILE

    @property
    def games(self) -> list[CollectionGame]:
        """Games ordered by last activity, most recent first."""
        with self._lock:
            return list(self._games)

    @property
    def preferences(self) -> UserPreferences:
        """A copy of the current preferences."""
        with self._lock:
            return replace(self._preferences, recent_regions=list(self._preferences.recent_regions))

    @property
    def can_create_game(self) -> bool:
        return len(self._games) < self.max_games

    # Game management

    def create_game(self, mode: GameMode, name: str | None = None) -> CollectionGame:
        """Create and persist a new game.

        Raises:
            CapacityError: If `max_games` games already exist
        """
        with self._lock:
            if not self.can_create_game:
                log.warning("Game limit reached", max_games=self.max_games)
                raise CapacityError(self.max_games)

            now = datetime.now()
            game = CollectionGame(
                id=str(uuid.uuid4()),
                mode=mode,
                name=name.strip() if name and name.strip() else None,
                created_at=now,
                last_active_at=now,
            )
            self._games.append(game)
            self._sort_games()
            self._save_games()

        log.info("Game created", game_id=game.id, mode=mode.value, name=game.name)
        return game

    def delete_game(self, game_id: str) -> bool:
        """Delete a game; returns False when the id is unknown."""
        with self._lock:
            game = self.get_game(game_id)
            if game is None:
                return False
            self._games.remove(game)
            self._save_games()

        log.info("Game deleted", game_id=game_id)
        return True

    def get_game(self, game_id: str) -> CollectionGame | None:
        with self._lock:
            return next((g for g in self._games if g.id == game_id), None)

    def _require_game(self, game_id: str) -> CollectionGame:
        game = self.get_game(game_id)
        if game is None:
            raise GameNotFoundError(game_id)
        return game

    # Plate collection

    def collect(self, game_id: str, record: PlateRecord) -> CollectResult:
        """Log a catalog plate into a game.

        In state collection mode a plate from a region that already has one
        replaces the earlier plate, including a repeat of the same plate. In
        plate collection mode an exact (region, title) duplicate is reported
        as already present and nothing changes.

        Raises:
            GameNotFoundError: If the game does not exist
        """
        with self._lock:
            game = self._require_game(game_id)

            if game.mode is GameMode.PLATE_COLLECTION and game.has_collected(record.region, record.title):
                log.info("Plate already collected", game_id=game_id, region=record.region, title=record.title)
                return CollectResult(status=CollectStatus.ALREADY_PRESENT)

            replaced = None
            if game.mode is GameMode.STATE_COLLECTION:
                replaced = next((r for r in game.records.values() if r.region == record.region), None)
                if replaced is not None:
                    del game.records[replaced.key]

            now = datetime.now()
            collected = CollectedRecord(
                region=record.region,
                title=record.title,
                image=record.image,
                collected_at=now,
                category=record.category,
                rarity=record.rarity,
            )
            game.records[collected.key] = collected
            game.last_active_at = now

            self._preferences.add_recent_region(record.region)
            self._sort_games()
            self._save_preferences()
            self._save_games()

        log.info(
            "Plate collected",
            game_id=game_id,
            region=record.region,
            title=record.title,
            replaced=replaced.title if replaced else None,
        )
        return CollectResult(status=CollectStatus.COLLECTED, record=collected, replaced=replaced)

    def remove(self, game_id: str, region: str, title: str) -> RemoveStatus:
        """Remove a collected plate from a game.

        Raises:
            GameNotFoundError: If the game does not exist
        """
        with self._lock:
            game = self._require_game(game_id)
            if game.records.pop((region, title), None) is None:
                return RemoveStatus.NOT_FOUND

            game.last_active_at = datetime.now()
            self._sort_games()
            self._save_games()

        log.info("Plate removed", game_id=game_id, region=region, title=title)
        return RemoveStatus.REMOVED

    def is_collected(self, game_id: str, region: str, title: str) -> bool:
        game = self.get_game(game_id)
        return game is not None and game.has_collected(region, title)

    # Statistics

    def stats(self, game_id: str) -> GameStatistics:
        """Compute progress statistics for a game.

        Raises:
            GameNotFoundError: If the game does not exist
        """
        with self._lock:
            game = self._require_game(game_id)
            total = game.plate_count
            total_weight = sum(rarity_weight(r.rarity) for r in game.records.values())
            return GameStatistics(
                total_count=total,
                distinct_regions=game.region_count,
                score=game.score,
                region_progress=game.region_progress,
                average_rarity=total_weight / total if total else 0.0,
                completion_percentage=completion_percentage(game),
            )

    # Preferences

    def set_default_mode(self, mode: GameMode) -> None:
        with self._lock:
            self._preferences.default_mode = mode
            self._save_preferences()
        log.info("Default game mode changed", mode=mode.value)

    def display_name(self, game: CollectionGame) -> str:
        """Custom name, or mode name plus creation date."""
        if game.name:
            return game.name
        return f"{game.mode.display_name} - {game.created_at.strftime('%b %d, %Y')}"

    # Persistence

    def _sort_games(self) -> None:
        self._games.sort(key=lambda g: g.last_active_at, reverse=True)

    def _save_games(self) -> None:
        data = {
            "version": SNAPSHOT_VERSION,
            "games": [game_to_dict(game) for game in self._games],
        }
        try:
            self.filesystem.save_json(data, self.games_path)
            log.debug("Games saved", count=len(self._games))
        except (OSError, ValueError) as e:
            log.error("Failed to save games", path=str(self.games_path), error=str(e))

    def _load_games(self) -> None:
        if not self.games_path.exists():
            log.info("No saved games found", path=str(self.games_path))
            return
        try:
            data = self.filesystem.load_json(self.games_path)
            self._games = [game_from_dict(item) for item in data.get("games", [])]
        except (OSError, ValueError, KeyError, TypeError) as e:
            log.error("Failed to load games, starting empty", path=str(self.games_path), error=str(e))
            self._games = []
            return
        self._sort_games()
        log.info("Saved games loaded", count=len(self._games))

    def _save_preferences(self) -> None:
        try:
            self.filesystem.save_json(preferences_to_dict(self._preferences), self.preferences_path)
        except (OSError, ValueError) as e:
            log.error("Failed to save preferences", path=str(self.preferences_path), error=str(e))

    def _load_preferences(self) -> None:
        if not self.preferences_path.exists():
            return
        try:
            data = self.filesystem.load_json(self.preferences_path)
            self._preferences = preferences_from_dict(data)
        except (OSError, ValueError, KeyError, TypeError) as e:
            log.error("Failed to load preferences, using defaults", error=str(e))
            self._preferences = UserPreferences()


def completion_percentage(game: CollectionGame) -> float:
    """Progress toward the mode's target, from 0 to 100."""
    target = game.mode.max_completion
    if target is not None:
        return game.region_count / target * 100.0
    return min(game.plate_count / TYPICAL_PLATE_GOAL * 100.0, 100.0)


def record_to_dict(record: CollectedRecord) -> dict[str, Any]:
    return {
        "region": record.region,
        "title": record.title,
        "image": record.image,
        "collected_at": record.collected_at.isoformat(),
        "category": record.category.value if record.category else None,
        "rarity": record.rarity.value if record.rarity else None,
    }


def record_from_dict(data: dict[str, Any]) -> CollectedRecord:
    return CollectedRecord(
        region=str(data["region"]),
        title=str(data["title"]),
        image=str(data.get("image", "")),
        collected_at=datetime.fromisoformat(data["collected_at"]),
        category=PlateCategory.from_string(data.get("category")),
        rarity=PlateRarity.from_string(data.get("rarity")),
    )


def game_to_dict(game: CollectionGame) -> dict[str, Any]:
    return {
        "id": game.id,
        "name": game.name,
        "mode": game.mode.value,
        "created_at": game.created_at.isoformat(),
        "last_active_at": game.last_active_at.isoformat(),
        "records": [record_to_dict(r) for r in game.records.values()],
    }


def game_from_dict(data: dict[str, Any]) -> CollectionGame:
    records = [record_from_dict(item) for item in data.get("records", [])]
    return CollectionGame(
        id=str(data["id"]),
        name=data.get("name"),
        mode=GameMode(data["mode"]),
        created_at=datetime.fromisoformat(data["created_at"]),
        last_active_at=datetime.fromisoformat(data["last_active_at"]),
        records={r.key: r for r in records},
    )


def preferences_to_dict(preferences: UserPreferences) -> dict[str, Any]:
    return {
        "last_selected_region": preferences.last_selected_region,
        "recent_regions": list(preferences.recent_regions),
        "default_mode": preferences.default_mode.value,
    }


def preferences_from_dict(data: dict[str, Any]) -> UserPreferences:
    recent = data.get("recent_regions", [])
    return UserPreferences(
        last_selected_region=data.get("last_selected_region"),
        recent_regions=[str(r) for r in recent][:MAX_RECENT_REGIONS] if isinstance(recent, list) else [],
        default_mode=GameMode(data.get("default_mode", GameMode.STATE_COLLECTION.value)),
    )
