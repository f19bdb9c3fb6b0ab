"""File system service for persisting snapshots as JSON."""

import json
from pathlib import Path
from typing import Any

import structlog

log = structlog.stdlib.get_logger()


class FileSystemService:
    """JSON persistence helpers with atomic writes."""

    def __init__(self, base_path: Path | None = None) -> None:
        """Initialize the file system service.

        Args:
            base_path: Directory that relative paths are resolved against
        """
        self.base_path = base_path or Path.cwd()
        log.debug("File system service initialized", base_path=str(self.base_path))

    def resolve(self, path: Path) -> Path:
        return path if path.is_absolute() else self.base_path / path

    def save_json(self, data: dict[str, Any], path: Path) -> None:
        """Write `data` to `path`, replacing any previous file atomically.

        Raises:
            OSError: If the file cannot be written
            ValueError: If data cannot be serialized to JSON
        """
        path = self.resolve(path)
        self.ensure_directory(path.parent)
        temp_path = path.with_suffix(path.suffix + ".tmp")

        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            temp_path.replace(path)
        except OSError as e:
            log.error("Failed to save JSON data", path=str(path), error=str(e))
            self._discard(temp_path)
            raise
        except (TypeError, ValueError) as e:
            log.error("Failed to serialize data to JSON", path=str(path), error=str(e))
            self._discard(temp_path)
            raise ValueError(f"Cannot serialize data to JSON: {e}") from e

        log.debug("JSON data saved", path=str(path))

    def load_json(self, path: Path) -> dict[str, Any]:
        """Load a JSON object from `path`.

        Raises:
            FileNotFoundError: If the file does not exist
            OSError: If the file cannot be read
            ValueError: If the file is not a JSON object
        """
        path = self.resolve(path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            log.error("Invalid JSON in file", path=str(path), error=str(e))
            raise ValueError(f"Invalid JSON in file {path}: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Expected JSON object, got {type(data).__name__}")

        log.debug("JSON data loaded", path=str(path), keys=list(data.keys()))
        return data

    def ensure_directory(self, path: Path) -> None:
        """Create `path` (and parents) if needed.

        Raises:
            OSError: If the path exists as a file or cannot be created
        """
        if path.exists():
            if not path.is_dir():
                raise OSError(f"Path exists but is not a directory: {path}")
            return
        path.mkdir(parents=True, exist_ok=True)
        log.info("Directory created", path=str(path))

    @staticmethod
    def _discard(temp_path: Path) -> None:
        try:
            temp_path.unlink(missing_ok=True)
        except OSError:
            log.warning("Failed to remove temporary file", path=str(temp_path))
