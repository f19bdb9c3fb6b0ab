"""Catalog service for loading and filtering plate records from CSV."""

import csv
import io
from collections.abc import Iterator
from pathlib import Path

import structlog

from ..models.plate import PlateCategory, PlateRarity, PlateRecord
from .errors import CatalogParseError

log = structlog.stdlib.get_logger()

REQUIRED_COLUMNS: tuple[str, str, str] = ("state", "plate_title", "plate_img")
ENHANCED_MARKER_COLUMNS: tuple[str, ...] = ("color_bg", "category", "rarity")

# Searched in order by load_from_directory
CATALOG_FILE_NAMES: tuple[str, ...] = ("plate_metadata_enhanced.csv", "plate_metadata.csv")


class CatalogService:
    """Loads the plate catalog and serves filtered views of it.

    The enhanced schema is tried first when the header carries the
    classification columns; otherwise, or when the enhanced pass yields no
    rows, only the minimal (state, plate_title, plate_img) columns are read.
    Bad rows are skipped and logged.
    """

    def __init__(self) -> None:
        self._records: list[PlateRecord] = []
        self.enhanced: bool = False

    @property
    def records(self) -> list[PlateRecord]:
        return list(self._records)

    @property
    def available_regions(self) -> list[str]:
        return sorted({record.region for record in self._records})

    def load(self, source: Path | str) -> list[PlateRecord]:
        """Load records from a CSV file path or from CSV text.

        Raises:
            CatalogParseError: If the source cannot be read or has no usable rows
        """
        label = str(source) if isinstance(source, Path) else "<text>"
        text = self._read_source(source) if isinstance(source, Path) else source

        rows = list(csv.reader(io.StringIO(text)))
        if len(rows) < 2:
            raise CatalogParseError("The plate catalog is empty.", source=label)

        headers = [h.strip().lower() for h in rows[0]]
        body = rows[1:]

        records: list[PlateRecord] = []
        self.enhanced = False
        if all(column in headers for column in ENHANCED_MARKER_COLUMNS):
            records = list(self._parse_enhanced(headers, body))
            if records:
                self.enhanced = True
                log.info("Using enhanced plate metadata", source=label)
            else:
                log.warning("Enhanced catalog produced no rows, falling back to minimal schema", source=label)

        if not records:
            records = list(self._parse_minimal(headers, body))

        if not records:
            raise CatalogParseError("The plate catalog has no usable rows.", source=label)

        self._records = records
        log.info("Plate catalog loaded", source=label, records=len(records), enhanced=self.enhanced)
        return self.records

    def load_from_directory(self, directory: Path) -> list[PlateRecord]:
        """Load the first catalog file in `directory` that has the required columns.

        Raises:
            CatalogParseError: If no suitable catalog file exists
        """
        for file_name in CATALOG_FILE_NAMES:
            path = directory / file_name
            if path.is_file() and self._has_required_columns(path):
                log.info("Found catalog file", path=str(path))
                return self.load(path)

        raise CatalogParseError("Could not find a plate catalog file.", source=str(directory))

    def by_region(self, region: str) -> list[PlateRecord]:
        return [r for r in self._records if r.region == region]

    def by_category(self, category: PlateCategory) -> list[PlateRecord]:
        return [r for r in self._records if r.category is category]

    def by_rarity(self, rarity: PlateRarity) -> list[PlateRecord]:
        return [r for r in self._records if r.rarity is rarity]

    def search(self, query: str) -> list[PlateRecord]:
        """Case-insensitive title search; an empty query matches everything."""
        needle = query.strip().lower()
        if not needle:
            return self.records
        return [r for r in self._records if needle in r.title.lower()]

    def find(self, region: str, title: str) -> PlateRecord | None:
        return next((r for r in self._records if r.key == (region, title)), None)

    @staticmethod
    def _read_source(path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            log.error("Failed to read catalog", path=str(path), error=str(e))
            raise CatalogParseError(f"Could not read the plate catalog: {e}", source=str(path)) from e

    @staticmethod
    def _has_required_columns(path: Path) -> bool:
        try:
            with open(path, "r", encoding="utf-8-sig", newline="") as f:
                header = next(csv.reader(f), [])
        except (OSError, UnicodeDecodeError):
            return False
        names = {h.strip().lower() for h in header}
        return all(column in names for column in REQUIRED_COLUMNS)

    def _parse_enhanced(self, headers: list[str], body: list[list[str]]) -> Iterator[PlateRecord]:
        index = {name: i for i, name in enumerate(headers)}

        for line_number, values in enumerate(body, start=2):
            if not any(v.strip() for v in values):
                continue

            def value(column: str) -> str | None:
                i = index.get(column)
                if i is None or i >= len(values):
                    return None
                text = values[i].strip()
                return text or None

            region, title, image = (value(c) for c in REQUIRED_COLUMNS)
            if not (region and title and image):
                log.warning("Skipping catalog row with missing required fields", line=line_number)
                continue

            raw_score = value("confidence_score")
            try:
                confidence = float(raw_score) if raw_score is not None else None
            except ValueError:
                log.warning(
                    "Unreadable enhanced fields, keeping minimal record",
                    line=line_number,
                    confidence_score=raw_score,
                )
                yield PlateRecord(region=region, title=title, image=image)
                continue

            yield PlateRecord(
                region=region,
                title=title,
                image=image,
                color_background=value("color_bg"),
                text_color=value("text_color"),
                visual_elements=value("visual_elements"),
                category=PlateCategory.from_string(value("category")),
                rarity=PlateRarity.from_string(value("rarity")),
                layout_style=value("layout_style"),
                confidence_score=confidence,
                notes=value("notes"),
                source=value("source"),
            )

    def _parse_minimal(self, headers: list[str], body: list[list[str]]) -> Iterator[PlateRecord]:
        # Named columns when the header has them, else the first three positions
        if all(column in headers for column in REQUIRED_COLUMNS):
            positions = [headers.index(column) for column in REQUIRED_COLUMNS]
        else:
            positions = [0, 1, 2]

        for line_number, values in enumerate(body, start=2):
            if not any(v.strip() for v in values):
                continue
            if max(positions) >= len(values):
                log.warning("Skipping short catalog row", line=line_number, fields=len(values))
                continue

            region, title, image = (values[i].strip() for i in positions)
            if not (region and title and image):
                log.warning("Skipping catalog row with missing required fields", line=line_number)
                continue

            yield PlateRecord(region=region, title=title, image=image)
