"""Plate image loading with a bounded in-memory cache."""

import asyncio
import html
from collections import OrderedDict
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import httpx
import structlog

from ..models.plate import PlateRecord
from .http_client import HttpClientService

log = structlog.stdlib.get_logger()

PLACEHOLDER_WIDTH = 300
PLACEHOLDER_HEIGHT = 150
PRELOAD_LIMIT = 20

_MEDIA_TYPES: dict[str, str] = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
}


class ImageSource(Enum):
    """Where an image was resolved from."""
    CACHE = "cache"
    FILE = "file"
    REMOTE = "remote"
    PLACEHOLDER = "placeholder"


@dataclass(frozen=True)
class PlateImage:
    """Image bytes for a plate."""
    data: bytes
    media_type: str
    source: ImageSource

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class CacheStats:
    count: int
    total_cost: int
    count_limit: int
    cost_limit: int


class PlateImageCache:
    """Least-recently-used cache bounded by entry count and total byte cost."""

    def __init__(self, count_limit: int = 200, cost_limit: int = 50 * 1024 * 1024) -> None:
        self.count_limit = count_limit
        self.cost_limit = cost_limit
        self._entries: OrderedDict[str, PlateImage] = OrderedDict()
        self._total_cost = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, key: str) -> PlateImage | None:
        image = self._entries.get(key)
        if image is not None:
            self._entries.move_to_end(key)
        return image

    def put(self, key: str, image: PlateImage) -> None:
        """Insert an image, evicting least recently used entries to stay in bounds."""
        if image.size > self.cost_limit:
            log.debug("Image too large to cache", key=key, size=image.size)
            return

        previous = self._entries.pop(key, None)
        if previous is not None:
            self._total_cost -= previous.size

        self._entries[key] = image
        self._total_cost += image.size

        while len(self._entries) > self.count_limit or self._total_cost > self.cost_limit:
            evicted_key, evicted = self._entries.popitem(last=False)
            self._total_cost -= evicted.size
            log.debug("Evicted cached image", key=evicted_key)

    def clear(self) -> None:
        self._entries.clear()
        self._total_cost = 0

    def stats(self) -> CacheStats:
        return CacheStats(
            count=len(self._entries),
            total_cost=self._total_cost,
            count_limit=self.count_limit,
            cost_limit=self.cost_limit,
        )


class PlateImageService:
    """Resolves plate images from disk, a remote server, or a placeholder."""

    def __init__(
        self,
        image_directory: Path,
        http_client: HttpClientService | None = None,
        base_url: str | None = None,
        cache: PlateImageCache | None = None,
    ) -> None:
        """Initialize the image service.

        Args:
            image_directory: Root holding `<region>/<image>` files
            http_client: Client used when `base_url` is set
            base_url: Remote root mirroring the image directory layout
            cache: Cache instance; a default-sized one is created if omitted
        """
        self.image_directory = image_directory
        self.http_client = http_client
        self.base_url = base_url.rstrip("/") if base_url else None
        self.cache = cache or PlateImageCache()
        log.info(
            "Plate image service initialized",
            image_directory=str(image_directory),
            base_url=self.base_url,
        )

    @staticmethod
    def cache_key(record: PlateRecord) -> str:
        return f"{record.region}-{record.image}"

    async def load_image(self, record: PlateRecord) -> PlateImage:
        """Return the image for a record, never failing.

        Found images are cached; placeholders are generated on every miss so a
        later successful lookup is not shadowed.
        """
        key = self.cache_key(record)
        cached = self.cache.get(key)
        if cached is not None:
            return PlateImage(cached.data, cached.media_type, ImageSource.CACHE)

        image = await self._load_from_file(record)
        if image is None:
            image = await self._load_from_remote(record)

        if image is None:
            log.debug("No image found, using placeholder", region=record.region, image=record.image)
            return generate_placeholder(record)

        self.cache.put(key, image)
        return image

    async def preload_images(self, records: list[PlateRecord], max_concurrent: int = 5) -> int:
        """Warm the cache for the first few records; returns how many were loaded."""
        semaphore = asyncio.Semaphore(max_concurrent)

        async def load(record: PlateRecord) -> PlateImage:
            async with semaphore:
                return await self.load_image(record)

        images = await asyncio.gather(*(load(r) for r in records[:PRELOAD_LIMIT]))
        loaded = sum(1 for image in images if image.source is not ImageSource.PLACEHOLDER)
        log.info("Preloaded plate images", requested=min(len(records), PRELOAD_LIMIT), loaded=loaded)
        return loaded

    def handle_memory_pressure(self) -> None:
        """Drop every cached image."""
        stats = self.cache.stats()
        self.cache.clear()
        log.warning("Cleared plate image cache due to memory pressure", released=stats.total_cost, count=stats.count)

    async def _load_from_file(self, record: PlateRecord) -> PlateImage | None:
        path = record.image_path(self.image_directory)
        if not path.is_file():
            return None
        try:
            data = await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            log.warning("Failed to read plate image", path=str(path), error=str(e))
            return None
        return PlateImage(data, media_type_for(record.image), ImageSource.FILE)

    async def _load_from_remote(self, record: PlateRecord) -> PlateImage | None:
        if not self.base_url or self.http_client is None:
            return None
        url = f"{self.base_url}/{record.region}/{record.image}"
        try:
            data = await self.http_client.get_bytes(url)
        except httpx.HTTPError as e:
            log.warning("Failed to fetch plate image", url=url, error=str(e))
            return None
        return PlateImage(data, media_type_for(record.image), ImageSource.REMOTE)


def media_type_for(file_name: str) -> str:
    return _MEDIA_TYPES.get(Path(file_name).suffix.lower(), "application/octet-stream")


def truncate_title(title: str, limit: int = 20) -> str:
    if len(title) <= limit:
        return title
    return title[: limit - 3] + "..."


def generate_placeholder(record: PlateRecord) -> PlateImage:
    """Render a plain SVG plate showing the region and title."""
    region = html.escape(record.region)
    title = html.escape(truncate_title(record.title))
    svg = (
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{PLACEHOLDER_WIDTH}" height="{PLACEHOLDER_HEIGHT}">'
        f'<rect x="1" y="1" width="{PLACEHOLDER_WIDTH - 2}" height="{PLACEHOLDER_HEIGHT - 2}" '
        'fill="#e5e5ea" stroke="#c7c7cc" stroke-width="2"/>'
        f'<text x="50%" y="25%" text-anchor="middle" dominant-baseline="middle" '
        f'font-size="24" font-weight="bold">{region}</text>'
        f'<text x="50%" y="75%" text-anchor="middle" dominant-baseline="middle" '
        f'font-size="12" fill="#6c6c70">{title}</text>'
        "</svg>"
    )
    return PlateImage(svg.encode("utf-8"), "image/svg+xml", ImageSource.PLACEHOLDER)
