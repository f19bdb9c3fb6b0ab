"""Tests for plate image loading, caching and the HTTP client."""

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import httpx
import pytest
from hypothesis import given, strategies as st

from plate_spotter.models import PlateRecord
from plate_spotter.services import HttpClientService, ImageSource, PlateImage, PlateImageCache, PlateImageService
from plate_spotter.services.images import PRELOAD_LIMIT, generate_placeholder, truncate_title


def make_image(size: int) -> PlateImage:
    return PlateImage(b"x" * size, "image/png", ImageSource.FILE)


def make_record(region: str = "CA", image: str = "sequoia.png", title: str = "Sequoia") -> PlateRecord:
    return PlateRecord(region=region, title=title, image=image)


class TestPlateImageCache:
    def test_evicts_least_recently_used_by_count(self) -> None:
        cache = PlateImageCache(count_limit=2, cost_limit=1000)
        cache.put("a", make_image(10))
        cache.put("b", make_image(10))
        _ = cache.get("a")
        cache.put("c", make_image(10))

        assert "a" in cache
        assert "b" not in cache
        assert "c" in cache

    def test_evicts_by_total_cost(self) -> None:
        cache = PlateImageCache(count_limit=10, cost_limit=100)
        cache.put("a", make_image(60))
        cache.put("b", make_image(60))

        assert "a" not in cache
        assert cache.stats().total_cost == 60

    def test_oversized_item_not_cached(self) -> None:
        cache = PlateImageCache(count_limit=10, cost_limit=100)
        cache.put("huge", make_image(101))

        assert len(cache) == 0

    def test_replacing_key_updates_cost(self) -> None:
        cache = PlateImageCache(count_limit=10, cost_limit=100)
        cache.put("a", make_image(40))
        cache.put("a", make_image(10))

        stats = cache.stats()
        assert stats.count == 1
        assert stats.total_cost == 10

    @given(sizes=st.lists(st.integers(min_value=1, max_value=80), max_size=40))
    def test_limits_always_hold(self, sizes: list[int]) -> None:
        cache = PlateImageCache(count_limit=5, cost_limit=200)
        for i, size in enumerate(sizes):
            cache.put(str(i), make_image(size))

        stats = cache.stats()
        assert stats.count <= 5
        assert stats.total_cost <= 200
        assert stats.total_cost == sum(cache.get(str(i)).size for i in range(len(sizes)) if str(i) in cache)


class TestPlaceholder:
    def test_truncate_title(self) -> None:
        assert truncate_title("Short") == "Short"
        assert truncate_title("A" * 20) == "A" * 20
        assert truncate_title("Support Our Troops Forever") == "Support Our Troop..."

    def test_placeholder_contains_region_and_escaped_title(self) -> None:
        image = generate_placeholder(make_record(title="Fish & Wildlife"))
        svg = image.data.decode("utf-8")

        assert image.source is ImageSource.PLACEHOLDER
        assert image.media_type == "image/svg+xml"
        assert ">CA<" in svg
        assert "Fish &amp; Wildlife" in svg


class TestPlateImageService:
    @pytest.mark.asyncio
    async def test_loads_local_file_then_serves_from_cache(self, tmp_path: Path) -> None:
        (tmp_path / "CA").mkdir()
        (tmp_path / "CA" / "sequoia.png").write_bytes(b"png-bytes")
        service = PlateImageService(image_directory=tmp_path)

        first = await service.load_image(make_record())
        second = await service.load_image(make_record())

        assert first.source is ImageSource.FILE
        assert first.data == b"png-bytes"
        assert first.media_type == "image/png"
        assert second.source is ImageSource.CACHE
        assert second.data == b"png-bytes"

    @pytest.mark.asyncio
    async def test_falls_back_to_remote(self, tmp_path: Path) -> None:
        http_client = Mock(spec=HttpClientService)
        http_client.get_bytes = AsyncMock(return_value=b"remote-bytes")
        service = PlateImageService(
            image_directory=tmp_path,
            http_client=http_client,
            base_url="https://plates.example.com/images/",
        )

        image = await service.load_image(make_record(region="TX", image="star.jpg"))

        http_client.get_bytes.assert_awaited_once_with("https://plates.example.com/images/TX/star.jpg")
        assert image.source is ImageSource.REMOTE
        assert image.media_type == "image/jpeg"
        assert len(service.cache) == 1

    @pytest.mark.asyncio
    async def test_remote_failure_yields_uncached_placeholder(self, tmp_path: Path) -> None:
        http_client = Mock(spec=HttpClientService)
        http_client.get_bytes = AsyncMock(side_effect=httpx.ConnectError("offline"))
        service = PlateImageService(image_directory=tmp_path, http_client=http_client, base_url="https://x.test")

        image = await service.load_image(make_record())

        assert image.source is ImageSource.PLACEHOLDER
        assert len(service.cache) == 0

    @pytest.mark.asyncio
    async def test_preload_is_limited(self, tmp_path: Path) -> None:
        (tmp_path / "CA").mkdir()
        records = []
        for i in range(PRELOAD_LIMIT + 5):
            (tmp_path / "CA" / f"{i}.png").write_bytes(b"img")
            records.append(make_record(image=f"{i}.png", title=f"Plate {i}"))
        service = PlateImageService(image_directory=tmp_path)

        loaded = await service.preload_images(records, max_concurrent=3)

        assert loaded == PRELOAD_LIMIT
        assert len(service.cache) == PRELOAD_LIMIT

    @pytest.mark.asyncio
    async def test_memory_pressure_clears_cache(self, tmp_path: Path) -> None:
        (tmp_path / "CA").mkdir()
        (tmp_path / "CA" / "sequoia.png").write_bytes(b"png-bytes")
        service = PlateImageService(image_directory=tmp_path)
        _ = await service.load_image(make_record())

        service.handle_memory_pressure()

        assert len(service.cache) == 0
        assert service.cache.stats().total_cost == 0


class TestHttpClientService:
    @pytest.mark.asyncio
    async def test_retries_server_errors(self) -> None:
        calls: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(str(request.url))
            if len(calls) < 2:
                return httpx.Response(503)
            return httpx.Response(200, content=b"ok")

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        async with HttpClientService(max_retries=2, base_delay=0.0, client=client) as service:
            data = await service.get_bytes("https://plates.example.com/a.png")

        assert data == b"ok"
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_client_error_not_retried(self) -> None:
        calls: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(str(request.url))
            return httpx.Response(404)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        async with HttpClientService(max_retries=3, base_delay=0.0, client=client) as service:
            with pytest.raises(httpx.HTTPStatusError):
                _ = await service.get_bytes("https://plates.example.com/missing.png")

        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_rate_limit_honours_retry_after(self) -> None:
        responses = [httpx.Response(429, headers={"retry-after": "0"}), httpx.Response(200, content=b"ok")]

        def handler(request: httpx.Request) -> httpx.Response:
            return responses.pop(0)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        async with HttpClientService(max_retries=1, base_delay=0.0, client=client) as service:
            assert await service.get_bytes("https://plates.example.com/a.png") == b"ok"

    def test_gives_up_after_retries(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("offline", request=request)

        async def run() -> None:
            client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
            async with HttpClientService(max_retries=1, base_delay=0.0, client=client) as service:
                _ = await service.get_bytes("https://plates.example.com/a.png")

        with pytest.raises(httpx.ConnectError):
            asyncio.run(run())
