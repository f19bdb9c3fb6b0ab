"""HTTP client service for fetching remote plate images."""

import asyncio
from typing import Any

import httpx
import structlog

log = structlog.stdlib.get_logger()


class HttpClientService:
    """Async HTTP client with retry and exponential backoff."""

    def __init__(
        self,
        timeout: float = 15.0,
        max_retries: int = 2,
        base_delay: float = 0.5,
        max_delay: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the HTTP client service.

        Args:
            timeout: Request timeout in seconds
            max_retries: Retries after the first attempt
            base_delay: Base delay for exponential backoff in seconds
            max_delay: Maximum delay between retries in seconds
            client: Preconfigured client, mainly for tests
        """
        self.timeout = timeout
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            headers={"User-Agent": "Plate-Spotter/0.1"},
            follow_redirects=True,
        )

    async def get_bytes(self, url: str) -> bytes:
        """Fetch `url` and return the response body.

        Client errors other than 429 are raised immediately; everything else
        is retried with exponential backoff.

        Raises:
            httpx.HTTPError: If all attempts fail
        """
        for attempt in range(self.max_retries + 1):
            try:
                response = await self._client.get(url)
                response.raise_for_status()
                log.debug("Fetched remote content", url=url, size=len(response.content))
                return response.content

            except httpx.HTTPError as e:
                log.warning(
                    "HTTP GET request failed",
                    url=url,
                    attempt=attempt + 1,
                    error=str(e),
                    error_type=type(e).__name__,
                )

                if isinstance(e, httpx.HTTPStatusError):
                    status = e.response.status_code
                    if status == 429:
                        retry_after = _parse_retry_after(e.response.headers.get("retry-after"))
                        if retry_after is not None and attempt < self.max_retries:
                            await asyncio.sleep(retry_after)
                            continue
                    elif 400 <= status < 500:
                        raise

                if attempt == self.max_retries:
                    log.error("HTTP GET request failed after all retries", url=url, attempts=attempt + 1)
                    raise

                await asyncio.sleep(min(self.base_delay * (2 ** attempt), self.max_delay))

        raise RuntimeError("Unexpected end of retry loop")

    async def close(self) -> None:
        await self._client.aclose()
        log.debug("HTTP client closed")

    async def __aenter__(self) -> "HttpClientService":
        return self

    async def __aexit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: Any) -> None:
        await self.close()


def _parse_retry_after(value: str | None) -> float | None:
    if value is None:
        return None
    try:
        return max(float(value), 0.0)
    except ValueError:
        return None
