"""Concurrent URL fetching with retry and exponential backoff.

Fetching is an outer layer around the conversion core: a document that
fails to fetch is never handed to ``convert``.
"""

import asyncio
import logging
import random
from collections.abc import Callable

import httpx

from md4llm.config import MAX_REDIRECTS, FetchConfig, load_fetch_config
from md4llm.exceptions import FetchError, generate_correlation_id
from md4llm.models import FetchResult
from md4llm.utils import log_with_correlation

LOGGER = logging.getLogger(__name__)

USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
]

BASE_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Upgrade-Insecure-Requests": "1",
}

# Called as on_progress(url, index, total, result) after each URL finishes
ProgressCallback = Callable[[str, int, int, FetchResult], None]


def is_permanent_failure(status_code: int) -> bool:
    """Client errors are not retried, except 429 Too Many Requests."""
    return 400 <= status_code < 500 and status_code != 429


class FetchService:
    """
    Fetch HTML pages over HTTP.

    Example usage:
        >>> async with FetchService() as fetcher:
        ...     result = await fetcher.fetch("https://example.com")
        ...     results = await fetcher.fetch_all(urls)
    """

    def __init__(
        self,
        config: FetchConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialise fetch service.

        Args:
            config: Fetch settings. Loaded from the environment when None.
            transport: Optional httpx transport (used by tests).
        """
        self._config = config or load_fetch_config()
        self._transport = transport
        self._http_client: httpx.AsyncClient | None = None

    @property
    def config(self) -> FetchConfig:
        """Active fetch settings."""
        return self._config

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=self._config.timeout,
                follow_redirects=True,
                max_redirects=MAX_REDIRECTS,
                headers=BASE_HEADERS,
                transport=self._transport,
            )
        return self._http_client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> "FetchService":
        """Enter async context manager."""
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: BaseException | None, exc_tb: object) -> bool:
        """Exit async context manager, ensuring cleanup."""
        await self.close()
        return False

    async def fetch(self, url: str) -> FetchResult:
        """
        Fetch one URL, retrying transient failures.

        Args:
            url: Absolute http(s) URL.

        Returns:
            FetchResult with the page HTML, final URL after redirects and status.

        Raises:
            FetchError: On a malformed URL, a non-retryable client error, or after
                the last retry.
        """
        correlation_id = generate_correlation_id()
        client = await self._get_client()
        attempts = self._config.retries + 1
        last_error: Exception | None = None

        for attempt in range(attempts):
            try:
                response = await client.get(url, headers={"User-Agent": random.choice(USER_AGENTS)})
            except httpx.InvalidURL as e:
                raise FetchError(f"Invalid URL: {e}", url=url, correlation_id=correlation_id) from e
            except httpx.HTTPError as e:
                last_error = e
            else:
                status = response.status_code
                # Below 400 is a page, including a 3xx that was not followed
                if not response.is_error:
                    return FetchResult(
                        url=url,
                        html=response.text,
                        final_url=str(response.url),
                        status=status,
                    )
                if is_permanent_failure(status):
                    raise FetchError(
                        f"HTTP {status}: {response.reason_phrase}",
                        url=url,
                        status_code=status,
                        correlation_id=correlation_id,
                    )
                last_error = httpx.HTTPStatusError(
                    f"HTTP {status}: {response.reason_phrase}",
                    request=response.request,
                    response=response,
                )

            if attempt < attempts - 1:
                delay = self._config.backoff * (2**attempt)
                log_with_correlation(
                    LOGGER,
                    logging.DEBUG,
                    f"Fetch of {url} failed ({last_error}), retrying in {delay:.1f}s",
                    correlation_id=correlation_id,
                    attempt=attempt + 1,
                )
                await asyncio.sleep(delay)

        raise FetchError(
            f"Failed to fetch URL after {attempts} attempts: {last_error}",
            url=url,
            correlation_id=correlation_id,
        ) from last_error

    async def fetch_all(
        self,
        urls: list[str],
        on_progress: ProgressCallback | None = None,
        concurrency: int | None = None,
    ) -> list[FetchResult]:
        """
        Fetch many URLs with bounded concurrency.

        A failure for one URL is recorded in its FetchResult.error and never
        aborts the batch.

        Args:
            urls: URLs to fetch.
            on_progress: Optional callback invoked as each URL completes.
            concurrency: Maximum in-flight requests (defaults to config).

        Returns:
            One FetchResult per URL, in input order.
        """
        limit = concurrency or self._config.concurrency
        semaphore = asyncio.Semaphore(limit)
        total = len(urls)
        LOGGER.info(f"Fetching {total} URLs (concurrency: {limit})")

        async def fetch_with_limit(index: int, url: str) -> FetchResult:
            async with semaphore:
                try:
                    result = await self.fetch(url)
                except FetchError as e:
                    result = FetchResult(url=url, error=e.message, status=e.status_code)
            if on_progress:
                on_progress(url, index, total, result)
            return result

        return await asyncio.gather(*[fetch_with_limit(i, u) for i, u in enumerate(urls)])
