"""Default Downloader built on aiohttp."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import TypeVar

import aiohttp

from ..core.errors import DownloadError
from ..core.settings import HttpSettings, Settings
from .base import Downloader
from .script import make_evaluator

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _RetryableStatus(Exception):
    """Internal marker for a 5xx/429 response worth another attempt."""

    def __init__(self, status: int, delay: float | None = None) -> None:
        super().__init__(f"HTTP {status}")
        self.status = status
        self.delay = delay


class AiohttpDownloader(Downloader):
    """Fetches pages with a shared aiohttp session.

    Script evaluation is delegated to ``evaluator`` (the engine named by
    the ``script_engine`` setting by default).
    """

    def __init__(
        self,
        settings: Settings | None = None,
        evaluator: Callable[[str], str] | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self._session: aiohttp.ClientSession | None = None
        self._evaluator = evaluator or make_evaluator(self.settings.extractor)

    @property
    def http(self) -> HttpSettings:
        return self.settings.http

    @property
    def session(self) -> aiohttp.ClientSession:
        """Get or create the HTTP session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.http.timeout)
            connector = aiohttp.TCPConnector(limit=50)
            self._session = aiohttp.ClientSession(
                timeout=timeout,
                connector=connector,
                headers={
                    "User-Agent": self.http.user_agent,
                    "Accept-Language": self.http.accept_language,
                },
            )
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            try:
                await self._session.close()
                # Allow time for underlying connections to fully close
                await asyncio.sleep(0.1)
            finally:
                self._session = None

    async def __aenter__(self) -> "AiohttpDownloader":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def fetch(self, url: str) -> str:
        return await self.fetch_with_headers(url, {})

    async def fetch_with_headers(self, url: str, headers: dict[str, str]) -> str:
        logger.debug(f"GET {url}")

        async def request() -> str:
            async with self.session.get(url, headers=headers) as resp:
                if self._is_retryable_status(resp.status):
                    raise _RetryableStatus(
                        resp.status, self._parse_retry_after(resp.headers, default=None)
                    )
                if resp.status >= 400:
                    raise DownloadError(f"GET {url} returned HTTP {resp.status}")
                try:
                    return await resp.text()
                except UnicodeDecodeError as e:
                    raise DownloadError(f"GET {url} returned an undecodable body: {e}") from e

        try:
            return await self._retry_with_backoff(request)
        except _RetryableStatus as e:
            raise DownloadError(f"GET {url} returned HTTP {e.status}") from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise DownloadError(f"GET {url} failed: {e or type(e).__name__}") from e

    def evaluate_script(self, source: str) -> str:
        try:
            return self._evaluator(source) or ""
        except Exception as e:
            # Evaluator contract: failures become an empty result
            logger.warning(f"Script evaluator raised: {e}")
            return ""

    async def _retry_with_backoff(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Execute an operation with exponential backoff retry.

        Raises:
            The last exception if all retries fail.
        """
        max_retries = self.http.max_retries
        last_exception: BaseException | None = None

        for attempt in range(max_retries + 1):
            try:
                return await operation()
            except (aiohttp.ClientError, asyncio.TimeoutError, _RetryableStatus) as e:
                last_exception = e

                if attempt < max_retries:
                    delay = min(self.http.base_delay * (2**attempt), self.http.max_delay)
                    if isinstance(e, _RetryableStatus) and e.delay is not None:
                        delay = min(e.delay, self.http.max_delay)
                    logger.warning(
                        f"Attempt {attempt + 1}/{max_retries + 1} failed: {e}. "
                        f"Retrying in {delay:.1f}s..."
                    )
                    await asyncio.sleep(delay)
                else:
                    logger.error(f"All {max_retries + 1} attempts failed. Last error: {e}")

        raise last_exception  # type: ignore[misc]

    @staticmethod
    def _is_retryable_status(status: int) -> bool:
        """Retry on server errors (5xx) and rate limiting (429)."""
        return status >= 500 or status == 429

    @staticmethod
    def _parse_retry_after(headers, default: float | None = 1.0) -> float | None:
        """Parse Retry-After header value (seconds or HTTP-date)."""
        retry_after = headers.get("Retry-After")
        if not retry_after:
            return default

        try:
            return float(retry_after)
        except ValueError:
            try:
                retry_dt = parsedate_to_datetime(retry_after)
                delta = (retry_dt - datetime.now(timezone.utc)).total_seconds()
                return max(delta, 0.0)
            except (TypeError, ValueError):
                return default
