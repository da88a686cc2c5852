"""Capability interface the extractors call for I/O and script evaluation."""

from abc import ABC, abstractmethod


class Downloader(ABC):
    """Host-supplied capabilities.

    Implementations must be safe to call from concurrent coroutines; the
    stream resolver issues two fetches at once.
    """

    @abstractmethod
    async def fetch(self, url: str) -> str:
        """Fetch ``url`` and return the body as text.

        Raises:
            DownloadError: the transport failed.
        """
        ...

    @abstractmethod
    async def fetch_with_headers(self, url: str, headers: dict[str, str]) -> str:
        """Fetch ``url`` with extra request headers.

        Raises:
            DownloadError: the transport failed.
        """
        ...

    @abstractmethod
    def evaluate_script(self, source: str) -> str:
        """Evaluate a script and return its completion value as text.

        Returns an empty string when evaluation fails; callers treat that as
        an unusable result rather than an error.
        """
        ...
