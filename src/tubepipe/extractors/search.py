"""Search results and query suggestions."""

import logging
from urllib.parse import quote_plus

from ..api.base import Downloader
from ..core.errors import ParsingError
from ..core.models import Page
from ..core.parsing import loads
from ..core.settings import ExtractorSettings
from .envelope import strip_jsonp
from .items import ListItem
from .pagination import (
    PageLayout,
    content_nodes,
    fetch_response,
    is_empty_listing,
    page_from_response,
)

logger = logging.getLogger(__name__)

SEARCH_PAGE = PageLayout(
    name="search",
    content_path=(
        "contents",
        "twoColumnSearchResultsRenderer",
        "primaryContents",
        "sectionListRenderer",
        "contents",
    ),
    section_path=("itemSectionRenderer", "contents"),
)


def search_url(settings: ExtractorSettings, query: str, page: int) -> str:
    return (
        f"{settings.base_url}/results?disable_polymer=1&search_query={quote_plus(query)}"
        f"&gl={settings.search_region}&pbj=1&page={page}"
    )


async def fetch_search_page(
    downloader: Downloader, settings: ExtractorSettings, query: str, number: int
) -> Page[ListItem]:
    """Fetch results page ``number``; ``next_url`` is the following page number.

    Results end at a page whose content is empty or only the empty-result
    marker. A page of unclassified nodes (shelves, ads) still continues.
    """
    url = search_url(settings, query, number)
    response = await fetch_response(downloader, url, settings, SEARCH_PAGE.envelope_index)
    page = page_from_response(response, SEARCH_PAGE, settings.base_url)
    if is_empty_listing(content_nodes(response, SEARCH_PAGE)):
        page.next_url = None
    else:
        page.next_url = str(number + 1)
    return page


class SearchExtractor:
    """Results of one search query.

    Pages are numbered from 1. :meth:`next_page_url` returns the next page
    number as text; pass it back to :meth:`fetch_page`.
    """

    def __init__(
        self,
        downloader: Downloader,
        query: str,
        page: Page[ListItem],
        page_number: int = 1,
        settings: ExtractorSettings | None = None,
    ) -> None:
        self.downloader = downloader
        self.query = query
        self.page = page
        self.page_number = page_number
        self.settings = settings or ExtractorSettings()

    @classmethod
    async def create(
        cls,
        downloader: Downloader,
        query: str,
        page: int = 1,
        settings: ExtractorSettings | None = None,
    ) -> "SearchExtractor":
        settings = settings or ExtractorSettings()
        first = await fetch_search_page(downloader, settings, query, page)
        return cls(downloader, query, first, page, settings)

    def search_results(self) -> list[ListItem]:
        return self.page.items

    def next_page_url(self) -> str | None:
        return self.page.next_url

    async def fetch_page(self, page_url: str) -> Page[ListItem]:
        """Fetch the page numbered ``page_url``.

        The returned page's ``next_url`` is the following page number, or
        None when this page was the last.
        """
        try:
            number = int(page_url)
        except ValueError as e:
            raise ParsingError(f"Invalid search page {page_url!r}") from e
        return await fetch_search_page(self.downloader, self.settings, self.query, number)

    @staticmethod
    async def search_suggestion(
        downloader: Downloader, query: str, settings: ExtractorSettings | None = None
    ) -> list[str]:
        """Fetch completion suggestions for ``query``.

        Raises:
            DownloadError: the fetch failed.
            ParsingError: the body is not the expected JSONP array.
        """
        settings = settings or ExtractorSettings()
        url = (
            f"{settings.suggestion_url}?client=youtube&jsonp=jp&ds=yt"
            f"&q={quote_plus(query)}"
        )
        body = await downloader.fetch(url)
        data = loads(strip_jsonp(body), "search suggestions")

        entries = data[1] if isinstance(data, list) and len(data) > 1 else None
        if not isinstance(entries, list):
            raise ParsingError("Cannot get suggestions", ParsingError.MISSING)
        suggestions = []
        for entry in entries:
            if isinstance(entry, list) and entry and isinstance(entry[0], str):
                suggestions.append(entry[0])
        logger.debug(f"{len(suggestions)} suggestions for {query!r}")
        return suggestions
