"""The trending feed."""

import logging

from ..api.base import Downloader
from ..core.models import Page
from ..core.settings import ExtractorSettings
from .items import ListItem
from .pagination import PageLayout, fetch_page

logger = logging.getLogger(__name__)

# Every section holds one shelf; the feed has no continuation
TRENDING_PAGE = PageLayout(
    name="trending",
    content_path=(
        "contents",
        "twoColumnBrowseResultsRenderer",
        "tabs",
        0,
        "tabRenderer",
        "content",
        "sectionListRenderer",
        "contents",
    ),
    section_path=(
        "itemSectionRenderer",
        "contents",
        0,
        "shelfRenderer",
        "content",
        "expandedShelfContentsRenderer",
        "items",
    ),
)


class TrendingExtractor:
    """Videos currently on the trending feed."""

    def __init__(self, page: Page[ListItem]) -> None:
        self.page = page

    @classmethod
    async def create(
        cls, downloader: Downloader, settings: ExtractorSettings | None = None
    ) -> "TrendingExtractor":
        settings = settings or ExtractorSettings()
        url = f"{settings.base_url}/feed/trending?pbj=1"
        page = await fetch_page(downloader, url, TRENDING_PAGE, settings)
        logger.debug(f"Trending feed has {len(page.items)} videos")
        return cls(page)

    def videos(self) -> list[ListItem]:
        return self.page.items
