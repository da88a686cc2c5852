"""Channel header metadata and the paginated videos tab."""

import logging
from typing import Any

from ..api.base import Downloader
from ..core.errors import ParsingError
from ..core.models import Page, Thumbnail
from ..core.parsing import get_path, mixed_number_word_parse, text_from_object
from ..core.settings import ExtractorSettings
from .items import GRID_RENDERERS, ListItem
from .pagination import PageLayout, fetch_page, fetch_response, page_from_response

logger = logging.getLogger(__name__)

# The videos tab is the second tab of the browse results
_VIDEO_GRID = (
    "contents",
    "twoColumnBrowseResultsRenderer",
    "tabs",
    1,
    "tabRenderer",
    "content",
    "sectionListRenderer",
    "contents",
    0,
    "itemSectionRenderer",
    "contents",
    0,
    "gridRenderer",
)
_CONTINUATION = ("continuationContents", "gridContinuation")

FIRST_PAGE = PageLayout(
    name="channel",
    content_path=_VIDEO_GRID + ("items",),
    continuation_path=_VIDEO_GRID + ("continuations",),
    renderers=GRID_RENDERERS,
)
CONTINUATION_PAGE = PageLayout(
    name="channel continuation",
    content_path=_CONTINUATION + ("items",),
    continuation_path=_CONTINUATION + ("continuations",),
    renderers=GRID_RENDERERS,
)


class ChannelExtractor:
    """A channel's header plus the first page of its uploads."""

    def __init__(
        self,
        downloader: Downloader,
        channel_id: str,
        initial_data: dict,
        settings: ExtractorSettings | None = None,
    ) -> None:
        self.downloader = downloader
        self.channel_id = channel_id
        self.initial_data = initial_data
        self.settings = settings or ExtractorSettings()
        self._first_page: Page[ListItem] | None = None

    @classmethod
    async def create(
        cls,
        downloader: Downloader,
        channel_id: str,
        settings: ExtractorSettings | None = None,
    ) -> "ChannelExtractor":
        settings = settings or ExtractorSettings()
        url = f"{settings.base_url}/channel/{channel_id}/videos?pbj=1&view=0&flow=grid"
        initial_data = await fetch_response(downloader, url, settings)
        if "header" not in initial_data:
            logger.debug(f"Channel {channel_id} response has no header")
        return cls(downloader, channel_id, initial_data, settings)

    def _header(self, *keys: str) -> Any:
        return get_path(self.initial_data, "header", "c4TabbedHeaderRenderer", *keys)

    def _metadata(self, *keys: str) -> Any:
        return get_path(self.initial_data, "metadata", "channelMetadataRenderer", *keys)

    # -------------------------------------------------------------------------
    # Pages
    # -------------------------------------------------------------------------

    def first_page(self) -> Page[ListItem]:
        if self._first_page is None:
            self._first_page = page_from_response(
                self.initial_data, FIRST_PAGE, self.settings.base_url
            )
        return self._first_page

    def videos(self) -> list[ListItem]:
        return self.first_page().items

    def next_page_url(self) -> str | None:
        return self.first_page().next_url

    async def fetch_page(self, page_url: str) -> Page[ListItem]:
        """Fetch a continuation page."""
        return await fetch_page(self.downloader, page_url, CONTINUATION_PAGE, self.settings)

    # -------------------------------------------------------------------------
    # Metadata
    # -------------------------------------------------------------------------

    def name(self) -> str:
        name = self._header("title")
        if not isinstance(name, str) or not name:
            name = self._metadata("title")
        if not isinstance(name, str) or not name:
            raise ParsingError("Cannot get channel name")
        return name

    def url(self) -> str:
        channel_id = self._metadata("externalId") or self._header("channelId") or self.channel_id
        return f"https://www.youtube.com/channel/{channel_id}"

    def avatars(self) -> list[Thumbnail]:
        thumbnails = self._header("avatar", "thumbnails")
        if not isinstance(thumbnails, list):
            raise ParsingError("Cannot get avatars", ParsingError.MISSING)
        return Thumbnail.list_from(thumbnails)

    def banners(self) -> list[Thumbnail]:
        """Banner images; empty when the channel has none."""
        return Thumbnail.list_from(self._header("banner", "thumbnails"))

    def subscriber_count(self) -> int:
        """Subscriber count, -1 when hidden."""
        text = text_from_object(self._header("subscriberCountText"))
        if not text:
            return -1
        return mixed_number_word_parse(text)

    def description(self) -> str:
        description = self._metadata("description")
        if not isinstance(description, str):
            raise ParsingError("Cannot get description", ParsingError.MISSING)
        return description
