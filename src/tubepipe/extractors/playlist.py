"""Playlist metadata and paginated video listing."""

from ..api.base import Downloader
from ..core.errors import ParsingError
from ..core.models import Page, Thumbnail
from ..core.parsing import (
    get_path,
    remove_non_digit_chars,
    text_from_object,
    url_from_navigation_endpoint,
)
from ..core.settings import ExtractorSettings
from .items import PLAYLIST_RENDERERS, ListItem
from .pagination import PageLayout, fetch_page, fetch_response, page_from_response

_VIDEO_LIST = (
    "contents",
    "twoColumnBrowseResultsRenderer",
    "tabs",
    0,
    "tabRenderer",
    "content",
    "sectionListRenderer",
    "contents",
    0,
    "itemSectionRenderer",
    "contents",
    0,
    "playlistVideoListRenderer",
)
_CONTINUATION = ("continuationContents", "playlistVideoListContinuation")

FIRST_PAGE = PageLayout(
    name="playlist",
    content_path=_VIDEO_LIST + ("contents",),
    continuation_path=_VIDEO_LIST + ("continuations",),
    renderers=PLAYLIST_RENDERERS,
)
CONTINUATION_PAGE = PageLayout(
    name="playlist continuation",
    content_path=_CONTINUATION + ("contents",),
    continuation_path=_CONTINUATION + ("continuations",),
    renderers=PLAYLIST_RENDERERS,
)


class PlaylistExtractor:
    """A playlist's sidebar metadata plus its first page of videos.

    Later pages are fetched with :meth:`fetch_page` using
    :meth:`next_page_url`, then each returned page's ``next_url``.
    """

    def __init__(
        self,
        downloader: Downloader,
        playlist_id: str,
        initial_data: dict,
        settings: ExtractorSettings | None = None,
    ) -> None:
        self.downloader = downloader
        self.playlist_id = playlist_id
        self.initial_data = initial_data
        self.settings = settings or ExtractorSettings()
        self.playlist_info = self._playlist_info(initial_data)
        self._first_page: Page[ListItem] | None = None

    @classmethod
    async def create(
        cls,
        downloader: Downloader,
        playlist_id: str,
        settings: ExtractorSettings | None = None,
    ) -> "PlaylistExtractor":
        settings = settings or ExtractorSettings()
        url = f"{settings.base_url}/playlist?list={playlist_id}&pbj=1"
        initial_data = await fetch_response(downloader, url, settings)
        return cls(downloader, playlist_id, initial_data, settings)

    @staticmethod
    def _playlist_info(initial_data: dict) -> dict:
        info = get_path(
            initial_data,
            "sidebar",
            "playlistSidebarRenderer",
            "items",
            0,
            "playlistSidebarPrimaryInfoRenderer",
        )
        if not isinstance(info, dict):
            raise ParsingError("Cant get playlist info", ParsingError.MISSING)
        return info

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
        name = text_from_object(self.playlist_info.get("title"))
        if name:
            return name
        title = get_path(self.initial_data, "microformat", "microformatDataRenderer", "title")
        if isinstance(title, str):
            return title
        raise ParsingError("Cant get name")

    def thumbnails(self) -> list[Thumbnail]:
        thumbnails = get_path(
            self.playlist_info,
            "thumbnailRenderer",
            "playlistVideoThumbnailRenderer",
            "thumbnail",
            "thumbnails",
        )
        if not isinstance(thumbnails, list):
            thumbnails = get_path(
                self.initial_data, "microformat", "microformatDataRenderer", "thumbnail",
                "thumbnails",
            )
        if not isinstance(thumbnails, list):
            raise ParsingError("Cant get thumbnails", ParsingError.MISSING)
        return Thumbnail.list_from(thumbnails)

    def _uploader_info(self) -> dict:
        items = get_path(self.initial_data, "sidebar", "playlistSidebarRenderer", "items")
        for item in items if isinstance(items, list) else []:
            owner = get_path(
                item, "playlistSidebarSecondaryInfoRenderer", "videoOwner", "videoOwnerRenderer"
            )
            if isinstance(owner, dict):
                return owner
        raise ParsingError("Cant get uploader info", ParsingError.MISSING)

    def uploader_url(self) -> str:
        endpoint = self._uploader_info().get("navigationEndpoint")
        if not isinstance(endpoint, dict):
            raise ParsingError("Cant get uploader url", ParsingError.MISSING)
        return url_from_navigation_endpoint(endpoint)

    def uploader_name(self) -> str:
        name = text_from_object(self._uploader_info().get("title"))
        if not name:
            raise ParsingError("uploader name not found")
        return name

    def uploader_avatars(self) -> list[Thumbnail]:
        thumbnails = get_path(self._uploader_info(), "thumbnail", "thumbnails")
        if not isinstance(thumbnails, list):
            raise ParsingError("Cant get uploader thumbnails", ParsingError.MISSING)
        return Thumbnail.list_from(thumbnails)

    def stream_count(self) -> int:
        stats = get_path(self.playlist_info, "stats", 0)
        if stats is None:
            raise ParsingError("No stats", ParsingError.MISSING)
        return remove_non_digit_chars(text_from_object(stats) or "")
