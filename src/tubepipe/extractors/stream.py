"""Extraction of a single video's metadata and stream formats."""

import logging
from datetime import date, datetime
from typing import Any

from ..api.base import Downloader
from ..core.errors import ParsingError
from ..core.models import ItagType, StreamItem, Thumbnail
from ..core.parsing import (
    fix_thumbnail_url,
    get_path,
    remove_non_digit_chars,
    require_path,
    text_from_object,
    url_from_navigation_endpoint,
)
from ..core.settings import ExtractorSettings
from .items import SEARCH_RENDERERS, ListItem
from .pagination import collect_items
from .player import PlayerResponseResolver, ResolvedPlayer
from .signature import DecryptionProgram, decrypt, locate_program
from .streams import ADAPTIVE_FORMATS, FORMATS, collect_streams

logger = logging.getLogger(__name__)

_WATCH_CONTENTS = ("contents", "twoColumnWatchNextResults", "results", "results", "contents")


def _info_renderer(initial_data: dict, key: str) -> dict:
    contents = require_path(initial_data, *_WATCH_CONTENTS, kind=list, what="watch contents")
    for content in contents:
        if isinstance(content, dict) and isinstance(content.get(key), dict):
            return content[key]
    raise ParsingError(f"could not get {key}", ParsingError.MISSING)


class StreamExtractor:
    """Metadata and playable formats of one video.

    Build with :meth:`create`; the instance holds the resolved player
    response for the lifetime of this resolution.
    """

    def __init__(
        self,
        downloader: Downloader,
        resolved: ResolvedPlayer,
        settings: ExtractorSettings | None = None,
    ) -> None:
        self.downloader = downloader
        self.settings = settings or ExtractorSettings()
        self.video_id = resolved.video_id
        self.player_response = resolved.player_response
        self.initial_data = resolved.initial_data
        self.primary_info_renderer = _info_renderer(
            resolved.initial_data, "videoPrimaryInfoRenderer"
        )
        self.secondary_info_renderer = _info_renderer(
            resolved.initial_data, "videoSecondaryInfoRenderer"
        )
        # Kept only until the decryption program is built
        self._player_script = resolved.player_script
        self._program: DecryptionProgram | None = None

    @classmethod
    async def create(
        cls,
        downloader: Downloader,
        video_id: str,
        settings: ExtractorSettings | None = None,
    ) -> "StreamExtractor":
        """Resolve ``video_id`` and build its extractor.

        Raises:
            AgeRestrictedError: the video is age restricted.
            DownloadError: a fetch failed.
            ParsingError: the watch page does not have the expected shape.
        """
        resolver = PlayerResponseResolver(downloader, settings)
        resolved = await resolver.resolve(video_id)
        return cls(downloader, resolved, settings)

    # -------------------------------------------------------------------------
    # Streams
    # -------------------------------------------------------------------------

    def _decryption_program(self) -> DecryptionProgram | None:
        if self._program is None and self._player_script is not None:
            self._program = locate_program(self._player_script)
            self._player_script = None
        return self._program

    def _decrypt_signature(self, token: str) -> str:
        program = self._decryption_program()
        if program is None:
            logger.warning(f"{self.video_id}: cipher-protected format but no player script")
            return ""
        return decrypt(self.downloader, program, token)

    def _streams(self, key: str, wanted: ItagType) -> list[StreamItem]:
        by_url = collect_streams(self.player_response, key, wanted, self._decrypt_signature)
        return list(by_url.values())

    def video_streams(self) -> list[StreamItem]:
        """Combined audio+video formats."""
        return self._streams(FORMATS, ItagType.VIDEO)

    def video_only_streams(self) -> list[StreamItem]:
        return self._streams(ADAPTIVE_FORMATS, ItagType.VIDEO_ONLY)

    def audio_streams(self) -> list[StreamItem]:
        return self._streams(ADAPTIVE_FORMATS, ItagType.AUDIO)

    # -------------------------------------------------------------------------
    # Metadata
    # -------------------------------------------------------------------------

    def _video_details(self, *keys: str) -> Any:
        return get_path(self.player_response, "videoDetails", *keys)

    def name(self) -> str:
        title = text_from_object(self.primary_info_renderer.get("title"))
        if not title:
            title = self._video_details("title")
        if not title or not isinstance(title, str):
            raise ParsingError("Cant get title")
        return title

    def description(self, as_html: bool = False) -> tuple[str, bool]:
        """Return ``(description, from_rich_renderer)``.

        The rich renderer text is rendered as HTML when ``as_html`` is set. The
        flag is False when the plain ``shortDescription`` was used instead.
        """
        desc = text_from_object(self.secondary_info_renderer.get("description"), as_html)
        if desc:
            return desc, True
        short = self._video_details("shortDescription")
        if isinstance(short, str):
            return short, False
        raise ParsingError("Cant get description")

    def video_thumbnails(self) -> list[Thumbnail]:
        thumbnails = require_path(
            self.player_response, "videoDetails", "thumbnail", "thumbnails", kind=list,
            what="video thumbnails",
        )
        result = []
        for thumb in thumbnails:
            thumbnail = Thumbnail.from_dict(thumb)
            thumbnail.url = fix_thumbnail_url(thumbnail.url)
            result.append(thumbnail)
        return result

    def length(self) -> int:
        """Duration in seconds."""
        seconds = self._video_details("lengthSeconds")
        if isinstance(seconds, str) and seconds.isdigit():
            return int(seconds)
        duration_ms = get_path(
            self.player_response, "streamingData", FORMATS, 0, "approxDurationMs"
        )
        if isinstance(duration_ms, str) and duration_ms.isdigit():
            return int(duration_ms) // 1000
        raise ParsingError("Cant get length")

    def view_count(self) -> int:
        views = text_from_object(
            get_path(
                self.primary_info_renderer, "viewCount", "videoViewCountRenderer", "viewCount"
            )
        )
        if not views:
            views = self._video_details("viewCount")
        if isinstance(views, str) and views:
            if "no views" in views.lower():
                return 0
            return remove_non_digit_chars(views)
        raise ParsingError("Cant get view count")

    def _rating(self, position: int, label: str) -> int:
        tooltip = get_path(
            self.primary_info_renderer, "sentimentBar", "sentimentBarRenderer", "tooltip"
        )
        parts = tooltip.split("/") if isinstance(tooltip, str) else []
        if len(parts) > position and parts[position].strip():
            return remove_non_digit_chars(parts[position])

        allow_ratings = self._video_details("allowRatings")
        if allow_ratings is True:
            raise ParsingError(f"Ratings are enabled even though the {label} button is missing")
        if allow_ratings is False:
            return -1
        raise ParsingError(f"could not get {label} count")

    def like_count(self) -> int:
        """Like count, -1 when ratings are disabled."""
        return self._rating(0, "like")

    def dislike_count(self) -> int:
        """Dislike count, -1 when ratings are disabled."""
        return self._rating(1, "dislike")

    def textual_upload_date(self) -> str:
        micro = require_path(
            self.player_response, "microformat", "playerMicroformatRenderer", kind=dict,
            what="upload date",
        )
        for key in ("uploadDate", "publishDate"):
            if key in micro:
                value = micro[key]
                if not isinstance(value, str):
                    raise ParsingError.wrong_type(f"upload date ({key})", str, value)
                return value

        # Live streams carry broadcast timestamps instead
        details = require_path(micro, "liveBroadcastDetails", kind=dict, what="upload date")
        for key in ("endTimestamp", "startTimestamp"):
            if key in details:
                value = details[key]
                if not isinstance(value, str):
                    raise ParsingError.wrong_type(f"upload date ({key})", str, value)
                return value
        raise ParsingError("Cannot get upload date", ParsingError.MISSING)

    def upload_date(self) -> date:
        text = self.textual_upload_date()
        try:
            return datetime.strptime(text[:10], "%Y-%m-%d").date()
        except ValueError as e:
            raise ParsingError(f"Cannot parse date {text!r}") from e

    def _owner(self, *keys: str) -> Any:
        return get_path(self.secondary_info_renderer, "owner", "videoOwnerRenderer", *keys)

    def uploader_url(self) -> str:
        endpoint = self._owner("navigationEndpoint")
        if isinstance(endpoint, dict):
            url = url_from_navigation_endpoint(endpoint)
            if url:
                return url
        channel_id = self._video_details("channelId")
        if isinstance(channel_id, str):
            return f"https://www.youtube.com/channel/{channel_id}"
        raise ParsingError("Cant get uploader url")

    def uploader_name(self) -> str:
        name = text_from_object(self._owner("title"))
        if not name:
            name = self._video_details("author")
        if not name or not isinstance(name, str):
            raise ParsingError("Cant get uploader name")
        return name

    def uploader_avatars(self) -> list[Thumbnail]:
        return Thumbnail.list_from(self._owner("thumbnail", "thumbnails"))

    def related(self) -> list[ListItem]:
        """Watch-next items, classified like search results."""
        results = get_path(
            self.initial_data,
            "contents",
            "twoColumnWatchNextResults",
            "secondaryResults",
            "secondaryResults",
            "results",
        )
        if not isinstance(results, list):
            return []
        return collect_items(results, SEARCH_RENDERERS)
