"""List items found in search results, playlists, channels and feeds.

The site gives these nodes no type tag; the renderer key wrapping each node
identifies its shape.
"""

import re
from typing import Any

from ..core.errors import ParsingError
from ..core.models import Thumbnail
from ..core.parsing import (
    get_path,
    mixed_number_word_parse,
    remove_non_digit_chars,
    text_from_object,
    url_from_navigation_endpoint,
)

_DURATION_RE = re.compile(r"^(?:(\d+):)?(\d+):(\d+)$")


def _thumbnails(node: Any) -> list[Thumbnail]:
    return Thumbnail.list_from(get_path(node, "thumbnails"))


def parse_duration(text: str) -> int:
    """Convert ``'1:02:03'`` or ``'4:05'`` to seconds.

    Raises:
        ParsingError: the text is not a clock duration.
    """
    match = _DURATION_RE.match(text.strip())
    if not match:
        raise ParsingError(f"Cannot parse duration {text!r}")
    hours, minutes, seconds = match.groups()
    return int(hours or 0) * 3600 + int(minutes) * 60 + int(seconds)


class InfoItem:
    """Base wrapper around one renderer node."""

    kind = "item"

    def __init__(self, data: dict) -> None:
        self.data = data

    def __eq__(self, other: object) -> bool:
        return type(other) is type(self) and other.data == self.data

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.data.get('title')!r})"

    def name(self) -> str:
        name = text_from_object(self.data.get("title"))
        if not name:
            raise ParsingError("Cannot get name")
        return name

    def thumbnails(self) -> list[Thumbnail]:
        return _thumbnails(self.data.get("thumbnail"))

    def to_dict(self) -> dict:
        """Summarize the accessors that succeed; failing ones are left out."""
        result: dict[str, Any] = {"kind": self.kind}
        for field in self._summary_fields:
            try:
                value = getattr(self, field)()
            except ParsingError:
                continue
            if isinstance(value, list):
                value = [vars(v) for v in value]
            result[field] = value
        return result

    _summary_fields: tuple[str, ...] = ("name", "url", "thumbnails")


class StreamInfoItem(InfoItem):
    """A video entry (``videoRenderer`` and its compact/grid/playlist variants)."""

    kind = "stream"
    _summary_fields = (
        "name",
        "video_id",
        "url",
        "duration",
        "uploader_name",
        "uploader_url",
        "view_count",
        "textual_upload_date",
        "is_live",
    )

    def video_id(self) -> str:
        video_id = self.data.get("videoId")
        if not isinstance(video_id, str):
            raise ParsingError("Cannot get video id", ParsingError.MISSING)
        return video_id

    def url(self) -> str:
        return f"https://www.youtube.com/watch?v={self.video_id()}"

    def is_live(self) -> bool:
        for badge in self.data.get("badges") or []:
            if get_path(badge, "metadataBadgeRenderer", "label") == "LIVE NOW":
                return True
        for overlay in self.data.get("thumbnailOverlays") or []:
            style = get_path(overlay, "thumbnailOverlayTimeStatusRenderer", "style")
            if style == "LIVE":
                return True
        return False

    def duration(self) -> int:
        """Length in seconds, -1 for live streams."""
        if self.is_live():
            return -1
        text = text_from_object(self.data.get("lengthText"))
        if not text:
            for overlay in self.data.get("thumbnailOverlays") or []:
                text = text_from_object(
                    get_path(overlay, "thumbnailOverlayTimeStatusRenderer", "text")
                )
                if text:
                    break
        if not text:
            raise ParsingError("Cannot get duration")
        return parse_duration(text)

    def _byline(self) -> dict | None:
        for key in ("longBylineText", "ownerText", "shortBylineText"):
            node = self.data.get(key)
            if isinstance(node, dict):
                return node
        return None

    def uploader_name(self) -> str:
        name = text_from_object(self._byline())
        if not name:
            raise ParsingError("Cannot get uploader name")
        return name

    def uploader_url(self) -> str:
        endpoint = get_path(self._byline(), "runs", 0, "navigationEndpoint")
        if not isinstance(endpoint, dict):
            raise ParsingError("Cannot get uploader url", ParsingError.MISSING)
        return url_from_navigation_endpoint(endpoint)

    def view_count(self) -> int:
        """View count, or watching count for live streams."""
        text = text_from_object(self.data.get("viewCountText"))
        if not text:
            raise ParsingError("Cannot get view count")
        if "no views" in text.lower():
            return 0
        return remove_non_digit_chars(text)

    def textual_upload_date(self) -> str:
        text = text_from_object(self.data.get("publishedTimeText"))
        if not text:
            raise ParsingError("Cannot get upload date")
        return text


class ChannelInfoItem(InfoItem):
    """A ``channelRenderer`` entry."""

    kind = "channel"
    _summary_fields = (
        "name",
        "channel_id",
        "url",
        "subscriber_count",
        "stream_count",
        "description",
    )

    def thumbnails(self) -> list[Thumbnail]:
        node = self.data.get("thumbnail")
        if not isinstance(node, dict):
            raise ParsingError("Cannot get thumbnails", ParsingError.MISSING)
        return _thumbnails(node)

    def channel_id(self) -> str:
        channel_id = self.data.get("channelId")
        if not isinstance(channel_id, str):
            raise ParsingError("Cannot get channel id", ParsingError.MISSING)
        return channel_id

    def url(self) -> str:
        return f"https://www.youtube.com/channel/{self.channel_id()}"

    def subscriber_count(self) -> int:
        """Subscriber count, -1 when hidden."""
        node = self.data.get("subscriberCountText")
        if node is None:
            return -1
        return mixed_number_word_parse(text_from_object(node) or "")

    def stream_count(self) -> int:
        """Video count, -1 when absent."""
        node = self.data.get("videoCountText")
        if node is None:
            return -1
        return remove_non_digit_chars(text_from_object(node) or "")

    def description(self) -> str | None:
        return text_from_object(self.data.get("descriptionSnippet"))


class PlaylistInfoItem(InfoItem):
    """A ``playlistRenderer`` entry."""

    kind = "playlist"
    _summary_fields = ("name", "playlist_id", "url", "uploader_name", "stream_count")

    def thumbnails(self) -> list[Thumbnail]:
        node = get_path(self.data, "thumbnails", 0)
        if node is None:
            node = self.data.get("thumbnail")
        return _thumbnails(node)

    def playlist_id(self) -> str:
        playlist_id = self.data.get("playlistId")
        if not isinstance(playlist_id, str):
            raise ParsingError("Cannot get playlist id", ParsingError.MISSING)
        return playlist_id

    def url(self) -> str:
        return f"https://www.youtube.com/playlist?list={self.playlist_id()}"

    def uploader_name(self) -> str:
        name = text_from_object(self.data.get("longBylineText")) or text_from_object(
            self.data.get("shortBylineText")
        )
        if not name:
            raise ParsingError("Cannot get uploader name")
        return name

    def stream_count(self) -> int:
        count = self.data.get("videoCount")
        if isinstance(count, str):
            return remove_non_digit_chars(count)
        return remove_non_digit_chars(text_from_object(self.data.get("videoCountText")) or "")


ListItem = StreamInfoItem | ChannelInfoItem | PlaylistInfoItem

# Renderer keys in priority order
SEARCH_RENDERERS: tuple[tuple[str, type[InfoItem]], ...] = (
    ("videoRenderer", StreamInfoItem),
    ("compactVideoRenderer", StreamInfoItem),
    ("channelRenderer", ChannelInfoItem),
    ("playlistRenderer", PlaylistInfoItem),
)
PLAYLIST_RENDERERS: tuple[tuple[str, type[InfoItem]], ...] = (
    ("playlistVideoRenderer", StreamInfoItem),
)
GRID_RENDERERS: tuple[tuple[str, type[InfoItem]], ...] = (
    ("gridVideoRenderer", StreamInfoItem),
)


def classify_item(
    node: Any, renderers: tuple[tuple[str, type[InfoItem]], ...] = SEARCH_RENDERERS
) -> ListItem | None:
    """Wrap ``node`` by the first renderer key it carries, or return None."""
    if not isinstance(node, dict):
        return None
    for key, item_type in renderers:
        if key in node:
            data = node[key]
            if isinstance(data, dict):
                return item_type(data)
            return None
    return None
