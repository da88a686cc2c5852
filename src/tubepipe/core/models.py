"""Core data models for tubepipe."""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from .errors import ParsingError
from .parsing import fix_thumbnail_url

T = TypeVar("T")


class ItagType(str, Enum):
    """Media type buckets for stream formats."""

    VIDEO = "video"  # combined audio + video
    VIDEO_ONLY = "video_only"
    AUDIO = "audio"


def _required(data: dict, key: str, kind: type) -> Any:
    if key not in data:
        raise ParsingError.missing(key)
    value = data[key]
    # bool is an int subclass but never a valid numeric field
    if not isinstance(value, kind) or isinstance(value, bool):
        raise ParsingError.wrong_type(key, kind, value)
    return value


def _optional(data: dict, key: str, kind: type) -> Any:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, kind) or isinstance(value, bool):
        raise ParsingError.wrong_type(key, kind, value)
    return value


@dataclass
class Thumbnail:
    """An image variant with its pixel size."""

    url: str
    width: int
    height: int

    @classmethod
    def from_dict(cls, data: dict) -> "Thumbnail":
        if not isinstance(data, dict):
            raise ParsingError.wrong_type("thumbnail", dict, data)
        return cls(
            url=_required(data, "url", str),
            width=_required(data, "width", int),
            height=_required(data, "height", int),
        )

    @classmethod
    def list_from(cls, thumbnails: Any) -> list["Thumbnail"]:
        """Parse a raw thumbnail list, skipping malformed entries."""
        result = []
        for thumb in thumbnails if isinstance(thumbnails, list) else []:
            try:
                thumbnail = cls.from_dict(thumb)
            except ParsingError:
                continue
            thumbnail.url = fix_thumbnail_url(thumbnail.url)
            result.append(thumbnail)
        return result


@dataclass
class StreamItem:
    """A playable format of a video, typed from a raw format descriptor."""

    itag: int
    bitrate: int
    quality: str
    mime_type: str
    last_modified: str
    url: Optional[str] = None
    quality_label: Optional[str] = None
    average_bitrate: Optional[int] = None
    approx_duration_ms: Optional[str] = None
    content_length: Optional[str] = None
    height: Optional[int] = None
    width: Optional[int] = None
    audio_quality: Optional[str] = None
    audio_channels: Optional[int] = None
    audio_sample_rate: Optional[str] = None

    @classmethod
    def from_format(cls, data: dict) -> "StreamItem":
        """Build a StreamItem from a ``formats``/``adaptiveFormats`` entry.

        Raises:
            ParsingError: a required field is absent or a field has the
                wrong type.
        """
        if not isinstance(data, dict):
            raise ParsingError.wrong_type("format", dict, data)
        return cls(
            itag=_required(data, "itag", int),
            bitrate=_required(data, "bitrate", int),
            quality=_required(data, "quality", str),
            mime_type=_required(data, "mimeType", str),
            last_modified=_required(data, "lastModified", str),
            url=_optional(data, "url", str),
            quality_label=_optional(data, "qualityLabel", str),
            average_bitrate=_optional(data, "averageBitrate", int),
            approx_duration_ms=_optional(data, "approxDurationMs", str),
            content_length=_optional(data, "contentLength", str),
            height=_optional(data, "height", int),
            width=_optional(data, "width", int),
            audio_quality=_optional(data, "audioQuality", str),
            audio_channels=_optional(data, "audioChannels", int),
            audio_sample_rate=_optional(data, "audioSampleRate", str),
        )

    @property
    def is_video_only(self) -> bool:
        return self.audio_quality is None

    @property
    def is_audio_only(self) -> bool:
        return self.height is None

    def matches(self, wanted: ItagType) -> bool:
        """Check whether this format belongs in the ``wanted`` bucket."""
        if wanted == ItagType.VIDEO_ONLY:
            return self.is_video_only
        if wanted == ItagType.AUDIO:
            return self.is_audio_only
        return True

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class Page(Generic[T]):
    """One page of a paginated listing.

    ``next_url`` is None on the last page.
    """

    items: list[T] = field(default_factory=list)
    next_url: Optional[str] = None

    @property
    def is_last(self) -> bool:
        return self.next_url is None
