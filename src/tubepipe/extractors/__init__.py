"""Extractors for videos, playlists, channels, search and trending."""

from .channel import ChannelExtractor
from .items import ChannelInfoItem, InfoItem, PlaylistInfoItem, StreamInfoItem
from .pagination import PageLayout, fetch_page, page_from_response
from .player import PlayerResponseResolver, ResolvedPlayer
from .playlist import PlaylistExtractor
from .search import SearchExtractor
from .stream import StreamExtractor
from .trending import TrendingExtractor

__all__ = [
    "ChannelExtractor",
    "PlaylistExtractor",
    "SearchExtractor",
    "StreamExtractor",
    "TrendingExtractor",
    "InfoItem",
    "StreamInfoItem",
    "ChannelInfoItem",
    "PlaylistInfoItem",
    "PageLayout",
    "fetch_page",
    "page_from_response",
    "PlayerResponseResolver",
    "ResolvedPlayer",
]
