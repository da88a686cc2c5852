"""Core models and utilities for tubepipe."""

from .errors import (
    AgeRestrictedError,
    DownloadError,
    ExtractionError,
    NothingFoundError,
    ParsingError,
)
from .models import ItagType, Page, StreamItem, Thumbnail
from .settings import HARDCODED_CLIENT_VERSION, ExtractorSettings, HttpSettings, Settings

__all__ = [
    "AgeRestrictedError",
    "DownloadError",
    "ExtractionError",
    "NothingFoundError",
    "ParsingError",
    "ItagType",
    "Page",
    "StreamItem",
    "Thumbnail",
    "HARDCODED_CLIENT_VERSION",
    "ExtractorSettings",
    "HttpSettings",
    "Settings",
]
