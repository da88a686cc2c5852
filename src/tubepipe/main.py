#!/usr/bin/env python3
"""Command line entry point for tubepipe."""

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

from .api import AiohttpDownloader
from .core.errors import ExtractionError, ParsingError
from .core.settings import Settings
from .extractors import (
    ChannelExtractor,
    PlaylistExtractor,
    SearchExtractor,
    StreamExtractor,
    TrendingExtractor,
)

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Set up logging configuration."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            # stdout carries the JSON output
            logging.StreamHandler(sys.stderr),
        ],
    )

    # Suppress noisy third-party loggers
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def _optional(accessor: Callable[[], Any]) -> Any:
    try:
        return accessor()
    except ParsingError as e:
        logger.debug(f"{accessor.__name__}: {e}")
        return None


async def _collect(extractor, items: list, next_url: str | None, pages: int) -> list[dict]:
    """Follow continuations until ``pages`` pages are read or the listing ends.

    A page that fails to download or parse ends the loop; items already
    collected are kept.
    """
    results = list(items)
    fetched = 1
    while next_url is not None and fetched < pages:
        try:
            page = await extractor.fetch_page(next_url)
        except ExtractionError as e:
            logger.warning(f"Stopping after {fetched} page(s): {type(e).__name__}: {e}")
            break
        results.extend(page.items)
        next_url = page.next_url
        fetched += 1
    return [item.to_dict() for item in results]


async def _stream(downloader: AiohttpDownloader, args: argparse.Namespace, settings: Settings):
    extractor = await StreamExtractor.create(downloader, args.video_id, settings.extractor)
    description = _optional(extractor.description)
    return {
        "id": extractor.video_id,
        "name": _optional(extractor.name),
        "description": description[0] if description else None,
        "length": _optional(extractor.length),
        "view_count": _optional(extractor.view_count),
        "like_count": _optional(extractor.like_count),
        "dislike_count": _optional(extractor.dislike_count),
        "upload_date": _optional(extractor.textual_upload_date),
        "uploader_name": _optional(extractor.uploader_name),
        "uploader_url": _optional(extractor.uploader_url),
        "video_streams": [s.to_dict() for s in extractor.video_streams()],
        "video_only_streams": [s.to_dict() for s in extractor.video_only_streams()],
        "audio_streams": [s.to_dict() for s in extractor.audio_streams()],
    }


async def _search(downloader: AiohttpDownloader, args: argparse.Namespace, settings: Settings):
    extractor = await SearchExtractor.create(
        downloader, args.query, args.page, settings.extractor
    )
    return await _collect(
        extractor, extractor.search_results(), extractor.next_page_url(), args.pages
    )


async def _suggest(downloader: AiohttpDownloader, args: argparse.Namespace, settings: Settings):
    return await SearchExtractor.search_suggestion(downloader, args.query, settings.extractor)


async def _playlist(downloader: AiohttpDownloader, args: argparse.Namespace, settings: Settings):
    extractor = await PlaylistExtractor.create(downloader, args.playlist_id, settings.extractor)
    return {
        "id": extractor.playlist_id,
        "name": _optional(extractor.name),
        "uploader_name": _optional(extractor.uploader_name),
        "stream_count": _optional(extractor.stream_count),
        "videos": await _collect(
            extractor, extractor.videos(), extractor.next_page_url(), args.pages
        ),
    }


async def _channel(downloader: AiohttpDownloader, args: argparse.Namespace, settings: Settings):
    extractor = await ChannelExtractor.create(downloader, args.channel_id, settings.extractor)
    return {
        "id": extractor.channel_id,
        "name": _optional(extractor.name),
        "url": extractor.url(),
        "subscriber_count": _optional(extractor.subscriber_count),
        "description": _optional(extractor.description),
        "videos": await _collect(
            extractor, extractor.videos(), extractor.next_page_url(), args.pages
        ),
    }


async def _trending(downloader: AiohttpDownloader, args: argparse.Namespace, settings: Settings):
    extractor = await TrendingExtractor.create(downloader, settings.extractor)
    return [item.to_dict() for item in extractor.videos()]


COMMANDS = {
    "stream": _stream,
    "search": _search,
    "suggest": _suggest,
    "playlist": _playlist,
    "channel": _channel,
    "trending": _trending,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tubepipe", description=__doc__)
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    parser.add_argument("--config", type=Path, help="settings file (default: user config dir)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    stream = subparsers.add_parser("stream", help="video metadata and stream formats")
    stream.add_argument("video_id")

    search = subparsers.add_parser("search", help="search results")
    search.add_argument("query")
    search.add_argument("--page", type=int, default=1, help="first page number")

    suggest = subparsers.add_parser("suggest", help="search suggestions")
    suggest.add_argument("query")

    playlist = subparsers.add_parser("playlist", help="playlist metadata and videos")
    playlist.add_argument("playlist_id")

    channel = subparsers.add_parser("channel", help="channel metadata and videos")
    channel.add_argument("channel_id")

    subparsers.add_parser("trending", help="trending videos")

    for listing in (search, playlist, channel):
        listing.add_argument(
            "--pages", type=int, default=1, help="number of pages to fetch (default: 1)"
        )
    return parser


async def run(args: argparse.Namespace) -> Any:
    settings = Settings.load(args.config)
    async with AiohttpDownloader(settings) as downloader:
        return await COMMANDS[args.command](downloader, args, settings)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    try:
        result = asyncio.run(run(args))
    except ExtractionError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1

    json.dump(result, sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
