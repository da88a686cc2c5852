"""Resolution of a video's player response from the watch page."""

import asyncio
import json
import logging
import re
from dataclasses import dataclass

from ..api.base import Downloader
from ..core.errors import AgeRestrictedError, ParsingError
from ..core.parsing import loads
from ..core.settings import ExtractorSettings
from .envelope import initial_data, parse_envelope, player_response_from_envelope

logger = logging.getLogger(__name__)

# Legacy pages embed the player configuration as a script assignment
PLAYER_CONFIG_RE = re.compile(r"ytplayer\.config\s*=\s*(\{.*?\});")


@dataclass
class ResolvedPlayer:
    """Outcome of a resolution.

    ``player_script`` is only set on the legacy path.
    """

    video_id: str
    page_html: str
    initial_data: dict
    player_response: dict
    player_script: str | None = None

    @property
    def is_legacy(self) -> bool:
        return self.player_script is not None


def watch_url(settings: ExtractorSettings, video_id: str) -> str:
    return f"{settings.base_url}/watch?v={video_id}&disable_polymer=1"


def fix_player_url(url: str, base_url: str = "https://www.youtube.com") -> str:
    """Make a player asset path absolute."""
    if url.startswith("//"):
        return "https:" + url
    if url.startswith("/"):
        return base_url + url
    return url


def player_config(page_html: str) -> dict:
    """Extract the embedded ``ytplayer.config`` object.

    Raises:
        ParsingError: the assignment is absent or not a JSON object.
    """
    match = PLAYER_CONFIG_RE.search(page_html)
    if not match:
        raise ParsingError("cannot get player_config", ParsingError.MISSING)
    try:
        config = json.loads(match.group(1))
    except json.JSONDecodeError as e:
        raise ParsingError(f"cannot parse player_config: {e}") from e
    if not isinstance(config, dict):
        raise ParsingError.wrong_type("player_config", dict, config)
    return config


def player_args(config: dict) -> dict:
    args = config.get("args")
    if args is None:
        raise ParsingError("cannot get player args", ParsingError.MISSING)
    if not isinstance(args, dict):
        raise ParsingError.wrong_type("player args", dict, args)
    return args


def legacy_player_response(args: dict) -> dict:
    """Decode the JSON string in ``args.player_response``."""
    raw = args.get("player_response")
    if raw is None:
        raise ParsingError("cannot get player response", ParsingError.MISSING)
    if not isinstance(raw, str):
        raise ParsingError.wrong_type("player_response", str, raw)
    player_response = loads(raw, "player_response")
    if not isinstance(player_response, dict):
        raise ParsingError.wrong_type("player_response", dict, player_response)
    return player_response


def player_url(config: dict, base_url: str = "https://www.youtube.com") -> str:
    assets = config.get("assets")
    if not isinstance(assets, dict):
        raise ParsingError("cannot get player assets", ParsingError.MISSING)
    js = assets.get("js")
    if not isinstance(js, str):
        raise ParsingError("cannot get player url (assets.js)", ParsingError.MISSING)
    return fix_player_url(js, base_url)


class PlayerResponseResolver:
    """Fetches the watch page and decides between the inlined and legacy paths."""

    def __init__(self, downloader: Downloader, settings: ExtractorSettings | None = None) -> None:
        self.downloader = downloader
        self.settings = settings or ExtractorSettings()

    async def resolve(self, video_id: str) -> ResolvedPlayer:
        """Resolve ``video_id`` to its player response.

        Raises:
            AgeRestrictedError: the watch envelope is the restricted variant.
            DownloadError: a fetch failed.
            ParsingError: an expected field is missing on the chosen path.
        """
        url = watch_url(self.settings, video_id)
        page_html, envelope_text = await asyncio.gather(
            self.downloader.fetch(url),
            self.downloader.fetch_with_headers(f"{url}&pbj=1", self.settings.client_headers),
        )

        envelope = parse_envelope(envelope_text, "watch envelope")
        data, restricted = initial_data(envelope)
        if restricted:
            raise AgeRestrictedError(f"Video {video_id} is age restricted")

        player_response = player_response_from_envelope(envelope)
        if player_response is not None:
            logger.debug(f"{video_id}: using inlined player response")
            return ResolvedPlayer(
                video_id=video_id,
                page_html=page_html,
                initial_data=data,
                player_response=player_response,
            )

        logger.debug(f"{video_id}: falling back to embedded player config")
        config = player_config(page_html)
        player_response = legacy_player_response(player_args(config))
        script_url = player_url(config, self.settings.base_url)
        player_script = await self.downloader.fetch(script_url)
        return ResolvedPlayer(
            video_id=video_id,
            page_html=page_html,
            initial_data=data,
            player_response=player_response,
            player_script=player_script,
        )
