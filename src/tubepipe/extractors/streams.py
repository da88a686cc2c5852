"""Classification of a player response's formats into typed stream items."""

import logging
from collections.abc import Callable

from ..core.errors import ParsingError
from ..core.models import ItagType, StreamItem
from .signature import CipherParams

logger = logging.getLogger(__name__)

FORMATS = "formats"
ADAPTIVE_FORMATS = "adaptiveFormats"


def resolve_format_url(fmt: dict, decrypt_signature: Callable[[str], str]) -> str:
    """Return the playable url of a raw format descriptor.

    A plain ``url`` is used verbatim. Otherwise the ``signatureCipher`` (or
    older ``cipher``) blob is parsed and the decrypted signature appended.
    """
    url = fmt.get("url")
    if isinstance(url, str):
        return url

    cipher = fmt.get("cipher")
    if not isinstance(cipher, str):
        cipher = fmt.get("signatureCipher")
    params = CipherParams.parse(cipher if isinstance(cipher, str) else "")
    return f"{params.url}&{params.sp}={decrypt_signature(params.s)}"


def collect_streams(
    player_response: dict,
    streaming_data_key: str,
    wanted: ItagType,
    decrypt_signature: Callable[[str], str],
) -> dict[str, StreamItem]:
    """Map resolved url -> StreamItem for one format list.

    Entries that fail typed deserialization are skipped. Two formats
    resolving to the same url collapse into the later one.

    Raises:
        ParsingError: the player response has no ``streamingData`` object.
    """
    streaming_data = player_response.get("streamingData")
    if not isinstance(streaming_data, dict):
        raise ParsingError(
            "Streaming data not found in player response", ParsingError.MISSING
        )

    formats = streaming_data.get(streaming_data_key)
    if not isinstance(formats, list):
        return {}

    streams: dict[str, StreamItem] = {}
    for fmt in formats:
        if not isinstance(fmt, dict):
            continue
        try:
            item = StreamItem.from_format(fmt)
        except ParsingError as e:
            logger.debug(f"Skipping malformed format {fmt.get('itag')}: {e}")
            continue
        if not item.matches(wanted):
            continue

        item.url = resolve_format_url(fmt, decrypt_signature)
        if item.url in streams:
            logger.debug(f"itag {item.itag} shares its url with itag {streams[item.url].itag}")
        streams[item.url] = item
    return streams
