"""Decoding of the ``pbj=1`` envelope responses.

The JSON-only endpoints answer with a top-level array; the object of
interest sits at a fixed, endpoint-specific index.
"""

import logging

from ..core.errors import ParsingError
from ..core.parsing import get_path, loads

logger = logging.getLogger(__name__)

# Index of the "response" object on browse/search/playlist envelopes
BROWSE_RESPONSE_INDEX = 1
# Index of the player response on watch envelopes
WATCH_PLAYER_INDEX = 2


def parse_envelope(text: str, what: str = "envelope") -> list:
    """Decode a raw body into the envelope array.

    Raises:
        ParsingError: not JSON, or not an array.
    """
    envelope = loads(text, what)
    if not isinstance(envelope, list):
        raise ParsingError.wrong_type(what, list, envelope)
    return envelope


def response_at(envelope: list, index: int, key: str = "response") -> dict:
    """Return ``envelope[index][key]``.

    Raises:
        ParsingError: the index or key is absent, or the value is not an object.
    """
    if not -len(envelope) <= index < len(envelope):
        raise ParsingError(f"envelope has no index {index}", ParsingError.MISSING)
    entry = envelope[index]
    if not isinstance(entry, dict):
        raise ParsingError.wrong_type(f"envelope[{index}]", dict, entry)
    if key not in entry:
        raise ParsingError(f"envelope[{index}] has no '{key}'", ParsingError.MISSING)
    value = entry[key]
    if not isinstance(value, dict):
        raise ParsingError.wrong_type(f"envelope[{index}].{key}", dict, value)
    return value


def initial_data(envelope: list) -> tuple[dict, bool]:
    """Locate the watch page's initial data in a watch envelope.

    The response sits at index 3 normally. When it is already present at
    index 2 the page is the restricted variant.

    Returns:
        ``(response, restricted)``

    Raises:
        ParsingError: neither index 2 nor index 3 carries a response.
    """
    if len(envelope) <= 2:
        raise ParsingError("watch envelope has no index 2", ParsingError.MISSING)
    if not isinstance(envelope[2], dict):
        raise ParsingError.wrong_type("envelope[2]", dict, envelope[2])

    if "response" in envelope[2]:
        return response_at(envelope, 2), True

    if len(envelope) <= 3:
        raise ParsingError("watch envelope has no index 3", ParsingError.MISSING)
    return response_at(envelope, 3), False


def player_response_from_envelope(envelope: list) -> dict | None:
    """Return the inlined player response, or None when the legacy path is needed.

    Only a player response carrying non-empty ``streamingData`` counts.
    """
    player_response = get_path(envelope, WATCH_PLAYER_INDEX, "playerResponse")
    if not isinstance(player_response, dict):
        return None
    if not player_response.get("streamingData"):
        logger.debug("Inlined player response has no streamingData")
        return None
    return player_response


def strip_jsonp(text: str, prefix: str = "jp(", suffix: str = ")") -> str:
    """Remove a JSONP wrapper.

    Raises:
        ParsingError: the body is not wrapped as expected.
    """
    body = text.strip()
    if not body.startswith(prefix) or not body.endswith(suffix):
        raise ParsingError(f"response is not wrapped in {prefix}...{suffix}")
    return body[len(prefix):len(body) - len(suffix)]
