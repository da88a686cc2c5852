"""Helpers for walking the loosely structured JSON the site returns."""

import html
import json
import logging
import re
from typing import Any
from urllib.parse import parse_qsl

from .errors import ParsingError

logger = logging.getLogger(__name__)

# Lookup key: a dict key or a list index
Key = str | int

_MULTIPLIERS = {"k": 1_000, "m": 1_000_000, "b": 1_000_000_000}
_NUMBER_WORD_RE = re.compile(r"([\d.,]+)\s*(?:([kmb])(?![a-z]))?", re.IGNORECASE)


def _step(node: Any, key: Key) -> Any:
    if isinstance(key, int):
        if isinstance(node, list) and -len(node) <= key < len(node):
            return node[key]
        return None
    if isinstance(node, dict):
        return node.get(key)
    return None


def get_path(node: Any, *keys: Key, default: Any = None) -> Any:
    """Follow ``keys`` through nested dicts/lists, stopping at the first absent hop.

    Returns ``default`` when any hop is missing.
    """
    for key in keys:
        node = _step(node, key)
        if node is None:
            return default
    return node


def require_path(node: Any, *keys: Key, kind: type | None = None, what: str = "") -> Any:
    """Like :func:`get_path` but raise ParsingError naming the failing hop.

    A missing hop raises with ``ParsingError.MISSING``; a final value that is
    not an instance of ``kind`` raises with ``ParsingError.WRONG_TYPE``.
    """
    walked: list[str] = []
    for key in keys:
        walked.append(str(key))
        node = _step(node, key)
        if node is None:
            label = what or "/".join(walked)
            raise ParsingError(f"{label}: '{'/'.join(walked)}' not found", ParsingError.MISSING)
    if kind is not None and not isinstance(node, kind):
        raise ParsingError.wrong_type(what or "/".join(walked), kind, node)
    return node


def loads(text: str, what: str) -> Any:
    """Decode a JSON document, converting decode failures to ParsingError."""
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        raise ParsingError(f"{what} is not valid JSON: {e}") from e


def parse_query_map(query: str) -> dict[str, str]:
    """Split a ``k=v&k2=v2`` blob into a percent-decoded mapping."""
    return dict(parse_qsl(query, keep_blank_values=True))


def fix_thumbnail_url(url: str) -> str:
    """Make protocol-relative and http thumbnail urls https."""
    if url.startswith("//"):
        return "https:" + url
    if url.startswith("http://"):
        return "https://" + url[len("http://"):]
    return url


def url_from_navigation_endpoint(endpoint: dict) -> str:
    """Resolve a ``navigationEndpoint`` node to an absolute url.

    Raises:
        ParsingError: the endpoint has no recognizable target.
    """
    url = get_path(endpoint, "urlEndpoint", "url")
    if isinstance(url, str):
        if url.startswith("/redirect?"):
            # Redirect links wrap the real target in the q parameter
            target = parse_query_map(url[len("/redirect?"):]).get("q")
            if target:
                return target
        elif url.startswith("http"):
            return url
        return "https://www.youtube.com" + url

    browse = endpoint.get("browseEndpoint") if isinstance(endpoint, dict) else None
    if isinstance(browse, dict):
        canonical = browse.get("canonicalBaseUrl")
        browse_id = browse.get("browseId")
        if isinstance(browse_id, str) and browse_id.startswith("UC"):
            return f"https://www.youtube.com/channel/{browse_id}"
        if isinstance(canonical, str) and canonical:
            return "https://www.youtube.com" + canonical
        raise ParsingError("browseEndpoint has neither a channel id nor a canonical url")

    video_id = get_path(endpoint, "watchEndpoint", "videoId")
    if isinstance(video_id, str):
        url = f"https://www.youtube.com/watch?v={video_id}"
        playlist_id = get_path(endpoint, "watchEndpoint", "playlistId")
        if isinstance(playlist_id, str):
            url += f"&list={playlist_id}"
        start = get_path(endpoint, "watchEndpoint", "startTimeSeconds")
        if isinstance(start, int):
            url += f"&t={start}"
        return url

    if get_path(endpoint, "watchPlaylistEndpoint") is not None:
        playlist_id = get_path(endpoint, "watchPlaylistEndpoint", "playlistId", default="")
        return f"https://www.youtube.com/playlist?list={playlist_id}"

    raise ParsingError("Unrecognized navigation endpoint")


def text_from_object(node: Any, as_html: bool = False) -> str | None:
    """Flatten a ``simpleText``/``runs`` text node.

    With ``as_html`` set, runs carrying a navigation endpoint are rendered as
    links, bold/italic runs are wrapped, and newlines become ``<br/>``.

    Returns None when the node carries neither form.
    """
    if not isinstance(node, dict):
        return None
    simple = node.get("simpleText")
    if isinstance(simple, str):
        return simple

    runs = node.get("runs")
    if not isinstance(runs, list):
        return None

    parts: list[str] = []
    for run in runs:
        text = run.get("text") if isinstance(run, dict) else None
        if not isinstance(text, str):
            continue
        if not as_html:
            parts.append(text)
            continue

        text = html.escape(text, quote=False)
        endpoint = run.get("navigationEndpoint")
        if isinstance(endpoint, dict):
            try:
                url = url_from_navigation_endpoint(endpoint)
            except ParsingError as e:
                logger.debug(f"Run link dropped: {e}")
            else:
                text = f'<a href="{html.escape(url)}">{text}</a>'
        if run.get("bold"):
            text = f"<b>{text}</b>"
        if run.get("italics"):
            text = f"<i>{text}</i>"
        parts.append(text)

    result = "".join(parts)
    if as_html:
        result = result.replace("\n", "<br/>")
    return result


def remove_non_digit_chars(text: str) -> int:
    """Parse an integer out of a decorated count such as ``'1,234 views'``.

    Raises:
        ParsingError: no digits present.
    """
    digits = "".join(ch for ch in text if ch.isdigit())
    if not digits:
        raise ParsingError(f"No digits in {text!r}")
    return int(digits)


def mixed_number_word_parse(text: str) -> int:
    """Parse counts like ``'1.2M subscribers'`` or ``'532K'``.

    Raises:
        ParsingError: the text carries no number.
    """
    match = _NUMBER_WORD_RE.search(text)
    if not match:
        raise ParsingError(f"No number in {text!r}")
    number, suffix = match.groups()
    if not suffix:
        return remove_non_digit_chars(number)
    try:
        value = float(number.replace(",", "."))
    except ValueError as e:
        raise ParsingError(f"Cannot parse {text!r}: {e}") from e
    return int(round(value * _MULTIPLIERS[suffix.lower()]))
