"""The paginated extraction protocol shared by every listing endpoint.

A page is fetched as a ``pbj=1`` envelope, its content node is found by an
endpoint-specific key path, child nodes are classified by renderer key, and
the continuation node (if any) yields the next page's url. Callers drive the
loop; ``next_url is None`` marks the last page.
"""

import logging
from dataclasses import dataclass
from typing import Any

from ..api.base import Downloader
from ..core.errors import NothingFoundError, ParsingError
from ..core.models import Page
from ..core.parsing import Key, get_path
from ..core.settings import ExtractorSettings
from .envelope import BROWSE_RESPONSE_INDEX, parse_envelope, response_at
from .items import SEARCH_RENDERERS, InfoItem, ListItem, classify_item

logger = logging.getLogger(__name__)

# Nodes that mark a listing as genuinely empty
EMPTY_RESULT_MARKERS = ("backgroundPromoRenderer",)


@dataclass(frozen=True)
class PageLayout:
    """Where one endpoint family keeps its items and its continuation.

    With ``section_path`` set, ``content_path`` leads to a list of sections
    and the items of every section found at ``section_path`` are joined.
    """

    name: str
    content_path: tuple[Key, ...]
    continuation_path: tuple[Key, ...] | None = None
    section_path: tuple[Key, ...] | None = None
    renderers: tuple[tuple[str, type[InfoItem]], ...] = SEARCH_RENDERERS
    envelope_index: int = BROWSE_RESPONSE_INDEX


def is_empty_marker(node: Any) -> bool:
    return isinstance(node, dict) and any(key in node for key in EMPTY_RESULT_MARKERS)


def is_empty_listing(nodes: list) -> bool:
    """True when there are no content nodes or only empty-result markers."""
    return all(is_empty_marker(node) for node in nodes)


def collect_items(
    nodes: list, renderers: tuple[tuple[str, type[InfoItem]], ...] = SEARCH_RENDERERS
) -> list[ListItem]:
    """Classify content nodes, dropping the ones no renderer key matches."""
    items: list[ListItem] = []
    for node in nodes:
        item = classify_item(node, renderers)
        if item is None:
            keys = ", ".join(node) if isinstance(node, dict) else type(node).__name__
            logger.debug(f"Skipping unclassified node ({keys})")
            continue
        items.append(item)
    return items


def content_nodes(response: dict, layout: PageLayout) -> list:
    """Walk ``layout.content_path`` (and sections) to the raw child nodes.

    Raises:
        NothingFoundError: a hop on the content path is absent.
        ParsingError: the content node is not a list.
    """
    node = get_path(response, *layout.content_path)
    if node is None:
        path = "/".join(str(k) for k in layout.content_path)
        raise NothingFoundError(f"{layout.name}: nothing found at '{path}'")
    if not isinstance(node, list):
        raise ParsingError.wrong_type(f"{layout.name} content", list, node)

    if layout.section_path is None:
        return node

    nodes: list = []
    for section in node:
        children = get_path(section, *layout.section_path)
        if isinstance(children, list):
            nodes.extend(children)
    return nodes


def continuation_url(continuations: Any, base_url: str = "https://www.youtube.com") -> str | None:
    """Build the ``browse_ajax`` url from a ``continuations`` node, or None."""
    data = get_path(continuations, 0, "nextContinuationData")
    token = get_path(data, "continuation")
    tracking = get_path(data, "clickTrackingParams")
    if not isinstance(token, str) or not isinstance(tracking, str):
        return None
    return f"{base_url}/browse_ajax?ctoken={token}&continuation={token}&itct={tracking}"


def page_from_response(
    response: dict, layout: PageLayout, base_url: str = "https://www.youtube.com"
) -> Page[ListItem]:
    """Extract one page from an already-decoded response.

    Raises:
        NothingFoundError: the content node is absent.
    """
    nodes = content_nodes(response, layout)
    if nodes and is_empty_listing(nodes):
        logger.debug(f"{layout.name}: empty result marker")
        return Page(items=[], next_url=None)

    items = collect_items(nodes, layout.renderers)
    next_url = None
    if layout.continuation_path is not None:
        next_url = continuation_url(get_path(response, *layout.continuation_path), base_url)
    return Page(items=items, next_url=next_url)


async def fetch_response(
    downloader: Downloader,
    url: str,
    settings: ExtractorSettings,
    envelope_index: int = BROWSE_RESPONSE_INDEX,
) -> dict:
    """Fetch ``url`` with the client identity headers and return its response object.

    Raises:
        DownloadError: the fetch failed.
        ParsingError: the body is not an envelope carrying a response.
    """
    body = await downloader.fetch_with_headers(url, settings.client_headers)
    envelope = parse_envelope(body, url)
    return response_at(envelope, envelope_index)


async def fetch_page(
    downloader: Downloader,
    url: str,
    layout: PageLayout,
    settings: ExtractorSettings | None = None,
) -> Page[ListItem]:
    """Fetch and extract one page of a listing."""
    settings = settings or ExtractorSettings()
    response = await fetch_response(downloader, url, settings, layout.envelope_index)
    page = page_from_response(response, layout, settings.base_url)
    logger.debug(
        f"{layout.name}: {len(page.items)} items, "
        f"{'last page' if page.is_last else 'more pages'}"
    )
    return page
