"""Unwrapping of search responses into raw renderer items and continuation tokens.

Two document shapes are understood:

- the initial results page (``contents.twoColumnSearchResultsRenderer``),
  whose primary contents are either a section list or a rich grid
- a continuation batch (``onResponseReceivedCommands``), whose first
  command appends more renderers

Every element of those lists is classified into one of the wrapper
variants below. Anything unrecognized is dropped, so new renderer types
upstream degrade to fewer results instead of a failed search.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

RawItem = dict[str, Any]

# Wrappers that hold exactly one renderer under "content"
SINGLE_ITEM_WRAPPERS = ("richItemRenderer", "richSectionRenderer")


@dataclass
class ItemSection:
    """An itemSectionRenderer holding a list of renderers."""

    contents: list[RawItem]


@dataclass
class SingleItem:
    """A rich item/section wrapper holding a single renderer."""

    content: RawItem


@dataclass
class ContinuationMarker:
    """A continuationItemRenderer pointing at the next page."""

    token: str


Wrapper = ItemSection | SingleItem | ContinuationMarker


@dataclass
class UnwrappedPage:
    """Raw renderers of one page plus the token for the next one, if any."""

    raw_items: list[RawItem] = field(default_factory=list)
    continuation: str | None = None


@dataclass
class SearchResponse:
    """The recognized top level of an initial results document."""

    primary_contents: dict[str, Any]
    estimated_results: int = 0


def dig(obj: Any, *path: str | int) -> Any:
    """Follow a path of dict keys and list indices, returning None on any miss."""
    for key in path:
        if isinstance(key, int):
            if not isinstance(obj, list) or not -len(obj) <= key < len(obj):
                return None
        elif not isinstance(obj, dict):
            return None
        elif key not in obj:
            return None
        obj = obj[key]
    return obj


def classify(element: Any) -> Wrapper | None:
    """Resolve which wrapper variant an element is, or None if unrecognized."""
    if not isinstance(element, dict):
        return None

    if "itemSectionRenderer" in element:
        contents = dig(element, "itemSectionRenderer", "contents")
        if isinstance(contents, list):
            return ItemSection([item for item in contents if isinstance(item, dict)])
        return None

    for wrapper in SINGLE_ITEM_WRAPPERS:
        if wrapper in element:
            content = dig(element, wrapper, "content")
            if isinstance(content, dict):
                return SingleItem(content)
            return None

    if "continuationItemRenderer" in element:
        token = dig(
            element,
            "continuationItemRenderer",
            "continuationEndpoint",
            "continuationCommand",
            "token",
        )
        if isinstance(token, str) and token:
            return ContinuationMarker(token)

    return None


def _primary_list(primary_contents: Any) -> list | None:
    """Return the element list of a section list or rich grid."""
    for variant in ("sectionListRenderer", "richGridRenderer"):
        contents = dig(primary_contents, variant, "contents")
        if isinstance(contents, list):
            return contents
    return None


def parse_search_response(data: Any) -> SearchResponse | None:
    """Recognize an initial results document, or return None."""
    primary = dig(data, "contents", "twoColumnSearchResultsRenderer", "primaryContents")
    if _primary_list(primary) is None:
        return None

    return SearchResponse(
        primary_contents=primary,
        estimated_results=parse_estimated_results(data.get("estimatedResults")),
    )


def parse_estimated_results(value: Any) -> int:
    """Coerce the platform's estimated result count, defaulting to 0."""
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        return 0
    # JSON decoding accepts NaN and Infinity, neither converts to int
    try:
        return int(float(value)) if isinstance(value, str) else int(value)
    except (ValueError, OverflowError):
        return 0


def parse_wrapper(primary_contents: Any) -> UnwrappedPage:
    """Extract raw items and the continuation from initial-page primary contents.

    Only the first item section contributes items; rich item wrappers
    (grid layout) contribute their single renderer each.
    """
    elements = _primary_list(primary_contents)
    if elements is None:
        return UnwrappedPage()

    page = UnwrappedPage()
    seen_section = False
    for element in elements:
        wrapper = classify(element)
        if isinstance(wrapper, ItemSection):
            if not seen_section:
                page.raw_items.extend(wrapper.contents)
                seen_section = True
        elif isinstance(wrapper, SingleItem):
            page.raw_items.append(wrapper.content)
        elif isinstance(wrapper, ContinuationMarker):
            if page.continuation is None:
                page.continuation = wrapper.token
    return page


def parse_continuation_response(data: Any) -> list | None:
    """Return the appended items of a continuation batch, or None if unrecognized."""
    commands = dig(data, "onResponseReceivedCommands")
    if not isinstance(commands, list) or not commands:
        return None
    items = dig(commands, 0, "appendContinuationItemsAction", "continuationItems")
    if not isinstance(items, list):
        return None
    return items


def parse_continuation_wrapper(continuation_items: list) -> UnwrappedPage:
    """Flatten a continuation batch into raw items and the next token."""
    page = UnwrappedPage()
    for element in continuation_items:
        wrapper = classify(element)
        if isinstance(wrapper, ItemSection):
            page.raw_items.extend(wrapper.contents)
        elif isinstance(wrapper, SingleItem):
            page.raw_items.append(wrapper.content)
        elif isinstance(wrapper, ContinuationMarker):
            if page.continuation is None:
                page.continuation = wrapper.token
    return page


def unwrap(data: Any) -> UnwrappedPage:
    """Unwrap either document shape.

    An unrecognized document yields an empty page with no continuation.
    """
    if isinstance(data, dict) and "onResponseReceivedCommands" in data:
        items = parse_continuation_response(data)
        if items is None:
            logger.debug("Unrecognized continuation response shape")
            return UnwrappedPage()
        return parse_continuation_wrapper(items)

    response = parse_search_response(data)
    if response is None:
        logger.debug("Unrecognized search response shape")
        return UnwrappedPage()
    return parse_wrapper(response.primary_contents)


def get_playlist_params(data: Any) -> str | None:
    """Find the filter params that restrict a search to playlists.

    Lives in the search filter dialog: second group, third filter.
    """
    groups = dig(
        data,
        "header",
        "searchHeaderRenderer",
        "searchFilterButton",
        "buttonRenderer",
        "command",
        "openPopupAction",
        "popup",
        "searchFilterOptionsDialogRenderer",
        "groups",
    )
    params = dig(
        groups,
        1,
        "searchFilterGroupRenderer",
        "filters",
        2,
        "searchFilterRenderer",
        "navigationEndpoint",
        "searchEndpoint",
        "params",
    )
    if isinstance(params, str) and params:
        return params
    return None
