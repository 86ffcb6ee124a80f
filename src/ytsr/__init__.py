"""Anonymous YouTube video and playlist search."""

from .api import YouTubeSearchClient
from .core import (
    Author,
    CacheKey,
    Image,
    InvalidQueryError,
    Playlist,
    RequestOptions,
    ResultType,
    SearchError,
    SearchOptions,
    SearchResult,
    SearchResults,
    SearchSettings,
    SessionCache,
    TransportError,
    Video,
    YtsrError,
)

__version__ = "1.0.0"


async def search(
    query: str,
    *,
    limit: int | None = None,
    safe_search: bool | None = None,
    type: ResultType | str = ResultType.VIDEO,
    hl: str | None = None,
    gl: str | None = None,
    utc_offset_minutes: int | None = None,
    request_options: RequestOptions | None = None,
    settings: SearchSettings | None = None,
    cache: SessionCache | None = None,
    client: YouTubeSearchClient | None = None,
) -> SearchResults:
    """Search YouTube for videos or playlists.

    Args:
        query: Search term, or a full results URL carrying a filter (``sp``).
        limit: Maximum number of results (default 10).
        safe_search: Ask YouTube to restrict mature content.
        type: "video" or "playlist"; anything else searches videos.
        hl: Interface language, e.g. "en".
        gl: Region, e.g. "US".
        utc_offset_minutes: Client UTC offset sent with API requests.
        request_options: Extra headers, timeout and proxy for every request.
        settings: Defaults for options left unset. Ignored when ``client`` is given.
        cache: Session cache to use instead of the process-wide one.
            Ignored when ``client`` is given.
        client: Existing client to reuse (its session stays open).

    Returns:
        SearchResults with the query, the items, and the platform's
        estimated total result count.

    Raises:
        InvalidQueryError: If the query is missing or malformed.
        SearchError: If every attempt failed.
    """
    options = SearchOptions(
        limit=limit,
        safe_search=safe_search,
        type=type,
        hl=hl,
        gl=gl,
        utc_offset_minutes=utc_offset_minutes,
        request_options=request_options,
    )
    if client is not None:
        return await client.search(query, options)

    async with YouTubeSearchClient(settings=settings, cache=cache) as owned_client:
        return await owned_client.search(query, options)


__all__ = [
    "search",
    "YouTubeSearchClient",
    "Author",
    "CacheKey",
    "Image",
    "Playlist",
    "ResultType",
    "SearchResult",
    "SearchResults",
    "SearchSettings",
    "SessionCache",
    "RequestOptions",
    "SearchOptions",
    "Video",
    "YtsrError",
    "InvalidQueryError",
    "SearchError",
    "TransportError",
]
