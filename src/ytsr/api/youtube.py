"""YouTube search client using the results page and the InnerTube search API."""

import asyncio
import logging
from typing import Any

import aiohttp

from ..core.errors import SearchError, TransportError
from ..core.models import ResultType, SearchResult, SearchResults
from ..core.options import NormalizedOptions, SearchOptions, build_post_context, check_args
from ..core.session_cache import CacheKey, SessionCache, default_cache
from ..core.settings import SearchSettings
from .base import BaseApiClient
from .extractor import ParsedBody, parse_body
from .parser import parse_item
from .unwrap import (
    get_playlist_params,
    parse_continuation_response,
    parse_continuation_wrapper,
    parse_search_response,
    parse_wrapper,
)

logger = logging.getLogger(__name__)

BASE_SEARCH_URL = "https://www.youtube.com/results"
BASE_API_URL = "https://www.youtube.com/youtubei/v1/search"

MAX_ATTEMPTS = 3
CACHE_RESET_ATTEMPT = 2  # Attempts count down; the cache is dropped before this one
MAX_CONTINUATION_PAGES = 50

# Used to build requests when nothing fresher is known; never written to the cache
FALLBACK_CLIENT_VERSION = "2.20240606.06.00"
FALLBACK_PLAYLIST_PARAMS = "EgIQAw%3D%3D"

RECOVERABLE_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, TransportError)


class YouTubeSearchClient(BaseApiClient):
    """Anonymous YouTube search.

    Each search fetches the results page (unless the session cache already
    knows the client version and playlist filter), reuses the JSON embedded
    in it when possible, falls back to the InnerTube search API otherwise,
    and then follows continuation tokens until the limit is met.

    Whole attempts are retried up to MAX_ATTEMPTS times. The session cache
    is cleared before the second attempt in case a stale client version or
    filter value caused the first to fail.
    """

    def __init__(
        self,
        settings: SearchSettings | None = None,
        cache: SessionCache | None = None,
    ) -> None:
        super().__init__(settings)
        self.cache = cache if cache is not None else default_cache

    @property
    def name(self) -> str:
        return "YouTube"

    async def search(self, query: Any, options: SearchOptions | None = None) -> SearchResults:
        """Search for videos or playlists.

        Raises:
            InvalidQueryError: If the query is missing or malformed.
            SearchError: If no attempt produced searchable data.
        """
        last_error: BaseException | None = None

        for attempt in range(MAX_ATTEMPTS, 0, -1):
            if attempt == CACHE_RESET_ATTEMPT:
                self.cache.clear()

            # Re-normalized per attempt: the limit is consumed as results accumulate
            opts = check_args(query, options, self.settings)

            try:
                results = await self._attempt(opts)
            except RECOVERABLE_ERRORS as e:
                last_error = e
                logger.warning(
                    f"{self.name}: Search attempt {MAX_ATTEMPTS - attempt + 1}/{MAX_ATTEMPTS} "
                    f"for {opts.search!r} failed: {e}"
                )
                continue

            if results is not None:
                return results

            logger.warning(
                f"{self.name}: Search attempt {MAX_ATTEMPTS - attempt + 1}/{MAX_ATTEMPTS} "
                f"for {opts.search!r} returned no searchable data"
            )

        logger.error(f"{self.name}: All {MAX_ATTEMPTS} search attempts failed for {query!r}")
        raise SearchError("Unable to retrieve searchable data") from last_error

    async def _attempt(self, opts: NormalizedOptions) -> SearchResults | None:
        """Run one full search attempt.

        Returns None when no usable JSON was obtained, so the caller can
        retry. Transport errors propagate for the same reason.
        """
        parsed = ParsedBody()

        # Safe search needs the page fetch: its user preference can't be
        # reproduced from cached values alone
        if opts.safe_search or not self.cache.has_all():
            body = await self.fetch_text(BASE_SEARCH_URL, opts.request_options, params=opts.query)
            parsed = parse_body(body)
            self._save_cache(parsed)
        else:
            logger.debug(f"{self.name}: Session cache warm, skipping results page fetch")

        client_version = (
            parsed.client_version
            or self.cache.get(CacheKey.CLIENT_VERSION)
            or FALLBACK_CLIENT_VERSION
        )
        context = build_post_context(client_version, opts)

        data = parsed.json
        if opts.type is ResultType.PLAYLIST:
            params = self.cache.get(CacheKey.PLAYLIST_PARAMS) or FALLBACK_PLAYLIST_PARAMS
            data = await self.post_json(
                BASE_API_URL,
                {"context": context, "params": params, "query": opts.search},
                opts.request_options,
            )
        elif opts.safe_search or data is None:
            payload: dict[str, Any] = {"context": context, "query": opts.search}
            if "sp" in opts.query:
                payload["params"] = opts.query["sp"]
            data = await self.post_json(BASE_API_URL, payload, opts.request_options)

        if data is None:
            return None

        response = parse_search_response(data)
        if response is None:
            logger.debug(f"{self.name}: Unrecognized search response shape")
            return None

        page = parse_wrapper(response.primary_contents)
        items = self._collect(page.raw_items, opts)

        if page.continuation and opts.limit > 0:
            items.extend(await self.walk_continuations(page.continuation, context, opts))

        return SearchResults(
            query=opts.search,
            items=items,
            results=response.estimated_results,
        )

    def _save_cache(self, parsed: ParsedBody) -> None:
        """Remember the session values a results page revealed."""
        if parsed.client_version:
            self.cache.set(CacheKey.CLIENT_VERSION, parsed.client_version)
        playlist_params = get_playlist_params(parsed.json)
        if playlist_params:
            self.cache.set(CacheKey.PLAYLIST_PARAMS, playlist_params)

    @staticmethod
    def _collect(raw_items: list[dict], opts: NormalizedOptions) -> list[SearchResult]:
        """Normalize raw renderers, keeping requested-type results within the limit.

        Decrements opts.limit by the number of results kept.
        """
        kept: list[SearchResult] = []
        for raw in raw_items:
            if len(kept) >= opts.limit:
                break
            item = parse_item(raw)
            if item is not None and item.type is opts.type:
                kept.append(item)

        opts.limit -= len(kept)
        return kept

    async def walk_continuations(
        self,
        token: str,
        context: dict[str, Any],
        opts: NormalizedOptions,
    ) -> list[SearchResult]:
        """Follow continuation tokens until the limit is met or pages run out.

        Requests are strictly sequential since each token comes from the
        previous response. A failed or unrecognized page ends the walk and
        keeps what was gathered so far.
        """
        results: list[SearchResult] = []
        pages = 0

        while token and opts.limit > 0:
            if pages >= MAX_CONTINUATION_PAGES:
                logger.warning(
                    f"{self.name}: Stopping after {pages} continuation pages "
                    f"with {opts.limit} results still wanted"
                )
                break
            pages += 1

            try:
                data = await self.post_json(
                    BASE_API_URL,
                    {"context": context, "continuation": token},
                    opts.request_options,
                )
            except RECOVERABLE_ERRORS as e:
                logger.debug(f"{self.name}: Continuation page {pages} failed: {e}")
                break

            continuation_items = parse_continuation_response(data)
            if continuation_items is None:
                logger.debug(f"{self.name}: Unrecognized continuation page {pages}")
                break

            page = parse_continuation_wrapper(continuation_items)
            results.extend(self._collect(page.raw_items, opts))
            token = page.continuation

        return results
