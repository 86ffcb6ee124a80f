"""Tests for the search orchestrator and pagination walker."""

import aiohttp
import pytest
from helpers import (
    continuation_document,
    html_page,
    playlist_renderer,
    search_document,
    video_renderer,
    videos,
)

from ytsr import search
from ytsr.api import youtube
from ytsr.api.youtube import BASE_API_URL, BASE_SEARCH_URL, FALLBACK_CLIENT_VERSION
from ytsr.core.errors import InvalidQueryError, SearchError, TransportError
from ytsr.core.models import Playlist, ResultType, Video
from ytsr.core.options import SearchOptions
from ytsr.core.session_cache import CacheKey

TRUNCATED_PAGE = '<script>var ytInitialData = {"contents": {"a": 1};</script>'


def _warm(cache, params="cachedParams"):
    cache.set(CacheKey.CLIENT_VERSION, "2.20250505.00.00")
    cache.set(CacheKey.PLAYLIST_PARAMS, params)


def _payload(mock, index=0):
    return mock.await_args_list[index].args[1]


# --- initial page ---


@pytest.mark.asyncio
async def test_results_from_page_without_post(client, cache):
    client.fetch_text.return_value = html_page(search_document(videos(3)))

    results = await client.search("test", SearchOptions(limit=1))

    assert len(results.items) == 1
    assert isinstance(results.items[0], Video)
    assert results.query == "test"
    assert results.results >= 1
    client.post_json.assert_not_awaited()

    url = client.fetch_text.await_args.args[0]
    params = client.fetch_text.await_args.kwargs["params"]
    assert url == BASE_SEARCH_URL
    assert params == {"gl": "US", "hl": "en", "search_query": "test"}
    assert cache.get(CacheKey.CLIENT_VERSION) == "2.20250101.00.00"


@pytest.mark.asyncio
async def test_estimated_results_not_adjusted(client):
    client.fetch_text.return_value = html_page(search_document(videos(2), estimated="123456"))

    results = await client.search("cats")

    assert len(results.items) == 2
    assert results.results == 123456


@pytest.mark.asyncio
async def test_zero_results_is_success(client):
    client.fetch_text.return_value = html_page(search_document([]))

    results = await client.search("qwxzzvq")

    assert results.items == []
    assert results.results == 1000


@pytest.mark.asyncio
async def test_non_finite_estimate_reads_as_zero(client):
    doc = search_document(videos(2))
    doc["estimatedResults"] = float("nan")
    client.fetch_text.return_value = html_page(doc)

    results = await client.search("cats")

    assert len(results.items) == 2
    assert results.results == 0


@pytest.mark.asyncio
async def test_type_filtering(client):
    items = [playlist_renderer(), video_renderer(video_id="v1"), video_renderer(video_id="v2")]
    client.fetch_text.return_value = html_page(search_document(items))

    results = await client.search("cats")

    assert [item.id for item in results.items] == ["v1", "v2"]


@pytest.mark.asyncio
async def test_page_fetch_saves_playlist_params(client, cache):
    client.fetch_text.return_value = html_page(
        search_document(videos(1), playlist_params="EgIQAw%3D%3D", client_version="2.2025")
    )

    await client.search("cats")

    assert cache.get(CacheKey.CLIENT_VERSION) == "2.2025"
    assert cache.get(CacheKey.PLAYLIST_PARAMS) == "EgIQAw%3D%3D"
    assert cache.has_all()


# --- direct API fallback ---


@pytest.mark.asyncio
async def test_truncated_page_falls_back_to_post(client, cache):
    client.fetch_text.return_value = TRUNCATED_PAGE
    client.post_json.return_value = search_document(videos(2))

    results = await client.search("cats")

    assert len(results.items) == 2
    client.post_json.assert_awaited_once()
    assert client.post_json.await_args.args[0] == BASE_API_URL
    payload = _payload(client.post_json)
    assert payload["query"] == "cats"
    assert "params" not in payload
    assert payload["context"]["client"]["clientVersion"] == FALLBACK_CLIENT_VERSION
    assert cache.get(CacheKey.CLIENT_VERSION) is None


@pytest.mark.asyncio
async def test_warm_cache_skips_page(client, cache):
    _warm(cache)
    client.post_json.return_value = search_document(videos(2))

    results = await client.search("cats")

    assert len(results.items) == 2
    client.fetch_text.assert_not_awaited()
    payload = _payload(client.post_json)
    assert payload["context"]["client"]["clientVersion"] == "2.20250505.00.00"


@pytest.mark.asyncio
async def test_safe_search_always_fetches_page(client, cache):
    _warm(cache)
    client.fetch_text.return_value = html_page(search_document(videos(5)))
    client.post_json.return_value = search_document(videos(2, prefix="safe"))

    results = await client.search("cats", SearchOptions(safe_search=True))

    client.fetch_text.assert_awaited_once()
    assert [item.id for item in results.items] == ["safe00000000", "safe00000001"]
    payload = _payload(client.post_json)
    assert payload["context"]["user"]["enableSafetyMode"] is True


@pytest.mark.asyncio
async def test_filter_url_forwards_sp(client):
    client.fetch_text.return_value = TRUNCATED_PAGE
    client.post_json.return_value = search_document(videos(1))

    await client.search("https://www.youtube.com/results?search_query=cats&sp=EgIQAQ%253D%253D")

    payload = _payload(client.post_json)
    assert payload["query"] == "cats"
    assert payload["params"] == "EgIQAQ%3D%3D"


@pytest.mark.asyncio
async def test_playlist_search_uses_cached_params(client, cache):
    _warm(cache)
    client.post_json.return_value = search_document([playlist_renderer(), video_renderer()])

    results = await client.search("mix", SearchOptions(type="playlist"))

    client.fetch_text.assert_not_awaited()
    assert len(results.items) == 1
    assert isinstance(results.items[0], Playlist)
    assert results.items[0].type is ResultType.PLAYLIST
    payload = _payload(client.post_json)
    assert payload["params"] == "cachedParams"
    assert payload["query"] == "mix"


@pytest.mark.asyncio
async def test_playlist_search_cold_cache(client):
    client.fetch_text.return_value = html_page(
        search_document(videos(3), playlist_params="EgIQAw%3D%3D")
    )
    client.post_json.return_value = search_document([playlist_renderer()])

    results = await client.search("mix", SearchOptions(type="playlist"))

    client.fetch_text.assert_awaited_once()
    assert len(results.items) == 1
    assert _payload(client.post_json)["params"] == "EgIQAw%3D%3D"


# --- pagination ---


@pytest.mark.asyncio
async def test_walks_continuations_until_limit(client):
    client.fetch_text.return_value = html_page(search_document(videos(4), token="t1"))
    client.post_json.side_effect = [
        continuation_document(videos(4, prefix="b"), token="t2"),
        continuation_document(videos(4, prefix="c"), token="t3"),
        continuation_document(videos(4, prefix="d"), token="t4"),
    ]

    results = await client.search("cats", SearchOptions(limit=10))

    assert len(results.items) == 10
    assert client.post_json.await_count == 2
    assert _payload(client.post_json, 0)["continuation"] == "t1"
    assert _payload(client.post_json, 1)["continuation"] == "t2"
    assert "query" not in _payload(client.post_json, 0)
    assert results.items[-1].id == "c00000001"


@pytest.mark.asyncio
async def test_walk_stops_when_tokens_run_out(client):
    client.fetch_text.return_value = html_page(search_document(videos(2), token="t1"))
    client.post_json.return_value = continuation_document(videos(3, prefix="b"))

    results = await client.search("cats", SearchOptions(limit=50))

    assert len(results.items) == 5
    client.post_json.assert_awaited_once()


@pytest.mark.asyncio
async def test_no_walk_when_first_page_fills_limit(client):
    client.fetch_text.return_value = html_page(search_document(videos(5), token="t1"))

    results = await client.search("cats", SearchOptions(limit=5))

    assert len(results.items) == 5
    client.post_json.assert_not_awaited()


@pytest.mark.asyncio
async def test_walk_failure_keeps_partial_results(client):
    client.fetch_text.return_value = html_page(search_document(videos(2), token="t1"))
    client.post_json.side_effect = [
        continuation_document(videos(2, prefix="b"), token="t2"),
        aiohttp.ClientConnectionError("reset"),
    ]

    results = await client.search("cats", SearchOptions(limit=20))

    assert len(results.items) == 4
    client.fetch_text.assert_awaited_once()


@pytest.mark.asyncio
async def test_walk_unrecognized_page_keeps_partial_results(client):
    client.fetch_text.return_value = html_page(search_document(videos(2), token="t1"))
    client.post_json.return_value = {"responseContext": {}}

    results = await client.search("cats", SearchOptions(limit=20))

    assert len(results.items) == 2


@pytest.mark.asyncio
async def test_walk_page_cap(client, monkeypatch):
    monkeypatch.setattr(youtube, "MAX_CONTINUATION_PAGES", 2)
    client.fetch_text.return_value = html_page(search_document(videos(1), token="t1"))
    client.post_json.side_effect = lambda *args, **kwargs: continuation_document(
        videos(1, prefix="x"), token="again"
    )

    results = await client.search("cats", SearchOptions(limit=100))

    assert len(results.items) == 3
    assert client.post_json.await_count == 2


# --- retries ---


@pytest.mark.asyncio
async def test_cache_cleared_before_second_attempt(client, cache):
    _warm(cache)
    client.post_json.side_effect = [TransportError("server error", 500)]
    seen_cache_sizes = []

    def fetch(*args, **kwargs):
        seen_cache_sizes.append(len(cache))
        return html_page(search_document(videos(2)))

    client.fetch_text.side_effect = fetch

    results = await client.search("cats")

    assert len(results.items) == 2
    assert seen_cache_sizes == [0]
    assert client.post_json.await_count == 1


@pytest.mark.asyncio
async def test_transport_failure_exhausts_attempts(client):
    client.fetch_text.side_effect = aiohttp.ClientConnectionError("down")

    with pytest.raises(SearchError) as excinfo:
        await client.search("cats")

    assert client.fetch_text.await_count == 3
    assert isinstance(excinfo.value.__cause__, aiohttp.ClientConnectionError)


@pytest.mark.asyncio
async def test_unrecognized_shape_exhausts_attempts(client):
    client.fetch_text.return_value = html_page({"weird": {}})

    with pytest.raises(SearchError, match="Unable to retrieve searchable data"):
        await client.search("cats")

    assert client.fetch_text.await_count == 3
    client.post_json.assert_not_awaited()


@pytest.mark.asyncio
async def test_recovers_on_third_attempt(client):
    client.fetch_text.side_effect = [
        aiohttp.ClientConnectionError("down"),
        TransportError("rate limited", 429),
        html_page(search_document(videos(1))),
    ]

    results = await client.search("cats")

    assert len(results.items) == 1


@pytest.mark.asyncio
async def test_walk_failure_does_not_retry_search(client):
    client.fetch_text.return_value = html_page(search_document(videos(3), token="t1"))
    client.post_json.side_effect = aiohttp.ClientConnectionError("walk failed")

    results = await client.search("cats", SearchOptions(limit=5))

    assert len(results.items) == 3
    assert client.fetch_text.await_count == 1


@pytest.mark.asyncio
async def test_invalid_query_not_retried(client):
    with pytest.raises(InvalidQueryError):
        await client.search("")

    client.fetch_text.assert_not_awaited()


# --- public entry point ---


@pytest.mark.asyncio
async def test_public_search_with_client(client):
    client.fetch_text.return_value = html_page(search_document(videos(4)))

    results = await search("cats", limit=2, client=client)

    assert [item.id for item in results.items] == ["vid00000000", "vid00000001"]
    assert client.fetch_text.await_args.args[1].headers["Cookie"] == "SOCS=CAI"
