"""Shared test fixtures for ytsr tests."""

from unittest.mock import AsyncMock

import pytest

from ytsr.api.youtube import YouTubeSearchClient
from ytsr.core.session_cache import SessionCache
from ytsr.core.settings import SearchSettings


@pytest.fixture(autouse=True)
def _no_keepalive_env(monkeypatch):
    monkeypatch.delenv("YTSR_DISABLE_KEEPALIVE", raising=False)


@pytest.fixture
def cache():
    return SessionCache()


@pytest.fixture
def client(cache):
    """A search client whose transport is replaced with mocks."""
    c = YouTubeSearchClient(settings=SearchSettings(), cache=cache)
    c.fetch_text = AsyncMock()
    c.post_json = AsyncMock()
    return c
