"""Core models and utilities for ytsr."""

from .errors import InvalidQueryError, SearchError, TransportError, YtsrError
from .models import Author, Image, Playlist, ResultType, SearchResult, SearchResults, Video
from .options import NormalizedOptions, RequestOptions, SearchOptions, check_args
from .session_cache import CacheKey, SessionCache, default_cache
from .settings import SearchSettings

__all__ = [
    "Author",
    "Image",
    "Playlist",
    "ResultType",
    "SearchResult",
    "SearchResults",
    "Video",
    "CacheKey",
    "SessionCache",
    "default_cache",
    "NormalizedOptions",
    "RequestOptions",
    "SearchOptions",
    "check_args",
    "SearchSettings",
    "YtsrError",
    "InvalidQueryError",
    "SearchError",
    "TransportError",
]
