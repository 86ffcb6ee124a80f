"""HTTP clients and response parsing for YouTube search."""

from .base import BaseApiClient
from .youtube import YouTubeSearchClient

__all__ = [
    "BaseApiClient",
    "YouTubeSearchClient",
]
