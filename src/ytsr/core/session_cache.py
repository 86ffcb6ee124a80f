"""Process-wide cache of volatile upstream session parameters."""

import logging
from enum import Enum

logger = logging.getLogger(__name__)


class CacheKey(str, Enum):
    """Names of the session parameters that are worth remembering."""

    CLIENT_VERSION = "clientVersion"
    PLAYLIST_PARAMS = "playlistParams"


class SessionCache:
    """Last-known-good values for the upstream's volatile session parameters.

    Starts empty. Values are replaced whenever a page fetch yields a fresh
    one and only ever removed by an explicit clear(); there is no expiry.
    Staleness shows up as a failed request, which the search retry loop
    answers by clearing the cache.

    Individual get/set calls are atomic under the GIL, which is all the
    sharing between concurrent searches needs: the last writer wins.
    """

    def __init__(self) -> None:
        self._values: dict[CacheKey, str] = {}

    def get(self, key: CacheKey) -> str | None:
        return self._values.get(key)

    def set(self, key: CacheKey, value: str) -> None:
        if self._values.get(key) != value:
            logger.debug(f"Session cache: {key.value} = {value!r}")
        self._values[key] = value

    def has(self, key: CacheKey) -> bool:
        return key in self._values

    def has_all(self) -> bool:
        """Check whether every known parameter has a cached value."""
        return all(key in self._values for key in CacheKey)

    def delete(self, key: CacheKey) -> None:
        self._values.pop(key, None)

    def clear(self) -> None:
        """Forget every cached value."""
        logger.debug("Session cache cleared")
        self._values.clear()

    def __len__(self) -> int:
        return len(self._values)


# Shared by every search in this process unless a caller injects its own
default_cache = SessionCache()
