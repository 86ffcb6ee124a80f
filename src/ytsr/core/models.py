"""Core data models for ytsr search results."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ResultType(str, Enum):
    """Kinds of search results that can be requested."""

    VIDEO = "video"
    PLAYLIST = "playlist"


class _Entity(BaseModel):
    # Strict: renderer values are never coerced, a wrong type drops the entity
    model_config = ConfigDict(strict=True)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return self.model_dump(mode="json")


class Image(_Entity):
    """A thumbnail or avatar image."""

    url: Optional[str]
    width: int
    height: int


class Author(_Entity):
    """A channel that uploaded a video or owns a playlist."""

    name: str
    channel_id: str
    url: str
    best_avatar: Optional[Image] = None
    avatars: list[Image] = Field(default_factory=list)
    owner_badges: list[str] = Field(default_factory=list)
    verified: bool = False


class Video(_Entity):
    """A single video search result."""

    type: Literal[ResultType.VIDEO] = ResultType.VIDEO
    id: str
    name: str
    url: str
    thumbnail: str = ""
    thumbnails: list[Image] = Field(default_factory=list)
    is_upcoming: bool = False
    upcoming: Optional[int] = None  # Scheduled start, epoch milliseconds
    is_live: bool = False
    badges: list[str] = Field(default_factory=list)
    author: Optional[Author] = None
    description: str = ""
    views: Optional[int] = None
    duration: str = ""
    uploaded_at: str = ""


class Playlist(_Entity):
    """A single playlist search result."""

    type: Literal[ResultType.PLAYLIST] = ResultType.PLAYLIST
    id: str
    name: str
    url: str
    owner: Optional[Author] = None
    published_at: Optional[str] = None
    length: int = 0  # Number of videos in the playlist


SearchResult = Video | Playlist


@dataclass
class SearchResults:
    """Outcome of one top-level search.

    ``results`` is the platform's own estimate of the total number of
    matches and is not adjusted to the length of ``items``.
    """

    query: str
    items: list[SearchResult] = field(default_factory=list)
    results: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "query": self.query,
            "items": [item.to_dict() for item in self.items],
            "results": self.results,
        }
