"""Normalization of individual search renderers into Video and Playlist records."""

import json
import logging
import math
import re
from collections.abc import Callable
from typing import Any
from urllib.parse import urljoin

from pydantic import ValidationError

from ..core.models import Author, Image, Playlist, SearchResult, Video
from .unwrap import dig

logger = logging.getLogger(__name__)

BASE_URL = "https://www.youtube.com/"
BASE_VIDEO_URL = "https://www.youtube.com/watch?v="
BASE_PLAYLIST_URL = "https://www.youtube.com/playlist?list="

LIVE_BADGES = ("LIVE NOW", "LIVE")

_DIGITS_RE = re.compile(r"\D+")
_COUNT_RE = re.compile(r"\d[\d,.]*")


def parse_text(txt: Any) -> str:
    """Flatten a YouTube text object ({simpleText} or {runs}) to a string."""
    if isinstance(txt, str):
        return txt
    if not isinstance(txt, dict):
        return ""
    if isinstance(txt.get("simpleText"), str):
        return txt["simpleText"]
    runs = txt.get("runs")
    if isinstance(runs, list) and all(
        isinstance(run, dict) and isinstance(run.get("text"), str) for run in runs
    ):
        return "".join(run["text"] for run in runs)
    return ""


def parse_integer_from_text(x: Any) -> int:
    """Pull an integer out of text like '1,234,567 views'. No digits gives 0."""
    text = x if isinstance(x, str) else parse_text(x)
    digits = _DIGITS_RE.sub("", text)
    return int(digits) if digits else 0


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def prep_img(images: Any) -> list[Image]:
    """Validate thumbnails, resolve their URLs, and sort widest first."""
    if not isinstance(images, list):
        return []

    result: list[Image] = []
    for img in images:
        if not isinstance(img, dict) or not isinstance(img.get("url"), str):
            continue
        width, height = img.get("width"), img.get("height")
        if not all(_is_number(v) for v in (width, height)):
            continue
        url = urljoin(BASE_URL, img["url"]) if img["url"] else None
        result.append(Image(url=url, width=int(width), height=int(height)))

    return sorted(result, key=lambda image: image.width, reverse=True)


def _badge_labels(badges: Any, key: str) -> list[str]:
    """Collect the given field of every metadataBadgeRenderer in a badge list."""
    if not isinstance(badges, list):
        return []
    labels = []
    for badge in badges:
        value = dig(badge, "metadataBadgeRenderer", key)
        if isinstance(value, str):
            labels.append(value)
    return labels


def _is_verified(owner_badges: Any) -> bool:
    if not owner_badges:
        return False
    serialized = json.dumps(owner_badges)
    return "OFFICIAL" in serialized or "VERIFIED" in serialized


def _author_from_run(run: Any, owner_badges: Any, avatars: list[Image]) -> Author | None:
    """Build an Author from a byline run that links to a channel."""
    if not isinstance(run, dict) or not isinstance(run.get("text"), str):
        return None
    browse_id = dig(run, "navigationEndpoint", "browseEndpoint", "browseId")
    author_url = dig(run, "navigationEndpoint", "browseEndpoint", "canonicalBaseUrl") or dig(
        run, "navigationEndpoint", "commandMetadata", "webCommandMetadata", "url"
    )
    if not isinstance(author_url, str) or not author_url or not browse_id:
        return None

    try:
        return Author(
            name=run["text"],
            channel_id=browse_id,
            url=urljoin(BASE_VIDEO_URL, author_url),
            best_avatar=avatars[0] if avatars else None,
            avatars=avatars,
            owner_badges=_badge_labels(owner_badges, "tooltip"),
            verified=_is_verified(owner_badges),
        )
    except ValidationError as e:
        logger.debug(f"Dropping malformed author: {e}")
        return None


def _parse_author(obj: dict[str, Any]) -> Author | None:
    avatars = prep_img(
        dig(
            obj,
            "channelThumbnailSupportedRenderers",
            "channelThumbnailWithLinkRenderer",
            "thumbnail",
            "thumbnails",
        )
    )
    return _author_from_run(dig(obj, "ownerText", "runs", 0), obj.get("ownerBadges"), avatars)


def _parse_video(obj: Any) -> Video | None:
    if not isinstance(obj, dict) or not isinstance(obj.get("videoId"), str):
        return None
    thumbnails = dig(obj, "thumbnail", "thumbnails")
    if not isinstance(thumbnails, list):
        return None

    badges = _badge_labels(obj.get("badges"), "label")
    start_time = dig(obj, "upcomingEventData", "startTime")
    upcoming = None
    if isinstance(start_time, str) and start_time.isdigit():
        upcoming = int(f"{start_time}000")  # seconds -> milliseconds

    length = obj.get("lengthText")
    if not length:
        overlays = obj.get("thumbnailOverlays")
        for overlay in overlays if isinstance(overlays, list) else []:
            if isinstance(overlay, dict) and "thumbnailOverlayTimeStatusRenderer" in overlay:
                length = dig(overlay, "thumbnailOverlayTimeStatusRenderer", "text")
                break

    images = prep_img(thumbnails)
    view_count = obj.get("viewCountText")

    try:
        return Video(
            id=obj["videoId"],
            name=parse_text(obj.get("title")),
            url=BASE_VIDEO_URL + obj["videoId"],
            thumbnail=(images[0].url or "") if images else "",
            thumbnails=images,
            is_upcoming=upcoming is not None,
            upcoming=upcoming,
            is_live=any(badge in LIVE_BADGES for badge in badges),
            badges=badges,
            author=_parse_author(obj),
            description=parse_text(obj.get("descriptionSnippet")),
            views=parse_integer_from_text(view_count) if view_count else None,
            duration=parse_text(length),
            uploaded_at=parse_text(obj.get("publishedTimeText")),
        )
    except ValidationError as e:
        logger.debug(f"Dropping malformed video {obj.get('videoId')}: {e}")
        return None


def _parse_count(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        digits = _DIGITS_RE.sub("", value)
        return int(digits) if digits else None
    return None


def _parse_owner(obj: dict[str, Any]) -> Author | None:
    # Auto generated playlists (starting with OL) only provide a simple string
    if dig(obj, "shortBylineText", "simpleText"):
        return None
    run = dig(obj, "shortBylineText", "runs", 0) or dig(obj, "longBylineText", "runs", 0)
    return _author_from_run(run, obj.get("ownerBadges"), [])


def _parse_playlist(obj: Any) -> Playlist | None:
    if not isinstance(obj, dict) or not isinstance(obj.get("playlistId"), str):
        return None

    try:
        return Playlist(
            id=obj["playlistId"],
            name=parse_text(obj.get("title")),
            url=BASE_PLAYLIST_URL + obj["playlistId"],
            owner=_parse_owner(obj),
            published_at=parse_text(obj.get("publishedTimeText")),
            length=_parse_count(obj.get("videoCount")),
        )
    except ValidationError as e:
        logger.debug(f"Dropping malformed playlist {obj.get('playlistId')}: {e}")
        return None


def _lockup_video_count(lockup: dict[str, Any]) -> int:
    """Read the '12 videos' badge off a lockup's collection thumbnail."""
    overlays = dig(
        lockup,
        "contentImage",
        "collectionThumbnailViewModel",
        "primaryThumbnail",
        "thumbnailViewModel",
        "overlays",
    )
    for overlay in overlays if isinstance(overlays, list) else []:
        badges = dig(overlay, "thumbnailOverlayBadgeViewModel", "thumbnailBadges")
        for badge in badges if isinstance(badges, list) else []:
            text = dig(badge, "thumbnailBadgeViewModel", "text")
            if not isinstance(text, str):
                continue
            match = _COUNT_RE.search(text)
            if match:
                return int(_DIGITS_RE.sub("", match.group(0)))
    return 0


def _parse_playlist_from_lockup(lockup: Any) -> Playlist | None:
    """Parse the newer lockupViewModel playlist card.

    Lockups only expose the owner's name, so the Author has no channel ID
    or URL.
    """
    if not isinstance(lockup, dict) or not isinstance(lockup.get("contentId"), str):
        return None
    meta = dig(lockup, "metadata", "lockupMetadataViewModel")
    name = dig(meta, "title", "content")
    if not isinstance(name, str):
        return None

    owner = None
    owner_name = dig(
        meta,
        "metadata",
        "contentMetadataViewModel",
        "metadataRows",
        0,
        "metadataParts",
        0,
        "text",
        "content",
    )
    if isinstance(owner_name, str):
        owner = Author(name=owner_name, channel_id="", url="")

    try:
        return Playlist(
            id=lockup["contentId"],
            name=name,
            url=BASE_PLAYLIST_URL + lockup["contentId"],
            owner=owner,
            published_at=None,
            length=_lockup_video_count(lockup),
        )
    except ValidationError as e:
        logger.debug(f"Dropping malformed lockup {lockup.get('contentId')}: {e}")
        return None


RENDERER_PARSERS: dict[str, Callable[[Any], SearchResult | None]] = {
    "lockupViewModel": _parse_playlist_from_lockup,
    "videoRenderer": _parse_video,
    "playlistRenderer": _parse_playlist,
    "gridVideoRenderer": _parse_video,
}


def parse_item(item: Any) -> SearchResult | None:
    """Normalize one raw renderer into a Video or Playlist.

    Returns None for renderers that are unknown (shelves, ads, channel
    cards...) or fail validation; a partially filled result is never
    returned.
    """
    if not isinstance(item, dict):
        return None
    for key, parser in RENDERER_PARSERS.items():
        if key in item:
            return parser(item[key])
    return None
