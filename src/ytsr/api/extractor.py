"""Extraction of the embedded initial data and client version from a results page."""

import json
import logging
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

# (prefix, terminator, append closing brace) tried in order; first valid JSON wins.
# Cutting at "};" drops the object's own closing brace, so it has to be put back.
INITIAL_DATA_STRATEGIES: list[tuple[str, str, bool]] = [
    ("var ytInitialData = ", "};", True),
    ('window["ytInitialData"] = ', "};", True),
    ("var ytInitialData = ", ";</script>", False),
    ('window["ytInitialData"] = ', ";</script>", False),
]

# Raw-text fallbacks for the client version when the tracking params lack it
CLIENT_VERSION_PATTERNS: list[tuple[str, str]] = [
    ('INNERTUBE_CONTEXT_CLIENT_VERSION":"', '"'),
    ('innertube_context_client_version":"', '"'),
]

CLIENT_VERSION_PARAM = "cver"


@dataclass
class ParsedBody:
    """What could be recovered from a results page body."""

    json: Any = None
    client_version: str | None = None


def between(haystack: str, left: str, right: str) -> str:
    """Return the text between the first `left` and the next `right`, or ''."""
    pos = haystack.find(left)
    if pos == -1:
        return ""
    haystack = haystack[pos + len(left) :]
    pos = haystack.find(right)
    if pos == -1:
        return ""
    return haystack[:pos]


def try_parse_between(body: str, left: str, right: str, add_end_curly: bool = False) -> Any:
    """Parse the JSON found between two delimiters, or return None."""
    data = between(body, left, right)
    if not data:
        return None
    if add_end_curly:
        data += "}"
    try:
        return json.loads(data)
    except json.JSONDecodeError:
        return None


def extract_initial_data(body: str) -> Any:
    """Locate and decode the ytInitialData object embedded in a page."""
    for left, right, add_end_curly in INITIAL_DATA_STRATEGIES:
        data = try_parse_between(body, left, right, add_end_curly)
        if data is not None:
            return data
    logger.debug("No embedded initial data found in page body")
    return None


def get_client_version(data: Any) -> str | None:
    """Read the client version from the response's service tracking params."""
    if not isinstance(data, dict):
        return None
    response_context = data.get("responseContext")
    if not isinstance(response_context, dict):
        return None
    services = response_context.get("serviceTrackingParams")
    if not isinstance(services, list):
        return None

    for service in services:
        if not isinstance(service, dict) or not isinstance(service.get("params"), list):
            continue
        for param in service["params"]:
            if not isinstance(param, dict) or param.get("key") != CLIENT_VERSION_PARAM:
                continue
            value = param.get("value")
            if isinstance(value, str) and value:
                return value
    return None


def parse_body(body: str) -> ParsedBody:
    """Recover the seed JSON and client version from a results page.

    Never raises: either field is None when nothing usable was found.
    """
    data = extract_initial_data(body)

    client_version = get_client_version(data)
    if not client_version:
        for left, right in CLIENT_VERSION_PATTERNS:
            client_version = between(body, left, right)
            if client_version:
                break

    if not client_version:
        logger.debug("No client version found in page body")

    return ParsedBody(json=data, client_version=client_version or None)
