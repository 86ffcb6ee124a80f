"""Normalization of user-supplied search options into request parameters."""

import copy
import logging
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qsl, urljoin, urlsplit

from .errors import InvalidQueryError
from .models import ResultType
from .settings import SearchSettings

logger = logging.getLogger(__name__)

BASE_URL = "https://www.youtube.com/"
CONSENT_COOKIE = "SOCS=CAI"

DEFAULT_LIMIT = 10
DEFAULT_QUERY = {"gl": "US", "hl": "en"}
DEFAULT_CONTEXT: dict[str, Any] = {
    "client": {
        "utcOffsetMinutes": -300,
        "gl": "US",
        "hl": "en",
        "clientName": "WEB",
        "clientVersion": "",
    },
    "user": {},
}


@dataclass
class RequestOptions:
    """Transport overrides passed through to every HTTP request."""

    headers: dict[str, str] = field(default_factory=dict)
    timeout: float | None = None  # seconds; None uses the session default
    proxy: str | None = None


@dataclass
class SearchOptions:
    """Options accepted by a search, before validation.

    Anything left as None falls back to SearchSettings.
    """

    limit: Any = None
    safe_search: Any = None
    type: Any = ResultType.VIDEO
    hl: str | None = None
    gl: str | None = None
    utc_offset_minutes: int | None = None
    request_options: RequestOptions | None = None


@dataclass
class NormalizedOptions:
    """Validated options for one search invocation.

    ``limit`` is the remaining result budget and is decremented as
    results are accumulated.
    """

    search: str
    query: dict[str, str]
    limit: int
    safe_search: bool
    type: ResultType
    request_options: RequestOptions
    hl: str | None = None
    gl: str | None = None
    utc_offset_minutes: int | None = None


def parse_cookie_string(cookie_str: str) -> dict[str, str]:
    """Parse a 'name=value; name2=value2' cookie header into a dict."""
    cookies: dict[str, str] = {}
    if not cookie_str.strip():
        return cookies

    for part in cookie_str.split(";"):
        part = part.strip()
        if "=" in part:
            name, _, value = part.partition("=")
            name = name.strip()
            if name:
                cookies[name] = value.strip()

    return cookies


def with_consent_cookie(headers: dict[str, str]) -> dict[str, str]:
    """Return a copy of headers carrying the consent cookie.

    Without it, requests from some regions get redirected to a consent
    page instead of search results.
    """
    result = {k: v for k, v in headers.items() if k.lower() != "cookie"}
    cookie = next((v for k, v in headers.items() if k.lower() == "cookie"), "")
    if not cookie:
        result["Cookie"] = CONSENT_COOKIE
    elif "SOCS" not in parse_cookie_string(cookie):
        result["Cookie"] = f"{cookie}; {CONSENT_COOKIE}"
    else:
        result["Cookie"] = cookie
    return result


def _coerce_limit(value: Any, default: int) -> int:
    try:
        limit = int(value)
    except (TypeError, ValueError, OverflowError):
        return default
    if limit <= 0:
        return default
    return limit


def _coerce_type(value: Any) -> ResultType:
    try:
        return ResultType(value)
    except ValueError:
        return ResultType.VIDEO


def _parse_query(search_string: str) -> dict[str, str]:
    """Build the results-page query, reusing a pasted filter URL verbatim."""
    parts = urlsplit(urljoin(BASE_URL, search_string))
    params = dict(parse_qsl(parts.query, keep_blank_values=True))
    if search_string.startswith(BASE_URL) and parts.path == "/results" and "sp" in params:
        if not params.get("search_query"):
            raise InvalidQueryError('filter links have to include a "search_query" query')
        return params
    return {"search_query": search_string}


def check_args(
    search_string: Any,
    options: SearchOptions | None = None,
    settings: SearchSettings | None = None,
) -> NormalizedOptions:
    """Validate a query and its options.

    Raises:
        InvalidQueryError: If the query is missing, not a string, or a
            filter URL without a search term.
    """
    if not search_string:
        raise InvalidQueryError("search string is mandatory")
    if not isinstance(search_string, str):
        raise InvalidQueryError("search string must be of type string")

    options = options or SearchOptions()
    settings = settings or SearchSettings()

    limit = _coerce_limit(
        options.limit if options.limit is not None else settings.limit, DEFAULT_LIMIT
    )
    safe_search = options.safe_search
    if not isinstance(safe_search, bool):
        safe_search = settings.safe_search

    request_options = copy.deepcopy(options.request_options or RequestOptions())
    headers = {"User-Agent": settings.user_agent, **request_options.headers}
    request_options.headers = with_consent_cookie(headers)
    if request_options.timeout is None:
        request_options.timeout = settings.request_timeout

    query = _parse_query(search_string)
    search = query["search_query"]

    explicit_hl = options.hl if isinstance(options.hl, str) and options.hl else None
    explicit_gl = options.gl if isinstance(options.gl, str) and options.gl else None
    hl = explicit_hl or settings.hl
    gl = explicit_gl or settings.gl
    utc_offset = options.utc_offset_minutes
    if not isinstance(utc_offset, int) or isinstance(utc_offset, bool):
        utc_offset = settings.utc_offset_minutes

    # Locale from a pasted filter URL survives unless overridden explicitly
    query = {**DEFAULT_QUERY, "hl": settings.hl, "gl": settings.gl, **query}
    if explicit_hl:
        query["hl"] = explicit_hl
    if explicit_gl:
        query["gl"] = explicit_gl

    return NormalizedOptions(
        search=search,
        query=query,
        limit=limit,
        safe_search=safe_search,
        type=_coerce_type(options.type),
        request_options=request_options,
        hl=hl,
        gl=gl,
        utc_offset_minutes=utc_offset,
    )


def build_post_context(client_version: str, opts: NormalizedOptions | None = None) -> dict:
    """Build the InnerTube request context for API POSTs."""
    context = copy.deepcopy(DEFAULT_CONTEXT)
    context["client"]["clientVersion"] = client_version or ""

    if opts is None:
        return context
    if opts.gl:
        context["client"]["gl"] = opts.gl
    if opts.hl:
        context["client"]["hl"] = opts.hl
    if opts.utc_offset_minutes:
        context["client"]["utcOffsetMinutes"] = opts.utc_offset_minutes
    if opts.safe_search:
        context["user"]["enableSafetyMode"] = True

    return context
