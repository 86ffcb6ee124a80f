"""Base HTTP client: session lifecycle and request helpers."""

import asyncio
import json
import logging
from typing import Any

import aiohttp

from ..core.errors import TransportError
from ..core.options import RequestOptions
from ..core.settings import SearchSettings

logger = logging.getLogger(__name__)


async def safe_json(resp: aiohttp.ClientResponse) -> dict | list | None:
    """Decode a response body as JSON whatever its Content-Type.

    Returns None when the body is empty or is not valid JSON in its charset.
    """
    try:
        # The API sometimes labels JSON as text/html
        return await resp.json(content_type=None)
    except (aiohttp.ContentTypeError, json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning(f"Failed to parse JSON response: {e}")
        return None


class BaseApiClient:
    """HTTP plumbing shared by platform clients.

    Owns a lazily created aiohttp session. Timeouts come from the session
    default unless a request's RequestOptions overrides them; nothing at
    this layer cancels requests on its own.
    """

    def __init__(self, settings: SearchSettings | None = None) -> None:
        self.settings = settings or SearchSettings()
        self._session: aiohttp.ClientSession | None = None

    @property
    def name(self) -> str:
        return type(self).__name__

    @property
    def session(self) -> aiohttp.ClientSession:
        """Get or create the HTTP session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.settings.request_timeout)
            connector = aiohttp.TCPConnector(
                limit=50, force_close=self.settings.disable_keepalive
            )
            self._session = aiohttp.ClientSession(timeout=timeout, connector=connector)
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            try:
                await self._session.close()
                # Allow time for underlying connections to fully close
                # This prevents "Unclosed connector" warnings from aiohttp
                await asyncio.sleep(0.1)
            except RuntimeError as e:
                # Session may be attached to a different event loop
                if "attached to a different loop" in str(e):
                    logger.debug(f"Session attached to different loop, skipping close: {e}")
                else:
                    raise
            finally:
                self._session = None

    def reset_session(self) -> None:
        """Reset the HTTP session.

        Call before running in a new event loop to avoid 'attached to a
        different event loop' errors with aiohttp. The session is lazily
        recreated on next access.
        """
        self._session = None

    async def __aenter__(self) -> "BaseApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    @staticmethod
    def _request_kwargs(options: RequestOptions | None) -> dict[str, Any]:
        """Translate RequestOptions into aiohttp request keyword arguments."""
        if options is None:
            return {}
        kwargs: dict[str, Any] = {"headers": dict(options.headers)}
        if options.timeout is not None:
            kwargs["timeout"] = aiohttp.ClientTimeout(total=options.timeout)
        if options.proxy:
            kwargs["proxy"] = options.proxy
        return kwargs

    async def fetch_text(
        self,
        url: str,
        options: RequestOptions | None = None,
        params: dict[str, str] | None = None,
    ) -> str:
        """GET a URL and return its body as text.

        Raises:
            TransportError: On a non-2xx response.
            aiohttp.ClientError: On network failure.
        """
        async with self.session.get(url, params=params, **self._request_kwargs(options)) as resp:
            if resp.status >= 400:
                raise TransportError(f"{self.name}: GET {url} returned {resp.status}", resp.status)
            return await resp.text(errors="replace")

    async def post_json(
        self,
        url: str,
        payload: dict[str, Any],
        options: RequestOptions | None = None,
    ) -> Any:
        """POST a JSON payload and return the parsed JSON response.

        Raises:
            TransportError: On a non-2xx response or a body that isn't JSON.
            aiohttp.ClientError: On network failure.
        """
        kwargs = self._request_kwargs(options)
        headers = kwargs.setdefault("headers", {})
        headers["Content-Type"] = "application/json"

        async with self.session.post(url, json=payload, **kwargs) as resp:
            if resp.status >= 400:
                text = await resp.text(errors="replace")
                raise TransportError(
                    f"{self.name}: POST {url} returned {resp.status}: {text[:200]}", resp.status
                )
            data = await safe_json(resp)
            if data is None:
                raise TransportError(f"{self.name}: POST {url} returned invalid JSON", resp.status)
            return data
