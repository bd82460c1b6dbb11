"""HTTP transport for the CAN health API."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from canhealth._constants import USER_AGENT
from canhealth.config import CanHealthConfig
from canhealth.exceptions import CanHealthTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`HttpTransport`) concrete.
    """

    async def get_json(self, endpoint: str, params: Mapping[str, str] | None = None) -> Any:
        ...

    async def post_json(self, endpoint: str) -> Any:
        ...


class HttpTransport:
    """JSON-over-HTTP transport.

    Any failure (network error, timeout, non-2xx status, non-JSON body) is
    raised as :class:`CanHealthTransportError`; callers do not distinguish
    status codes.
    """

    def __init__(self, config: CanHealthConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout or None)

    def _url(self, endpoint: str) -> str:
        return f"{self._config.api_root}{endpoint}"

    async def get_json(self, endpoint: str, params: Mapping[str, str] | None = None) -> Any:
        return await self._request("GET", endpoint, params=params)

    async def post_json(self, endpoint: str) -> Any:
        """POST without a body; the server answers before its job finishes."""
        return await self._request("POST", endpoint)

    async def _request(self, method: str, endpoint: str, *, params: Mapping[str, str] | None = None) -> Any:
        url = self._url(endpoint)
        headers = {"accept": "application/json", "user-agent": USER_AGENT}

        _logger.debug("%s %s params=%s", method, url, dict(params or {}))

        try:
            async with self._http.request(
                method,
                url,
                params=dict(params) if params else None,
                headers=headers,
                timeout=self._timeout,
            ) as resp:
                text = await resp.text()
                if not 200 <= resp.status < 300:
                    raise CanHealthTransportError(
                        f"HTTP {resp.status} from {endpoint or '/'}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except CanHealthTransportError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise CanHealthTransportError(
                f"Request to {endpoint or '/'} failed: {exc!r}",
                endpoint=endpoint,
            ) from exc

        if not text.strip():
            return None

        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise CanHealthTransportError(
                f"Invalid JSON from {endpoint or '/'}: {text[:200]}",
                endpoint=endpoint,
            ) from exc
