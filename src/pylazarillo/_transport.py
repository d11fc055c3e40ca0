"""HTTP transport for the JSON web services pylazarillo talks to."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pylazarillo._redact import redact_for_log
from pylazarillo.exceptions import ExternalServiceTimeout, LazarilloTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by the provider modules.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`HttpTransport`) concrete.
    """

    async def get_json(self, url: str, params: Mapping[str, str]) -> dict[str, Any]:
        ...

    async def post_form(
        self,
        url: str,
        data: Mapping[str, str],
        *,
        auth: tuple[str, str] | None = None,
    ) -> dict[str, Any]:
        ...


class HttpTransport:
    """aiohttp-backed transport with a bounded timeout on every request."""

    def __init__(self, http_session: aiohttp.ClientSession, *, timeout: float) -> None:
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    async def get_json(self, url: str, params: Mapping[str, str]) -> dict[str, Any]:
        _logger.debug("GET %s params=%s", url, redact_for_log(dict(params)))
        return await self._request("GET", url, params=dict(params))

    async def post_form(
        self,
        url: str,
        data: Mapping[str, str],
        *,
        auth: tuple[str, str] | None = None,
    ) -> dict[str, Any]:
        _logger.debug("POST %s data=%s", url, redact_for_log(dict(data)))
        basic_auth = aiohttp.BasicAuth(*auth) if auth is not None else None
        return await self._request("POST", url, data=dict(data), auth=basic_auth)

    async def _request(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        try:
            async with self._http.request(method, url, timeout=self._timeout, **kwargs) as resp:
                text = await resp.text()
                status = resp.status
        except TimeoutError as exc:
            raise ExternalServiceTimeout(
                f"{method} {url} timed out after {self._timeout.total}s",
                service=url,
            ) from exc
        except aiohttp.ClientError as exc:
            raise LazarilloTransportError(f"{method} {url} failed: {exc}", url=url) from exc

        if not 200 <= status < 300:
            raise LazarilloTransportError(
                f"HTTP {status} from {url}: {text[:200]}",
                status_code=status,
                url=url,
            )

        try:
            body = json.loads(text)
        except json.JSONDecodeError as exc:
            raise LazarilloTransportError(
                f"Invalid JSON from {url}: {text[:200]}",
                status_code=status,
                url=url,
            ) from exc

        if not isinstance(body, dict):
            raise LazarilloTransportError(f"Expected a JSON object from {url}", status_code=status, url=url)

        _logger.debug("%s %s -> %s", method, url, redact_for_log(body, max_string=200))
        return body
