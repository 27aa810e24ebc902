"""HTTP transport for the FordPass JSON endpoints."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pyfordpass._constants import USER_AGENT
from pyfordpass._redact import redact_for_log
from pyfordpass.exceptions import FordPassTransportError

_logger = logging.getLogger(__name__)

_DEFAULT_HEADERS: dict[str, str] = {
    "accept": "*/*",
    "accept-language": "en-us",
    "user-agent": USER_AGENT,
}


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`JsonTransport`) concrete.
    """

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        form: Mapping[str, str] | None = None,
        json_body: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        ...


class JsonTransport:
    """aiohttp transport returning decoded JSON objects.

    Non-2xx answers, network failures and undecodable bodies all raise
    :class:`FordPassTransportError`; the status code is kept so endpoint
    modules can map it (e.g. 401 to session expiry).
    """

    def __init__(self, http_session: aiohttp.ClientSession, *, timeout: float) -> None:
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        form: Mapping[str, str] | None = None,
        json_body: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        merged_headers = {**_DEFAULT_HEADERS, **(headers or {})}
        kwargs: dict[str, Any] = {"headers": merged_headers, "timeout": self._timeout}
        if form is not None:
            kwargs["data"] = dict(form)
        elif json_body is not None:
            kwargs["json"] = dict(json_body)

        _logger.debug("%s %s headers=%s", method, url, redact_for_log(merged_headers))

        try:
            async with self._http.request(method, url, **kwargs) as resp:
                raw = await resp.read()
                status = resp.status
                encoding = resp.charset or "utf-8"
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise FordPassTransportError(
                f"Request to {url} failed: {exc}",
                endpoint=url,
            ) from exc

        if not 200 <= status < 300:
            raise FordPassTransportError(
                f"HTTP {status} from {url}: {raw[:200].decode('utf-8', errors='replace')}",
                status_code=status,
                endpoint=url,
            )

        try:
            text = raw.decode(encoding)
        except (UnicodeDecodeError, LookupError) as exc:
            raise FordPassTransportError(
                f"Undecodable {encoding} body from {url}",
                endpoint=url,
            ) from exc

        if not text.strip():
            return {}

        try:
            body = json.loads(text)
        except json.JSONDecodeError as exc:
            raise FordPassTransportError(
                f"Invalid JSON from {url}: {text[:200]}",
                endpoint=url,
            ) from exc

        if not isinstance(body, dict):
            raise FordPassTransportError(
                f"Expected a JSON object from {url}",
                endpoint=url,
            )

        _logger.debug("%s %s -> %s", method, url, redact_for_log(body))
        return body
