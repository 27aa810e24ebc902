"""Shared helpers for endpoint modules."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pyfordpass._transport import Transport
from pyfordpass.config import FordPassConfig
from pyfordpass.exceptions import FordPassSessionExpiredError, FordPassTransportError
from pyfordpass.session import Session


def api_headers(config: FordPassConfig, session: Session) -> dict[str, str]:
    """Headers for an authenticated vehicle API call."""
    return {
        "content-type": "application/json",
        "application-id": config.application_id,
        **session.auth_headers(),
    }


async def authorized_request(
    method: str,
    path: str,
    config: FordPassConfig,
    session: Session,
    transport: Transport,
    *,
    json_body: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Send an authenticated request, mapping HTTP 401 to session expiry."""
    url = f"{config.api_url}{path}"
    try:
        return await transport.request(
            method,
            url,
            headers=api_headers(config, session),
            json_body=json_body,
        )
    except FordPassTransportError as exc:
        if exc.status_code == 401:
            raise FordPassSessionExpiredError(
                f"{path} rejected the access token",
                status=401,
                endpoint=path,
            ) from exc
        raise
