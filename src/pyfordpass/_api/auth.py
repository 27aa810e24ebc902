"""Password login against the FordPass token endpoint."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from pyfordpass._redact import redact_for_log
from pyfordpass._transport import Transport
from pyfordpass.config import FordPassConfig
from pyfordpass.exceptions import FordPassAuthenticationError, FordPassTransportError
from pyfordpass.models.token import AuthToken

_logger = logging.getLogger(__name__)


def build_login_form(config: FordPassConfig) -> dict[str, str]:
    """Build the form body of a password grant."""
    return {
        "client_id": config.client_id,
        "grant_type": "password",
        "username": config.username,
        "password": config.password,
    }


def parse_login_response(response: dict[str, Any]) -> AuthToken:
    """Validate the token endpoint answer.

    Raises
    ------
    FordPassAuthenticationError
        When the answer carries no usable ``access_token``.
    """
    try:
        return AuthToken.model_validate({**response, "raw": response})
    except ValidationError as exc:
        _logger.debug("Unexpected login response: %s", redact_for_log(response))
        raise FordPassAuthenticationError(
            "Login response did not contain an access token",
            endpoint="token",
        ) from exc


async def login(config: FordPassConfig, transport: Transport) -> AuthToken:
    """Exchange the configured credentials for an access token."""
    try:
        response = await transport.request(
            "POST",
            config.auth_url,
            headers={"content-type": "application/x-www-form-urlencoded"},
            form=build_login_form(config),
        )
    except FordPassTransportError as exc:
        if exc.status_code in (400, 401, 403):
            raise FordPassAuthenticationError(
                f"Login rejected (HTTP {exc.status_code})",
                status=exc.status_code,
                endpoint="token",
            ) from exc
        raise
    return parse_login_response(response)
