"""Custom exception hierarchy for pyfordpass."""

from __future__ import annotations


class FordPassError(Exception):
    """Base exception for all pyfordpass errors."""


class FordPassConfigError(FordPassError):
    """Invalid or missing configuration."""


class FordPassTransportError(FordPassError):
    """HTTP-level failure (network, non-2xx, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class FordPassApiError(FordPassError):
    """API answered but the payload signals an application-level error."""

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status = status
        self.endpoint = endpoint
        super().__init__(message)


class FordPassAuthenticationError(FordPassApiError):
    """Login failed or no session is available."""


class FordPassSessionExpiredError(FordPassAuthenticationError):
    """Access token rejected by the server.

    Raised when a post-login API call answers HTTP 401.  The client
    catches this internally to trigger one re-authentication.
    """


class FordPassCommandError(FordPassApiError):
    """Remote command was rejected or never acknowledged by the vehicle."""


class FordPassCommandTimeoutError(FordPassCommandError):
    """Remote command still pending after all acknowledgement polls."""
