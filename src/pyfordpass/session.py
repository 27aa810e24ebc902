"""Session state management for authenticated API calls."""

from __future__ import annotations

import time

from pydantic import BaseModel, ConfigDict, Field

#: Default access token time-to-live in seconds (two hours).
#: Used when the token endpoint does not report ``expires_in``.
DEFAULT_SESSION_TTL: float = 2 * 3600


class Session(BaseModel):
    """Immutable session state after successful login.

    Parameters
    ----------
    access_token : str
        Token sent with every vehicle API call.
    created_at : float
        Monotonic timestamp (``time.monotonic()``) when the session
        was created.  Defaults to *now* if not provided.
    ttl : float
        Time-to-live in seconds.  After this period the session is
        considered expired and should be refreshed via a new login.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
        str_strip_whitespace=True,
    )

    access_token: str = Field(min_length=1)
    created_at: float = Field(default_factory=time.monotonic)
    ttl: float = DEFAULT_SESSION_TTL

    def auth_headers(self) -> dict[str, str]:
        """Headers authenticating a vehicle API request."""
        return {"auth-token": self.access_token}

    @property
    def is_expired(self) -> bool:
        """Whether the session has exceeded its TTL."""
        return (time.monotonic() - self.created_at) >= self.ttl

    @property
    def age(self) -> float:
        """Seconds since the session was created."""
        return time.monotonic() - self.created_at
