"""Authentication token model."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AuthToken(BaseModel):
    """Token returned after successful login.

    Parameters
    ----------
    access_token : str
        Bearer value sent as the ``auth-token`` header.
    expires_in : float or None
        Lifetime in seconds, when the token endpoint reports one.
    refresh_token : str or None
        Refresh token, unused by the bridge but kept for callers.
    raw : dict
        Full decoded token dict for access to additional fields.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    access_token: str = Field(min_length=1)
    expires_in: float | None = None
    refresh_token: str | None = None
    raw: dict[str, Any] = Field(default_factory=dict)
