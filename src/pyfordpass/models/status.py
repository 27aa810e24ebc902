"""Vehicle status models.

:class:`VehicleStatus` mirrors the ``vehiclestatus`` object returned by
the status endpoint.  :class:`StatusSnapshot` is the reduced, immutable
view the bridge works with: one is produced per successful fetch and
never merged with an earlier one.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pyfordpass.models._base import FordPassBaseModel, FordPassEnum


class LockState(FordPassEnum):
    """Door lock state reported by the vehicle."""

    LOCKED = "LOCKED"
    UNLOCKED = "UNLOCKED"
    UNKNOWN = "UNKNOWN"


class LockStatus(FordPassBaseModel):
    """``lockStatus`` entry."""

    value: LockState = LockState.UNKNOWN
    timestamp: str | None = None


class RemoteStartStatus(FordPassBaseModel):
    """``remoteStartStatus`` entry.

    ``value`` is ``0`` while the engine is off and a positive level
    while a remote start is active.
    """

    value: int | None = None
    timestamp: str | None = None

    @field_validator("value", mode="before")
    @classmethod
    def _coerce_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            stripped = value.strip()
            return int(stripped) if stripped.lstrip("-").isdigit() else None
        return value


class VehicleStatus(FordPassBaseModel):
    """Vehicle status payload (``vehiclestatus``)."""

    vin: str = ""
    lock_status: LockStatus | None = None
    remote_start_status: RemoteStartStatus | None = None
    last_refresh: str | None = None

    def to_snapshot(self) -> StatusSnapshot:
        """Reduce the payload to the fields the bridge projects."""
        lock_state = self.lock_status.value if self.lock_status is not None else LockState.UNKNOWN
        level = self.remote_start_status.value if self.remote_start_status is not None else None
        if level is not None and level < 0:
            level = None
        return StatusSnapshot(lock_state=lock_state, remote_start_level=level)


class StatusSnapshot(BaseModel):
    """Point-in-time lock and remote-start state of one vehicle."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    lock_state: LockState = LockState.UNKNOWN
    remote_start_level: int | None = Field(default=None, ge=0)

    @property
    def is_locked(self) -> bool:
        return self.lock_state == LockState.LOCKED

    @property
    def engine_running(self) -> bool:
        return (self.remote_start_level or 0) > 0
