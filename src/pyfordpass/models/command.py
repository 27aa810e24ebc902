"""Remote command models.

Consolidates the closed set of remote operations and the
acknowledgement result returned once a command settles.
"""

from __future__ import annotations

import enum
from typing import Annotated, Any

from pydantic import BeforeValidator, Field, model_validator

from pyfordpass._constants import COMMAND_STATUS_PENDING, COMMAND_STATUS_SUCCESS
from pyfordpass.models._base import FordPassBaseModel


def _as_str(value: Any) -> Any:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


CommandId = Annotated[str, BeforeValidator(_as_str)]
"""Command identifiers arrive as strings or integers depending on endpoint."""


class Command(enum.StrEnum):
    """Remote operations the bridge can issue."""

    LOCK = "lock"
    UNLOCK = "unlock"
    START = "start"
    STOP = "stop"


class CommandState(enum.IntEnum):
    """Settled state of a remote command."""

    PENDING = 0
    SUCCESS = 1
    FAILURE = 2


class CommandResult(FordPassBaseModel):
    """Acknowledgement of a remote command.

    Accepts the raw poll payload (``{"commandId": ..., "status": 200}``)
    and derives :attr:`state` and :attr:`success` from the status code.
    """

    command_id: CommandId | None = None
    status: int | None = None
    state: CommandState = CommandState.PENDING
    success: bool = False

    @model_validator(mode="before")
    @classmethod
    def _derive_state(cls, values: Any) -> Any:
        if not isinstance(values, dict) or "state" in values:
            return values
        merged = dict(values)
        status = merged.get("status")
        try:
            code = int(status) if status is not None else None
        except (TypeError, ValueError):
            code = None
        if code == COMMAND_STATUS_SUCCESS:
            state = CommandState.SUCCESS
        elif code is None or code == COMMAND_STATUS_PENDING:
            state = CommandState.PENDING
        else:
            state = CommandState.FAILURE
        merged["status"] = code
        merged["state"] = int(state)
        merged.setdefault("success", state == CommandState.SUCCESS)
        return merged

    @property
    def is_pending(self) -> bool:
        return self.state == CommandState.PENDING


class CommandTicket(FordPassBaseModel):
    """Response of the command trigger request."""

    command_id: CommandId = Field(default="")
    status: int | None = None
