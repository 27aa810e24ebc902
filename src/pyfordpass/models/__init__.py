"""Data models for FordPass API responses."""

from pyfordpass.models._base import FordPassBaseModel, FordPassEnum
from pyfordpass.models.command import Command, CommandResult, CommandState, CommandTicket
from pyfordpass.models.status import LockState, LockStatus, RemoteStartStatus, StatusSnapshot, VehicleStatus
from pyfordpass.models.token import AuthToken

__all__ = [
    "AuthToken",
    "Command",
    "CommandResult",
    "CommandState",
    "CommandTicket",
    "FordPassBaseModel",
    "FordPassEnum",
    "LockState",
    "LockStatus",
    "RemoteStartStatus",
    "StatusSnapshot",
    "VehicleStatus",
]
