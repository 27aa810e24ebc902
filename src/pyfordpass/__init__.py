"""pyfordpass - Async bridge exposing FordPass vehicles as lock and remote-start accessories."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyfordpass")
except PackageNotFoundError:
    __version__ = "0+local"
from pyfordpass.client import FordPassClient
from pyfordpass.config import FordPassConfig, VehicleConfigEntry
from pyfordpass.exceptions import (
    FordPassApiError,
    FordPassAuthenticationError,
    FordPassCommandError,
    FordPassCommandTimeoutError,
    FordPassConfigError,
    FordPassError,
    FordPassSessionExpiredError,
    FordPassTransportError,
)
from pyfordpass.models import (
    AuthToken,
    Command,
    CommandResult,
    CommandState,
    LockState,
    StatusSnapshot,
    VehicleStatus,
)
from pyfordpass.platform import FordPassPlatform
from pyfordpass.vehicle import Connection, VehicleHandle

__all__ = [
    "__version__",
    "AuthToken",
    "Command",
    "CommandResult",
    "CommandState",
    "Connection",
    "FordPassApiError",
    "FordPassAuthenticationError",
    "FordPassClient",
    "FordPassCommandError",
    "FordPassCommandTimeoutError",
    "FordPassConfig",
    "FordPassConfigError",
    "FordPassError",
    "FordPassPlatform",
    "FordPassSessionExpiredError",
    "FordPassTransportError",
    "LockState",
    "StatusSnapshot",
    "VehicleConfigEntry",
    "VehicleHandle",
    "VehicleStatus",
]
