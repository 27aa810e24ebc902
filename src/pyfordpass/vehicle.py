"""Per-vehicle handle used by the bridge."""

from __future__ import annotations

import logging
from typing import Protocol

from pyfordpass.models.command import Command
from pyfordpass.models.status import StatusSnapshot

_logger = logging.getLogger(__name__)


class Connection(Protocol):
    """Upstream collaborator contract.

    Implementations report upstream failures as ``False``/``None``
    instead of raising.  :class:`pyfordpass.client.FordPassClient` is
    the production implementation.
    """

    async def auth(self) -> bool:
        ...

    async def fetch_status(self, vin: str) -> StatusSnapshot | None:
        ...

    async def issue_command(self, vin: str, command: Command) -> bool:
        ...


class VehicleHandle:
    """One configured vehicle: identity, last known status, and actions."""

    def __init__(self, name: str, vin: str, connection: Connection) -> None:
        self.name = name
        self.vin = vin.upper()
        self._connection = connection
        self.last_status: StatusSnapshot | None = None

    def __repr__(self) -> str:
        return f"VehicleHandle(name={self.name!r}, vin={self.vin!r})"

    async def status(self) -> StatusSnapshot | None:
        """Fetch a fresh snapshot without touching :attr:`last_status`."""
        return await self._connection.fetch_status(self.vin)

    async def refresh(self) -> StatusSnapshot | None:
        """Fetch a fresh snapshot and cache it.

        On failure the previous :attr:`last_status` is kept and ``None``
        is returned.
        """
        snapshot = await self.status()
        if snapshot is None:
            _logger.debug("No status returned for %s", self.name)
            return None
        self.last_status = snapshot
        return snapshot

    async def issue_command(self, command: Command) -> bool:
        """Send *command* and wait for completion."""
        return await self._connection.issue_command(self.vin, command)
