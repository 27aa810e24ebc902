from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

import pytest

from pyfordpass.config import FordPassConfig, VehicleConfigEntry
from pyfordpass.host import HostBridge
from pyfordpass.models.command import Command
from pyfordpass.models.status import LockState, StatusSnapshot

TRUCK_VIN = "1FTFW1E50MFA00001"
SUV_VIN = "1FMCU9GD5KUA00002"
VAN_VIN = "1FTBR1C80MKA00003"


@dataclass
class FakeConnection:
    """In-memory stand-in for the FordPass client.

    ``snapshots`` maps a VIN to the snapshot returned by the next fetch;
    a missing VIN or ``None`` reports an upstream failure.  VINs in
    ``raising`` make the fetch raise instead.  A VIN in ``gates`` blocks
    its fetch until the event is set.
    """

    auth_ok: bool = True
    command_ok: bool = True
    snapshots: dict[str, StatusSnapshot | None] = field(default_factory=dict)
    raising: set[str] = field(default_factory=set)
    gates: dict[str, asyncio.Event] = field(default_factory=dict)
    auth_calls: int = 0
    status_calls: list[str] = field(default_factory=list)
    commands: list[tuple[str, Command]] = field(default_factory=list)

    async def auth(self) -> bool:
        self.auth_calls += 1
        return self.auth_ok

    async def fetch_status(self, vin: str) -> StatusSnapshot | None:
        self.status_calls.append(vin)
        gate = self.gates.get(vin)
        if gate is not None:
            await gate.wait()
        if vin in self.raising:
            raise RuntimeError(f"unexpected failure for {vin}")
        return self.snapshots.get(vin)

    async def issue_command(self, vin: str, command: Command) -> bool:
        self.commands.append((vin, command))
        return self.command_ok


def snapshot(lock_state: LockState = LockState.LOCKED, level: int | None = 0) -> StatusSnapshot:
    return StatusSnapshot(lock_state=lock_state, remote_start_level=level)


@pytest.fixture
def connection() -> FakeConnection:
    return FakeConnection()


@pytest.fixture
def host() -> HostBridge:
    return HostBridge()


@pytest.fixture
def config() -> FordPassConfig:
    return FordPassConfig(
        username="user@example.com",
        password="secret",
        vehicles=(
            VehicleConfigEntry(name="Truck", vin=TRUCK_VIN),
            VehicleConfigEntry(name="SUV", vin=SUV_VIN),
        ),
        command_poll_attempts=3,
        command_poll_interval=0.0,
    )
