"""Characteristic bindings between an accessory and its vehicle.

Each vehicle accessory exposes a LockMechanism and a Switch service.
Reads always fetch a fresh status; writes issue a remote command and
only acknowledge once the vehicle completed it.
"""

from __future__ import annotations

import logging

from pyfordpass._constants import LOCK_SECURED, LOCK_UNSECURED, MANUFACTURER
from pyfordpass.host.accessory import (
    CharacteristicReadError,
    CharacteristicType,
    CharacteristicValue,
    CharacteristicWriteError,
    PlatformAccessory,
    Service,
    ServiceType,
)
from pyfordpass.models.command import Command
from pyfordpass.models.status import LockState, StatusSnapshot
from pyfordpass.vehicle import Connection, VehicleHandle

_logger = logging.getLogger(__name__)


def lock_state_value(snapshot: StatusSnapshot | None) -> int:
    """LockCurrentState value for *snapshot*: secured only when LOCKED."""
    if snapshot is not None and snapshot.lock_state == LockState.LOCKED:
        return LOCK_SECURED
    return LOCK_UNSECURED


def engine_running(snapshot: StatusSnapshot | None) -> bool:
    """Switch value for *snapshot*: on while a remote start is active."""
    if snapshot is None or snapshot.remote_start_level is None:
        return False
    return snapshot.remote_start_level > 0


class VehicleBindings:
    """Handlers wiring one accessory's characteristics to a vehicle handle."""

    def __init__(self, accessory: PlatformAccessory, handle: VehicleHandle) -> None:
        self.accessory = accessory
        self.handle = handle
        self.lock_service: Service = accessory.get_or_add_service(ServiceType.LOCK_MECHANISM)
        self.switch_service: Service = accessory.get_or_add_service(ServiceType.SWITCH)

    def install(self) -> None:
        """Set default values and register the get/set handlers."""
        self.lock_service.update_characteristic(CharacteristicType.LOCK_CURRENT_STATE, LOCK_SECURED)
        self.lock_service.update_characteristic(CharacteristicType.LOCK_TARGET_STATE, LOCK_SECURED)
        self.lock_service.get_characteristic(CharacteristicType.LOCK_TARGET_STATE).on_set(self.set_lock_target)
        self.lock_service.get_characteristic(CharacteristicType.LOCK_CURRENT_STATE).on_get(self.get_lock_current)

        self.switch_service.update_characteristic(CharacteristicType.ON, False)
        self.switch_service.get_characteristic(CharacteristicType.ON).on_set(self.set_engine).on_get(self.get_engine)

    # ------------------------------------------------------------------
    # Lock
    # ------------------------------------------------------------------

    async def set_lock_target(self, value: CharacteristicValue) -> None:
        command = Command.UNLOCK if value == LOCK_UNSECURED else Command.LOCK
        _logger.debug("%s %s", "Locking" if command is Command.LOCK else "Unlocking", self.accessory.display_name)
        if not await self.handle.issue_command(command):
            raise CharacteristicWriteError(f"{command.value} failed for {self.accessory.display_name}")
        current = LOCK_SECURED if command is Command.LOCK else LOCK_UNSECURED
        self.lock_service.update_characteristic(CharacteristicType.LOCK_CURRENT_STATE, current)

    async def get_lock_current(self) -> int:
        snapshot = await self.handle.status()
        if snapshot is None:
            _logger.debug("Cannot get information for %s lock", self.accessory.display_name)
            raise CharacteristicReadError(f"No status for {self.accessory.display_name}")
        value = lock_state_value(snapshot)
        self.lock_service.update_characteristic(CharacteristicType.LOCK_CURRENT_STATE, value)
        return value

    # ------------------------------------------------------------------
    # Engine remote start
    # ------------------------------------------------------------------

    async def set_engine(self, value: CharacteristicValue) -> None:
        command = Command.START if value else Command.STOP
        _logger.debug("%s %s", "Starting" if command is Command.START else "Stopping", self.accessory.display_name)
        if not await self.handle.issue_command(command):
            raise CharacteristicWriteError(f"{command.value} failed for {self.accessory.display_name}")

    async def get_engine(self) -> bool:
        snapshot = await self.handle.status()
        if snapshot is None:
            _logger.debug("Cannot get information for %s engine", self.accessory.display_name)
            raise CharacteristicReadError(f"No status for {self.accessory.display_name}")
        return engine_running(snapshot)


def describe_accessory(accessory: PlatformAccessory, name: str, vin: str) -> None:
    """Fill the AccessoryInformation service."""
    info = accessory.get_or_add_service(ServiceType.ACCESSORY_INFORMATION)
    info.update_characteristic(CharacteristicType.MANUFACTURER, MANUFACTURER)
    info.update_characteristic(CharacteristicType.MODEL, name)
    info.update_characteristic(CharacteristicType.SERIAL_NUMBER, vin)


def attach_vehicle(accessory: PlatformAccessory, connection: Connection) -> VehicleHandle:
    """Create the vehicle handle for *accessory* and bind its characteristics.

    Name and VIN come from the accessory context, so restored accessories
    are wired exactly like freshly created ones.
    """
    name = str(accessory.context.get("name") or accessory.display_name)
    vin = str(accessory.context.get("vin") or "").upper()
    handle = VehicleHandle(name, vin, connection)
    VehicleBindings(accessory, handle).install()
    return handle
