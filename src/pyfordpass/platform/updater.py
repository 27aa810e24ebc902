"""Vehicle status update pass."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from pyfordpass.host.accessory import CharacteristicType, PlatformAccessory, ServiceType
from pyfordpass.models.status import StatusSnapshot
from pyfordpass.platform.bindings import engine_running, lock_state_value
from pyfordpass.platform.registry import AccessoryRegistry, RegistryEntry

_logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class VehicleUpdateOutcome:
    """Result of updating one vehicle during a pass."""

    vin: str
    updated: bool
    error: Exception | None = None


def project_status(accessory: PlatformAccessory, snapshot: StatusSnapshot) -> None:
    """Push *snapshot* into the accessory's lock and switch characteristics."""
    lock_number = lock_state_value(snapshot)
    lock_service = accessory.get_service(ServiceType.LOCK_MECHANISM)
    if lock_service is not None:
        lock_service.update_characteristic(CharacteristicType.LOCK_CURRENT_STATE, lock_number)
        lock_service.update_characteristic(CharacteristicType.LOCK_TARGET_STATE, lock_number)

    switch_service = accessory.get_service(ServiceType.SWITCH)
    if switch_service is not None:
        switch_service.update_characteristic(CharacteristicType.ON, engine_running(snapshot))


async def update_vehicle(entry: RegistryEntry, registry: AccessoryRegistry) -> VehicleUpdateOutcome:
    """Fetch, cache and project the status of one vehicle."""
    handle = entry.handle
    snapshot = await handle.refresh()
    if snapshot is None:
        return VehicleUpdateOutcome(vin=handle.vin, updated=False)

    _logger.debug("Updating info for %s", handle.name)
    current = registry.get(entry.uuid)
    if current is None or current.handle is not handle:
        # Removed while the fetch was outstanding.
        _logger.debug("Skipping projection for removed vehicle %s", handle.name)
        return VehicleUpdateOutcome(vin=handle.vin, updated=False)

    project_status(current.accessory, snapshot)
    return VehicleUpdateOutcome(vin=handle.vin, updated=True)


async def update_vehicles(registry: AccessoryRegistry) -> list[VehicleUpdateOutcome]:
    """Update every registered vehicle concurrently.

    Returns once every vehicle finished, with one outcome per vehicle.
    A failure of one vehicle never affects the others.
    """
    entries = list(registry)
    if not entries:
        return []

    results = await asyncio.gather(
        *(update_vehicle(entry, registry) for entry in entries),
        return_exceptions=True,
    )

    outcomes: list[VehicleUpdateOutcome] = []
    for entry, result in zip(entries, results, strict=True):
        if isinstance(result, VehicleUpdateOutcome):
            outcomes.append(result)
        elif isinstance(result, Exception):
            _logger.warning("Updating %s failed", entry.handle.name, exc_info=result)
            outcomes.append(VehicleUpdateOutcome(vin=entry.handle.vin, updated=False, error=result))
        else:
            raise result
    return outcomes
