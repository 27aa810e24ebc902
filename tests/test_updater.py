from __future__ import annotations

import asyncio

import pytest

from pyfordpass.config import VehicleConfigEntry
from pyfordpass.host import CharacteristicType, HostBridge, PlatformAccessory, ServiceType
from pyfordpass.models.status import LockState
from pyfordpass.platform.registry import AccessoryRegistry, Reconciler, vehicle_uuid
from pyfordpass.platform.updater import project_status, update_vehicles

from conftest import SUV_VIN, TRUCK_VIN, FakeConnection, snapshot


@pytest.fixture
def registry(host: HostBridge, connection: FakeConnection) -> AccessoryRegistry:
    registry = AccessoryRegistry()
    Reconciler(host, connection).reconcile(
        [VehicleConfigEntry(name="Truck", vin=TRUCK_VIN), VehicleConfigEntry(name="SUV", vin=SUV_VIN)],
        registry,
    )
    return registry


def _values(accessory: PlatformAccessory) -> tuple[object, object, object]:
    lock = accessory.get_service(ServiceType.LOCK_MECHANISM)
    switch = accessory.get_service(ServiceType.SWITCH)
    assert lock is not None and switch is not None
    return (
        lock.get_characteristic(CharacteristicType.LOCK_CURRENT_STATE).value,
        lock.get_characteristic(CharacteristicType.LOCK_TARGET_STATE).value,
        switch.get_characteristic(CharacteristicType.ON).value,
    )


def _accessory(registry: AccessoryRegistry, vin: str) -> PlatformAccessory:
    entry = registry.get(vehicle_uuid(vin))
    assert entry is not None
    return entry.accessory


def test_project_status_sets_lock_and_switch(registry: AccessoryRegistry) -> None:
    accessory = _accessory(registry, TRUCK_VIN)
    project_status(accessory, snapshot(LockState.UNLOCKED, level=2))
    assert _values(accessory) == (0, 0, True)


@pytest.mark.asyncio
async def test_update_pass_projects_every_vehicle(registry: AccessoryRegistry, connection: FakeConnection) -> None:
    connection.snapshots[TRUCK_VIN] = snapshot(LockState.UNLOCKED, level=0)
    connection.snapshots[SUV_VIN] = snapshot(LockState.LOCKED, level=3)

    outcomes = await update_vehicles(registry)

    assert [(o.vin, o.updated) for o in outcomes] == [(TRUCK_VIN, True), (SUV_VIN, True)]
    assert _values(_accessory(registry, TRUCK_VIN)) == (0, 0, False)
    assert _values(_accessory(registry, SUV_VIN)) == (1, 1, True)
    assert {h.vin: h.last_status for h in registry.handles()} == {
        TRUCK_VIN: connection.snapshots[TRUCK_VIN],
        SUV_VIN: connection.snapshots[SUV_VIN],
    }


@pytest.mark.asyncio
async def test_failed_vehicle_keeps_previous_state(registry: AccessoryRegistry, connection: FakeConnection) -> None:
    first = snapshot(LockState.UNLOCKED, level=0)
    connection.snapshots[TRUCK_VIN] = first
    connection.snapshots[SUV_VIN] = snapshot(LockState.UNLOCKED, level=0)
    await update_vehicles(registry)

    connection.snapshots[TRUCK_VIN] = None
    connection.snapshots[SUV_VIN] = snapshot(LockState.LOCKED, level=1)
    outcomes = await update_vehicles(registry)

    assert [(o.vin, o.updated, o.error) for o in outcomes] == [(TRUCK_VIN, False, None), (SUV_VIN, True, None)]
    truck = registry.get(vehicle_uuid(TRUCK_VIN))
    assert truck is not None
    assert truck.handle.last_status is first
    assert _values(truck.accessory) == (0, 0, False)
    assert _values(_accessory(registry, SUV_VIN)) == (1, 1, True)


@pytest.mark.asyncio
async def test_raising_vehicle_does_not_affect_others(
    registry: AccessoryRegistry, connection: FakeConnection
) -> None:
    connection.raising.add(TRUCK_VIN)
    connection.snapshots[SUV_VIN] = snapshot(LockState.UNLOCKED, level=0)

    outcomes = await update_vehicles(registry)

    truck, suv = outcomes
    assert truck.updated is False
    assert isinstance(truck.error, RuntimeError)
    assert suv.updated is True
    assert _values(_accessory(registry, SUV_VIN)) == (0, 0, False)
    assert _values(_accessory(registry, TRUCK_VIN)) == (1, 1, False)


@pytest.mark.asyncio
async def test_vehicle_removed_during_fetch_is_not_projected(
    registry: AccessoryRegistry, connection: FakeConnection
) -> None:
    gate = asyncio.Event()
    connection.gates[TRUCK_VIN] = gate
    connection.snapshots[TRUCK_VIN] = snapshot(LockState.UNLOCKED, level=3)
    connection.snapshots[SUV_VIN] = snapshot(LockState.LOCKED, level=0)
    truck = _accessory(registry, TRUCK_VIN)

    task = asyncio.create_task(update_vehicles(registry))
    while TRUCK_VIN not in connection.status_calls:
        await asyncio.sleep(0)
    registry.remove(truck.uuid)
    gate.set()
    outcomes = await task

    assert [(o.vin, o.updated) for o in outcomes] == [(TRUCK_VIN, False), (SUV_VIN, True)]
    assert _values(truck) == (1, 1, False)


@pytest.mark.asyncio
async def test_empty_registry_is_a_no_op(connection: FakeConnection) -> None:
    assert await update_vehicles(AccessoryRegistry()) == []
    assert connection.status_calls == []
