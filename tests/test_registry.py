from __future__ import annotations

import pytest

from pyfordpass.config import VehicleConfigEntry
from pyfordpass.host import CharacteristicType, HostBridge, PlatformAccessory, ServiceType
from pyfordpass.platform.registry import (
    AccessoryRegistry,
    Reconciler,
    RegistryEntry,
    plan_reconciliation,
    vehicle_uuid,
)
from pyfordpass.vehicle import VehicleHandle

from conftest import SUV_VIN, TRUCK_VIN, VAN_VIN, FakeConnection

TRUCK = VehicleConfigEntry(name="Truck", vin=TRUCK_VIN)
SUV = VehicleConfigEntry(name="SUV", vin=SUV_VIN)
VAN = VehicleConfigEntry(name="Van", vin=VAN_VIN)


def _restored(name: str, vin: str) -> PlatformAccessory:
    return PlatformAccessory(name, vehicle_uuid(vin), {"name": name, "vin": vin})


def test_vehicle_uuid_ignores_case_and_whitespace() -> None:
    assert vehicle_uuid(TRUCK_VIN.lower()) == vehicle_uuid(f" {TRUCK_VIN} ")
    assert vehicle_uuid(TRUCK_VIN) != vehicle_uuid(SUV_VIN)


def test_plan_adds_everything_on_empty_registry() -> None:
    plan = plan_reconciliation([TRUCK, SUV], [])
    assert plan.to_add == (TRUCK, SUV)
    assert plan.to_remove == ()


def test_plan_adds_and_removes_by_vin() -> None:
    registered = [
        _restored("Truck", TRUCK_VIN),
        _restored("SUV", SUV_VIN),
    ]

    plan = plan_reconciliation([TRUCK, VAN], registered)

    assert plan.to_add == (VAN,)
    assert [a.display_name for a in plan.to_remove] == ["SUV"]


def test_plan_adds_duplicate_vin_once() -> None:
    duplicate = VehicleConfigEntry(name="Truck again", vin=TRUCK_VIN.lower())
    plan = plan_reconciliation([TRUCK, duplicate], [])
    assert plan.to_add == (TRUCK,)


def test_plan_matches_renamed_vehicle_on_vin() -> None:
    renamed = VehicleConfigEntry(name="Work truck", vin=TRUCK_VIN)
    plan = plan_reconciliation([renamed], [_restored("Truck", TRUCK_VIN)])
    assert plan.is_empty


def test_registry_rejects_duplicate_uuid(connection: FakeConnection) -> None:
    registry = AccessoryRegistry()
    accessory = PlatformAccessory("Truck", vehicle_uuid(TRUCK_VIN))
    registry.add(RegistryEntry(accessory=accessory, handle=VehicleHandle("Truck", TRUCK_VIN, connection)))

    with pytest.raises(ValueError):
        registry.add(RegistryEntry(accessory=accessory, handle=VehicleHandle("Truck", TRUCK_VIN, connection)))
    assert len(registry) == 1
    assert accessory.uuid in registry


def test_reconcile_registers_new_vehicles(host: HostBridge, connection: FakeConnection) -> None:
    registry = AccessoryRegistry()
    reconciler = Reconciler(host, connection)

    reconciler.reconcile([TRUCK, SUV], registry)

    assert set(host.accessories) == {vehicle_uuid(TRUCK_VIN), vehicle_uuid(SUV_VIN)}
    assert [h.vin for h in registry.handles()] == [TRUCK_VIN, SUV_VIN]
    truck = registry.get(vehicle_uuid(TRUCK_VIN))
    assert truck is not None
    assert truck.accessory.context == {"name": "Truck", "vin": TRUCK_VIN}
    info = truck.accessory.get_service(ServiceType.ACCESSORY_INFORMATION)
    assert info is not None
    assert info.get_characteristic(CharacteristicType.MANUFACTURER).value == "Ford"
    assert info.get_characteristic(CharacteristicType.MODEL).value == "Truck"
    assert info.get_characteristic(CharacteristicType.SERIAL_NUMBER).value == TRUCK_VIN


def test_reconcile_is_idempotent(host: HostBridge, connection: FakeConnection) -> None:
    registry = AccessoryRegistry()
    reconciler = Reconciler(host, connection)

    reconciler.reconcile([TRUCK, SUV], registry)
    second = reconciler.reconcile([TRUCK, SUV], registry)

    assert second.is_empty
    assert len(registry) == 2
    assert len(host.accessories) == 2


def test_reconcile_replaces_removed_vehicle(host: HostBridge, connection: FakeConnection) -> None:
    registry = AccessoryRegistry()
    reconciler = Reconciler(host, connection)
    reconciler.reconcile([TRUCK, SUV], registry)

    plan = reconciler.reconcile([TRUCK, VAN], registry)

    assert plan.to_add == (VAN,)
    assert [a.display_name for a in plan.to_remove] == ["SUV"]
    assert set(host.accessories) == {vehicle_uuid(TRUCK_VIN), vehicle_uuid(VAN_VIN)}
    assert {h.vin for h in registry.handles()} == {TRUCK_VIN, VAN_VIN}


def test_adopt_restored_accessory_without_vin_is_removed(host: HostBridge, connection: FakeConnection) -> None:
    registry = AccessoryRegistry()
    reconciler = Reconciler(host, connection)
    stale = PlatformAccessory("Old", vehicle_uuid("OLD"), {"name": "Old"})
    host.register_platform_accessories("homebridge-fordpass", "FordPass", [stale])

    entry = reconciler.adopt(stale, registry)
    assert entry.handle.vin == ""

    plan = reconciler.reconcile([TRUCK], registry)

    assert plan.to_remove == (stale,)
    assert stale.uuid not in registry
    assert set(host.accessories) == {vehicle_uuid(TRUCK_VIN)}


@pytest.mark.parametrize("context", [{"name": "Truck"}, {"name": "Truck", "vin": SUV_VIN}])
def test_plan_replaces_accessory_with_mismatched_vin(context: dict[str, str]) -> None:
    broken = PlatformAccessory("Truck", vehicle_uuid(TRUCK_VIN), context)

    plan = plan_reconciliation([TRUCK], [broken])

    assert plan.to_add == (TRUCK,)
    assert plan.to_remove == (broken,)


def test_reconcile_rebuilds_accessory_missing_its_vin(host: HostBridge, connection: FakeConnection) -> None:
    registry = AccessoryRegistry()
    reconciler = Reconciler(host, connection)
    broken = PlatformAccessory("Truck", vehicle_uuid(TRUCK_VIN), {"name": "Truck"})
    host.register_platform_accessories("homebridge-fordpass", "FordPass", [broken])
    reconciler.adopt(broken, registry)

    reconciler.reconcile([TRUCK], registry)

    entry = registry.get(vehicle_uuid(TRUCK_VIN))
    assert entry is not None
    assert entry.accessory is not broken
    assert entry.handle.vin == TRUCK_VIN
    assert host.accessories[vehicle_uuid(TRUCK_VIN)] is entry.accessory
    assert reconciler.reconcile([TRUCK], registry).is_empty
