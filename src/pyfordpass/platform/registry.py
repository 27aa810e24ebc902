"""Accessory registry and reconciliation.

The registry is a single mapping from the VIN-derived accessory uuid to
the accessory and its vehicle handle, so adding or removing a vehicle
always updates both together.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass

from pyfordpass._constants import PLATFORM_NAME, PLUGIN_NAME
from pyfordpass.config import VehicleConfigEntry
from pyfordpass.host.accessory import PlatformAccessory, generate_uuid
from pyfordpass.host.bridge import HostApi
from pyfordpass.platform.bindings import attach_vehicle, describe_accessory
from pyfordpass.vehicle import Connection, VehicleHandle

_logger = logging.getLogger(__name__)


def vehicle_uuid(vin: str) -> str:
    """Accessory uuid of *vin*; case-insensitive."""
    return generate_uuid(vin.strip().upper())


@dataclass(slots=True)
class RegistryEntry:
    accessory: PlatformAccessory
    handle: VehicleHandle

    @property
    def uuid(self) -> str:
        return self.accessory.uuid


class AccessoryRegistry:
    """Registered accessories and their vehicle handles, keyed by uuid."""

    def __init__(self) -> None:
        self._entries: dict[str, RegistryEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[RegistryEntry]:
        return iter(list(self._entries.values()))

    def __contains__(self, uuid: object) -> bool:
        return uuid in self._entries

    def get(self, uuid: str) -> RegistryEntry | None:
        return self._entries.get(uuid)

    def add(self, entry: RegistryEntry) -> None:
        if entry.uuid in self._entries:
            raise ValueError(f"Accessory {entry.accessory.display_name} ({entry.uuid}) is already registered")
        self._entries[entry.uuid] = entry

    def remove(self, uuid: str) -> RegistryEntry | None:
        return self._entries.pop(uuid, None)

    def accessories(self) -> list[PlatformAccessory]:
        return [entry.accessory for entry in self._entries.values()]

    def handles(self) -> list[VehicleHandle]:
        return [entry.handle for entry in self._entries.values()]


@dataclass(frozen=True, slots=True)
class ReconcilePlan:
    to_add: tuple[VehicleConfigEntry, ...] = ()
    to_remove: tuple[PlatformAccessory, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.to_add and not self.to_remove


def _is_bound(accessory: PlatformAccessory) -> bool:
    vin = str(accessory.context.get("vin") or "").strip()
    return bool(vin) and vehicle_uuid(vin) == accessory.uuid


def plan_reconciliation(
    desired: Sequence[VehicleConfigEntry],
    registered: Iterable[PlatformAccessory],
) -> ReconcilePlan:
    """Compute which vehicles to add and which accessories to remove.

    Vehicles and accessories are matched on the VIN-derived uuid.  A
    VIN declared twice is added once.  An accessory whose context VIN is
    missing or does not derive its uuid is removed, and its vehicle is
    added again when still declared.
    """
    registered = list(registered)
    kept_uuids = {accessory.uuid for accessory in registered if _is_bound(accessory)}

    to_add: list[VehicleConfigEntry] = []
    desired_uuids: set[str] = set()
    for entry in desired:
        uuid = vehicle_uuid(entry.vin)
        if uuid in desired_uuids:
            continue
        desired_uuids.add(uuid)
        if uuid not in kept_uuids:
            to_add.append(entry)

    to_remove = [accessory for accessory in registered if accessory.uuid not in desired_uuids & kept_uuids]
    return ReconcilePlan(to_add=tuple(to_add), to_remove=tuple(to_remove))


class Reconciler:
    """Applies reconciliation plans to a registry and the host."""

    def __init__(
        self,
        api: HostApi,
        connection: Connection,
        *,
        plugin_name: str = PLUGIN_NAME,
        platform_name: str = PLATFORM_NAME,
    ) -> None:
        self._api = api
        self._connection = connection
        self._plugin_name = plugin_name
        self._platform_name = platform_name

    def build_accessory(self, vehicle: VehicleConfigEntry) -> PlatformAccessory:
        """Create a new accessory for *vehicle* with its context filled in."""
        accessory = PlatformAccessory(vehicle.name, vehicle_uuid(vehicle.vin))
        accessory.context["name"] = vehicle.name
        accessory.context["vin"] = vehicle.vin
        describe_accessory(accessory, vehicle.name, vehicle.vin)
        return accessory

    def adopt(self, accessory: PlatformAccessory, registry: AccessoryRegistry) -> RegistryEntry:
        """Bind *accessory* to a new vehicle handle and record it."""
        handle = attach_vehicle(accessory, self._connection)
        entry = RegistryEntry(accessory=accessory, handle=handle)
        registry.add(entry)
        return entry

    def reconcile(self, desired: Sequence[VehicleConfigEntry], registry: AccessoryRegistry) -> ReconcilePlan:
        """Unregister undeclared vehicles, then register missing ones."""
        plan = plan_reconciliation(desired, registry.accessories())

        for accessory in plan.to_remove:
            _logger.info("Removing vehicle %s", accessory.display_name)
            self._api.unregister_platform_accessories(self._plugin_name, self._platform_name, [accessory])
            registry.remove(accessory.uuid)

        for vehicle in plan.to_add:
            _logger.debug("New vehicle found: %s", vehicle.name)
            accessory = self.build_accessory(vehicle)
            self.adopt(accessory, registry)
            self._api.register_platform_accessories(self._plugin_name, self._platform_name, [accessory])

        return plan
