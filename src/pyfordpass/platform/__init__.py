"""Accessory platform: reconciliation, bindings and background loops."""

from pyfordpass.platform.bindings import VehicleBindings, attach_vehicle, engine_running, lock_state_value
from pyfordpass.platform.plugin import FordPassPlatform
from pyfordpass.platform.registry import (
    AccessoryRegistry,
    ReconcilePlan,
    Reconciler,
    RegistryEntry,
    plan_reconciliation,
    vehicle_uuid,
)
from pyfordpass.platform.scheduler import PeriodicTask, Scheduler
from pyfordpass.platform.updater import VehicleUpdateOutcome, project_status, update_vehicles

__all__ = [
    "AccessoryRegistry",
    "FordPassPlatform",
    "PeriodicTask",
    "ReconcilePlan",
    "Reconciler",
    "RegistryEntry",
    "Scheduler",
    "VehicleBindings",
    "VehicleUpdateOutcome",
    "attach_vehicle",
    "engine_running",
    "lock_state_value",
    "plan_reconciliation",
    "project_status",
    "update_vehicles",
    "vehicle_uuid",
]
