"""Minimal accessory host used to run the bridge in process."""

from pyfordpass.host.accessory import (
    Characteristic,
    CharacteristicError,
    CharacteristicReadError,
    CharacteristicType,
    CharacteristicValue,
    CharacteristicWriteError,
    HostError,
    PlatformAccessory,
    Service,
    ServiceType,
    generate_uuid,
)
from pyfordpass.host.bridge import CachedAccessory, HostApi, HostBridge, Platform

__all__ = [
    "CachedAccessory",
    "Characteristic",
    "CharacteristicError",
    "CharacteristicReadError",
    "CharacteristicType",
    "CharacteristicValue",
    "CharacteristicWriteError",
    "HostApi",
    "HostBridge",
    "HostError",
    "Platform",
    "PlatformAccessory",
    "Service",
    "ServiceType",
    "generate_uuid",
]
