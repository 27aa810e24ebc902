"""Accessory object model of the in-process host.

Accessories carry services; services carry characteristics.  A
characteristic caches its last value and may have one async get handler
and one async set handler.  Handlers report failures by raising a
:class:`CharacteristicError`, which the host passes to the requesting
controller unchanged.
"""

from __future__ import annotations

import enum
import hashlib
import uuid as uuid_mod
from collections.abc import Awaitable, Callable
from typing import Any


CharacteristicValue = bool | int | float | str | None
GetHandler = Callable[[], Awaitable[CharacteristicValue]]
SetHandler = Callable[[CharacteristicValue], Awaitable[None]]
ValueListener = Callable[[CharacteristicValue], None]


class HostError(Exception):
    """Misuse of the host API (e.g. registering a uuid twice)."""


class CharacteristicError(Exception):
    """Base for read/write failures reported by characteristic handlers."""


class CharacteristicReadError(CharacteristicError):
    """A characteristic value could not be read."""


class CharacteristicWriteError(CharacteristicError):
    """A characteristic write was not carried out."""


class ServiceType(enum.StrEnum):
    ACCESSORY_INFORMATION = "AccessoryInformation"
    LOCK_MECHANISM = "LockMechanism"
    SWITCH = "Switch"


class CharacteristicType(enum.StrEnum):
    NAME = "Name"
    MANUFACTURER = "Manufacturer"
    MODEL = "Model"
    SERIAL_NUMBER = "SerialNumber"
    LOCK_CURRENT_STATE = "LockCurrentState"
    LOCK_TARGET_STATE = "LockTargetState"
    ON = "On"


def generate_uuid(data: str) -> str:
    """Deterministic UUID string derived from the SHA-1 of *data*."""
    digest = hashlib.sha1(data.encode("utf-8"), usedforsecurity=False).digest()
    return str(uuid_mod.UUID(bytes=digest[:16]))


class Characteristic:
    """A readable and possibly writable accessory value."""

    def __init__(self, ctype: CharacteristicType, value: CharacteristicValue = None) -> None:
        self.type = ctype
        self._value = value
        self._get_handler: GetHandler | None = None
        self._set_handler: SetHandler | None = None
        self._listeners: list[ValueListener] = []

    def __repr__(self) -> str:
        return f"Characteristic({self.type.value}={self._value!r})"

    @property
    def value(self) -> CharacteristicValue:
        return self._value

    def on_get(self, handler: GetHandler) -> Characteristic:
        self._get_handler = handler
        return self

    def on_set(self, handler: SetHandler) -> Characteristic:
        self._set_handler = handler
        return self

    def subscribe(self, listener: ValueListener) -> Characteristic:
        """Call *listener* with every new cached value."""
        self._listeners.append(listener)
        return self

    def update_value(self, value: CharacteristicValue) -> Characteristic:
        """Set the cached value without running any handler."""
        self._store(value)
        return self

    async def handle_get(self) -> CharacteristicValue:
        """Serve a controller read: run the get handler and cache its result."""
        if self._get_handler is None:
            return self._value
        value = await self._get_handler()
        self._store(value)
        return value

    async def handle_set(self, value: CharacteristicValue) -> None:
        """Serve a controller write: run the set handler, then cache *value*."""
        if self._set_handler is not None:
            await self._set_handler(value)
        self._store(value)

    def _store(self, value: CharacteristicValue) -> None:
        changed = value != self._value
        self._value = value
        if changed:
            for listener in list(self._listeners):
                listener(value)


class Service:
    """A group of characteristics of one service type."""

    def __init__(self, stype: ServiceType) -> None:
        self.type = stype
        self._characteristics: dict[CharacteristicType, Characteristic] = {}

    def __repr__(self) -> str:
        return f"Service({self.type.value}, {list(self._characteristics.values())!r})"

    @property
    def characteristics(self) -> list[Characteristic]:
        return list(self._characteristics.values())

    def get_characteristic(self, ctype: CharacteristicType) -> Characteristic:
        """Return the characteristic of *ctype*, creating it on first use."""
        characteristic = self._characteristics.get(ctype)
        if characteristic is None:
            characteristic = Characteristic(ctype)
            self._characteristics[ctype] = characteristic
        return characteristic

    def update_characteristic(self, ctype: CharacteristicType, value: CharacteristicValue) -> Service:
        self.get_characteristic(ctype).update_value(value)
        return self


class PlatformAccessory:
    """An accessory owned by a platform.

    ``context`` is persisted with the accessory by the host and handed
    back unchanged when the accessory is restored from cache.
    """

    def __init__(self, display_name: str, uuid: str, context: dict[str, Any] | None = None) -> None:
        self.display_name = display_name
        self.uuid = uuid
        self.context: dict[str, Any] = dict(context or {})
        self._services: dict[ServiceType, Service] = {}
        self.add_service(ServiceType.ACCESSORY_INFORMATION)

    def __repr__(self) -> str:
        return f"PlatformAccessory({self.display_name!r}, {self.uuid!r})"

    @property
    def services(self) -> list[Service]:
        return list(self._services.values())

    def get_service(self, stype: ServiceType) -> Service | None:
        return self._services.get(stype)

    def add_service(self, stype: ServiceType) -> Service:
        if stype in self._services:
            raise HostError(f"{self.display_name} already has a {stype.value} service")
        service = Service(stype)
        self._services[stype] = service
        return service

    def get_or_add_service(self, stype: ServiceType) -> Service:
        """Reuse an existing service (restored accessories) or add a new one."""
        return self._services.get(stype) or self.add_service(stype)
