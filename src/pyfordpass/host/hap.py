"""HomeKit Accessory Protocol host backed by HAP-python.

:class:`HapHost` keeps the registry, cache and lifecycle of
:class:`~pyfordpass.host.bridge.HostBridge` and mirrors every in-scope
accessory onto a ``pyhap`` bridge so HomeKit controllers can pair with
it.  The HAP driver runs its own event loop in a daemon thread:

* controller reads block the driver thread until the characteristic's
  async get handler has answered on the bridge loop (bounded by
  ``read_timeout``);
* controller writes are handed to the bridge loop without waiting, and a
  rejected write reverts the HAP value to the cached one;
* cached value changes are pushed to the HAP characteristic, which
  notifies subscribed controllers.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import threading
import uuid as uuid_mod
from collections.abc import Callable
from functools import partial
from pathlib import Path
from typing import Any

from pyhap.accessory import Accessory, Bridge
from pyhap.accessory_driver import AccessoryDriver
from pyhap.characteristic import Characteristic as HapCharacteristic
from pyhap.const import CATEGORY_DOOR_LOCK

from pyfordpass._constants import BRIDGE_NAME, HAP_PORT, HAP_READ_TIMEOUT
from pyfordpass.host.accessory import (
    Characteristic,
    CharacteristicReadError,
    CharacteristicType,
    CharacteristicValue,
    PlatformAccessory,
    ServiceType,
)
from pyfordpass.host.bridge import HostBridge, Platform

_logger = logging.getLogger(__name__)

_INFO_FIELDS: dict[CharacteristicType, str] = {
    CharacteristicType.MANUFACTURER: "manufacturer",
    CharacteristicType.MODEL: "model",
    CharacteristicType.SERIAL_NUMBER: "serial_number",
}


def accessory_aid(uuid: str) -> int:
    """Stable HAP accessory id for *uuid*; ids below 2 belong to the bridge."""
    return int(uuid_mod.UUID(uuid)) % (2**32 - 2) + 2


class HapHost(HostBridge):
    """Host runtime publishing its accessories as a HomeKit bridge."""

    def __init__(
        self,
        persist_path: Path | str | None = None,
        *,
        port: int = HAP_PORT,
        state_file: Path | str | None = None,
        pincode: str | None = None,
        address: str | None = None,
        bridge_name: str = BRIDGE_NAME,
        read_timeout: float = HAP_READ_TIMEOUT,
        driver: AccessoryDriver | None = None,
    ) -> None:
        super().__init__(persist_path)
        if driver is None:
            state_path = Path(state_file) if state_file is not None else Path.home() / ".pyfordpass" / "hap.state"
            state_path.parent.mkdir(parents=True, exist_ok=True)
            driver_kwargs: dict[str, Any] = {"port": port, "persist_file": str(state_path)}
            if pincode:
                driver_kwargs["pincode"] = pincode.encode("utf-8")
            if address:
                driver_kwargs["address"] = address
            driver = AccessoryDriver(**driver_kwargs)
        self._driver = driver
        self._bridge = Bridge(driver, bridge_name)
        self._hap_accessories: dict[str, Accessory] = {}
        self._read_timeout = read_timeout
        self._loop: asyncio.AbstractEventLoop | None = None
        self._driver_thread: threading.Thread | None = None
        self._pending_writes: set[concurrent.futures.Future[None]] = set()

    @property
    def bridge(self) -> Bridge:
        return self._bridge

    @property
    def serving(self) -> bool:
        """Whether the HAP driver loop is running."""
        return self._driver.loop.is_running()

    def hap_accessory(self, uuid: str) -> Accessory | None:
        return self._hap_accessories.get(uuid)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def launch(self, platform: Platform) -> None:
        """Restore and reconcile accessories, then start the HAP driver."""
        self._loop = asyncio.get_running_loop()
        await super().launch(platform)
        self._driver.add_accessory(self._bridge)
        self._driver_thread = threading.Thread(target=self._driver.start, name="hap-driver", daemon=True)
        self._driver_thread.start()
        _logger.info(
            "HomeKit bridge %s started with %d accessories", self._bridge.display_name, len(self._hap_accessories)
        )

    async def shutdown(self) -> None:
        await super().shutdown()
        for future in list(self._pending_writes):
            future.cancel()
        if self._driver_thread is not None:
            _logger.info("Stopping HomeKit bridge %s", self._bridge.display_name)
            self._driver.stop()
            await asyncio.to_thread(self._driver_thread.join, 5.0)
            self._driver_thread = None

    # ------------------------------------------------------------------
    # Mirroring
    # ------------------------------------------------------------------

    def _accessory_added(self, accessory: PlatformAccessory) -> None:
        hap_accessory = self._build(accessory)
        self._hap_accessories[accessory.uuid] = hap_accessory
        self._change_bridge(partial(self._bridge.add_accessory, hap_accessory))
        _logger.debug("Published %s as HAP accessory %d", accessory.display_name, hap_accessory.aid)

    def _accessory_removed(self, accessory: PlatformAccessory) -> None:
        hap_accessory = self._hap_accessories.pop(accessory.uuid, None)
        if hap_accessory is None:
            return
        self._change_bridge(partial(self._bridge.accessories.pop, hap_accessory.aid, None))
        _logger.debug("Withdrew HAP accessory %d (%s)", hap_accessory.aid, accessory.display_name)

    def _change_bridge(self, change: Callable[[], Any]) -> None:
        if not self.serving:
            change()
            return

        def apply() -> None:
            change()
            self._driver.config_changed()

        self._driver.loop.call_soon_threadsafe(apply)

    def _build(self, accessory: PlatformAccessory) -> Accessory:
        hap_accessory = Accessory(self._driver, accessory.display_name, aid=accessory_aid(accessory.uuid))
        hap_accessory.category = CATEGORY_DOOR_LOCK

        info = accessory.get_service(ServiceType.ACCESSORY_INFORMATION)
        if info is not None:
            values = {c.type: c.value for c in info.characteristics if c.value not in (None, "")}
            hap_accessory.set_info_service(
                **{field: str(values[ctype]) for ctype, field in _INFO_FIELDS.items() if ctype in values}
            )

        for service in accessory.services:
            if service.type is ServiceType.ACCESSORY_INFORMATION:
                continue
            hap_service = hap_accessory.add_preload_service(
                service.type.value, chars=[c.type.value for c in service.characteristics]
            )
            for characteristic in service.characteristics:
                hap_char = hap_service.get_characteristic(characteristic.type.value)
                if characteristic.value is not None:
                    hap_char.set_value(characteristic.value, should_notify=False)
                hap_char.getter_callback = partial(self._read, characteristic, hap_char)
                hap_char.setter_callback = partial(self._write, characteristic, hap_char)
                characteristic.subscribe(partial(self._push, hap_char))
        return hap_accessory

    def _push(self, hap_char: HapCharacteristic, value: CharacteristicValue) -> None:
        if value is None:
            return
        if self.serving:
            self._driver.loop.call_soon_threadsafe(hap_char.set_value, value)
        else:
            hap_char.set_value(value, should_notify=False)

    # ------------------------------------------------------------------
    # Controller requests (driver thread)
    # ------------------------------------------------------------------

    def _read(self, characteristic: Characteristic, hap_char: HapCharacteristic) -> CharacteristicValue:
        if self._loop is None:
            return hap_char.value
        future = asyncio.run_coroutine_threadsafe(characteristic.handle_get(), self._loop)
        try:
            value = future.result(self._read_timeout)
        except TimeoutError as exc:
            future.cancel()
            raise CharacteristicReadError(f"{characteristic.type.value} read timed out") from exc
        return hap_char.value if value is None else value

    def _write(self, characteristic: Characteristic, hap_char: HapCharacteristic, value: CharacteristicValue) -> None:
        if self._loop is None:
            _logger.warning("Ignoring %s write before launch", characteristic.type.value)
            self._push(hap_char, characteristic.value)
            return
        future = asyncio.run_coroutine_threadsafe(characteristic.handle_set(value), self._loop)
        self._pending_writes.add(future)
        future.add_done_callback(partial(self._write_done, characteristic, hap_char))

    def _write_done(
        self, characteristic: Characteristic, hap_char: HapCharacteristic, future: concurrent.futures.Future[None]
    ) -> None:
        self._pending_writes.discard(future)
        if future.cancelled():
            return
        exc = future.exception()
        if exc is None:
            return
        _logger.warning("Write of %s failed: %s", characteristic.type.value, exc)
        self._push(hap_char, characteristic.value)
