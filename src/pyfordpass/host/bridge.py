"""In-process accessory host.

:class:`HostBridge` plays the host runtime's role for a platform: it
keeps the registered accessories, persists them between runs, hands
cached accessories back through ``configure_accessory`` and fires the
launch and shutdown events.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable
from pathlib import Path
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from pyfordpass.host.accessory import HostError, PlatformAccessory

_logger = logging.getLogger(__name__)

LifecycleCallback = Callable[[], Awaitable[None]]


class CachedAccessory(BaseModel):
    """Persisted form of a registered accessory."""

    model_config = ConfigDict(extra="ignore")

    plugin_name: str
    platform_name: str
    uuid: str
    display_name: str
    context: dict[str, Any] = Field(default_factory=dict)


_CACHE_ADAPTER = TypeAdapter(list[CachedAccessory])


class Platform(Protocol):
    """What the host requires from a platform.

    Only cached accessories registered under the platform's own
    ``plugin_name`` and ``platform_name`` are handed back to it.
    """

    plugin_name: str
    platform_name: str

    def configure_accessory(self, accessory: PlatformAccessory) -> None:
        ...


class HostApi(Protocol):
    """Host services available to a platform."""

    def register_platform_accessories(
        self, plugin_name: str, platform_name: str, accessories: Iterable[PlatformAccessory]
    ) -> None:
        ...

    def unregister_platform_accessories(
        self, plugin_name: str, platform_name: str, accessories: Iterable[PlatformAccessory]
    ) -> None:
        ...

    def on_did_finish_launching(self, callback: LifecycleCallback) -> None:
        ...

    def on_shutdown(self, callback: LifecycleCallback) -> None:
        ...


class HostBridge:
    """Host runtime keeping accessories in memory and, optionally, on disk."""

    def __init__(self, persist_path: Path | str | None = None) -> None:
        self._persist_path = Path(persist_path) if persist_path is not None else None
        self._accessories: dict[str, tuple[str, str, PlatformAccessory]] = {}
        self._launch_callbacks: list[LifecycleCallback] = []
        self._shutdown_callbacks: list[LifecycleCallback] = []
        self._launched = False

    @property
    def accessories(self) -> dict[str, PlatformAccessory]:
        """Registered accessories keyed by uuid."""
        return {uuid: accessory for uuid, (_, _, accessory) in self._accessories.items()}

    @property
    def launched(self) -> bool:
        return self._launched

    # ------------------------------------------------------------------
    # HostApi
    # ------------------------------------------------------------------

    def register_platform_accessories(
        self, plugin_name: str, platform_name: str, accessories: Iterable[PlatformAccessory]
    ) -> None:
        batch = list(accessories)
        for accessory in batch:
            if accessory.uuid in self._accessories:
                raise HostError(f"Accessory {accessory.display_name} ({accessory.uuid}) is already registered")
        for accessory in batch:
            self._accessories[accessory.uuid] = (plugin_name, platform_name, accessory)
            _logger.debug("Registered accessory %s", accessory.display_name)
            self._accessory_added(accessory)
        self._persist()

    def unregister_platform_accessories(
        self, plugin_name: str, platform_name: str, accessories: Iterable[PlatformAccessory]
    ) -> None:
        for accessory in accessories:
            entry = self._accessories.get(accessory.uuid)
            if entry is None or entry[:2] != (plugin_name, platform_name):
                _logger.warning("Cannot unregister unknown accessory %s", accessory.display_name)
                continue
            del self._accessories[accessory.uuid]
            _logger.debug("Unregistered accessory %s", accessory.display_name)
            self._accessory_removed(accessory)
        self._persist()

    def on_did_finish_launching(self, callback: LifecycleCallback) -> None:
        self._launch_callbacks.append(callback)

    def on_shutdown(self, callback: LifecycleCallback) -> None:
        self._shutdown_callbacks.append(callback)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def load_cached(self) -> list[CachedAccessory]:
        """Read the persisted accessories; an unreadable cache counts as empty."""
        if self._persist_path is None or not self._persist_path.exists():
            return []
        try:
            return _CACHE_ADAPTER.validate_json(self._persist_path.read_bytes())
        except (OSError, ValidationError) as exc:
            _logger.warning("Ignoring unreadable accessory cache %s: %s", self._persist_path, exc)
            return []

    async def launch(self, platform: Platform) -> None:
        """Restore cached accessories into *platform*, then fire launch callbacks.

        Accessories cached under another plugin or platform stay
        registered and persisted but are not handed to *platform*.
        """
        scope = (platform.plugin_name, platform.platform_name)
        for cached in self.load_cached():
            accessory = PlatformAccessory(cached.display_name, cached.uuid, cached.context)
            self._accessories[accessory.uuid] = (cached.plugin_name, cached.platform_name, accessory)
            if (cached.plugin_name, cached.platform_name) != scope:
                _logger.debug(
                    "Skipping %s cached for %s/%s", accessory.display_name, cached.plugin_name, cached.platform_name
                )
                continue
            platform.configure_accessory(accessory)
            self._accessory_added(accessory)
        self._launched = True
        for callback in list(self._launch_callbacks):
            await callback()

    async def shutdown(self) -> None:
        for callback in list(self._shutdown_callbacks):
            await callback()
        self._persist()

    def _accessory_added(self, accessory: PlatformAccessory) -> None:
        """Called once an in-scope accessory is registered or restored."""

    def _accessory_removed(self, accessory: PlatformAccessory) -> None:
        """Called once an accessory is unregistered."""

    def _persist(self) -> None:
        if self._persist_path is None:
            return
        cached = [
            CachedAccessory(
                plugin_name=plugin_name,
                platform_name=platform_name,
                uuid=accessory.uuid,
                display_name=accessory.display_name,
                context=accessory.context,
            )
            for plugin_name, platform_name, accessory in self._accessories.values()
        ]
        try:
            self._persist_path.parent.mkdir(parents=True, exist_ok=True)
            self._persist_path.write_bytes(_CACHE_ADAPTER.dump_json(cached, indent=2))
        except OSError as exc:
            _logger.warning("Could not write accessory cache %s: %s", self._persist_path, exc)
