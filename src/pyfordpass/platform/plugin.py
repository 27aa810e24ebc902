"""FordPass platform: the host-facing entry point of the bridge."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pyfordpass._constants import PLATFORM_NAME, PLUGIN_NAME
from pyfordpass.client import FordPassClient
from pyfordpass.config import FordPassConfig
from pyfordpass.exceptions import FordPassConfigError
from pyfordpass.host.accessory import PlatformAccessory
from pyfordpass.host.bridge import HostApi
from pyfordpass.platform.registry import AccessoryRegistry, Reconciler, ReconcilePlan
from pyfordpass.platform.scheduler import Scheduler
from pyfordpass.platform.updater import VehicleUpdateOutcome, update_vehicles
from pyfordpass.vehicle import Connection

_logger = logging.getLogger(__name__)


class FordPassPlatform:
    """Dynamic platform exposing configured vehicles as accessories.

    The host calls :meth:`configure_accessory` once per cached accessory
    and then fires the launch event, which runs :meth:`did_finish_launching`:
    authenticate, reconcile accessories, run one update pass and start
    the background loops.

    An invalid configuration is reported once; the platform then stays
    inert and does not subscribe to the launch event.
    """

    plugin_name = PLUGIN_NAME
    platform_name = PLATFORM_NAME

    def __init__(
        self,
        config: Mapping[str, Any] | FordPassConfig | None,
        api: HostApi,
        *,
        connection: Connection | None = None,
    ) -> None:
        self._api = api
        self.registry = AccessoryRegistry()
        self.config: FordPassConfig | None = None
        self.scheduler: Scheduler | None = None
        self._connection: Connection | None = None
        self._owns_connection = False
        self._reconciler: Reconciler | None = None

        # Need a config or the platform will not start
        if not config:
            return

        try:
            self.config = config if isinstance(config, FordPassConfig) else FordPassConfig.from_mapping(config)
        except FordPassConfigError as exc:
            _logger.error("Please add a username, password, and vehicles to your config: %s", exc)
            return

        if connection is None:
            connection = FordPassClient(self.config)
            self._owns_connection = True
        self._connection = connection
        self._reconciler = Reconciler(api, connection, plugin_name=self.plugin_name, platform_name=self.platform_name)

        api.on_did_finish_launching(self.did_finish_launching)
        api.on_shutdown(self.shutdown)

    @property
    def active(self) -> bool:
        """Whether the configuration was accepted."""
        return self._reconciler is not None

    def configure_accessory(self, accessory: PlatformAccessory) -> None:
        """Adopt an accessory restored from the host's cache."""
        if self._reconciler is None:
            return
        _logger.info("Configuring accessory %s", accessory.display_name)
        self._reconciler.adopt(accessory, self.registry)

    async def did_finish_launching(self) -> bool:
        """Bootstrap the bridge; ``False`` when no session could be established."""
        if self._connection is None or self.config is None:
            return False
        if self.scheduler is not None and self.scheduler.running:
            _logger.debug("Bridge already launched; ignoring repeated launch event")
            return True

        if not await self._connection.auth():
            _logger.error("Could not sign in to FordPass; vehicles will not be added or updated")
            return False

        self.reconcile()
        await self.update_vehicles()

        self.scheduler = Scheduler(
            refresh_session=self.refresh_session,
            update_vehicles=self.update_vehicles,
            session_interval=self.config.session_refresh_interval,
            poll_interval=self.config.poll_interval,
        )
        self.scheduler.start()
        return True

    def reconcile(self) -> ReconcilePlan:
        if self._reconciler is None or self.config is None:
            return ReconcilePlan()
        return self._reconciler.reconcile(self.config.vehicles, self.registry)

    async def update_vehicles(self) -> list[VehicleUpdateOutcome]:
        return await update_vehicles(self.registry)

    async def refresh_session(self) -> bool:
        if self._connection is None:
            return False
        _logger.debug("Reauthenticating with config credentials")
        if not await self._connection.auth():
            _logger.warning("FordPass session refresh failed; retrying on the next schedule")
            return False
        return True

    async def shutdown(self) -> None:
        """Stop the background loops and release the owned client."""
        if self.scheduler is not None:
            await self.scheduler.stop()
            self.scheduler = None
        if self._owns_connection and isinstance(self._connection, FordPassClient):
            await self._connection.close()
