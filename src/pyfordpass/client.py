"""High-level async client for the FordPass vehicle API."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import aiohttp

from pyfordpass._api import auth as _auth_api
from pyfordpass._api import commands as _commands_api
from pyfordpass._api import status as _status_api
from pyfordpass._transport import JsonTransport, Transport
from pyfordpass.config import FordPassConfig
from pyfordpass.exceptions import FordPassError, FordPassSessionExpiredError
from pyfordpass.models.command import Command, CommandResult
from pyfordpass.models.status import StatusSnapshot, VehicleStatus
from pyfordpass.session import DEFAULT_SESSION_TTL, Session

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class FordPassClient:
    """Async client for the FordPass vehicle API.

    Besides the raising API (:meth:`login`, :meth:`get_vehicle_status`,
    :meth:`send_command`) the client implements the bridge's connection
    contract (:meth:`auth`, :meth:`fetch_status`, :meth:`issue_command`),
    which logs failures and reports them as ``False``/``None``.

    Usage::

        async with FordPassClient(config) as client:
            if await client.auth():
                snapshot = await client.fetch_status(vin)
    """

    def __init__(
        self,
        config: FordPassConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport
        self._session: Session | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> FordPassClient:
        await self.open()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def open(self) -> None:
        """Create the HTTP session and transport if none were injected."""
        if self._transport is not None:
            return
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        self._transport = JsonTransport(self._http_session, timeout=self._config.request_timeout)

    async def close(self) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
            self._transport = None
        self._session = None

    @property
    def session(self) -> Session | None:
        return self._session

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    async def login(self) -> Session:
        """Authenticate against the token endpoint and store the session."""
        transport = await self._require_transport()
        token = await _auth_api.login(self._config, transport)
        ttl = token.expires_in if token.expires_in and token.expires_in > 0 else DEFAULT_SESSION_TTL
        self._session = Session(access_token=token.access_token, ttl=ttl)
        _logger.debug("Authenticated, session valid for %.0fs", ttl)
        return self._session

    async def ensure_session(self) -> Session:
        """Return an active session, re-authenticating if expired."""
        if self._session is not None and not self._session.is_expired:
            return self._session
        return await self.login()

    def invalidate_session(self) -> None:
        """Force session invalidation (next call will re-authenticate)."""
        self._session = None

    async def auth(self) -> bool:
        """Establish a fresh session; ``False`` when login fails."""
        try:
            await self.login()
        except FordPassError as exc:
            _logger.warning("FordPass authentication failed: %s", exc)
            self._session = None
            return False
        return True

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _require_transport(self) -> Transport:
        if self._transport is None:
            await self.open()
        assert self._transport is not None  # noqa: S101
        return self._transport

    async def _call_with_reauth(self, fn: Callable[[Session, Transport], Awaitable[T]]) -> T:
        """Run an API call, retrying once on session expiry."""
        transport = await self._require_transport()
        session = await self.ensure_session()
        try:
            return await fn(session, transport)
        except FordPassSessionExpiredError:
            self.invalidate_session()
            session = await self.ensure_session()
            return await fn(session, transport)

    # ------------------------------------------------------------------
    # Read endpoints
    # ------------------------------------------------------------------

    async def get_vehicle_status(self, vin: str) -> VehicleStatus:
        """Fetch the full status payload of *vin*."""

        async def _call(session: Session, transport: Transport) -> VehicleStatus:
            return await _status_api.fetch_vehicle_status(self._config, session, transport, vin)

        return await self._call_with_reauth(_call)

    async def fetch_status(self, vin: str) -> StatusSnapshot | None:
        """Fetch a fresh snapshot of *vin*; ``None`` on any failure."""
        try:
            status = await self.get_vehicle_status(vin)
        except FordPassError as exc:
            _logger.debug("Status fetch for %s failed: %s", vin, exc)
            return None
        return status.to_snapshot()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def send_command(self, vin: str, command: Command) -> CommandResult:
        """Send *command* to *vin* and wait for the vehicle's acknowledgement."""

        async def _call(session: Session, transport: Transport) -> CommandResult:
            return await _commands_api.poll_command(self._config, session, transport, vin, command)

        return await self._call_with_reauth(_call)

    async def issue_command(self, vin: str, command: Command) -> bool:
        """Send *command* to *vin*; ``False`` unless it was acknowledged."""
        try:
            await self.send_command(vin, command)
        except FordPassError as exc:
            _logger.warning("Command %s for %s failed: %s", command.value, vin, exc)
            return False
        return True
