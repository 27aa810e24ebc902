"""Periodic background loops of the bridge."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable

_logger = logging.getLogger(__name__)


class PeriodicTask:
    """Run *callback* every *interval* seconds until stopped.

    Each tick runs in its own task, so a tick that outlasts the interval
    overlaps with the next one instead of delaying it.  A failing tick is
    logged and the schedule continues.
    """

    def __init__(self, name: str, interval: float, callback: Callable[[], Awaitable[object]]) -> None:
        if interval <= 0:
            raise ValueError(f"{name} interval must be positive, got {interval}")
        self.name = name
        self.interval = interval
        self._callback = callback
        self._ticker: asyncio.Task[None] | None = None
        self._inflight: set[asyncio.Task[None]] = set()
        self._tick_count = 0

    @property
    def running(self) -> bool:
        return self._ticker is not None and not self._ticker.done()

    @property
    def tick_count(self) -> int:
        return self._tick_count

    def start(self) -> None:
        if self.running:
            return
        self._ticker = asyncio.create_task(self._run(), name=f"pyfordpass-{self.name}")

    async def stop(self) -> None:
        """Cancel the schedule and every tick still in flight."""
        tasks: list[asyncio.Task[None]] = list(self._inflight)
        if self._ticker is not None:
            tasks.append(self._ticker)
            self._ticker = None
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._inflight.clear()

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self._tick_count += 1
            task = asyncio.create_task(self._tick(), name=f"pyfordpass-{self.name}-{self._tick_count}")
            self._inflight.add(task)
            task.add_done_callback(self._inflight.discard)

    async def _tick(self) -> None:
        try:
            await self._callback()
        except Exception:
            _logger.warning("%s tick failed", self.name, exc_info=True)


class Scheduler:
    """Owns the session-refresh loop and the status-poll loop."""

    def __init__(
        self,
        *,
        refresh_session: Callable[[], Awaitable[object]],
        update_vehicles: Callable[[], Awaitable[object]],
        session_interval: float,
        poll_interval: float,
    ) -> None:
        self.session_task = PeriodicTask("session-refresh", session_interval, refresh_session)
        self.poll_task = PeriodicTask("status-poll", poll_interval, update_vehicles)

    @property
    def running(self) -> bool:
        return self.session_task.running or self.poll_task.running

    def start(self) -> None:
        self.session_task.start()
        self.poll_task.start()

    async def stop(self) -> None:
        await self.session_task.stop()
        await self.poll_task.stop()
