"""Cooperative one-second tick that keeps countdowns current."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from time import monotonic
from typing import AsyncIterator, Callable

from auction_desk.config import Settings
from auction_desk.dashboard.view import AuctionRow, DashboardView
from auction_desk.lifecycle.countdown import CountdownReading
from auction_desk.logging import get_logger


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DashboardPoller:
    """Drive periodic countdown re-evaluation for the on-screen auctions.

    Runs only inside :meth:`visible`; leaving the context stops the loop and
    hides the view, so no timer outlives the screen. Network work is
    scheduled as background tasks and never awaited by the tick.
    """

    def __init__(
        self,
        *,
        view: DashboardView,
        settings: Settings | None = None,
        clock: Callable[[], datetime] = _utcnow,
        on_tick: Callable[[list[AuctionRow]], None] | None = None,
    ) -> None:
        self.view = view
        self.settings = settings or view.settings
        self._clock = clock
        self._on_tick = on_tick
        self._stopped = asyncio.Event()
        self._ticks = 0
        self._last_refresh = monotonic()
        self._drift_seen: frozenset[str] = frozenset()
        self._logger = get_logger(__name__, component="dashboard_poller")

    @property
    def ticks(self) -> int:
        return self._ticks

    def tick(self) -> dict[str, CountdownReading]:
        """Evaluate one tick with a single ``now`` snapshot for every row."""

        now = self._clock()
        readings = self.view.tick(now)
        self._ticks += 1
        self._maybe_refresh()
        if self._on_tick is not None:
            self._on_tick(self.view.rows())
        return readings

    def _maybe_refresh(self) -> None:
        if self.view.refresh_in_flight:
            return

        drifted = self.view.drifted()
        new_drift = drifted - self._drift_seen
        self._drift_seen = drifted
        due = monotonic() - self._last_refresh >= self.settings.list_refresh_seconds
        if not (due or new_drift):
            return

        self._last_refresh = monotonic()
        self._logger.debug("list_refresh_scheduled", due=due, drifted=sorted(new_drift))
        self.view.schedule_refresh()

    async def run(self, *, max_ticks: int | None = None) -> None:
        """Tick until stopped (or ``max_ticks`` is reached)."""

        interval = max(0.05, self.settings.tick_interval_seconds)
        ticks = 0
        while not self._stopped.is_set():
            start = monotonic()
            self.tick()
            ticks += 1
            if max_ticks is not None and ticks >= max_ticks:
                break
            elapsed = monotonic() - start
            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=max(0, interval - elapsed))
            except asyncio.TimeoutError:
                continue

    def stop(self) -> None:
        """Signal the tick loop to stop."""

        self._stopped.set()

    @asynccontextmanager
    async def visible(self) -> AsyncIterator["DashboardPoller"]:
        """Show the view and tick for as long as the context is open."""

        self._stopped.clear()
        self.view.show()
        self._last_refresh = monotonic()
        self._drift_seen = frozenset()
        self.view.schedule_refresh()
        task = asyncio.create_task(self.run())
        self._logger.info("poller_started", interval=self.settings.tick_interval_seconds)
        try:
            yield self
        finally:
            self.stop()
            await task
            await self.view.hide()
            self._logger.info("poller_stopped", ticks=self._ticks)


__all__ = ["DashboardPoller"]
