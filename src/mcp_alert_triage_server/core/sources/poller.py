"""Periodic alert refresh with single-flight ticks and stale-result discard."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from .models import AlertSnapshot

logger = logging.getLogger(__name__)


class AlertPoller:
    """Re-fetch alerts every ``interval`` seconds.

    A timer tick is skipped while the previous timer fetch is still running.
    Every fetch (timer or manual :meth:`refresh`) is sequence-stamped, and a
    result older than the last applied one is dropped.
    """

    def __init__(
        self,
        fetch: Callable[[], Awaitable[AlertSnapshot]],
        *,
        interval: float = 30.0,
        on_snapshot: Callable[[AlertSnapshot], None] | None = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be > 0")
        self.interval = interval
        self.running = False
        self.snapshot: AlertSnapshot | None = None
        self._fetch = fetch
        self._on_snapshot = on_snapshot
        self._issued = 0
        self._applied = 0
        self._inflight: asyncio.Task[None] | None = None
        self._stopped = asyncio.Event()

    @property
    def busy(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    async def refresh(self) -> bool:
        """Fetch once; return False when the result was stale and dropped."""
        self._issued += 1
        seq = self._issued
        snapshot = await self._fetch()
        if seq < self._applied:
            logger.debug("Dropping stale poll result (seq=%s, applied=%s)", seq, self._applied)
            return False
        self._applied = seq
        self.snapshot = snapshot
        if self._on_snapshot is not None:
            self._on_snapshot(snapshot)
        return True

    async def _run_refresh(self) -> None:
        try:
            await self.refresh()
        except Exception:
            logger.exception("Alert poll failed")

    def tick(self) -> bool:
        """Start a background refresh unless one is already in flight."""
        if self.busy:
            logger.debug("Previous poll still in flight; skipping tick")
            return False
        self._inflight = asyncio.create_task(self._run_refresh())
        return True

    async def start(self) -> None:
        """Poll until :meth:`stop` is called."""
        self.running = True
        self._stopped.clear()
        logger.info("Alert poller started (interval=%ss)", self.interval)
        while not self._stopped.is_set():
            self.tick()
            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=self.interval)
            except TimeoutError:
                continue

    async def stop(self) -> None:
        self.running = False
        self._stopped.set()
        if self._inflight is not None:
            await asyncio.gather(self._inflight, return_exceptions=True)
        logger.info("Alert poller stopped")
