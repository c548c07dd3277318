"""Per-session tick loop driving the position clock and periodic polling."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class RefreshScheduler:
    """Calls on_tick(count) every interval seconds until stopped.

    A failing tick is logged and the loop carries on; the callback owns its
    own failure handling. stop() may be called from inside on_tick.
    """

    def __init__(
        self,
        name: str,
        on_tick: Callable[[int], Awaitable[None]],
        interval: float = 1.0,
    ) -> None:
        """Initialize the scheduler."""
        self._name = name
        self._on_tick = on_tick
        self.interval = interval
        self.ticks = 0
        self._task: asyncio.Task[None] | None = None
        self._stopping = False

    @property
    def running(self) -> bool:
        """Return True while the loop task is alive."""
        return self._task is not None and not self._task.done() and not self._stopping

    def start(self) -> None:
        """Start the loop; no-op when already running."""
        if self.running:
            return
        self._stopping = False
        self.ticks = 0
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the loop and wait for it, unless called from the loop itself."""
        self._stopping = True
        task, self._task = self._task, None
        if task is None or task.done():
            return
        if task is asyncio.current_task():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _run(self) -> None:
        try:
            while not self._stopping:
                await asyncio.sleep(self.interval)
                if self._stopping:
                    break
                self.ticks += 1
                try:
                    await self._on_tick(self.ticks)
                except Exception:
                    logger.exception("[Session:%s] Tick %d failed", self._name, self.ticks)
        except asyncio.CancelledError:
            return
