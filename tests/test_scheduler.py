"""Tests for the refresh tick loop."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

from cast_bridge.scheduler import RefreshScheduler

# --- RefreshScheduler ---


async def test_ticks_count_up() -> None:
    """on_tick receives consecutive counts starting at one."""
    ticks: list[int] = []

    async def on_tick(count: int) -> None:
        ticks.append(count)

    scheduler = RefreshScheduler("test", on_tick, interval=0.01)
    scheduler.start()
    await asyncio.sleep(0.1)
    await scheduler.stop()

    assert len(ticks) >= 3
    assert ticks == list(range(1, len(ticks) + 1))
    assert not scheduler.running


async def test_stop_from_own_tick() -> None:
    """Stopping inside a tick ends the loop without deadlocking."""
    ticks: list[int] = []

    async def on_tick(count: int) -> None:
        ticks.append(count)
        await scheduler.stop()

    scheduler = RefreshScheduler("test", on_tick, interval=0.01)
    scheduler.start()
    await asyncio.sleep(0.1)

    assert ticks == [1]
    assert not scheduler.running


async def test_failing_tick_keeps_running() -> None:
    """An exception in one tick does not end the loop."""
    ticks: list[int] = []

    async def on_tick(count: int) -> None:
        ticks.append(count)
        if count == 1:
            raise RuntimeError("boom")

    scheduler = RefreshScheduler("test", on_tick, interval=0.01)
    scheduler.start()
    await asyncio.sleep(0.1)
    await scheduler.stop()

    assert ticks[:2] == [1, 2]


async def test_start_twice_single_loop() -> None:
    """Starting a running scheduler keeps the existing loop."""
    scheduler = RefreshScheduler("test", AsyncMock(), interval=3600)
    scheduler.start()
    task = scheduler._task
    scheduler.start()
    assert scheduler._task is task
    await scheduler.stop()
    await scheduler.stop()
