"""Tests for the command gate."""

from __future__ import annotations

import asyncio
import logging
from unittest.mock import AsyncMock

import pytest

from cast_bridge.gate import CommandGate


async def test_gate_runs_action() -> None:
    """guard runs the action and reports success."""
    on_failure = AsyncMock()
    action = AsyncMock()
    gate = CommandGate("test", on_failure, lambda: False)

    assert await gate.guard("play", action)
    action.assert_awaited_once()
    on_failure.assert_not_awaited()


async def test_gate_failure_boundary() -> None:
    """Any exception is handed to on_failure with the command name."""
    on_failure = AsyncMock()
    error = ValueError("bad frame")
    gate = CommandGate("test", on_failure, lambda: False)

    assert not await gate.guard("seek", AsyncMock(side_effect=error))
    on_failure.assert_awaited_once_with("seek", error)


async def test_gate_closed() -> None:
    """A closed gate drops commands."""
    action = AsyncMock()
    gate = CommandGate("test", AsyncMock(), lambda: True)
    assert not await gate.guard("play", action)
    action.assert_not_awaited()


async def test_gate_serializes_commands() -> None:
    """Commands run one at a time in arrival order."""
    events: list[str] = []

    def make(name: str):
        async def action() -> None:
            events.append(f"{name}-start")
            await asyncio.sleep(0.01)
            events.append(f"{name}-end")

        return action

    gate = CommandGate("test", AsyncMock(), lambda: False)
    await asyncio.gather(gate.guard("a", make("a")), gate.guard("b", make("b")))

    assert events == ["a-start", "a-end", "b-start", "b-end"]


async def test_send_picks_branch() -> None:
    """send runs action when the condition holds, otherwise the alternative."""
    action, otherwise = AsyncMock(), AsyncMock()

    assert await CommandGate.send(True, action, otherwise)
    assert await CommandGate.send(False, action, otherwise)
    assert not await CommandGate.send(False, action)

    action.assert_awaited_once()
    otherwise.assert_awaited_once()


async def test_gate_failure_logs_traceback(caplog: pytest.LogCaptureFixture) -> None:
    """Failures are logged at error level with the traceback attached."""
    gate = CommandGate("Den", AsyncMock(), lambda: False)

    with caplog.at_level(logging.DEBUG, logger="cast_bridge.gate"):
        await gate.guard("seek", AsyncMock(side_effect=ValueError("bad frame")))

    errors = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert len(errors) == 1
    assert errors[0].exc_info is not None
    assert errors[0].exc_info[0] is ValueError
    assert all(r.levelno == logging.ERROR for r in caplog.records)
