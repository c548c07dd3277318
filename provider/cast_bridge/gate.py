"""Precondition and failure boundary for receiver commands."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

Action = Callable[[], Awaitable[None]]


class CommandGate:
    """Runs commands one at a time behind a uniform failure boundary.

    A command raising anything is logged and handed to on_failure, which is
    expected to tell the UI and tear the session down. Commands arriving after
    is_closed() turns true are dropped.
    """

    def __init__(
        self,
        name: str,
        on_failure: Callable[[str, Exception], Awaitable[None]],
        is_closed: Callable[[], bool],
    ) -> None:
        """Initialize the gate."""
        self._name = name
        self._on_failure = on_failure
        self._is_closed = is_closed
        self._lock = asyncio.Lock()

    async def guard(self, command: str, action: Action) -> bool:
        """Run action; returns False when it was dropped or failed."""
        if self._is_closed():
            logger.debug("[Session:%s] Ignoring %s on closed session", self._name, command)
            return False
        try:
            async with self._lock:
                if self._is_closed():
                    logger.debug(
                        "[Session:%s] Ignoring %s on closed session", self._name, command
                    )
                    return False
                await action()
        except Exception as err:
            logger.error(
                "[Session:%s] %s failed: %s", self._name, command, err, exc_info=True
            )
            await self._on_failure(command, err)
            return False
        return True

    @staticmethod
    async def send(
        condition: bool, action: Action, otherwise: Action | None = None
    ) -> bool:
        """Run action when condition holds, else otherwise; True if anything ran."""
        chosen = action if condition else otherwise
        if chosen is None:
            return False
        await chosen()
        return True
