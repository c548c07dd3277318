"""Fixtures for testing the Cast Bridge."""

from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Any
from unittest.mock import AsyncMock, Mock

import pytest

from cast_bridge.channel import ChannelEvent
from cast_bridge.config import SessionConfig
from cast_bridge.constants import DEFAULT_MEDIA_RECEIVER_APP_ID
from cast_bridge.models import ReceiverInfo
from cast_bridge.session import DeviceSession


class FakeChannel:
    """In-memory receiver channel: AsyncMock commands plus manual event emission."""

    default_application_id = DEFAULT_MEDIA_RECEIVER_APP_ID

    def __init__(self) -> None:
        """Initialize the fake with inert commands."""
        self.handlers: dict[type[ChannelEvent], list[Callable[[Any], Awaitable[None]]]] = {}
        self.unsubscribe_calls = 0
        self.connect = AsyncMock()
        self.get_status = AsyncMock(return_value=None)
        self.launch = AsyncMock()
        self.load = AsyncMock()
        self.queue_load = AsyncMock()
        self.queue_insert = AsyncMock()
        self.queue_remove = AsyncMock()
        self.queue_reorder = AsyncMock()
        self.queue_update = AsyncMock()
        self.queue_get_item_ids = AsyncMock(return_value=[])
        self.queue_get_items = AsyncMock(return_value=[])
        self.play = AsyncMock()
        self.pause = AsyncMock()
        self.stop = AsyncMock()
        self.seek = AsyncMock()
        self.next = AsyncMock()
        self.previous = AsyncMock()
        self.set_playback_rate = AsyncMock()
        self.set_volume = AsyncMock()
        self.set_muted = AsyncMock()

    def subscribe(
        self, event_type: type[ChannelEvent], handler: Callable[[Any], Awaitable[None]]
    ) -> Callable[[], None]:
        """Register handler; the returned callback raises if used twice."""
        self.handlers.setdefault(event_type, []).append(handler)

        def unsubscribe() -> None:
            self.unsubscribe_calls += 1
            self.handlers[event_type].remove(handler)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return sum(len(handlers) for handlers in self.handlers.values())

    async def emit(self, event: ChannelEvent) -> None:
        """Deliver event to its subscribers, as the receiver would."""
        for handler in list(self.handlers.get(type(event), [])):
            await handler(event)


@pytest.fixture
def receiver() -> ReceiverInfo:
    """Return a receiver handle."""
    return ReceiverInfo(id="rx-1", friendly_name="Living Room", host="192.168.1.20")


@pytest.fixture
def channel() -> FakeChannel:
    """Return a fake receiver channel."""
    return FakeChannel()


@pytest.fixture
def notifier() -> Mock:
    """Return a mock notification sink."""
    sink = Mock()
    sink.push_status = Mock()
    sink.push_message = Mock()
    return sink


@pytest.fixture
def progress_sink() -> Mock:
    """Return a mock progress sink."""
    sink = Mock()
    sink.report_progress = AsyncMock()
    return sink


@pytest.fixture
def session_config() -> SessionConfig:
    """Return settings whose tick never fires during a test."""
    return SessionConfig(tick_interval=3600)


@pytest.fixture
async def session(
    receiver: ReceiverInfo,
    channel: FakeChannel,
    notifier: Mock,
    progress_sink: Mock,
    session_config: SessionConfig,
) -> AsyncGenerator[DeviceSession, None]:
    """Return a connected session; disposed after the test."""
    device_session = DeviceSession(
        receiver, channel, notifier, progress_sink, session_config
    )
    await device_session.wait_ready()
    yield device_session
    await device_session.dispose()
