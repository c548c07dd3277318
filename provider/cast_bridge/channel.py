"""Receiver channel contract and the push events it delivers.

`DeviceSession` depends on this protocol only. Concrete channels speak the
receiver's wire protocol and translate its messages into these typed events
and commands.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Protocol, TypeVar

from .models import (
    MediaInformation,
    MediaStatus,
    QueueItem,
    QueueStatus,
    ReceiverInfo,
    ReceiverStatus,
    RepeatMode,
)


@dataclass(frozen=True)
class ChannelEvent:
    """Marker base type for receiver-originated events."""


@dataclass(frozen=True)
class MediaStatusChanged(ChannelEvent):
    """Media status push; status is None when the receiver has no media."""

    status: MediaStatus | None


@dataclass(frozen=True)
class QueueStatusChanged(ChannelEvent):
    """Queue delta push."""

    status: QueueStatus


@dataclass(frozen=True)
class ReceiverStatusChanged(ChannelEvent):
    """Receiver-level status push (applications, volume)."""

    status: ReceiverStatus | None


@dataclass(frozen=True)
class Disconnected(ChannelEvent):
    """The connection to the receiver was lost."""

    reason: str | None = None


EventT = TypeVar("EventT", bound=ChannelEvent)


class ReceiverChannel(Protocol):
    """Command and event surface of a connected receiver."""

    default_application_id: str | None

    def subscribe(
        self,
        event_type: type[EventT],
        handler: Callable[[EventT], Awaitable[None]],
    ) -> Callable[[], None]:
        """Register handler for event_type and return its unsubscribe callback."""
        ...

    async def connect(self, receiver: ReceiverInfo) -> None: ...

    async def get_status(self) -> MediaStatus | None: ...

    async def launch(self, application_id: str) -> None: ...

    async def load(self, media: MediaInformation) -> None: ...

    async def queue_load(
        self, items: Sequence[QueueItem], repeat_mode: RepeatMode
    ) -> None: ...

    async def queue_insert(
        self, items: Sequence[QueueItem], insert_before: int | None = None
    ) -> None: ...

    async def queue_remove(self, item_ids: Sequence[int]) -> None: ...

    async def queue_reorder(self, item_ids: Sequence[int]) -> None: ...

    async def queue_update(
        self,
        *,
        current_item_id: int | None = None,
        repeat_mode: RepeatMode | None = None,
        shuffle: bool | None = None,
        items: Sequence[QueueItem] | None = None,
    ) -> None: ...

    async def queue_get_item_ids(self) -> list[int]: ...

    async def queue_get_items(
        self, item_ids: Sequence[int]
    ) -> list[QueueItem] | None: ...

    async def play(self) -> None: ...

    async def pause(self) -> None: ...

    async def stop(self) -> None:
        """Stop the foreground application (receiver level, works without media)."""
        ...

    async def seek(self, seconds: float) -> None: ...

    async def next(self) -> None: ...

    async def previous(self) -> None: ...

    async def set_playback_rate(self, rate: float) -> None: ...

    async def set_volume(self, level: float) -> None: ...

    async def set_muted(self, muted: bool) -> None: ...
