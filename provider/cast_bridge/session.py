"""Per-receiver session: state owner, command surface and lifecycle."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from .channel import (
    Disconnected,
    MediaStatusChanged,
    QueueStatusChanged,
    ReceiverStatusChanged,
)
from .config import SessionConfig
from .constants import DEFAULT_MEDIA_RECEIVER_APP_ID
from .errors import InvalidRequestError
from .gate import CommandGate
from .models import (
    MediaInformation,
    QueueItem,
    ReceiverInfo,
    ReceiverSnapshot,
    RepeatMode,
)
from .progress import ProgressMirror
from .queue_projection import QueueProjection, move_down, move_up
from .router import SessionState, StatusEventRouter, advance_clock, teardown_state
from .scheduler import RefreshScheduler

if TYPE_CHECKING:
    from .channel import ReceiverChannel
    from .sinks import NotificationSink, ProgressSink

logger = logging.getLogger(__name__)


class DeviceSession:
    """Authoritative state and command surface for one receiver.

    Creating a session starts connecting in the background, so it must be
    constructed inside a running event loop. Await `wait_ready()` to know
    when the connect attempt has finished.
    """

    def __init__(
        self,
        receiver: ReceiverInfo,
        channel: ReceiverChannel,
        notifier: NotificationSink,
        progress_sink: ProgressSink | None = None,
        config: SessionConfig | None = None,
        on_disposed: Callable[[DeviceSession], None] | None = None,
    ) -> None:
        """Initialize the session and schedule the connect."""
        self.receiver = receiver
        self.name = receiver.friendly_name
        self.config = config or SessionConfig()
        self.application_id = (
            self.config.application_id
            or getattr(channel, "default_application_id", None)
            or DEFAULT_MEDIA_RECEIVER_APP_ID
        )
        self._channel = channel
        self._notifier = notifier
        self._on_disposed = on_disposed
        self._state = SessionState()
        self._lock = asyncio.Lock()
        self._closing = False
        self._unsubscribers: list[Callable[[], None]] = []

        self.projection = QueueProjection(channel, self.config.queue_chunk_size)
        self.mirror = ProgressMirror(
            progress_sink,
            receiver,
            media_id_key=self.config.media_id_key,
            user_key=self.config.user_key,
        )
        self._router = StatusEventRouter(self)
        self._gate = CommandGate(self.name, self._on_failure, lambda: self._closing)
        self._scheduler = RefreshScheduler(
            self.name, self._on_tick, self.config.tick_interval
        )
        self._connect_task = asyncio.create_task(
            self._gate.guard("connect", self._connect)
        )

    # -- state -----------------------------------------------------------

    @property
    def state(self) -> SessionState:
        """Return the current state."""
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state.is_connected

    @property
    def is_disposed(self) -> bool:
        return self._state.is_disposed

    @property
    def should_launch_application(self) -> bool:
        """Return True when nothing, or only an idle screen, is foreground."""
        current = self._state.current_application_id
        return current is None or current in self.config.idle_application_ids

    @property
    def is_different_application_playing(self) -> bool:
        """Return True when an application other than ours owns the receiver."""
        current = self._state.current_application_id
        return (
            current is not None
            and current != self.application_id
            and current not in self.config.idle_application_ids
        )

    def commit(self, state: SessionState) -> None:
        """Replace the session state."""
        self._state = state

    def get_status(self) -> ReceiverSnapshot:
        """Return a snapshot of the session for UI clients."""
        state = self._state
        return ReceiverSnapshot(
            name=self.name,
            id=self.receiver.id,
            ip_address=self.receiver.host,
            is_connected=state.is_connected,
            is_media_initialized=state.is_media_initialized,
            is_stopped=state.is_stopped,
            is_different_application_playing=self.is_different_application_playing,
            current_application_id=state.current_application_id,
            volume=state.volume,
            is_muted=state.is_muted,
            current_media_status=state.media_status,
            current_media_information=state.media_information,
            current_run_time=state.position,
            queue=list(state.queue),
        )

    def push_status(self) -> None:
        """Broadcast the current snapshot."""
        self._notifier.push_status(self.name, self.get_status())

    async def wait_ready(self) -> bool:
        """Wait for the connect attempt; returns whether the session is connected."""
        await self._connect_task
        return self.is_connected

    # -- media -----------------------------------------------------------

    async def initialize_item(self, media: MediaInformation) -> None:
        """Load a single media item, replacing whatever queue is on the receiver."""

        async def action() -> None:
            await self._launch_if_idle()
            async with self._lock:
                if self._closing:
                    return
                self.commit(replace(self._state, queue=()))
            await self._channel.load(media)
            await self._finish_initialize()

        await self._gate.guard("initialize item", action)

    async def initialize_queue(self, items: Sequence[QueueItem]) -> None:
        """Load items as the receiver queue, in repeat-all mode."""
        if not items:
            return

        async def action() -> None:
            await self._launch_if_idle()
            calls = await self.projection.load(items, RepeatMode.REPEAT_ALL)
            logger.debug(
                "[Session:%s] Loaded %d queue item(s) in %d call(s)",
                self.name,
                len(items),
                calls,
            )
            await self._finish_initialize()

        await self._gate.guard("initialize queue", action)

    async def _launch_if_idle(self) -> None:
        if not self.should_launch_application:
            return
        logger.info("[Session:%s] Launching application %s", self.name, self.application_id)
        await self._channel.launch(self.application_id)

    async def _finish_initialize(self) -> None:
        async with self._lock:
            if self._closing:
                return
            await self.refresh_queue()
            self.commit(replace(self._state, is_media_initialized=True))
            self.push_status()

    # -- transport -------------------------------------------------------

    async def play(self) -> None:
        await self._gated(
            "play",
            lambda: self._state.is_media_initialized and not self._state.is_stopped,
            self._channel.play,
        )

    async def pause(self) -> None:
        await self._gated("pause", self._is_playing_media, self._channel.pause)

    async def stop(self) -> None:
        """Stop the foreground application; works without loaded media."""
        await self._gate.guard("stop", self._channel.stop)

    async def set_playback_rate(self, rate: float) -> None:
        await self._gated(
            "set playback rate",
            self._is_playing_media,
            lambda: self._channel.set_playback_rate(rate),
        )

    async def seek(self, seconds: float) -> None:
        await self._gated(
            "seek", self._is_playing_media, lambda: self._channel.seek(seconds)
        )

    async def next(self) -> None:
        await self._gated("next", self._is_playing_media, self._channel.next)

    async def previous(self) -> None:
        await self._gated("previous", self._is_playing_media, self._channel.previous)

    async def set_volume(self, level: float) -> None:
        await self._gated(
            "set volume", self._is_playing_media, lambda: self._channel.set_volume(level)
        )

    async def toggle_mute(self) -> None:
        await self._gated(
            "toggle mute",
            self._is_playing_media,
            lambda: self._channel.set_muted(not self._state.is_muted),
        )

    def _is_playing_media(self) -> bool:
        return not self._state.is_stopped

    async def _gated(
        self,
        command: str,
        allowed: Callable[[], bool],
        action: Callable[[], Awaitable[Any]],
    ) -> None:
        """Run action through the gate when allowed() holds at execution time."""

        async def run() -> None:
            if not await CommandGate.send(allowed(), action):
                logger.debug("[Session:%s] Skipping %s", self.name, command)

        await self._gate.guard(command, run)

    # -- queue editing ---------------------------------------------------

    async def insert_queue(
        self, items: Sequence[QueueItem], insert_before: int | None = None
    ) -> None:
        """Insert items before the item insert_before, or append."""
        if not items:
            return
        await self._queue_command(
            "insert queue", lambda: self.projection.insert(items, insert_before)
        )

    async def remove_queue(self, item_ids: Sequence[int]) -> None:
        if not item_ids:
            return
        await self._queue_command(
            "remove queue", lambda: self._channel.queue_remove(list(item_ids))
        )

    async def up_queue(self, item_ids: Sequence[int]) -> None:
        """Move the selected items one slot towards the head."""
        if not item_ids:
            return
        await self._queue_command(
            "up queue",
            lambda: self._channel.queue_reorder(move_up(self._queue_ids(), item_ids)),
        )

    async def down_queue(self, item_ids: Sequence[int]) -> None:
        """Move the selected items one slot towards the tail."""
        if not item_ids:
            return
        await self._queue_command(
            "down queue",
            lambda: self._channel.queue_reorder(move_down(self._queue_ids(), item_ids)),
        )

    async def shuffle_queue(self) -> None:
        await self._queue_command(
            "shuffle queue", lambda: self._channel.queue_update(shuffle=True)
        )

    async def change_current_item(self, item_id: int) -> None:
        await self._queue_command(
            "change current item",
            lambda: self._channel.queue_update(current_item_id=item_id),
        )

    async def change_repeat_mode(self, mode: RepeatMode) -> None:
        """Set the queue repeat mode; shuffle-all also reshuffles."""
        shuffle = True if mode == RepeatMode.REPEAT_ALL_AND_SHUFFLE else None
        await self._queue_command(
            "change repeat mode",
            lambda: self._channel.queue_update(repeat_mode=mode, shuffle=shuffle),
        )

    async def update_queue_items(self, items: Sequence[QueueItem]) -> None:
        if not items:
            return
        await self._queue_command(
            "update queue items", lambda: self._channel.queue_update(items=list(items))
        )

    def _queue_ids(self) -> list[int]:
        return [item.item_id for item in self._state.queue if item.item_id is not None]

    async def _queue_command(
        self, command: str, action: Callable[[], Awaitable[Any]]
    ) -> None:
        await self._gated(command, lambda: bool(self._state.queue), action)

    async def refresh_queue(self) -> None:
        """Refetch the queue from the receiver; the caller holds the state lock."""
        try:
            queue = await self.projection.fetch(self._state.queue)
        except InvalidRequestError as err:
            logger.debug("[Session:%s] Queue refresh rejected: %s", self.name, err)
            return
        self.commit(replace(self._state, queue=queue))

    # -- connection ------------------------------------------------------

    async def _connect(self) -> None:
        logger.debug("[Session:%s] Connecting to %s", self.name, self.receiver.endpoint)
        await self._channel.connect(self.receiver)
        if self._closing:
            return
        channel = self._channel
        self._unsubscribers = [
            channel.subscribe(MediaStatusChanged, self._on_media_status),
            channel.subscribe(QueueStatusChanged, self._on_queue_status),
            channel.subscribe(ReceiverStatusChanged, self._on_receiver_status),
            channel.subscribe(Disconnected, self._on_disconnected),
        ]
        async with self._lock:
            if self._closing:
                return
            self.commit(replace(self._state, is_connected=True))
        self._scheduler.start()
        await self._refresh_status(refresh_queue=True)
        if self._closing:
            return
        logger.info("[Session:%s] Connected to %s", self.name, self.receiver.endpoint)

    async def _refresh_status(self, *, refresh_queue: bool = False) -> None:
        status = await self._channel.get_status()
        async with self._lock:
            if self._closing:
                return
            await self._router.handle_media_status(status)
            if refresh_queue and status is not None:
                await self.refresh_queue()
                self.push_status()

    async def _on_tick(self, count: int) -> None:
        if self._closing:
            return
        try:
            async with self._lock:
                if self._closing:
                    return
                self.commit(advance_clock(self._state))
            if count % self.config.refresh_every_ticks == 0:
                await self._refresh_status()
        except Exception as err:
            logger.error(
                "[Session:%s] Status poll failed: %s", self.name, err, exc_info=True
            )
            await self._on_failure("status poll", err)

    async def _on_media_status(self, event: MediaStatusChanged) -> None:
        await self._dispatch(self._router.handle_media_status, event.status)

    async def _on_queue_status(self, event: QueueStatusChanged) -> None:
        await self._dispatch(self._router.handle_queue_status, event.status)

    async def _on_receiver_status(self, event: ReceiverStatusChanged) -> None:
        await self._dispatch(self._router.handle_receiver_status, event.status)

    async def _on_disconnected(self, event: Disconnected) -> None:
        logger.info(
            "[Session:%s] Receiver disconnected%s",
            self.name,
            f": {event.reason}" if event.reason else "",
        )
        await self._teardown()

    async def _dispatch(
        self, handler: Callable[[Any], Awaitable[None]], payload: Any
    ) -> None:
        if self._closing:
            return
        try:
            async with self._lock:
                if self._closing:
                    return
                await handler(payload)
        except Exception as err:
            logger.error(
                "[Session:%s] Status update failed: %s", self.name, err, exc_info=True
            )
            await self._on_failure("status update", err)

    async def _on_failure(self, command: str, err: Exception) -> None:
        self._notifier.push_message(
            self.name, f"Lost control of {self.name}: {command} failed ({err})"
        )
        await self._teardown()

    # -- teardown --------------------------------------------------------

    async def dispose(self) -> None:
        """Release the receiver; safe to call more than once."""
        await self._teardown()

    async def _teardown(self) -> None:
        if self._closing:
            return
        self._closing = True
        logger.debug("[Session:%s] Tearing down", self.name)

        async with self._lock:
            active = await self.mirror.report(self._state, stopped=True)
            self.commit(replace(self._state, is_session_active=active))
        unsubscribers, self._unsubscribers = self._unsubscribers, []
        for unsubscribe in unsubscribers:
            unsubscribe()
        await self._scheduler.stop()
        async with self._lock:
            self.commit(teardown_state(self._state))
        self.push_status()
        if self._on_disposed is not None:
            self._on_disposed(self)

    def __repr__(self) -> str:
        return f"<DeviceSession {self.name!r} {self.receiver.endpoint}>"
