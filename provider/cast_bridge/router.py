"""Session state transitions driven by receiver push events.

The reducers in this module are pure ``(state, event) -> state`` functions.
`StatusEventRouter` applies them for a `DeviceSession` and performs the side
effects that follow (progress mirroring, queue resync, UI push).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from .constants import (
    PLAYER_STATE_FINISHED,
    PLAYER_STATE_IDLE,
    PLAYER_STATE_PAUSED,
    PLAYER_STATE_PLAYING,
)
from .models import (
    MediaInformation,
    MediaStatus,
    QueueChangeType,
    QueueItem,
    QueueStatus,
    ReceiverStatus,
)
from .queue_projection import apply_removal, apply_update_order, backfill_duration

if TYPE_CHECKING:
    from .session import DeviceSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionState:
    """Authoritative in-process view of one receiver."""

    is_connected: bool = False
    current_application_id: str | None = None
    volume: float = 0.0
    is_muted: bool = False
    media_status: MediaStatus | None = None
    media_information: MediaInformation | None = None
    position: int | None = None
    queue: tuple[QueueItem, ...] = ()
    is_media_initialized: bool = False
    is_session_active: bool = False
    is_clock_running: bool = False
    is_disposed: bool = False

    @property
    def is_stopped(self) -> bool:
        """No media, or the receiver reports why it went idle."""
        return self.media_status is None or bool(self.media_status.idle_reason)


def effective_player_state(status: MediaStatus | None) -> str | None:
    """Return the player state, with IDLE narrowed to its idle reason."""
    if status is None:
        return None
    if status.player_state == PLAYER_STATE_IDLE and status.idle_reason:
        return status.idle_reason
    return status.player_state


def is_session_boundary(
    state: SessionState, status: MediaStatus | None, media_id_key: str
) -> bool:
    """Tell whether status ends the playback session tracked by state."""
    if status is None:
        return True
    if status.media is None or state.media_information is None:
        return False
    new_id = status.media.custom_value(media_id_key)
    current_id = state.media_information.custom_value(media_id_key)
    return new_id is not None and current_id is not None and new_id != current_id


def clear_media(state: SessionState) -> SessionState:
    """Drop everything tied to loaded media."""
    return replace(
        state,
        media_status=None,
        media_information=None,
        position=None,
        queue=(),
        is_media_initialized=False,
        is_clock_running=False,
    )


def reduce_media_status(
    state: SessionState, status: MediaStatus | None, media_id_key: str
) -> tuple[SessionState, bool]:
    """Apply a media status push; returns the new state and the boundary flag."""
    boundary = is_session_boundary(state, status, media_id_key)
    if boundary:
        state = replace(state, media_information=None)
    if status is None:
        return clear_media(state), boundary

    duration = status.media.duration if status.media is not None else None
    queue = backfill_duration(state.queue, status.current_item_id, duration)
    reported_position = int(status.current_time)
    kept_position = state.position if state.position is not None else reported_position
    player_state = effective_player_state(status)
    if player_state in (PLAYER_STATE_PLAYING, PLAYER_STATE_PAUSED):
        initialized, position, clock = True, reported_position, True
    elif player_state == PLAYER_STATE_FINISHED:
        initialized, position, clock = True, kept_position, False
    else:
        initialized, position, clock = False, kept_position, False

    new_state = replace(
        state,
        media_status=status,
        media_information=status.media or state.media_information,
        position=position,
        queue=queue,
        is_media_initialized=initialized,
        is_clock_running=clock,
    )
    return new_state, boundary


def reduce_queue_status(
    state: SessionState, status: QueueStatus
) -> tuple[SessionState, bool]:
    """Apply a queue delta; returns the new state and whether a full refetch is due."""
    if status.change_type == QueueChangeType.INSERT:
        return state, True
    if status.change_type == QueueChangeType.UPDATE:
        return replace(state, queue=apply_update_order(state.queue, status.item_ids)), False
    if status.change_type == QueueChangeType.REMOVE:
        return replace(state, queue=apply_removal(state.queue, status.item_ids)), False
    return state, False


def reduce_receiver_status(
    state: SessionState, status: ReceiverStatus | None
) -> SessionState:
    """Adopt foreground application, volume and mute from a receiver push."""
    if status is None:
        return state
    application_id = status.applications[0].app_id if status.applications else None
    volume = status.volume.level if status.volume.level is not None else state.volume
    muted = status.volume.muted if status.volume.muted is not None else state.is_muted
    return replace(
        state,
        current_application_id=application_id,
        volume=volume,
        is_muted=muted,
    )


def advance_clock(state: SessionState) -> SessionState:
    """Optimistically advance the position by one second."""
    if not state.is_clock_running or state.position is None:
        return state
    return replace(state, position=state.position + 1)


def teardown_state(state: SessionState) -> SessionState:
    """State of a session whose connection is gone."""
    return replace(
        clear_media(state),
        is_connected=False,
        is_disposed=True,
    )


class StatusEventRouter:
    """Applies push events to a session and fans out their effects.

    Callers hold the session lock while a handler runs.
    """

    def __init__(self, session: DeviceSession) -> None:
        """Initialize the router for a session."""
        self._session = session

    async def handle_media_status(self, status: MediaStatus | None) -> None:
        session = self._session
        previous = session.state
        state, boundary = reduce_media_status(
            previous, status, session.config.media_id_key
        )
        if boundary:
            logger.debug(
                "[Session:%s] Media session boundary, flushing stop report",
                session.name,
            )
            active = await session.mirror.report(previous, stopped=True)
            state = replace(state, is_session_active=active)
        session.commit(state)
        if status is not None:
            active = await session.mirror.report(session.state)
            session.commit(replace(session.state, is_session_active=active))
        session.push_status()

    async def handle_queue_status(self, status: QueueStatus) -> None:
        session = self._session
        state, needs_refresh = reduce_queue_status(session.state, status)
        session.commit(state)
        if needs_refresh:
            await session.refresh_queue()
        session.push_status()

    async def handle_receiver_status(self, status: ReceiverStatus | None) -> None:
        session = self._session
        session.commit(reduce_receiver_status(session.state, status))
        session.push_status()
