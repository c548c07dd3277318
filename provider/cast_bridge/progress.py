"""Mirror of receiver playback onto the session-tracking service."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .constants import (
    DEFAULT_MEDIA_ID_KEY,
    DEFAULT_USER_KEY,
    PLAYER_STATE_FINISHED,
    PLAYER_STATE_PAUSED,
    PLAYER_STATE_PLAYING,
    TICKS_PER_SECOND,
)
from .models import PlayMethod, ProgressEvent, ProgressReport, ReceiverInfo
from .router import SessionState, effective_player_state

if TYPE_CHECKING:
    from .sinks import ProgressSink

logger = logging.getLogger(__name__)


def build_report(
    state: SessionState,
    media_id: str,
    *,
    event: ProgressEvent | None = None,
    is_paused: bool = False,
    is_final: bool = False,
) -> ProgressReport:
    """Build a report for state; final reports carry only id and position."""
    position_ticks = (
        state.position * TICKS_PER_SECOND if state.position is not None else None
    )
    if is_final:
        return ProgressReport(
            event_name=event,
            item_id=media_id,
            media_source_id=media_id,
            position_ticks=position_ticks,
        )
    rate = state.media_status.playback_rate if state.media_status else None
    return ProgressReport(
        event_name=event,
        item_id=media_id,
        media_source_id=media_id,
        position_ticks=position_ticks,
        volume_level=int(round(state.volume * 100)),
        is_muted=state.is_muted,
        is_paused=is_paused,
        playback_rate=rate,
        play_method=PlayMethod.DIRECT_PLAY,
    )


class ProgressMirror:
    """Maps classified player states to progress reports.

    `report` returns the session-active flag the session should keep.
    """

    def __init__(
        self,
        sink: ProgressSink | None,
        receiver: ReceiverInfo,
        *,
        media_id_key: str = DEFAULT_MEDIA_ID_KEY,
        user_key: str = DEFAULT_USER_KEY,
    ) -> None:
        """Initialize the mirror."""
        self._sink = sink
        self._receiver = receiver
        self._media_id_key = media_id_key
        self._user_key = user_key

    async def report(self, state: SessionState, *, stopped: bool = False) -> bool:
        """Send the report matching state; stopped forces the stop path."""
        active = state.is_session_active
        if self._sink is None or state.media_status is None:
            return active
        info = state.media_information
        if info is None:
            return active
        media_id = info.custom_value(self._media_id_key)
        user_id = info.custom_value(self._user_key)
        if media_id is None or user_id is None:
            return active

        if stopped:
            if not active:
                return False
            await self._send(build_report(state, media_id, is_final=True), user_id, True)
            return False

        player_state = effective_player_state(state.media_status)
        if player_state == PLAYER_STATE_PLAYING:
            event = ProgressEvent.TIME_UPDATE if active else None
            await self._send(build_report(state, media_id, event=event), user_id, False)
            return True
        if player_state == PLAYER_STATE_PAUSED:
            report = build_report(
                state, media_id, event=ProgressEvent.PAUSE, is_paused=True
            )
            await self._send(report, user_id, False)
            return True
        if player_state == PLAYER_STATE_FINISHED:
            # Finish is reported once per session; later polls see it inactive.
            if active:
                report = build_report(state, media_id, is_final=True)
                await self._send(report, user_id, True)
            return False
        return active

    async def _send(self, report: ProgressReport, user_id: str, is_final: bool) -> None:
        try:
            await self._sink.report_progress(  # type: ignore[union-attr]
                report,
                user_id,
                self._receiver.friendly_name,
                self._receiver.id,
                is_final,
            )
        except Exception:
            logger.warning(
                "Progress report for %s on %s failed",
                report.item_id,
                self._receiver.friendly_name,
                exc_info=True,
            )
