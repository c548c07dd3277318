"""Outbound collaborator contracts: UI notification and progress reporting."""

from __future__ import annotations

from typing import Protocol

from .models import ProgressReport, ReceiverSnapshot


class NotificationSink(Protocol):
    """Broadcasts receiver state to UI clients (fire-and-forget)."""

    def push_status(self, receiver_name: str, snapshot: ReceiverSnapshot) -> None: ...

    def push_message(self, receiver_name: str, message: str) -> None: ...


class ProgressSink(Protocol):
    """Forwards playback progress to the session-tracking service."""

    async def report_progress(
        self,
        report: ProgressReport,
        user_id: str,
        receiver_name: str,
        receiver_id: str,
        is_final: bool = False,
    ) -> None: ...

    async def close(self) -> None:
        """Release any transport the sink holds."""
        ...
