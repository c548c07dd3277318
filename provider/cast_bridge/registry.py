"""Owner of all receiver sessions."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from .config import BridgeConfig
from .hub import ReceiverHub
from .models import ReceiverInfo, ReceiverSnapshot
from .session import DeviceSession

if TYPE_CHECKING:
    from .channel import ReceiverChannel
    from .sinks import ProgressSink

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Keeps one session per receiver and relays their pushes to the hub."""

    def __init__(
        self,
        channel_factory: Callable[[ReceiverInfo], ReceiverChannel],
        progress_sink: ProgressSink | None = None,
        config: BridgeConfig | None = None,
        *,
        owns_progress_sink: bool = False,
    ) -> None:
        """Initialize the registry.

        With owns_progress_sink the sink is closed on unload.
        """
        self.config = config or BridgeConfig()
        self.hub: ReceiverHub | None = None
        self._channel_factory = channel_factory
        self._progress_sink = progress_sink
        self._owns_progress_sink = owns_progress_sink
        self._sessions: dict[str, DeviceSession] = {}

    @property
    def sessions(self) -> dict[str, DeviceSession]:
        """Return live sessions keyed by receiver name."""
        return dict(self._sessions)

    def get_session(self, name: str) -> DeviceSession | None:
        """Return the live session for a receiver name, if any."""
        return self._sessions.get(name)

    def get_or_create_session(self, receiver: ReceiverInfo) -> DeviceSession:
        """Return the session for receiver, starting a new one when needed."""
        session = self._sessions.get(receiver.friendly_name)
        if session is not None and not session.is_disposed:
            return session
        logger.info(
            "Creating session for %s (%s)", receiver.friendly_name, receiver.endpoint
        )
        session = DeviceSession(
            receiver,
            self._channel_factory(receiver),
            self,
            self._progress_sink,
            self.config.session,
            on_disposed=self._on_session_disposed,
        )
        self._sessions[receiver.friendly_name] = session
        return session

    def _on_session_disposed(self, session: DeviceSession) -> None:
        if self._sessions.get(session.name) is session:
            del self._sessions[session.name]
            logger.debug("Session for %s removed", session.name)

    # --- NotificationSink ---

    def push_status(self, receiver_name: str, snapshot: ReceiverSnapshot) -> None:
        if self.hub is not None:
            self.hub.push_status(receiver_name, snapshot)

    def push_message(self, receiver_name: str, message: str) -> None:
        if self.hub is not None:
            self.hub.push_message(receiver_name, message)
        else:
            logger.warning("%s: %s", receiver_name, message)

    # --- Lifecycle ---

    async def start(self) -> None:
        """Start the notification hub."""
        if self.hub is not None:
            return
        self.hub = ReceiverHub(self, self.config.http_port)
        await self.hub.start()

    async def unload(self) -> None:
        """Dispose every session, stop the hub and release the progress sink."""
        for session in list(self._sessions.values()):
            await session.dispose()
        self._sessions.clear()
        if self.hub is not None:
            await self.hub.stop()
            self.hub = None
        if self._owns_progress_sink and self._progress_sink is not None:
            await self._progress_sink.close()
            self._progress_sink = None
