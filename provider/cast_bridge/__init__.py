"""
Cast Bridge.

Keeps an authoritative, per-receiver session for cast-protocol media
receivers: a local queue mirror, playback position, command gating and
progress reporting to a Jellyfin-style server. UI clients follow receivers
through an embedded HTTP/WebSocket hub.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from .config import BridgeConfig, SessionConfig
from .errors import CastBridgeError, InvalidRequestError, ProgressReportError, ReceiverError
from .jellyfin import JellyfinProgressSink, TokenProvider
from .registry import SessionRegistry
from .session import DeviceSession

if TYPE_CHECKING:
    from .channel import ReceiverChannel
    from .models import ReceiverInfo

__all__ = [
    "BridgeConfig",
    "CastBridgeError",
    "DeviceSession",
    "InvalidRequestError",
    "JellyfinProgressSink",
    "ProgressReportError",
    "ReceiverError",
    "SessionConfig",
    "SessionRegistry",
    "setup",
]


async def setup(
    values: Mapping[str, Any],
    channel_factory: Callable[[ReceiverInfo], ReceiverChannel],
    token_provider: TokenProvider | None = None,
) -> SessionRegistry:
    """Build a registry from flat settings and start its hub."""
    config = BridgeConfig.from_values(values)
    progress_sink = None
    if config.progress_url and token_provider is not None:
        progress_sink = JellyfinProgressSink(
            config.progress_url,
            token_provider,
            client_name=config.client_name,
            client_version=config.client_version,
        )
    registry = SessionRegistry(
        channel_factory, progress_sink, config, owns_progress_sink=True
    )
    await registry.start()
    return registry
