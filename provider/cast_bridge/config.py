"""Configuration models for sessions and the bridge."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .constants import (
    CONF_APPLICATION_ID,
    CONF_CLIENT_NAME,
    CONF_CLIENT_VERSION,
    CONF_HTTP_PORT,
    CONF_IDLE_APPLICATION_IDS,
    CONF_MEDIA_ID_KEY,
    CONF_PROGRESS_URL,
    CONF_QUEUE_CHUNK_SIZE,
    CONF_REFRESH_EVERY_TICKS,
    CONF_TICK_INTERVAL,
    CONF_USER_KEY,
    DEFAULT_APPLICATION_ID,
    DEFAULT_CLIENT_NAME,
    DEFAULT_CLIENT_VERSION,
    DEFAULT_HTTP_PORT,
    DEFAULT_IDLE_APPLICATION_IDS,
    DEFAULT_MEDIA_ID_KEY,
    DEFAULT_PROGRESS_URL,
    DEFAULT_QUEUE_CHUNK_SIZE,
    DEFAULT_REFRESH_EVERY_TICKS,
    DEFAULT_TICK_INTERVAL,
    DEFAULT_USER_KEY,
)


def _as_id_tuple(value: Any) -> tuple[str, ...]:
    """Accept a comma separated string or any iterable of ids."""
    if isinstance(value, str):
        return tuple(part.strip() for part in value.split(",") if part.strip())
    return tuple(str(part) for part in value)


class SessionConfig(BaseModel):
    """Per-receiver session settings."""

    model_config = ConfigDict(frozen=True)

    application_id: str | None = DEFAULT_APPLICATION_ID
    idle_application_ids: tuple[str, ...] = DEFAULT_IDLE_APPLICATION_IDS
    queue_chunk_size: int = Field(DEFAULT_QUEUE_CHUNK_SIZE, ge=1)
    tick_interval: float = Field(DEFAULT_TICK_INTERVAL, gt=0)
    refresh_every_ticks: int = Field(DEFAULT_REFRESH_EVERY_TICKS, ge=1)
    media_id_key: str = DEFAULT_MEDIA_ID_KEY
    user_key: str = DEFAULT_USER_KEY

    @classmethod
    def from_values(cls, values: Mapping[str, Any]) -> SessionConfig:
        """Build from a flat settings mapping keyed by the CONF_* names."""
        return cls(
            application_id=values.get(CONF_APPLICATION_ID, DEFAULT_APPLICATION_ID)
            or None,
            idle_application_ids=_as_id_tuple(
                values.get(CONF_IDLE_APPLICATION_IDS, DEFAULT_IDLE_APPLICATION_IDS)
            ),
            queue_chunk_size=values.get(CONF_QUEUE_CHUNK_SIZE, DEFAULT_QUEUE_CHUNK_SIZE),
            tick_interval=values.get(CONF_TICK_INTERVAL, DEFAULT_TICK_INTERVAL),
            refresh_every_ticks=values.get(
                CONF_REFRESH_EVERY_TICKS, DEFAULT_REFRESH_EVERY_TICKS
            ),
            media_id_key=values.get(CONF_MEDIA_ID_KEY, DEFAULT_MEDIA_ID_KEY),
            user_key=values.get(CONF_USER_KEY, DEFAULT_USER_KEY),
        )


class BridgeConfig(BaseModel):
    """Settings for the registry, its notification hub and progress client."""

    model_config = ConfigDict(frozen=True)

    http_port: int = DEFAULT_HTTP_PORT
    progress_url: str | None = DEFAULT_PROGRESS_URL
    client_name: str = DEFAULT_CLIENT_NAME
    client_version: str = DEFAULT_CLIENT_VERSION
    session: SessionConfig = Field(default_factory=SessionConfig)

    @classmethod
    def from_values(cls, values: Mapping[str, Any]) -> BridgeConfig:
        """Build from a flat settings mapping keyed by the CONF_* names."""
        return cls(
            http_port=values.get(CONF_HTTP_PORT, DEFAULT_HTTP_PORT),
            progress_url=values.get(CONF_PROGRESS_URL, DEFAULT_PROGRESS_URL) or None,
            client_name=values.get(CONF_CLIENT_NAME, DEFAULT_CLIENT_NAME),
            client_version=values.get(CONF_CLIENT_VERSION, DEFAULT_CLIENT_VERSION),
            session=SessionConfig.from_values(values),
        )
