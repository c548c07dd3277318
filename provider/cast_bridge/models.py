"""Pydantic models for receiver status, queue items and progress reports."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RepeatMode(str, Enum):
    """Receiver queue repeat modes."""

    REPEAT_OFF = "REPEAT_OFF"
    REPEAT_ALL = "REPEAT_ALL"
    REPEAT_SINGLE = "REPEAT_SINGLE"
    REPEAT_ALL_AND_SHUFFLE = "REPEAT_ALL_AND_SHUFFLE"


class QueueChangeType(str, Enum):
    """Kind of change announced by a queue status push."""

    INSERT = "INSERT"
    REMOVE = "REMOVE"
    ITEMS_CHANGE = "ITEMS_CHANGE"
    UPDATE = "UPDATE"
    NO_CHANGE = "NO_CHANGE"


class ProgressEvent(str, Enum):
    """Progress event names understood by the session-tracking service."""

    TIME_UPDATE = "TimeUpdate"
    PAUSE = "Pause"


class PlayMethod(str, Enum):
    """How the media reaches the receiver."""

    DIRECT_PLAY = "DirectPlay"


class MediaInformation(BaseModel):
    """Playable media description, including opaque custom data."""

    model_config = ConfigDict(populate_by_name=True)

    content_id: str = Field(alias="contentId")
    content_type: str | None = Field(None, alias="contentType")
    stream_type: str = Field("BUFFERED", alias="streamType")
    duration: float | None = None
    metadata: dict[str, Any] | None = None
    custom_data: dict[str, Any] | None = Field(None, alias="customData")

    def custom_value(self, key: str) -> str | None:
        """Return a custom data entry as a string, or None when missing/blank."""
        if not self.custom_data:
            return None
        value = self.custom_data.get(key)
        if value is None or value == "":
            return None
        return str(value)


class QueueItem(BaseModel):
    """Receiver queue entry; item_id is assigned by the receiver."""

    model_config = ConfigDict(populate_by_name=True)

    item_id: int | None = Field(None, alias="itemId")
    order_id: int = Field(0, alias="orderId")
    media: MediaInformation | None = None
    autoplay: bool | None = None
    start_time: float | None = Field(None, alias="startTime")


class MediaStatus(BaseModel):
    """Media channel status as pushed or polled from the receiver."""

    model_config = ConfigDict(populate_by_name=True)

    media_session_id: int | None = Field(None, alias="mediaSessionId")
    player_state: str = Field("IDLE", alias="playerState")
    idle_reason: str | None = Field(None, alias="idleReason")
    current_time: float = Field(0.0, alias="currentTime")
    playback_rate: float = Field(1.0, alias="playbackRate")
    current_item_id: int | None = Field(None, alias="currentItemId")
    repeat_mode: RepeatMode | None = Field(None, alias="repeatMode")
    media: MediaInformation | None = None


class QueueStatus(BaseModel):
    """Queue delta announced by the receiver."""

    model_config = ConfigDict(populate_by_name=True)

    change_type: QueueChangeType = Field(alias="changeType")
    item_ids: list[int] = Field(default_factory=list, alias="itemIds")


class ReceiverApplication(BaseModel):
    """Application running on the receiver."""

    model_config = ConfigDict(populate_by_name=True)

    app_id: str = Field(alias="appId")
    display_name: str | None = Field(None, alias="displayName")
    session_id: str | None = Field(None, alias="sessionId")


class ReceiverVolume(BaseModel):
    """Receiver-level volume; either field may be missing from a push."""

    level: float | None = None
    muted: bool | None = None


class ReceiverStatus(BaseModel):
    """Receiver channel status."""

    applications: list[ReceiverApplication] = Field(default_factory=list)
    volume: ReceiverVolume = Field(default_factory=ReceiverVolume)


class ReceiverInfo(BaseModel):
    """Identity and network endpoint of a receiver."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    friendly_name: str = Field(alias="friendlyName")
    host: str
    port: int = 8009

    @property
    def endpoint(self) -> str:
        """Return host:port."""
        return f"{self.host}:{self.port}"


class ReceiverSnapshot(BaseModel):
    """Status of one receiver as pushed to UI clients."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    id: str
    ip_address: str = Field(alias="ipAddress")
    is_connected: bool = Field(False, alias="isConnected")
    is_media_initialized: bool = Field(False, alias="isMediaInitialized")
    is_stopped: bool = Field(True, alias="isStopped")
    is_different_application_playing: bool = Field(
        False, alias="isDifferentApplicationPlaying"
    )
    current_application_id: str | None = Field(None, alias="currentApplicationId")
    volume: float = 0.0
    is_muted: bool = Field(False, alias="isMuted")
    current_media_status: MediaStatus | None = Field(None, alias="currentMediaStatus")
    current_media_information: MediaInformation | None = Field(
        None, alias="currentMediaInformation"
    )
    current_run_time: int | None = Field(None, alias="currentRunTime")
    queue: list[QueueItem] = Field(default_factory=list)


class ProgressReport(BaseModel):
    """Playback progress for the session-tracking service.

    Serialize with ``model_dump(by_alias=True, exclude_none=True)`` so fields
    trimmed from finish/stop reports are left out of the payload.
    """

    model_config = ConfigDict(populate_by_name=True)

    event_name: ProgressEvent | None = Field(None, alias="EventName")
    item_id: str = Field(alias="ItemId")
    media_source_id: str | None = Field(None, alias="MediaSourceId")
    position_ticks: int | None = Field(None, alias="PositionTicks")
    volume_level: int | None = Field(None, alias="VolumeLevel")
    is_muted: bool | None = Field(None, alias="IsMuted")
    is_paused: bool | None = Field(None, alias="IsPaused")
    playback_rate: float | None = Field(None, alias="PlaybackRate")
    play_method: PlayMethod | None = Field(None, alias="PlayMethod")
