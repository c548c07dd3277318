"""Tests for wire models and configuration."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from cast_bridge.config import BridgeConfig, SessionConfig
from cast_bridge.constants import BACKDROP_APP_ID
from cast_bridge.models import (
    MediaStatus,
    ProgressEvent,
    ProgressReport,
    QueueChangeType,
    QueueStatus,
    ReceiverInfo,
    ReceiverSnapshot,
)

# --- Models ---


def test_media_status_from_receiver_json() -> None:
    """Receiver camelCase payloads parse into MediaStatus."""
    status = MediaStatus.model_validate(
        {
            "mediaSessionId": 3,
            "playerState": "IDLE",
            "idleReason": "FINISHED",
            "currentTime": 12.75,
            "currentItemId": 8,
            "media": {
                "contentId": "http://media.local/a.mp3",
                "duration": 200.0,
                "customData": {"Id": 42, "Username": "bob"},
            },
        }
    )
    assert status.idle_reason == "FINISHED"
    assert status.current_item_id == 8
    assert status.media is not None
    assert status.media.custom_value("Id") == "42"
    assert status.media.custom_value("Username") == "bob"


def test_custom_value_blank() -> None:
    """Missing or blank custom entries read as None."""
    status = MediaStatus.model_validate(
        {"media": {"contentId": "x", "customData": {"Id": ""}}}
    )
    assert status.media is not None
    assert status.media.custom_value("Id") is None
    assert status.media.custom_value("Username") is None


def test_queue_status_aliases() -> None:
    """Queue deltas parse their change kind and ids."""
    status = QueueStatus.model_validate({"changeType": "REMOVE", "itemIds": [1, 2]})
    assert status.change_type == QueueChangeType.REMOVE
    assert status.item_ids == [1, 2]


def test_progress_report_wire_names() -> None:
    """Progress reports serialize with the service's field names."""
    report = ProgressReport(
        event_name=ProgressEvent.PAUSE, item_id="m1", position_ticks=10, is_paused=True
    )
    assert report.model_dump(mode="json", by_alias=True, exclude_none=True) == {
        "EventName": "Pause",
        "ItemId": "m1",
        "PositionTicks": 10,
        "IsPaused": True,
    }


def test_snapshot_json() -> None:
    """Snapshots serialize with camelCase keys."""
    snapshot = ReceiverSnapshot(name="Den", id="rx", ip_address="10.0.0.2")
    data = snapshot.model_dump(mode="json", by_alias=True)
    assert data["ipAddress"] == "10.0.0.2"
    assert data["isStopped"] is True
    assert data["queue"] == []


def test_receiver_endpoint() -> None:
    """endpoint joins host and port."""
    info = ReceiverInfo(id="rx", friendly_name="Den", host="10.0.0.2")
    assert info.endpoint == "10.0.0.2:8009"


# --- Config ---


def test_session_config_defaults() -> None:
    """Defaults match the receiver limits and custom data keys."""
    config = SessionConfig()
    assert config.application_id is None
    assert config.idle_application_ids == (BACKDROP_APP_ID,)
    assert config.queue_chunk_size == 20
    assert config.refresh_every_ticks == 10
    assert (config.media_id_key, config.user_key) == ("Id", "Username")


def test_session_config_from_values() -> None:
    """Flat settings are parsed, including comma separated idle apps."""
    config = SessionConfig.from_values(
        {
            "application_id": "",
            "idle_application_ids": "E8C28D3C, 00000000",
            "queue_chunk_size": 10,
        }
    )
    assert config.application_id is None
    assert config.idle_application_ids == ("E8C28D3C", "00000000")
    assert config.queue_chunk_size == 10


def test_session_config_validation() -> None:
    """Chunk size and tick interval must be positive."""
    with pytest.raises(ValidationError):
        SessionConfig(queue_chunk_size=0)
    with pytest.raises(ValidationError):
        SessionConfig(tick_interval=0)


def test_bridge_config_from_values() -> None:
    """Bridge settings carry the nested session settings."""
    config = BridgeConfig.from_values(
        {"http_port": 9000, "progress_url": "http://jf.local", "refresh_every_ticks": 5}
    )
    assert config.http_port == 9000
    assert config.progress_url == "http://jf.local"
    assert config.session.refresh_every_ticks == 5
    assert BridgeConfig.from_values({}).progress_url is None
