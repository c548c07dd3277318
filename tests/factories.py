"""Builders for receiver payloads used across the tests."""

from __future__ import annotations

from cast_bridge.models import MediaInformation, MediaStatus, QueueItem


def media_info(
    media_id: str | None = "m1",
    user: str | None = "alice",
    duration: float | None = None,
) -> MediaInformation:
    """Return media information carrying the given custom data."""
    custom_data = {}
    if media_id is not None:
        custom_data["Id"] = media_id
    if user is not None:
        custom_data["Username"] = user
    return MediaInformation(
        content_id=f"http://media.local/{media_id}",
        content_type="audio/mpeg",
        duration=duration,
        custom_data=custom_data,
    )


def media_status(
    player_state: str = "PLAYING",
    media: MediaInformation | None = None,
    current_time: float = 0.0,
    idle_reason: str | None = None,
    current_item_id: int | None = None,
) -> MediaStatus:
    """Return a media status in the given state."""
    return MediaStatus(
        media_session_id=1,
        player_state=player_state,
        idle_reason=idle_reason,
        current_time=current_time,
        current_item_id=current_item_id,
        media=media,
    )


def queue_items(*item_ids: int) -> tuple[QueueItem, ...]:
    """Return loaded queue items with dense order ids."""
    return tuple(
        QueueItem(item_id=item_id, order_id=index, media=media_info(f"m{item_id}"))
        for index, item_id in enumerate(item_ids)
    )


def new_items(count: int) -> list[QueueItem]:
    """Return caller-built items that the receiver has not numbered yet."""
    return [QueueItem(media=media_info(f"new{index}")) for index in range(count)]
