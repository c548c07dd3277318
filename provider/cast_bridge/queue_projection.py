"""Local mirror of the receiver queue.

The receiver only announces queue deltas by item id, so the local copy is
reconciled with the pure helpers below. Bulk transfers go through
`QueueProjection`, which splits them into batches the receiver accepts.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterator, Sequence
from typing import TYPE_CHECKING, TypeVar

from .constants import DEFAULT_QUEUE_CHUNK_SIZE
from .models import QueueItem, RepeatMode

if TYPE_CHECKING:
    from .channel import ReceiverChannel

logger = logging.getLogger(__name__)

T = TypeVar("T")


def chunked(items: Sequence[T], size: int) -> Iterator[list[T]]:
    """Yield consecutive batches of at most size items."""
    if size < 1:
        raise ValueError("size must be >= 1")
    for start in range(0, len(items), size):
        yield list(items[start : start + size])


def renumber(items: Sequence[QueueItem]) -> tuple[QueueItem, ...]:
    """Return copies of items with order_id set densely from 0."""
    return tuple(
        item if item.order_id == index else item.model_copy(update={"order_id": index})
        for index, item in enumerate(items)
    )


def apply_update_order(
    queue: Sequence[QueueItem], item_ids: Sequence[int]
) -> tuple[QueueItem, ...]:
    """Re-sort queue by the receiver-reported id order.

    Items the receiver did not list keep their relative order ahead of the
    listed ones.
    """
    positions = {item_id: index for index, item_id in enumerate(item_ids)}
    ordered = sorted(
        queue,
        key=lambda item: -1 if item.item_id is None else positions.get(item.item_id, -1),
    )
    return renumber(ordered)


def apply_removal(
    queue: Sequence[QueueItem], item_ids: Collection[int]
) -> tuple[QueueItem, ...]:
    """Drop the named items and renumber the rest."""
    removed = set(item_ids)
    return renumber([item for item in queue if item.item_id not in removed])


def backfill_duration(
    queue: Sequence[QueueItem], item_id: int | None, duration: float | None
) -> tuple[QueueItem, ...]:
    """Copy a receiver-reported duration into the matching queue entry."""
    if item_id is None or duration is None:
        return tuple(queue)
    result = []
    for item in queue:
        if item.item_id == item_id and item.media is not None:
            media = item.media.model_copy(update={"duration": duration})
            item = item.model_copy(update={"media": media})
        result.append(item)
    return tuple(result)


def move_up(item_ids: Sequence[int], moving: Collection[int]) -> list[int]:
    """Move each selected id one slot towards the head.

    A selected id only swaps with an unselected neighbour, so a selected block
    already at the head stays put and keeps its internal order.
    """
    order = list(item_ids)
    selected = set(moving)
    for index in range(1, len(order)):
        if order[index] in selected and order[index - 1] not in selected:
            order[index - 1], order[index] = order[index], order[index - 1]
    return order


def move_down(item_ids: Sequence[int], moving: Collection[int]) -> list[int]:
    """Move each selected id one slot towards the tail."""
    order = list(item_ids)
    selected = set(moving)
    for index in range(len(order) - 2, -1, -1):
        if order[index] in selected and order[index + 1] not in selected:
            order[index], order[index + 1] = order[index + 1], order[index]
    return order


class QueueProjection:
    """Chunked queue transfers between the receiver and the local mirror."""

    def __init__(
        self, channel: ReceiverChannel, chunk_size: int = DEFAULT_QUEUE_CHUNK_SIZE
    ) -> None:
        """Initialize the projection for a channel."""
        self._channel = channel
        self.chunk_size = chunk_size

    async def fetch(self, current: Sequence[QueueItem]) -> tuple[QueueItem, ...]:
        """Fetch the authoritative queue from the receiver.

        Returns current unchanged when the receiver reports no items, and an
        empty queue when any batch comes back without data.
        """
        item_ids = await self._channel.queue_get_item_ids()
        if not item_ids:
            return tuple(current)
        fetched: list[QueueItem] = []
        for batch in chunked(item_ids, self.chunk_size):
            items = await self._channel.queue_get_items(batch)
            if not items:
                logger.debug(
                    "Queue fetch returned no data for %d item(s), clearing projection",
                    len(batch),
                )
                return ()
            fetched.extend(items)
        return tuple(sorted(fetched, key=lambda item: item.order_id))

    async def load(
        self,
        items: Sequence[QueueItem],
        repeat_mode: RepeatMode = RepeatMode.REPEAT_ALL,
    ) -> int:
        """Replace the receiver queue; returns the number of calls issued."""
        batches = list(chunked(items, self.chunk_size))
        if not batches:
            return 0
        await self._channel.queue_load(batches[0], repeat_mode)
        for batch in batches[1:]:
            await self._channel.queue_insert(batch)
        return len(batches)

    async def insert(
        self, items: Sequence[QueueItem], insert_before: int | None = None
    ) -> int:
        """Insert items before insert_before (or append); returns calls issued."""
        calls = 0
        for batch in chunked(items, self.chunk_size):
            await self._channel.queue_insert(batch, insert_before)
            calls += 1
        return calls
