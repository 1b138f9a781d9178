"""Position allocation over the active set.

Positions are allocated as the active maximum plus one. Entries leaving the
active set are never compacted and gaps are not filled, so a release never
moves another entry and cannot collide with a concurrent allocation.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .errors import InvalidArgument, PositionConflict
from .schemas import QueueEntry

logger = logging.getLogger(__name__)


def next_position(active_entries: Iterable[QueueEntry]) -> int:
    """Return the position for the next insertion (max + 1, or 1 when empty)."""
    return max((entry.position for entry in active_entries), default=0) + 1


def release_position(entry: QueueEntry) -> int:
    """Acknowledge that ``entry`` has left the active set.

    Returns:
        The released position

    Raises:
        InvalidArgument: If the entry is still active
    """
    if entry.is_active:
        raise InvalidArgument(
            f"Entry {entry.job_reference} is still {entry.status.value}; only inactive entries release"
        )
    logger.debug(f"Released position {entry.position} held by job {entry.job_reference}")
    return entry.position


def assert_unique(
    position: int,
    active_entries: Iterable[QueueEntry],
    *,
    ignore_job: str | None = None,
) -> None:
    """Raise ``PositionConflict`` if another active entry holds ``position``."""
    for entry in active_entries:
        if entry.job_reference == ignore_job or not entry.is_active:
            continue
        if entry.position == position:
            raise PositionConflict(position)


class PositionAllocator:
    """Injectable facade over the module-level allocation functions."""

    def next_position(self, active_entries: Iterable[QueueEntry]) -> int:
        return next_position(active_entries)

    def release_position(self, entry: QueueEntry) -> int:
        return release_position(entry)

    def assert_unique(
        self,
        position: int,
        active_entries: Iterable[QueueEntry],
        *,
        ignore_job: str | None = None,
    ) -> None:
        assert_unique(position, active_entries, ignore_job=ignore_job)
