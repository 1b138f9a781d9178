"""Queue store protocol and in-memory reference implementation.

The store is the only authority for the two uniqueness invariants and for
the compare-and-set on status. Each method is a single atomic unit of work;
no lock or transaction is held across calls.
"""

from __future__ import annotations

import threading
import time
from typing import Protocol, runtime_checkable

from typing_extensions import override

from .errors import DuplicateJob, EntryNotFound, PositionConflict, StatusConflict
from .schemas import ACTIVE_STATUSES, QueueEntry, QueueStatus, coerce_status


@runtime_checkable
class QueueStore(Protocol):
    """Durable persistence required by the queue core."""

    def insert(self, entry: QueueEntry) -> QueueEntry:
        """Atomically create an entry.

        Returns:
            Persisted entry with created_at/updated_at set

        Raises:
            DuplicateJob: An entry already exists for the job reference
            PositionConflict: An active entry already holds the position
        """
        ...

    def get_by_job(self, job_reference: str) -> QueueEntry | None:
        """Get entry by job reference, or None if absent."""
        ...

    def list_active(self, limit: int | None = None) -> list[QueueEntry]:
        """List pending and in-progress entries ordered by position ascending."""
        ...

    def update_status(
        self,
        job_reference: str,
        expected_current_status: QueueStatus | str,
        new_status: QueueStatus | str,
    ) -> QueueEntry:
        """Compare-and-set the status of an entry.

        Returns:
            Updated entry with refreshed updated_at

        Raises:
            EntryNotFound: No entry for the job reference
            StatusConflict: Persisted status differs from expected_current_status
        """
        ...

    def count_by_status(self) -> dict[QueueStatus, int]:
        """Count entries grouped by status."""
        ...


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


class InMemoryQueueStore(QueueStore):
    """Thread-safe in-memory store used for tests and embedding.

    A single lock makes every call atomic, mirroring what unique indexes and
    a conditional UPDATE give a database-backed store.
    """

    def __init__(self) -> None:
        self._lock: threading.Lock = threading.Lock()
        self._entries: dict[str, QueueEntry] = {}
        self._active_positions: dict[int, str] = {}

    @override
    def insert(self, entry: QueueEntry) -> QueueEntry:
        with self._lock:
            if entry.job_reference in self._entries:
                raise DuplicateJob(entry.job_reference)
            if entry.is_active and entry.position in self._active_positions:
                raise PositionConflict(entry.position)

            timestamp = now_ms()
            stored = entry.model_copy(update={"created_at": timestamp, "updated_at": timestamp})
            self._entries[stored.job_reference] = stored
            if stored.is_active:
                self._active_positions[stored.position] = stored.job_reference
            return stored

    @override
    def get_by_job(self, job_reference: str) -> QueueEntry | None:
        with self._lock:
            return self._entries.get(job_reference)

    @override
    def list_active(self, limit: int | None = None) -> list[QueueEntry]:
        with self._lock:
            active = [self._entries[job] for _, job in sorted(self._active_positions.items())]
        return active if limit is None else active[:limit]

    @override
    def update_status(
        self,
        job_reference: str,
        expected_current_status: QueueStatus | str,
        new_status: QueueStatus | str,
    ) -> QueueEntry:
        expected = coerce_status(expected_current_status)
        target = coerce_status(new_status)

        with self._lock:
            current = self._entries.get(job_reference)
            if current is None:
                raise EntryNotFound(job_reference)
            if current.status is not expected:
                raise StatusConflict(job_reference, expected.value, current.status.value)

            if target in ACTIVE_STATUSES and not current.is_active:
                holder = self._active_positions.get(current.position)
                if holder is not None and holder != job_reference:
                    raise PositionConflict(current.position)

            updated = current.model_copy(update={"status": target, "updated_at": now_ms()})
            self._entries[job_reference] = updated
            if updated.is_active:
                self._active_positions[updated.position] = job_reference
            elif self._active_positions.get(updated.position) == job_reference:
                del self._active_positions[updated.position]
            return updated

    @override
    def count_by_status(self) -> dict[QueueStatus, int]:
        with self._lock:
            counts = {status: 0 for status in QueueStatus}
            for entry in self._entries.values():
                counts[entry.status] += 1
            return counts
