"""Queue manager: validates requests and persists them through a QueueStore.

Every operation is validate -> persist in a single store round trip. The
manager never retries; conflicts raised by the store reach the caller, who
must re-read state before deciding to retry.
"""

from __future__ import annotations

import logging

from .config import Config
from .errors import ConflictError, DuplicateJob, EntryNotFound
from .mqtt import QueueEvent, QueueEventBroadcaster, get_broadcaster
from .positions import PositionAllocator
from .schemas import QueueEntry, QueueStats, QueueStatus, coerce_status, require_job_reference
from .store import QueueStore

logger = logging.getLogger(__name__)

class QueueManager:
    """Entry point for enqueueing print jobs and moving them through their lifecycle.

    Example:
        manager = QueueManager(InMemoryQueueStore())
        entry = manager.enqueue("job-1")       # position 1, pending
        manager.mark_in_progress("job-1")
        manager.complete("job-1")
    """

    def __init__(
        self,
        store: QueueStore,
        broadcaster: QueueEventBroadcaster | None = None,
        allocator: PositionAllocator | None = None,
    ):
        """Initialize manager.

        Args:
            store: Persistence backend
            broadcaster: Event broadcaster; defaults to the configured global one
            allocator: Position allocator; defaults to PositionAllocator()
        """
        self.store: QueueStore = store
        self.allocator: PositionAllocator = allocator or PositionAllocator()
        self.broadcaster: QueueEventBroadcaster = broadcaster or get_broadcaster(
            broadcast_type=Config.BROADCAST_TYPE,
            broker=Config.MQTT_BROKER,
            port=Config.MQTT_PORT,
            topic=Config.MQTT_TOPIC,
        )

    def _publish(self, entry: QueueEntry) -> None:
        event = QueueEvent.for_status(entry.status)
        if not self.broadcaster.publish_entry_event(event, entry):
            logger.warning(f"Event {event.value} for job {entry.job_reference} was not published")

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def enqueue(self, job_reference: str) -> QueueEntry:
        """Add a job to the end of the queue.

        Returns:
            Persisted pending entry

        Raises:
            InvalidArgument: Empty job reference
            DuplicateJob: Job already has an entry
            PositionConflict: A concurrent insert took the allocated position
        """
        job_reference = require_job_reference(job_reference)

        if self.store.get_by_job(job_reference) is not None:
            raise DuplicateJob(job_reference)

        active = self.store.list_active()
        position = self.allocator.next_position(active)
        entry = QueueEntry.create(job_reference, position)
        self.allocator.assert_unique(position, active)

        try:
            stored = self.store.insert(entry)
        except ConflictError as e:
            logger.warning(f"Enqueue of job {job_reference} at position {position} lost: {e}")
            raise

        logger.info(f"Job {job_reference} added to queue at position {stored.position}")
        self._publish(stored)
        return stored

    def transition(self, job_reference: str, new_status: QueueStatus | str) -> QueueEntry:
        """Move an entry to ``new_status`` using compare-and-set.

        Raises:
            EntryNotFound: No entry for the job
            IllegalTransition: Transition not allowed from the current status
            StatusConflict: Entry changed between the read and the update
        """
        target = coerce_status(new_status)
        current = self.get_entry(job_reference)
        _ = current.with_status(target)

        try:
            updated = self.store.update_status(job_reference, current.status, target)
        except ConflictError as e:
            logger.warning(f"Transition of job {job_reference} to {target.value} lost: {e}")
            raise

        if not updated.is_active:
            _ = self.allocator.release_position(updated)

        logger.info(
            f"Job {job_reference} moved from {current.status.value} to {updated.status.value}"
        )
        self._publish(updated)
        return updated

    def mark_in_progress(self, job_reference: str) -> QueueEntry:
        return self.transition(job_reference, QueueStatus.in_progress)

    def complete(self, job_reference: str) -> QueueEntry:
        return self.transition(job_reference, QueueStatus.completed)

    def fail(self, job_reference: str) -> QueueEntry:
        return self.transition(job_reference, QueueStatus.failed)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_entry(self, job_reference: str) -> QueueEntry:
        entry = self.store.get_by_job(job_reference)
        if entry is None:
            raise EntryNotFound(job_reference)
        return entry

    def get_position(self, job_reference: str) -> int | None:
        """Position of an active entry, or None once it has left the active set."""
        entry = self.get_entry(job_reference)
        return entry.position if entry.is_active else None

    def current_queue(self, limit: int | None = Config.QUEUE_LIST_LIMIT) -> list[QueueEntry]:
        return self.store.list_active(limit=limit)

    def queue_stats(self) -> QueueStats:
        counts = self.store.count_by_status()
        pending = counts.get(QueueStatus.pending, 0)
        in_progress = counts.get(QueueStatus.in_progress, 0)
        return QueueStats(total=pending + in_progress, pending=pending, in_progress=in_progress)
