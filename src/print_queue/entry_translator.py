"""Conversion between SQLAlchemy queue rows and pydantic QueueEntry."""

from .models import QueueEntry as DbQueueEntry
from .schemas import QueueEntry, QueueStatus


def db_entry_to_queue_entry(db_entry: DbQueueEntry) -> QueueEntry:
    """Convert SQLAlchemy row to Pydantic QueueEntry.

    Returns:
        Pydantic QueueEntry with timestamps populated
    """
    return QueueEntry(
        job_reference=db_entry.job_reference,
        position=db_entry.position,
        status=QueueStatus(db_entry.status),
        created_at=db_entry.created_at,
        updated_at=db_entry.updated_at,
    )


def queue_entry_to_db_entry(entry: QueueEntry, *, timestamp: int) -> DbQueueEntry:
    """Create SQLAlchemy row from Pydantic QueueEntry.

    Args:
        entry: Pydantic QueueEntry
        timestamp: Creation time in epoch milliseconds (used for both timestamps)

    Returns:
        SQLAlchemy QueueEntry instance (not persisted)
    """
    return DbQueueEntry(
        job_reference=entry.job_reference,
        position=entry.position,
        status=entry.status.value,
        created_at=timestamp,
        updated_at=timestamp,
    )
