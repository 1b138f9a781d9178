"""Pydantic schemas for queue entries.

``QueueEntry`` is an immutable value: the only ways to get a changed entry are
``QueueEntry.create`` (always ``pending``) and ``QueueEntry.with_status``
(validated transition). Timestamps are owned by the store and stay ``None``
until the entry has been persisted.
"""

from __future__ import annotations

from enum import Enum
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import InvalidArgument


class QueueStatus(str, Enum):
    """Lifecycle states of a queue entry."""

    pending = "pending"
    in_progress = "in-progress"
    completed = "completed"
    failed = "failed"


ACTIVE_STATUSES: Final[frozenset[QueueStatus]] = frozenset(
    {QueueStatus.pending, QueueStatus.in_progress}
)


def coerce_status(value: QueueStatus | str) -> QueueStatus:
    """Accept a ``QueueStatus`` or its string value.

    Raises:
        InvalidArgument: If the value is not a known status
    """
    try:
        return QueueStatus(value)
    except ValueError as e:
        raise InvalidArgument(f"Unknown queue status: {value!r}") from e


def require_job_reference(value: object) -> str:
    """Return ``value`` if it is a non-blank string.

    Raises:
        InvalidArgument: If the value is missing, not a string, or blank
    """
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgument(f"job_reference must be a non-empty string, got {value!r}")
    return value


class QueueEntry(BaseModel):
    """Position-addressed record tracking one print job through the queue."""

    model_config = ConfigDict(frozen=True)

    job_reference: str = Field(..., min_length=1, description="Opaque print job identifier")
    position: int = Field(..., ge=1, strict=True, description="Queue position, unique among active entries")
    status: QueueStatus = Field(QueueStatus.pending, description="Current lifecycle status")
    created_at: int | None = Field(None, description="Creation time in epoch milliseconds")
    updated_at: int | None = Field(None, description="Last mutation time in epoch milliseconds")

    @field_validator("job_reference")
    @classmethod
    def validate_job_reference(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("job_reference must not be blank")
        return v

    @classmethod
    def create(cls, job_reference: str | None, position: int) -> QueueEntry:
        """Create a new ``pending`` entry.

        Args:
            job_reference: Print job identifier (must be non-empty)
            position: Queue position (must be >= 1)

        Returns:
            New, unpersisted QueueEntry

        Raises:
            InvalidArgument: If job_reference is empty or position < 1
        """
        from .transitions import validate

        job_reference = require_job_reference(job_reference)
        if isinstance(position, bool) or not isinstance(position, int):
            raise InvalidArgument(f"position must be an integer, got {position!r}")
        if position < 1:
            raise InvalidArgument(f"position must be >= 1, got {position}")

        validate(None, QueueStatus.pending, is_new_entry=True)
        return cls(job_reference=job_reference, position=position, status=QueueStatus.pending)

    def with_status(self, new_status: QueueStatus | str) -> QueueEntry:
        """Return a copy of this entry moved to ``new_status``.

        Raises:
            IllegalTransition: If the transition is not allowed
        """
        from .transitions import validate

        target = coerce_status(new_status)
        validate(self.status, target)
        return self.model_copy(update={"status": target})

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES


class QueueStats(BaseModel):
    """Counts over the active set."""

    total: int = 0
    pending: int = 0
    in_progress: int = 0
