"""Error taxonomy for queue entry operations.

Every error raised by the queue core derives from ``QueueError`` so callers
(e.g. an HTTP layer) can translate the whole family into their own response
vocabulary. ``ConflictError`` subclasses are the only ones expected under
normal concurrent load; callers may re-read state and retry them.
"""

from __future__ import annotations

from typing_extensions import override


class QueueError(Exception):
    """Base class for all queue errors."""


class InvalidArgument(QueueError, ValueError):
    """Malformed input such as a bad position or an empty job reference."""


class InvalidInitialState(QueueError):
    """A new entry was asked to start in a status other than ``pending``."""

    def __init__(self, status: str):
        self.status: str = status
        super().__init__(f'New queue entries must start with status "pending", got "{status}"')


class IllegalTransition(QueueError):
    """Requested status change is not in the allowed edge set."""

    def __init__(self, current_status: str, attempted_status: str):
        self.current_status: str = current_status
        self.attempted_status: str = attempted_status
        super().__init__(
            f"Invalid status transition from {current_status} to {attempted_status}"
        )


class ConflictError(QueueError):
    """Base class for uniqueness violations and lost compare-and-set races."""


class DuplicateJob(ConflictError):
    """An entry for this job reference already exists."""

    def __init__(self, job_reference: str):
        self.job_reference: str = job_reference
        super().__init__(f"Job {job_reference} is already in the queue")


class PositionConflict(ConflictError):
    """Another active entry already holds this position."""

    def __init__(self, position: int):
        self.position: int = position
        super().__init__(f"Position {position} is already held by an active entry")


class StatusConflict(ConflictError):
    """Compare-and-set lost: the persisted status no longer matches."""

    def __init__(self, job_reference: str, expected_status: str, actual_status: str):
        self.job_reference: str = job_reference
        self.expected_status: str = expected_status
        self.actual_status: str = actual_status
        super().__init__(
            f"Entry {job_reference} was modified concurrently: "
            f"expected status {expected_status}, found {actual_status}"
        )


class EntryNotFound(QueueError, LookupError):
    """No entry exists for the job reference."""

    def __init__(self, job_reference: str):
        self.job_reference: str = job_reference
        super().__init__(job_reference)

    @override
    def __str__(self) -> str:
        return f"Queue entry for job {self.job_reference} not found"
