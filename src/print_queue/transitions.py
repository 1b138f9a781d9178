"""Status transition rules for queue entries.

Only forward moves are allowed::

    pending -> in-progress -> completed
                           -> failed

Self-transitions are rejected like any other edge outside the graph, and
the terminal states have no outgoing edges.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Final

from .errors import IllegalTransition, InvalidArgument, InvalidInitialState
from .schemas import QueueStatus, coerce_status

ALLOWED_TRANSITIONS: Final[Mapping[QueueStatus, frozenset[QueueStatus]]] = {
    QueueStatus.pending: frozenset({QueueStatus.in_progress}),
    QueueStatus.in_progress: frozenset({QueueStatus.completed, QueueStatus.failed}),
    QueueStatus.completed: frozenset(),
    QueueStatus.failed: frozenset(),
}


def is_terminal(status: QueueStatus | str) -> bool:
    return not ALLOWED_TRANSITIONS[coerce_status(status)]


def validate(
    current_status: QueueStatus | str | None,
    next_status: QueueStatus | str,
    is_new_entry: bool = False,
) -> None:
    """Check that ``current_status -> next_status`` is a legal move.

    Args:
        current_status: Persisted status (ignored for new entries)
        next_status: Requested status
        is_new_entry: True when validating the initial status of a new entry

    Raises:
        InvalidInitialState: New entry not starting as pending
        IllegalTransition: Edge not in ALLOWED_TRANSITIONS
        InvalidArgument: Unknown status value
    """
    target = coerce_status(next_status)

    if is_new_entry:
        if target is not QueueStatus.pending:
            raise InvalidInitialState(target.value)
        return

    if current_status is None:
        raise InvalidArgument("current_status is required for existing entries")

    current = coerce_status(current_status)
    if target not in ALLOWED_TRANSITIONS[current]:
        raise IllegalTransition(current.value, target.value)
