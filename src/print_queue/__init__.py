"""Position-ordered print job queue entries with validated status transitions."""

from .config import Config
from .errors import (
    ConflictError,
    DuplicateJob,
    EntryNotFound,
    IllegalTransition,
    InvalidArgument,
    InvalidInitialState,
    PositionConflict,
    QueueError,
    StatusConflict,
)
from .positions import PositionAllocator
from .queue_manager import QueueManager
from .schemas import ACTIVE_STATUSES, QueueEntry, QueueStats, QueueStatus
from .shared_db import SQLAlchemyQueueStore, create_db_engine, create_session_factory
from .store import InMemoryQueueStore, QueueStore

__all__ = [
    # Configuration
    "Config",
    # Core
    "QueueManager",
    "PositionAllocator",
    "QueueEntry",
    "QueueStats",
    "QueueStatus",
    "ACTIVE_STATUSES",
    # Stores
    "QueueStore",
    "InMemoryQueueStore",
    "SQLAlchemyQueueStore",
    "create_db_engine",
    "create_session_factory",
    # Errors
    "QueueError",
    "InvalidArgument",
    "InvalidInitialState",
    "IllegalTransition",
    "ConflictError",
    "DuplicateJob",
    "PositionConflict",
    "StatusConflict",
    "EntryNotFound",
]
