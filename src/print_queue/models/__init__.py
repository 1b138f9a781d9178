"""Queue database models."""

from .base import Base
from .queue import QueueEntry

__all__ = ["Base", "QueueEntry"]
