"""Queue entry table with job and active-position uniqueness."""

from typing_extensions import override

from sqlalchemy import BigInteger, CheckConstraint, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base

# Partial index predicate: position is unique only among pending/in-progress rows
ACTIVE_STATUS_PREDICATE = text("status IN ('pending', 'in-progress')")


class QueueEntry(Base):
    """Persisted queue entry.

    job_reference is unique for the whole lifetime of the row; position is
    unique only while the row is active, enforced by a partial unique index.
    """

    __tablename__ = "queue_entries"  # pyright: ignore[reportUnannotatedClassAttribute]
    __table_args__ = (  # pyright: ignore[reportUnannotatedClassAttribute]
        CheckConstraint("position >= 1", name="ck_queue_entries_position_positive"),
        CheckConstraint(
            "status IN ('pending', 'in-progress', 'completed', 'failed')",
            name="ck_queue_entries_status",
        ),
        Index(
            "uq_queue_entries_active_position",
            "position",
            unique=True,
            sqlite_where=ACTIVE_STATUS_PREDICATE,
            postgresql_where=ACTIVE_STATUS_PREDICATE,
        ),
        Index("ix_queue_entries_status_position", "status", "position"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    job_reference: Mapped[str] = mapped_column(String, unique=True, nullable=False, index=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="pending")

    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False)

    @override
    def __repr__(self) -> str:
        return (
            f"<QueueEntry(job_reference={self.job_reference}, "
            f"position={self.position}, status={self.status})>"
        )
