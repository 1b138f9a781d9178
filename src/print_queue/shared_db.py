"""SQLAlchemy implementation of the QueueStore protocol.

The database is the authority for both uniqueness invariants:

- ``job_reference`` has a plain UNIQUE constraint.
- ``position`` has a partial unique index restricted to active rows.

Status changes are a single conditional ``UPDATE ... WHERE status = :expected
RETURNING``; if no row comes back, one follow-up read tells a missing entry
apart from a lost race.
"""

from __future__ import annotations

import logging
from typing_extensions import override

from sqlalchemy import create_engine, func, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from .config import Config
from .entry_translator import db_entry_to_queue_entry, queue_entry_to_db_entry
from .errors import DuplicateJob, EntryNotFound, PositionConflict, StatusConflict
from .models import Base
from .models import QueueEntry as DbQueueEntry
from .schemas import ACTIVE_STATUSES, QueueEntry, QueueStatus, coerce_status
from .store import QueueStore, now_ms

logger = logging.getLogger(__name__)

_ACTIVE_VALUES = sorted(status.value for status in ACTIVE_STATUSES)


def create_db_engine(
    database_url: str = Config.DATABASE_URL,
    *,
    echo: bool = Config.DATABASE_ECHO,
) -> Engine:
    """Create an engine, allowing SQLite connections to be shared across threads.

    Args:
        database_url: SQLAlchemy URL (defaults to PRINT_QUEUE_DATABASE_URL)
        echo: Log emitted SQL (defaults to DATABASE_ECHO)
    """
    connect_args: dict[str, object] = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(database_url, echo=echo, connect_args=connect_args)


def create_session_factory(engine: Engine, *, create_tables: bool = True) -> sessionmaker[Session]:
    """Create a session factory bound to ``engine``, creating tables if asked."""
    if create_tables:
        Base.metadata.create_all(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


class SQLAlchemyQueueStore(QueueStore):
    """Durable queue store backed by any SQLAlchemy database with partial indexes.

    Example:
        engine = create_db_engine("sqlite:///print_queue.db")
        store = SQLAlchemyQueueStore(create_session_factory(engine))
        store.insert(QueueEntry.create("job-1", 1))
    """

    def __init__(self, session_factory: sessionmaker[Session]):
        """Initialize store with session factory.

        Args:
            session_factory: SQLAlchemy session factory (sessionmaker)
        """
        self.session_factory: sessionmaker[Session] = session_factory

    @override
    def insert(self, entry: QueueEntry) -> QueueEntry:
        session: Session
        with self.session_factory() as session:
            db_entry = queue_entry_to_db_entry(entry, timestamp=now_ms())
            session.add(db_entry)
            try:
                session.flush()
                stored = db_entry_to_queue_entry(db_entry)
                session.commit()
            except IntegrityError as e:
                session.rollback()
                logger.debug(f"Insert rejected for job {entry.job_reference}: {e.orig}")
                if self._job_exists(session, entry.job_reference):
                    raise DuplicateJob(entry.job_reference) from e
                if entry.is_active and self._active_position_taken(session, entry.position):
                    raise PositionConflict(entry.position) from e
                raise
            return stored

    @override
    def get_by_job(self, job_reference: str) -> QueueEntry | None:
        with self.session_factory() as session:
            stmt = select(DbQueueEntry).where(DbQueueEntry.job_reference == job_reference)
            db_entry = session.execute(stmt).scalar_one_or_none()

            if db_entry:
                return db_entry_to_queue_entry(db_entry)
            return None

    @override
    def list_active(self, limit: int | None = None) -> list[QueueEntry]:
        with self.session_factory() as session:
            stmt = (
                select(DbQueueEntry)
                .where(DbQueueEntry.status.in_(_ACTIVE_VALUES))
                .order_by(DbQueueEntry.position)
            )
            if limit is not None:
                stmt = stmt.limit(limit)
            return [db_entry_to_queue_entry(row) for row in session.execute(stmt).scalars()]

    @override
    def update_status(
        self,
        job_reference: str,
        expected_current_status: QueueStatus | str,
        new_status: QueueStatus | str,
    ) -> QueueEntry:
        expected = coerce_status(expected_current_status)
        target = coerce_status(new_status)

        with self.session_factory() as session:
            # Optimistic lock: only matches while status is still the expected one
            stmt = (
                update(DbQueueEntry)
                .where(
                    DbQueueEntry.job_reference == job_reference,
                    DbQueueEntry.status == expected.value,
                )
                .values(status=target.value, updated_at=now_ms())
                .returning(DbQueueEntry)
            )
            try:
                db_entry: DbQueueEntry | None = session.execute(stmt).scalar_one_or_none()
                updated = db_entry_to_queue_entry(db_entry) if db_entry is not None else None
                session.commit()
            except IntegrityError as e:
                # Reactivating onto a position another active entry holds
                session.rollback()
                row = self._get(session, job_reference)
                if row is None:
                    raise
                raise PositionConflict(row.position) from e

            if updated is not None:
                return updated

            current = self._get(session, job_reference)
            if current is None:
                raise EntryNotFound(job_reference)
            raise StatusConflict(job_reference, expected.value, current.status)

    @override
    def count_by_status(self) -> dict[QueueStatus, int]:
        with self.session_factory() as session:
            stmt = select(DbQueueEntry.status, func.count()).group_by(DbQueueEntry.status)
            counts = {status: 0 for status in QueueStatus}
            for status, count in session.execute(stmt).all():
                counts[QueueStatus(status)] = count
            return counts

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _get(session: Session, job_reference: str) -> DbQueueEntry | None:
        stmt = select(DbQueueEntry).where(DbQueueEntry.job_reference == job_reference)
        return session.execute(stmt).scalar_one_or_none()

    @staticmethod
    def _job_exists(session: Session, job_reference: str) -> bool:
        stmt = select(DbQueueEntry.id).where(DbQueueEntry.job_reference == job_reference)
        return session.execute(stmt).first() is not None

    @staticmethod
    def _active_position_taken(session: Session, position: int) -> bool:
        stmt = select(DbQueueEntry.id).where(
            DbQueueEntry.position == position,
            DbQueueEntry.status.in_(_ACTIVE_VALUES),
        )
        return session.execute(stmt).first() is not None
