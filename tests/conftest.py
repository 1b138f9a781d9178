"""Shared test fixtures for print_queue tests."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import MagicMock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from print_queue import InMemoryQueueStore, QueueManager, SQLAlchemyQueueStore
from print_queue.models import Base
from print_queue.mqtt import NoOpBroadcaster, shutdown_broadcaster

if TYPE_CHECKING:
    from collections.abc import Generator

    from sqlalchemy.engine import Engine

    from print_queue import QueueStore


@pytest.fixture
def in_memory_engine() -> Generator[Engine, None, None]:
    """Create SQLite in-memory engine with all tables created.

    Yields:
        Engine: SQLAlchemy engine with in-memory SQLite database
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(in_memory_engine: Engine) -> sessionmaker[Session]:
    """Create session factory bound to in-memory engine."""
    return sessionmaker(autocommit=False, autoflush=False, bind=in_memory_engine)


@pytest.fixture
def sql_store(session_factory: sessionmaker[Session]) -> SQLAlchemyQueueStore:
    return SQLAlchemyQueueStore(session_factory)


@pytest.fixture
def memory_store() -> InMemoryQueueStore:
    return InMemoryQueueStore()


@pytest.fixture(params=["memory", "sql"])
def store(request: pytest.FixtureRequest) -> QueueStore:
    """Run store contract tests against both implementations."""
    if request.param == "memory":
        return request.getfixturevalue("memory_store")
    return request.getfixturevalue("sql_store")


@pytest.fixture
def broadcaster() -> MagicMock:
    """Broadcaster double recording published events."""
    mock = MagicMock(spec=NoOpBroadcaster)
    mock.publish_entry_event.return_value = True
    return mock


@pytest.fixture
def manager(store: QueueStore, broadcaster: MagicMock) -> QueueManager:
    return QueueManager(store, broadcaster=broadcaster)


@pytest.fixture(autouse=True)
def reset_global_broadcaster() -> Generator[None, None, None]:
    yield
    shutdown_broadcaster()
