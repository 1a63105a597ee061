"""Root conftest for all tests.

Every test that touches storage gets its own in-memory SQLite database, so
tests never share rows and never touch the configured DATABASE_URL.
"""

from contextlib import contextmanager

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.calendar.repository import SqlWorkoutRepository
from app.calendar.reschedule import RescheduleCoordinator
from app.db.models import Base


@pytest.fixture
def engine():
    """Fresh in-memory SQLite engine with the schema created.

    StaticPool keeps a single connection so worker threads (asyncio.to_thread)
    see the same in-memory database.
    """
    test_engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Enable foreign key constraints for SQLite
    @event.listens_for(test_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, _connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    """Session context manager with the same commit/rollback contract as get_session."""
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    @contextmanager
    def _session():
        session = factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    return _session


@pytest.fixture
def repository(session_factory):
    return SqlWorkoutRepository(session_factory)


@pytest.fixture
def coordinator(repository):
    return RescheduleCoordinator(repository)


@pytest.fixture
def user_id():
    return "user-1"
