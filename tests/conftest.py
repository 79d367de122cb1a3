"""Root conftest for all tests.

This file makes shared fixtures available across all test modules.
"""

from collections.abc import Callable, Generator
from contextlib import AbstractContextManager, contextmanager
from datetime import date, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from plan_editor.dates.clock import FixedClock
from plan_editor.db.models import Base
from plan_editor.plans.types import CanonicalSchedule, Category, DayRecord

ANCHOR = date(2026, 3, 18)  # a Wednesday

WEEK_LABELS = [
    ("Easy 5 mi", Category.ACTIVE),
    ("Intervals 6x800", Category.ACTIVE),
    ("Rest", Category.REST),
    ("Tempo 4 mi", Category.ACTIVE),
    ("Easy 3 mi", Category.ACTIVE),
    ("Long run 12 mi", Category.ACTIVE),
    ("Recovery 3 mi", Category.ACTIVE),
]


def make_schedule(plan_id: str = "plan-1", *, completed: set[date] | None = None, version: int = 1) -> CanonicalSchedule:
    """Seven-day schedule 2026-03-18..2026-03-24 with one tagged day."""
    completed = completed or set()
    days = []
    for offset, (label, category) in enumerate(WEEK_LABELS):
        day = ANCHOR + timedelta(days=offset)
        days.append(
            DayRecord(
                date=day,
                label=label,
                annotations=["Keep HR under 150"] if offset == 0 else [],
                category=category,
                completed=day in completed,
                tag="calibration" if offset == 3 else None,
            )
        )
    return CanonicalSchedule(plan_id=plan_id, anchor_date=ANCHOR, version=version, days=days)


@pytest.fixture
def anchor() -> date:
    """Plan anchor (Wednesday 2026-03-18)."""
    return ANCHOR


@pytest.fixture
def schedule() -> CanonicalSchedule:
    """Seven-day schedule, nothing completed."""
    return make_schedule()


@pytest.fixture
def schedule_with_completed() -> CanonicalSchedule:
    """Seven-day schedule where the first two days are completed."""
    return make_schedule(completed={ANCHOR, ANCHOR + timedelta(days=1)})


@pytest.fixture
def clock() -> FixedClock:
    """Clock frozen on the anchor date at noon UTC."""
    return FixedClock(ANCHOR)


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """
    Provides a transactional in-memory SQLite DB session for tests.

    This fixture:
    - Creates an isolated in-memory SQLite database per test
    - Creates every plan editor table
    - Uses transaction rollback for fast, lock-free cleanup (no DELETE statements)
    """
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)

    # Create a connection and start a transaction
    connection = engine.connect()
    transaction = connection.begin()

    # Create session factory bound to our test connection
    test_session_local = sessionmaker(bind=connection, autocommit=False, autoflush=False)
    session = test_session_local()

    try:
        yield session
    finally:
        session.rollback()
        if transaction.is_active:
            transaction.rollback()
        session.close()
        connection.close()
        engine.dispose()


@pytest.fixture
def session_factory(db_session: Session) -> Callable[[], AbstractContextManager[Session]]:
    """Stand-in for get_session() that always yields the test session."""

    @contextmanager
    def _get_test_session() -> Generator[Session, None, None]:
        yield db_session

    return _get_test_session


@pytest.fixture
def schedule_factory() -> Callable[..., CanonicalSchedule]:
    """Build seven-day schedules with custom plan id, completed days or version."""
    return make_schedule
