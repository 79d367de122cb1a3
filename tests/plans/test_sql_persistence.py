"""Tests for the SQLAlchemy-backed schedule repository, proposal store and revision registry.

Uses the in-memory SQLite db_session fixture; every store gets a session
factory that yields that session.
"""

from datetime import date, timedelta

import pytest
from sqlalchemy import select

from plan_editor.dates.clock import FixedClock
from plan_editor.db.models import PlanEditProposal
from plan_editor.plans.commit.engine import commit_proposal
from plan_editor.plans.commit.types import CommitResult
from plan_editor.plans.modify.types import ValidPatchSet
from plan_editor.plans.modify.validators import validate_patches
from plan_editor.plans.outcomes import ConflictError, ExpiredError, NotFoundError
from plan_editor.plans.proposals.repository import SqlProposalStore
from plan_editor.plans.proposals.types import PatchProposal
from plan_editor.plans.repository import SqlScheduleRepository
from plan_editor.plans.revision.registry import SqlRevisionRegistry
from plan_editor.plans.types import CanonicalSchedule, Category


@pytest.fixture
def sql_repository(session_factory, schedule: CanonicalSchedule) -> SqlScheduleRepository:
    """SQL repository seeded with the seven-day schedule."""
    repository = SqlScheduleRepository(session_factory=session_factory)
    repository.add(schedule)
    return repository


@pytest.fixture
def sql_store(session_factory) -> SqlProposalStore:
    """SQL proposal store on the test session."""
    return SqlProposalStore(session_factory=session_factory)


@pytest.fixture
def patch_set(schedule: CanonicalSchedule) -> ValidPatchSet:
    """Cancel the Tempo day."""
    result = validate_patches([{"date": "2026-03-21", "action": "CANCEL"}], schedule)
    assert isinstance(result, ValidPatchSet)
    return result


def test_schedule_round_trip(sql_repository: SqlScheduleRepository, schedule: CanonicalSchedule) -> None:
    """Day records come back exactly as stored."""
    loaded = sql_repository.get("plan-1")

    assert loaded == schedule
    assert loaded.get_day(date(2026, 3, 21)).tag == "calibration"
    assert loaded.get_day(date(2026, 3, 20)).category == Category.REST


def test_unknown_schedule(sql_repository: SqlScheduleRepository) -> None:
    """Unknown plan ids give None."""
    assert sql_repository.get("nope") is None


def test_compare_and_swap(sql_repository: SqlScheduleRepository, schedule: CanonicalSchedule) -> None:
    """Writes only land on the expected version."""
    bumped = schedule.model_copy(update={"version": 2})

    assert sql_repository.compare_and_swap(bumped, expected_version=1) is True
    assert sql_repository.compare_and_swap(bumped.model_copy(update={"version": 3}), expected_version=1) is False
    assert sql_repository.get("plan-1").version == 2


def test_sql_proposal_consume_once(sql_store: SqlProposalStore, patch_set: ValidPatchSet, schedule: CanonicalSchedule) -> None:
    """A stored proposal is readable, then consumed exactly once."""
    clock = FixedClock(date(2026, 3, 18))
    proposal = sql_store.create(patch_set, schedule, now=clock.now())

    fetched = sql_store.get(proposal.id, now=clock.now())
    assert isinstance(fetched, PatchProposal)
    assert fetched == proposal

    assert isinstance(sql_store.consume(proposal.id, now=clock.now()), PatchProposal)
    assert isinstance(sql_store.consume(proposal.id, now=clock.now()), NotFoundError)


def test_sql_proposal_expiry(
    sql_store: SqlProposalStore,
    patch_set: ValidPatchSet,
    schedule: CanonicalSchedule,
    db_session,
) -> None:
    """An expired proposal is reported and its row removed on consume."""
    clock = FixedClock(date(2026, 3, 18))
    proposal = sql_store.create(patch_set, schedule, now=clock.now(), ttl=timedelta(minutes=1))
    clock.advance(minutes=2)

    assert isinstance(sql_store.get(proposal.id, now=clock.now()), ExpiredError)
    assert isinstance(sql_store.consume(proposal.id, now=clock.now()), ExpiredError)
    assert db_session.execute(select(PlanEditProposal)).first() is None


def test_sql_proposal_discard(sql_store: SqlProposalStore, patch_set: ValidPatchSet, schedule: CanonicalSchedule) -> None:
    """discard reports whether a row was removed."""
    clock = FixedClock(date(2026, 3, 18))
    proposal = sql_store.create(patch_set, schedule, now=clock.now())

    assert sql_store.discard(proposal.id) is True
    assert sql_store.discard(proposal.id) is False
    assert isinstance(sql_store.get(proposal.id, now=clock.now()), NotFoundError)


def test_sql_purge_expired(sql_store: SqlProposalStore, patch_set: ValidPatchSet, schedule: CanonicalSchedule) -> None:
    """Only proposals past their expiry are deleted."""
    clock = FixedClock(date(2026, 3, 18))
    stale = sql_store.create(patch_set, schedule, now=clock.now(), ttl=timedelta(minutes=1))
    fresh = sql_store.create(patch_set, schedule, now=clock.now(), ttl=timedelta(minutes=30))
    clock.advance(minutes=5)

    assert sql_store.purge_expired(clock.now()) == 1
    assert sql_store.purge_expired(clock.now()) == 0
    assert isinstance(sql_store.get(stale.id, now=clock.now()), NotFoundError)
    assert isinstance(sql_store.get(fresh.id, now=clock.now()), PatchProposal)


def test_commit_through_sql_stores(
    session_factory,
    sql_repository: SqlScheduleRepository,
    sql_store: SqlProposalStore,
    patch_set: ValidPatchSet,
    schedule: CanonicalSchedule,
) -> None:
    """End to end: commit bumps the stored version and writes a revision."""
    clock = FixedClock(date(2026, 3, 18))
    audit = SqlRevisionRegistry(session_factory=session_factory)
    first = sql_store.create(patch_set, schedule, now=clock.now())
    second = sql_store.create(patch_set, schedule, now=clock.now())

    result = commit_proposal(first.id, 1, repository=sql_repository, store=sql_store, now=clock.now(), audit=audit)
    conflict = commit_proposal(second.id, 1, repository=sql_repository, store=sql_store, now=clock.now(), audit=audit)

    assert isinstance(result, CommitResult)
    assert isinstance(conflict, ConflictError)
    assert conflict.current_version == 2

    stored = sql_repository.get("plan-1")
    assert stored.version == 2
    assert stored.get_day(date(2026, 3, 21)).label == "Rest"
    assert stored.get_day(date(2026, 3, 21)).tag == "calibration"

    (revision,) = audit.list_revisions("plan-1")
    assert revision.revision_id == result.revision_id
    assert revision.created_at.tzinfo is not None
    assert {d.field for d in revision.deltas} == {"label", "category"}
