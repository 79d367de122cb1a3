"""PlanRevisionRegistry - append-only storage for PlanRevision records."""

from datetime import timezone
from typing import Protocol

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from plan_editor.db.models import PlanEditRevision
from plan_editor.db.session import SessionFactory, get_session
from plan_editor.plans.errors import StorageError
from plan_editor.plans.revision.serializers import deserialize_deltas, serialize_deltas
from plan_editor.plans.revision.types import PlanRevision


class PlanRevisionRegistry(Protocol):
    def save(self, revision: PlanRevision) -> None: ...

    def list_revisions(self, plan_id: str) -> list[PlanRevision]: ...


class InMemoryRevisionRegistry:
    """Process-local registry, ordered by insertion."""

    def __init__(self) -> None:
        self._revisions: list[PlanRevision] = []

    def save(self, revision: PlanRevision) -> None:
        self._revisions.append(revision)

    def list_revisions(self, plan_id: str) -> list[PlanRevision]:
        """Revisions for a plan, oldest version first."""
        return sorted((r for r in self._revisions if r.plan_id == plan_id), key=lambda r: r.version)


class SqlRevisionRegistry:
    """Registry persisted in ``plan_edit_revisions``."""

    def __init__(self, session_factory: SessionFactory = get_session) -> None:
        self._session_factory = session_factory

    def save(self, revision: PlanRevision) -> None:
        try:
            with self._session_factory() as db:
                db.add(
                    PlanEditRevision(
                        id=revision.revision_id,
                        plan_id=revision.plan_id,
                        proposal_id=revision.proposal_id,
                        version=revision.version,
                        deltas=serialize_deltas(revision),
                        created_at=revision.created_at,
                    )
                )
                db.commit()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to save revision {revision.revision_id}: {e}") from e
        logger.debug("Plan revision saved", revision_id=revision.revision_id, plan_id=revision.plan_id)

    def list_revisions(self, plan_id: str) -> list[PlanRevision]:
        try:
            with self._session_factory() as db:
                rows = (
                    db.execute(
                        select(PlanEditRevision)
                        .where(PlanEditRevision.plan_id == plan_id)
                        .order_by(PlanEditRevision.version)
                    )
                    .scalars()
                    .all()
                )
                return [
                    PlanRevision(
                        revision_id=row.id,
                        plan_id=row.plan_id,
                        proposal_id=row.proposal_id,
                        version=row.version,
                        # SQLite drops tzinfo
                        created_at=row.created_at
                        if row.created_at.tzinfo is not None
                        else row.created_at.replace(tzinfo=timezone.utc),
                        deltas=deserialize_deltas(row.deltas or []),
                    )
                    for row in rows
                ]
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to list revisions for plan {plan_id}: {e}") from e
