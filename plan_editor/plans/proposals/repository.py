"""SQL-backed proposal store.

Handles persisting and consuming proposals in ``plan_edit_proposals``.
Consume is a DELETE by primary key; a rowcount of zero means another
caller already consumed the proposal.
"""

from datetime import datetime, timedelta

from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from plan_editor.db.models import PlanEditProposal
from plan_editor.db.session import SessionFactory, get_session
from plan_editor.plans.errors import StorageError
from plan_editor.plans.modify.types import ValidPatchSet
from plan_editor.plans.outcomes import ExpiredError, NotFoundError
from plan_editor.plans.proposals.store import DEFAULT_PROPOSAL_TTL, ProposalLookup, build_proposal
from plan_editor.plans.proposals.types import PatchProposal
from plan_editor.plans.types import CanonicalSchedule


class SqlProposalStore:
    """Proposal store persisted through SQLAlchemy."""

    def __init__(self, session_factory: SessionFactory = get_session) -> None:
        self._session_factory = session_factory

    def create(
        self,
        patch_set: ValidPatchSet,
        schedule: CanonicalSchedule,
        *,
        now: datetime,
        ttl: timedelta = DEFAULT_PROPOSAL_TTL,
    ) -> PatchProposal:
        proposal = build_proposal(patch_set, schedule, now=now, ttl=ttl)
        try:
            with self._session_factory() as db:
                db.add(
                    PlanEditProposal(
                        id=proposal.id,
                        plan_id=proposal.plan_id,
                        plan_version=proposal.schedule_version_at_creation,
                        payload=proposal.model_dump(mode="json"),
                        created_at=proposal.created_at,
                        expires_at=proposal.expires_at,
                    )
                )
                db.commit()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to store proposal {proposal.id}: {e}") from e

        logger.info(
            "Proposal created",
            proposal_id=proposal.id,
            plan_id=proposal.plan_id,
            version=proposal.schedule_version_at_creation,
            patch_count=len(proposal.patches),
        )
        return proposal

    def get(self, proposal_id: str, *, now: datetime) -> ProposalLookup:
        try:
            with self._session_factory() as db:
                row = db.execute(
                    select(PlanEditProposal).where(PlanEditProposal.id == proposal_id)
                ).scalar_one_or_none()
                payload = row.payload if row is not None else None
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to load proposal {proposal_id}: {e}") from e

        if payload is None:
            return NotFoundError(proposal_id=proposal_id)
        proposal = PatchProposal.model_validate(payload)
        if proposal.is_expired(now):
            return ExpiredError(proposal_id=proposal_id, expired_at=proposal.expires_at)
        return proposal

    def consume(self, proposal_id: str, *, now: datetime) -> ProposalLookup:
        try:
            with self._session_factory() as db:
                row = db.execute(
                    select(PlanEditProposal).where(PlanEditProposal.id == proposal_id)
                ).scalar_one_or_none()
                if row is None:
                    return NotFoundError(proposal_id=proposal_id)
                payload = row.payload

                result = db.execute(delete(PlanEditProposal).where(PlanEditProposal.id == proposal_id))
                db.commit()
                if result.rowcount != 1:
                    logger.info("Proposal consumed concurrently", proposal_id=proposal_id)
                    return NotFoundError(proposal_id=proposal_id)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to consume proposal {proposal_id}: {e}") from e

        proposal = PatchProposal.model_validate(payload)
        if proposal.is_expired(now):
            logger.info("Expired proposal discarded on consume", proposal_id=proposal_id)
            return ExpiredError(proposal_id=proposal_id, expired_at=proposal.expires_at)
        return proposal

    def discard(self, proposal_id: str) -> bool:
        try:
            with self._session_factory() as db:
                result = db.execute(delete(PlanEditProposal).where(PlanEditProposal.id == proposal_id))
                db.commit()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to discard proposal {proposal_id}: {e}") from e
        return result.rowcount == 1

    def purge_expired(self, now: datetime) -> int:
        """Delete proposals whose preview window has passed. Returns the number removed."""
        try:
            with self._session_factory() as db:
                result = db.execute(delete(PlanEditProposal).where(PlanEditProposal.expires_at < now))
                db.commit()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to purge expired proposals: {e}") from e

        if result.rowcount:
            logger.debug("Expired proposals deleted", count=result.rowcount)
        return result.rowcount
