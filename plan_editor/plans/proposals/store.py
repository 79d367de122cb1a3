"""Proposal/Preview store.

Proposals are append-only and single-use: ``consume`` removes the proposal
so that no two commits can ever apply the same one.
"""

import uuid
from collections import Counter
from datetime import datetime, timedelta
from typing import Protocol

from loguru import logger

from plan_editor.plans.constants import DEFAULT_PROPOSAL_TTL_MINUTES
from plan_editor.plans.modify.types import ValidPatchSet
from plan_editor.plans.outcomes import ExpiredError, NotFoundError
from plan_editor.plans.proposals.types import PatchProposal, ProposalSummary
from plan_editor.plans.types import CanonicalSchedule

DEFAULT_PROPOSAL_TTL = timedelta(minutes=DEFAULT_PROPOSAL_TTL_MINUTES)

ProposalLookup = PatchProposal | NotFoundError | ExpiredError


def build_proposal(
    patch_set: ValidPatchSet,
    schedule: CanonicalSchedule,
    *,
    now: datetime,
    ttl: timedelta = DEFAULT_PROPOSAL_TTL,
) -> PatchProposal:
    """Freeze a validated patch set into a proposal against ``schedule.version``."""
    if not patch_set.patches:
        raise ValueError("Cannot create a proposal from an empty patch set")

    dates = patch_set.dates
    return PatchProposal(
        id=str(uuid.uuid4()),
        plan_id=schedule.plan_id,
        patches=list(patch_set.patches),
        schedule_version_at_creation=schedule.version,
        created_at=now,
        expires_at=now + ttl,
        warnings=list(patch_set.warnings),
        summary=ProposalSummary(
            total_days=len(patch_set.patches),
            by_action=dict(Counter(p.action.value for p in patch_set.patches)),
            start=min(dates),
            end=max(dates),
        ),
    )


class ProposalStore(Protocol):
    def create(
        self,
        patch_set: ValidPatchSet,
        schedule: CanonicalSchedule,
        *,
        now: datetime,
        ttl: timedelta = DEFAULT_PROPOSAL_TTL,
    ) -> PatchProposal: ...

    def get(self, proposal_id: str, *, now: datetime) -> ProposalLookup: ...

    def consume(self, proposal_id: str, *, now: datetime) -> ProposalLookup: ...

    def discard(self, proposal_id: str) -> bool: ...

    def purge_expired(self, now: datetime) -> int: ...


class InMemoryProposalStore:
    """Process-local proposal store.

    ``dict.pop`` is the delete-on-read primitive: exactly one caller gets the
    proposal back, every later caller gets NotFound.
    """

    def __init__(self) -> None:
        self._proposals: dict[str, PatchProposal] = {}

    def create(
        self,
        patch_set: ValidPatchSet,
        schedule: CanonicalSchedule,
        *,
        now: datetime,
        ttl: timedelta = DEFAULT_PROPOSAL_TTL,
    ) -> PatchProposal:
        proposal = build_proposal(patch_set, schedule, now=now, ttl=ttl)
        self._proposals[proposal.id] = proposal
        logger.info(
            "Proposal created",
            proposal_id=proposal.id,
            plan_id=proposal.plan_id,
            version=proposal.schedule_version_at_creation,
            patch_count=len(proposal.patches),
        )
        return proposal

    def get(self, proposal_id: str, *, now: datetime) -> ProposalLookup:
        proposal = self._proposals.get(proposal_id)
        if proposal is None:
            return NotFoundError(proposal_id=proposal_id)
        if proposal.is_expired(now):
            return ExpiredError(proposal_id=proposal_id, expired_at=proposal.expires_at)
        return proposal

    def consume(self, proposal_id: str, *, now: datetime) -> ProposalLookup:
        proposal = self._proposals.pop(proposal_id, None)
        if proposal is None:
            return NotFoundError(proposal_id=proposal_id)
        if proposal.is_expired(now):
            logger.info("Expired proposal discarded on consume", proposal_id=proposal_id)
            return ExpiredError(proposal_id=proposal_id, expired_at=proposal.expires_at)
        return proposal

    def discard(self, proposal_id: str) -> bool:
        return self._proposals.pop(proposal_id, None) is not None

    def purge_expired(self, now: datetime) -> int:
        """Drop every expired proposal. Returns the number removed."""
        expired = [pid for pid, p in self._proposals.items() if p.is_expired(now)]
        for pid in expired:
            self._proposals.pop(pid, None)
        return len(expired)
