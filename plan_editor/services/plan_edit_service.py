"""Plan edit service.

Wires the date resolution engine, patch validator, proposal store, schedule
repository and audit registry behind one object, so callers (the HTTP API,
a chat orchestrator) never pass ``today`` or storage around themselves.
"""

from collections.abc import Mapping, Sequence
from datetime import date, timedelta

from loguru import logger

from plan_editor.config.settings import settings
from plan_editor.dates.clock import ReferenceClock, SystemClock
from plan_editor.dates.extraction import extract_phrases
from plan_editor.dates.phrases import Unrecognized, classify_range_phrase
from plan_editor.dates.resolver import resolve, resolve_range
from plan_editor.dates.types import DateRange, ResolutionResult, ResolverPolicy, UnrecognizedPhrase
from plan_editor.plans.commit.engine import commit_proposal
from plan_editor.plans.commit.types import CommitOutcome
from plan_editor.plans.constants import DEFAULT_MAX_PATCHES
from plan_editor.plans.errors import ScheduleNotFoundError
from plan_editor.plans.modify.types import ProposedPatch, RejectionReport
from plan_editor.plans.modify.validators import validate_patches
from plan_editor.plans.outcomes import ExpiredError, NotFoundError
from plan_editor.plans.proposals.repository import SqlProposalStore
from plan_editor.plans.proposals.store import DEFAULT_PROPOSAL_TTL, ProposalStore
from plan_editor.plans.proposals.types import PatchProposal
from plan_editor.plans.repository import ScheduleRepository, SqlScheduleRepository
from plan_editor.plans.revision.registry import PlanRevisionRegistry, SqlRevisionRegistry
from plan_editor.plans.revision.types import PlanRevision
from plan_editor.plans.types import CanonicalSchedule


class PlanEditService:
    """Entry point for resolving, previewing and committing plan edits."""

    def __init__(
        self,
        *,
        repository: ScheduleRepository,
        store: ProposalStore,
        clock: ReferenceClock,
        audit: PlanRevisionRegistry | None = None,
        max_patches: int = DEFAULT_MAX_PATCHES,
        ttl: timedelta = DEFAULT_PROPOSAL_TTL,
        policy: ResolverPolicy | None = None,
    ) -> None:
        self.repository = repository
        self.store = store
        self.clock = clock
        self.audit = audit
        self.max_patches = max_patches
        self.ttl = ttl
        self.policy = policy or ResolverPolicy()

    def _anchor_for(self, plan_id: str | None) -> date | None:
        if plan_id is None:
            return None
        return self.get_schedule(plan_id).anchor_date

    def get_schedule(self, plan_id: str) -> CanonicalSchedule:
        """Load a schedule.

        Raises:
            ScheduleNotFoundError: If the plan does not exist
        """
        schedule = self.repository.get(plan_id)
        if schedule is None:
            raise ScheduleNotFoundError(plan_id)
        return schedule

    def resolve_phrase(
        self,
        phrase: str,
        *,
        plan_id: str | None = None,
        today: date | None = None,
    ) -> ResolutionResult:
        """Resolve one phrase against the clock's today (or an explicit ``today``)."""
        reference = today or self.clock.today()
        result = resolve(phrase, reference, self._anchor_for(plan_id), policy=self.policy)
        logger.debug("Phrase resolved", phrase=phrase, today=reference.isoformat(), kind=result.kind)
        return result

    def resolve_message(
        self,
        message: str,
        *,
        plan_id: str | None = None,
        today: date | None = None,
    ) -> list[ResolutionResult | DateRange]:
        """Resolve every date phrase found in a free-text message, in order of appearance.

        Multi-day phrases ("this weekend", "next week") resolve to a DateRange;
        everything else goes through the single-day resolver.
        """
        reference = today or self.clock.today()
        anchor = self._anchor_for(plan_id)
        results: list[ResolutionResult | DateRange] = []
        for found in extract_phrases(message):
            if isinstance(classify_range_phrase(found.phrase), Unrecognized):
                results.append(resolve(found.phrase, reference, anchor, policy=self.policy))
            else:
                results.append(resolve_range(found.phrase, reference, anchor))
        return results

    def resolve_range(
        self,
        phrase: str,
        *,
        plan_id: str | None = None,
        today: date | None = None,
    ) -> DateRange | UnrecognizedPhrase:
        reference = today or self.clock.today()
        return resolve_range(phrase, reference, self._anchor_for(plan_id))

    def propose(
        self,
        plan_id: str,
        patches: Sequence[ProposedPatch | Mapping],
    ) -> PatchProposal | RejectionReport:
        """Validate patches against the current schedule and store a preview.

        Raises:
            ScheduleNotFoundError: If the plan does not exist
        """
        schedule = self.get_schedule(plan_id)
        result = validate_patches(patches, schedule, max_patches=self.max_patches, today=self.clock.today())
        if isinstance(result, RejectionReport):
            return result

        now = self.clock.now()
        purged = self.store.purge_expired(now)
        if purged:
            logger.info("Expired proposals purged", count=purged)
        return self.store.create(result, schedule, now=now, ttl=self.ttl)

    def get_proposal(self, proposal_id: str) -> PatchProposal | NotFoundError | ExpiredError:
        return self.store.get(proposal_id, now=self.clock.now())

    def discard_proposal(self, proposal_id: str) -> bool:
        """Drop a proposal the user rejected. Returns False if it did not exist."""
        discarded = self.store.discard(proposal_id)
        if discarded:
            logger.info("Proposal discarded", proposal_id=proposal_id)
        return discarded

    def commit(self, proposal_id: str, submitted_version: int) -> CommitOutcome:
        return commit_proposal(
            proposal_id,
            submitted_version,
            repository=self.repository,
            store=self.store,
            now=self.clock.now(),
            audit=self.audit,
        )

    def list_revisions(self, plan_id: str) -> list[PlanRevision]:
        if self.audit is None:
            return []
        return self.audit.list_revisions(plan_id)


def build_default_service() -> PlanEditService:
    """Service backed by the configured database and the configured timezone."""
    return PlanEditService(
        repository=SqlScheduleRepository(),
        store=SqlProposalStore(),
        audit=SqlRevisionRegistry(),
        clock=SystemClock(settings.plan_timezone),
        max_patches=settings.max_patches_per_proposal,
        ttl=timedelta(minutes=settings.proposal_ttl_minutes),
        policy=ResolverPolicy(
            past_window_days=settings.ambiguity_past_window_days,
            future_window_days=settings.ambiguity_future_window_days,
        ),
    )
