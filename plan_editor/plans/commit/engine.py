"""Patch Application Engine.

Applies a consumed proposal to the canonical schedule as one
copy-on-write update guarded by a version compare-and-swap. The schedule is
either fully updated or left untouched; there is no merging and no retry.
"""

from datetime import datetime

from loguru import logger

from plan_editor.plans.commit.types import CommitOutcome, CommitResult, DayChange
from plan_editor.plans.errors import ScheduleNotFoundError
from plan_editor.plans.modify.types import ResolvedPatch
from plan_editor.plans.outcomes import ConflictError, ExpiredError, NotFoundError
from plan_editor.plans.proposals.store import ProposalStore
from plan_editor.plans.repository import ScheduleRepository
from plan_editor.plans.revision.builder import PlanRevisionBuilder
from plan_editor.plans.revision.registry import PlanRevisionRegistry
from plan_editor.plans.types import CanonicalSchedule, DayRecord


def apply_patch(day: DayRecord, patch: ResolvedPatch) -> DayRecord:
    """Return ``day`` with the patch's non-None fields replaced."""
    update: dict = {"label": patch.label}
    if patch.annotations is not None:
        update["annotations"] = list(patch.annotations)
    if patch.category is not None:
        update["category"] = patch.category
    if patch.tag is not None:
        update["tag"] = patch.tag
    return day.model_copy(update=update)


def apply_patches(
    schedule: CanonicalSchedule,
    patches: list[ResolvedPatch],
) -> tuple[CanonicalSchedule, list[DayChange]]:
    """Build the next schedule value from ``schedule`` and validated patches.

    Days are replaced by date key. Every other day is carried over as-is,
    and the version is incremented once.

    Raises:
        ValueError: If a patch targets a date missing from the schedule or a
            completed day. The validator rejects both, so this signals misuse.
    """
    by_date = {patch.date: patch for patch in patches}
    new_days: list[DayRecord] = []
    changes: list[DayChange] = []

    for day in schedule.days:
        patch = by_date.pop(day.date, None)
        if patch is None:
            new_days.append(day)
            continue
        if day.completed:
            raise ValueError(f"Cannot patch completed day {day.date.isoformat()}")
        updated = apply_patch(day, patch)
        new_days.append(updated)
        changes.append(
            DayChange(date=day.date, action=patch.action, before_label=day.label, after_label=updated.label)
        )

    if by_date:
        missing = ", ".join(d.isoformat() for d in sorted(by_date))
        raise ValueError(f"Patches target dates not in schedule: {missing}")

    next_schedule = CanonicalSchedule(
        plan_id=schedule.plan_id,
        anchor_date=schedule.anchor_date,
        version=schedule.version + 1,
        days=new_days,
    )
    return next_schedule, changes


def _conflict(proposal_id: str, submitted_version: int, current_version: int) -> ConflictError:
    return ConflictError(
        proposal_id=proposal_id,
        submitted_version=submitted_version,
        current_version=current_version,
    )


def commit_proposal(
    proposal_id: str,
    submitted_version: int,
    *,
    repository: ScheduleRepository,
    store: ProposalStore,
    now: datetime,
    audit: PlanRevisionRegistry | None = None,
) -> CommitOutcome:
    """Commit a previewed proposal.

    The proposal is consumed first, so it can be committed at most once even
    when the commit then fails with a conflict or expiry.

    Args:
        proposal_id: Proposal to commit
        submitted_version: Schedule version the caller last saw
        repository: Schedule storage with an atomic compare-and-swap
        store: Proposal store
        now: Current instant, for expiry
        audit: Optional registry that records a PlanRevision per commit

    Returns:
        CommitResult, or ConflictError / ExpiredError / NotFoundError

    Raises:
        ScheduleNotFoundError: If the proposal's plan no longer exists
    """
    lookup = store.consume(proposal_id, now=now)
    if isinstance(lookup, (NotFoundError, ExpiredError)):
        logger.info("Commit refused", proposal_id=proposal_id, reason=lookup.kind)
        return lookup
    proposal = lookup

    schedule = repository.get(proposal.plan_id)
    if schedule is None:
        raise ScheduleNotFoundError(proposal.plan_id)

    if submitted_version != schedule.version or proposal.schedule_version_at_creation != schedule.version:
        logger.warning(
            "Commit version conflict",
            proposal_id=proposal_id,
            plan_id=schedule.plan_id,
            submitted_version=submitted_version,
            proposal_version=proposal.schedule_version_at_creation,
            current_version=schedule.version,
        )
        return _conflict(proposal_id, submitted_version, schedule.version)

    for patch in proposal.patches:
        day = schedule.get_day(patch.date)
        if day is None or day.completed:
            logger.warning(
                "Commit target changed since proposal",
                proposal_id=proposal_id,
                plan_id=schedule.plan_id,
                date=patch.date.isoformat(),
            )
            return _conflict(proposal_id, submitted_version, schedule.version)

    next_schedule, changes = apply_patches(schedule, proposal.patches)

    if not repository.compare_and_swap(next_schedule, expected_version=schedule.version):
        latest = repository.get(schedule.plan_id)
        current_version = latest.version if latest is not None else schedule.version
        return _conflict(proposal_id, submitted_version, current_version)

    revision_id = None
    if audit is not None:
        revision_id = _record_revision(audit, schedule, next_schedule, proposal_id, now)

    logger.info(
        "Plan edit committed",
        plan_id=schedule.plan_id,
        proposal_id=proposal_id,
        previous_version=schedule.version,
        new_version=next_schedule.version,
        changed_dates=[c.date.isoformat() for c in changes],
    )
    return CommitResult(
        plan_id=schedule.plan_id,
        proposal_id=proposal_id,
        previous_version=schedule.version,
        new_version=next_schedule.version,
        changes=changes,
        revision_id=revision_id,
    )


def _record_revision(
    audit: PlanRevisionRegistry,
    before: CanonicalSchedule,
    after: CanonicalSchedule,
    proposal_id: str,
    now: datetime,
) -> str | None:
    builder = PlanRevisionBuilder(
        plan_id=after.plan_id,
        proposal_id=proposal_id,
        version=after.version,
        created_at=now,
    )
    for old_day, new_day in zip(before.days, after.days, strict=True):
        if old_day != new_day:
            builder.add_day_change(old_day, new_day)
    revision = builder.finalize()

    # The schedule write already succeeded; a failed audit write must not undo it.
    try:
        audit.save(revision)
    except Exception:
        logger.exception("Failed to record plan revision", plan_id=after.plan_id, proposal_id=proposal_id)
        return None
    return revision.revision_id
