"""Validators for plan edit patch sets.

Enforces invariants to prevent silent corruption:
- Structure: a well-formed date or (week, weekday), a known action, REPLACE has a label
- Safety cap: one edit changes at most ``max_patches`` days
- Existence: every target date is in the schedule
- Immutability: completed days are never touched
- Weekday completeness: (week, weekday) pairs resolve to exactly one date

Every violation is collected before deciding. The result is all-or-nothing:
one bad patch rejects the whole set.
"""

import datetime as dt
from collections.abc import Mapping, Sequence

from loguru import logger
from pydantic import ValidationError

from plan_editor.dates.constants import ISO_DATE_RE
from plan_editor.dates.weeks import resolve_week_weekday, week_start
from plan_editor.plans.constants import DEFAULT_MAX_PATCHES
from plan_editor.plans.modify.types import (
    REST_LABEL,
    PatchAction,
    PatchViolation,
    ProposedPatch,
    RejectionReport,
    ResolvedPatch,
    ValidationResult,
    ValidPatchSet,
    ViolationCode,
)
from plan_editor.plans.types import CanonicalSchedule, Category

_CHECK_ORDER = {
    ViolationCode.STRUCTURAL: 1,
    ViolationCode.DUPLICATE_DATE: 1,
    ViolationCode.SAFETY_CAP_EXCEEDED: 2,
    ViolationCode.DATE_NOT_IN_SCHEDULE: 3,
    ViolationCode.IMMUTABLE_TARGET: 4,
    ViolationCode.INCOMPLETE_WEEKDAY_RESOLUTION: 5,
}


def _parse_date(raw: dt.date | str) -> dt.date | None:
    if isinstance(raw, dt.date):
        return raw
    text = raw.strip()
    if not ISO_DATE_RE.match(text):
        return None
    try:
        return dt.date.fromisoformat(text)
    except ValueError:
        return None


def _parse_action(raw: str | None) -> PatchAction | None:
    if raw is None:
        return None
    try:
        return PatchAction(raw.strip().upper())
    except ValueError:
        return None


def _parse_category(raw: str | None) -> Category | None:
    if raw is None:
        return None
    try:
        return Category(raw.strip().upper())
    except ValueError:
        return None


def _coerce_patch(index: int, raw: ProposedPatch | Mapping) -> ProposedPatch | PatchViolation:
    if isinstance(raw, ProposedPatch):
        return raw
    try:
        return ProposedPatch.model_validate(raw)
    except ValidationError as e:
        return PatchViolation(
            code=ViolationCode.STRUCTURAL,
            message=f"Patch {index} is malformed: {e.error_count()} invalid field(s)",
            patch_index=index,
        )


def validate_patch_structure(index: int, patch: ProposedPatch) -> list[PatchViolation]:
    """Check action, label and category; addressing is checked by ``resolve_patch_date``."""
    violations: list[PatchViolation] = []

    action = _parse_action(patch.action)
    if action is None:
        violations.append(
            PatchViolation(
                code=ViolationCode.STRUCTURAL,
                message=f"Patch {index} has invalid action {patch.action!r}; expected CANCEL or REPLACE",
                patch_index=index,
            )
        )
    elif action == PatchAction.REPLACE and not (patch.label and patch.label.strip()):
        violations.append(
            PatchViolation(
                code=ViolationCode.STRUCTURAL,
                message=f"Patch {index} is a REPLACE without a label",
                patch_index=index,
            )
        )

    if patch.category is not None and _parse_category(patch.category) is None:
        violations.append(
            PatchViolation(
                code=ViolationCode.STRUCTURAL,
                message=f"Patch {index} has unknown category {patch.category!r}",
                patch_index=index,
            )
        )

    return violations


def resolve_patch_date(
    index: int,
    patch: ProposedPatch,
    anchor: dt.date,
    last_date: dt.date | None = None,
) -> tuple[dt.date | None, list[PatchViolation]]:
    """Work out which date a patch targets.

    A (week, weekday) pair is resolved here against the anchor; a date the
    proposer asserted alongside it must match that computation. When
    ``last_date`` is given, a week starting after it does not resolve.

    Returns:
        (target date or None, violations)
    """
    raw_date: dt.date | None = None
    if patch.date is not None:
        raw_date = _parse_date(patch.date)
        if raw_date is None:
            return None, [
                PatchViolation(
                    code=ViolationCode.STRUCTURAL,
                    message=f"Patch {index} has malformed date {patch.date!r}",
                    patch_index=index,
                )
            ]

    has_week = patch.week is not None
    has_weekday = bool(patch.weekday and patch.weekday.strip())
    if has_week != has_weekday:
        return raw_date, [
            PatchViolation(
                code=ViolationCode.STRUCTURAL,
                message=f"Patch {index} has an incomplete (week, weekday) pair",
                patch_index=index,
                date=raw_date,
            )
        ]

    if not has_week:
        if raw_date is None:
            return None, [
                PatchViolation(
                    code=ViolationCode.STRUCTURAL,
                    message=f"Patch {index} has neither a date nor a (week, weekday) pair",
                    patch_index=index,
                )
            ]
        return raw_date, []

    resolved = resolve_week_weekday(patch.week, patch.weekday, anchor)
    if resolved is not None and last_date is not None and week_start(patch.week, anchor) > last_date:
        return None, [
            PatchViolation(
                code=ViolationCode.INCOMPLETE_WEEKDAY_RESOLUTION,
                message=f"Patch {index}: week {patch.week} starts after the plan ends on {last_date.isoformat()}",
                patch_index=index,
                date=raw_date,
            )
        ]
    if resolved is None:
        return None, [
            PatchViolation(
                code=ViolationCode.INCOMPLETE_WEEKDAY_RESOLUTION,
                message=f"Patch {index}: week {patch.week} / {patch.weekday!r} does not resolve to a date",
                patch_index=index,
                date=raw_date,
            )
        ]

    if raw_date is not None and raw_date != resolved:
        return None, [
            PatchViolation(
                code=ViolationCode.INCOMPLETE_WEEKDAY_RESOLUTION,
                message=(
                    f"Patch {index}: date {raw_date.isoformat()} does not match week {patch.week} "
                    f"{patch.weekday}, which is {resolved.isoformat()}"
                ),
                patch_index=index,
                date=raw_date,
            )
        ]

    return resolved, []


def validate_targets(
    index: int,
    target: dt.date,
    schedule: CanonicalSchedule,
) -> list[PatchViolation]:
    """Check the target date exists in the schedule and is not completed."""
    day = schedule.get_day(target)
    if day is None:
        return [
            PatchViolation(
                code=ViolationCode.DATE_NOT_IN_SCHEDULE,
                message=f"Date {target.isoformat()} does not exist in the plan",
                patch_index=index,
                date=target,
            )
        ]
    if day.completed:
        return [
            PatchViolation(
                code=ViolationCode.IMMUTABLE_TARGET,
                message=f"Cannot modify completed day {target.isoformat()} ({day.label})",
                patch_index=index,
                date=target,
            )
        ]
    return []


def build_resolved_patch(patch: ProposedPatch, target: dt.date) -> ResolvedPatch:
    """Normalize a structurally valid patch; CANCEL always means a plain rest day."""
    action = _parse_action(patch.action)
    if action == PatchAction.CANCEL:
        return ResolvedPatch(
            date=target,
            action=PatchAction.CANCEL,
            label=REST_LABEL,
            annotations=[],
            category=Category.REST,
        )
    return ResolvedPatch(
        date=target,
        action=PatchAction.REPLACE,
        label=(patch.label or "").strip(),
        annotations=list(patch.annotations) if patch.annotations is not None else None,
        category=_parse_category(patch.category),
        tag=patch.tag,
    )


def validate_patches(
    patches: Sequence[ProposedPatch | Mapping],
    schedule: CanonicalSchedule,
    *,
    max_patches: int = DEFAULT_MAX_PATCHES,
    today: dt.date | None = None,
) -> ValidationResult:
    """Validate a proposed patch set against the canonical schedule.

    This is the main validation entry point. It enforces all invariants and
    never mutates the schedule.

    Args:
        patches: Proposed patches (models or plain dicts)
        schedule: Current canonical schedule
        max_patches: Safety cap on the number of changed days
        today: Optional reference date; past targets produce warnings

    Returns:
        ValidPatchSet on success, RejectionReport listing every violation otherwise
    """
    violations: list[PatchViolation] = []
    resolved: list[ResolvedPatch] = []
    seen_dates: dict[dt.date, int] = {}
    last_date = max(schedule.date_set(), default=None)

    if not patches:
        violations.append(PatchViolation(code=ViolationCode.STRUCTURAL, message="Patch set is empty"))

    if len(patches) > max_patches:
        violations.append(
            PatchViolation(
                code=ViolationCode.SAFETY_CAP_EXCEEDED,
                message=f"Patch set changes {len(patches)} days; at most {max_patches} are allowed in one edit",
            )
        )

    for index, raw in enumerate(patches):
        patch = _coerce_patch(index, raw)
        if isinstance(patch, PatchViolation):
            violations.append(patch)
            continue

        patch_violations = validate_patch_structure(index, patch)
        target, date_violations = resolve_patch_date(index, patch, schedule.anchor_date, last_date)
        patch_violations.extend(date_violations)

        if target is not None and not date_violations:
            if target in seen_dates:
                patch_violations.append(
                    PatchViolation(
                        code=ViolationCode.DUPLICATE_DATE,
                        message=f"Patches {seen_dates[target]} and {index} both target {target.isoformat()}",
                        patch_index=index,
                        date=target,
                    )
                )
            else:
                seen_dates[target] = index
            patch_violations.extend(validate_targets(index, target, schedule))

        violations.extend(patch_violations)
        if not patch_violations and target is not None:
            resolved.append(build_resolved_patch(patch, target))

    if violations:
        violations.sort(key=lambda v: (_CHECK_ORDER[v.code], -1 if v.patch_index is None else v.patch_index))
        logger.warning(
            "Patch set rejected",
            plan_id=schedule.plan_id,
            patch_count=len(patches),
            violation_count=len(violations),
            codes=sorted({v.code.value for v in violations}),
        )
        return RejectionReport(violations=violations)

    resolved.sort(key=lambda p: p.date)
    warnings: list[str] = []
    if today is not None:
        past = [p.date.isoformat() for p in resolved if p.date < today]
        if past:
            warnings.append(f"{len(past)} change(s) target past dates: {', '.join(past)}")

    logger.info(
        "Patch set validated",
        plan_id=schedule.plan_id,
        patch_count=len(resolved),
        warning_count=len(warnings),
    )
    return ValidPatchSet(patches=resolved, warnings=warnings)
