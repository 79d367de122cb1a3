"""Tests for patch set validation.

Covers:
- all-or-nothing rejection with every violation reported
- each violation code
- CANCEL normalization and REPLACE field passthrough
- past-date warnings
"""

from datetime import date

import pytest

from plan_editor.plans.modify.types import (
    PatchAction,
    ProposedPatch,
    RejectionReport,
    ValidPatchSet,
    ViolationCode,
)
from plan_editor.plans.modify.validators import resolve_patch_date, validate_patches
from plan_editor.plans.types import CanonicalSchedule, Category


def test_cancel_is_normalized_to_rest(schedule: CanonicalSchedule) -> None:
    """CANCEL always becomes label Rest, category REST, no annotations."""
    result = validate_patches([{"date": "2026-03-18", "action": "cancel", "label": "ignored"}], schedule)

    assert isinstance(result, ValidPatchSet)
    (patch,) = result.patches
    assert patch.action == PatchAction.CANCEL
    assert patch.label == "Rest"
    assert patch.category == Category.REST
    assert patch.annotations == []
    assert patch.tag is None


def test_replace_keeps_untouched_fields_unset(schedule: CanonicalSchedule) -> None:
    """REPLACE only carries the fields the proposer supplied."""
    result = validate_patches([ProposedPatch(date=date(2026, 3, 19), action="REPLACE", label="Easy 4 mi")], schedule)

    assert isinstance(result, ValidPatchSet)
    (patch,) = result.patches
    assert patch.label == "Easy 4 mi"
    assert patch.annotations is None
    assert patch.category is None
    assert patch.tag is None


def test_patches_sorted_by_date(schedule: CanonicalSchedule) -> None:
    """Valid sets come back in date order whatever the input order."""
    result = validate_patches(
        [
            {"date": "2026-03-22", "action": "CANCEL"},
            {"week": 1, "weekday": "Thu", "action": "REPLACE", "label": "Easy 2 mi"},
            {"date": "2026-03-20", "action": "CANCEL"},
        ],
        schedule,
    )

    assert isinstance(result, ValidPatchSet)
    assert result.dates == [date(2026, 3, 19), date(2026, 3, 20), date(2026, 3, 22)]


def test_week_weekday_pair_resolves_against_anchor(schedule: CanonicalSchedule) -> None:
    """(1, Tue) with a Wednesday anchor is the seventh day of the plan."""
    result = validate_patches([{"week": 1, "weekday": "Tue", "action": "CANCEL"}], schedule)

    assert isinstance(result, ValidPatchSet)
    assert result.dates == [date(2026, 3, 24)]


def test_date_not_in_schedule_rejects_whole_set(schedule: CanonicalSchedule) -> None:
    """One unknown date rejects the set; nothing is returned for the valid patch."""
    result = validate_patches(
        [
            {"date": "2026-03-18", "action": "CANCEL"},
            {"date": "2026-04-30", "action": "CANCEL"},
        ],
        schedule,
    )

    assert isinstance(result, RejectionReport)
    assert result.codes == {ViolationCode.DATE_NOT_IN_SCHEDULE}
    assert result.violations[0].patch_index == 1
    assert result.violations[0].date == date(2026, 4, 30)


def test_completed_day_is_immutable(schedule_with_completed: CanonicalSchedule) -> None:
    """Completed days can never be targeted."""
    result = validate_patches([{"date": "2026-03-18", "action": "CANCEL"}], schedule_with_completed)

    assert isinstance(result, RejectionReport)
    assert result.codes == {ViolationCode.IMMUTABLE_TARGET}


def test_safety_cap(schedule: CanonicalSchedule) -> None:
    """More patches than the cap is rejected as a set-level violation."""
    patches = [{"date": f"2026-03-{day}", "action": "CANCEL"} for day in (18, 19, 20)]

    result = validate_patches(patches, schedule, max_patches=2)

    assert isinstance(result, RejectionReport)
    assert ViolationCode.SAFETY_CAP_EXCEEDED in result.codes
    cap = next(v for v in result.violations if v.code == ViolationCode.SAFETY_CAP_EXCEEDED)
    assert cap.patch_index is None


def test_duplicate_dates(schedule: CanonicalSchedule) -> None:
    """Two patches on the same day are rejected, even via different addressing."""
    result = validate_patches(
        [
            {"date": "2026-03-24", "action": "CANCEL"},
            {"week": 1, "weekday": "Tuesday", "action": "REPLACE", "label": "Easy"},
        ],
        schedule,
    )

    assert isinstance(result, RejectionReport)
    assert result.codes == {ViolationCode.DUPLICATE_DATE}


@pytest.mark.parametrize(
    "patch",
    [
        {"date": "2026-03-18"},
        {"date": "2026-03-18", "action": "MOVE"},
        {"date": "2026-03-18", "action": "REPLACE"},
        {"date": "2026-03-18", "action": "REPLACE", "label": "   "},
        {"date": "18/03/2026", "action": "CANCEL"},
        {"action": "CANCEL"},
        {"week": 1, "action": "CANCEL"},
        {"date": "2026-03-18", "action": "REPLACE", "label": "Bike", "category": "CROSS"},
        {"date": "2026-03-18", "action": "CANCEL", "week": "first"},
    ],
)
def test_structural_violations(schedule: CanonicalSchedule, patch: dict) -> None:
    """Malformed patches are reported, not raised."""
    result = validate_patches([patch], schedule)

    assert isinstance(result, RejectionReport)
    assert ViolationCode.STRUCTURAL in result.codes


@pytest.mark.parametrize("raw", ["20260318", "2026-W12-3", "2026-03-18T00:00"])
def test_only_year_month_day_dates_are_accepted(schedule: CanonicalSchedule, raw: str) -> None:
    """Compact and ISO week-date forms are malformed, even where the calendar could read them."""
    result = validate_patches([{"date": raw, "action": "CANCEL"}], schedule)

    assert isinstance(result, RejectionReport)
    assert result.codes == {ViolationCode.STRUCTURAL}


def test_empty_set_is_rejected(schedule: CanonicalSchedule) -> None:
    """An empty patch set is structurally invalid."""
    result = validate_patches([], schedule)

    assert isinstance(result, RejectionReport)
    assert result.codes == {ViolationCode.STRUCTURAL}


def test_unresolvable_week_weekday(schedule: CanonicalSchedule) -> None:
    """A pair that names no date is its own violation."""
    result = validate_patches([{"week": 1, "weekday": "Blursday", "action": "CANCEL"}], schedule)

    assert isinstance(result, RejectionReport)
    assert result.codes == {ViolationCode.INCOMPLETE_WEEKDAY_RESOLUTION}


def test_date_disagreeing_with_week_weekday(schedule: CanonicalSchedule) -> None:
    """A proposer-asserted date must match the (week, weekday) computation."""
    result = validate_patches(
        [{"date": "2026-03-19", "week": 1, "weekday": "Tue", "action": "CANCEL"}],
        schedule,
    )

    assert isinstance(result, RejectionReport)
    assert result.codes == {ViolationCode.INCOMPLETE_WEEKDAY_RESOLUTION}
    assert "2026-03-24" in result.violations[0].message


def test_huge_week_number_is_rejected_not_raised(schedule: CanonicalSchedule) -> None:
    """A week far past the calendar limit is a resolution failure."""
    result = validate_patches([{"week": 10**9, "weekday": "Tue", "action": "CANCEL"}], schedule)

    assert isinstance(result, RejectionReport)
    assert result.codes == {ViolationCode.INCOMPLETE_WEEKDAY_RESOLUTION}


def test_week_starting_after_plan_end(schedule: CanonicalSchedule) -> None:
    """A week that begins after the last scheduled day does not resolve."""
    result = validate_patches([{"week": 5, "weekday": "Tue", "action": "CANCEL"}], schedule)

    assert isinstance(result, RejectionReport)
    assert result.codes == {ViolationCode.INCOMPLETE_WEEKDAY_RESOLUTION}
    assert "2026-03-24" in result.violations[0].message


def test_all_violations_reported_together(schedule_with_completed: CanonicalSchedule) -> None:
    """Every problem is listed, ordered by check."""
    result = validate_patches(
        [
            {"date": "2026-03-18", "action": "CANCEL"},
            {"date": "2026-05-01", "action": "CANCEL"},
            {"date": "2026-03-20", "action": "EXPLODE"},
        ],
        schedule_with_completed,
    )

    assert isinstance(result, RejectionReport)
    assert [v.code for v in result.violations] == [
        ViolationCode.STRUCTURAL,
        ViolationCode.DATE_NOT_IN_SCHEDULE,
        ViolationCode.IMMUTABLE_TARGET,
    ]
    assert "EXPLODE" in result.summary()
    assert "2026-05-01" in result.summary()


def test_validation_never_mutates_schedule(schedule: CanonicalSchedule) -> None:
    """The schedule is a read-only input."""
    before = schedule.model_dump()

    validate_patches([{"date": "2026-03-18", "action": "CANCEL"}], schedule)
    validate_patches([{"date": "2026-04-01", "action": "CANCEL"}], schedule)

    assert schedule.model_dump() == before


def test_past_dates_warn_without_rejecting(schedule: CanonicalSchedule) -> None:
    """Past targets pass validation but produce a warning."""
    result = validate_patches(
        [
            {"date": "2026-03-18", "action": "CANCEL"},
            {"date": "2026-03-21", "action": "CANCEL"},
        ],
        schedule,
        today=date(2026, 3, 20),
    )

    assert isinstance(result, ValidPatchSet)
    assert result.warnings == ["1 change(s) target past dates: 2026-03-18"]


def test_resolve_patch_date_partial_pair(anchor: date) -> None:
    """A weekday without a week is structural, not a resolution failure."""
    target, violations = resolve_patch_date(0, ProposedPatch(weekday="Tue", action="CANCEL"), anchor)

    assert target is None
    assert [v.code for v in violations] == [ViolationCode.STRUCTURAL]
