"""Patch types for plan edits.

A content proposer (usually a language model) supplies ProposedPatches.
They are accepted loosely so that every structural problem can be
reported at once; the validator turns a clean set into ResolvedPatches.
"""

import datetime as dt
from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from plan_editor.plans.types import Category

REST_LABEL = "Rest"


class PatchAction(StrEnum):
    CANCEL = "CANCEL"
    REPLACE = "REPLACE"


class ProposedPatch(BaseModel):
    """A single proposed change, as received from the content proposer.

    A patch addresses its day either by ``date`` or by a rolling
    ``(week, weekday)`` pair. When both are present they must agree.

    Attributes:
        date: Target date (ISO string or date)
        week: 1-based rolling week number relative to the plan anchor
        weekday: Weekday name within that week ("Tue", "Tuesday")
        action: CANCEL or REPLACE
        label: New label (required for REPLACE)
        annotations: New annotations (None = keep existing)
        category: New category (None = keep existing)
        tag: New tag (None = keep existing)
    """

    model_config = ConfigDict(extra="ignore")

    date: dt.date | str | None = None
    week: int | None = None
    weekday: str | None = None
    action: str | None = None
    label: str | None = None
    annotations: list[str] | None = None
    category: str | None = None
    tag: str | None = None


class ResolvedPatch(BaseModel):
    """A validated, date-keyed change with CANCEL defaults applied.

    Fields left as None are not touched when the patch is applied.
    """

    model_config = ConfigDict(frozen=True)

    date: dt.date
    action: PatchAction
    label: str
    annotations: list[str] | None = None
    category: Category | None = None
    tag: str | None = None


class ValidPatchSet(BaseModel):
    """A fully validated patch set, sorted by date."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["valid"] = "valid"
    patches: list[ResolvedPatch]
    warnings: list[str] = Field(default_factory=list)

    @property
    def dates(self) -> list[dt.date]:
        return [p.date for p in self.patches]


class ViolationCode(StrEnum):
    STRUCTURAL = "STRUCTURAL"
    DUPLICATE_DATE = "DUPLICATE_DATE"
    SAFETY_CAP_EXCEEDED = "SAFETY_CAP_EXCEEDED"
    DATE_NOT_IN_SCHEDULE = "DATE_NOT_IN_SCHEDULE"
    IMMUTABLE_TARGET = "IMMUTABLE_TARGET"
    INCOMPLETE_WEEKDAY_RESOLUTION = "INCOMPLETE_WEEKDAY_RESOLUTION"


class PatchViolation(BaseModel):
    """One reason a patch set was rejected.

    Attributes:
        code: Violation category
        message: Human-readable explanation
        patch_index: Index of the offending patch (None for set-level violations)
        date: Target date, when one could be determined
    """

    model_config = ConfigDict(frozen=True)

    code: ViolationCode
    message: str
    patch_index: int | None = None
    date: dt.date | None = None


class RejectionReport(BaseModel):
    """Every violation found in a rejected patch set. Nothing is applied."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["rejected"] = "rejected"
    violations: list[PatchViolation]

    @property
    def codes(self) -> set[ViolationCode]:
        return {v.code for v in self.violations}

    def summary(self) -> str:
        return "; ".join(v.message for v in self.violations)


ValidationResult = ValidPatchSet | RejectionReport
