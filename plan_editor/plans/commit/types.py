"""Commit result types."""

import datetime as dt
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from plan_editor.plans.modify.types import PatchAction
from plan_editor.plans.outcomes import ConflictError, ExpiredError, NotFoundError


class DayChange(BaseModel):
    """Before/after view of one patched day."""

    model_config = ConfigDict(frozen=True)

    date: dt.date
    action: PatchAction
    before_label: str
    after_label: str


class CommitResult(BaseModel):
    """A successfully committed proposal.

    Attributes:
        plan_id: Plan that was edited
        proposal_id: Proposal that was applied
        previous_version: Schedule version the commit was applied on
        new_version: Schedule version after the commit
        changes: One entry per patched date, sorted by date
        revision_id: Audit revision id, None when no audit was recorded
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["committed"] = "committed"
    plan_id: str
    proposal_id: str
    previous_version: int
    new_version: int
    changes: list[DayChange] = Field(default_factory=list)
    revision_id: str | None = None


CommitOutcome = CommitResult | ConflictError | ExpiredError | NotFoundError
