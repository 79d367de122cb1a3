"""PatchProposal - an immutable, time-boxed, single-use preview of validated patches."""

import datetime as dt
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from plan_editor.plans.modify.types import ResolvedPatch


class ProposalSummary(BaseModel):
    """Counts and affected range, for the confirmation UI."""

    model_config = ConfigDict(frozen=True)

    total_days: int
    by_action: dict[str, int]
    start: dt.date
    end: dt.date


class PatchProposal(BaseModel):
    """Validated patches awaiting user confirmation.

    Attributes:
        id: Proposal ID
        plan_id: Plan the patches were validated against
        patches: Resolved patches, sorted by date
        schedule_version_at_creation: Schedule version the patches were validated against
        created_at: Creation timestamp (UTC)
        expires_at: After this instant the proposal can no longer be committed
        warnings: Non-blocking validation warnings
        summary: Counts by action and affected date range
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["proposal"] = "proposal"
    id: str
    plan_id: str
    patches: list[ResolvedPatch]
    schedule_version_at_creation: int
    created_at: dt.datetime
    expires_at: dt.datetime
    warnings: list[str] = Field(default_factory=list)
    summary: ProposalSummary

    def is_expired(self, now: dt.datetime) -> bool:
        return now > self.expires_at
