"""PlanRevision types - the audit trail of committed plan edits.

PlanRevision answers one question only:
"Which fields of which days changed, and in which commit?"

It is immutable and append-only. It never executes changes.
"""

from datetime import datetime

from pydantic import BaseModel, Field

DeltaValue = str | list[str] | None


class RevisionDelta(BaseModel):
    """A single field change on one day.

    Attributes:
        date: Date of the day record (ISO format)
        field: Name of the DayRecord field that changed
        old: Value before the commit
        new: Value after the commit
    """

    date: str
    field: str
    old: DeltaValue = None
    new: DeltaValue = None


class PlanRevision(BaseModel):
    """Immutable record of one committed plan edit.

    Attributes:
        revision_id: Unique identifier for this revision
        plan_id: Plan that was edited
        proposal_id: Proposal whose patches were applied
        version: Schedule version produced by the commit
        created_at: Commit timestamp
        deltas: Field changes, ordered by date then field
    """

    revision_id: str
    plan_id: str
    proposal_id: str
    version: int
    created_at: datetime
    deltas: list[RevisionDelta] = Field(default_factory=list)

    @property
    def affected_dates(self) -> list[str]:
        return sorted({d.date for d in self.deltas})
