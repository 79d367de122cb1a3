"""PlanRevisionBuilder - constructs immutable PlanRevision records.

Used by the commit engine to record what each commit changed.
"""

import uuid
from datetime import datetime

from plan_editor.plans.revision.types import DeltaValue, PlanRevision, RevisionDelta
from plan_editor.plans.types import DayRecord

AUDITED_FIELDS = ("label", "annotations", "category", "tag")


class PlanRevisionBuilder:
    """Builder for creating PlanRevision records.

    Usage:
        builder = PlanRevisionBuilder(plan_id="p1", proposal_id="x", version=2, created_at=now)
        builder.add_day_change(before, after)
        revision = builder.finalize()
    """

    def __init__(self, *, plan_id: str, proposal_id: str, version: int, created_at: datetime) -> None:
        self.revision = PlanRevision(
            revision_id=str(uuid.uuid4()),
            plan_id=plan_id,
            proposal_id=proposal_id,
            version=version,
            created_at=created_at,
            deltas=[],
        )

    def add_delta(self, *, date: str, field: str, old: DeltaValue = None, new: DeltaValue = None) -> None:
        """Add a field change delta.

        Args:
            date: Day date (ISO format)
            field: Name of field that changed
            old: Old value
            new: New value
        """
        self.revision.deltas.append(RevisionDelta(date=date, field=field, old=old, new=new))

    def add_day_change(self, before: DayRecord, after: DayRecord) -> None:
        """Record one delta per audited field that differs between two versions of a day."""
        old = before.model_dump(mode="json", include=set(AUDITED_FIELDS))
        new = after.model_dump(mode="json", include=set(AUDITED_FIELDS))
        for field in AUDITED_FIELDS:
            if old[field] != new[field]:
                self.add_delta(date=after.date.isoformat(), field=field, old=old[field], new=new[field])

    def finalize(self) -> PlanRevision:
        """Finalize and return the PlanRevision, deltas ordered by date."""
        self.revision.deltas.sort(key=lambda d: (d.date, AUDITED_FIELDS.index(d.field)))
        return self.revision
