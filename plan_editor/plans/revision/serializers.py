"""JSON column codecs for revision deltas."""

from plan_editor.plans.revision.types import PlanRevision, RevisionDelta


def serialize_deltas(revision: PlanRevision) -> list[dict]:
    """Deltas as plain dicts for the ``plan_edit_revisions.deltas`` column.

    Old and new values keep their list or string shape; dates are ISO strings.
    """
    return [delta.model_dump(mode="json") for delta in revision.deltas]


def deserialize_deltas(data: list[dict]) -> list[RevisionDelta]:
    return [RevisionDelta(**item) for item in data]
