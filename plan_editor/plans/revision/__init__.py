"""PlanRevision - audit trail of committed plan edits."""

from plan_editor.plans.revision.builder import PlanRevisionBuilder
from plan_editor.plans.revision.registry import InMemoryRevisionRegistry, PlanRevisionRegistry, SqlRevisionRegistry
from plan_editor.plans.revision.types import PlanRevision, RevisionDelta

__all__ = [
    "InMemoryRevisionRegistry",
    "PlanRevision",
    "PlanRevisionBuilder",
    "PlanRevisionRegistry",
    "RevisionDelta",
    "SqlRevisionRegistry",
]
