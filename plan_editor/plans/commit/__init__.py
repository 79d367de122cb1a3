"""Patch Application Engine - commit validated proposals to the canonical schedule."""

from plan_editor.plans.commit.engine import apply_patch, apply_patches, commit_proposal
from plan_editor.plans.commit.types import CommitOutcome, CommitResult, DayChange

__all__ = [
    "CommitOutcome",
    "CommitResult",
    "DayChange",
    "apply_patch",
    "apply_patches",
    "commit_proposal",
]
