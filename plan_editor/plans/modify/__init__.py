"""Plan edit validation - proposed patches to a fully resolved patch set.

All modifications are explicit and validated - no free-text mutation.
"""

from plan_editor.plans.modify.types import (
    PatchAction,
    PatchViolation,
    ProposedPatch,
    RejectionReport,
    ResolvedPatch,
    ValidationResult,
    ValidPatchSet,
    ViolationCode,
)
from plan_editor.plans.modify.validators import validate_patches

__all__ = [
    "PatchAction",
    "PatchViolation",
    "ProposedPatch",
    "RejectionReport",
    "ResolvedPatch",
    "ValidPatchSet",
    "ValidationResult",
    "ViolationCode",
    "validate_patches",
]
