"""Typed non-success outcomes for preview and commit.

These are return values, not exceptions: the caller must handle each one
explicitly (usually by refetching and regenerating a proposal).
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict


class NotFoundError(BaseModel):
    """Proposal id is unknown or was already consumed."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["not_found"] = "not_found"
    proposal_id: str
    message: str = "Proposal not found or already used. Please request the change again."


class ExpiredError(BaseModel):
    """Proposal time-to-live elapsed before commit."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["expired"] = "expired"
    proposal_id: str
    expired_at: datetime
    message: str = "This preview has expired. Please generate a new preview."


class ConflictError(BaseModel):
    """The schedule changed since the proposal or the caller's read."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["conflict"] = "conflict"
    proposal_id: str
    submitted_version: int
    current_version: int
    message: str = "Plan has been modified by another session. Please refresh and try again."
