"""Request schemas for the plan edit endpoints."""

import datetime as dt

from pydantic import BaseModel, Field

from plan_editor.plans.modify.types import ProposedPatch


class ResolveRequest(BaseModel):
    phrase: str = Field(description='Reference phrase, e.g. "next Tuesday" or "this weekend"')
    today: dt.date | None = Field(default=None, description="Reference date (defaults to the server clock)")
    plan_id: str | None = Field(default=None, description="Plan whose anchor fills in week numbers")


class ProposeRequest(BaseModel):
    # Patches stay loose here so the validator can report every problem at once.
    patches: list[ProposedPatch] = Field(description="Proposed changes, addressed by date or (week, weekday)")


class CommitRequest(BaseModel):
    submitted_version: int = Field(description="Schedule version the client last displayed")
