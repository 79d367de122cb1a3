from __future__ import annotations

from datetime import date, datetime, timezone

from sqlalchemy import JSON, Date, DateTime, Index, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models."""


class TrainingPlan(Base):
    """Canonical schedule storage.

    Stores:
    - id: Plan ID
    - anchor_date: First day of rolling week 1
    - version: Optimistic-concurrency token, bumped once per committed edit
    - days: JSON array of day records, sorted by date
    """

    __tablename__ = "training_plans"

    id: Mapped[str] = mapped_column(String, primary_key=True, index=True)
    anchor_date: Mapped[date] = mapped_column(Date, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    days: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )


class PlanEditProposal(Base):
    """Pending preview of validated patches.

    Rows are deleted on consume; the primary key makes consume single-use.
    """

    __tablename__ = "plan_edit_proposals"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    plan_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    plan_version: Mapped[int] = mapped_column(Integer, nullable=False)
    payload: Mapped[dict] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class PlanEditRevision(Base):
    """Append-only audit record of a committed plan edit."""

    __tablename__ = "plan_edit_revisions"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    plan_id: Mapped[str] = mapped_column(String, nullable=False)
    proposal_id: Mapped[str] = mapped_column(String, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    deltas: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (Index("idx_plan_edit_revisions_plan_version", "plan_id", "version"),)
