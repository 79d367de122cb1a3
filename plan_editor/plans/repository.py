"""Schedule repository - the persistence boundary for canonical schedules.

The core treats a CanonicalSchedule as an in-memory value. Durable storage
lives behind this interface, which must offer a single atomic
compare-and-swap-by-version write.
"""

import threading
from datetime import datetime, timezone
from typing import Protocol

from loguru import logger
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError

from plan_editor.db.models import TrainingPlan
from plan_editor.db.session import SessionFactory, get_session
from plan_editor.plans.errors import StorageError
from plan_editor.plans.types import CanonicalSchedule, DayRecord


class ScheduleRepository(Protocol):
    def get(self, plan_id: str) -> CanonicalSchedule | None: ...

    def add(self, schedule: CanonicalSchedule) -> None: ...

    def compare_and_swap(self, schedule: CanonicalSchedule, expected_version: int) -> bool:
        """Store ``schedule`` only if the stored version still equals ``expected_version``.

        Returns:
            True if the write happened, False if another writer got there first
        """
        ...


class InMemoryScheduleRepository:
    """Process-local repository.

    The lock only makes the version compare and the store one step; it is
    the storage primitive, not a coordination mechanism for callers.
    """

    def __init__(self, schedules: list[CanonicalSchedule] | None = None) -> None:
        self._schedules: dict[str, CanonicalSchedule] = {s.plan_id: s for s in schedules or []}
        self._lock = threading.Lock()

    def get(self, plan_id: str) -> CanonicalSchedule | None:
        return self._schedules.get(plan_id)

    def add(self, schedule: CanonicalSchedule) -> None:
        with self._lock:
            if schedule.plan_id in self._schedules:
                raise ValueError(f"Schedule {schedule.plan_id} already exists")
            self._schedules[schedule.plan_id] = schedule

    def compare_and_swap(self, schedule: CanonicalSchedule, expected_version: int) -> bool:
        with self._lock:
            current = self._schedules.get(schedule.plan_id)
            if current is None or current.version != expected_version:
                return False
            self._schedules[schedule.plan_id] = schedule
            return True


def _to_schedule(row: TrainingPlan) -> CanonicalSchedule:
    return CanonicalSchedule(
        plan_id=row.id,
        anchor_date=row.anchor_date,
        version=row.version,
        days=[DayRecord.model_validate(day) for day in row.days or []],
    )


def _serialize_days(schedule: CanonicalSchedule) -> list[dict]:
    return [day.model_dump(mode="json") for day in schedule.days]


class SqlScheduleRepository:
    """Schedule repository persisted in ``training_plans``.

    compare_and_swap is one ``UPDATE ... WHERE id = :id AND version = :expected``;
    the database row lock makes it atomic across processes.
    """

    def __init__(self, session_factory: SessionFactory = get_session) -> None:
        self._session_factory = session_factory

    def get(self, plan_id: str) -> CanonicalSchedule | None:
        try:
            with self._session_factory() as db:
                row = db.execute(select(TrainingPlan).where(TrainingPlan.id == plan_id)).scalar_one_or_none()
                return _to_schedule(row) if row is not None else None
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to load schedule {plan_id}: {e}") from e

    def add(self, schedule: CanonicalSchedule) -> None:
        try:
            with self._session_factory() as db:
                db.add(
                    TrainingPlan(
                        id=schedule.plan_id,
                        anchor_date=schedule.anchor_date,
                        version=schedule.version,
                        days=_serialize_days(schedule),
                    )
                )
                db.commit()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to store schedule {schedule.plan_id}: {e}") from e
        logger.info("Schedule stored", plan_id=schedule.plan_id, version=schedule.version, day_count=len(schedule.days))

    def compare_and_swap(self, schedule: CanonicalSchedule, expected_version: int) -> bool:
        try:
            with self._session_factory() as db:
                result = db.execute(
                    update(TrainingPlan)
                    .where(TrainingPlan.id == schedule.plan_id, TrainingPlan.version == expected_version)
                    .values(
                        version=schedule.version,
                        days=_serialize_days(schedule),
                        updated_at=datetime.now(timezone.utc),
                    )
                )
                db.commit()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to write schedule {schedule.plan_id}: {e}") from e

        swapped = result.rowcount == 1
        if not swapped:
            logger.warning(
                "Schedule compare-and-swap lost",
                plan_id=schedule.plan_id,
                expected_version=expected_version,
            )
        return swapped
