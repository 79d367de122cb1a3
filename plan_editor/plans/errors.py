"""Plan edit faults.

Expected outcomes (ambiguity, rejection, conflict, expiry, not-found) are
returned as typed results, never raised. These exceptions are reserved for
failures the caller cannot correct by changing its input.
"""


class PlanEditError(Exception):
    """Base class for unexpected plan edit failures."""


class ScheduleNotFoundError(PlanEditError):
    """The persistence layer has no schedule with the requested plan id."""

    def __init__(self, plan_id: str) -> None:
        super().__init__(f"Schedule {plan_id} not found")
        self.plan_id = plan_id


class StorageError(PlanEditError):
    """The persistence layer failed to read or write."""
