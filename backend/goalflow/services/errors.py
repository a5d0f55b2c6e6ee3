"""Exceptions raised when the pipeline's calling contract is violated.

User input problems are never raised; they come back as structured results.
"""
from __future__ import annotations

from typing import Iterable, List


class GoalflowError(Exception):
    """Base class for pipeline errors."""


class NoActiveQuestionError(GoalflowError):
    """An answer was submitted after the interview completed."""

    def __init__(self) -> None:
        super().__init__("No active question: the interview is already complete.")


class IncompleteFieldsError(GoalflowError):
    """A schedule was requested from a field set missing required values."""

    def __init__(self, missing: Iterable[str]) -> None:
        self.missing: List[str] = list(missing)
        super().__init__(f"Cannot build a schedule; missing fields: {', '.join(self.missing)}")


class InvalidTimezoneError(GoalflowError):
    """The timezone identifier is empty or not a known IANA zone."""

    def __init__(self, timezone_name: str | None) -> None:
        self.timezone_name = timezone_name
        super().__init__(f"Unknown timezone: {timezone_name!r}")


class InvalidScheduleError(GoalflowError):
    """A generated schedule failed post-hoc validation."""

    def __init__(self, errors: Iterable[str]) -> None:
        self.errors: List[str] = list(errors)
        super().__init__(f"Invalid schedule: {', '.join(self.errors)}")
