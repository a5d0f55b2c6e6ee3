"""Schemas describing interview answers and state."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

WeekdayToken = Literal["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]

# Canonical week order; every day list is emitted in this order.
WEEKDAY_TOKENS: tuple[str, ...] = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")

TIME_OF_DAY_PATTERN = r"^([01]?\d|2[0-3]):([0-5]\d)$"


class InterviewFields(BaseModel):
    """Fully validated answers, the hand-off shape for the schedule builder."""

    model_config = ConfigDict(frozen=True)

    goal_title: str = Field(..., min_length=3)
    target_date: datetime = Field(..., description="Midday-UTC instant of the target calendar date.")
    days_per_week: int = Field(..., ge=1, le=7)
    session_minutes: int = Field(..., gt=0)
    preferred_days: List[WeekdayToken] = Field(..., min_length=1)
    time_of_day: Optional[str] = Field(default=None, pattern=TIME_OF_DAY_PATTERN)

    @field_validator("goal_title")
    @classmethod
    def _strip_title(cls, value: str) -> str:
        stripped = value.strip()
        if len(stripped) < 3:
            raise ValueError("goal_title must be at least 3 characters")
        return stripped

    @field_validator("target_date")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @field_validator("preferred_days")
    @classmethod
    def _week_order(cls, value: List[str]) -> List[str]:
        present = set(value)
        return [day for day in WEEKDAY_TOKENS if day in present]


class InterviewState(BaseModel):
    """Snapshot of an interview in progress."""

    fields: Dict[str, Any] = Field(default_factory=dict)
    current_field: Optional[str] = None
    current_question: Optional[str] = None
    is_complete: bool = False
    error: Optional[str] = None
