"""Schemas for generated goal plans."""
from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ScheduledSlot(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    due_at: datetime
    duration_minutes: int = Field(..., gt=0)
    seq: int = Field(..., ge=0)


class GoalDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    description: Optional[str] = None
    target_date: Optional[datetime] = None
    status: Literal["active", "paused", "completed", "archived"] = "active"


class GoalPlan(BaseModel):
    """A goal and its ordered slots, shared as-is by repeat requests."""

    model_config = ConfigDict(frozen=True)

    goal: GoalDescriptor
    tasks: List[ScheduledSlot] = Field(..., min_length=1)
