"""Assemble the goal descriptor and schedule handed to the persistence layer."""
from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from threading import Lock
from typing import Any, Dict, List, Mapping, Optional, Sequence

from goalflow.core.clock import Clock, fixed_clock, system_clock
from goalflow.core.config import settings
from goalflow.observability.metrics import log_metric
from goalflow.observability.tracing import trace
from goalflow.schemas.interview import InterviewFields
from goalflow.schemas.plan import GoalDescriptor, GoalPlan
from goalflow.services.errors import IncompleteFieldsError, InvalidScheduleError
from goalflow.services.interview_engine import INTERVIEW_FIELDS, InterviewEngine
from goalflow.services.schedule_builder import build_schedule, coerce_fields, resolve_timezone, validate_schedule

logger = logging.getLogger(__name__)


@dataclass
class _CachedPlan:
    stored_at: datetime
    plan: GoalPlan


class PlanDedupeCache:
    """Remember recent plans so a repeated submission returns the same result."""

    def __init__(self, window_seconds: int | None = None) -> None:
        seconds = window_seconds if window_seconds is not None else settings.plan_dedupe_window_seconds
        self.window = timedelta(seconds=seconds)
        self._entries: Dict[str, _CachedPlan] = {}
        self._lock = Lock()

    def get(self, key: str, now: datetime) -> Optional[GoalPlan]:
        with self._lock:
            entry = self._entries.get(key)
            if entry and now - entry.stored_at < self.window:
                return entry.plan
            return None

    def put(self, key: str, plan: GoalPlan, now: datetime) -> None:
        with self._lock:
            self._entries[key] = _CachedPlan(stored_at=now, plan=plan)
            self._prune(now)

    def __len__(self) -> int:
        return len(self._entries)

    def _prune(self, now: datetime) -> None:
        expired = [key for key, entry in self._entries.items() if now - entry.stored_at > self.window]
        for key in expired:
            del self._entries[key]


_default_cache = PlanDedupeCache()


def payload_hash(
    fields: InterviewFields,
    timezone_name: str,
    transcript: Sequence[Mapping[str, str]] | None = None,
    description: str | None = None,
) -> str:
    """Return a SHA-256 hex digest of the canonical JSON request payload."""
    payload = {
        "transcript": [dict(message) for message in (transcript or [])],
        "description": description,
        "fields": fields.model_dump(mode="json"),
        "timezone": timezone_name,
    }
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()


def build_goal_descriptor(fields: InterviewFields, description: str | None = None) -> GoalDescriptor:
    return GoalDescriptor(
        title=fields.goal_title,
        description=description,
        target_date=fields.target_date,
        status="active",
    )


def plan_goal_from_interview(
    fields: InterviewFields | Mapping[str, Any],
    timezone_name: str,
    *,
    transcript: Sequence[Mapping[str, str]] | None = None,
    description: str | None = None,
    clock: Clock | None = None,
    cache: PlanDedupeCache | None = None,
) -> GoalPlan:
    """
    Build the goal + slot list for a finished interview.

    Identical requests inside the dedupe window return the cached plan.
    Raises InvalidScheduleError when the schedule fails validation (for
    example no preferred weekday falls before the target date).
    """
    resolved = coerce_fields(fields)
    resolve_timezone(timezone_name)
    now = (clock or system_clock)()
    plan_cache = cache or _default_cache

    key = payload_hash(resolved, timezone_name, transcript, description)
    cached = plan_cache.get(key, now)
    if cached is not None:
        logger.info("Returning cached plan for duplicate request %s", key[:12])
        log_metric("plan.dedupe_hit", 1)
        return cached

    with trace("plan.assemble", metadata={"timezone": timezone_name, "goal_title": resolved.goal_title}):
        slots = build_schedule(resolved, timezone_name, clock=fixed_clock(now))
        errors = validate_schedule(slots, now=now)
        if errors:
            logger.warning("Generated schedule rejected: %s", "; ".join(errors))
            raise InvalidScheduleError(errors)
        plan = GoalPlan(goal=build_goal_descriptor(resolved, description), tasks=slots)

    plan_cache.put(key, plan, now)
    logger.info("Planned %d sessions for goal %r", len(slots), resolved.goal_title)
    return plan


def plan_goal_from_engine(
    engine: InterviewEngine,
    timezone_name: str,
    **kwargs: Any,
) -> GoalPlan:
    """Plan straight from an interview engine; fails fast while questions remain."""
    fields = engine.get_validated_fields()
    if fields is None:
        answered = engine.get_fields()
        missing: List[str] = [spec.name for spec in INTERVIEW_FIELDS if spec.name not in answered]
        raise IncompleteFieldsError(missing)
    return plan_goal_from_interview(fields, timezone_name, **kwargs)
