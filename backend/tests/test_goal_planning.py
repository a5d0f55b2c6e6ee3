from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from goalflow.core.clock import fixed_clock
from goalflow.schemas.interview import InterviewFields
from goalflow.services.errors import IncompleteFieldsError, InvalidScheduleError, InvalidTimezoneError
from goalflow.services.goal_planning import (
    PlanDedupeCache,
    build_goal_descriptor,
    payload_hash,
    plan_goal_from_engine,
    plan_goal_from_interview,
)
from goalflow.services.interview_engine import InterviewEngine

NOW = datetime(2026, 10, 19, 15, 0, tzinfo=timezone.utc)
LA = "America/Los_Angeles"
TRANSCRIPT = [
    {"role": "assistant", "content": "What's your goal?"},
    {"role": "user", "content": "Bench 225"},
]


def _fields(**overrides) -> InterviewFields:
    values = {
        "goal_title": "Bench 225",
        "target_date": datetime(2026, 11, 2, 12, tzinfo=timezone.utc),
        "days_per_week": 3,
        "session_minutes": 45,
        "preferred_days": ["Mon", "Wed", "Fri"],
        "time_of_day": "18:00",
    }
    values.update(overrides)
    return InterviewFields(**values)


def test_plan_contains_goal_and_ordered_tasks():
    plan = plan_goal_from_interview(
        _fields(),
        LA,
        transcript=TRANSCRIPT,
        description="Strength block",
        clock=fixed_clock(NOW),
        cache=PlanDedupeCache(),
    )
    assert plan.goal.title == "Bench 225"
    assert plan.goal.description == "Strength block"
    assert plan.goal.status == "active"
    assert plan.goal.target_date == datetime(2026, 11, 2, 12, tzinfo=timezone.utc)
    assert len(plan.tasks) == 7
    assert [task.seq for task in plan.tasks] == list(range(7))


def test_duplicate_request_returns_cached_plan():
    cache = PlanDedupeCache(window_seconds=120)
    first = plan_goal_from_interview(_fields(), LA, transcript=TRANSCRIPT, clock=fixed_clock(NOW), cache=cache)
    second = plan_goal_from_interview(
        _fields(), LA, transcript=TRANSCRIPT, clock=fixed_clock(NOW + timedelta(seconds=60)), cache=cache
    )
    assert second is first
    assert len(cache) == 1


def test_cache_entry_expires_after_window():
    cache = PlanDedupeCache(window_seconds=120)
    first = plan_goal_from_interview(_fields(), LA, clock=fixed_clock(NOW), cache=cache)
    later = NOW + timedelta(seconds=121)
    second = plan_goal_from_interview(_fields(), LA, clock=fixed_clock(later), cache=cache)
    assert second is not first
    assert len(cache) == 1


def test_payload_hash_depends_on_every_input():
    fields = _fields()
    baseline = payload_hash(fields, LA, TRANSCRIPT)
    assert baseline == payload_hash(_fields(), LA, [dict(message) for message in TRANSCRIPT])
    assert baseline != payload_hash(fields, "UTC", TRANSCRIPT)
    assert baseline != payload_hash(fields, LA, [])
    assert baseline != payload_hash(_fields(session_minutes=60), LA, TRANSCRIPT)


def test_empty_schedule_is_rejected():
    fields = _fields(target_date=datetime(2026, 10, 20, 12, tzinfo=timezone.utc), preferred_days=["Sat"])
    with pytest.raises(InvalidScheduleError) as excinfo:
        plan_goal_from_interview(fields, "UTC", clock=fixed_clock(NOW), cache=PlanDedupeCache())
    assert excinfo.value.errors == ["No scheduled slots generated"]


def test_invalid_timezone_is_rejected_before_planning():
    with pytest.raises(InvalidTimezoneError):
        plan_goal_from_interview(_fields(), "Nowhere/City", clock=fixed_clock(NOW), cache=PlanDedupeCache())


def test_plan_from_engine_requires_complete_interview():
    engine = InterviewEngine(clock=fixed_clock(NOW))
    engine.accept_answer("Bench 225")
    with pytest.raises(IncompleteFieldsError) as excinfo:
        plan_goal_from_engine(engine, LA, clock=fixed_clock(NOW), cache=PlanDedupeCache())
    assert excinfo.value.missing == [
        "target_date",
        "days_per_week",
        "session_minutes",
        "preferred_days",
        "time_of_day",
    ]


def test_plan_from_finished_engine():
    engine = InterviewEngine(clock=fixed_clock(NOW))
    for answer in ["Bench 225", "2 weeks", "3", "45", "mon wed fri", "18:00"]:
        assert engine.accept_answer(answer).success
    plan = plan_goal_from_engine(engine, LA, clock=fixed_clock(NOW), cache=PlanDedupeCache())
    assert len(plan.tasks) == 7
    assert plan.goal.title == "Bench 225"


def test_goal_descriptor_defaults():
    goal = build_goal_descriptor(_fields())
    assert goal.description is None
    assert goal.status == "active"


def test_different_description_is_not_a_duplicate():
    cache = PlanDedupeCache(window_seconds=120)
    first = plan_goal_from_interview(_fields(), LA, description="A", clock=fixed_clock(NOW), cache=cache)
    second = plan_goal_from_interview(_fields(), LA, description="B", clock=fixed_clock(NOW), cache=cache)
    assert first.goal.description == "A"
    assert second.goal.description == "B"
    assert payload_hash(_fields(), LA, description="A") != payload_hash(_fields(), LA, description="B")


def test_cached_plan_cannot_be_mutated():
    cache = PlanDedupeCache(window_seconds=120)
    plan = plan_goal_from_interview(_fields(), LA, description="A", clock=fixed_clock(NOW), cache=cache)
    with pytest.raises(ValidationError):
        plan.goal.description = "changed"
    with pytest.raises(ValidationError):
        plan.goal = build_goal_descriptor(_fields(), "other")
    again = plan_goal_from_interview(_fields(), LA, description="A", clock=fixed_clock(NOW), cache=cache)
    assert again.goal.description == "A"
