"""Question-by-question interview that collects goal planning fields."""
from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Callable, Dict, Mapping, Optional
from uuid import uuid4

from pydantic import ValidationError

from goalflow.core.clock import Clock, system_clock, utc_today
from goalflow.core.config import settings
from goalflow.core.context import bind_interview_id
from goalflow.observability.metrics import log_metric
from goalflow.schemas.interview import TIME_OF_DAY_PATTERN, InterviewFields, InterviewState
from goalflow.services.date_parser import parse_target_date_from_text, to_iso_date_string, to_midday_utc
from goalflow.services.day_parser import format_days_for_display, validate_day_expression
from goalflow.services.errors import NoActiveQuestionError

logger = logging.getLogger(__name__)

MIN_TITLE_LENGTH = 3
_TIME_OF_DAY_RE = re.compile(TIME_OF_DAY_PATTERN)
_LEADING_INT_RE = re.compile(r"^\s*(\d+)")
_HOURS_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(?:h|hr|hrs|hour|hours)\b")


@dataclass
class FieldCheck:
    ok: bool
    value: Any = None
    error: Optional[str] = None


@dataclass(frozen=True)
class ValidationContext:
    today: date
    fields: Mapping[str, Any]


@dataclass(frozen=True)
class FieldSpec:
    name: str
    question: str
    validate: Callable[[str, ValidationContext], FieldCheck]


@dataclass
class AnswerResult:
    success: bool
    field: str
    error: Optional[str] = None
    next_question: Optional[str] = None


@dataclass
class RealismReport:
    is_realistic: bool
    total_sessions: Optional[int] = None
    suggested_target_date: Optional[date] = None
    suggestion: Optional[str] = None


def _validate_goal_title(answer: str, context: ValidationContext) -> FieldCheck:
    if len(answer) < MIN_TITLE_LENGTH:
        return FieldCheck(ok=False, error=f"Goal title must be at least {MIN_TITLE_LENGTH} characters")
    return FieldCheck(ok=True, value=answer)


def _validate_target_date(answer: str, context: ValidationContext) -> FieldCheck:
    target = parse_target_date_from_text(answer, today=context.today)
    if target is None:
        return FieldCheck(
            ok=False,
            error="Invalid date format. Use YYYY-MM-DD, 'January 30th', or 'in X weeks/months'",
        )
    if target <= context.today:
        return FieldCheck(ok=False, error="Target date must be in the future")
    return FieldCheck(ok=True, value=to_midday_utc(target))


def _validate_days_per_week(answer: str, context: ValidationContext) -> FieldCheck:
    match = _LEADING_INT_RE.match(answer)
    days = int(match.group(1)) if match else None
    if days is None or not 1 <= days <= 7:
        return FieldCheck(ok=False, error="Days per week must be between 1 and 7")
    return FieldCheck(ok=True, value=days)


def _validate_session_minutes(answer: str, context: ValidationContext) -> FieldCheck:
    hours = _HOURS_RE.match(answer.lower())
    if hours:
        minutes = int(round(float(hours.group(1)) * 60))
    else:
        match = _LEADING_INT_RE.match(answer)
        minutes = int(match.group(1)) if match else 0
    if minutes < 1:
        return FieldCheck(ok=False, error="Session minutes must be a positive number")
    return FieldCheck(ok=True, value=minutes)


def _validate_preferred_days(answer: str, context: ValidationContext) -> FieldCheck:
    parsed = validate_day_expression(answer)
    if not parsed.is_valid:
        return FieldCheck(ok=False, error=parsed.error)

    expected = context.fields.get("days_per_week")
    if expected is not None and len(parsed.days) != expected:
        return FieldCheck(
            ok=False,
            error=(
                f"You said {expected} day(s) per week but picked {len(parsed.days)} "
                f"({format_days_for_display(parsed.days)}). Please choose exactly {expected}."
            ),
        )
    return FieldCheck(ok=True, value=parsed.days)


def _validate_time_of_day(answer: str, context: ValidationContext) -> FieldCheck:
    if answer == "" or answer.lower() == "default":
        return FieldCheck(ok=True, value=None)
    match = _TIME_OF_DAY_RE.match(answer)
    if not match:
        return FieldCheck(ok=False, error="Time must be in HH:MM format (e.g., '08:00', '18:30')")
    return FieldCheck(ok=True, value=f"{int(match.group(1)):02d}:{match.group(2)}")


# Question order is fixed; the engine always asks the first unanswered entry.
INTERVIEW_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec(
        "goal_title",
        "What's your goal? (e.g., 'I want to bench 225 pounds')",
        _validate_goal_title,
    ),
    FieldSpec(
        "target_date",
        "When do you want to achieve this? (e.g., '2024-12-31' or 'in 3 months')",
        _validate_target_date,
    ),
    FieldSpec(
        "days_per_week",
        "How many days per week can you work on this? (1-7)",
        _validate_days_per_week,
    ),
    FieldSpec(
        "session_minutes",
        "How many minutes per session? (e.g., 45)",
        _validate_session_minutes,
    ),
    FieldSpec(
        "preferred_days",
        "Which days work best? (e.g., 'Mon,Wed,Fri', 'weekdays' or 'Monday-Friday')",
        _validate_preferred_days,
    ),
    FieldSpec(
        "time_of_day",
        "What time of day? (e.g., '08:00', '18:30', or leave blank for default)",
        _validate_time_of_day,
    ),
)


class InterviewEngine:
    """Drive one interview: one active question, answers validated before they stick.

    Accepted answers are never edited in place; ``reset`` starts over.
    """

    def __init__(self, *, clock: Clock | None = None, interview_id: str | None = None) -> None:
        self._clock = clock or system_clock
        self.interview_id = interview_id or str(uuid4())
        self._fields: Dict[str, Any] = {}
        self._error: Optional[str] = None

    @property
    def state(self) -> InterviewState:
        spec = self._current_spec()
        return InterviewState(
            fields=dict(self._fields),
            current_field=spec.name if spec else None,
            current_question=spec.question if spec else None,
            is_complete=spec is None,
            error=self._error,
        )

    @property
    def current_question(self) -> Optional[str]:
        spec = self._current_spec()
        return spec.question if spec else None

    def accept_answer(self, answer: str) -> AnswerResult:
        """Validate ``answer`` for the active question and advance on success.

        Raises NoActiveQuestionError once the interview is complete.
        """
        spec = self._current_spec()
        if spec is None:
            raise NoActiveQuestionError()

        with bind_interview_id(self.interview_id):
            context = ValidationContext(today=utc_today(self._clock), fields=dict(self._fields))
            check = spec.validate((answer or "").strip(), context)
            if not check.ok:
                self._error = check.error or "Invalid input"
                logger.debug("Rejected answer for %s: %s", spec.name, self._error)
                log_metric("interview.answer_rejected", 1, metadata={"field": spec.name})
                return AnswerResult(success=False, field=spec.name, error=self._error)

            self._fields[spec.name] = check.value
            self._error = None

            next_spec = self._current_spec()
            if next_spec is None:
                logger.info("Interview complete with %d fields", len(self._fields))
                return AnswerResult(success=True, field=spec.name)
            return AnswerResult(success=True, field=spec.name, next_question=next_spec.question)

    def is_complete(self) -> bool:
        return all(spec.name in self._fields for spec in INTERVIEW_FIELDS)

    def get_fields(self) -> Dict[str, Any]:
        return dict(self._fields)

    def get_validated_fields(self) -> Optional[InterviewFields]:
        """Return schema-checked fields once every question is answered, else None."""
        if not self.is_complete():
            return None
        try:
            return InterviewFields.model_validate(self._fields)
        except ValidationError:
            logger.warning("Interview %s fields failed schema validation", self.interview_id, exc_info=True)
            return None

    def check_timeline_realism(self, min_sessions_required: int | None = None) -> RealismReport:
        """Advise (never block) when the target leaves too few sessions."""
        fields = self.get_validated_fields()
        if fields is None:
            return RealismReport(is_realistic=True)

        minimum = min_sessions_required if min_sessions_required is not None else settings.min_sessions_required
        today = utc_today(self._clock)
        days_until_target = (fields.target_date.date() - today).days
        weeks_until_target = max(0, math.ceil(days_until_target / 7))
        total_sessions = weeks_until_target * fields.days_per_week

        if total_sessions >= minimum:
            return RealismReport(is_realistic=True, total_sessions=total_sessions)

        suggested_weeks = math.ceil(minimum / fields.days_per_week)
        suggested_date = today + timedelta(days=suggested_weeks * 7)
        return RealismReport(
            is_realistic=False,
            total_sessions=total_sessions,
            suggested_target_date=suggested_date,
            suggestion=(
                f"This timeline seems tight. Want me to push target to "
                f"{to_iso_date_string(suggested_date)} or increase days/week?"
            ),
        )

    def reset(self) -> None:
        """Drop every answer and return to the first question."""
        self._fields = {}
        self._error = None

    def _current_spec(self) -> Optional[FieldSpec]:
        for spec in INTERVIEW_FIELDS:
            if spec.name not in self._fields:
                return spec
        return None
