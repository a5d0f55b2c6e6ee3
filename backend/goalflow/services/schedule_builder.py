"""Expand validated interview fields into dated task occurrences."""
from __future__ import annotations

import logging
from datetime import datetime, time, timedelta, timezone
from typing import Any, Dict, List, Mapping, Sequence
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from goalflow.core.clock import Clock, system_clock
from goalflow.core.config import settings
from goalflow.observability.metrics import log_metric
from goalflow.observability.tracing import trace
from goalflow.schemas.interview import InterviewFields
from goalflow.schemas.plan import ScheduledSlot
from goalflow.services.day_parser import weekday_token
from goalflow.services.errors import IncompleteFieldsError, InvalidTimezoneError

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("goal_title", "target_date", "days_per_week", "session_minutes", "preferred_days")


def resolve_timezone(timezone_name: str | None) -> ZoneInfo:
    """Return the IANA zone for ``timezone_name``; there is no UTC fallback."""
    if not isinstance(timezone_name, str) or not timezone_name.strip():
        raise InvalidTimezoneError(timezone_name)
    try:
        return ZoneInfo(timezone_name.strip())
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise InvalidTimezoneError(timezone_name) from exc


def build_schedule(
    fields: InterviewFields | Mapping[str, Any] | None,
    timezone_name: str | None,
    *,
    clock: Clock | None = None,
    day_times: Mapping[str, str] | None = None,
    default_time_of_day: str | None = None,
) -> List[ScheduledSlot]:
    """
    Emit one slot per preferred weekday between now and the target date (inclusive).

    Each slot is the date combined with the time of day in ``timezone_name``,
    stored as a UTC instant. ``day_times`` (e.g. from ``parse_day_times``)
    overrides the time for individual weekdays. Slots come back in
    chronological order with ``seq`` counting up from 0. The day set is
    honored as given, even if it disagrees with ``days_per_week``.
    """
    resolved = coerce_fields(fields)
    zone = resolve_timezone(timezone_name)
    now = (clock or system_clock)()
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    base_time = _parse_hhmm(resolved.time_of_day or default_time_of_day or settings.default_time_of_day)
    overrides: Dict[str, time] = {day: _parse_hhmm(value) for day, value in (day_times or {}).items()}
    allowed_days = set(resolved.preferred_days)

    metadata = {
        "timezone": zone.key,
        "preferred_days": list(resolved.preferred_days),
        "target_date": resolved.target_date.isoformat(),
    }
    with trace("schedule.build", metadata=metadata):
        current_day = now.astimezone(zone).date()
        last_day = resolved.target_date.astimezone(timezone.utc).date()
        slots: List[ScheduledSlot] = []
        while current_day <= last_day:
            token = weekday_token(current_day)
            if token in allowed_days:
                local_due = datetime.combine(current_day, overrides.get(token, base_time), tzinfo=zone)
                due_at = local_due.astimezone(timezone.utc)
                if due_at > now:
                    slots.append(
                        ScheduledSlot(
                            title=resolved.goal_title,
                            due_at=due_at,
                            duration_minutes=resolved.session_minutes,
                            seq=len(slots),
                        )
                    )
            current_day += timedelta(days=1)

    logger.debug("Built %d slots through %s (%s)", len(slots), last_day.isoformat(), zone.key)
    log_metric("schedule.slots_generated", len(slots), metadata={"timezone": zone.key})
    return slots


def validate_schedule(slots: Sequence[ScheduledSlot], *, now: datetime | None = None) -> List[str]:
    """Return human-readable problems with ``slots``; an empty list means valid."""
    if not slots:
        return ["No scheduled slots generated"]

    errors: List[str] = []
    due_times = [slot.due_at for slot in slots]
    if len(set(due_times)) != len(due_times):
        errors.append("Duplicate due_at times found")

    for previous, current in zip(slots, slots[1:]):
        if current.due_at <= previous.due_at:
            errors.append(f"Slot {current.seq} is not after slot {previous.seq}")
            break

    if any(slot.seq != index for index, slot in enumerate(slots)):
        errors.append("Invalid sequence numbers")

    if now is not None:
        for slot in slots:
            if slot.due_at <= now:
                errors.append(f"Slot {slot.seq} is scheduled in the past")
    return errors


def format_schedule_for_display(slots: Sequence[ScheduledSlot], timezone_name: str | None = None) -> str:
    """Render one line per slot, e.g. "Bench 225: Oct 21, 2026 at 18:00 (45 min)"."""
    zone = resolve_timezone(timezone_name) if timezone_name else timezone.utc
    lines = []
    for slot in slots:
        local = slot.due_at.astimezone(zone)
        lines.append(
            f"{slot.title}: {local.strftime('%b %d, %Y')} at {local.strftime('%H:%M')} ({slot.duration_minutes} min)"
        )
    return "\n".join(lines)


def coerce_fields(fields: InterviewFields | Mapping[str, Any] | None) -> InterviewFields:
    """Return ``fields`` as a validated model; raise IncompleteFieldsError when values are missing."""
    if isinstance(fields, InterviewFields):
        return fields
    if fields is None:
        raise IncompleteFieldsError(REQUIRED_FIELDS)
    missing = [name for name in REQUIRED_FIELDS if fields.get(name) in (None, "", [])]
    if missing:
        raise IncompleteFieldsError(missing)
    return InterviewFields.model_validate(dict(fields))


def _parse_hhmm(value: str) -> time:
    hours, minutes = (int(part) for part in value.split(":"))
    return time(hour=hours, minute=minutes)


def slot_payloads(slots: Sequence[ScheduledSlot]) -> List[Dict[str, Any]]:
    """Serialize slots for the persistence collaborator."""
    return [slot.model_dump(mode="json") for slot in slots]
