"""Turn target-date phrases ("in 8 weeks", "January 30th", "2027-03-01") into dates."""
from __future__ import annotations

import calendar
import logging
import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from goalflow.core.clock import utc_today

logger = logging.getLogger(__name__)

# "day" has no default: "race day" or "Christmas day" is not a relative phrase.
DEFAULT_RELATIVE_COUNTS = {
    "week": 8,
    "month": 2,
}

_NUMBER_WORDS = {
    "a": 1,
    "next": 1,
    "an": 1,
    "one": 1,
    "two": 2,
    "three": 3,
    "four": 4,
    "five": 5,
    "six": 6,
    "seven": 7,
    "eight": 8,
    "nine": 9,
    "ten": 10,
    "eleven": 11,
    "twelve": 12,
}

# Checked in this order; "8 weeks or 2 months" resolves as weeks.
_RELATIVE_UNITS = ("week", "month", "day")

_MONTHS = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}

_MONTH_PATTERN = re.compile(
    r"\b(jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|aug(?:ust)?"
    r"|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)\b"
)
_DAY_OF_MONTH_PATTERN = re.compile(r"\b(\d{1,2})(?:st|nd|rd|th)?\b")
_YEAR_PATTERN = re.compile(r"\b(\d{4})\b")
_NUMERIC_PATTERN = re.compile(r"\b(\d{1,2})[/-](\d{1,2})(?:[/-](\d{4}|\d{2}))?\b")


def parse_target_date_from_text(text: str | None, *, today: date | None = None) -> Optional[date]:
    """Return the calendar date described by ``text`` or ``None`` when nothing matches.

    ``today`` anchors relative phrases and the current/next-year rule; callers
    pass it from an injected clock. A ``None`` result must be reported to the
    user, never replaced by a default date.
    """
    normalized = (text or "").strip().lower()
    if not normalized:
        return None
    base = today or utc_today()

    iso_value = _parse_iso(normalized)
    if iso_value is not None:
        return iso_value

    for unit in _RELATIVE_UNITS:
        count = _relative_count(normalized, unit)
        if count is None:
            continue
        if unit == "week":
            return base + timedelta(days=count * 7)
        if unit == "month":
            return add_months(base, count)
        return base + timedelta(days=count)

    month_match = _MONTH_PATTERN.search(normalized)
    if month_match:
        month = _MONTHS[month_match.group(1)[:3]]
        remainder = normalized[: month_match.start()] + " " + normalized[month_match.end():]
        year_match = _YEAR_PATTERN.search(remainder)
        day_match = _DAY_OF_MONTH_PATTERN.search(remainder)
        if day_match:
            year = int(year_match.group(1)) if year_match else None
            return _resolve_month_day(month, int(day_match.group(1)), year, base)

    numeric_match = _NUMERIC_PATTERN.search(normalized)
    if numeric_match:
        month, day, raw_year = numeric_match.groups()
        year = None
        if raw_year:
            year = int(raw_year) if len(raw_year) == 4 else 2000 + int(raw_year)
        return _resolve_month_day(int(month), int(day), year, base)

    logger.debug("Unparseable target date %r", text)
    return None


def add_months(value: date, months: int) -> date:
    """Add calendar months, clamping the day to the end of shorter months."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def to_midday_utc(value: date) -> datetime:
    """Pin a calendar date to 12:00 UTC so later timezone shifts keep the same day."""
    return datetime.combine(value, time(hour=12), tzinfo=timezone.utc)


def to_iso_date_string(value: date | datetime) -> str:
    """Return ``YYYY-MM-DD`` for a date, or for an instant read at midday UTC."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        value = value.astimezone(timezone.utc).date()
    return to_midday_utc(value).date().isoformat()


def _parse_iso(text: str) -> Optional[date]:
    if not re.match(r"^\d{4}-\d{2}-\d{2}", text):
        return None
    candidate = text.upper()
    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(candidate).date()
    except ValueError:
        pass
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def _relative_count(text: str, unit: str) -> Optional[int]:
    """Return the count for ``unit``: the first explicit numeral, else the unit's default if the word appears."""
    matched = False
    for match in re.finditer(rf"(?:\b(\d+|[a-z]+)\s*-?\s*)?\b{unit}s?\b", text):
        matched = True
        raw = match.group(1)
        count: Optional[int] = None
        if raw and raw.isdigit():
            count = int(raw)
        elif raw:
            count = _NUMBER_WORDS.get(raw)
        if count and count > 0:
            return count
    if not matched:
        return None
    return DEFAULT_RELATIVE_COUNTS.get(unit)


def _resolve_month_day(month: int, day: int, year: Optional[int], today: date) -> Optional[date]:
    try:
        candidate = date(year or today.year, month, day)
    except ValueError:
        return None
    if year is None and candidate < today:
        try:
            candidate = candidate.replace(year=today.year + 1)
        except ValueError:
            return None
    return candidate
