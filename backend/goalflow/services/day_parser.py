"""Parse free-text weekday lists, ranges and day+time phrases.

Every path normalizes to the canonical tokens ``Sun`` .. ``Sat`` and emits
them in week order (Sun first), whatever order the user typed them in.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Set

from goalflow.schemas.interview import WEEKDAY_TOKENS

logger = logging.getLogger(__name__)

DAY_NAMES_FULL: tuple[str, ...] = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)

WEEKDAYS: tuple[str, ...] = ("Mon", "Tue", "Wed", "Thu", "Fri")
WEEKENDS: tuple[str, ...] = ("Sat", "Sun")

_KEYWORD_SETS: Dict[str, tuple[str, ...]] = {
    "weekdays": WEEKDAYS,
    "weekday": WEEKDAYS,
    "weekends": WEEKENDS,
    "weekend": WEEKENDS,
}

_DAY_NORMALIZATION = {
    "sun": "Sun",
    "sunday": "Sun",
    "mon": "Mon",
    "monday": "Mon",
    "tue": "Tue",
    "tues": "Tue",
    "tuesday": "Tue",
    "wed": "Wed",
    "weds": "Wed",
    "wednesday": "Wed",
    "thu": "Thu",
    "thur": "Thu",
    "thurs": "Thu",
    "thursday": "Thu",
    "fri": "Fri",
    "friday": "Fri",
    "sat": "Sat",
    "saturday": "Sat",
}

_RANGE_PATTERN = re.compile(
    r"^([a-z]+)\s*(?:-|–|—|\s+through\s+|\s+thru\s+|\s+to\s+|\s+until\s+)\s*([a-z]+)$"
)
_SEGMENT_SPLIT = re.compile(r"[,;]+|\s+and\s+")
_TOKEN_SPLIT = re.compile(r"[\s/&+\-]+")
_WORD_PATTERN = re.compile(r"[a-z]+")
_TIME_PATTERN = re.compile(
    r"(?<![\d:])(?P<hour>\d{1,2})(?::(?P<minute>\d{2}))?\s*(?P<meridiem>[ap])\.?m\b\.?"
    r"|(?<![\d:])(?P<hour24>\d{1,2}):(?P<minute24>\d{2})(?!\d)",
    re.IGNORECASE,
)


@dataclass
class DayExpressionResult:
    is_valid: bool
    days: List[str] = field(default_factory=list)
    error: Optional[str] = None


def parse_day_expression(text: str | None) -> List[str]:
    """Return the weekday tokens named by ``text`` in Sun..Sat order.

    Handles keywords ("weekdays"), ranges ("Fri-Mon" wraps around the week),
    and comma/space separated lists of names, abbreviations and near-misses.
    Unrecognized words are dropped; an empty list means nothing matched.
    """
    normalized = (text or "").strip().lower()
    if not normalized:
        return []

    if normalized in _KEYWORD_SETS:
        return _in_week_order(_KEYWORD_SETS[normalized])

    whole_range = _match_range(normalized, lenient=True)
    if whole_range is not None:
        return _in_week_order(whole_range)

    days: Set[str] = set()
    for segment in _SEGMENT_SPLIT.split(normalized):
        days.update(_expand_segment(segment, lenient=True))
    return _in_week_order(days)


def validate_day_expression(text: str | None) -> DayExpressionResult:
    """Parse ``text`` and report an empty result as a validation error."""
    days = parse_day_expression(text)
    if not days:
        logger.debug("No weekday recognized in %r", text)
        return DayExpressionResult(
            is_valid=False,
            error=(
                f'Could not parse day expression: "{(text or "").strip()}". '
                'Use formats like "weekdays", "Monday-Friday", or "Mon,Wed,Fri"'
            ),
        )
    return DayExpressionResult(is_valid=True, days=days)


def parse_day_times(text: str | None) -> Dict[str, str]:
    """Map weekday tokens to ``HH:MM`` times from phrases like "Mon 5pm, Sat 10am".

    Segments are split on commas/semicolons and read in order, so a later
    segment overwrites an earlier one for the same day. A segment without an
    unambiguous time (``5pm``, ``5:30 pm``, ``17:00``) is skipped; a bare
    ``5`` is not a time. Out-of-range hours and minutes are clamped.
    """
    result: Dict[str, str] = {}
    if not text:
        return result

    for segment in (part.strip() for part in re.split(r"[;,]+", text)):
        if not segment:
            continue
        match = _TIME_PATTERN.search(segment)
        if not match:
            logger.debug("Skipping day/time segment without a clear time: %r", segment)
            continue
        time_value = _normalize_time_match(match)

        remainder = (segment[: match.start()] + " " + segment[match.end():]).strip().lower()
        days = _expand_segment(remainder, lenient=False) or _expand_segment(remainder, lenient=True)
        for day in days:
            result[day] = time_value

    return {day: result[day] for day in WEEKDAY_TOKENS if day in result}


def weekday_token(value: date) -> str:
    """Return the canonical token for a calendar date."""
    # date.weekday() is Monday=0; the canonical order starts on Sunday.
    return WEEKDAY_TOKENS[(value.weekday() + 1) % 7]


def day_names_to_numbers(days: Iterable[str]) -> List[int]:
    """Convert tokens to day numbers (0 = Sunday); unknown tokens are dropped."""
    return [WEEKDAY_TOKENS.index(day) for day in days if day in WEEKDAY_TOKENS]


def day_numbers_to_names(numbers: Iterable[int]) -> List[str]:
    return [WEEKDAY_TOKENS[number] for number in numbers if 0 <= number < 7]


def is_day_allowed(day_number: int, allowed_days: Sequence[str]) -> bool:
    if not 0 <= day_number < 7:
        return False
    return WEEKDAY_TOKENS[day_number] in allowed_days


def format_days_for_display(days: Sequence[str]) -> str:
    """Render tokens as "Weekdays (Mon-Fri)", "Monday and Friday", etc."""
    ordered = _in_week_order(days)
    if set(ordered) == set(WEEKDAYS):
        return "Weekdays (Mon-Fri)"
    if set(ordered) == set(WEEKENDS):
        return "Weekends (Sat-Sun)"

    full_names = [DAY_NAMES_FULL[WEEKDAY_TOKENS.index(day)] for day in ordered]
    if not full_names:
        return ""
    if len(full_names) == 1:
        return full_names[0]
    if len(full_names) == 2:
        return f"{full_names[0]} and {full_names[1]}"
    return f"{', '.join(full_names[:-1])}, and {full_names[-1]}"


def _expand_segment(segment: str, *, lenient: bool) -> List[str]:
    segment = segment.strip()
    if not segment:
        return []
    if segment in _KEYWORD_SETS:
        return list(_KEYWORD_SETS[segment])

    segment_range = _match_range(segment, lenient=lenient)
    if segment_range is not None:
        return segment_range

    days: List[str] = []
    for token in _TOKEN_SPLIT.split(segment):
        for word in _WORD_PATTERN.findall(token):
            if word in _KEYWORD_SETS:
                days.extend(_KEYWORD_SETS[word])
                continue
            day = _resolve_token(word, lenient=lenient)
            if day:
                days.append(day)
    return days


def _match_range(text: str, *, lenient: bool) -> List[str] | None:
    match = _RANGE_PATTERN.match(text)
    if not match:
        return None
    start = _resolve_token(match.group(1), lenient=lenient)
    end = _resolve_token(match.group(2), lenient=lenient)
    if not start or not end:
        return None
    return _day_range(start, end)


def _day_range(start: str, end: str) -> List[str]:
    start_index = WEEKDAY_TOKENS.index(start)
    end_index = WEEKDAY_TOKENS.index(end)
    if start_index <= end_index:
        return list(WEEKDAY_TOKENS[start_index : end_index + 1])
    return list(WEEKDAY_TOKENS[start_index:]) + list(WEEKDAY_TOKENS[: end_index + 1])


def _resolve_token(token: str, *, lenient: bool) -> str | None:
    exact = _DAY_NORMALIZATION.get(token)
    if exact or not lenient:
        return exact
    if len(token) < 2 or not token.isalpha():
        return None

    # Unambiguous prefix of a full name ("tu", "wedn"), then misspellings
    # that still start with a real abbreviation ("wendsday" does not, "wednsday" does).
    candidates = {
        WEEKDAY_TOKENS[index]
        for index, name in enumerate(DAY_NAMES_FULL)
        if name.lower().startswith(token)
    }
    if len(candidates) == 1:
        return candidates.pop()
    if len(token) >= 3:
        return _DAY_NORMALIZATION.get(token[:3])
    return None


def _normalize_time_match(match: re.Match[str]) -> str:
    if match.group("hour24") is not None:
        hour = int(match.group("hour24"))
        minute = int(match.group("minute24"))
    else:
        hour = int(match.group("hour"))
        minute = int(match.group("minute") or 0)
        meridiem = match.group("meridiem").lower()
        if meridiem == "p" and hour < 12:
            hour += 12
        if meridiem == "a" and hour == 12:
            hour = 0
    hour = max(0, min(23, hour))
    minute = max(0, min(59, minute))
    return f"{hour:02d}:{minute:02d}"


def _in_week_order(days: Iterable[str]) -> List[str]:
    present = set(days)
    return [day for day in WEEKDAY_TOKENS if day in present]
