"""Minute-granularity clock and duration helpers."""

from __future__ import annotations

import math
import re
from datetime import datetime
from typing import Any, Optional

MINUTES_PER_DAY = 24 * 60

_CLOCK_PATTERN = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::\d{2})?\s*$")
_DURATION_PATTERN = re.compile(r"^\s*(-)?(\d+)h\s*(\d+)m\s*$")


def _as_number(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def to_minutes(hours: Any, minutes: Any) -> int:
    """Combine an hours/minutes pair; anything non-numeric counts as zero."""
    return round_half_up(_as_number(hours) * 60 + _as_number(minutes))


def normalize(total_minutes: int) -> int:
    return ((total_minutes % MINUTES_PER_DAY) + MINUTES_PER_DAY) % MINUTES_PER_DAY


def format_24(total_minutes: int) -> str:
    hours, minutes = divmod(normalize(total_minutes), 60)
    return f"{hours:02d}:{minutes:02d}"


def format_12(total_minutes: int) -> str:
    hours, minutes = divmod(normalize(total_minutes), 60)
    suffix = "PM" if hours >= 12 else "AM"
    hours %= 12
    if hours == 0:
        hours = 12
    return f"{hours}:{minutes:02d} {suffix}"


def format_clock(total_minutes: int, *, use_24_hour: bool = True) -> str:
    return format_24(total_minutes) if use_24_hour else format_12(total_minutes)


def parse_clock(value: Optional[str]) -> Optional[int]:
    """Parse ``HH:MM`` into minutes since midnight.

    Returns ``None`` for empty or unparsable input; callers treat that as
    "clock-in not configured".
    """
    if not value or not isinstance(value, str):
        return None
    match = _CLOCK_PATTERN.match(value)
    if not match:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours >= 24 or minutes >= 60:
        return None
    return hours * 60 + minutes


def format_duration(minutes: float) -> str:
    total = round_half_up(minutes)
    hours, mins = divmod(abs(total), 60)
    sign = "-" if total < 0 else ""
    return f"{sign}{hours}h {mins}m"


def parse_duration(value: Optional[str]) -> Optional[int]:
    """Inverse of :func:`format_duration`."""
    if not value or not isinstance(value, str):
        return None
    match = _DURATION_PATTERN.match(value)
    if not match:
        return None
    total = int(match.group(2)) * 60 + int(match.group(3))
    return -total if match.group(1) else total


def clock_minutes(moment: datetime) -> int:
    return moment.hour * 60 + moment.minute
