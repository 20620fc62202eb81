"""Date and time helpers shared by the availability engine."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from datetime import UTC, date, datetime, time, timedelta
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)

_TIME_PATTERN = re.compile(r"^(\d{1,2})(?::(\d{1,2}))?(?::(\d{1,2})(?:\.\d+)?)?$")


def normalize_time_string(value: str | None) -> str | None:
    """Return ``value`` as ``HH:MM`` or ``None`` when it cannot be read.

    Accepts truncated forms such as ``"9"`` or ``"9:5"`` and backend forms
    with seconds such as ``"09:00:00"``. ``"24:00"`` is kept as an end-of-day
    marker.
    """
    if value is None:
        return None
    match = _TIME_PATTERN.match(value.strip())
    if match is None:
        return None
    hour = int(match.group(1))
    minute = int(match.group(2) or 0)
    if minute > 59 or hour > 24 or (hour == 24 and minute != 0):
        return None
    return f"{hour:02d}:{minute:02d}"


def parse_hour(value: str | None) -> int | None:
    normalized = normalize_time_string(value)
    if normalized is None:
        if value is not None:
            logger.debug("Ignoring unparseable schedule time %r", value)
        return None
    return int(normalized[:2])


def hour_window(start_time: str | None, end_time: str | None) -> tuple[int, int] | None:
    """Whole-hour ``[start, end)`` window or ``None`` when either bound is unusable."""
    start_hour = parse_hour(start_time)
    end_hour = parse_hour(end_time)
    if start_hour is None or end_hour is None:
        return None
    return start_hour, end_hour


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Yield every date from ``start`` to ``end`` inclusive."""
    if start > end:
        raise ValueError("start must be on or before end")
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def day_of_week(day: date) -> int:
    """Weekday index with 0=Sunday through 6=Saturday."""
    return (day.weekday() + 1) % 7


def ensure_aware(candidate: datetime) -> datetime:
    if candidate.tzinfo is None:
        return candidate.replace(tzinfo=UTC)
    return candidate


def to_local(candidate: datetime, tz: ZoneInfo) -> datetime:
    return ensure_aware(candidate).astimezone(tz)


def slot_interval(day: date, hour: int, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """Half-open ``[day@hour:00, day@(hour+1):00)`` interval in ``tz``."""
    if not 0 <= hour <= 23:
        raise ValueError("hour must be between 0 and 23")
    start = datetime.combine(day, time(hour), tzinfo=tz)
    next_hour = hour + 1
    if next_hour == 24:
        end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    else:
        end = datetime.combine(day, time(next_hour), tzinfo=tz)
    return start, end


def intervals_overlap(
    a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime
) -> bool:
    """True if ``[a_start, a_end)`` overlaps ``[b_start, b_end)``."""
    return a_start < b_end and a_end > b_start


def hour_label(hour: int) -> str:
    return f"{hour:02d}:00 - {hour + 1:02d}:00"
