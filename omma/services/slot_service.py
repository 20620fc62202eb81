"""Enumerate nominally open (date, hour, space) candidates."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date

from omma.core.settings import EngineConfig
from omma.schemas.availability import (
    BusinessHour,
    CandidateSlot,
    ClosedDate,
    EnumerationMode,
    SlotKind,
    Space,
    SpaceSchedule,
)
from omma.services.time_utils import day_of_week, hour_window, iter_dates

logger = logging.getLogger(__name__)


def is_closed_date(day: date, closed_dates: Sequence[ClosedDate]) -> bool:
    return any(entry.is_active and entry.date == day for entry in closed_dates)


def find_business_hour(
    business_hours: Sequence[BusinessHour], weekday: int
) -> BusinessHour | None:
    """First business-hour record for ``weekday``; later duplicates are ignored."""
    for entry in business_hours:
        if entry.day_of_week == weekday:
            return entry
    return None


def business_window(
    day: date, business_hours: Sequence[BusinessHour]
) -> tuple[int, int] | None:
    """Whole-hour opening window for ``day`` or ``None`` when the business is closed."""
    entry = find_business_hour(business_hours, day_of_week(day))
    if entry is None or entry.is_closed:
        return None
    return hour_window(entry.start_time, entry.end_time)


def space_windows(
    space_schedules: Sequence[SpaceSchedule], weekday: int
) -> dict[int, list[tuple[int, int]]]:
    """Active, readable schedule windows per space for ``weekday``."""
    windows: dict[int, list[tuple[int, int]]] = {}
    for schedule in space_schedules:
        if schedule.day_of_week != weekday or not schedule.is_active:
            continue
        window = hour_window(schedule.start_time, schedule.end_time)
        if window is None:
            logger.debug(
                "Skipping schedule for space %s on weekday %s: unreadable times %r-%r",
                schedule.space_id,
                weekday,
                schedule.start_time,
                schedule.end_time,
            )
            continue
        windows.setdefault(schedule.space_id, []).append(window)
    return windows


def is_day_enabled(
    day: date,
    *,
    business_hours: Sequence[BusinessHour],
    space_schedules: Sequence[SpaceSchedule],
    closed_dates: Sequence[ClosedDate],
) -> bool:
    """Whether a calendar cell is selectable.

    A day stays enabled when the business is closed but some space keeps its
    own schedule on that weekday.
    """
    if is_closed_date(day, closed_dates):
        return False
    if business_window(day, business_hours) is not None:
        return True
    weekday = day_of_week(day)
    return any(
        schedule.day_of_week == weekday and schedule.is_active for schedule in space_schedules
    )


def _within(hour: int, window: tuple[int, int]) -> bool:
    return window[0] <= hour < window[1]


def enumerate_day(
    day: date,
    *,
    business_hours: Sequence[BusinessHour],
    space_schedules: Sequence[SpaceSchedule],
    closed_dates: Sequence[ClosedDate],
    spaces: Sequence[Space],
    config: EngineConfig,
    mode: EnumerationMode = EnumerationMode.EXTENDED,
) -> list[CandidateSlot]:
    if is_closed_date(day, closed_dates):
        return []

    active_spaces = [space for space in spaces if space.is_active]
    opening = business_window(day, business_hours)
    if opening is None:
        if mode is EnumerationMode.REGULAR_ONLY:
            return []
        return [
            CandidateSlot(date=day, hour=hour, space_id=space.id, kind=SlotKind.SPECIAL)
            for hour in config.envelope_hours
            for space in active_spaces
        ]

    per_space = space_windows(space_schedules, day_of_week(day))
    candidates: list[CandidateSlot] = []
    for hour in config.envelope_hours:
        within_business = _within(hour, opening)
        for space in active_spaces:
            if within_business:
                if any(_within(hour, window) for window in per_space.get(space.id, [])):
                    candidates.append(
                        CandidateSlot(date=day, hour=hour, space_id=space.id, kind=SlotKind.REGULAR)
                    )
            elif mode is EnumerationMode.EXTENDED:
                candidates.append(
                    CandidateSlot(date=day, hour=hour, space_id=space.id, kind=SlotKind.SPECIAL)
                )
    return candidates


def enumerate_candidates(
    start: date,
    end: date,
    *,
    business_hours: Sequence[BusinessHour],
    space_schedules: Sequence[SpaceSchedule],
    closed_dates: Sequence[ClosedDate],
    spaces: Sequence[Space],
    config: EngineConfig,
    mode: EnumerationMode = EnumerationMode.EXTENDED,
) -> list[CandidateSlot]:
    """Full candidate grid for ``[start, end]``, ordered by date, hour and space."""
    mode = EnumerationMode(mode)
    candidates: list[CandidateSlot] = []
    for day in iter_dates(start, end):
        candidates.extend(
            enumerate_day(
                day,
                business_hours=business_hours,
                space_schedules=space_schedules,
                closed_dates=closed_dates,
                spaces=spaces,
                config=config,
                mode=mode,
            )
        )
    logger.debug(
        "Enumerated %d candidates between %s and %s (%s)", len(candidates), start, end, mode.value
    )
    return candidates
