"""Calendar windows and the month/week grid."""

from __future__ import annotations

import calendar
from datetime import date, timedelta

from omma.core.settings import EngineConfig
from omma.schemas.availability import (
    AvailabilitySnapshot,
    CalendarDay,
    CalendarView,
    CalendarWeek,
    CalendarWindow,
    Reservation,
    ViewMode,
)
from omma.services.slot_service import is_day_enabled
from omma.services.time_utils import day_of_week, iter_dates, to_local


def week_start(day: date) -> date:
    """Sunday on or before ``day``."""
    return day - timedelta(days=day_of_week(day))


def window_for(mode: ViewMode | str, anchor: date) -> CalendarWindow:
    """Inclusive date range rendered for ``mode`` around ``anchor``.

    Month windows are widened to whole Sunday-Saturday weeks so every row of
    the grid holds seven days, even when it spans two months.
    """
    mode = ViewMode(mode)
    if mode is ViewMode.WEEK:
        start = week_start(anchor)
        return CalendarWindow(start=start, end=start + timedelta(days=6))

    first = anchor.replace(day=1)
    last = anchor.replace(day=calendar.monthrange(anchor.year, anchor.month)[1])
    return CalendarWindow(
        start=week_start(first),
        end=last + timedelta(days=6 - day_of_week(last)),
    )


def shift_anchor(mode: ViewMode | str, anchor: date, steps: int) -> date:
    """Move the anchor by whole weeks or months for previous/next navigation."""
    mode = ViewMode(mode)
    if mode is ViewMode.WEEK:
        return anchor + timedelta(days=7 * steps)
    month_index = anchor.year * 12 + (anchor.month - 1) + steps
    year, month = divmod(month_index, 12)
    month += 1
    day = min(anchor.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def _reservations_by_day(
    reservations: list[Reservation], config: EngineConfig
) -> dict[date, list[Reservation]]:
    tz = config.tz
    grouped: dict[date, list[Reservation]] = {}
    for reservation in reservations:
        if not reservation.blocks:
            continue
        grouped.setdefault(to_local(reservation.start_time, tz).date(), []).append(reservation)
    for items in grouped.values():
        items.sort(key=lambda item: item.start_time)
    return grouped


def build_calendar(
    mode: ViewMode | str,
    anchor: date,
    snapshot: AvailabilitySnapshot,
    *,
    today: date,
    config: EngineConfig,
) -> CalendarView:
    """Render the calendar grid for the window around ``anchor``."""
    mode = ViewMode(mode)
    window = window_for(mode, anchor)
    by_day = _reservations_by_day(snapshot.reservations, config)

    weeks: list[CalendarWeek] = []
    days: list[CalendarDay] = []
    for current in iter_dates(window.start, window.end):
        days.append(
            CalendarDay(
                date=current,
                is_current_month=current.month == anchor.month and current.year == anchor.year,
                is_today=current == today,
                is_past=current < today,
                is_enabled=is_day_enabled(
                    current,
                    business_hours=snapshot.business_hours,
                    space_schedules=snapshot.space_schedules,
                    closed_dates=snapshot.closed_dates,
                ),
                reservations=by_day.get(current, []),
            )
        )
        if len(days) == 7:
            weeks.append(CalendarWeek(days=days))
            days = []
    return CalendarView(mode=mode, anchor=anchor, window=window, weeks=weeks)
