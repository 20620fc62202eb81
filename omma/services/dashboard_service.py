"""Aggregated per-hour board for the admin dashboard."""

from __future__ import annotations

from datetime import date

from omma.core.settings import EngineConfig
from omma.schemas.availability import AvailabilitySnapshot, EnumerationMode
from omma.schemas.dashboard import BoardCell, BoardRow, BoardStatus, DayBoard
from omma.services import conflict_service, slot_service
from omma.services.time_utils import hour_label


def build_day_board(
    day: date, snapshot: AvailabilitySnapshot, *, config: EngineConfig
) -> DayBoard:
    """Status of every active space for each envelope hour of ``day``.

    Bookings are shown regardless of the clock; the past-hour rule only
    applies to what can still be booked.
    """
    tz = config.tz
    spaces = [space for space in snapshot.spaces if space.is_active]
    closed = slot_service.is_closed_date(day, snapshot.closed_dates)
    opening = slot_service.business_window(day, snapshot.business_hours)
    offered = {
        slot.key: slot
        for slot in slot_service.enumerate_day(
            day,
            business_hours=snapshot.business_hours,
            space_schedules=snapshot.space_schedules,
            closed_dates=snapshot.closed_dates,
            spaces=spaces,
            config=config,
            mode=EnumerationMode.EXTENDED,
        )
    }

    rows: list[BoardRow] = []
    for hour in config.envelope_hours:
        is_business_hour = opening is not None and opening[0] <= hour < opening[1]
        cells: list[BoardCell] = []
        for space in spaces:
            reservation = conflict_service.find_conflict(
                space.id, day, hour, snapshot.reservations, tz=tz
            )
            if reservation is not None:
                cells.append(
                    BoardCell(space_id=space.id, status=BoardStatus.BOOKED, reservation=reservation)
                )
                continue
            if closed:
                status = BoardStatus.CLOSED
            else:
                slot = offered.get((day, hour, space.id))
                if slot is None:
                    status = BoardStatus.UNSCHEDULED
                elif slot.is_special:
                    status = BoardStatus.SPECIAL
                else:
                    status = BoardStatus.AVAILABLE
            cells.append(BoardCell(space_id=space.id, status=status))
        rows.append(
            BoardRow(hour=hour, label=hour_label(hour), is_business_hour=is_business_hour, cells=cells)
        )
    return DayBoard(date=day, is_closed=closed, rows=rows)
