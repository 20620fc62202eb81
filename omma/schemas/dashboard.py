"""Schemas for the admin day board."""

from __future__ import annotations

import enum
from datetime import date

from pydantic import BaseModel

from omma.schemas.availability import AvailabilitySnapshot, Reservation


class BoardStatus(str, enum.Enum):
    AVAILABLE = "available"
    BOOKED = "booked"
    SPECIAL = "special"
    UNSCHEDULED = "unscheduled"
    CLOSED = "closed"


class BoardCell(BaseModel):
    space_id: int
    status: BoardStatus
    reservation: Reservation | None = None


class BoardRow(BaseModel):
    hour: int
    label: str
    is_business_hour: bool
    cells: list[BoardCell]


class DayBoard(BaseModel):
    """Per-hour, per-space status grid for one local date."""

    date: date
    is_closed: bool
    rows: list[BoardRow]


class DayBoardRequest(BaseModel):
    date: date
    snapshot: AvailabilitySnapshot
