"""Schema exports."""

from omma.schemas.availability import (
    AvailabilitySnapshot,
    BusinessHour,
    CalendarDay,
    CalendarView,
    CalendarWeek,
    CalendarWindow,
    CandidateSlot,
    ClosedDate,
    DayViewRow,
    EnumerationMode,
    Reservation,
    ReservationStatus,
    SlotCheck,
    SlotCheckOutcome,
    SlotKind,
    SlotState,
    Space,
    SpaceSchedule,
    ViewMode,
)
from omma.schemas.booking import (
    AttemptState,
    BatchOutcome,
    BatchSubmissionResult,
    BookingQuote,
    CancellationRequest,
    CancellationState,
    HourResult,
    HourStatus,
    QuoteOutcome,
    ReservationRequest,
)
from omma.schemas.dashboard import BoardCell, BoardRow, BoardStatus, DayBoard

__all__ = [
    "AttemptState",
    "AvailabilitySnapshot",
    "BatchOutcome",
    "BatchSubmissionResult",
    "BoardCell",
    "BoardRow",
    "BoardStatus",
    "BookingQuote",
    "BusinessHour",
    "CalendarDay",
    "CalendarView",
    "CalendarWeek",
    "CalendarWindow",
    "CancellationRequest",
    "CancellationState",
    "CandidateSlot",
    "ClosedDate",
    "DayBoard",
    "DayViewRow",
    "EnumerationMode",
    "HourResult",
    "HourStatus",
    "QuoteOutcome",
    "Reservation",
    "ReservationRequest",
    "ReservationStatus",
    "SlotCheck",
    "SlotCheckOutcome",
    "SlotKind",
    "SlotState",
    "Space",
    "SpaceSchedule",
    "ViewMode",
]
