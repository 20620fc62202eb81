"""Schedule inputs and availability outputs."""

from __future__ import annotations

import enum
from datetime import UTC, date, datetime, time
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator


class ViewMode(str, enum.Enum):
    """Calendar view granularity."""

    WEEK = "week"
    MONTH = "month"


class EnumerationMode(str, enum.Enum):
    """Which candidates the enumerator emits."""

    REGULAR_ONLY = "regular_only"
    EXTENDED = "extended"


class ReservationStatus(str, enum.Enum):
    """Lifecycle states for reservations."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class SlotKind(str, enum.Enum):
    REGULAR = "regular"
    SPECIAL = "special"


class SlotState(str, enum.Enum):
    """Availability of a candidate; only the resolver sets OPEN."""

    UNRESOLVED = "unresolved"
    OPEN = "open"
    OCCUPIED = "occupied"
    PAST = "past"
    NOT_OFFERED = "not_offered"


def _time_text(value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, time):
        return value.strftime("%H:%M")
    return str(value)


class BusinessHour(BaseModel):
    """Organisation-wide opening window for one weekday (0=Sunday)."""

    day_of_week: int = Field(ge=0, le=6)
    start_time: str | None = None
    end_time: str | None = None
    is_closed: bool = False

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _coerce_times(cls, value: Any) -> Any:
        return _time_text(value)


class SpaceSchedule(BaseModel):
    """Weekly window in which one space is bookable."""

    space_id: int
    day_of_week: int = Field(ge=0, le=6)
    start_time: str | None = None
    end_time: str | None = None
    is_active: bool = True

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _coerce_times(cls, value: Any) -> Any:
        return _time_text(value)


class ClosedDate(BaseModel):
    """Calendar date on which nothing can be booked."""

    date: date
    reason: str | None = None
    is_active: bool = True


class Space(BaseModel):
    id: int
    name: str = ""
    cost_credits: int = Field(default=0, ge=0)
    capacity: int | None = None
    is_active: bool = True


class Reservation(BaseModel):
    """Existing booking as reported by the backend."""

    id: int
    space_id: int
    start_time: datetime
    end_time: datetime
    status: ReservationStatus
    cost_credits: int | None = Field(default=None, ge=0)

    @field_validator("start_time", "end_time")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @model_validator(mode="after")
    def _ordered_interval(self) -> "Reservation":
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self

    @property
    def blocks(self) -> bool:
        """Whether the reservation takes part in conflict detection."""
        return self.status is not ReservationStatus.CANCELLED


class AvailabilitySnapshot(BaseModel):
    """Consistent set of inputs fetched together for one computation."""

    spaces: list[Space] = Field(default_factory=list)
    business_hours: list[BusinessHour] = Field(default_factory=list)
    space_schedules: list[SpaceSchedule] = Field(default_factory=list)
    closed_dates: list[ClosedDate] = Field(default_factory=list)
    reservations: list[Reservation] = Field(default_factory=list)
    display_only: bool = False


class CalendarWindow(BaseModel):
    start: date
    end: date

    model_config = ConfigDict(frozen=True)


class CandidateSlot(BaseModel):
    """One (date, hour, space) triple considered for booking."""

    date: date
    hour: int = Field(ge=0, le=23)
    space_id: int
    kind: SlotKind
    state: SlotState = SlotState.UNRESOLVED
    reservation_id: int | None = None

    model_config = ConfigDict(frozen=True)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_regular(self) -> bool:
        return self.kind is SlotKind.REGULAR

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_special(self) -> bool:
        return self.kind is SlotKind.SPECIAL

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_available(self) -> bool:
        return self.state is SlotState.OPEN

    @property
    def key(self) -> tuple[date, int, int]:
        return (self.date, self.hour, self.space_id)


class SlotCheckOutcome(str, enum.Enum):
    """Result of validating a single slot right before submission."""

    AVAILABLE = "available"
    PENDING_APPROVAL = "pending_approval"
    OCCUPIED = "occupied"
    PAST = "past"
    CLOSED = "closed"
    NOT_OFFERED = "not_offered"
    UNKNOWN_SPACE = "unknown_space"


class SlotCheck(BaseModel):
    outcome: SlotCheckOutcome
    space_id: int
    date: date
    hour: int
    slot: CandidateSlot | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def bookable(self) -> bool:
        return self.outcome in {
            SlotCheckOutcome.AVAILABLE,
            SlotCheckOutcome.PENDING_APPROVAL,
        }


class CalendarDay(BaseModel):
    date: date
    is_current_month: bool
    is_today: bool
    is_past: bool
    is_enabled: bool
    reservations: list[Reservation] = Field(default_factory=list)


class CalendarWeek(BaseModel):
    days: list[CalendarDay]


class CalendarView(BaseModel):
    mode: ViewMode
    anchor: date
    window: CalendarWindow
    weeks: list[CalendarWeek]


class DayViewRow(BaseModel):
    """Hour row of the professional day view."""

    hour: int
    label: str
    is_outside_business_hours: bool
    slots: list[CandidateSlot]


class GridRequest(BaseModel):
    start_date: date
    end_date: date
    mode: EnumerationMode = EnumerationMode.EXTENDED
    now: datetime | None = None
    snapshot: AvailabilitySnapshot


class CalendarRequest(BaseModel):
    mode: ViewMode = ViewMode.MONTH
    anchor: date
    today: date | None = None
    snapshot: AvailabilitySnapshot


class DayViewRequest(BaseModel):
    date: date
    now: datetime | None = None
    snapshot: AvailabilitySnapshot


class SlotCheckRequest(BaseModel):
    space_id: int
    date: date
    hour: int = Field(ge=0, le=23)
    now: datetime | None = None
    snapshot: AvailabilitySnapshot
