"""Booking selection, submission and cancellation schemas."""

from __future__ import annotations

import enum
from datetime import datetime

from pydantic import BaseModel, Field, computed_field

from omma.schemas.availability import AvailabilitySnapshot, CandidateSlot, Reservation


class ReservationRequest(BaseModel):
    """Create payload for one booked hour.

    Times are timezone-aware and serialize with an explicit UTC offset.
    """

    space_id: int
    start_time: datetime
    end_time: datetime


class QuoteOutcome(str, enum.Enum):
    READY = "ready"
    PENDING_APPROVAL = "pending_approval"
    SLOT_UNAVAILABLE = "slot_unavailable"
    INSUFFICIENT_CREDITS = "insufficient_credits"
    EMPTY_SELECTION = "empty_selection"


class BookingQuote(BaseModel):
    """Advisory cost and credit check for a multi-hour selection."""

    outcome: QuoteOutcome
    total_cost: int
    active_credits: int
    hours: int
    special_hours: int
    unavailable: list[CandidateSlot] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def can_submit(self) -> bool:
        return self.outcome in {QuoteOutcome.READY, QuoteOutcome.PENDING_APPROVAL}


class AttemptState(str, enum.Enum):
    IDLE = "idle"
    SLOTS_SELECTED = "slots_selected"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class HourStatus(str, enum.Enum):
    SUCCEEDED = "succeeded"
    REJECTED = "rejected"
    FAILED = "failed"


class HourResult(BaseModel):
    """Outcome of the create call for one selected hour."""

    slot: CandidateSlot
    request: ReservationRequest
    status: HourStatus
    reservation_id: int | None = None
    error: str | None = None


class BatchOutcome(str, enum.Enum):
    SUCCEEDED = "succeeded"
    PARTIAL_FAILURE = "partial_failure"
    FAILED = "failed"


class BatchSubmissionResult(BaseModel):
    outcome: BatchOutcome
    results: list[HourResult]

    @property
    def succeeded(self) -> list[HourResult]:
        return [result for result in self.results if result.status is HourStatus.SUCCEEDED]

    @property
    def failed(self) -> list[HourResult]:
        return [result for result in self.results if result.status is not HourStatus.SUCCEEDED]


class CancellationState(BaseModel):
    can_cancel: bool
    has_penalty: bool


class CancellationRequest(BaseModel):
    """Payload handed to the cancellation endpoint."""

    reservation_id: int
    credits_to_refund: int = Field(ge=0)


class QuoteRequest(BaseModel):
    selection: list[CandidateSlot]
    active_credits: int = Field(ge=0)
    now: datetime | None = None
    snapshot: AvailabilitySnapshot


class ReservationRequestsBody(BaseModel):
    selection: list[CandidateSlot]


class CancellationBody(BaseModel):
    reservation: Reservation
    charged_credits: int | None = Field(default=None, ge=0)
    now: datetime | None = None


class CancellationDecision(BaseModel):
    reservation_id: int
    state: CancellationState
    request: CancellationRequest | None = None

