"""Selection state, cost checks and per-hour batch submission."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable, Sequence
from datetime import date, datetime
from typing import Any

from omma.core.errors import BookingRejectedError
from omma.core.settings import EngineConfig
from omma.schemas.availability import (
    AvailabilitySnapshot,
    CandidateSlot,
    Reservation,
    SlotState,
    Space,
)
from omma.schemas.booking import (
    AttemptState,
    BatchOutcome,
    BatchSubmissionResult,
    BookingQuote,
    HourResult,
    HourStatus,
    QuoteOutcome,
    ReservationRequest,
)
from omma.services import conflict_service, slot_service
from omma.services.availability_service import ensure_authoritative
from omma.services.time_utils import slot_interval

logger = logging.getLogger(__name__)

CreateReservation = Callable[[ReservationRequest], Awaitable[Any]]


def slot_cost(slot: CandidateSlot, space: Space, *, config: EngineConfig) -> int:
    surcharge = config.special_surcharge_credits if slot.is_special else 0
    return space.cost_credits + surcharge


def total_cost(
    selection: Iterable[CandidateSlot],
    spaces: Sequence[Space],
    *,
    config: EngineConfig,
) -> int:
    """Credits needed to book every selected hour, special surcharge included."""
    by_id = {space.id: space for space in spaces}
    total = 0
    for slot in selection:
        space = by_id.get(slot.space_id)
        if space is None:
            raise ValueError(f"Unknown space {slot.space_id}")
        total += slot_cost(slot, space, config=config)
    return total


def _rebuild_selection(
    selection: Sequence[CandidateSlot],
    snapshot: AvailabilitySnapshot,
    *,
    config: EngineConfig,
) -> tuple[list[CandidateSlot], list[CandidateSlot]]:
    """Split ``selection`` into snapshot-enumerated slots and slots no longer offered."""
    known = {space.id for space in snapshot.spaces}
    by_day: dict[date, dict[tuple[date, int, int], CandidateSlot]] = {}
    offered: list[CandidateSlot] = []
    not_offered: list[CandidateSlot] = []
    for slot in selection:
        if slot.space_id not in known:
            raise ValueError(f"Unknown space {slot.space_id}")
        if slot.date not in by_day:
            by_day[slot.date] = {
                candidate.key: candidate
                for candidate in slot_service.enumerate_day(
                    slot.date,
                    business_hours=snapshot.business_hours,
                    space_schedules=snapshot.space_schedules,
                    closed_dates=snapshot.closed_dates,
                    spaces=snapshot.spaces,
                    config=config,
                )
            }
        candidate = by_day[slot.date].get(slot.key)
        if candidate is None:
            not_offered.append(
                slot.model_copy(update={"state": SlotState.NOT_OFFERED, "reservation_id": None})
            )
        else:
            offered.append(candidate)
    return offered, not_offered


def quote_selection(
    selection: Sequence[CandidateSlot],
    snapshot: AvailabilitySnapshot,
    *,
    active_credits: int,
    now: datetime,
    config: EngineConfig,
) -> BookingQuote:
    """Advisory pre-check run before a batch is submitted.

    Every selected slot is rebuilt from the snapshot, so its kind and cost
    never come from the caller. Slots the snapshot no longer offers, or that
    were taken since selection, are reported as unavailable rather than as a
    credit problem.
    """
    ensure_authoritative(snapshot)
    if not selection:
        return BookingQuote(
            outcome=QuoteOutcome.EMPTY_SELECTION,
            total_cost=0,
            active_credits=active_credits,
            hours=0,
            special_hours=0,
        )

    offered, not_offered = _rebuild_selection(selection, snapshot, config=config)
    cost = total_cost(offered, snapshot.spaces, config=config)
    special_hours = sum(1 for slot in offered if slot.is_special)
    resolved = conflict_service.resolve(offered, snapshot.reservations, now=now, config=config)
    unavailable = sorted(
        [*not_offered, *(slot for slot in resolved if not slot.is_available)],
        key=lambda slot: slot.key,
    )

    if unavailable:
        outcome = QuoteOutcome.SLOT_UNAVAILABLE
    elif cost > active_credits:
        outcome = QuoteOutcome.INSUFFICIENT_CREDITS
    elif special_hours:
        outcome = QuoteOutcome.PENDING_APPROVAL
    else:
        outcome = QuoteOutcome.READY
    return BookingQuote(
        outcome=outcome,
        total_cost=cost,
        active_credits=active_credits,
        hours=len(selection),
        special_hours=special_hours,
        unavailable=unavailable,
    )


def build_reservation_request(slot: CandidateSlot, *, config: EngineConfig) -> ReservationRequest:
    start, end = slot_interval(slot.date, slot.hour, config.tz)
    return ReservationRequest(space_id=slot.space_id, start_time=start, end_time=end)


def build_reservation_requests(
    selection: Iterable[CandidateSlot], *, config: EngineConfig
) -> list[ReservationRequest]:
    """One create payload per selected hour, in local time with its offset."""
    return [build_reservation_request(slot, config=config) for slot in selection]


class SlotSelection:
    """Selected slots keyed by ``(date, hour, space_id)``.

    Kept apart from the candidates so the engine output stays immutable and
    can be recomputed at any time.
    """

    def __init__(self) -> None:
        self._slots: dict[tuple[date, int, int], CandidateSlot] = {}

    def __len__(self) -> int:
        return len(self._slots)

    def __contains__(self, slot: object) -> bool:
        return isinstance(slot, CandidateSlot) and slot.key in self._slots

    def select(self, slot: CandidateSlot) -> None:
        """Add ``slot``; it must come out of the resolver as open."""
        if not slot.is_available:
            raise ValueError("Only available slots can be selected")
        self._slots[slot.key] = slot

    def deselect(self, slot: CandidateSlot) -> None:
        self._slots.pop(slot.key, None)

    def toggle(self, slot: CandidateSlot) -> bool:
        """Flip the selection of ``slot`` and return whether it is now selected."""
        if slot in self:
            self.deselect(slot)
            return False
        self.select(slot)
        return True

    def clear(self) -> None:
        self._slots.clear()

    @property
    def slots(self) -> list[CandidateSlot]:
        return sorted(self._slots.values(), key=lambda slot: slot.key)

    @property
    def has_special(self) -> bool:
        return any(slot.is_special for slot in self._slots.values())


def _reservation_id(created: Any) -> int | None:
    if isinstance(created, Reservation):
        return created.id
    if isinstance(created, dict):
        value = created.get("id")
        return value if isinstance(value, int) else None
    if isinstance(created, int) and not isinstance(created, bool):
        return created
    return None


class BookingAttempt:
    """Client-visible lifecycle of one booking attempt.

    ``Idle -> SlotsSelected -> Submitting -> Succeeded | Failed``. A partial
    batch ends in ``Failed`` with a ``partial_failure`` result; nothing is
    rolled back here.
    """

    def __init__(self, *, config: EngineConfig) -> None:
        self.config = config
        self.selection = SlotSelection()
        self.state = AttemptState.IDLE
        self.result: BatchSubmissionResult | None = None

    def _ensure_editable(self) -> None:
        if self.state is AttemptState.SUBMITTING:
            raise ValueError("Cannot change the selection while submitting")

    def _sync_state(self) -> None:
        self.state = AttemptState.SLOTS_SELECTED if len(self.selection) else AttemptState.IDLE

    def select(self, slot: CandidateSlot) -> None:
        self._ensure_editable()
        self.selection.select(slot)
        self.result = None
        self._sync_state()

    def deselect(self, slot: CandidateSlot) -> None:
        self._ensure_editable()
        self.selection.deselect(slot)
        self._sync_state()

    def reset(self) -> None:
        self._ensure_editable()
        self.selection.clear()
        self.result = None
        self.state = AttemptState.IDLE

    async def submit(self, create: CreateReservation) -> BatchSubmissionResult:
        """Issue one create call per selected hour and collect every outcome."""
        if self.state is not AttemptState.SLOTS_SELECTED:
            raise ValueError("Select at least one available slot before submitting")

        slots = self.selection.slots
        requests = build_reservation_requests(slots, config=self.config)
        self.state = AttemptState.SUBMITTING
        try:
            outcomes = await asyncio.gather(
                *(create(request) for request in requests), return_exceptions=True
            )
        except BaseException:
            self.state = AttemptState.FAILED
            raise

        results: list[HourResult] = []
        for slot, request, outcome in zip(slots, requests, outcomes):
            if isinstance(outcome, BookingRejectedError):
                results.append(
                    HourResult(
                        slot=slot, request=request, status=HourStatus.REJECTED, error=str(outcome)
                    )
                )
            elif isinstance(outcome, Exception):
                logger.warning(
                    "Reservation create failed for space %s at %s: %s",
                    request.space_id,
                    request.start_time.isoformat(),
                    outcome,
                )
                results.append(
                    HourResult(
                        slot=slot, request=request, status=HourStatus.FAILED, error=str(outcome)
                    )
                )
            elif isinstance(outcome, BaseException):
                self.state = AttemptState.FAILED
                raise outcome
            else:
                results.append(
                    HourResult(
                        slot=slot,
                        request=request,
                        status=HourStatus.SUCCEEDED,
                        reservation_id=_reservation_id(outcome),
                    )
                )

        succeeded = sum(1 for result in results if result.status is HourStatus.SUCCEEDED)
        if succeeded == len(results):
            batch_outcome = BatchOutcome.SUCCEEDED
        elif succeeded:
            batch_outcome = BatchOutcome.PARTIAL_FAILURE
        else:
            batch_outcome = BatchOutcome.FAILED

        self.result = BatchSubmissionResult(outcome=batch_outcome, results=results)
        if batch_outcome is BatchOutcome.SUCCEEDED:
            self.selection.clear()
            self.state = AttemptState.SUCCEEDED
        else:
            if batch_outcome is BatchOutcome.PARTIAL_FAILURE:
                logger.warning(
                    "Partial booking: %d of %d hours created", succeeded, len(results)
                )
            self.state = AttemptState.FAILED
        return self.result
