"""Tests for cost checks, selection state and batch submission."""

from __future__ import annotations

import asyncio
from datetime import UTC, date, datetime

import pytest

from omma.core.errors import BookingRejectedError, SnapshotIncompleteError
from omma.core.settings import EngineConfig
from omma.schemas import (
    AttemptState,
    AvailabilitySnapshot,
    BatchOutcome,
    CandidateSlot,
    ClosedDate,
    HourStatus,
    QuoteOutcome,
    Reservation,
    ReservationRequest,
    ReservationStatus,
    SlotKind,
    SlotState,
)
from omma.services import availability_service, booking_service


def _slot(day: date, hour: int, space_id: int = 5, kind: SlotKind = SlotKind.REGULAR) -> CandidateSlot:
    return CandidateSlot(date=day, hour=hour, space_id=space_id, kind=kind, state=SlotState.OPEN)


def test_total_cost_adds_special_surcharge(
    snapshot: AvailabilitySnapshot, config: EngineConfig, monday: date
) -> None:
    regular = [_slot(monday, hour) for hour in (10, 11, 12)]

    assert booking_service.total_cost(regular, snapshot.spaces, config=config) == 18

    with_special = [*regular, _slot(monday, 8, kind=SlotKind.SPECIAL)]
    assert booking_service.total_cost(with_special, snapshot.spaces, config=config) == 25


def test_total_cost_rejects_unknown_space(
    snapshot: AvailabilitySnapshot, config: EngineConfig, monday: date
) -> None:
    with pytest.raises(ValueError):
        booking_service.total_cost([_slot(monday, 10, space_id=99)], snapshot.spaces, config=config)


class TestQuoteSelection:
    def _quote(self, selection, snapshot, config, credits, now):
        return booking_service.quote_selection(
            selection, snapshot, active_credits=credits, now=now, config=config
        )

    def test_ready(self, snapshot, config, monday, before_monday) -> None:
        quote = self._quote([_slot(monday, 10), _slot(monday, 11)], snapshot, config, 20, before_monday)
        assert quote.outcome is QuoteOutcome.READY
        assert quote.total_cost == 12
        assert quote.hours == 2
        assert quote.can_submit

    def test_special_hours_need_approval(self, snapshot, config, monday, before_monday) -> None:
        selection = [_slot(monday, 10), _slot(monday, 19, kind=SlotKind.SPECIAL)]
        quote = self._quote(selection, snapshot, config, 20, before_monday)
        assert quote.outcome is QuoteOutcome.PENDING_APPROVAL
        assert quote.total_cost == 13
        assert quote.special_hours == 1
        assert quote.can_submit

    def test_insufficient_credits(self, snapshot, config, monday, before_monday) -> None:
        selection = [_slot(monday, hour) for hour in (10, 11, 12)]
        quote = self._quote(selection, snapshot, config, 17, before_monday)
        assert quote.outcome is QuoteOutcome.INSUFFICIENT_CREDITS
        assert not quote.can_submit

    def test_taken_slot_wins_over_credit_problem(
        self, snapshot, config, monday, before_monday, make_reservation
    ) -> None:
        snapshot.reservations.append(make_reservation(8, 5, monday, 11, 12))
        selection = [_slot(monday, 10), _slot(monday, 11)]
        quote = self._quote(selection, snapshot, config, 0, before_monday)
        assert quote.outcome is QuoteOutcome.SLOT_UNAVAILABLE
        assert [slot.hour for slot in quote.unavailable] == [11]
        assert quote.unavailable[0].reservation_id == 8

    def test_elapsed_hour_is_unavailable(self, snapshot, config, monday) -> None:
        now = datetime(2025, 1, 6, 16, 30, tzinfo=UTC)  # 10:30 local
        quote = self._quote([_slot(monday, 10)], snapshot, config, 100, now)
        assert quote.outcome is QuoteOutcome.SLOT_UNAVAILABLE

    def test_empty_selection(self, snapshot, config, before_monday) -> None:
        quote = self._quote([], snapshot, config, 10, before_monday)
        assert quote.outcome is QuoteOutcome.EMPTY_SELECTION
        assert not quote.can_submit

    def test_closed_date_makes_selection_unavailable(
        self, snapshot, config, monday, before_monday
    ) -> None:
        snapshot.closed_dates.append(ClosedDate(date=monday, reason="Mantenimiento"))
        quote = self._quote([_slot(monday, 10)], snapshot, config, 100, before_monday)
        assert quote.outcome is QuoteOutcome.SLOT_UNAVAILABLE
        assert [slot.key for slot in quote.unavailable] == [(monday, 10, 5)]
        assert quote.unavailable[0].state is SlotState.NOT_OFFERED
        assert not quote.can_submit

    def test_kind_comes_from_the_snapshot(self, snapshot, config, monday, before_monday) -> None:
        after_hours = _slot(monday, 20, kind=SlotKind.REGULAR)
        quote = self._quote([after_hours], snapshot, config, 100, before_monday)
        assert quote.outcome is QuoteOutcome.PENDING_APPROVAL
        assert quote.total_cost == 7
        assert quote.special_hours == 1

        mislabelled = _slot(monday, 10, kind=SlotKind.SPECIAL)
        quote = self._quote([mislabelled], snapshot, config, 100, before_monday)
        assert quote.outcome is QuoteOutcome.READY
        assert quote.total_cost == 6

    def test_hour_outside_space_schedule_is_unavailable(
        self, snapshot, config, monday, before_monday
    ) -> None:
        selection = [_slot(monday, 12, space_id=7), _slot(monday, 10, space_id=7)]
        quote = self._quote(selection, snapshot, config, 100, before_monday)
        assert quote.outcome is QuoteOutcome.SLOT_UNAVAILABLE
        assert [slot.hour for slot in quote.unavailable] == [10]
        assert quote.total_cost == 4

    def test_unknown_space_is_an_error(self, snapshot, config, monday, before_monday) -> None:
        with pytest.raises(ValueError):
            self._quote([_slot(monday, 10, space_id=99)], snapshot, config, 100, before_monday)

    def test_display_only_snapshot(self, snapshot, config, monday, before_monday) -> None:
        snapshot.display_only = True
        with pytest.raises(SnapshotIncompleteError):
            self._quote([_slot(monday, 10)], snapshot, config, 10, before_monday)


def test_reservation_request_carries_local_offset(config: EngineConfig, monday: date) -> None:
    request = booking_service.build_reservation_request(_slot(monday, 14), config=config)

    assert request.space_id == 5
    assert request.start_time.isoformat() == "2025-01-06T14:00:00-06:00"
    assert request.end_time.isoformat() == "2025-01-06T15:00:00-06:00"
    assert request.start_time.astimezone(UTC) == datetime(2025, 1, 6, 20, tzinfo=UTC)


def test_round_trip_request_blocks_its_own_slot(
    snapshot: AvailabilitySnapshot, config: EngineConfig, monday: date, before_monday: datetime
) -> None:
    (request,) = booking_service.build_reservation_requests([_slot(monday, 14)], config=config)
    snapshot.reservations.append(
        Reservation(
            id=1,
            space_id=request.space_id,
            start_time=request.start_time,
            end_time=request.end_time,
            status=ReservationStatus.PENDING,
        )
    )

    grid = availability_service.availability_grid(
        monday, monday, snapshot, now=before_monday, config=config
    )
    states = {(slot.hour, slot.space_id): slot.state for slot in grid}

    assert states[(14, 5)] is SlotState.OCCUPIED
    assert states[(13, 5)] is SlotState.OPEN
    assert states[(14, 7)] is SlotState.OPEN


class TestSlotSelection:
    def test_toggle_and_ordering(self, monday) -> None:
        selection = booking_service.SlotSelection()
        later = _slot(monday, 15)
        earlier = _slot(monday, 9)

        assert selection.toggle(later) is True
        assert selection.toggle(earlier) is True
        assert [slot.hour for slot in selection.slots] == [9, 15]
        assert later in selection

        assert selection.toggle(later) is False
        assert later not in selection
        assert len(selection) == 1

    def test_selection_is_keyed_by_date_hour_space(self, monday) -> None:
        selection = booking_service.SlotSelection()
        selection.select(_slot(monday, 10))
        selection.select(_slot(monday, 10))
        selection.select(_slot(monday, 10, space_id=7))
        assert len(selection) == 2

    def test_unavailable_slot_cannot_be_selected(self, monday) -> None:
        selection = booking_service.SlotSelection()
        taken = _slot(monday, 10).model_copy(update={"state": SlotState.OCCUPIED})
        with pytest.raises(ValueError):
            selection.select(taken)

    def test_unresolved_candidates_cannot_be_selected(self, monday) -> None:
        from_enumerator = CandidateSlot(date=monday, hour=10, space_id=5, kind=SlotKind.REGULAR)
        assert from_enumerator.state is SlotState.UNRESOLVED
        assert not from_enumerator.is_available
        with pytest.raises(ValueError):
            booking_service.SlotSelection().select(from_enumerator)

    def test_has_special(self, monday) -> None:
        selection = booking_service.SlotSelection()
        selection.select(_slot(monday, 10))
        assert not selection.has_special
        selection.select(_slot(monday, 20, kind=SlotKind.SPECIAL))
        assert selection.has_special

    def test_selecting_does_not_mutate_slots(self, monday) -> None:
        slot = _slot(monday, 10)
        booking_service.SlotSelection().select(slot)
        assert slot.model_dump() == _slot(monday, 10).model_dump()


class TestBookingAttempt:
    def test_selection_drives_state(self, config, monday) -> None:
        attempt = booking_service.BookingAttempt(config=config)
        assert attempt.state is AttemptState.IDLE

        slot = _slot(monday, 10)
        attempt.select(slot)
        assert attempt.state is AttemptState.SLOTS_SELECTED

        attempt.deselect(slot)
        assert attempt.state is AttemptState.IDLE

    @pytest.mark.asyncio
    async def test_submit_requires_selection(self, config) -> None:
        attempt = booking_service.BookingAttempt(config=config)

        async def create(request: ReservationRequest) -> int:
            return 1

        with pytest.raises(ValueError):
            await attempt.submit(create)

    @pytest.mark.asyncio
    async def test_all_hours_succeed(self, config, monday) -> None:
        attempt = booking_service.BookingAttempt(config=config)
        for hour in (11, 10):
            attempt.select(_slot(monday, hour))
        seen: list[ReservationRequest] = []

        async def create(request: ReservationRequest) -> dict:
            seen.append(request)
            return {"id": 100 + request.start_time.hour}

        result = await attempt.submit(create)

        assert result.outcome is BatchOutcome.SUCCEEDED
        assert [item.reservation_id for item in result.results] == [110, 111]
        assert len(seen) == 2
        assert attempt.state is AttemptState.SUCCEEDED
        assert len(attempt.selection) == 0

    @pytest.mark.asyncio
    async def test_partial_failure_reports_each_hour(self, config, monday) -> None:
        attempt = booking_service.BookingAttempt(config=config)
        for hour in (10, 11, 12):
            attempt.select(_slot(monday, hour))

        async def create(request: ReservationRequest) -> int:
            await asyncio.sleep(0)
            if request.start_time.hour == 11:
                raise BookingRejectedError(reason="conflict")
            if request.start_time.hour == 12:
                raise RuntimeError("gateway timeout")
            return 7

        result = await attempt.submit(create)

        assert result.outcome is BatchOutcome.PARTIAL_FAILURE
        assert [item.status for item in result.results] == [
            HourStatus.SUCCEEDED,
            HourStatus.REJECTED,
            HourStatus.FAILED,
        ]
        assert result.results[0].reservation_id == 7
        assert result.results[2].error == "gateway timeout"
        assert len(result.succeeded) == 1
        assert len(result.failed) == 2
        assert attempt.state is AttemptState.FAILED
        assert len(attempt.selection) == 3

    @pytest.mark.asyncio
    async def test_every_hour_rejected(self, config, monday) -> None:
        attempt = booking_service.BookingAttempt(config=config)
        attempt.select(_slot(monday, 10))

        async def create(request: ReservationRequest) -> None:
            raise BookingRejectedError()

        result = await attempt.submit(create)

        assert result.outcome is BatchOutcome.FAILED
        assert result.results[0].status is HourStatus.REJECTED
        assert attempt.state is AttemptState.FAILED

        attempt.reset()
        assert attempt.state is AttemptState.IDLE
        assert attempt.result is None
