"""Availability computations over a complete snapshot."""

from __future__ import annotations

import logging
from datetime import date, datetime

from omma.core.errors import SnapshotIncompleteError
from omma.core.settings import EngineConfig
from omma.schemas.availability import (
    AvailabilitySnapshot,
    CandidateSlot,
    DayViewRow,
    EnumerationMode,
    SlotCheck,
    SlotCheckOutcome,
    SlotState,
)
from omma.services import conflict_service, slot_service
from omma.services.time_utils import hour_label

logger = logging.getLogger(__name__)


def ensure_authoritative(snapshot: AvailabilitySnapshot) -> None:
    """Refuse snapshots built with display-only fallback data."""
    if snapshot.display_only:
        raise SnapshotIncompleteError(
            "Snapshot uses fallback business hours and cannot authorise bookings"
        )


def availability_grid(
    start: date,
    end: date,
    snapshot: AvailabilitySnapshot,
    *,
    now: datetime,
    config: EngineConfig,
    mode: EnumerationMode = EnumerationMode.EXTENDED,
) -> list[CandidateSlot]:
    """Enumerate and resolve every candidate in ``[start, end]``."""
    candidates = slot_service.enumerate_candidates(
        start,
        end,
        business_hours=snapshot.business_hours,
        space_schedules=snapshot.space_schedules,
        closed_dates=snapshot.closed_dates,
        spaces=snapshot.spaces,
        config=config,
        mode=mode,
    )
    return conflict_service.resolve(candidates, snapshot.reservations, now=now, config=config)


def build_day_view(
    day: date,
    snapshot: AvailabilitySnapshot,
    *,
    now: datetime,
    config: EngineConfig,
) -> list[DayViewRow]:
    """Hour rows for the booking day view.

    Every envelope hour gets a row so the grid keeps its shape; a closed date
    yields rows without slots.
    """
    slots = availability_grid(day, day, snapshot, now=now, config=config)
    by_hour: dict[int, list[CandidateSlot]] = {}
    for slot in slots:
        by_hour.setdefault(slot.hour, []).append(slot)

    opening = slot_service.business_window(day, snapshot.business_hours)
    return [
        DayViewRow(
            hour=hour,
            label=hour_label(hour),
            is_outside_business_hours=opening is None or not opening[0] <= hour < opening[1],
            slots=by_hour.get(hour, []),
        )
        for hour in config.envelope_hours
    ]


def check_slot(
    space_id: int,
    day: date,
    hour: int,
    snapshot: AvailabilitySnapshot,
    *,
    now: datetime,
    config: EngineConfig,
) -> SlotCheck:
    """Tagged pre-submission check for one slot.

    The outcome tells "slot just became unavailable" apart from "outside
    normal hours, pending approval" so callers can word each case.
    """
    ensure_authoritative(snapshot)

    def _result(outcome: SlotCheckOutcome, slot: CandidateSlot | None = None) -> SlotCheck:
        return SlotCheck(outcome=outcome, space_id=space_id, date=day, hour=hour, slot=slot)

    space = next((item for item in snapshot.spaces if item.id == space_id), None)
    if space is None or not space.is_active:
        return _result(SlotCheckOutcome.UNKNOWN_SPACE)
    if slot_service.is_closed_date(day, snapshot.closed_dates):
        return _result(SlotCheckOutcome.CLOSED)

    candidates = slot_service.enumerate_day(
        day,
        business_hours=snapshot.business_hours,
        space_schedules=snapshot.space_schedules,
        closed_dates=snapshot.closed_dates,
        spaces=[space],
        config=config,
    )
    candidate = next((item for item in candidates if item.hour == hour), None)
    if candidate is None:
        return _result(SlotCheckOutcome.NOT_OFFERED)

    (resolved,) = conflict_service.resolve(
        [candidate], snapshot.reservations, now=now, config=config
    )
    if resolved.state is SlotState.PAST:
        return _result(SlotCheckOutcome.PAST, resolved)
    if resolved.state is SlotState.OCCUPIED:
        logger.info(
            "Slot %s %02d:00 for space %s is held by reservation %s",
            day,
            hour,
            space_id,
            resolved.reservation_id,
        )
        return _result(SlotCheckOutcome.OCCUPIED, resolved)
    if resolved.is_special:
        return _result(SlotCheckOutcome.PENDING_APPROVAL, resolved)
    return _result(SlotCheckOutcome.AVAILABLE, resolved)
