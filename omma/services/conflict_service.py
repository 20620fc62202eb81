"""Mark candidates available or occupied against existing reservations."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date, datetime
from zoneinfo import ZoneInfo

from omma.core.settings import EngineConfig
from omma.schemas.availability import CandidateSlot, Reservation, SlotState
from omma.services.time_utils import intervals_overlap, slot_interval, to_local


def is_past_slot(day: date, hour: int, *, now: datetime, tz: ZoneInfo) -> bool:
    """Past-hour rule evaluated in the local zone.

    Only the hour component of ``now`` counts, so the whole current hour is
    blocked as soon as it starts.
    """
    local_now = to_local(now, tz)
    today = local_now.date()
    if day < today:
        return True
    return day == today and hour <= local_now.hour


def _blocking_by_space(reservations: Iterable[Reservation]) -> dict[int, list[Reservation]]:
    grouped: dict[int, list[Reservation]] = {}
    for reservation in reservations:
        if reservation.blocks:
            grouped.setdefault(reservation.space_id, []).append(reservation)
    return grouped


def _first_overlap(
    reservations: Sequence[Reservation], start: datetime, end: datetime
) -> Reservation | None:
    for reservation in reservations:
        if intervals_overlap(start, end, reservation.start_time, reservation.end_time):
            return reservation
    return None


def find_conflict(
    space_id: int,
    day: date,
    hour: int,
    reservations: Iterable[Reservation],
    *,
    tz: ZoneInfo,
) -> Reservation | None:
    """Non-cancelled reservation of ``space_id`` overlapping the slot, if any."""
    start, end = slot_interval(day, hour, tz)
    return _first_overlap(_blocking_by_space(reservations).get(space_id, []), start, end)


def resolve(
    candidates: Iterable[CandidateSlot],
    reservations: Iterable[Reservation],
    *,
    now: datetime,
    config: EngineConfig,
) -> list[CandidateSlot]:
    """Return the candidates annotated with their availability.

    Candidates are never mutated; previous annotations are recomputed so the
    function is idempotent.
    """
    tz = config.tz
    by_space = _blocking_by_space(reservations)
    resolved: list[CandidateSlot] = []
    for candidate in candidates:
        if is_past_slot(candidate.date, candidate.hour, now=now, tz=tz):
            resolved.append(
                candidate.model_copy(update={"state": SlotState.PAST, "reservation_id": None})
            )
            continue
        start, end = slot_interval(candidate.date, candidate.hour, tz)
        conflict = _first_overlap(by_space.get(candidate.space_id, []), start, end)
        if conflict is not None:
            resolved.append(
                candidate.model_copy(
                    update={"state": SlotState.OCCUPIED, "reservation_id": conflict.id}
                )
            )
        else:
            resolved.append(
                candidate.model_copy(update={"state": SlotState.OPEN, "reservation_id": None})
            )
    return resolved


def is_available(
    space_id: int,
    day: date,
    hour: int,
    reservations: Iterable[Reservation],
    *,
    now: datetime,
    config: EngineConfig,
) -> bool:
    """Advisory single-slot check; the server performs the authoritative one."""
    tz = config.tz
    if is_past_slot(day, hour, now=now, tz=tz):
        return False
    return find_conflict(space_id, day, hour, reservations, tz=tz) is None
