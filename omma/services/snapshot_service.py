"""Assemble a consistent availability snapshot from concurrent fetches."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from omma.core.errors import SnapshotIncompleteError
from omma.schemas.availability import AvailabilitySnapshot, BusinessHour

logger = logging.getLogger(__name__)

Fetch = Callable[[], Awaitable[Any]]

_WRAPPER_KEYS = ("data", "schedules", "spaces", "content", "results")

# Display fallback only: Monday to Friday 09:00-18:00, weekends closed.
DEFAULT_BUSINESS_HOURS: tuple[BusinessHour, ...] = tuple(
    BusinessHour(
        day_of_week=weekday,
        start_time="09:00",
        end_time="18:00",
        is_closed=weekday in {0, 6},
    )
    for weekday in range(7)
)


def coerce_record_list(payload: Any) -> list[Any]:
    """Unwrap list responses that arrive bare or inside a wrapper object."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in _WRAPPER_KEYS:
            value = payload.get(key)
            if isinstance(value, list):
                return value
    raise ValueError(f"Unexpected list payload: {type(payload).__name__}")


async def gather_snapshot(
    *,
    fetch_spaces: Fetch,
    fetch_business_hours: Fetch,
    fetch_space_schedules: Fetch,
    fetch_closed_dates: Fetch,
    fetch_reservations: Fetch,
    fallback_business_hours: Sequence[BusinessHour] | None = None,
) -> AvailabilitySnapshot:
    """Run every fetch concurrently and join them into one snapshot.

    Any failed source aborts with a single ``SnapshotIncompleteError``. The
    only exception is business hours when ``fallback_business_hours`` is given:
    the snapshot is then built from the fallback and marked display-only.
    """
    fetches: dict[str, Fetch] = {
        "spaces": fetch_spaces,
        "business_hours": fetch_business_hours,
        "space_schedules": fetch_space_schedules,
        "closed_dates": fetch_closed_dates,
        "reservations": fetch_reservations,
    }
    outcomes = await asyncio.gather(
        *(fetch() for fetch in fetches.values()), return_exceptions=True
    )

    payloads: dict[str, Any] = {}
    failures: dict[str, BaseException] = {}
    for name, outcome in zip(fetches, outcomes):
        if isinstance(outcome, Exception):
            failures[name] = outcome
            continue
        if isinstance(outcome, BaseException):
            raise outcome
        try:
            payloads[name] = coerce_record_list(outcome)
        except ValueError as exc:
            failures[name] = exc

    display_only = False
    if "business_hours" in failures and fallback_business_hours is not None:
        logger.warning(
            "Business hours unavailable (%s); using display fallback",
            failures.pop("business_hours"),
        )
        payloads["business_hours"] = list(fallback_business_hours)
        display_only = True

    if failures:
        for name, exc in failures.items():
            logger.warning("Failed to load %s: %s", name, exc)
        raise SnapshotIncompleteError(
            f"Failed to load: {', '.join(sorted(failures))}", failures=failures
        )
    return AvailabilitySnapshot(**payloads, display_only=display_only)
