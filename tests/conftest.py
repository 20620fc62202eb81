"""Test fixtures for the OMMA availability engine."""
from __future__ import annotations

import os
from collections.abc import AsyncIterator
from datetime import UTC, date, datetime, time, timedelta
from zoneinfo import ZoneInfo

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("OMMA_TIMEZONE", "America/Mexico_City")

from omma.core.settings import EngineConfig
from omma.main import app
from omma.schemas import (
    AvailabilitySnapshot,
    BusinessHour,
    ClosedDate,
    Reservation,
    ReservationStatus,
    Space,
    SpaceSchedule,
)

MEXICO_CITY = "America/Mexico_City"
# Monday; Mexico City has stayed on UTC-6 all year since 2022.
MONDAY = date(2025, 1, 6)


def local_reservation(
    reservation_id: int,
    space_id: int,
    day: date,
    start_hour: int,
    end_hour: int,
    status: ReservationStatus = ReservationStatus.CONFIRMED,
    cost_credits: int | None = 6,
) -> Reservation:
    """Reservation whose times are given as Mexico City wall-clock hours.

    Times are reported in UTC, as the backend does; ``end_hour`` may be 24.
    """
    midnight = datetime.combine(day, time.min, tzinfo=ZoneInfo(MEXICO_CITY))
    return Reservation(
        id=reservation_id,
        space_id=space_id,
        start_time=(midnight + timedelta(hours=start_hour)).astimezone(UTC),
        end_time=(midnight + timedelta(hours=end_hour)).astimezone(UTC),
        status=status,
        cost_credits=cost_credits,
    )


@pytest.fixture()
def config() -> EngineConfig:
    return EngineConfig(timezone=MEXICO_CITY)


@pytest.fixture()
def before_monday() -> datetime:
    """An instant safely before every slot of ``MONDAY``."""
    return datetime(2025, 1, 1, 12, 0, tzinfo=UTC)


@pytest.fixture()
def spaces() -> list[Space]:
    return [
        Space(id=5, name="Consultorio 5", cost_credits=6, capacity=2),
        Space(id=7, name="Sala 7", cost_credits=4, capacity=6),
    ]


@pytest.fixture()
def business_hours() -> list[BusinessHour]:
    hours = [
        BusinessHour(day_of_week=weekday, start_time="09:00", end_time="18:00")
        for weekday in range(1, 6)
    ]
    hours.append(BusinessHour(day_of_week=6, start_time="10:00", end_time="14:00"))
    hours.append(BusinessHour(day_of_week=0, start_time="09:00", end_time="18:00", is_closed=True))
    return hours


@pytest.fixture()
def space_schedules() -> list[SpaceSchedule]:
    return [
        SpaceSchedule(space_id=5, day_of_week=1, start_time="09:00", end_time="18:00"),
        SpaceSchedule(space_id=7, day_of_week=1, start_time="12:00", end_time="16:00"),
    ]


@pytest.fixture()
def snapshot(
    spaces: list[Space],
    business_hours: list[BusinessHour],
    space_schedules: list[SpaceSchedule],
) -> AvailabilitySnapshot:
    return AvailabilitySnapshot(
        spaces=spaces,
        business_hours=business_hours,
        space_schedules=space_schedules,
        closed_dates=[ClosedDate(date=date(2025, 1, 1), reason="Año nuevo")],
        reservations=[],
    )


@pytest_asyncio.fixture()
async def client() -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as async_client:
        yield async_client


@pytest.fixture()
def monday() -> date:
    return MONDAY


@pytest.fixture()
def make_reservation():
    return local_reservation
