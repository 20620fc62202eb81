"""Service layer exports."""
from omma.services import (
    availability_service,
    booking_service,
    calendar_service,
    cancellation_service,
    conflict_service,
    dashboard_service,
    slot_service,
    snapshot_service,
)

__all__ = [
    "availability_service",
    "booking_service",
    "calendar_service",
    "cancellation_service",
    "conflict_service",
    "dashboard_service",
    "slot_service",
    "snapshot_service",
]
