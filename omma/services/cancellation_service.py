"""Cancellation eligibility and refund policy."""

from __future__ import annotations

from datetime import datetime, timedelta

from omma.core.settings import EngineConfig
from omma.schemas.availability import Reservation, ReservationStatus
from omma.schemas.booking import CancellationRequest, CancellationState
from omma.services.time_utils import ensure_aware


def cancellation_state(
    reservation: Reservation, *, now: datetime, config: EngineConfig
) -> CancellationState:
    """Whether ``reservation`` can be cancelled now and if a late penalty applies.

    Pending requests are never penalised. Confirmed reservations starting
    within the late-cancellation window are.
    """
    if reservation.status is ReservationStatus.CANCELLED:
        return CancellationState(can_cancel=False, has_penalty=False)

    until_start = reservation.start_time - ensure_aware(now)
    can_cancel = until_start > timedelta(0)
    if reservation.status is ReservationStatus.PENDING:
        return CancellationState(can_cancel=can_cancel, has_penalty=False)

    window = timedelta(hours=config.late_cancellation_window_hours)
    return CancellationState(can_cancel=can_cancel, has_penalty=can_cancel and until_start <= window)


def credits_to_refund(
    reservation: Reservation,
    *,
    now: datetime,
    config: EngineConfig,
    charged_credits: int | None = None,
) -> int:
    """Credits returned on cancellation, net of any late penalty."""
    state = cancellation_state(reservation, now=now, config=config)
    if not state.can_cancel:
        raise ValueError("Reservation cannot be cancelled")
    charged = charged_credits if charged_credits is not None else reservation.cost_credits
    if charged is None:
        raise ValueError("Charged credits unknown for reservation")
    if state.has_penalty:
        return max(charged - config.late_cancellation_penalty_credits, 0)
    return charged


def plan_cancellation(
    reservation: Reservation,
    *,
    now: datetime,
    config: EngineConfig,
    charged_credits: int | None = None,
) -> CancellationRequest:
    return CancellationRequest(
        reservation_id=reservation.id,
        credits_to_refund=credits_to_refund(
            reservation, now=now, config=config, charged_credits=charged_credits
        ),
    )
