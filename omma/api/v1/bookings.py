"""Booking helpers API: quotes, create payloads and cancellation policy."""
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from omma.api import deps
from omma.core.errors import SnapshotIncompleteError
from omma.core.settings import EngineConfig
from omma.schemas.booking import (
    BookingQuote,
    CancellationBody,
    CancellationDecision,
    QuoteRequest,
    ReservationRequest,
    ReservationRequestsBody,
)
from omma.services import booking_service, cancellation_service

router = APIRouter()


@router.post(
    "/quote",
    response_model=BookingQuote,
    summary="Cost and credit pre-check for a selection",
)
async def post_quote(
    payload: QuoteRequest,
    config: Annotated[EngineConfig, Depends(deps.get_config)],
) -> BookingQuote:
    try:
        return booking_service.quote_selection(
            payload.selection,
            payload.snapshot,
            active_credits=payload.active_credits,
            now=deps.resolve_now(payload.now),
            config=config,
        )
    except SnapshotIncompleteError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.post(
    "/requests",
    response_model=list[ReservationRequest],
    summary="Per-hour create payloads for a selection",
)
async def post_requests(
    payload: ReservationRequestsBody,
    config: Annotated[EngineConfig, Depends(deps.get_config)],
) -> list[ReservationRequest]:
    return booking_service.build_reservation_requests(payload.selection, config=config)


@router.post(
    "/cancellation",
    response_model=CancellationDecision,
    summary="Cancellation eligibility and refund for a reservation",
)
async def post_cancellation(
    payload: CancellationBody,
    config: Annotated[EngineConfig, Depends(deps.get_config)],
) -> CancellationDecision:
    now = deps.resolve_now(payload.now)
    state = cancellation_service.cancellation_state(payload.reservation, now=now, config=config)
    if not state.can_cancel:
        return CancellationDecision(reservation_id=payload.reservation.id, state=state)
    try:
        request = cancellation_service.plan_cancellation(
            payload.reservation,
            now=now,
            config=config,
            charged_credits=payload.charged_credits,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return CancellationDecision(reservation_id=payload.reservation.id, state=state, request=request)
