"""Availability API: calendar windows, slot grids and single-slot checks."""
from __future__ import annotations

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from omma.api import deps
from omma.core.errors import SnapshotIncompleteError
from omma.core.settings import EngineConfig
from omma.schemas.availability import (
    CalendarRequest,
    CalendarView,
    CalendarWindow,
    CandidateSlot,
    DayViewRequest,
    DayViewRow,
    GridRequest,
    SlotCheck,
    SlotCheckRequest,
    ViewMode,
)
from omma.services import availability_service, calendar_service

router = APIRouter()


@router.get(
    "/window",
    response_model=CalendarWindow,
    summary="Date range rendered for a calendar view",
)
async def get_window(
    anchor: date,
    mode: Annotated[ViewMode, Query()] = ViewMode.MONTH,
) -> CalendarWindow:
    return calendar_service.window_for(mode, anchor)


@router.post(
    "/grid",
    response_model=list[CandidateSlot],
    summary="Enumerate and resolve candidate slots for a date range",
)
async def post_grid(
    payload: GridRequest,
    config: Annotated[EngineConfig, Depends(deps.get_config)],
) -> list[CandidateSlot]:
    if payload.start_date > payload.end_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="start_date must be on or before end_date",
        )
    return availability_service.availability_grid(
        payload.start_date,
        payload.end_date,
        payload.snapshot,
        now=deps.resolve_now(payload.now),
        config=config,
        mode=payload.mode,
    )


@router.post(
    "/calendar",
    response_model=CalendarView,
    summary="Calendar grid with day-enabled flags",
)
async def post_calendar(
    payload: CalendarRequest,
    config: Annotated[EngineConfig, Depends(deps.get_config)],
) -> CalendarView:
    today = payload.today or deps.local_today(config)
    return calendar_service.build_calendar(
        payload.mode,
        payload.anchor,
        payload.snapshot,
        today=today,
        config=config,
    )


@router.post(
    "/day-view",
    response_model=list[DayViewRow],
    summary="Hour rows for the booking day view",
)
async def post_day_view(
    payload: DayViewRequest,
    config: Annotated[EngineConfig, Depends(deps.get_config)],
) -> list[DayViewRow]:
    return availability_service.build_day_view(
        payload.date,
        payload.snapshot,
        now=deps.resolve_now(payload.now),
        config=config,
    )


@router.post(
    "/check",
    response_model=SlotCheck,
    summary="Validate one slot before submission",
)
async def post_check(
    payload: SlotCheckRequest,
    config: Annotated[EngineConfig, Depends(deps.get_config)],
) -> SlotCheck:
    try:
        return availability_service.check_slot(
            payload.space_id,
            payload.date,
            payload.hour,
            payload.snapshot,
            now=deps.resolve_now(payload.now),
            config=config,
        )
    except SnapshotIncompleteError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
