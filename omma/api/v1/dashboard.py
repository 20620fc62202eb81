"""Admin day board API."""
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from omma.api import deps
from omma.core.settings import EngineConfig
from omma.schemas.dashboard import DayBoard, DayBoardRequest
from omma.services import dashboard_service

router = APIRouter()


@router.post("/day", response_model=DayBoard, summary="Per-hour space status for one day")
async def post_day_board(
    payload: DayBoardRequest,
    config: Annotated[EngineConfig, Depends(deps.get_config)],
) -> DayBoard:
    return dashboard_service.build_day_board(payload.date, payload.snapshot, config=config)
