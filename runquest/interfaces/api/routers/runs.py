"""
Runs API router.

Endpoints:
- POST /api/runs - Log a manual run
- GET /api/runs - Run history (one user or the whole group)
- PUT /api/runs/{id} - Edit date/distance of a run
- DELETE /api/runs/{id} - Delete a run and reprocess the user's runs
- POST /api/xp/preview - XP a run would earn, nothing saved
"""

import logging

from fastapi import APIRouter, HTTPException, Query, status

from runquest.core.use_cases.log_run import log_run_use_case
from runquest.core.use_cases.reprocess_runs import delete_run_use_case, update_run_use_case
from runquest.interfaces.api.schemas import (
    DeleteRunResponse,
    RunCreateRequest,
    RunCreateResponse,
    RunResponse,
    RunsListResponse,
    RunUpdateRequest,
    RunUpdateResponse,
    XPBreakdownResponse,
    XPPreviewRequest,
    XPPreviewResponse,
)
from runquest.storage import run_repo

router = APIRouter(prefix="/api", tags=["runs"])
logger = logging.getLogger(__name__)


@router.post("/runs", response_model=RunCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_run(body: RunCreateRequest) -> RunCreateResponse:
    """
    Log a manual run.

    Returns the assigned streak day, the full XP breakdown and the refreshed
    totals.
    """
    result = await log_run_use_case.execute(
        user_id=body.user_id, run_date=body.date, distance=body.distance
    )

    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=result.error_message,
        )

    return RunCreateResponse(
        success=True,
        run_id=result.run_id,
        streak_day=result.streak_day,
        xp=XPBreakdownResponse.model_validate(result.xp),
        total_xp=result.total_xp,
        current_streak=result.current_streak,
        totals_reconciled=result.totals_reconciled,
        message=result.error_message,
    )


@router.get("/runs", response_model=RunsListResponse)
async def list_runs(
    user_id: int | None = Query(default=None, description="Only this user's runs"),
    limit: int = Query(default=100, ge=1, le=500),
) -> RunsListResponse:
    """Latest runs, newest first."""
    runs = await run_repo.get_recent_runs(user_id=user_id, limit=limit)
    return RunsListResponse(
        runs=[RunResponse.model_validate(run) for run in runs],
        total=len(runs),
    )


@router.put("/runs/{run_id}", response_model=RunUpdateResponse)
async def update_run(run_id: int, body: RunUpdateRequest) -> RunUpdateResponse:
    """Edit a run; a date change restamps every run of the user."""
    result = await update_run_use_case.execute(
        run_id=run_id, user_id=body.user_id, distance=body.distance, run_date=body.date
    )

    if not result.success:
        code = (
            status.HTTP_404_NOT_FOUND
            if result.error_message == "Run not found"
            else status.HTTP_403_FORBIDDEN
        )
        raise HTTPException(status_code=code, detail=result.error_message)

    return RunUpdateResponse.model_validate(result)


@router.delete("/runs/{run_id}", response_model=DeleteRunResponse)
async def delete_run(
    run_id: int, user_id: int = Query(..., description="Owner of the run")
) -> DeleteRunResponse:
    """Delete a run; later streak days and all totals are recomputed."""
    result = await delete_run_use_case.execute(run_id=run_id, user_id=user_id)

    if not result.success:
        code = (
            status.HTTP_404_NOT_FOUND
            if result.error_message == "Run not found"
            else status.HTTP_403_FORBIDDEN
        )
        raise HTTPException(status_code=code, detail=result.error_message)

    return DeleteRunResponse(success=True, total_xp=result.total_xp)


@router.post("/xp/preview", response_model=XPPreviewResponse)
async def preview_xp(body: XPPreviewRequest) -> XPPreviewResponse:
    """XP preview for the run logger."""
    preview = await log_run_use_case.preview(body.user_id, body.date, body.distance)
    return XPPreviewResponse(
        date=preview.run_date,
        distance=preview.distance,
        streak_day=preview.streak_day,
        xp=XPBreakdownResponse.model_validate(preview.xp),
    )
