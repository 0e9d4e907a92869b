"""
Users API router.

Endpoints:
- GET /api/users/{id}/stats - XP, level progress, streak
- POST /api/users/{id}/import - Import external activities
"""

from fastapi import APIRouter, HTTPException, status

from runquest.core.use_cases.import_activities import ImportActivitiesUseCase
from runquest.core.use_cases.user_stats import get_user_stats
from runquest.interfaces.api.schemas import ImportRequest, ImportResponse, UserStatsResponse
from runquest.storage import user_repo

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/{user_id}/stats", response_model=UserStatsResponse)
async def user_stats(user_id: int) -> UserStatsResponse:
    """
    User statistics.

    streak.degraded=true means the streak could not be computed right now.
    """
    stats = await get_user_stats(user_id)
    if stats is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return UserStatsResponse.model_validate(stats)


@router.post("/{user_id}/import", response_model=ImportResponse)
async def import_activities(user_id: int, body: ImportRequest) -> ImportResponse:
    """Import Strava-shaped activities one by one."""
    if await user_repo.get_user(user_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )

    report = await ImportActivitiesUseCase().execute(
        user_id, body.activities, fail_fast=body.fail_fast
    )
    return ImportResponse.model_validate(report)
