"""
Leaderboard API router.

Endpoints:
- GET /api/leaderboard - Ranking for a metric
- GET /api/leaderboard/titles - Title holders and runners-up
"""

from fastapi import APIRouter, Query

from runquest.core.use_cases.leaderboard import get_leaderboard, get_title_standings
from runquest.interfaces.api.schemas import (
    LeaderboardEntryResponse,
    LeaderboardResponse,
    TitleStandingResponse,
)

router = APIRouter(prefix="/api/leaderboard", tags=["leaderboard"])


@router.get("", response_model=LeaderboardResponse)
async def leaderboard(
    metric: str = Query(default="xp"),
    limit: int = Query(default=10, ge=1, le=100),
) -> LeaderboardResponse:
    entries = await get_leaderboard(metric, limit=limit)
    return LeaderboardResponse(
        metric=metric,
        entries=[LeaderboardEntryResponse.model_validate(e) for e in entries],
    )


@router.get("/titles", response_model=list[TitleStandingResponse])
async def titles() -> list[TitleStandingResponse]:
    standings = await get_title_standings()
    return [
        TitleStandingResponse(
            id=s.title.id,
            name=s.title.name,
            description=s.title.description,
            metric=s.title.metric,
            holder=LeaderboardEntryResponse.model_validate(s.holder) if s.holder else None,
            runners_up=[LeaderboardEntryResponse.model_validate(e) for e in s.runners_up],
        )
        for s in standings
    ]
