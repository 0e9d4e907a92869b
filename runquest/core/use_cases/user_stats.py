"""
User Stats Use Case - profile numbers for the dashboard.
"""

from dataclasses import dataclass
from datetime import date

from runquest.core.domain.levels import LevelProgress
from runquest.core.use_cases.user_streaks import StreakSnapshot, get_streak_snapshot
from runquest.storage import settings_repo, user_repo


@dataclass
class UserStats:
    user_id: int
    name: str
    total_xp: int
    total_distance: float
    total_runs: int
    level: LevelProgress
    streak: StreakSnapshot


async def get_user_stats(user_id: int, today: date | None = None) -> UserStats | None:
    """
    Aggregates + level progress + live streak.

    The streak is computed from the run dates, not read from the user row;
    if that read fails the snapshot is marked degraded instead of showing 0.
    """
    user = await user_repo.get_user(user_id)
    if user is None:
        return None

    levels = await settings_repo.get_level_table()
    streak = await get_streak_snapshot(user_id, today)

    return UserStats(
        user_id=user.id,
        name=user.name,
        total_xp=user.total_xp,
        total_distance=user.total_distance,
        total_runs=user.total_runs,
        level=levels.progress(user.total_xp),
        streak=streak,
    )
