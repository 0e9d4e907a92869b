"""
User Streaks Use Case - read run dates, run the streak engine, store counters.
"""

import logging
from dataclasses import dataclass
from datetime import date

from runquest.core.domain.streaks import StreakResult, calculate_streaks
from runquest.core.errors import ReconciliationError, UpstreamFetchError
from runquest.storage import run_repo, user_repo

logger = logging.getLogger(__name__)


@dataclass
class StreakSnapshot:
    """
    Streak state for display.

    degraded=True means the run dates could not be read: the zeros are
    "unknown", not "no streak".
    """

    current_streak: int
    longest_streak: int
    degraded: bool = False
    error_message: str = ""


async def get_user_streaks(
    user_id: int, today: date | None = None, candidate_day: date | None = None
) -> StreakResult:
    """
    Streaks from the persisted run dates (+ optional not-yet-saved date).

    Raises:
        UpstreamFetchError: run dates could not be read
    """
    if today is None:
        today = date.today()

    run_dates = await run_repo.get_run_dates(user_id)
    return calculate_streaks(run_dates, today, candidate_day=candidate_day)


async def get_streak_snapshot(user_id: int, today: date | None = None) -> StreakSnapshot:
    """Display variant of get_user_streaks that marks fetch failures."""
    try:
        result = await get_user_streaks(user_id, today)
    except UpstreamFetchError as e:
        logger.error(f"Streak lookup degraded for user {user_id}: {e}")
        return StreakSnapshot(
            current_streak=0, longest_streak=0, degraded=True, error_message=str(e)
        )
    return StreakSnapshot(
        current_streak=result.current_streak, longest_streak=result.longest_streak
    )


async def refresh_user_streaks(user_id: int, today: date | None = None) -> StreakResult:
    """
    Recompute and store current/longest streak on the user row.

    Raises:
        UpstreamFetchError: run dates could not be read (user row untouched)
        PersistenceError: user row could not be written
        ReconciliationError: user does not exist
    """
    user = await user_repo.get_user(user_id)
    if user is None:
        raise ReconciliationError(user_id, "user not found")

    result = await get_user_streaks(user_id, today)
    await user_repo.update_aggregate(
        user,
        current_streak=result.current_streak,
        longest_streak=result.longest_streak,
    )
    logger.info(
        f"User {user_id} streaks refreshed: current={result.current_streak}, "
        f"longest={result.longest_streak}"
    )
    return result
