"""
Log Run Use Case - the run pipeline.

AICODE-NOTE: streak day -> XP -> persist run (one insert with all XP fields)
-> reconcile totals -> refresh streak counters. Everything after the
read-only fetches happens under the per-user lock.
"""

import asyncio
import logging
import math
from dataclasses import dataclass
from datetime import date, datetime

from runquest.core.domain.streaks import streak_day_for, unique_active_days
from runquest.core.domain.xp import XPResult, calculate_complete_run_xp
from runquest.core.errors import ComputationError, DuplicateRunError, InvalidInputError, RunQuestError
from runquest.core.use_cases.reconcile_totals import reconcile_user_totals_locked
from runquest.core.use_cases.user_streaks import refresh_user_streaks
from runquest.database.models import RunSource
from runquest.services.user_locks import user_locks
from runquest.storage import run_repo, settings_repo, user_repo

logger = logging.getLogger(__name__)


@dataclass
class RunLogResult:
    """Result of logging a run."""

    success: bool
    run_id: int | None = None
    streak_day: int = 0
    xp: XPResult | None = None
    total_xp: int = 0
    current_streak: int = 0
    duplicate: bool = False
    totals_reconciled: bool = False
    error_message: str = ""


@dataclass
class XPPreview:
    """XP a run would get, without saving it."""

    run_date: date
    distance: float
    streak_day: int
    xp: XPResult


def parse_run_date(value: date | str) -> date:
    """Accept a date or an ISO 'YYYY-MM-DD' (or ISO timestamp) string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            pass
    raise InvalidInputError(f"Malformed run date: {value!r}")


def validate_distance(distance: float) -> float:
    try:
        distance = float(distance)
    except (TypeError, ValueError):
        raise InvalidInputError(f"Distance must be a number, got {distance!r}") from None
    if not math.isfinite(distance) or distance < 0:
        raise InvalidInputError(f"Distance must be a non-negative number, got {distance}")
    return distance


class LogRunUseCase:
    """Use-case for logging a run (manual entry or external import)."""

    async def calculate(self, user_id: int, run_date: date, distance: float) -> XPPreview:
        """
        Streak day and XP for a (user, date, distance) triple.

        Scoring config, multipliers and run dates are read concurrently; they
        are all read-only.
        """
        run_dates, scoring, multipliers = await asyncio.gather(
            run_repo.get_run_dates(user_id),
            settings_repo.get_scoring_config(),
            settings_repo.get_streak_multipliers(),
        )
        streak_day = streak_day_for(unique_active_days(run_dates), run_date)
        xp = calculate_complete_run_xp(distance, streak_day, scoring, multipliers)
        return XPPreview(
            run_date=run_date,
            distance=distance,
            streak_day=streak_day,
            xp=xp,
        )

    async def preview(
        self, user_id: int, run_date: date | str, distance: float
    ) -> XPPreview:
        """XP preview for the run logger UI. Nothing is written."""
        return await self.calculate(
            user_id, parse_run_date(run_date), validate_distance(distance)
        )

    async def execute(
        self,
        user_id: int,
        run_date: date | str,
        distance: float,
        source: str = RunSource.MANUAL,
        external_id: str | None = None,
        today: date | None = None,
        fail_fast: bool = False,
    ) -> RunLogResult:
        """
        Log a run.

        Args:
            user_id: User ID
            run_date: calendar day of the run
            distance: km
            source: manual | strava
            external_id: activity id from the external feed
            today: evaluation day for the current streak (tests)
            fail_fast: abort before persisting when computed XP <= 0

        Returns:
            RunLogResult; duplicate imports come back with duplicate=True

        Raises:
            InvalidInputError: bad date or distance (nothing persisted)
            UpstreamFetchError: run dates / settings could not be read
            PersistenceError: insert failed
            ComputationError: fail_fast and XP <= 0
        """
        run_date = parse_run_date(run_date)
        distance = validate_distance(distance)
        if today is None:
            today = date.today()

        user = await user_repo.get_user(user_id)
        if user is None:
            return RunLogResult(success=False, error_message="User not found")

        async with user_locks.hold(user_id):
            preview = await self.calculate(user_id, run_date, distance)
            xp = preview.xp

            if fail_fast and xp.final_xp <= 0:
                raise ComputationError(
                    f"XP calculation failed: {distance}km resulted in {xp.final_xp} XP"
                )

            try:
                run = await run_repo.create_run(
                    user_id=user_id,
                    run_date=run_date,
                    distance=distance,
                    xp=xp,
                    streak_day=preview.streak_day,
                    source=source,
                    external_id=external_id,
                )
            except DuplicateRunError as e:
                logger.info(f"Skipping duplicate run for user {user_id}: {e}")
                return RunLogResult(
                    success=False,
                    duplicate=True,
                    streak_day=preview.streak_day,
                    xp=xp,
                    error_message=str(e),
                )

            logger.info(
                f"Run {run.id} logged for user {user_id}: {distance}km on {run_date}, "
                f"streak day {preview.streak_day}, +{xp.final_xp} XP"
            )

            result = RunLogResult(
                success=True,
                run_id=run.id,
                streak_day=preview.streak_day,
                xp=xp,
            )

            # The run is committed; a failing refresh is reported, not raised
            try:
                totals = await reconcile_user_totals_locked(user_id)
                streaks = await refresh_user_streaks(user_id, today)
            except RunQuestError as e:
                logger.error(f"Run {run.id} saved but totals not reconciled: {e}")
                result.error_message = f"Totals not reconciled: {e}"
                return result

            result.total_xp = totals.total_xp
            result.current_streak = streaks.current_streak
            result.totals_reconciled = True
            return result


log_run_use_case = LogRunUseCase()
