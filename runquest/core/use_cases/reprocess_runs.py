"""
Reprocess Runs Use Case - restamp streak day and XP on every run of a user.

AICODE-NOTE: Needed after a run is deleted or moved to another date (the
streak days of later runs shift) and to backfill runs saved with broken XP.
Runs are processed in date order against the current scoring settings, then
totals are reconciled.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import date

from runquest.core.domain.streaks import streak_day_for, unique_active_days
from runquest.core.domain.xp import calculate_complete_run_xp
from runquest.core.use_cases.log_run import parse_run_date, validate_distance
from runquest.core.use_cases.reconcile_totals import (
    DISTANCE_TOLERANCE_KM,
    reconcile_user_totals_locked,
)
from runquest.core.use_cases.user_streaks import refresh_user_streaks
from runquest.services.user_locks import user_locks
from runquest.storage import run_repo, settings_repo

logger = logging.getLogger(__name__)


@dataclass
class ReprocessResult:
    user_id: int
    runs_processed: int = 0
    runs_updated: int = 0
    total_xp: int = 0


@dataclass
class UpdateRunResult:
    success: bool
    run_id: int | None = None
    streak_day: int = 0
    xp_gained: int = 0
    total_xp: int = 0
    reprocessed: bool = False
    error_message: str = ""


@dataclass
class DeleteRunResult:
    success: bool
    total_xp: int = 0
    error_message: str = ""


async def _reprocess_locked(user_id: int, today: date | None) -> ReprocessResult:
    runs, scoring, multipliers = await asyncio.gather(
        run_repo.get_runs(user_id),
        settings_repo.get_scoring_config(),
        settings_repo.get_streak_multipliers(),
    )
    days = unique_active_days(run.date for run in runs)
    result = ReprocessResult(user_id=user_id, runs_processed=len(runs))

    for run in runs:
        streak_day = streak_day_for(days, run.date)
        xp = calculate_complete_run_xp(run.distance, streak_day, scoring, multipliers)
        if run.xp_gained == xp.final_xp and run.streak_day == streak_day:
            continue
        logger.info(
            f"Run {run.id} {run.date}: day {run.streak_day} -> {streak_day}, "
            f"XP {run.xp_gained} -> {xp.final_xp}"
        )
        await run_repo.update_run_xp(run, xp, streak_day)
        result.runs_updated += 1

    totals = await reconcile_user_totals_locked(user_id)
    await refresh_user_streaks(user_id, today)
    result.total_xp = totals.total_xp
    return result


async def reprocess_user_runs(user_id: int, today: date | None = None) -> ReprocessResult:
    """
    Recompute streak_day and XP fields of all the user's runs, then reconcile.

    Raises:
        UpstreamFetchError, PersistenceError, ReconciliationError
    """
    async with user_locks.hold(user_id):
        result = await _reprocess_locked(user_id, today)
    logger.info(
        f"Reprocessed {result.runs_processed} runs for user {user_id}, "
        f"{result.runs_updated} updated"
    )
    return result


class DeleteRunUseCase:
    """Use-case for deleting a run."""

    async def execute(
        self, run_id: int, user_id: int, today: date | None = None
    ) -> DeleteRunResult:
        """
        Delete a run owned by user_id, then reprocess the remaining runs.

        Raises:
            UpstreamFetchError, PersistenceError: store failures
        """
        run = await run_repo.get_run(run_id)
        if run is None:
            return DeleteRunResult(success=False, error_message="Run not found")
        if run.user_id != user_id:
            return DeleteRunResult(
                success=False, error_message="Not authorized to delete this run"
            )

        async with user_locks.hold(user_id):
            await run_repo.delete_run(run)
            logger.info(f"Run {run_id} deleted for user {user_id}")
            result = await _reprocess_locked(user_id, today)

        return DeleteRunResult(success=True, total_xp=result.total_xp)


delete_run_use_case = DeleteRunUseCase()


class UpdateRunUseCase:
    """Use-case for editing the date and/or distance of a run."""

    async def execute(
        self,
        run_id: int,
        user_id: int,
        distance: float,
        run_date: date | str | None = None,
        today: date | None = None,
    ) -> UpdateRunResult:
        """
        Edit a run owned by user_id.

        A new date moves the run in the streak sequence, so every run of the
        user is restamped. A distance-only edit recomputes this run's XP with
        its existing streak day. Totals are reconciled either way.

        Raises:
            InvalidInputError: bad date or distance (nothing written)
            UpstreamFetchError, PersistenceError: store failures
        """
        distance = validate_distance(distance)
        new_date = parse_run_date(run_date) if run_date is not None else None

        run = await run_repo.get_run(run_id)
        if run is None:
            return UpdateRunResult(success=False, error_message="Run not found")
        if run.user_id != user_id:
            return UpdateRunResult(
                success=False, error_message="Not authorized to update this run"
            )

        async with user_locks.hold(user_id):
            date_changed = new_date is not None and new_date != run.date
            distance_changed = abs(distance - run.distance) > DISTANCE_TOLERANCE_KM
            old_date, old_distance = run.date, run.distance

            await run_repo.update_run(run, run_date=new_date or run.date, distance=distance)

            if date_changed:
                logger.info(
                    f"Run {run_id} moved {old_date} -> {run.date}, reprocessing user {user_id}"
                )
                reprocessed = await _reprocess_locked(user_id, today)
                total_xp = reprocessed.total_xp
            else:
                if distance_changed:
                    scoring, multipliers = await asyncio.gather(
                        settings_repo.get_scoring_config(),
                        settings_repo.get_streak_multipliers(),
                    )
                    xp = calculate_complete_run_xp(
                        distance, run.streak_day, scoring, multipliers
                    )
                    await run_repo.update_run_xp(run, xp, run.streak_day)
                    logger.info(
                        f"Run {run_id} distance {old_distance} -> {distance}km, "
                        f"XP -> {xp.final_xp}"
                    )
                totals = await reconcile_user_totals_locked(user_id)
                total_xp = totals.total_xp

            run = await run_repo.get_run(run_id)

        return UpdateRunResult(
            success=True,
            run_id=run_id,
            streak_day=run.streak_day,
            xp_gained=run.xp_gained,
            total_xp=total_xp,
            reprocessed=date_changed,
        )


update_run_use_case = UpdateRunUseCase()
