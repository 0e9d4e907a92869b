"""
Reconcile Totals Use Case - rebuild user aggregates from the run rows.

AICODE-NOTE: The runs table is the source of truth; total_xp, total_distance,
total_runs and current_level on the user row are a cache. This module is the
only place that writes them. Running it twice without run changes gives the
same values (no accumulation, always a full recount).
reconcile_user_totals takes the per-user lock; the run pipeline already holds
it and calls reconcile_user_totals_locked.
"""

import logging
from dataclasses import dataclass, field
from datetime import date

from runquest.core.domain.levels import LevelTable
from runquest.core.errors import ReconciliationError, RunQuestError
from runquest.core.use_cases.user_streaks import refresh_user_streaks
from runquest.database.models import Run, User
from runquest.services.user_locks import user_locks
from runquest.storage import run_repo, settings_repo, user_repo

logger = logging.getLogger(__name__)

# Stored floats drift; anything closer than this is "equal"
DISTANCE_TOLERANCE_KM = 0.01


@dataclass
class ReconcileResult:
    """Stored vs. recomputed aggregate for one user."""

    user_id: int
    previous_xp: int
    previous_distance: float
    previous_level: int
    total_xp: int
    total_distance: float
    total_runs: int
    level: int
    written: bool = False

    @property
    def has_discrepancy(self) -> bool:
        return (
            self.previous_xp != self.total_xp
            or abs(self.previous_distance - self.total_distance) >= DISTANCE_TOLERANCE_KM
            or self.previous_level != self.level
        )


@dataclass
class ReconcileReport:
    """Bulk repair summary."""

    checked: int = 0
    fixed: int = 0
    already_correct: int = 0
    failures: list[ReconciliationError] = field(default_factory=list)
    results: list[ReconcileResult] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)


def compute_totals(user: User, runs: list[Run], levels: LevelTable) -> ReconcileResult:
    """Pure recount of a user's aggregate from their runs."""
    total_xp = sum(run.xp_gained or 0 for run in runs)
    total_distance = round(sum(run.distance or 0.0 for run in runs), 3)
    return ReconcileResult(
        user_id=user.id,
        previous_xp=user.total_xp,
        previous_distance=user.total_distance,
        previous_level=user.current_level,
        total_xp=total_xp,
        total_distance=total_distance,
        total_runs=len(runs),
        level=levels.level_from_xp(total_xp),
    )


async def reconcile_user_totals(
    user_id: int, levels: LevelTable | None = None, dry_run: bool = False
) -> ReconcileResult:
    """
    Recount XP/distance/runs/level for one user and overwrite the user row.

    Takes the user's write lock, so a run logged meanwhile is never lost
    from the recount.

    Raises:
        ReconciliationError: user does not exist
        UpstreamFetchError: runs could not be read (nothing is written)
        PersistenceError: user row could not be written
    """
    async with user_locks.hold(user_id):
        return await reconcile_user_totals_locked(user_id, levels=levels, dry_run=dry_run)


async def reconcile_user_totals_locked(
    user_id: int, levels: LevelTable | None = None, dry_run: bool = False
) -> ReconcileResult:
    """
    reconcile_user_totals for callers that already hold the user's lock.

    Args:
        user_id: User ID
        levels: level table (loaded from the store when None)
        dry_run: compute and report only, never write

    Raises:
        ReconciliationError: user does not exist
        UpstreamFetchError: runs could not be read (nothing is written)
        PersistenceError: user row could not be written
    """
    user = await user_repo.get_user(user_id)
    if user is None:
        raise ReconciliationError(user_id, "user not found")

    if levels is None:
        levels = await settings_repo.get_level_table()

    # Fetch fails -> exception here, before any write
    runs = await run_repo.get_runs(user_id)
    result = compute_totals(user, runs, levels)

    if dry_run:
        return result

    try:
        await user_repo.update_aggregate(
            user,
            total_xp=result.total_xp,
            total_distance=result.total_distance,
            total_runs=result.total_runs,
            current_level=result.level,
        )
    except RunQuestError as e:
        logger.error(f"Failed to write totals for user {user_id}: {e}")
        raise

    result.written = True
    logger.info(
        f"User {user_id} totals: {result.total_xp} XP, "
        f"{result.total_distance:.2f} km, {result.total_runs} runs, level {result.level}"
    )
    return result


async def reconcile_all_users(
    dry_run: bool = False, today: date | None = None
) -> ReconcileReport:
    """
    Data-integrity repair over every user.

    Each user is isolated: a failure is recorded in the report and the pass
    continues with the next user.

    Raises:
        UpstreamFetchError: the user list or level table could not be read
    """
    report = ReconcileReport()
    users = await user_repo.get_all_users()
    levels = await settings_repo.get_level_table()

    logger.info(f"Reconciling totals for {len(users)} users (dry_run={dry_run})")

    for user in users:
        report.checked += 1
        try:
            async with user_locks.hold(user.id):
                result = await reconcile_user_totals_locked(
                    user.id, levels=levels, dry_run=dry_run
                )
                if not dry_run:
                    await refresh_user_streaks(user.id, today)
        except ReconciliationError as e:
            logger.error(str(e))
            report.failures.append(e)
            continue
        except RunQuestError as e:
            logger.error(f"Reconciliation failed for user {user.id}: {e}")
            report.failures.append(ReconciliationError(user.id, str(e)))
            continue

        report.results.append(result)
        if result.has_discrepancy:
            report.fixed += 1
            logger.info(
                f"User {user.id} ({user.name}): {result.previous_xp} -> "
                f"{result.total_xp} XP, {result.previous_distance:.2f} -> "
                f"{result.total_distance:.2f} km"
            )
        else:
            report.already_correct += 1

    logger.info(
        f"Reconcile done: checked={report.checked}, fixed={report.fixed}, "
        f"correct={report.already_correct}, failed={report.failed}"
    )
    return report
