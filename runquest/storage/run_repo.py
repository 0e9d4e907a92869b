"""
Run Repository - CRUD operations for the Run model.

AICODE-NOTE: Only data access, NO business logic. Streak and XP rules live in
core/domain. ORM failures are translated into UpstreamFetchError (reads) and
PersistenceError (writes) so use-cases never see driver exceptions.
"""

from datetime import date

from tortoise.exceptions import BaseORMException, IntegrityError

from runquest.core.domain.xp import XPResult
from runquest.core.errors import DuplicateRunError, PersistenceError, UpstreamFetchError
from runquest.database.models import Run, RunSource


async def get_run(run_id: int) -> Run | None:
    """Get run by ID."""
    try:
        return await Run.get_or_none(id=run_id)
    except BaseORMException as e:
        raise UpstreamFetchError(f"Failed to fetch run {run_id}: {e}") from e


async def get_runs(user_id: int) -> list[Run]:
    """All runs of a user, oldest first."""
    try:
        return await Run.filter(user_id=user_id).order_by("date", "id")
    except BaseORMException as e:
        raise UpstreamFetchError(f"Failed to fetch runs for user {user_id}: {e}") from e


async def get_run_dates(user_id: int) -> list[date]:
    """All run dates of a user, ascending (duplicates included)."""
    try:
        return await (
            Run.filter(user_id=user_id).order_by("date").values_list("date", flat=True)
        )
    except BaseORMException as e:
        raise UpstreamFetchError(
            f"Failed to fetch run dates for user {user_id}: {e}"
        ) from e


async def get_recent_runs(user_id: int | None = None, limit: int = 100) -> list[Run]:
    """Latest runs, optionally for one user (group history when user_id is None)."""
    query = Run.all() if user_id is None else Run.filter(user_id=user_id)
    try:
        return await query.order_by("-date", "-id").limit(limit).prefetch_related("user")
    except BaseORMException as e:
        raise UpstreamFetchError(f"Failed to fetch run history: {e}") from e


async def create_run(
    user_id: int,
    run_date: date,
    distance: float,
    xp: XPResult,
    streak_day: int,
    source: str = RunSource.MANUAL,
    external_id: str | None = None,
) -> Run:
    """
    Insert a run together with its whole XP breakdown.

    One insert: a run row never exists without its XP fields.

    Raises:
        DuplicateRunError: (user, source, external_id) already imported
        PersistenceError: any other write failure
    """
    try:
        return await Run.create(
            user_id=user_id,
            date=run_date,
            distance=distance,
            xp_gained=xp.final_xp,
            base_xp=xp.base_xp,
            km_xp=xp.km_xp,
            distance_bonus=xp.distance_bonus,
            streak_bonus=xp.streak_bonus,
            multiplier=xp.multiplier,
            streak_day=streak_day,
            source=source,
            external_id=external_id,
        )
    except IntegrityError as e:
        if external_id is not None:
            raise DuplicateRunError(
                f"Run {source}:{external_id} already exists for user {user_id}"
            ) from e
        raise PersistenceError(f"Failed to insert run: {e}") from e
    except BaseORMException as e:
        raise PersistenceError(f"Failed to insert run: {e}") from e


async def update_run_xp(run: Run, xp: XPResult, streak_day: int) -> Run:
    """Overwrite the XP fields of an existing run (backfill / reprocess)."""
    run.xp_gained = xp.final_xp
    run.base_xp = xp.base_xp
    run.km_xp = xp.km_xp
    run.distance_bonus = xp.distance_bonus
    run.streak_bonus = xp.streak_bonus
    run.multiplier = xp.multiplier
    run.streak_day = streak_day
    try:
        await run.save(
            update_fields=[
                "xp_gained",
                "base_xp",
                "km_xp",
                "distance_bonus",
                "streak_bonus",
                "multiplier",
                "streak_day",
            ]
        )
    except BaseORMException as e:
        raise PersistenceError(f"Failed to update run {run.id}: {e}") from e
    return run


async def update_run(run: Run, run_date: date, distance: float) -> Run:
    """Overwrite date and distance of a run. XP fields are restamped separately."""
    run.date = run_date
    run.distance = distance
    try:
        await run.save(update_fields=["date", "distance"])
    except BaseORMException as e:
        raise PersistenceError(f"Failed to update run {run.id}: {e}") from e
    return run


async def delete_run(run: Run) -> None:
    try:
        await run.delete()
    except BaseORMException as e:
        raise PersistenceError(f"Failed to delete run {run.id}: {e}") from e


async def delete_runs(user_id: int, **filters) -> int:
    """Delete the user's runs matching filters. Returns deleted count."""
    try:
        return await Run.filter(user_id=user_id, **filters).delete()
    except BaseORMException as e:
        raise PersistenceError(f"Failed to delete runs for user {user_id}: {e}") from e


async def get_runs_with_zero_xp(source: str | None = None) -> list[Run]:
    """Runs with distance but no XP (broken imports)."""
    query = Run.filter(xp_gained=0, distance__gt=0)
    if source:
        query = query.filter(source=source)
    try:
        return await query.order_by("user_id", "date")
    except BaseORMException as e:
        raise UpstreamFetchError(f"Failed to fetch zero-XP runs: {e}") from e
