"""
Settings Repository - admin scoring settings, streak multipliers, levels.

AICODE-NOTE: Returns immutable domain snapshots (ScoringConfig,
StreakMultiplier, LevelTable), never ORM rows, so the XP engine stays pure.
"""

import logging

from tortoise.exceptions import BaseORMException

from runquest.core.domain.levels import LevelTable
from runquest.core.domain.xp import ScoringConfig, StreakMultiplier
from runquest.core.errors import PersistenceError, UpstreamFetchError
from runquest.database.models import LevelRequirement, ScoringSettings, StreakMultiplierRow

logger = logging.getLogger(__name__)


async def get_scoring_config() -> ScoringConfig:
    """Current scoring settings (defaults when the row is missing)."""
    try:
        row = await ScoringSettings.first()
    except BaseORMException as e:
        raise UpstreamFetchError(f"Failed to fetch scoring settings: {e}") from e

    if row is None:
        logger.warning("No admin_settings row found, using default scoring config")
        return ScoringConfig()

    return ScoringConfig(
        base_xp=row.base_xp,
        xp_per_km=row.xp_per_km,
        bonus_5km=row.bonus_5km,
        bonus_10km=row.bonus_10km,
        bonus_15km=row.bonus_15km,
        bonus_20km=row.bonus_20km,
        min_run_distance=row.min_run_distance,
    )


async def get_streak_multipliers() -> tuple[StreakMultiplier, ...]:
    """Streak multiplier table ordered by days."""
    try:
        rows = await StreakMultiplierRow.all().order_by("days")
    except BaseORMException as e:
        raise UpstreamFetchError(f"Failed to fetch streak multipliers: {e}") from e
    return tuple(StreakMultiplier(days=r.days, multiplier=r.multiplier) for r in rows)


async def get_level_table() -> LevelTable:
    """Level table from level_requirements, built-in table when empty."""
    try:
        rows = await LevelRequirement.all().order_by("level").values_list(
            "level", "xp_required"
        )
    except BaseORMException as e:
        raise UpstreamFetchError(f"Failed to fetch level requirements: {e}") from e

    table = LevelTable.from_rows(rows)
    if rows and table.thresholds != tuple(xp for _, xp in rows):
        logger.warning(
            f"level_requirements rows are not ascending from 0, using {table.thresholds}"
        )
    return table


async def save_scoring_config(config: ScoringConfig) -> None:
    """Create or overwrite the single settings row."""
    values = {
        "base_xp": config.base_xp,
        "xp_per_km": config.xp_per_km,
        "bonus_5km": config.bonus_5km,
        "bonus_10km": config.bonus_10km,
        "bonus_15km": config.bonus_15km,
        "bonus_20km": config.bonus_20km,
        "min_run_distance": config.min_run_distance,
    }
    try:
        row = await ScoringSettings.first()
        if row is None:
            await ScoringSettings.create(**values)
        else:
            await row.update_from_dict(values).save()
    except BaseORMException as e:
        raise PersistenceError(f"Failed to save scoring settings: {e}") from e


async def replace_streak_multipliers(multipliers: list[StreakMultiplier]) -> None:
    """Replace the whole multiplier table."""
    try:
        await StreakMultiplierRow.all().delete()
        await StreakMultiplierRow.bulk_create(
            [StreakMultiplierRow(days=m.days, multiplier=m.multiplier) for m in multipliers]
        )
    except BaseORMException as e:
        raise PersistenceError(f"Failed to save streak multipliers: {e}") from e
