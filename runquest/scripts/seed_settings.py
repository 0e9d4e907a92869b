"""
Seed scoring settings and the default streak multiplier table.

Usage:
    python -m runquest.scripts.seed_settings
    python -m runquest.scripts.seed_settings --force   # overwrite existing rows
"""

import argparse
import asyncio

from tortoise import Tortoise

from runquest.core.domain.xp import DEFAULT_STREAK_MULTIPLIERS, ScoringConfig
from runquest.database.config import TORTOISE_ORM
from runquest.database.models import ScoringSettings, StreakMultiplierRow
from runquest.storage import settings_repo


async def seed(force: bool) -> None:
    await Tortoise.init(config=TORTOISE_ORM)
    try:
        if force or not await ScoringSettings.exists():
            await settings_repo.save_scoring_config(ScoringConfig())
            print("✅ Scoring settings written")
        else:
            print("⏭️ Scoring settings already present")

        if force or not await StreakMultiplierRow.exists():
            await settings_repo.replace_streak_multipliers(list(DEFAULT_STREAK_MULTIPLIERS))
            print(f"✅ {len(DEFAULT_STREAK_MULTIPLIERS)} streak multipliers written")
        else:
            print("⏭️ Streak multipliers already present")
    finally:
        await Tortoise.close_connections()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed scoring settings")
    parser.add_argument("--force", action="store_true")
    args = parser.parse_args()
    asyncio.run(seed(args.force))
