"""
Check that the production DB schema matches the Tortoise models.

Usage:
    python -m scripts.ops.check_db_schema

AICODE-NOTE: Catches missing migrations before the API starts failing with
OperationalError in production.
"""

import asyncio
import sys
from datetime import date
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from tortoise import Tortoise

from runquest.database.config import TORTOISE_ORM
from runquest.database.models import (
    LevelRequirement,
    Run,
    ScoringSettings,
    StreakMultiplierRow,
    User,
)


async def check_table_exists(model, table_name: str) -> tuple[bool, str]:
    """Table exists and all model columns can be selected."""
    try:
        await model.all().limit(1)
        return True, f"✅ Table '{table_name}' exists and is accessible"
    except Exception as e:
        return False, f"❌ Table '{table_name}' error: {e}"


async def check_run_xp_columns() -> tuple[bool, str]:
    """XP breakdown columns on runs."""
    try:
        await Run.all().limit(1).values(
            "id",
            "xp_gained",
            "base_xp",
            "km_xp",
            "distance_bonus",
            "streak_bonus",
            "multiplier",
            "streak_day",
            "external_id",
        )
        return True, "✅ Run XP breakdown columns exist"
    except Exception as e:
        return False, f"❌ Run XP breakdown columns error: {e}"


async def check_relationships() -> tuple[bool, str]:
    """FK users <- runs works and cascades."""
    try:
        test_user = await User.create(name="__schema_check_test__")
        await Run.create(user=test_user, date=date.today(), distance=1.0)

        fetched = await User.get(id=test_user.id).prefetch_related("runs")
        assert len(fetched.runs) == 1

        await test_user.delete()
        assert not await Run.filter(user_id=test_user.id).exists()

        return True, "✅ Relationships (ForeignKey, cascade delete) work correctly"
    except Exception as e:
        return False, f"❌ Relationships error: {e}"


async def main():
    print("🔍 Checking database schema synchronization...")
    print("=" * 60)

    await Tortoise.init(config=TORTOISE_ORM)

    checks = [
        ("Users table", check_table_exists(User, "users")),
        ("Runs table", check_table_exists(Run, "runs")),
        ("Admin settings table", check_table_exists(ScoringSettings, "admin_settings")),
        ("Streak multipliers table", check_table_exists(StreakMultiplierRow, "streak_multipliers")),
        ("Level requirements table", check_table_exists(LevelRequirement, "level_requirements")),
        ("Run XP columns", check_run_xp_columns()),
        ("Model relationships", check_relationships()),
    ]

    all_passed = True

    for check_name, check_coro in checks:
        success, message = await check_coro
        print(f"\n{check_name}:")
        print(f"  {message}")
        if not success:
            all_passed = False

    await Tortoise.close_connections()

    print("\n" + "=" * 60)
    if all_passed:
        print("✅ All checks passed! Database schema is synchronized.")
        return 0

    print("❌ Some checks failed. Database schema is NOT synchronized.")
    print("\n💡 Possible solutions:")
    print("  1. Run migrations: aerich upgrade")
    print("  2. Check if migrations are up to date: aerich history")
    print("  3. Create missing migration: aerich migrate --name 'fix_schema'")
    return 1


if __name__ == "__main__":
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
