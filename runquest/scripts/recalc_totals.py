"""
Recount total XP / distance / level / streaks for all users from their runs.

Usage:
    python -m runquest.scripts.recalc_totals            # fix everything
    python -m runquest.scripts.recalc_totals --dry-run  # report only

Exit code 1 if any user failed.
"""

import argparse
import asyncio
import logging
import sys

from tortoise import Tortoise

from runquest.config import config
from runquest.core.use_cases.reconcile_totals import ReconcileReport, reconcile_all_users
from runquest.database.config import TORTOISE_ORM

logging.basicConfig(
    level=config.LOG_LEVEL, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)


def print_report(report: ReconcileReport, dry_run: bool) -> None:
    for result in report.results:
        if not result.has_discrepancy:
            continue
        print(
            f"  User {result.user_id}: {result.previous_xp} -> {result.total_xp} XP, "
            f"{result.previous_distance:.2f} -> {result.total_distance:.2f} km, "
            f"level {result.previous_level} -> {result.level}"
        )
    for failure in report.failures:
        print(f"  ❌ User {failure.user_id}: {failure.reason}")

    verb = "Would fix" if dry_run else "Fixed"
    print(f"\n🎯 Checked {report.checked} users")
    print(f"🔧 {verb} {report.fixed} users with incorrect totals")
    print(f"✅ {report.already_correct} already correct")
    if report.failed:
        print(f"❌ {report.failed} failed")


async def main(dry_run: bool) -> int:
    await Tortoise.init(config=TORTOISE_ORM)
    try:
        report = await reconcile_all_users(dry_run=dry_run)
    finally:
        await Tortoise.close_connections()

    print_report(report, dry_run)
    return 1 if report.failed else 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--dry-run", action="store_true", help="report only")
    args = parser.parse_args()
    sys.exit(asyncio.run(main(args.dry_run)))
