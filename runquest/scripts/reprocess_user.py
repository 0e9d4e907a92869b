"""
Restamp streak days and XP on every run of one user (or every user with
zero-XP runs), then recount their totals.

Usage:
    python -m runquest.scripts.reprocess_user <user_id>
    python -m runquest.scripts.reprocess_user --zero-xp [--source strava]
"""

import argparse
import asyncio
import logging
import sys

from tortoise import Tortoise

from runquest.config import config
from runquest.core.errors import RunQuestError
from runquest.core.use_cases.reprocess_runs import reprocess_user_runs
from runquest.database.config import TORTOISE_ORM
from runquest.storage import run_repo

logging.basicConfig(
    level=config.LOG_LEVEL, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)


async def users_with_zero_xp_runs(source: str | None) -> list[int]:
    runs = await run_repo.get_runs_with_zero_xp(source)
    print(f"🔍 Found {len(runs)} runs with distance but 0 XP")
    return sorted({run.user_id for run in runs})


async def main(user_id: int | None, zero_xp: bool, source: str | None) -> int:
    await Tortoise.init(config=TORTOISE_ORM)
    failed = 0
    try:
        user_ids = await users_with_zero_xp_runs(source) if zero_xp else [user_id]
        for uid in user_ids:
            try:
                result = await reprocess_user_runs(uid)
            except RunQuestError as e:
                print(f"❌ User {uid}: {e}")
                failed += 1
                continue
            print(
                f"✅ User {uid}: {result.runs_processed} runs, "
                f"{result.runs_updated} updated, total {result.total_xp} XP"
            )
    finally:
        await Tortoise.close_connections()
    return 1 if failed else 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Reprocess run XP")
    parser.add_argument("user_id", type=int, nargs="?")
    parser.add_argument("--zero-xp", action="store_true", help="all users with 0-XP runs")
    parser.add_argument("--source", default=None, help="only runs from this source")
    args = parser.parse_args()
    if args.user_id is None and not args.zero_xp:
        parser.error("user_id or --zero-xp is required")
    sys.exit(asyncio.run(main(args.user_id, args.zero_xp, args.source)))
