"""
Import Activities Use Case - batch import from the external activity feed.

AICODE-NOTE: Activities are processed strictly one after another. Each one
runs the full log-run pipeline (persist + reconcile) before the next starts,
so if activity N fails, 1..N-1 are already committed with consistent totals.
Item failures are isolated unless fail_fast is set.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from runquest.config import config
from runquest.core.errors import InvalidInputError, PersistenceError, RunQuestError, UpstreamFetchError
from runquest.core.use_cases.log_run import LogRunUseCase, RunLogResult, parse_run_date
from runquest.database.models import RunSource

logger = logging.getLogger(__name__)

RUN_ACTIVITY_TYPES = {"Run", "TrailRun", "VirtualRun"}


class ImportStatus:
    IMPORTED = "imported"
    DUPLICATE = "duplicate"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class ExternalActivity:
    """Activity from the external feed, normalized to km and a calendar day."""

    external_id: str
    run_date: date
    distance_km: float
    activity_type: str = "Run"


@dataclass
class ImportItemResult:
    activity_id: str
    status: str
    xp_gained: int = 0
    streak_day: int = 0
    error: str = ""


@dataclass
class ImportReport:
    imported: int = 0
    duplicates: int = 0
    skipped: int = 0
    failed: int = 0
    aborted: bool = False
    items: list[ImportItemResult] = field(default_factory=list)


def parse_strava_activity(payload: dict[str, Any]) -> ExternalActivity:
    """
    Normalize a Strava activity payload.

    Strava sends distance in meters and start_date_local as an ISO timestamp;
    the run is credited to the local calendar day.

    Raises:
        InvalidInputError: missing id/date/distance
    """
    activity_id = payload.get("id")
    if activity_id is None:
        raise InvalidInputError("Activity without id")

    start = payload.get("start_date_local") or payload.get("start_date")
    if not start:
        raise InvalidInputError(f"Activity {activity_id} has no start date")

    meters = payload.get("distance")
    if meters is None:
        raise InvalidInputError(f"Activity {activity_id} has no distance")
    try:
        distance_km = round(float(meters) / 1000, 3)
    except (TypeError, ValueError):
        raise InvalidInputError(
            f"Activity {activity_id} has invalid distance {meters!r}"
        ) from None

    return ExternalActivity(
        external_id=str(activity_id),
        run_date=parse_run_date(start),
        distance_km=distance_km,
        activity_type=payload.get("type") or payload.get("sport_type") or "Run",
    )


class ImportActivitiesUseCase:
    """Sequential import of external activities for one user."""

    def __init__(
        self,
        log_run: LogRunUseCase | None = None,
        retry_attempts: int | None = None,
        retry_wait: wait_base | None = None,
        item_delay: float | None = None,
    ):
        self.log_run = log_run or LogRunUseCase()
        self.retry_attempts = (
            config.IMPORT_RETRY_ATTEMPTS if retry_attempts is None else retry_attempts
        )
        self.retry_wait = (
            wait_exponential(multiplier=1, min=1, max=10) if retry_wait is None else retry_wait
        )
        self.item_delay = (
            config.IMPORT_ITEM_DELAY_SECONDS if item_delay is None else item_delay
        )

    async def execute(
        self,
        user_id: int,
        activities: list[dict[str, Any]],
        source: str = RunSource.STRAVA,
        fail_fast: bool = False,
        today: date | None = None,
    ) -> ImportReport:
        """
        Import activities one by one.

        Args:
            user_id: User ID
            activities: raw Strava-shaped payloads
            source: run source tag
            fail_fast: stop at the first failure and reject XP <= 0
            today: evaluation day for streaks (tests)

        Returns:
            ImportReport with a status per activity
        """
        report = ImportReport()
        total = len(activities)
        logger.info(f"Importing {total} activities for user {user_id}")

        for index, payload in enumerate(activities, start=1):
            item = await self._import_one(user_id, payload, source, fail_fast, today)
            report.items.append(item)

            if item.status == ImportStatus.IMPORTED:
                report.imported += 1
            elif item.status == ImportStatus.DUPLICATE:
                report.duplicates += 1
            elif item.status == ImportStatus.SKIPPED:
                report.skipped += 1
            else:
                report.failed += 1
                logger.warning(
                    f"Activity {item.activity_id} ({index}/{total}) failed: {item.error}"
                )
                if fail_fast:
                    report.aborted = True
                    logger.error(f"Import aborted at activity {index}/{total}")
                    break

            if self.item_delay and index < total:
                await asyncio.sleep(self.item_delay)

        logger.info(
            f"Import done for user {user_id}: imported={report.imported}, "
            f"duplicates={report.duplicates}, skipped={report.skipped}, "
            f"failed={report.failed}"
        )
        return report

    async def _import_one(
        self,
        user_id: int,
        payload: dict[str, Any],
        source: str,
        fail_fast: bool,
        today: date | None,
    ) -> ImportItemResult:
        activity_id = str(payload.get("id", "?"))
        try:
            activity = parse_strava_activity(payload)
        except InvalidInputError as e:
            return ImportItemResult(activity_id, ImportStatus.FAILED, error=str(e))

        if activity.activity_type not in RUN_ACTIVITY_TYPES:
            return ImportItemResult(
                activity_id,
                ImportStatus.SKIPPED,
                error=f"Not a run ({activity.activity_type})",
            )

        if activity.distance_km < 0:
            return ImportItemResult(activity_id, ImportStatus.FAILED, error="Invalid distance")
        if activity.distance_km == 0:
            # Earns no XP: a defect under fail_fast, otherwise nothing to import
            status = ImportStatus.FAILED if fail_fast else ImportStatus.SKIPPED
            return ImportItemResult(activity_id, status, error="Zero distance")

        try:
            result = await self._log_with_retry(user_id, activity, source, fail_fast, today)
        except RunQuestError as e:
            return ImportItemResult(activity_id, ImportStatus.FAILED, error=str(e))

        if result.duplicate:
            return ImportItemResult(activity_id, ImportStatus.DUPLICATE)
        if not result.success:
            return ImportItemResult(
                activity_id, ImportStatus.FAILED, error=result.error_message
            )

        return ImportItemResult(
            activity_id,
            ImportStatus.IMPORTED,
            xp_gained=result.xp.final_xp if result.xp else 0,
            streak_day=result.streak_day,
        )

    async def _log_with_retry(
        self,
        user_id: int,
        activity: ExternalActivity,
        source: str,
        fail_fast: bool,
        today: date | None,
    ) -> RunLogResult:
        # Transient store errors only; duplicates come back as a result, not an error
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.retry_attempts),
            wait=self.retry_wait,
            retry=retry_if_exception_type((PersistenceError, UpstreamFetchError)),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                return await self.log_run.execute(
                    user_id=user_id,
                    run_date=activity.run_date,
                    distance=activity.distance_km,
                    source=source,
                    external_id=activity.external_id,
                    today=today,
                    fail_fast=fail_fast,
                )
        raise RuntimeError("retry loop exited without a result")
