from datetime import date

import pytest

from runquest.core.use_cases.log_run import log_run_use_case
from runquest.core.errors import InvalidInputError
from runquest.core.use_cases.reprocess_runs import (
    delete_run_use_case,
    reprocess_user_runs,
    update_run_use_case,
)
from runquest.database.models import Run, StreakMultiplierRow, User

TODAY = date(2025, 9, 30)


@pytest.mark.asyncio
async def test_delete_middle_run_restamps_later_runs(user):
    await StreakMultiplierRow.create(days=3, multiplier=2.0)
    await log_run_use_case.execute(user.id, "2025-09-28", 5.0, today=TODAY)
    middle = await log_run_use_case.execute(user.id, "2025-09-29", 5.0, today=TODAY)
    last = await log_run_use_case.execute(user.id, "2025-09-30", 5.0, today=TODAY)
    assert last.streak_day == 3
    assert last.xp.final_xp == 60

    result = await delete_run_use_case.execute(middle.run_id, user.id, today=TODAY)

    assert result.success
    assert result.total_xp == 60
    last_run = await Run.get(id=last.run_id)
    assert last_run.streak_day == 1
    assert last_run.xp_gained == 30

    await user.refresh_from_db()
    assert user.total_runs == 2
    assert user.current_streak == 1
    assert user.longest_streak == 1


@pytest.mark.asyncio
async def test_delete_run_of_other_user_is_refused(user):
    other = await User.create(name="Mallory")
    logged = await log_run_use_case.execute(user.id, "2025-09-28", 5.0, today=TODAY)

    result = await delete_run_use_case.execute(logged.run_id, other.id, today=TODAY)

    assert not result.success
    assert result.error_message == "Not authorized to delete this run"
    assert await Run.exists(id=logged.run_id)


@pytest.mark.asyncio
async def test_delete_missing_run(user):
    result = await delete_run_use_case.execute(12345, user.id, today=TODAY)

    assert not result.success
    assert result.error_message == "Run not found"


@pytest.mark.asyncio
async def test_reprocess_backfills_zero_xp_runs(user):
    await Run.create(user=user, date=date(2025, 9, 28), distance=5.0, xp_gained=0)
    await Run.create(user=user, date=date(2025, 9, 29), distance=3.0, xp_gained=0)

    result = await reprocess_user_runs(user.id, today=TODAY)

    assert result.runs_processed == 2
    assert result.runs_updated == 2
    assert result.total_xp == 51

    runs = await Run.filter(user_id=user.id).order_by("date")
    assert [(r.streak_day, r.xp_gained) for r in runs] == [(1, 30), (2, 21)]


@pytest.mark.asyncio
async def test_reprocess_is_a_no_op_on_consistent_runs(user):
    await log_run_use_case.execute(user.id, "2025-09-28", 5.0, today=TODAY)
    await log_run_use_case.execute(user.id, "2025-09-29", 3.0, today=TODAY)

    result = await reprocess_user_runs(user.id, today=TODAY)

    assert result.runs_updated == 0
    assert result.total_xp == 51


@pytest.mark.asyncio
async def test_update_distance_keeps_streak_day(user):
    await StreakMultiplierRow.create(days=2, multiplier=2.0)
    await log_run_use_case.execute(user.id, "2025-09-28", 5.0, today=TODAY)
    logged = await log_run_use_case.execute(user.id, "2025-09-29", 5.0, today=TODAY)
    assert logged.xp.final_xp == 60

    result = await update_run_use_case.execute(logged.run_id, user.id, 10.0, today=TODAY)

    assert result.success
    assert not result.reprocessed
    assert result.streak_day == 2
    assert result.xp_gained == 100
    assert result.total_xp == 130

    run = await Run.get(id=logged.run_id)
    assert run.distance == 10.0
    assert (run.base_xp, run.km_xp, run.distance_bonus) == (15, 20, 15)

    await user.refresh_from_db()
    assert user.total_xp == 130
    assert user.total_distance == pytest.approx(15.0)


@pytest.mark.asyncio
async def test_update_date_restamps_every_run(user):
    await log_run_use_case.execute(user.id, "2025-09-28", 5.0, today=TODAY)
    middle = await log_run_use_case.execute(user.id, "2025-09-29", 5.0, today=TODAY)
    last = await log_run_use_case.execute(user.id, "2025-09-30", 5.0, today=TODAY)
    assert last.streak_day == 3

    result = await update_run_use_case.execute(
        middle.run_id, user.id, 5.0, run_date="2025-09-26", today=TODAY
    )

    assert result.success
    assert result.reprocessed
    assert result.streak_day == 1
    assert result.total_xp == 90

    runs = await Run.filter(user_id=user.id).order_by("date")
    assert [(r.date, r.streak_day) for r in runs] == [
        (date(2025, 9, 26), 1),
        (date(2025, 9, 28), 1),
        (date(2025, 9, 30), 1),
    ]

    await user.refresh_from_db()
    assert user.current_streak == 1
    assert user.longest_streak == 1


@pytest.mark.asyncio
async def test_update_run_of_other_user_is_refused(user):
    other = await User.create(name="Mallory")
    logged = await log_run_use_case.execute(user.id, "2025-09-28", 5.0, today=TODAY)

    result = await update_run_use_case.execute(logged.run_id, other.id, 10.0, today=TODAY)

    assert not result.success
    assert result.error_message == "Not authorized to update this run"
    assert (await Run.get(id=logged.run_id)).distance == 5.0


@pytest.mark.asyncio
async def test_update_missing_run(user):
    result = await update_run_use_case.execute(12345, user.id, 5.0, today=TODAY)

    assert not result.success
    assert result.error_message == "Run not found"


@pytest.mark.asyncio
async def test_update_with_invalid_distance_writes_nothing(user):
    logged = await log_run_use_case.execute(user.id, "2025-09-28", 5.0, today=TODAY)

    with pytest.raises(InvalidInputError):
        await update_run_use_case.execute(logged.run_id, user.id, -3, today=TODAY)

    assert (await Run.get(id=logged.run_id)).distance == 5.0
