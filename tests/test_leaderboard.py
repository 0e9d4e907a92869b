import pytest

from runquest.core.errors import InvalidInputError
from runquest.core.use_cases.leaderboard import get_leaderboard, get_title_standings
from runquest.database.models import User


async def _seed_users():
    anna = await User.create(
        name="Anna", total_xp=500, total_distance=80.5, total_runs=12,
        current_streak=0, longest_streak=9, current_level=7,
    )
    boris = await User.create(
        name="Boris", total_xp=900, total_distance=40.0, total_runs=20,
        current_streak=3, longest_streak=4, current_level=10,
    )
    await User.create(name="Clara")
    return anna, boris


@pytest.mark.asyncio
async def test_leaderboard_by_xp(db):
    anna, boris = await _seed_users()

    entries = await get_leaderboard("xp")

    assert [e.user_id for e in entries[:2]] == [boris.id, anna.id]
    assert [e.position for e in entries] == [1, 2, 3]
    assert entries[0].value == 900
    assert entries[0].level == 10


@pytest.mark.asyncio
async def test_leaderboard_limit(db):
    await _seed_users()

    entries = await get_leaderboard("distance", limit=1)

    assert len(entries) == 1
    assert entries[0].name == "Anna"


@pytest.mark.asyncio
async def test_unknown_metric(db):
    with pytest.raises(InvalidInputError):
        await get_leaderboard("elevation")


@pytest.mark.asyncio
async def test_title_standings(db):
    anna, boris = await _seed_users()

    standings = {s.title.id: s for s in await get_title_standings()}

    assert standings["xp_champion"].holder.user_id == boris.id
    assert [e.user_id for e in standings["xp_champion"].runners_up] == [anna.id]
    assert standings["distance_king"].holder.user_id == anna.id
    assert standings["streak_legend"].holder.user_id == anna.id
    # Anna has no active streak, so she is not a runner-up
    assert standings["on_fire"].holder.user_id == boris.id
    assert standings["on_fire"].runners_up == []


@pytest.mark.asyncio
async def test_titles_unclaimed_without_activity(db):
    await User.create(name="Clara")

    standings = await get_title_standings()

    assert all(s.holder is None for s in standings)
