"""Streak engine: pure date-sequence rules."""

import random
from datetime import date, timedelta

import pytest

from runquest.core.domain.streaks import (
    calculate_streaks,
    current_streak,
    longest_streak,
    streak_day_for,
    unique_active_days,
)

d = date.fromisoformat


def days(*values: str) -> list[date]:
    return unique_active_days(d(v) for v in values)


def test_unique_active_days_sorts_and_collapses() -> None:
    result = unique_active_days(
        [d("2025-09-30"), d("2025-09-28"), d("2025-09-30"), d("2025-09-29")]
    )
    assert result == [d("2025-09-28"), d("2025-09-29"), d("2025-09-30")]


def test_consecutive_days_scenario() -> None:
    sorted_days = days("2025-09-28", "2025-09-29", "2025-09-30")

    assert current_streak(sorted_days, d("2025-09-30")) == 3
    assert longest_streak(sorted_days) == 3


def test_broken_streak_scenario() -> None:
    sorted_days = days("2025-09-20", "2025-09-28")

    assert current_streak(sorted_days, d("2025-09-30")) == 0
    assert longest_streak(sorted_days) == 1


@pytest.mark.parametrize(
    "values, expected",
    [
        ([], 0),
        (["2025-09-30"], 1),
        (["2025-09-01", "2025-09-02", "2025-09-04"], 2),
        (["2025-09-01", "2025-09-03", "2025-09-04", "2025-09-05", "2025-09-07"], 3),
        (["2025-12-30", "2025-12-31", "2026-01-01"], 3),  # across new year
    ],
)
def test_longest_streak_table(values: list[str], expected: int) -> None:
    assert longest_streak(days(*values)) == expected


def test_current_streak_alive_when_last_run_was_yesterday() -> None:
    sorted_days = days("2025-09-27", "2025-09-28", "2025-09-29")
    assert current_streak(sorted_days, d("2025-09-30")) == 3


def test_current_streak_zero_when_last_run_two_days_ago() -> None:
    sorted_days = days("2025-09-27", "2025-09-28")
    assert current_streak(sorted_days, d("2025-09-30")) == 0


def test_current_streak_counts_only_back_to_first_gap() -> None:
    sorted_days = days("2025-09-20", "2025-09-21", "2025-09-23", "2025-09-24")
    assert current_streak(sorted_days, d("2025-09-24")) == 2


def test_current_streak_empty() -> None:
    assert current_streak([], d("2025-09-30")) == 0


def test_same_day_runs_do_not_change_streaks() -> None:
    base = [d("2025-09-28"), d("2025-09-29"), d("2025-09-30")]
    with_duplicate = base + [d("2025-09-30"), d("2025-09-29")]

    one = calculate_streaks(base, d("2025-09-30"))
    two = calculate_streaks(with_duplicate, d("2025-09-30"))

    assert one.current_streak == two.current_streak == 3
    assert one.longest_streak == two.longest_streak == 3


def test_streak_day_for_retroactive_insert_uses_local_predecessors() -> None:
    # 19th missing: inserting the 22nd links 20-21-22 only, not the 18th
    sorted_days = days("2025-09-18", "2025-09-20", "2025-09-21", "2025-09-23")

    assert streak_day_for(sorted_days, d("2025-09-22")) == 3


def test_streak_day_for_fills_gap_between_streak_dates() -> None:
    sorted_days = days("2025-09-20", "2025-09-21", "2025-09-23", "2025-09-24")

    assert streak_day_for(sorted_days, d("2025-09-22")) == 3
    # later days are not looked at
    assert streak_day_for(sorted_days, d("2025-09-21")) == 2


def test_streak_day_for_after_gap_restarts_at_one() -> None:
    sorted_days = days("2025-09-20", "2025-09-21")
    assert streak_day_for(sorted_days, d("2025-09-25")) == 1


def test_streak_day_for_existing_day() -> None:
    sorted_days = days("2025-09-28", "2025-09-29", "2025-09-30")
    assert streak_day_for(sorted_days, d("2025-09-30")) == 3


def test_calculate_streaks_with_candidate_day() -> None:
    result = calculate_streaks(
        [d("2025-09-28"), d("2025-09-29")],
        evaluation_day=d("2025-09-30"),
        candidate_day=d("2025-09-30"),
    )

    assert result.current_streak == 3
    assert result.longest_streak == 3
    assert result.streak_day_for_run == 3


def test_calculate_streaks_empty() -> None:
    result = calculate_streaks([], d("2025-09-30"))
    assert (result.current_streak, result.longest_streak, result.streak_day_for_run) == (
        0,
        0,
        1,
    )


@pytest.mark.parametrize("seed", range(20))
def test_longest_is_never_below_current(seed: int) -> None:
    rng = random.Random(seed)
    start = d("2025-01-01")
    run_dates = [start + timedelta(days=rng.randint(0, 40)) for _ in range(rng.randint(1, 30))]
    evaluation_day = start + timedelta(days=rng.randint(0, 45))
    sorted_days = unique_active_days(day for day in run_dates if day <= evaluation_day)

    assert longest_streak(sorted_days) >= current_streak(sorted_days, evaluation_day)
