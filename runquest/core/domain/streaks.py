"""
Streak Domain Rules - pure functions over a runner's active days.

AICODE-NOTE: No DB access, no side-effects. Streaks are counted over unique
calendar days, not over runs: two runs on the same day are one active day.
Use-cases fetch the run dates and pass them in.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta

ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class StreakResult:
    """Streak state for a runner, optionally for one specific run date."""

    current_streak: int
    longest_streak: int
    streak_day_for_run: int = 1


def unique_active_days(run_dates: Iterable[date]) -> list[date]:
    """Collapse run dates into sorted distinct calendar days."""
    return sorted(set(run_dates))


def longest_streak(sorted_days: list[date]) -> int:
    """
    Longest run of consecutive calendar days.

    - [] -> 0
    - [d] -> 1
    - [d, d+1, d+3] -> 2
    """
    if not sorted_days:
        return 0

    longest = 1
    current = 1
    for prev_day, day in zip(sorted_days, sorted_days[1:]):
        if day - prev_day == ONE_DAY:
            current += 1
        elif day != prev_day:
            longest = max(longest, current)
            current = 1

    return max(longest, current)


def current_streak(sorted_days: list[date], evaluation_day: date) -> int:
    """
    Active streak ending at the most recent active day.

    A streak is only alive if the last active day is evaluation_day or the
    day before it; otherwise it is broken and the result is 0.
    """
    if not sorted_days:
        return 0

    latest = sorted_days[-1]
    if latest != evaluation_day and latest != evaluation_day - ONE_DAY:
        return 0

    return _consecutive_run_ending_at(sorted_days, len(sorted_days) - 1)


def streak_day_for(sorted_days: list[date], target_day: date) -> int:
    """
    Which streak day a run on target_day represents.

    target_day is treated as present in the set even if it is not persisted
    yet. Counting walks back from the day before target_day and stops at the
    first gap, so a run inserted into the past only looks at its own
    predecessors, never at "today".
    """
    days = sorted_days
    if target_day not in days:
        days = unique_active_days([*sorted_days, target_day])

    return _consecutive_run_ending_at(days, days.index(target_day))


def calculate_streaks(
    run_dates: Iterable[date],
    evaluation_day: date,
    candidate_day: date | None = None,
) -> StreakResult:
    """
    Current, longest and per-run streak day in one pass.

    Args:
        run_dates: all persisted run dates (duplicates allowed)
        evaluation_day: "today" for the current streak check
        candidate_day: date of a run not yet persisted, included in the set

    Returns:
        StreakResult
    """
    dates = list(run_dates)
    if candidate_day is not None:
        dates.append(candidate_day)

    days = unique_active_days(dates)
    if not days:
        return StreakResult(current_streak=0, longest_streak=0, streak_day_for_run=1)

    streak_day = 1
    if candidate_day is not None:
        streak_day = streak_day_for(days, candidate_day)

    return StreakResult(
        current_streak=current_streak(days, evaluation_day),
        longest_streak=longest_streak(days),
        streak_day_for_run=streak_day,
    )


def _consecutive_run_ending_at(days: list[date], index: int) -> int:
    count = 1
    for i in range(index, 0, -1):
        if days[i] - days[i - 1] != ONE_DAY:
            break
        count += 1
    return count
