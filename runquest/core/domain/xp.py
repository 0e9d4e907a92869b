"""
XP Domain Rules - pure XP calculation for a single run.

AICODE-NOTE: Scoring settings and the streak multiplier table are passed in
as immutable snapshots on every call. Nothing here reads global state, so the
same inputs always give the same XP.

Pipeline:
    base (if distance >= minimum) + km XP + distance tier bonus = subtotal
    final = round(subtotal * streak multiplier)
"""

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from runquest.core.errors import InvalidInputError


@dataclass(frozen=True)
class ScoringConfig:
    """Admin-tunable XP parameters."""

    base_xp: int = 15
    xp_per_km: float = 2.0
    bonus_5km: int = 5
    bonus_10km: int = 15
    bonus_15km: int = 25
    bonus_20km: int = 50
    min_run_distance: float = 1.0


@dataclass(frozen=True)
class StreakMultiplier:
    days: int
    multiplier: float


DEFAULT_STREAK_MULTIPLIERS: tuple[StreakMultiplier, ...] = (
    StreakMultiplier(5, 1.1),
    StreakMultiplier(15, 1.2),
    StreakMultiplier(30, 1.3),
    StreakMultiplier(60, 1.4),
    StreakMultiplier(90, 1.5),
    StreakMultiplier(120, 1.6),
    StreakMultiplier(180, 1.7),
    StreakMultiplier(220, 1.8),
    StreakMultiplier(240, 1.9),
    StreakMultiplier(270, 2.0),
)

# Highest tier first: bonuses are exclusive, only the best one applies
_DISTANCE_TIERS = (
    (20, "bonus_20km"),
    (15, "bonus_15km"),
    (10, "bonus_10km"),
    (5, "bonus_5km"),
)


@dataclass(frozen=True)
class XPResult:
    """XP breakdown stamped onto a run."""

    base_xp: int
    km_xp: int
    distance_bonus: int
    subtotal: int
    multiplier: float
    streak_bonus: int
    final_xp: int
    breakdown: dict[str, str] = field(default_factory=dict)


def distance_bonus_for(distance: float, config: ScoringConfig) -> int:
    """Bonus of the highest distance tier reached (20/15/10/5 km), else 0."""
    for threshold_km, attr in _DISTANCE_TIERS:
        if distance >= threshold_km:
            return getattr(config, attr)
    return 0


def streak_multiplier_for(
    streak_day: int, multipliers: Iterable[StreakMultiplier]
) -> float:
    """
    Multiplier of the highest threshold <= streak_day.

    The table does not have to be sorted. Below every threshold (or with an
    empty table) the multiplier is 1.0.
    """
    best_days = None
    best = 1.0
    for row in multipliers:
        if streak_day >= row.days and (best_days is None or row.days > best_days):
            best_days = row.days
            best = row.multiplier
    return best


def calculate_complete_run_xp(
    distance: float,
    streak_day: int,
    config: ScoringConfig,
    multipliers: Sequence[StreakMultiplier] = (),
) -> XPResult:
    """
    Calculate the full XP award for one run.

    Args:
        distance: run distance in km (>= 0)
        streak_day: 1-based streak day of the run
        config: scoring settings snapshot
        multipliers: streak multiplier table snapshot

    Returns:
        XPResult with every stage and a readable breakdown

    Raises:
        InvalidInputError: negative/non-finite distance or streak_day < 1
    """
    if distance is None or not math.isfinite(distance) or distance < 0:
        raise InvalidInputError(f"Distance must be a non-negative number, got {distance}")
    if isinstance(streak_day, bool) or not isinstance(streak_day, int) or streak_day < 1:
        raise InvalidInputError(f"Streak day must be an integer >= 1, got {streak_day}")

    meets_minimum = distance >= config.min_run_distance
    base_xp = config.base_xp if meets_minimum else 0
    km_xp = math.floor(distance * config.xp_per_km)
    distance_bonus = distance_bonus_for(distance, config)
    subtotal = base_xp + km_xp + distance_bonus

    multiplier = streak_multiplier_for(streak_day, multipliers)
    # Half up, not banker's rounding
    final_xp = math.floor(subtotal * multiplier + 0.5)
    streak_bonus = final_xp - subtotal

    if meets_minimum:
        base_line = (
            f"{distance}km >= {config.min_run_distance}km minimum -> {base_xp} base XP"
        )
    else:
        base_line = f"{distance}km < {config.min_run_distance}km minimum -> 0 base XP"

    if distance_bonus:
        tier = next(t for t, _ in _DISTANCE_TIERS if distance >= t)
        bonus_line = f"{distance}km >= {tier}km -> {distance_bonus} bonus XP"
    else:
        bonus_line = f"{distance}km < 5km -> 0 bonus XP"

    breakdown = {
        "base": base_line,
        "km": f"{distance}km x {config.xp_per_km} XP/km = {km_xp} XP",
        "distance": bonus_line,
        "streak": (
            f"streak day {streak_day} -> {multiplier}x multiplier "
            f"({streak_bonus:+d} XP)"
        ),
        "total": (
            f"({base_xp} + {km_xp} + {distance_bonus}) x {multiplier} = {final_xp} XP"
        ),
    }

    return XPResult(
        base_xp=base_xp,
        km_xp=km_xp,
        distance_bonus=distance_bonus,
        subtotal=subtotal,
        multiplier=multiplier,
        streak_bonus=streak_bonus,
        final_xp=final_xp,
        breakdown=breakdown,
    )
