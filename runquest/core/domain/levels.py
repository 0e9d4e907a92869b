"""
Leveling table - XP thresholds to levels.

AICODE-NOTE: threshold[i] is the XP needed for level i + 1, threshold[0] = 0.
level_from_xp is total: garbage input (None, NaN, negative) is level 1.
"""

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

# Used when the level_requirements table is empty or unreachable
DEFAULT_LEVEL_THRESHOLDS: tuple[int, ...] = (
    0, 50, 102, 158, 217, 280, 349, 423, 504, 594,
    693, 806, 934, 1079, 1244, 1436, 1659, 1920, 2228, 2591,
    3026, 3549, 4181, 4953, 5902, 7089, 8584, 10482, 12912, 16071,
)


@dataclass(frozen=True)
class LevelProgress:
    current_level: int
    current_level_xp: int
    next_level_xp: int
    progress_percent: float
    xp_to_next: int


class LevelTable:
    """Ascending XP thresholds indexed by level - 1."""

    def __init__(self, thresholds: Sequence[int] = DEFAULT_LEVEL_THRESHOLDS):
        if not thresholds or thresholds[0] != 0:
            raise ValueError("Level thresholds must start at 0")
        if any(b < a for a, b in zip(thresholds, thresholds[1:])):
            raise ValueError("Level thresholds must be non-decreasing")
        self.thresholds = tuple(thresholds)

    @classmethod
    def from_rows(cls, rows: Iterable[tuple[int, int]]) -> "LevelTable":
        """
        Build from (level, xp_required) pairs, e.g. level_requirements rows.

        Stored rows are admin data: level 1 is pinned to 0 XP and a threshold
        lower than the one before it is raised to it, so the table is always
        valid.
        """
        ordered = sorted(rows)
        if not ordered:
            return cls()
        thresholds = [0]
        for _, xp in ordered[1:]:
            thresholds.append(max(thresholds[-1], int(xp or 0)))
        return cls(thresholds)

    @property
    def max_level(self) -> int:
        return len(self.thresholds)

    def level_from_xp(self, total_xp: float | None) -> int:
        xp = _sanitize_xp(total_xp)
        level = 1
        for index, threshold in enumerate(self.thresholds):
            if xp >= threshold:
                level = index + 1
            else:
                break
        return min(level, self.max_level)

    def xp_for_level(self, level: int) -> int:
        """XP needed to reach level (clamped to the table)."""
        level = max(1, min(level, self.max_level))
        return self.thresholds[level - 1]

    def progress(self, total_xp: float | None) -> LevelProgress:
        xp = _sanitize_xp(total_xp)
        level = self.level_from_xp(xp)
        current_level_xp = self.xp_for_level(level)

        if level >= self.max_level:
            return LevelProgress(
                current_level=level,
                current_level_xp=current_level_xp,
                next_level_xp=current_level_xp,
                progress_percent=100.0,
                xp_to_next=0,
            )

        next_level_xp = self.xp_for_level(level + 1)
        span = next_level_xp - current_level_xp
        percent = 100.0 if span <= 0 else (xp - current_level_xp) / span * 100
        return LevelProgress(
            current_level=level,
            current_level_xp=current_level_xp,
            next_level_xp=next_level_xp,
            progress_percent=round(max(0.0, min(100.0, percent)), 1),
            xp_to_next=max(0, math.ceil(next_level_xp - xp)),
        )


DEFAULT_LEVEL_TABLE = LevelTable()


def level_from_xp(total_xp: float | None, table: LevelTable = DEFAULT_LEVEL_TABLE) -> int:
    """Highest level whose threshold <= total_xp, capped at the table max."""
    return table.level_from_xp(total_xp)


def level_progress(
    total_xp: float | None, table: LevelTable = DEFAULT_LEVEL_TABLE
) -> LevelProgress:
    return table.progress(total_xp)


def _sanitize_xp(total_xp: float | None) -> float:
    if total_xp is None:
        return 0
    try:
        xp = float(total_xp)
    except (TypeError, ValueError):
        return 0
    if math.isnan(xp) or xp < 0:
        return 0
    return xp
