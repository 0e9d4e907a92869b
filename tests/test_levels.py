import math

import pytest

from runquest.core.domain.levels import (
    DEFAULT_LEVEL_TABLE,
    DEFAULT_LEVEL_THRESHOLDS,
    LevelTable,
    level_from_xp,
    level_progress,
)


@pytest.mark.parametrize(
    "xp, expected",
    [
        (0, 1),
        (49, 1),
        (50, 2),
        (101, 2),
        (102, 3),
        (16070, 29),
        (16071, 30),
        (10**9, 30),
    ],
)
def test_level_from_xp(xp: int, expected: int) -> None:
    assert level_from_xp(xp) == expected


@pytest.mark.parametrize("xp", [-5, None, math.nan, "not a number"])
def test_level_from_xp_garbage_is_level_one(xp) -> None:
    assert level_from_xp(xp) == 1


def test_level_is_non_decreasing_in_xp() -> None:
    levels = [level_from_xp(xp) for xp in range(0, 17000, 7)]
    assert levels == sorted(levels)


def test_progress_mid_level() -> None:
    progress = level_progress(75)

    assert progress.current_level == 2
    assert progress.current_level_xp == 50
    assert progress.next_level_xp == 102
    assert progress.progress_percent == 48.1
    assert progress.xp_to_next == 27


def test_progress_at_max_level() -> None:
    progress = level_progress(20000)

    assert progress.current_level == 30
    assert progress.progress_percent == 100.0
    assert progress.xp_to_next == 0


def test_custom_table_from_rows_is_sorted_by_level() -> None:
    table = LevelTable.from_rows([(3, 300), (1, 0), (2, 100)])

    assert table.max_level == 3
    assert table.level_from_xp(150) == 2
    assert table.level_from_xp(300) == 3


def test_empty_rows_fall_back_to_defaults() -> None:
    table = LevelTable.from_rows([])
    assert table.thresholds == DEFAULT_LEVEL_THRESHOLDS
    assert DEFAULT_LEVEL_TABLE.max_level == 30


@pytest.mark.parametrize("thresholds", [[], [10, 20], [0, 100, 50]])
def test_invalid_table_rejected(thresholds: list[int]) -> None:
    with pytest.raises(ValueError):
        LevelTable(thresholds)


def test_from_rows_repairs_admin_rows() -> None:
    # level 1 stored as 10 XP, level 3 lower than level 2
    table = LevelTable.from_rows([(1, 10), (2, 100), (3, 80), (4, 200)])

    assert table.thresholds == (0, 100, 100, 200)
    assert table.level_from_xp(0) == 1
    assert table.level_from_xp(150) == 3
    assert table.level_from_xp(200) == 4
