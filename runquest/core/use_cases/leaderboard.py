"""
Leaderboard Use Case - rankings and titles over user aggregates.

AICODE-NOTE: Reads the reconciled aggregate fields only. A title is held by
the #1 user of its metric; positions 2-3 are runners-up. Nobody holds a
title with a zero value.
"""

import logging
from dataclasses import dataclass, field

from runquest.core.errors import InvalidInputError
from runquest.storage import user_repo

logger = logging.getLogger(__name__)

# metric name -> User field
LEADERBOARD_METRICS = {
    "xp": "total_xp",
    "distance": "total_distance",
    "runs": "total_runs",
    "longest_streak": "longest_streak",
    "current_streak": "current_streak",
}


@dataclass(frozen=True)
class Title:
    id: str
    name: str
    description: str
    metric: str


TITLES: tuple[Title, ...] = (
    Title("xp_champion", "XP Champion", "Most XP collected", "xp"),
    Title("distance_king", "Distance King", "Longest total distance", "distance"),
    Title("most_dedicated", "Most Dedicated", "Most runs logged", "runs"),
    Title("streak_legend", "Streak Legend", "Longest streak ever", "longest_streak"),
    Title("on_fire", "On Fire", "Longest active streak", "current_streak"),
)

RUNNERS_UP = 2


@dataclass
class LeaderboardEntry:
    position: int
    user_id: int
    name: str
    value: float
    level: int


@dataclass
class TitleStanding:
    title: Title
    holder: LeaderboardEntry | None = None
    runners_up: list[LeaderboardEntry] = field(default_factory=list)


async def get_leaderboard(metric: str = "xp", limit: int = 10) -> list[LeaderboardEntry]:
    """
    Top users for a metric.

    Raises:
        InvalidInputError: unknown metric
        UpstreamFetchError: users could not be read
    """
    order_field = LEADERBOARD_METRICS.get(metric)
    if order_field is None:
        raise InvalidInputError(
            f"Unknown leaderboard metric {metric!r}, "
            f"expected one of {sorted(LEADERBOARD_METRICS)}"
        )

    users = await user_repo.get_top_users(order_field, limit=limit)
    return [
        LeaderboardEntry(
            position=position,
            user_id=user.id,
            name=user.name,
            value=getattr(user, order_field),
            level=user.current_level,
        )
        for position, user in enumerate(users, start=1)
    ]


async def get_title_standings() -> list[TitleStanding]:
    """Holder and runners-up for every title."""
    standings = []
    for title in TITLES:
        entries = [
            e
            for e in await get_leaderboard(title.metric, limit=RUNNERS_UP + 1)
            if e.value > 0
        ]
        standings.append(
            TitleStanding(
                title=title,
                holder=entries[0] if entries else None,
                runners_up=entries[1:],
            )
        )
    logger.info(f"Loaded {len(standings)} title standings")
    return standings
