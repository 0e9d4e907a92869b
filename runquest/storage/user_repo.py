"""
User Repository - CRUD operations for the User model.

AICODE-NOTE: Only data access, NO business logic. Totals/level/streak are
computed in core and written here as a whole.
"""

from datetime import datetime, timezone

from tortoise.exceptions import BaseORMException

from runquest.core.errors import PersistenceError, UpstreamFetchError
from runquest.database.models import User


async def get_user(user_id: int) -> User | None:
    """Get user by ID."""
    try:
        return await User.get_or_none(id=user_id)
    except BaseORMException as e:
        raise UpstreamFetchError(f"Failed to fetch user {user_id}: {e}") from e


async def get_all_users() -> list[User]:
    try:
        return await User.all().order_by("name")
    except BaseORMException as e:
        raise UpstreamFetchError(f"Failed to fetch users: {e}") from e


async def get_top_users(order_field: str, limit: int = 10) -> list[User]:
    """Users sorted descending by an aggregate field."""
    try:
        return await User.all().order_by(f"-{order_field}", "id").limit(limit)
    except BaseORMException as e:
        raise UpstreamFetchError(f"Failed to fetch leaderboard: {e}") from e


async def update_aggregate(user: User, **values) -> User:
    """
    Overwrite aggregate fields and stamp updated_at.

    Args:
        user: User instance
        **values: total_xp, total_distance, total_runs, current_level,
            current_streak, longest_streak
    """
    for name, value in values.items():
        setattr(user, name, value)
    user.updated_at = datetime.now(timezone.utc)
    try:
        await user.save(update_fields=[*values.keys(), "updated_at"])
    except BaseORMException as e:
        raise PersistenceError(f"Failed to update user {user.id}: {e}") from e
    return user
