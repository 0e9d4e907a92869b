"""
Per-user write locks.

AICODE-NOTE: persist-then-reconcile for one user must not interleave with
another persist-then-reconcile for the same user (totals would be computed
from a stale run set). Different users run in parallel. Single process only.
A lock lives only while someone holds or waits for it.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class UserLockRegistry:
    """asyncio.Lock per user id, dropped once the last holder/waiter leaves."""

    def __init__(self) -> None:
        self._locks: dict[int, asyncio.Lock] = {}
        self._users: dict[int, int] = {}

    @asynccontextmanager
    async def hold(self, user_id: int) -> AsyncIterator[None]:
        lock = self._locks.setdefault(user_id, asyncio.Lock())
        self._users[user_id] = self._users.get(user_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            remaining = self._users.get(user_id, 1) - 1
            if remaining:
                self._users[user_id] = remaining
            else:
                self._users.pop(user_id, None)
                self._locks.pop(user_id, None)

    def is_locked(self, user_id: int) -> bool:
        lock = self._locks.get(user_id)
        return lock is not None and lock.locked()

    def clear(self) -> None:
        """Forget every lock (locks are bound to the loop that first waited on them)."""
        self._locks.clear()
        self._users.clear()

    def __len__(self) -> int:
        return len(self._locks)


user_locks = UserLockRegistry()
