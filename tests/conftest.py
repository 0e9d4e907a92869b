import os
import sys

import pytest_asyncio
from tortoise import Tortoise

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


@pytest_asyncio.fixture(scope="function")
async def db() -> None:
    """Lightweight in-memory DB per test."""
    from runquest.services.user_locks import user_locks

    user_locks.clear()
    await Tortoise.init(
        db_url="sqlite://:memory:", modules={"models": ["runquest.database.models"]}
    )
    await Tortoise.generate_schemas()
    yield
    await Tortoise.close_connections()
    user_locks.clear()


@pytest_asyncio.fixture
async def user(db):
    """Create a test runner."""
    from runquest.database.models import User

    return await User.create(name="Karl", email="karl@example.com")
