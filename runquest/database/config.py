"""
Database configuration (Tortoise ORM).
Supports SQLite (dev) and PostgreSQL (production).
"""

import logging
import os

from runquest.config import config

logger = logging.getLogger(__name__)


def get_tortoise_db_url() -> str:
    """
    Get database URL with proper scheme for Tortoise ORM.

    Tortoise ORM requires the 'postgres://' scheme, while hosted providers
    hand out 'postgresql://' URLs.
    """
    url = config.database_url

    # pydantic may miss env vars injected after import in some containers
    if config.ENVIRONMENT == "production":
        env_url = os.environ.get("DATABASE_URL")
        if env_url and (not url or url.startswith("sqlite://")):
            logger.warning(
                f"Using DATABASE_URL from os.environ directly. "
                f"config.database_url was: {url}"
            )
            url = env_url

    if url.startswith("postgresql://"):
        url = "postgres://" + url[len("postgresql://"):]
        logger.info("Converted postgresql:// to postgres:// for Tortoise ORM")

    logger.info(
        f"Database URL scheme: {url.split('://')[0] if '://' in url else 'unknown'}"
    )

    return url


TORTOISE_ORM = {
    "connections": {"default": get_tortoise_db_url()},
    "apps": {
        "models": {
            "models": ["runquest.database.models", "aerich.models"],
            "default_connection": "default",
        },
    },
}
