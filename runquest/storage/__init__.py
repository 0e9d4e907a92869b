"""Storage layer - CRUD repositories without business logic."""

from . import run_repo, settings_repo, user_repo

__all__ = ["run_repo", "settings_repo", "user_repo"]
