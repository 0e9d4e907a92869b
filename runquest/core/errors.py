"""
Error taxonomy for the run/XP pipeline.

AICODE-NOTE: Domain functions raise these; use-cases catch them at the seam
and turn them into result objects, the API maps them to HTTP status codes.
"""


class RunQuestError(Exception):
    """Base class for all RunQuest errors."""


class InvalidInputError(RunQuestError, ValueError):
    """Negative distance, streak day below 1, malformed date. Never persisted."""


class UpstreamFetchError(RunQuestError):
    """Run dates, runs or scoring settings could not be read."""


class PersistenceError(RunQuestError):
    """Insert or update against the store failed. Retryable by the caller."""


class DuplicateRunError(PersistenceError):
    """Run with the same (user, source, external_id) already exists."""


class ComputationError(RunQuestError):
    """Computed XP failed validation (e.g. non-positive for a real run)."""


class ReconciliationError(RunQuestError):
    """Totals reconciliation failed for a single user."""

    def __init__(self, user_id: int, reason: str):
        self.user_id = user_id
        self.reason = reason
        super().__init__(f"Reconciliation failed for user {user_id}: {reason}")
