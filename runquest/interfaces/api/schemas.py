"""
Pydantic schemas for RunQuest API requests and responses.
"""

import datetime
from datetime import date

from pydantic import BaseModel, ConfigDict, Field

# ============ XP Schemas ============


class XPBreakdownResponse(BaseModel):
    """XP breakdown for one run."""

    model_config = ConfigDict(from_attributes=True)

    base_xp: int
    km_xp: int
    distance_bonus: int
    subtotal: int
    multiplier: float
    streak_bonus: int
    final_xp: int
    breakdown: dict[str, str]


class XPPreviewRequest(BaseModel):
    user_id: int
    date: date
    distance: float = Field(ge=0)


class XPPreviewResponse(BaseModel):
    date: date
    distance: float
    streak_day: int
    xp: XPBreakdownResponse


# ============ Run Schemas ============


class RunCreateRequest(BaseModel):
    """Manual run entry."""

    user_id: int
    date: date
    distance: float = Field(ge=0, description="Distance in km")


class RunResponse(BaseModel):
    """Stored run."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    date: date
    distance: float
    xp_gained: int
    base_xp: int
    km_xp: int
    distance_bonus: int
    streak_bonus: int
    multiplier: float
    streak_day: int
    source: str
    external_id: str | None = None


class RunCreateResponse(BaseModel):
    success: bool
    run_id: int | None
    streak_day: int
    xp: XPBreakdownResponse | None
    total_xp: int
    current_streak: int
    totals_reconciled: bool
    message: str = ""


class RunsListResponse(BaseModel):
    runs: list[RunResponse]
    total: int


class RunUpdateRequest(BaseModel):
    """Run edit. Omitting date keeps the current one."""

    user_id: int
    distance: float = Field(ge=0, description="Distance in km")
    date: datetime.date | None = None


class RunUpdateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    success: bool
    run_id: int
    streak_day: int
    xp_gained: int
    total_xp: int
    # True when the date moved and every run of the user was restamped
    reprocessed: bool


class DeleteRunResponse(BaseModel):
    success: bool
    total_xp: int


# ============ User Schemas ============


class LevelProgressResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    current_level: int
    current_level_xp: int
    next_level_xp: int
    progress_percent: float
    xp_to_next: int


class StreakResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    current_streak: int
    longest_streak: int
    # True when run dates could not be read: zeros mean "unknown"
    degraded: bool = False


class UserStatsResponse(BaseModel):
    """User dashboard numbers."""

    model_config = ConfigDict(from_attributes=True)

    user_id: int
    name: str
    total_xp: int
    total_distance: float
    total_runs: int
    level: LevelProgressResponse
    streak: StreakResponse


# ============ Import Schemas ============


class ImportRequest(BaseModel):
    """Strava-shaped activities (distance in meters)."""

    activities: list[dict]
    fail_fast: bool = False


class ImportItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    activity_id: str
    status: str
    xp_gained: int
    streak_day: int
    error: str


class ImportResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    imported: int
    duplicates: int
    skipped: int
    failed: int
    aborted: bool
    items: list[ImportItemResponse]


# ============ Leaderboard Schemas ============


class LeaderboardEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    position: int
    user_id: int
    name: str
    value: float
    level: int


class LeaderboardResponse(BaseModel):
    metric: str
    entries: list[LeaderboardEntryResponse]


class TitleStandingResponse(BaseModel):
    id: str
    name: str
    description: str
    metric: str
    holder: LeaderboardEntryResponse | None
    runners_up: list[LeaderboardEntryResponse]


# ============ Admin Schemas ============


class ReconcileUserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: int
    previous_xp: int
    previous_distance: float
    total_xp: int
    total_distance: float
    total_runs: int
    level: int
    has_discrepancy: bool


class ReconcileFailureResponse(BaseModel):
    user_id: int
    reason: str


class ReconcileReportResponse(BaseModel):
    checked: int
    fixed: int
    already_correct: int
    failed: int
    results: list[ReconcileUserResponse]
    failures: list[ReconcileFailureResponse]


class ReprocessResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: int
    runs_processed: int
    runs_updated: int
    total_xp: int
