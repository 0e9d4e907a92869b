"""
Database models for RunQuest.

Structure:
- User: runner with denormalized totals (XP, distance, streaks, level)
- Run: one logged run with its full XP breakdown
- ScoringSettings: admin-tunable XP parameters (single row)
- StreakMultiplierRow: streak day threshold -> XP multiplier
- LevelRequirement: level -> XP needed (optional, falls back to built-in table)
"""

from tortoise import fields, models


class RunSource:
    MANUAL = "manual"
    STRAVA = "strava"


class User(models.Model):
    """Runner."""

    id = fields.IntField(primary_key=True)
    name = fields.CharField(max_length=255)
    email = fields.CharField(max_length=255, unique=True, null=True)

    # Aggregates, rebuilt from runs by the totals reconciler
    total_xp = fields.IntField(default=0)
    total_distance = fields.FloatField(default=0.0)
    total_runs = fields.IntField(default=0)
    current_streak = fields.IntField(default=0)
    longest_streak = fields.IntField(default=0)
    current_level = fields.IntField(default=1)

    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(null=True)

    runs: fields.ReverseRelation["Run"]

    class Meta:
        table = "users"


class Run(models.Model):
    """Single run with the XP breakdown stamped at creation."""

    id = fields.IntField(primary_key=True)
    user: fields.ForeignKeyRelation[User] = fields.ForeignKeyField(
        "models.User", related_name="runs", on_delete=fields.CASCADE
    )
    user_id: int  # AICODE-NOTE: MyPy hint for FK (Tortoise auto-creates this)

    date = fields.DateField(db_index=True)
    distance = fields.FloatField()

    xp_gained = fields.IntField(default=0)
    base_xp = fields.IntField(default=0)
    km_xp = fields.IntField(default=0)
    distance_bonus = fields.IntField(default=0)
    streak_bonus = fields.IntField(default=0)
    multiplier = fields.FloatField(default=1.0)
    streak_day = fields.IntField(default=1)

    # manual | strava
    source = fields.CharField(max_length=20, default=RunSource.MANUAL)
    external_id = fields.CharField(max_length=64, null=True)

    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "runs"
        unique_together = (("user", "source", "external_id"),)


class ScoringSettings(models.Model):
    """Admin XP settings. Only the first row is read."""

    id = fields.IntField(primary_key=True)
    base_xp = fields.IntField(default=15)
    xp_per_km = fields.FloatField(default=2.0)
    bonus_5km = fields.IntField(default=5)
    bonus_10km = fields.IntField(default=15)
    bonus_15km = fields.IntField(default=25)
    bonus_20km = fields.IntField(default=50)
    min_run_distance = fields.FloatField(default=1.0)

    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "admin_settings"


class StreakMultiplierRow(models.Model):
    """Streak day threshold and the multiplier it unlocks."""

    id = fields.IntField(primary_key=True)
    days = fields.IntField(unique=True)
    multiplier = fields.FloatField()

    class Meta:
        table = "streak_multipliers"
        ordering = ["days"]


class LevelRequirement(models.Model):
    """XP required to reach a level."""

    level = fields.IntField(primary_key=True)
    xp_required = fields.IntField()

    class Meta:
        table = "level_requirements"
        ordering = ["level"]
