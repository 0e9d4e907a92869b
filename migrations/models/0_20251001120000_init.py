from tortoise import BaseDBAsyncClient

RUN_IN_TRANSACTION = True


async def upgrade(db: BaseDBAsyncClient) -> str:
    return """
        CREATE TABLE IF NOT EXISTS "users" (
    "id" SERIAL NOT NULL PRIMARY KEY,
    "name" VARCHAR(255) NOT NULL,
    "email" VARCHAR(255) UNIQUE,
    "total_xp" INT NOT NULL DEFAULT 0,
    "total_distance" DOUBLE PRECISION NOT NULL DEFAULT 0,
    "total_runs" INT NOT NULL DEFAULT 0,
    "current_streak" INT NOT NULL DEFAULT 0,
    "longest_streak" INT NOT NULL DEFAULT 0,
    "current_level" INT NOT NULL DEFAULT 1,
    "created_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "updated_at" TIMESTAMPTZ
);
COMMENT ON TABLE "users" IS 'Runner.';
CREATE TABLE IF NOT EXISTS "runs" (
    "id" SERIAL NOT NULL PRIMARY KEY,
    "date" DATE NOT NULL,
    "distance" DOUBLE PRECISION NOT NULL,
    "xp_gained" INT NOT NULL DEFAULT 0,
    "base_xp" INT NOT NULL DEFAULT 0,
    "km_xp" INT NOT NULL DEFAULT 0,
    "distance_bonus" INT NOT NULL DEFAULT 0,
    "streak_bonus" INT NOT NULL DEFAULT 0,
    "multiplier" DOUBLE PRECISION NOT NULL DEFAULT 1,
    "streak_day" INT NOT NULL DEFAULT 1,
    "source" VARCHAR(20) NOT NULL DEFAULT 'manual',
    "external_id" VARCHAR(64),
    "created_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "user_id" INT NOT NULL REFERENCES "users" ("id") ON DELETE CASCADE,
    CONSTRAINT "uid_runs_user_id_2f1c7e" UNIQUE ("user_id", "source", "external_id")
);
CREATE INDEX IF NOT EXISTS "idx_runs_date_6b2d1a" ON "runs" ("date");
COMMENT ON TABLE "runs" IS 'Single run with the XP breakdown stamped at creation.';
CREATE TABLE IF NOT EXISTS "admin_settings" (
    "id" SERIAL NOT NULL PRIMARY KEY,
    "base_xp" INT NOT NULL DEFAULT 15,
    "xp_per_km" DOUBLE PRECISION NOT NULL DEFAULT 2,
    "bonus_5km" INT NOT NULL DEFAULT 5,
    "bonus_10km" INT NOT NULL DEFAULT 15,
    "bonus_15km" INT NOT NULL DEFAULT 25,
    "bonus_20km" INT NOT NULL DEFAULT 50,
    "min_run_distance" DOUBLE PRECISION NOT NULL DEFAULT 1,
    "updated_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
);
COMMENT ON TABLE "admin_settings" IS 'Admin XP settings. Only the first row is read.';
CREATE TABLE IF NOT EXISTS "streak_multipliers" (
    "id" SERIAL NOT NULL PRIMARY KEY,
    "days" INT NOT NULL UNIQUE,
    "multiplier" DOUBLE PRECISION NOT NULL
);
COMMENT ON TABLE "streak_multipliers" IS 'Streak day threshold and the multiplier it unlocks.';
CREATE TABLE IF NOT EXISTS "level_requirements" (
    "level" INT NOT NULL PRIMARY KEY,
    "xp_required" INT NOT NULL
);
COMMENT ON TABLE "level_requirements" IS 'XP required to reach a level.';
CREATE TABLE IF NOT EXISTS "aerich" (
    "id" SERIAL NOT NULL PRIMARY KEY,
    "version" VARCHAR(255) NOT NULL,
    "app" VARCHAR(100) NOT NULL,
    "content" JSONB NOT NULL
);"""


async def downgrade(db: BaseDBAsyncClient) -> str:
    return """
        DROP TABLE IF EXISTS "runs";
        DROP TABLE IF EXISTS "streak_multipliers";
        DROP TABLE IF EXISTS "level_requirements";
        DROP TABLE IF EXISTS "admin_settings";
        DROP TABLE IF EXISTS "users";
    """
