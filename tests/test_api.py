"""API endpoint tests.

To run:
    pytest tests/test_api.py -v

The app is driven in-process over ASGI against the in-memory test DB; the
lifespan (real DB init) is not started.
"""

from datetime import date

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from runquest.core.errors import (
    ComputationError,
    DuplicateRunError,
    InvalidInputError,
    PersistenceError,
    ReconciliationError,
    UpstreamFetchError,
)
from runquest.database.models import Run
from runquest.interfaces.api.main import app, status_for_error
from runquest.storage import run_repo


@pytest_asyncio.fixture
async def client(db):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.mark.asyncio
async def test_health_endpoint(client):
    response = await client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "runquest-api"}


@pytest.mark.asyncio
async def test_create_run(client, user):
    response = await client.post(
        "/api/runs", json={"user_id": user.id, "date": "2025-09-28", "distance": 5.0}
    )

    assert response.status_code == 201
    data = response.json()
    assert data["success"] is True
    assert data["streak_day"] == 1
    assert data["xp"]["final_xp"] == 30
    assert data["xp"]["breakdown"]["distance"] == "5.0km >= 5km -> 5 bonus XP"
    assert data["total_xp"] == 30
    assert data["totals_reconciled"] is True


@pytest.mark.asyncio
async def test_create_run_negative_distance_rejected(client, user):
    response = await client.post(
        "/api/runs", json={"user_id": user.id, "date": "2025-09-28", "distance": -1}
    )

    assert response.status_code == 422
    assert await Run.all().count() == 0


@pytest.mark.asyncio
async def test_create_run_unknown_user(client, db):
    response = await client.post(
        "/api/runs", json={"user_id": 999, "date": "2025-09-28", "distance": 5.0}
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_runs_newest_first(client, user):
    for day in ("2025-09-28", "2025-09-29"):
        await client.post("/api/runs", json={"user_id": user.id, "date": day, "distance": 3.0})

    response = await client.get(f"/api/runs?user_id={user.id}")

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert [r["date"] for r in data["runs"]] == ["2025-09-29", "2025-09-28"]
    assert data["runs"][0]["streak_day"] == 2


@pytest.mark.asyncio
async def test_delete_run(client, user):
    created = await client.post(
        "/api/runs", json={"user_id": user.id, "date": "2025-09-28", "distance": 5.0}
    )
    run_id = created.json()["run_id"]

    forbidden = await client.delete(f"/api/runs/{run_id}?user_id={user.id + 1}")
    assert forbidden.status_code == 403

    response = await client.delete(f"/api/runs/{run_id}?user_id={user.id}")
    assert response.status_code == 200
    assert response.json() == {"success": True, "total_xp": 0}

    missing = await client.delete(f"/api/runs/{run_id}?user_id={user.id}")
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_update_run(client, user):
    created = await client.post(
        "/api/runs", json={"user_id": user.id, "date": "2025-09-28", "distance": 5.0}
    )
    run_id = created.json()["run_id"]

    forbidden = await client.put(
        f"/api/runs/{run_id}", json={"user_id": user.id + 1, "distance": 10.0}
    )
    assert forbidden.status_code == 403

    response = await client.put(
        f"/api/runs/{run_id}", json={"user_id": user.id, "distance": 10.0}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["xp_gained"] == 50
    assert data["total_xp"] == 50
    assert data["reprocessed"] is False

    moved = await client.put(
        f"/api/runs/{run_id}",
        json={"user_id": user.id, "distance": 10.0, "date": "2025-09-27"},
    )
    assert moved.status_code == 200
    assert moved.json()["reprocessed"] is True
    assert (await Run.get(id=run_id)).date == date(2025, 9, 27)

    missing = await client.put("/api/runs/12345", json={"user_id": user.id, "distance": 1.0})
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_xp_preview_writes_nothing(client, user):
    response = await client.post(
        "/api/xp/preview", json={"user_id": user.id, "date": "2025-09-28", "distance": 3.47}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["streak_day"] == 1
    assert data["xp"]["final_xp"] == 21
    assert await Run.all().count() == 0


@pytest.mark.asyncio
async def test_user_stats(client, user):
    await client.post(
        "/api/runs", json={"user_id": user.id, "date": "2025-09-28", "distance": 5.0}
    )
    await client.post(
        "/api/runs", json={"user_id": user.id, "date": "2025-09-29", "distance": 3.0}
    )

    response = await client.get(f"/api/users/{user.id}/stats")

    assert response.status_code == 200
    data = response.json()
    assert data["total_xp"] == 51
    assert data["total_runs"] == 2
    assert data["level"]["current_level"] == 2
    assert data["streak"]["longest_streak"] == 2
    assert data["streak"]["degraded"] is False


@pytest.mark.asyncio
async def test_user_stats_degraded_streak(client, user, monkeypatch):
    async def broken_get_run_dates(user_id):
        raise UpstreamFetchError("read timeout")

    monkeypatch.setattr(run_repo, "get_run_dates", broken_get_run_dates)

    response = await client.get(f"/api/users/{user.id}/stats")

    assert response.status_code == 200
    assert response.json()["streak"] == {
        "current_streak": 0,
        "longest_streak": 0,
        "degraded": True,
    }


@pytest.mark.asyncio
async def test_user_stats_unknown_user(client, db):
    response = await client.get("/api/users/999/stats")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_import_endpoint(client, user):
    activities = [
        {"id": 1, "start_date_local": "2025-09-28T06:30:00Z", "distance": 5000, "type": "Run"},
        {"id": 2, "start_date_local": "2025-09-28T18:00:00Z", "distance": 30000, "type": "Ride"},
    ]

    response = await client.post(
        f"/api/users/{user.id}/import", json={"activities": activities}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["imported"] == 1
    assert data["skipped"] == 1
    assert data["items"][0]["xp_gained"] == 30


@pytest.mark.asyncio
async def test_leaderboard_endpoints(client, user):
    await client.post(
        "/api/runs", json={"user_id": user.id, "date": "2025-09-28", "distance": 5.0}
    )

    board = await client.get("/api/leaderboard?metric=xp")
    assert board.status_code == 200
    assert board.json()["entries"][0]["user_id"] == user.id

    bad = await client.get("/api/leaderboard?metric=elevation")
    assert bad.status_code == 422
    assert bad.json()["error"] == "InvalidInputError"

    titles = await client.get("/api/leaderboard/titles")
    assert titles.status_code == 200
    assert {t["id"] for t in titles.json()} >= {"xp_champion", "on_fire"}


@pytest.mark.asyncio
async def test_admin_reconcile(client, user):
    await Run.create(user=user, date=date(2025, 9, 28), distance=5.0, xp_gained=30)

    dry = await client.post("/api/admin/reconcile?dry_run=true")
    assert dry.json()["fixed"] == 1
    await user.refresh_from_db()
    assert user.total_xp == 0

    response = await client.post(f"/api/admin/users/{user.id}/reconcile")
    assert response.status_code == 200
    assert response.json()["total_xp"] == 30
    assert response.json()["has_discrepancy"] is True

    missing = await client.post("/api/admin/users/999/reconcile")
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_admin_reprocess(client, user):
    await Run.create(user=user, date=date(2025, 9, 28), distance=5.0, xp_gained=0)

    response = await client.post(f"/api/admin/users/{user.id}/reprocess")

    assert response.status_code == 200
    assert response.json()["runs_updated"] == 1
    assert response.json()["total_xp"] == 30


@pytest.mark.parametrize(
    "error, expected",
    [
        (InvalidInputError("bad"), 422),
        (UpstreamFetchError("down"), 503),
        (ReconciliationError(1, "user not found"), 404),
        (ComputationError("zero"), 500),
        (DuplicateRunError("dup"), 500),
        (PersistenceError("disk"), 500),
    ],
)
def test_status_for_error(error, expected):
    assert status_for_error(error) == expected
