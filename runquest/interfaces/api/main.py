"""
FastAPI application for RunQuest.

Thin HTTP surface over the run/XP use-cases. Authentication, sessions and
the admin guard are handled by the deployment in front of this app.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from tortoise import Tortoise

from runquest.config import config
from runquest.core.errors import (
    ComputationError,
    InvalidInputError,
    PersistenceError,
    ReconciliationError,
    RunQuestError,
    UpstreamFetchError,
)
from runquest.database.config import TORTOISE_ORM
from runquest.interfaces.api.routers import admin, leaderboard, runs, users

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await Tortoise.init(config=TORTOISE_ORM)
    if config.ENVIRONMENT != "production":
        await Tortoise.generate_schemas()
    logger.info("Database initialized")
    yield
    await Tortoise.close_connections()
    logger.info("Database connections closed")


app = FastAPI(
    title="RunQuest API",
    description="Runs, XP, streaks and leaderboards",
    version="1.0.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.API_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Most specific first: DuplicateRunError is a PersistenceError
_ERROR_STATUS: list[tuple[type[RunQuestError], int]] = [
    (InvalidInputError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (UpstreamFetchError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (ReconciliationError, status.HTTP_404_NOT_FOUND),
    (ComputationError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (PersistenceError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


def status_for_error(error: RunQuestError) -> int:
    for error_type, code in _ERROR_STATUS:
        if isinstance(error, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@app.exception_handler(RunQuestError)
async def runquest_error_handler(request: Request, exc: RunQuestError) -> JSONResponse:
    code = status_for_error(exc)
    if code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(
        status_code=code,
        content={"error": type(exc).__name__, "detail": str(exc)},
    )


app.include_router(runs.router)
app.include_router(users.router)
app.include_router(leaderboard.router)
app.include_router(admin.router)


@app.get("/api/health")
async def api_health():
    """API health check endpoint."""
    return {"status": "ok", "service": "runquest-api"}
