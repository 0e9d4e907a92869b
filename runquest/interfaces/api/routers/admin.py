"""
Admin API router (repair tooling over HTTP).

IMPORTANT: put this behind the admin guard of the deployment; this router
does no access control itself.

Endpoints:
- POST /api/admin/reconcile - Recount totals for every user
- POST /api/admin/users/{id}/reconcile - Recount totals for one user
- POST /api/admin/users/{id}/reprocess - Restamp streak days + XP on all runs
"""

from fastapi import APIRouter, Query

from runquest.core.use_cases.reconcile_totals import reconcile_all_users, reconcile_user_totals
from runquest.core.use_cases.reprocess_runs import reprocess_user_runs
from runquest.interfaces.api.schemas import (
    ReconcileFailureResponse,
    ReconcileReportResponse,
    ReconcileUserResponse,
    ReprocessResponse,
)

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.post("/reconcile", response_model=ReconcileReportResponse)
async def reconcile_all(
    dry_run: bool = Query(default=False, description="Report only, write nothing"),
) -> ReconcileReportResponse:
    report = await reconcile_all_users(dry_run=dry_run)
    return ReconcileReportResponse(
        checked=report.checked,
        fixed=report.fixed,
        already_correct=report.already_correct,
        failed=report.failed,
        results=[ReconcileUserResponse.model_validate(r) for r in report.results],
        failures=[
            ReconcileFailureResponse(user_id=f.user_id, reason=f.reason)
            for f in report.failures
        ],
    )


@router.post("/users/{user_id}/reconcile", response_model=ReconcileUserResponse)
async def reconcile_user(user_id: int) -> ReconcileUserResponse:
    result = await reconcile_user_totals(user_id)
    return ReconcileUserResponse.model_validate(result)


@router.post("/users/{user_id}/reprocess", response_model=ReprocessResponse)
async def reprocess_user(user_id: int) -> ReprocessResponse:
    result = await reprocess_user_runs(user_id)
    return ReprocessResponse.model_validate(result)
