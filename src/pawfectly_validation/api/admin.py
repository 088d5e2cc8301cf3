"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

if TYPE_CHECKING:
    from pawfectly_validation.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.get("/jobs/failed", dependencies=[Depends(require_admin)])
async def list_failed_jobs(request: Request, limit: int = 50) -> dict[str, object]:
    """Return validation jobs that exhausted their retries."""
    container: AppContainer = request.app.state.container
    return {"jobs": container.admin_service.list_failed_jobs(limit)}


@router.post("/jobs/{job_id}/retry", dependencies=[Depends(require_admin)])
async def retry_job(job_id: UUID, request: Request) -> dict[str, str]:
    """Requeue a failed validation job."""
    container: AppContainer = request.app.state.container
    if not container.admin_service.retry_job(job_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return {"status": "queued"}
