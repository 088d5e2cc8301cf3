"""Internal endpoints invoked by database triggers and schedulers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, Body, Depends, Header, HTTPException, Request, status

from pawfectly_validation.api.models import (
    ProfileValidationRequest,
    serialize_eligibility,
)
from pawfectly_validation.config import parse_job_limit
from pawfectly_validation.services.validation import PhotoInsertEvent

if TYPE_CHECKING:
    from pawfectly_validation.containers import AppContainer

logger = logging.getLogger(__name__)

router = APIRouter(tags=["hooks"])


def _get_internal_secret(request: Request) -> str | None:
    container: AppContainer = request.app.state.container
    return container.settings.internal_secret


async def require_internal_secret(
    x_internal_secret: str | None = Header(default=None),
    internal_secret: str | None = Depends(_get_internal_secret),
) -> None:
    """Reject callers without the shared secret, when one is configured."""
    if internal_secret and x_internal_secret != internal_secret:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.post("/hooks/validate-photo", dependencies=[Depends(require_internal_secret)])
async def validate_photo(
    request: Request, payload: dict[str, Any] = Body(...)
) -> dict[str, object]:
    """Validate a newly inserted photo."""
    container: AppContainer = request.app.state.container
    event = PhotoInsertEvent.from_payload(payload)
    outcome = await container.validation_service.validate(event)
    return {
        "photo_id": str(outcome.photo_id),
        "status": outcome.status,
        "reason": outcome.reason,
    }


@router.post(
    "/hooks/validate-profile", dependencies=[Depends(require_internal_secret)]
)
async def validate_profile(
    body: ProfileValidationRequest, request: Request
) -> dict[str, object]:
    """Aggregate photo results into a profile decision for one run."""
    container: AppContainer = request.app.state.container
    result = container.eligibility_service.evaluate(
        body.user_id, body.validation_run_id
    )
    return serialize_eligibility(result)


@router.post("/jobs/process", dependencies=[Depends(require_internal_secret)])
async def process_jobs(request: Request, limit: str | None = None) -> dict[str, int]:
    """Run one worker pass over queued validation jobs."""
    container: AppContainer = request.app.state.container
    batch_limit = parse_job_limit(limit, container.settings.job_batch_limit)
    report = await container.job_worker.process_batch(batch_limit)
    return {
        "claimed": report.claimed,
        "processed": report.processed,
        "errors": report.errors,
        "dead_lettered": report.dead_lettered,
    }
