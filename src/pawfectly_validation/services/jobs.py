"""Queue worker that drives per-photo validation with bounded retries."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol
from uuid import UUID, uuid4

from pawfectly_validation.domain.jobs import JobBatchReport, ValidationJob
from pawfectly_validation.services.validation import (
    PhotoInsertEvent,
    PhotoValidationService,
)

logger = logging.getLogger(__name__)

BASE_BACKOFF_SECONDS = 60
MAX_BACKOFF_SECONDS = 30 * 60


class JobRepository(Protocol):
    """Persistence interface for photo validation jobs."""

    def claim_jobs(self, limit: int, worker_id: str) -> list[ValidationJob]:
        """Lock up to ``limit`` due jobs and increment their attempts."""

    def mark_done(self, job_id: UUID) -> None:
        """Mark a job as completed."""

    def reschedule(self, job_id: UUID, error: str, next_run_at: datetime) -> None:
        """Release a job back to the queue for a later attempt."""

    def mark_failed(self, job_id: UUID, error: str) -> None:
        """Move a job to the manual-review queue."""

    def list_failed(self, limit: int) -> list[ValidationJob]:
        """Return jobs awaiting manual review."""

    def requeue(self, job_id: UUID) -> bool:
        """Put a failed job back in the queue with fresh attempts."""


def compute_backoff(attempts: int) -> timedelta:
    """Exponential backoff: 1m, 2m, 4m, ... capped at 30m."""
    seconds = BASE_BACKOFF_SECONDS * 2 ** max(0, attempts - 1)
    return timedelta(seconds=min(seconds, MAX_BACKOFF_SECONDS))


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class ValidationJobWorker:
    """Claims queued jobs and runs them through the photo state machine."""

    repository: JobRepository
    validation_service: PhotoValidationService
    max_attempts: int = 5
    clock: Callable[[], datetime] = field(default=_utcnow)

    async def process_batch(self, limit: int) -> JobBatchReport:
        """Process up to ``limit`` jobs and report what happened."""
        worker_id = f"worker:{uuid4()}"
        jobs = self.repository.claim_jobs(limit, worker_id)
        processed = errors = dead_lettered = 0
        for job in jobs:
            event = _event_for(job)
            if event is None:
                self.repository.mark_failed(job.id, "Malformed job payload")
                errors += 1
                dead_lettered += 1
                continue
            try:
                await self.validation_service.validate(event)
            except Exception as exc:
                logger.exception("Validation job %s failed", job.id)
                errors += 1
                if self._retry_or_fail(job, exc):
                    dead_lettered += 1
                continue
            self.repository.mark_done(job.id)
            processed += 1
        if jobs:
            logger.info(
                "Worker %s claimed %s jobs: %s processed, %s errors",
                worker_id,
                len(jobs),
                processed,
                errors,
            )
        return JobBatchReport(
            claimed=len(jobs),
            processed=processed,
            errors=errors,
            dead_lettered=dead_lettered,
        )

    def _retry_or_fail(self, job: ValidationJob, exc: Exception) -> bool:
        """Reschedule the job, or dead-letter it once attempts run out."""
        message = str(exc) or exc.__class__.__name__
        if job.attempts >= self.max_attempts:
            logger.error(
                "Job %s for photo %s exhausted %s attempts, needs manual review",
                job.id,
                job.photo_id,
                job.attempts,
            )
            self.repository.mark_failed(job.id, message)
            return True
        next_run_at = self.clock() + compute_backoff(job.attempts)
        self.repository.reschedule(job.id, message, next_run_at)
        return False


def _event_for(job: ValidationJob) -> PhotoInsertEvent | None:
    if not job.photo_id or not job.storage_path or not job.bucket_type:
        return None
    return PhotoInsertEvent(
        id=job.photo_id,
        user_id=job.user_id,
        storage_path=job.storage_path,
        bucket_type=job.bucket_type,
        target_type=job.target_type,
        status="pending",
        dog_slot=job.dog_slot,
    )
