"""Admin service for the manual-review queue."""

from dataclasses import dataclass
from uuid import UUID

from pawfectly_validation.domain.jobs import ValidationJob
from pawfectly_validation.services.jobs import JobRepository


@dataclass
class AdminService:
    """Service behind the admin endpoints."""

    job_repository: JobRepository

    def list_failed_jobs(self, limit: int = 50) -> list[dict[str, object]]:
        """Return dead-lettered jobs for manual review."""
        return [_serialize_job(job) for job in self.job_repository.list_failed(limit)]

    def retry_job(self, job_id: UUID) -> bool:
        """Requeue a dead-lettered job."""
        return self.job_repository.requeue(job_id)


def _serialize_job(job: ValidationJob) -> dict[str, object]:
    return {
        "id": str(job.id),
        "photo_id": str(job.photo_id) if job.photo_id else None,
        "user_id": str(job.user_id) if job.user_id else None,
        "storage_path": job.storage_path,
        "target_type": job.target_type,
        "dog_slot": job.dog_slot,
        "attempts": job.attempts,
        "last_error": job.last_error,
        "status": job.status,
    }
