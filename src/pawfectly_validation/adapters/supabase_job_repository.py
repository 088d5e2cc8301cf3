"""Supabase-backed photo validation job repository."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from pawfectly_validation.domain.jobs import (
    JOB_DONE,
    JOB_ERROR,
    JOB_PROCESSING,
    JOB_QUEUED,
    ValidationJob,
)
from pawfectly_validation.services.jobs import JobRepository

_JOB_COLUMNS = (
    "id, photo_id, user_id, storage_path, bucket_type, target_type, dog_slot, "
    "attempts, last_error, status"
)


@dataclass
class SupabaseJobRepository(JobRepository):
    """Job queue stored in the photo_validation_jobs table."""

    client: Client

    def claim_jobs(self, limit: int, worker_id: str) -> list[ValidationJob]:
        """Claim due jobs through the claim_photo_validation_jobs function."""
        response = self.client.rpc(
            "claim_photo_validation_jobs", {"p_limit": limit, "p_worker": worker_id}
        ).execute()
        rows = response.data or []
        return [_to_job(row, default_status=JOB_PROCESSING) for row in rows]

    def mark_done(self, job_id: UUID) -> None:
        """Mark a job as completed."""
        self.client.table("photo_validation_jobs").update(
            {"status": JOB_DONE, "last_error": None}
        ).eq("id", str(job_id)).execute()

    def reschedule(self, job_id: UUID, error: str, next_run_at: datetime) -> None:
        """Return a job to the queue with a later run time."""
        self.client.table("photo_validation_jobs").update(
            {
                "status": JOB_QUEUED,
                "last_error": error,
                "next_run_at": next_run_at.isoformat(),
                "locked_at": None,
                "locked_by": None,
            }
        ).eq("id", str(job_id)).execute()

    def mark_failed(self, job_id: UUID, error: str) -> None:
        """Dead-letter a job for manual review."""
        self.client.table("photo_validation_jobs").update(
            {
                "status": JOB_ERROR,
                "last_error": error,
                "locked_at": None,
                "locked_by": None,
            }
        ).eq("id", str(job_id)).execute()

    def list_failed(self, limit: int) -> list[ValidationJob]:
        """Return dead-lettered jobs, newest first."""
        response = (
            self.client.table("photo_validation_jobs")
            .select(_JOB_COLUMNS)
            .eq("status", JOB_ERROR)
            .order("updated_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_to_job(row, default_status=JOB_ERROR) for row in response.data or []]

    def requeue(self, job_id: UUID) -> bool:
        """Reset a dead-lettered job so workers pick it up again."""
        response = (
            self.client.table("photo_validation_jobs")
            .update(
                {
                    "status": JOB_QUEUED,
                    "attempts": 0,
                    "next_run_at": datetime.now(tz=UTC).isoformat(),
                    "locked_at": None,
                    "locked_by": None,
                }
            )
            .eq("id", str(job_id))
            .eq("status", JOB_ERROR)
            .execute()
        )
        return bool(response.data)


def _to_job(row: dict[str, object], default_status: str) -> ValidationJob:
    return ValidationJob(
        id=UUID(str(row["id"])),
        photo_id=UUID(str(row["photo_id"])) if row.get("photo_id") else None,
        user_id=UUID(str(row["user_id"])) if row.get("user_id") else None,
        storage_path=row.get("storage_path"),
        bucket_type=row.get("bucket_type"),
        target_type=row.get("target_type"),
        dog_slot=row.get("dog_slot"),
        attempts=int(row.get("attempts") or 0),
        last_error=row.get("last_error"),
        status=row.get("status") or default_status,
    )
