"""Domain models for queued photo validation jobs."""

from dataclasses import dataclass
from uuid import UUID

JOB_QUEUED = "queued"
JOB_PROCESSING = "processing"
JOB_DONE = "done"
JOB_ERROR = "error"


@dataclass(frozen=True)
class ValidationJob:
    """A claimed or listed photo validation job."""

    id: UUID
    photo_id: UUID | None
    user_id: UUID | None
    storage_path: str | None
    bucket_type: str | None
    target_type: str | None
    dog_slot: int | None
    attempts: int
    last_error: str | None = None
    status: str = JOB_PROCESSING


@dataclass(frozen=True)
class JobBatchReport:
    """Counts for one worker pass over claimed jobs."""

    claimed: int
    processed: int
    errors: int
    dead_lettered: int
