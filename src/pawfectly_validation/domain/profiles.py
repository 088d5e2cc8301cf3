"""Domain models for profile eligibility."""

from dataclasses import dataclass, field
from uuid import UUID

LIFECYCLE_PENDING_REVIEW = "pending_review"
LIFECYCLE_LIMITED = "limited"
LIFECYCLE_ACTIVE = "active"

VALIDATION_IN_PROGRESS = "in_progress"
VALIDATION_PASSED = "passed"
VALIDATION_FAILED_PHOTOS = "failed_photos"
VALIDATION_FAILED_REQUIREMENTS = "failed_requirements"

RESULT_SUCCESS = "success"
RESULT_SKIPPED = "skipped"
SKIP_RUN_SUPERSEDED = "run_superseded"


@dataclass(frozen=True)
class ProfileRecord:
    """Validation-related columns of a profile row."""

    user_id: UUID
    lifecycle_status: str
    validation_status: str
    validation_run_id: int | None


@dataclass(frozen=True)
class EligibilitySummary:
    """Aggregate counts computed over a user's photos."""

    approved_human_count: int
    all_dogs_covered: bool
    has_any_rejected: bool
    dog_slots: list[int] = field(default_factory=list)

    @property
    def minimum_met(self) -> bool:
        return self.approved_human_count >= 1 and self.all_dogs_covered


@dataclass(frozen=True)
class EligibilityDecision:
    """Profile statuses chosen by the aggregator."""

    lifecycle_status: str
    validation_status: str


@dataclass(frozen=True)
class EligibilityResult:
    """Result returned to callers of the aggregator."""

    status: str
    user_id: UUID
    validation_run_id: int
    summary: EligibilitySummary | None = None
    decision: EligibilityDecision | None = None
    reason: str | None = None

    @property
    def skipped(self) -> bool:
        return self.status == RESULT_SKIPPED
