"""Profile eligibility aggregation over a user's full photo set."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from pawfectly_validation.domain.photos import (
    STATUS_APPROVED,
    STATUS_REJECTED,
    PhotoRecord,
)
from pawfectly_validation.domain.profiles import (
    LIFECYCLE_ACTIVE,
    LIFECYCLE_LIMITED,
    LIFECYCLE_PENDING_REVIEW,
    RESULT_SKIPPED,
    RESULT_SUCCESS,
    SKIP_RUN_SUPERSEDED,
    VALIDATION_FAILED_PHOTOS,
    VALIDATION_FAILED_REQUIREMENTS,
    VALIDATION_PASSED,
    EligibilityDecision,
    EligibilityResult,
    EligibilitySummary,
)
from pawfectly_validation.services.intake import PhotoRepository
from pawfectly_validation.services.run_guard import ValidationRunGuard

logger = logging.getLogger(__name__)


class DogRepository(Protocol):
    """Read access to the dogs a user has declared."""

    def list_active_slots(self, user_id: UUID) -> list[int]:
        """Return slots of the user's active dogs."""


def compute_eligibility(
    dog_slots: Iterable[int], photos: Iterable[PhotoRecord]
) -> EligibilitySummary:
    """Compute the aggregate counts used by the decision table.

    With no declared dogs, ``all_dogs_covered`` is ``False``.
    """
    slots = sorted(set(dog_slots))
    photo_list = list(photos)
    approved = [photo for photo in photo_list if photo.status == STATUS_APPROVED]
    approved_human_count = sum(
        1 for photo in approved if photo.dog_slot is None and photo.contains_human
    )
    covered_slots = {
        photo.dog_slot
        for photo in approved
        if photo.dog_slot is not None and photo.contains_dog
    }
    all_dogs_covered = bool(slots) and all(slot in covered_slots for slot in slots)
    has_any_rejected = any(photo.status == STATUS_REJECTED for photo in photo_list)
    return EligibilitySummary(
        approved_human_count=approved_human_count,
        all_dogs_covered=all_dogs_covered,
        has_any_rejected=has_any_rejected,
        dog_slots=slots,
    )


def decide_profile(summary: EligibilitySummary) -> EligibilityDecision:
    """Map aggregate counts to lifecycle and validation statuses."""
    if not summary.minimum_met:
        return EligibilityDecision(
            lifecycle_status=LIFECYCLE_PENDING_REVIEW,
            validation_status=VALIDATION_FAILED_REQUIREMENTS,
        )
    if summary.has_any_rejected:
        return EligibilityDecision(
            lifecycle_status=LIFECYCLE_LIMITED,
            validation_status=VALIDATION_FAILED_PHOTOS,
        )
    return EligibilityDecision(
        lifecycle_status=LIFECYCLE_ACTIVE,
        validation_status=VALIDATION_PASSED,
    )


@dataclass
class ProfileEligibilityService:
    """Evaluates a user's photos and commits the profile decision."""

    photo_repository: PhotoRepository
    dog_repository: DogRepository
    run_guard: ValidationRunGuard

    def start_run(self, user_id: UUID) -> int:
        """Begin a new validation pass and return its run token."""
        return self.run_guard.start(user_id)

    def evaluate(self, user_id: UUID, validation_run_id: int) -> EligibilityResult:
        """Evaluate eligibility for one run; stale runs are skipped."""
        if not self.run_guard.is_current(user_id, validation_run_id):
            return _skipped(user_id, validation_run_id)

        dog_slots = self.dog_repository.list_active_slots(user_id)
        photos = self.photo_repository.list_user_photos(user_id)
        summary = compute_eligibility(dog_slots, photos)
        decision = decide_profile(summary)

        if not self.run_guard.commit(user_id, validation_run_id, decision):
            return _skipped(user_id, validation_run_id)

        logger.info(
            "Applied validation result for user %s, run %s: %s, lifecycle: %s",
            user_id,
            validation_run_id,
            decision.validation_status,
            decision.lifecycle_status,
        )
        return EligibilityResult(
            status=RESULT_SUCCESS,
            user_id=user_id,
            validation_run_id=validation_run_id,
            summary=summary,
            decision=decision,
        )


def _skipped(user_id: UUID, validation_run_id: int) -> EligibilityResult:
    return EligibilityResult(
        status=RESULT_SKIPPED,
        user_id=user_id,
        validation_run_id=validation_run_id,
        reason=SKIP_RUN_SUPERSEDED,
    )
