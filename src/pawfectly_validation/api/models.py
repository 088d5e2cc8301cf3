"""Request and response models for the HTTP API."""

from uuid import UUID

from pydantic import BaseModel, Field

from pawfectly_validation.domain.photos import PhotoRecord
from pawfectly_validation.domain.profiles import EligibilityResult
from pawfectly_validation.services.messages import rejection_message


class ProfileValidationRequest(BaseModel):
    """Body of the profile validation hook."""

    user_id: UUID
    validation_run_id: int = Field(ge=1)


class PhotoResponse(BaseModel):
    """Photo row as returned to clients."""

    id: UUID
    user_id: UUID
    dog_slot: int | None
    bucket_type: str
    target_type: str
    storage_path: str
    width: int | None
    height: int | None
    mime_type: str | None
    status: str
    contains_human: bool
    contains_dog: bool
    rejection_reason: str | None
    rejection_message: str | None

    @classmethod
    def from_record(cls, photo: PhotoRecord) -> "PhotoResponse":
        return cls(
            id=photo.id,
            user_id=photo.user_id,
            dog_slot=photo.dog_slot,
            bucket_type=photo.bucket_type,
            target_type=photo.target_type,
            storage_path=photo.storage_path,
            width=photo.width,
            height=photo.height,
            mime_type=photo.mime_type,
            status=photo.status,
            contains_human=photo.contains_human,
            contains_dog=photo.contains_dog,
            rejection_reason=photo.rejection_reason,
            rejection_message=rejection_message(photo.rejection_reason),
        )


def serialize_eligibility(result: EligibilityResult) -> dict[str, object]:
    """Flatten an aggregator result into the hook response body."""
    if result.skipped or result.summary is None or result.decision is None:
        return {
            "status": result.status,
            "reason": result.reason,
            "validation_run_id": result.validation_run_id,
        }
    summary = result.summary
    return {
        "status": result.status,
        "validation_run_id": result.validation_run_id,
        "lifecycle_status": result.decision.lifecycle_status,
        "validation_status": result.decision.validation_status,
        "approved_human_photos": summary.approved_human_count,
        "all_dogs_have_photos": summary.all_dogs_covered,
        "has_rejected_photos": summary.has_any_rejected,
        "minimum_requirements_met": summary.minimum_met,
        "dog_slots": summary.dog_slots,
    }
