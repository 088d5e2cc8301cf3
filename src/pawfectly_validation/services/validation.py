"""Per-photo validation state machine.

A photo moves from ``pending`` to ``approved`` or ``rejected`` exactly once.
The decision table in :func:`decide_photo` is evaluated in order and the
first matching rule wins.
"""

import logging
from dataclasses import dataclass
from uuid import UUID

from pydantic import BaseModel, ValidationError, model_validator

from pawfectly_validation.domain.classification import ContentAnalysis, ModerationResult
from pawfectly_validation.domain.photos import (
    REASON_CONTACT_INFO,
    REASON_DOG_WITHOUT_HUMAN,
    REASON_HUMAN_WITHOUT_DOG,
    REASON_MISSING_DOG,
    REASON_MISSING_HUMAN,
    REASON_NSFW,
    REASON_SCREENSHOT,
    REASON_UNKNOWN_TARGET,
    REASON_URL_FAILED,
    TARGET_DOG,
    TARGET_HUMAN,
    PhotoDecision,
    PhotoRecord,
)
from pawfectly_validation.errors import ClassifierError, InvalidPhotoEvent
from pawfectly_validation.services.classifier import ContentClassifier
from pawfectly_validation.services.intake import PhotoRepository, PhotoStorage

logger = logging.getLogger(__name__)

OUTCOME_SKIPPED = "skipped"


class PhotoInsertEvent(BaseModel):
    """Payload delivered when a photo row is inserted."""

    id: UUID
    user_id: UUID | None = None
    storage_path: str
    bucket_type: str
    target_type: str | None = None
    status: str | None = None
    dog_slot: int | None = None

    @model_validator(mode="after")
    def _default_target(self) -> "PhotoInsertEvent":
        if not self.target_type:
            self.target_type = self.bucket_type
        return self

    @classmethod
    def from_payload(cls, payload: dict[str, object]) -> "PhotoInsertEvent":
        """Parse a bare record or a ``{"record": ...}`` webhook envelope."""
        envelope = payload.get("record")
        record = envelope if isinstance(envelope, dict) else payload
        missing = [
            name
            for name in ("id", "storage_path", "bucket_type")
            if not record.get(name)
        ]
        if missing:
            raise InvalidPhotoEvent(f"Missing required fields: {', '.join(missing)}")
        try:
            return cls.model_validate(record)
        except ValidationError as exc:
            raise InvalidPhotoEvent(str(exc)) from exc


@dataclass(frozen=True)
class PhotoValidationOutcome:
    """What the state machine did with one photo."""

    photo_id: UUID
    status: str
    reason: str | None = None


def decide_photo(
    target_type: str,
    moderation: ModerationResult | None,
    analysis: ContentAnalysis,
) -> PhotoDecision:
    """Apply the ordered approval policy to classifier output."""
    if moderation is not None and moderation.flagged:
        return PhotoDecision.reject(REASON_NSFW)
    if analysis.is_nsfw:
        return PhotoDecision.reject(REASON_NSFW)
    if analysis.is_screenshot:
        return PhotoDecision.reject(REASON_SCREENSHOT)
    if analysis.has_text:
        return PhotoDecision.reject(REASON_CONTACT_INFO)

    if target_type == TARGET_HUMAN:
        if analysis.has_human:
            return PhotoDecision.approve(
                contains_human=analysis.has_human, contains_dog=analysis.has_dog
            )
        if analysis.has_dog:
            return PhotoDecision.reject(REASON_DOG_WITHOUT_HUMAN)
        return PhotoDecision.reject(REASON_MISSING_HUMAN)

    if target_type == TARGET_DOG:
        if analysis.has_dog:
            return PhotoDecision.approve(
                contains_human=analysis.has_human, contains_dog=analysis.has_dog
            )
        if analysis.has_human:
            return PhotoDecision.reject(REASON_HUMAN_WITHOUT_DOG)
        return PhotoDecision.reject(REASON_MISSING_DOG)

    return PhotoDecision.reject(REASON_UNKNOWN_TARGET)


@dataclass
class PhotoValidationService:
    """Runs the classifier on a pending photo and commits its terminal status."""

    repository: PhotoRepository
    storage: PhotoStorage
    classifier: ContentClassifier

    async def validate(self, event: PhotoInsertEvent) -> PhotoValidationOutcome:
        """Validate one photo.

        Already-terminal or deleted photos are skipped. ``ClassifierError``
        from the analysis call propagates and leaves the photo pending.
        """
        photo_id = event.id
        existing = self.repository.get_photo(photo_id)
        if existing is None:
            logger.warning("Photo %s no longer exists, skipping", photo_id)
            return PhotoValidationOutcome(photo_id, OUTCOME_SKIPPED, "photo_missing")
        if existing.is_terminal:
            logger.info(
                "Photo %s already %s, skipping", photo_id, existing.status
            )
            return PhotoValidationOutcome(photo_id, OUTCOME_SKIPPED, existing.status)

        target_type = existing.target_type or event.target_type
        logger.info(
            "Processing photo %s, bucket_type: %s, target_type: %s",
            photo_id,
            event.bucket_type,
            target_type,
        )

        image_url = self._resolve_url(existing.storage_path)
        if not image_url:
            logger.error("Could not generate public URL for photo %s", photo_id)
            return self._commit(existing, PhotoDecision.reject(REASON_URL_FAILED))

        moderation = await self._moderate(photo_id, image_url)
        if moderation is not None and moderation.flagged:
            decision = decide_photo(target_type, moderation, ContentAnalysis())
            return self._commit(existing, decision)

        analysis = await self.classifier.analyze(image_url)
        logger.info(
            "Photo %s vision result: human=%s dog=%s text=%s nsfw=%s screenshot=%s",
            photo_id,
            analysis.has_human,
            analysis.has_dog,
            analysis.has_text,
            analysis.is_nsfw,
            analysis.is_screenshot,
        )
        return self._commit(existing, decide_photo(target_type, moderation, analysis))

    def _resolve_url(self, storage_path: str) -> str | None:
        try:
            return self.storage.public_url(storage_path)
        except Exception:
            logger.exception("Public URL lookup failed for %s", storage_path)
            return None

    async def _moderate(
        self, photo_id: UUID, image_url: str
    ) -> ModerationResult | None:
        try:
            result = await self.classifier.moderate(image_url)
        except ClassifierError as exc:
            logger.warning(
                "Moderation unavailable for photo %s, falling back to vision: %s",
                photo_id,
                exc,
            )
            return None
        logger.info("Photo %s moderation flagged: %s", photo_id, result.flagged)
        return result

    def _commit(
        self, photo: PhotoRecord, decision: PhotoDecision
    ) -> PhotoValidationOutcome:
        if not self.repository.apply_decision(photo.id, decision):
            logger.warning(
                "Photo %s left pending state concurrently, decision dropped", photo.id
            )
            return PhotoValidationOutcome(photo.id, OUTCOME_SKIPPED, "not_pending")
        logger.info(
            "Photo %s %s, reason: %s",
            photo.id,
            decision.status,
            decision.reason or "none",
        )
        if decision.deletes_storage:
            self._delete_object(photo.storage_path)
        return PhotoValidationOutcome(photo.id, decision.status, decision.reason)

    def _delete_object(self, storage_path: str) -> None:
        try:
            self.storage.remove(storage_path)
        except Exception:
            logger.exception("Failed to delete photo from storage %s", storage_path)
        else:
            logger.info("Deleted photo from storage: %s", storage_path)
