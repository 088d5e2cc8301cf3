"""Media intake: normalize, upload, and register submitted photos."""

import logging
import secrets
import string
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from pawfectly_validation.domain.photos import (
    HUMAN_SLOT_FOLDER,
    TARGET_DOG,
    TARGET_HUMAN,
    TARGET_TYPES,
    UPLOAD_MIME_TYPE,
    NewPhoto,
    PhotoDecision,
    PhotoRecord,
)
from pawfectly_validation.services.imaging import normalize_image, validate_mime_type

logger = logging.getLogger(__name__)

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits
_SUFFIX_LENGTH = 7
DEFAULT_DOG_SLOT = 1


class PhotoStorage(Protocol):
    """Object storage for photo bytes."""

    def upload(self, path: str, content: bytes, content_type: str) -> None:
        """Write bytes at ``path`` without overwriting an existing object."""

    def remove(self, path: str) -> None:
        """Delete the object at ``path``."""

    def public_url(self, path: str) -> str | None:
        """Return a publicly readable URL for ``path``."""


class PhotoRepository(Protocol):
    """Persistence interface for photo rows."""

    def create_photo(self, photo: NewPhoto) -> PhotoRecord:
        """Insert a pending photo row and return it."""

    def get_photo(self, photo_id: UUID) -> PhotoRecord | None:
        """Return a photo by id, if present."""

    def list_user_photos(self, user_id: UUID) -> list[PhotoRecord]:
        """Return every photo owned by the user, any status."""

    def apply_decision(self, photo_id: UUID, decision: PhotoDecision) -> bool:
        """Move a pending photo to its terminal status.

        Returns ``False`` when the photo was no longer pending.
        """


def build_storage_path(
    user_id: UUID,
    target_type: str,
    dog_slot: int | None,
    now: datetime,
    suffix: str,
) -> str:
    """Build ``users/{user}/{target}/{slot-or-NA}/{millis}_{suffix}.jpg``."""
    folder = HUMAN_SLOT_FOLDER if dog_slot is None else str(dog_slot)
    millis = int(now.timestamp() * 1000)
    return f"users/{user_id}/{target_type}/{folder}/{millis}_{suffix}.jpg"


def _random_suffix() -> str:
    return "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(_SUFFIX_LENGTH))


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class MediaIntakeService:
    """Validates, resizes, and uploads photos, then records them as pending."""

    storage: PhotoStorage
    repository: PhotoRepository
    clock: Callable[[], datetime] = field(default=_utcnow)
    suffix_factory: Callable[[], str] = field(default=_random_suffix)

    def submit(  # noqa: PLR0913
        self,
        user_id: UUID,
        content: bytes,
        target_type: str,
        mime_type: str | None = None,
        dog_slot: int | None = None,
    ) -> PhotoRecord:
        """Store a submitted photo and insert its pending row.

        Upload and insert are sequential: a failed upload leaves no row, and
        a failed insert removes the uploaded object before re-raising.
        """
        if target_type not in TARGET_TYPES:
            raise ValueError(f"Unsupported target type: {target_type}")
        validate_mime_type(mime_type)
        slot = _resolve_slot(target_type, dog_slot)
        image = normalize_image(content)
        path = build_storage_path(
            user_id, target_type, slot, self.clock(), self.suffix_factory()
        )
        logger.info(
            "Uploading %s photo for user %s to %s (%sx%s)",
            target_type,
            user_id,
            path,
            image.width,
            image.height,
        )
        self.storage.upload(path, image.content, UPLOAD_MIME_TYPE)
        try:
            return self.repository.create_photo(
                NewPhoto(
                    user_id=user_id,
                    dog_slot=slot,
                    target_type=target_type,
                    storage_path=path,
                    width=image.width,
                    height=image.height,
                )
            )
        except Exception:
            logger.exception("Failed to record photo %s, removing upload", path)
            try:
                self.storage.remove(path)
            except Exception:
                logger.exception("Failed to remove orphaned upload %s", path)
            raise


def _resolve_slot(target_type: str, dog_slot: int | None) -> int | None:
    if target_type == TARGET_HUMAN:
        return None
    if target_type == TARGET_DOG and dog_slot is None:
        return DEFAULT_DOG_SLOT
    if dog_slot is not None and dog_slot < 1:
        raise ValueError(f"Dog slot must be positive, got {dog_slot}")
    return dog_slot
