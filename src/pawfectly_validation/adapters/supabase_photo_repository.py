"""Supabase-backed photo repository."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from pawfectly_validation.domain.photos import (
    STATUS_PENDING,
    NewPhoto,
    PhotoDecision,
    PhotoRecord,
)
from pawfectly_validation.services.intake import PhotoRepository

_PHOTO_COLUMNS = (
    "id, user_id, dog_slot, bucket_type, target_type, storage_path, width, height, "
    "mime_type, status, contains_human, contains_dog, rejection_reason"
)


@dataclass
class SupabasePhotoRepository(PhotoRepository):
    """Supabase implementation for photo rows."""

    client: Client

    def create_photo(self, photo: NewPhoto) -> PhotoRecord:
        """Insert a pending photo row and return it."""
        response = (
            self.client.table("photos")
            .insert(
                {
                    "user_id": str(photo.user_id),
                    "dog_slot": photo.dog_slot,
                    "bucket_type": photo.target_type,
                    "target_type": photo.target_type,
                    "storage_path": photo.storage_path,
                    "width": photo.width,
                    "height": photo.height,
                    "mime_type": photo.mime_type,
                    "status": STATUS_PENDING,
                    "contains_dog": False,
                    "contains_human": False,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create photo record")
        return _to_record(response.data[0])

    def get_photo(self, photo_id: UUID) -> PhotoRecord | None:
        """Return a photo by id, if present."""
        response = (
            self.client.table("photos")
            .select(_PHOTO_COLUMNS)
            .eq("id", str(photo_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _to_record(response.data[0])

    def list_user_photos(self, user_id: UUID) -> list[PhotoRecord]:
        """Return all photos for a user regardless of status."""
        response = (
            self.client.table("photos")
            .select(_PHOTO_COLUMNS)
            .eq("user_id", str(user_id))
            .execute()
        )
        return [_to_record(row) for row in response.data or []]

    def apply_decision(self, photo_id: UUID, decision: PhotoDecision) -> bool:
        """Set the terminal status, only while the photo is still pending."""
        payload: dict[str, object] = {
            "status": decision.status,
            "rejection_reason": decision.reason,
        }
        if decision.approved:
            payload["contains_human"] = decision.contains_human
            payload["contains_dog"] = decision.contains_dog
        response = (
            self.client.table("photos")
            .update(payload)
            .eq("id", str(photo_id))
            .eq("status", STATUS_PENDING)
            .execute()
        )
        return bool(response.data)


def _to_record(row: dict[str, object]) -> PhotoRecord:
    bucket_type = row.get("bucket_type")
    return PhotoRecord(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        dog_slot=row.get("dog_slot"),
        bucket_type=bucket_type,
        target_type=row.get("target_type") or bucket_type,
        storage_path=row["storage_path"],
        width=row.get("width"),
        height=row.get("height"),
        mime_type=row.get("mime_type"),
        status=row["status"],
        contains_human=bool(row.get("contains_human")),
        contains_dog=bool(row.get("contains_dog")),
        rejection_reason=row.get("rejection_reason"),
    )
