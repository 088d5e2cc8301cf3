"""Supabase Storage adapter for photo objects."""

import logging
from dataclasses import dataclass

from storage3.utils import StorageException
from supabase import Client

from pawfectly_validation.errors import StorageWriteConflict, StorageWriteError
from pawfectly_validation.services.intake import PhotoStorage

logger = logging.getLogger(__name__)

_CONFLICT_MARKERS = ("already exists", "duplicate", "409")


@dataclass
class SupabasePhotoStorage(PhotoStorage):
    """Photo storage in a public Supabase bucket."""

    client: Client
    bucket: str = "photos"

    def upload(self, path: str, content: bytes, content_type: str) -> None:
        """Upload bytes without upsert; an existing object is a conflict."""
        try:
            self.client.storage.from_(self.bucket).upload(
                path,
                content,
                {"content-type": content_type, "upsert": "false"},
            )
        except StorageException as exc:
            if _is_conflict(exc):
                raise StorageWriteConflict(f"Object already exists: {path}") from exc
            logger.error("Upload to %s failed: %s", path, exc)
            raise StorageWriteError(f"Failed to upload photo: {exc}") from exc

    def remove(self, path: str) -> None:
        """Delete a single object."""
        self.client.storage.from_(self.bucket).remove([path])

    def public_url(self, path: str) -> str | None:
        """Return the public URL for an object."""
        url = self.client.storage.from_(self.bucket).get_public_url(path)
        return url or None


def _is_conflict(exc: StorageException) -> bool:
    status = getattr(exc, "status", None)
    if str(status) == "409":
        return True
    message = str(exc).lower()
    return any(marker in message for marker in _CONFLICT_MARKERS)
