"""Domain models for submitted photos."""

from dataclasses import dataclass
from uuid import UUID

TARGET_HUMAN = "human"
TARGET_DOG = "dog"
TARGET_TYPES = frozenset({TARGET_HUMAN, TARGET_DOG})

STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
STATUS_REJECTED = "rejected"
TERMINAL_STATUSES = frozenset({STATUS_APPROVED, STATUS_REJECTED})

REASON_NSFW = "nsfw_or_disallowed"
REASON_SCREENSHOT = "is_screenshot"
REASON_CONTACT_INFO = "contains_contact_info"
REASON_MISSING_HUMAN = "missing_human"
REASON_MISSING_DOG = "missing_dog"
REASON_DOG_WITHOUT_HUMAN = "Dog detected but human is missing"
REASON_HUMAN_WITHOUT_DOG = "Human detected but dog is missing"
REASON_UNKNOWN_TARGET = "unknown_target_type"
REASON_URL_FAILED = "failed_to_generate_url"

# Reasons for which the stored object is kept.
KEEP_STORAGE_REASONS = frozenset({REASON_UNKNOWN_TARGET, REASON_URL_FAILED})

HUMAN_SLOT_FOLDER = "NA"
UPLOAD_MIME_TYPE = "image/jpeg"


@dataclass(frozen=True)
class PhotoRecord:
    """Represents a row in the photos table."""

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

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


@dataclass(frozen=True)
class NewPhoto:
    """Values for a photo row about to be inserted."""

    user_id: UUID
    dog_slot: int | None
    target_type: str
    storage_path: str
    width: int
    height: int
    mime_type: str = UPLOAD_MIME_TYPE


@dataclass(frozen=True)
class PhotoDecision:
    """Terminal outcome chosen for a photo."""

    status: str
    reason: str | None = None
    contains_human: bool = False
    contains_dog: bool = False

    @property
    def approved(self) -> bool:
        return self.status == STATUS_APPROVED

    @property
    def deletes_storage(self) -> bool:
        return (
            self.status == STATUS_REJECTED
            and self.reason not in KEEP_STORAGE_REASONS
        )

    @classmethod
    def approve(cls, *, contains_human: bool, contains_dog: bool) -> "PhotoDecision":
        return cls(
            status=STATUS_APPROVED,
            contains_human=contains_human,
            contains_dog=contains_dog,
        )

    @classmethod
    def reject(cls, reason: str) -> "PhotoDecision":
        return cls(status=STATUS_REJECTED, reason=reason)
