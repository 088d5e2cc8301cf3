"""Shared test fixtures."""

import io
from dataclasses import dataclass, field, replace
from datetime import datetime
from uuid import UUID, uuid4

import pytest
from PIL import Image

from pawfectly_validation.config import Settings
from pawfectly_validation.containers import AppContainer
from pawfectly_validation.domain.classification import ContentAnalysis, ModerationResult
from pawfectly_validation.domain.jobs import (
    JOB_DONE,
    JOB_ERROR,
    JOB_PROCESSING,
    JOB_QUEUED,
    ValidationJob,
)
from pawfectly_validation.domain.photos import (
    STATUS_PENDING,
    NewPhoto,
    PhotoDecision,
    PhotoRecord,
)
from pawfectly_validation.domain.profiles import (
    LIFECYCLE_PENDING_REVIEW,
    VALIDATION_IN_PROGRESS,
    EligibilityDecision,
    ProfileRecord,
)
from pawfectly_validation.errors import ClassifierError, StorageWriteConflict
from pawfectly_validation.services.admin import AdminService
from pawfectly_validation.services.classifier import ContentClassifier
from pawfectly_validation.services.eligibility import (
    DogRepository,
    ProfileEligibilityService,
)
from pawfectly_validation.services.intake import (
    MediaIntakeService,
    PhotoRepository,
    PhotoStorage,
)
from pawfectly_validation.services.jobs import JobRepository, ValidationJobWorker
from pawfectly_validation.services.run_guard import (
    ProfileRepository,
    ValidationRunGuard,
)
from pawfectly_validation.services.validation import PhotoValidationService


def make_image_bytes(
    width: int, height: int, image_format: str = "PNG", mode: str = "RGB"
) -> bytes:
    """Render a solid-color image in memory."""
    image = Image.new(mode, (width, height))
    out = io.BytesIO()
    image.save(out, format=image_format)
    return out.getvalue()


def make_photo(  # noqa: PLR0913
    user_id: UUID,
    *,
    target_type: str = "human",
    status: str = STATUS_PENDING,
    dog_slot: int | None = None,
    contains_human: bool = False,
    contains_dog: bool = False,
    rejection_reason: str | None = None,
) -> PhotoRecord:
    """Build a photo record with sensible defaults."""
    photo_id = uuid4()
    folder = "NA" if dog_slot is None else str(dog_slot)
    return PhotoRecord(
        id=photo_id,
        user_id=user_id,
        dog_slot=dog_slot,
        bucket_type=target_type,
        target_type=target_type,
        storage_path=f"users/{user_id}/{target_type}/{folder}/{photo_id}.jpg",
        width=512,
        height=384,
        mime_type="image/jpeg",
        status=status,
        contains_human=contains_human,
        contains_dog=contains_dog,
        rejection_reason=rejection_reason,
    )


@dataclass
class InMemoryPhotoRepository(PhotoRepository):
    """In-memory photo repository for tests."""

    photos: dict[UUID, PhotoRecord] = field(default_factory=dict)
    fail_create: bool = False

    def add(self, photo: PhotoRecord) -> PhotoRecord:
        self.photos[photo.id] = photo
        return photo

    def create_photo(self, photo: NewPhoto) -> PhotoRecord:
        if self.fail_create:
            raise RuntimeError("Failed to create photo record")
        record = PhotoRecord(
            id=uuid4(),
            user_id=photo.user_id,
            dog_slot=photo.dog_slot,
            bucket_type=photo.target_type,
            target_type=photo.target_type,
            storage_path=photo.storage_path,
            width=photo.width,
            height=photo.height,
            mime_type=photo.mime_type,
            status=STATUS_PENDING,
            contains_human=False,
            contains_dog=False,
            rejection_reason=None,
        )
        self.photos[record.id] = record
        return record

    def get_photo(self, photo_id: UUID) -> PhotoRecord | None:
        return self.photos.get(photo_id)

    def list_user_photos(self, user_id: UUID) -> list[PhotoRecord]:
        return [photo for photo in self.photos.values() if photo.user_id == user_id]

    def apply_decision(self, photo_id: UUID, decision: PhotoDecision) -> bool:
        photo = self.photos.get(photo_id)
        if photo is None or photo.status != STATUS_PENDING:
            return False
        updated = replace(
            photo, status=decision.status, rejection_reason=decision.reason
        )
        if decision.approved:
            updated = replace(
                updated,
                contains_human=decision.contains_human,
                contains_dog=decision.contains_dog,
            )
        self.photos[photo_id] = updated
        return True


@dataclass
class InMemoryPhotoStorage(PhotoStorage):
    """In-memory object storage for tests."""

    objects: dict[str, bytes] = field(default_factory=dict)
    removed: list[str] = field(default_factory=list)
    fail_remove: bool = False
    url_available: bool = True

    def upload(self, path: str, content: bytes, content_type: str) -> None:
        if path in self.objects:
            raise StorageWriteConflict(f"Object already exists: {path}")
        self.objects[path] = content

    def remove(self, path: str) -> None:
        if self.fail_remove:
            raise RuntimeError("storage unavailable")
        self.removed.append(path)
        self.objects.pop(path, None)

    def public_url(self, path: str) -> str | None:
        if not self.url_available:
            return None
        return f"https://cdn.example.test/photos/{path}"


@dataclass
class FakeClassifier(ContentClassifier):
    """Classifier returning configured results and recording calls."""

    moderation: ModerationResult = field(default_factory=ModerationResult)
    analysis: ContentAnalysis = field(default_factory=ContentAnalysis)
    moderation_error: bool = False
    analysis_error: bool = False
    calls: list[tuple[str, str]] = field(default_factory=list)

    async def moderate(self, image_url: str) -> ModerationResult:
        self.calls.append(("moderate", image_url))
        if self.moderation_error:
            raise ClassifierError("moderation timed out")
        return self.moderation

    async def analyze(self, image_url: str) -> ContentAnalysis:
        self.calls.append(("analyze", image_url))
        if self.analysis_error:
            raise ClassifierError("vision provider unavailable")
        return self.analysis


@dataclass
class InMemoryProfileRepository(ProfileRepository):
    """Profile store with compare-and-swap semantics on the run id."""

    profiles: dict[UUID, ProfileRecord] = field(default_factory=dict)

    def add(self, user_id: UUID, validation_run_id: int = 0) -> ProfileRecord:
        profile = ProfileRecord(
            user_id=user_id,
            lifecycle_status=LIFECYCLE_PENDING_REVIEW,
            validation_status=VALIDATION_IN_PROGRESS,
            validation_run_id=validation_run_id,
        )
        self.profiles[user_id] = profile
        return profile

    def get_profile(self, user_id: UUID) -> ProfileRecord | None:
        return self.profiles.get(user_id)

    def start_validation_run(self, user_id: UUID) -> int | None:
        profile = self.profiles.get(user_id)
        if profile is None:
            return None
        run_id = (profile.validation_run_id or 0) + 1
        self.profiles[user_id] = replace(
            profile,
            lifecycle_status=LIFECYCLE_PENDING_REVIEW,
            validation_status=VALIDATION_IN_PROGRESS,
            validation_run_id=run_id,
        )
        return run_id

    def apply_validation_result(
        self,
        user_id: UUID,
        validation_run_id: int,
        decision: EligibilityDecision,
    ) -> bool:
        profile = self.profiles.get(user_id)
        if profile is None or profile.validation_run_id != validation_run_id:
            return False
        self.profiles[user_id] = replace(
            profile,
            lifecycle_status=decision.lifecycle_status,
            validation_status=decision.validation_status,
        )
        return True


@dataclass
class InMemoryDogRepository(DogRepository):
    """Declared dog slots keyed by user."""

    slots: dict[UUID, list[int]] = field(default_factory=dict)

    def list_active_slots(self, user_id: UUID) -> list[int]:
        return list(self.slots.get(user_id, []))


@dataclass
class InMemoryJobRepository(JobRepository):
    """Job queue that hands out every queued job on claim."""

    jobs: dict[UUID, ValidationJob] = field(default_factory=dict)
    rescheduled: list[tuple[UUID, str, datetime]] = field(default_factory=list)

    def add(self, job: ValidationJob) -> ValidationJob:
        self.jobs[job.id] = job
        return job

    def claim_jobs(self, limit: int, worker_id: str) -> list[ValidationJob]:
        claimed = []
        for job in list(self.jobs.values()):
            if job.status != JOB_QUEUED or len(claimed) >= limit:
                continue
            updated = replace(job, status=JOB_PROCESSING, attempts=job.attempts + 1)
            self.jobs[job.id] = updated
            claimed.append(updated)
        return claimed

    def mark_done(self, job_id: UUID) -> None:
        self.jobs[job_id] = replace(self.jobs[job_id], status=JOB_DONE, last_error=None)

    def reschedule(self, job_id: UUID, error: str, next_run_at: datetime) -> None:
        self.rescheduled.append((job_id, error, next_run_at))
        self.jobs[job_id] = replace(
            self.jobs[job_id], status=JOB_QUEUED, last_error=error
        )

    def mark_failed(self, job_id: UUID, error: str) -> None:
        self.jobs[job_id] = replace(
            self.jobs[job_id], status=JOB_ERROR, last_error=error
        )

    def list_failed(self, limit: int) -> list[ValidationJob]:
        return [job for job in self.jobs.values() if job.status == JOB_ERROR][:limit]

    def requeue(self, job_id: UUID) -> bool:
        job = self.jobs.get(job_id)
        if job is None or job.status != JOB_ERROR:
            return False
        self.jobs[job_id] = replace(job, status=JOB_QUEUED, attempts=0)
        return True


def make_job(photo: PhotoRecord, attempts: int = 0) -> ValidationJob:
    """Build a queued job for a photo."""
    return ValidationJob(
        id=uuid4(),
        photo_id=photo.id,
        user_id=photo.user_id,
        storage_path=photo.storage_path,
        bucket_type=photo.bucket_type,
        target_type=photo.target_type,
        dog_slot=photo.dog_slot,
        attempts=attempts,
        status=JOB_QUEUED,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        admin_token="admin-token",
        openai_api_key="openai-key",
    )


@pytest.fixture
def photo_repository() -> InMemoryPhotoRepository:
    return InMemoryPhotoRepository()


@pytest.fixture
def photo_storage() -> InMemoryPhotoStorage:
    return InMemoryPhotoStorage()


@pytest.fixture
def classifier() -> FakeClassifier:
    return FakeClassifier()


@pytest.fixture
def profile_repository() -> InMemoryProfileRepository:
    return InMemoryProfileRepository()


@pytest.fixture
def dog_repository() -> InMemoryDogRepository:
    return InMemoryDogRepository()


@pytest.fixture
def job_repository() -> InMemoryJobRepository:
    return InMemoryJobRepository()


@pytest.fixture
def validation_service(
    photo_repository: InMemoryPhotoRepository,
    photo_storage: InMemoryPhotoStorage,
    classifier: FakeClassifier,
) -> PhotoValidationService:
    return PhotoValidationService(
        repository=photo_repository,
        storage=photo_storage,
        classifier=classifier,
    )


@pytest.fixture
def eligibility_service(
    photo_repository: InMemoryPhotoRepository,
    dog_repository: InMemoryDogRepository,
    profile_repository: InMemoryProfileRepository,
) -> ProfileEligibilityService:
    return ProfileEligibilityService(
        photo_repository=photo_repository,
        dog_repository=dog_repository,
        run_guard=ValidationRunGuard(profile_repository),
    )


@pytest.fixture
def container(  # noqa: PLR0913
    settings: Settings,
    photo_repository: InMemoryPhotoRepository,
    photo_storage: InMemoryPhotoStorage,
    job_repository: InMemoryJobRepository,
    validation_service: PhotoValidationService,
    eligibility_service: ProfileEligibilityService,
) -> AppContainer:
    intake_service = MediaIntakeService(
        storage=photo_storage, repository=photo_repository
    )
    job_worker = ValidationJobWorker(
        repository=job_repository,
        validation_service=validation_service,
        max_attempts=settings.job_max_attempts,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        intake_service=intake_service,
        validation_service=validation_service,
        eligibility_service=eligibility_service,
        job_worker=job_worker,
        admin_service=AdminService(job_repository=job_repository),
        close_resources=close_resources,
    )
