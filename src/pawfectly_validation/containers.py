"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from pawfectly_validation.adapters.openai_content_classifier import (
    OpenAIContentClassifier,
)
from pawfectly_validation.adapters.supabase_dog_repository import SupabaseDogRepository
from pawfectly_validation.adapters.supabase_job_repository import SupabaseJobRepository
from pawfectly_validation.adapters.supabase_photo_repository import (
    SupabasePhotoRepository,
)
from pawfectly_validation.adapters.supabase_photo_storage import SupabasePhotoStorage
from pawfectly_validation.adapters.supabase_profile_repository import (
    SupabaseProfileRepository,
)
from pawfectly_validation.config import Settings
from pawfectly_validation.services.admin import AdminService
from pawfectly_validation.services.eligibility import ProfileEligibilityService
from pawfectly_validation.services.intake import MediaIntakeService
from pawfectly_validation.services.jobs import ValidationJobWorker
from pawfectly_validation.services.run_guard import ValidationRunGuard
from pawfectly_validation.services.validation import PhotoValidationService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    intake_service: MediaIntakeService
    validation_service: PhotoValidationService
    eligibility_service: ProfileEligibilityService
    job_worker: ValidationJobWorker
    admin_service: AdminService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    photo_repository = SupabasePhotoRepository(supabase_client)
    photo_storage = SupabasePhotoStorage(
        supabase_client, bucket=resolved_settings.photos_bucket
    )
    profile_repository = SupabaseProfileRepository(supabase_client)
    dog_repository = SupabaseDogRepository(supabase_client)
    job_repository = SupabaseJobRepository(supabase_client)
    classifier = OpenAIContentClassifier.create(
        api_key=resolved_settings.openai_api_key,
        moderation_model=resolved_settings.openai_moderation_model,
        vision_model=resolved_settings.openai_vision_model,
        timeout=resolved_settings.classifier_timeout_seconds,
    )
    intake_service = MediaIntakeService(
        storage=photo_storage, repository=photo_repository
    )
    validation_service = PhotoValidationService(
        repository=photo_repository,
        storage=photo_storage,
        classifier=classifier,
    )
    eligibility_service = ProfileEligibilityService(
        photo_repository=photo_repository,
        dog_repository=dog_repository,
        run_guard=ValidationRunGuard(profile_repository),
    )
    job_worker = ValidationJobWorker(
        repository=job_repository,
        validation_service=validation_service,
        max_attempts=resolved_settings.job_max_attempts,
    )
    admin_service = AdminService(job_repository=job_repository)

    async def close_resources() -> None:
        await classifier.close()

    return AppContainer(
        settings=resolved_settings,
        intake_service=intake_service,
        validation_service=validation_service,
        eligibility_service=eligibility_service,
        job_worker=job_worker,
        admin_service=admin_service,
        close_resources=close_resources,
    )
