"""Tests for the validation job worker and the manual-review queue."""

import asyncio
from dataclasses import replace
from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from pawfectly_validation.domain.classification import ContentAnalysis
from pawfectly_validation.services.admin import AdminService
from pawfectly_validation.services.jobs import ValidationJobWorker, compute_backoff
from pawfectly_validation.services.validation import PhotoValidationService
from tests.conftest import (
    FakeClassifier,
    InMemoryJobRepository,
    InMemoryPhotoRepository,
    make_job,
    make_photo,
)

_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _worker(
    job_repository: InMemoryJobRepository,
    validation_service: PhotoValidationService,
    max_attempts: int = 3,
) -> ValidationJobWorker:
    return ValidationJobWorker(
        repository=job_repository,
        validation_service=validation_service,
        max_attempts=max_attempts,
        clock=lambda: _NOW,
    )


@pytest.mark.parametrize(
    ("attempts", "expected_minutes"),
    [(1, 1), (2, 2), (3, 4), (5, 16), (6, 30), (12, 30)],
)
def test_compute_backoff_doubles_and_caps(attempts: int, expected_minutes: int) -> None:
    assert compute_backoff(attempts) == timedelta(minutes=expected_minutes)


def test_process_batch_validates_and_marks_done(
    job_repository: InMemoryJobRepository,
    photo_repository: InMemoryPhotoRepository,
    validation_service: PhotoValidationService,
    classifier: FakeClassifier,
) -> None:
    photo = photo_repository.add(make_photo(uuid4()))
    job = job_repository.add(make_job(photo))
    classifier.analysis = ContentAnalysis(has_human=True)

    report = asyncio.run(_worker(job_repository, validation_service).process_batch(10))

    assert (report.claimed, report.processed, report.errors) == (1, 1, 0)
    assert job_repository.jobs[job.id].status == "done"
    assert photo_repository.photos[photo.id].status == "approved"


def test_process_batch_reschedules_with_backoff_on_classifier_failure(
    job_repository: InMemoryJobRepository,
    photo_repository: InMemoryPhotoRepository,
    validation_service: PhotoValidationService,
    classifier: FakeClassifier,
) -> None:
    photo = photo_repository.add(make_photo(uuid4()))
    job = job_repository.add(make_job(photo, attempts=1))
    classifier.analysis_error = True

    report = asyncio.run(_worker(job_repository, validation_service).process_batch(10))

    stored = job_repository.jobs[job.id]
    assert report.errors == 1
    assert report.dead_lettered == 0
    assert stored.status == "queued"
    assert stored.last_error == "vision provider unavailable"
    assert job_repository.rescheduled == [
        (job.id, "vision provider unavailable", _NOW + timedelta(minutes=2))
    ]
    assert photo_repository.photos[photo.id].status == "pending"


def test_process_batch_dead_letters_after_max_attempts(
    job_repository: InMemoryJobRepository,
    photo_repository: InMemoryPhotoRepository,
    validation_service: PhotoValidationService,
    classifier: FakeClassifier,
) -> None:
    photo = photo_repository.add(make_photo(uuid4()))
    job = job_repository.add(make_job(photo, attempts=2))
    classifier.analysis_error = True

    report = asyncio.run(
        _worker(job_repository, validation_service, max_attempts=3).process_batch(10)
    )

    assert report.dead_lettered == 1
    assert job_repository.jobs[job.id].status == "error"
    assert not job_repository.rescheduled


def test_process_batch_fails_malformed_job(
    job_repository: InMemoryJobRepository,
    validation_service: PhotoValidationService,
    classifier: FakeClassifier,
) -> None:
    job = make_job(make_photo(uuid4()))
    job_repository.add(replace(job, storage_path=None))

    report = asyncio.run(_worker(job_repository, validation_service).process_batch(10))

    assert report.errors == 1
    assert report.dead_lettered == 1
    assert job_repository.jobs[job.id].last_error == "Malformed job payload"
    assert not classifier.calls


def test_process_batch_respects_limit(
    job_repository: InMemoryJobRepository,
    photo_repository: InMemoryPhotoRepository,
    validation_service: PhotoValidationService,
) -> None:
    for _ in range(3):
        job_repository.add(make_job(photo_repository.add(make_photo(uuid4()))))

    report = asyncio.run(_worker(job_repository, validation_service).process_batch(2))

    assert report.claimed == 2
    statuses = sorted(job.status for job in job_repository.jobs.values())
    assert statuses == ["done", "done", "queued"]


def test_admin_service_lists_and_requeues_failed_jobs(
    job_repository: InMemoryJobRepository,
) -> None:
    photo = make_photo(uuid4())
    job = job_repository.add(
        replace(make_job(photo, attempts=5), status="error", last_error="timeout")
    )
    service = AdminService(job_repository=job_repository)

    failed = service.list_failed_jobs()

    assert failed[0]["id"] == str(job.id)
    assert failed[0]["last_error"] == "timeout"
    assert service.retry_job(job.id)
    assert job_repository.jobs[job.id].status == "queued"
    assert not service.retry_job(job.id)
