"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import UUID

from fastapi import FastAPI, File, Form, HTTPException, Request, UploadFile, status
from fastapi.responses import JSONResponse

from pawfectly_validation.api.admin import router as admin_router
from pawfectly_validation.api.hooks import router as hooks_router
from pawfectly_validation.api.models import PhotoResponse
from pawfectly_validation.app_logging import configure_logging
from pawfectly_validation.containers import AppContainer
from pawfectly_validation.errors import (
    ClassifierError,
    InvalidMediaType,
    InvalidPhotoEvent,
    PipelineError,
    ProfileNotFound,
    StorageWriteConflict,
    StorageWriteError,
)

_ERROR_STATUS: dict[type[PipelineError], int] = {
    InvalidMediaType: status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
    StorageWriteConflict: status.HTTP_409_CONFLICT,
    StorageWriteError: status.HTTP_502_BAD_GATEWAY,
    InvalidPhotoEvent: status.HTTP_400_BAD_REQUEST,
    ProfileNotFound: status.HTTP_404_NOT_FOUND,
    ClassifierError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(hooks_router)
    app.include_router(admin_router)

    @app.exception_handler(PipelineError)
    async def pipeline_error_handler(
        request: Request, exc: PipelineError
    ) -> JSONResponse:
        status_code = _ERROR_STATUS.get(
            type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR
        )
        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=status_code, content={"error": str(exc)})

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/photos", status_code=status.HTTP_201_CREATED)
    async def submit_photo(
        request: Request,
        user_id: UUID = Form(...),
        target_type: str = Form(...),
        dog_slot: int | None = Form(default=None),
        file: UploadFile = File(...),
    ) -> PhotoResponse:
        """Accept a photo upload and register it for validation."""
        state_container: AppContainer = request.app.state.container
        content = await file.read()
        try:
            photo = state_container.intake_service.submit(
                user_id=user_id,
                content=content,
                target_type=target_type,
                mime_type=file.content_type,
                dog_slot=dog_slot,
            )
        except ValueError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
            ) from exc
        return PhotoResponse.from_record(photo)

    @app.get("/photos/{photo_id}")
    async def get_photo(photo_id: UUID, request: Request) -> PhotoResponse:
        """Return a photo with its validation outcome."""
        state_container: AppContainer = request.app.state.container
        photo = state_container.intake_service.repository.get_photo(photo_id)
        if photo is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return PhotoResponse.from_record(photo)

    @app.post("/profiles/{user_id}/validation-runs")
    async def start_validation_run(user_id: UUID, request: Request) -> dict[str, int]:
        """Mint a run token for the user's next eligibility check."""
        state_container: AppContainer = request.app.state.container
        run_id = state_container.eligibility_service.start_run(user_id)
        return {"validation_run_id": run_id}

    return app
