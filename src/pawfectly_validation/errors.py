"""Exceptions raised by the validation pipeline."""


class PipelineError(Exception):
    """Base class for pipeline errors."""


class InvalidMediaType(PipelineError):  # noqa: N818
    """Submitted content is not an image."""


class StorageWriteConflict(PipelineError):  # noqa: N818
    """An object already exists at the upload path."""


class StorageWriteError(PipelineError):
    """Object storage rejected an upload for any other reason."""


class ClassifierError(PipelineError):
    """A classifier call failed or returned unusable output."""


class InvalidPhotoEvent(PipelineError):  # noqa: N818
    """A photo-insert event is missing required fields."""


class ProfileNotFound(PipelineError):  # noqa: N818
    """No profile row exists for the user."""
