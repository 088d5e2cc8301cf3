"""Models for classifier results."""

from pydantic import BaseModel, ConfigDict, Field


class ModerationResult(BaseModel):
    """Outcome of the fast moderation filter."""

    flagged: bool = False
    categories: list[str] = Field(default_factory=list)


class ContentAnalysis(BaseModel):
    """Entity and content flags from the vision analysis.

    Fields absent from a provider response default to ``False``.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    has_human: bool = Field(default=False, alias="hasHuman")
    has_dog: bool = Field(default=False, alias="hasDog")
    has_text: bool = Field(default=False, alias="hasText")
    is_nsfw: bool = Field(default=False, alias="isNSFW")
    is_screenshot: bool = Field(default=False, alias="isScreenshot")
