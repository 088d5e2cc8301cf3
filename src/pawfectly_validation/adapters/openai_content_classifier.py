"""OpenAI-backed content classifier."""

import json
from dataclasses import dataclass

from openai import AsyncOpenAI, OpenAIError
from pydantic import ValidationError

from pawfectly_validation.domain.classification import ContentAnalysis, ModerationResult
from pawfectly_validation.errors import ClassifierError
from pawfectly_validation.services.classifier import (
    ANALYSIS_PROMPT,
    ANALYSIS_SCHEMA,
    ContentClassifier,
)


@dataclass
class OpenAIContentClassifier(ContentClassifier):
    """Classifier using the moderation endpoint and a vision model."""

    client: AsyncOpenAI
    moderation_model: str
    vision_model: str

    @classmethod
    def create(
        cls,
        api_key: str,
        moderation_model: str,
        vision_model: str,
        timeout: float,
    ) -> "OpenAIContentClassifier":
        """Create a classifier with its own OpenAI client."""
        return cls(
            client=AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0),
            moderation_model=moderation_model,
            vision_model=vision_model,
        )

    async def moderate(self, image_url: str) -> ModerationResult:
        """Call the moderation endpoint with the image URL."""
        try:
            response = await self.client.moderations.create(
                model=self.moderation_model,
                input=[{"type": "image_url", "image_url": {"url": image_url}}],
            )
        except OpenAIError as exc:
            raise ClassifierError(f"Moderation request failed: {exc}") from exc
        if not response.results:
            raise ClassifierError("Moderation returned no results")
        result = response.results[0]
        categories = result.categories.model_dump(by_alias=True)
        return ModerationResult(
            flagged=bool(result.flagged),
            categories=sorted(name for name, hit in categories.items() if hit),
        )

    async def analyze(self, image_url: str) -> ContentAnalysis:
        """Call the Responses API with a strict JSON schema."""
        try:
            response = await self.client.responses.create(
                model=self.vision_model,
                input=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "input_text", "text": ANALYSIS_PROMPT},
                            {"type": "input_image", "image_url": image_url},
                        ],
                    }
                ],
                text={
                    "format": {
                        "type": "json_schema",
                        "name": "photo_analysis",
                        "strict": True,
                        "schema": ANALYSIS_SCHEMA,
                    }
                },
                store=False,
            )
        except OpenAIError as exc:
            raise ClassifierError(f"Vision request failed: {exc}") from exc
        output_text = response.output_text
        if not output_text:
            raise ClassifierError("Vision returned an empty response")
        try:
            return ContentAnalysis.model_validate(json.loads(output_text))
        except (json.JSONDecodeError, ValidationError) as exc:
            raise ClassifierError("Vision returned unparseable output") from exc

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()
