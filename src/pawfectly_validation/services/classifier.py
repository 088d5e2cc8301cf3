"""Content classifier port used by per-photo validation."""

from typing import Protocol

from pawfectly_validation.domain.classification import ContentAnalysis, ModerationResult

ANALYSIS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "hasHuman": {"type": "boolean"},
        "hasDog": {"type": "boolean"},
        "hasText": {"type": "boolean"},
        "isNSFW": {"type": "boolean"},
        "isScreenshot": {"type": "boolean"},
    },
    "required": ["hasHuman", "hasDog", "hasText", "isNSFW", "isScreenshot"],
    "additionalProperties": False,
}

ANALYSIS_PROMPT = """Analyze this photo for a pet social app.

Rules:
- hasHuman: true if there is a human person visible
- hasDog: true if there is a dog visible
- hasText: true if there is ANY contact information visible, including:
  * Phone numbers in any format
  * Email addresses
  * Social media handles (Instagram, Snapchat, TikTok usernames, @handles)
  * QR codes
  * Watermarked usernames or any text watermark with contact info
  * Any readable text that appears to be contact information
- isNSFW: true if the image contains nudity, explicit sexual content, violence,
  or any inappropriate/adult content unsuitable for a family-friendly pet app
- isScreenshot: true if the image appears to be a screenshot or UI capture,
  including app UI elements, chat screens, camera roll or gallery interfaces,
  or any device screen capture showing software interfaces

Be strict with NSFW detection: flag anything inappropriate for children.
Be strict with screenshot detection: flag any image that shows device UI."""


class ContentClassifier(Protocol):
    """Moderation and entity detection for a publicly readable image.

    Implementations raise ``ClassifierError`` when a call fails; callers treat
    that as inconclusive rather than a pass or a fail.
    """

    async def moderate(self, image_url: str) -> ModerationResult:
        """Run the fast policy-violation filter."""

    async def analyze(self, image_url: str) -> ContentAnalysis:
        """Detect humans, dogs, contact text, screenshots, and NSFW content."""
