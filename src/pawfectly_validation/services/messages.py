"""User-facing wording for stored rejection reasons."""

from pawfectly_validation.domain.photos import (
    REASON_CONTACT_INFO,
    REASON_DOG_WITHOUT_HUMAN,
    REASON_HUMAN_WITHOUT_DOG,
    REASON_MISSING_DOG,
    REASON_MISSING_HUMAN,
    REASON_NSFW,
    REASON_SCREENSHOT,
)

_MESSAGES = {
    REASON_NSFW: "Inappropriate photo",
    REASON_MISSING_DOG: "No dog found",
    REASON_HUMAN_WITHOUT_DOG: "No dog found",
    REASON_MISSING_HUMAN: "No person found",
    REASON_DOG_WITHOUT_HUMAN: "No person found",
    REASON_CONTACT_INFO: "Info not allowed",
    REASON_SCREENSHOT: "Screenshot not allowed",
}
_FALLBACK = "Rejected"


def rejection_message(reason: str | None) -> str | None:
    """Return a short label for a rejection reason, or ``None`` if not rejected."""
    if reason is None:
        return None
    return _MESSAGES.get(reason, _FALLBACK)
