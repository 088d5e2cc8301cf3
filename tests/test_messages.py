"""Tests for rejection wording."""

import pytest

from pawfectly_validation.services.messages import rejection_message


@pytest.mark.parametrize(
    ("reason", "expected"),
    [
        ("nsfw_or_disallowed", "Inappropriate photo"),
        ("missing_dog", "No dog found"),
        ("Human detected but dog is missing", "No dog found"),
        ("Dog detected but human is missing", "No person found"),
        ("contains_contact_info", "Info not allowed"),
        ("is_screenshot", "Screenshot not allowed"),
        ("failed_to_generate_url", "Rejected"),
        (None, None),
    ],
)
def test_rejection_message(reason: str | None, expected: str | None) -> None:
    assert rejection_message(reason) == expected
