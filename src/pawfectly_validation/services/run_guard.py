"""Latest-run-wins guard for profile validation results."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from pawfectly_validation.domain.profiles import EligibilityDecision, ProfileRecord
from pawfectly_validation.errors import ProfileNotFound

logger = logging.getLogger(__name__)


class ProfileRepository(Protocol):
    """Persistence interface for profile validation state."""

    def get_profile(self, user_id: UUID) -> ProfileRecord | None:
        """Return the profile validation columns, if the profile exists."""

    def start_validation_run(self, user_id: UUID) -> int | None:
        """Atomically increment and return the validation run id.

        Also resets the profile to ``pending_review``/``in_progress``.
        Returns ``None`` when no profile row exists.
        """

    def apply_validation_result(
        self,
        user_id: UUID,
        validation_run_id: int,
        decision: EligibilityDecision,
    ) -> bool:
        """Write the decision only where the stored run id still matches.

        Returns ``True`` if a row was updated.
        """


@dataclass
class ValidationRunGuard:
    """Mints run tokens and commits results with compare-and-swap."""

    repository: ProfileRepository

    def start(self, user_id: UUID) -> int:
        """Mint a new run token for the user's next validation pass."""
        run_id = self.repository.start_validation_run(user_id)
        if run_id is None:
            raise ProfileNotFound(f"No profile for user {user_id}")
        logger.info("Started validation run %s for user %s", run_id, user_id)
        return run_id

    def is_current(self, user_id: UUID, validation_run_id: int) -> bool:
        """Return whether ``validation_run_id`` is still the stored token."""
        profile = self.repository.get_profile(user_id)
        if profile is None:
            raise ProfileNotFound(f"No profile for user {user_id}")
        if profile.validation_run_id != validation_run_id:
            logger.warning(
                "Validation run mismatch for user %s. Expected: %s, current: %s",
                user_id,
                validation_run_id,
                profile.validation_run_id,
            )
            return False
        return True

    def commit(
        self,
        user_id: UUID,
        validation_run_id: int,
        decision: EligibilityDecision,
    ) -> bool:
        """Apply the decision if the run has not been superseded."""
        applied = self.repository.apply_validation_result(
            user_id, validation_run_id, decision
        )
        if not applied:
            logger.warning(
                "Validation run %s for user %s superseded before commit",
                validation_run_id,
                user_id,
            )
        return applied
