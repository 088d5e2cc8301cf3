"""Supabase-backed profile repository."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from pawfectly_validation.domain.profiles import EligibilityDecision, ProfileRecord
from pawfectly_validation.services.run_guard import ProfileRepository


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Supabase implementation for profile validation state."""

    client: Client

    def get_profile(self, user_id: UUID) -> ProfileRecord | None:
        """Return the validation columns of the user's profile."""
        response = (
            self.client.table("profiles")
            .select("user_id, lifecycle_status, validation_status, validation_run_id")
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return ProfileRecord(
            user_id=UUID(str(row["user_id"])),
            lifecycle_status=row["lifecycle_status"],
            validation_status=row["validation_status"],
            validation_run_id=row.get("validation_run_id"),
        )

    def start_validation_run(self, user_id: UUID) -> int | None:
        """Increment the run id in the database and return it."""
        response = self.client.rpc(
            "start_profile_validation", {"p_user_id": str(user_id)}
        ).execute()
        data = response.data
        if isinstance(data, list):
            data = data[0] if data else None
        if isinstance(data, dict):
            data = data.get("validation_run_id")
        return int(data) if data is not None else None

    def apply_validation_result(
        self,
        user_id: UUID,
        validation_run_id: int,
        decision: EligibilityDecision,
    ) -> bool:
        """Update statuses where the stored run id still matches."""
        response = (
            self.client.table("profiles")
            .update(
                {
                    "lifecycle_status": decision.lifecycle_status,
                    "validation_status": decision.validation_status,
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                }
            )
            .eq("user_id", str(user_id))
            .eq("validation_run_id", validation_run_id)
            .execute()
        )
        return bool(response.data)
