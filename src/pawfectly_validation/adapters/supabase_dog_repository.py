"""Supabase read access to declared dogs."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from pawfectly_validation.services.eligibility import DogRepository


@dataclass
class SupabaseDogRepository(DogRepository):
    """Reads active dog slots from the dogs table."""

    client: Client

    def list_active_slots(self, user_id: UUID) -> list[int]:
        """Return slots of the user's active dogs."""
        response = (
            self.client.table("dogs")
            .select("slot")
            .eq("user_id", str(user_id))
            .eq("is_active", True)
            .execute()
        )
        return [int(row["slot"]) for row in response.data or []]
