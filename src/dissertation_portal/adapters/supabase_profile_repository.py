"""Supabase-backed profile repository."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from dissertation_portal.domain.models import ProfessorSummary, Profile, UserType
from dissertation_portal.services.auth import ProfileRepository


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Supabase implementation for profile reads."""

    client: Client

    def get_profile(self, user_id: UUID) -> Profile | None:
        """Return the profile for an identity, if present."""
        response = (
            self.client.table("profiles")
            .select("id, email, full_name, user_type")
            .eq("id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return Profile(
            id=UUID(row["id"]),
            email=row["email"],
            full_name=row["full_name"],
            user_type=UserType(row["user_type"]),
        )

    def list_professors(self) -> list[ProfessorSummary]:
        """Return all professors ordered by name."""
        response = (
            self.client.table("profiles")
            .select("id, full_name")
            .eq("user_type", UserType.PROFESSOR.value)
            .order("full_name", desc=False)
            .execute()
        )
        return [
            ProfessorSummary(id=UUID(row["id"]), full_name=row["full_name"])
            for row in response.data or []
        ]
