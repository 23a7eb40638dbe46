"""Supabase repository for registration sessions."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from dissertation_portal.domain.models import SessionSlot, parse_timestamp
from dissertation_portal.services.dashboard import SlotRepository

_SLOT_COLUMNS = (
    "id, start_time, end_time, academic_year, professor_id, "
    "professor:profiles(full_name)"
)


@dataclass
class SupabaseSlotRepository(SlotRepository):
    """Supabase implementation for session slots."""

    client: Client

    def list_for_professor(self, professor_id: UUID) -> list[SessionSlot]:
        """Return every slot of a professor, earliest first."""
        response = (
            self.client.table("registration_sessions")
            .select(_SLOT_COLUMNS)
            .eq("professor_id", str(professor_id))
            .order("start_time", desc=False)
            .execute()
        )
        return [_parse_slot(row) for row in response.data or []]

    def list_upcoming_for_professor(
        self, professor_id: UUID, now: datetime
    ) -> list[SessionSlot]:
        """Return slots that have not started yet, earliest first."""
        response = (
            self.client.table("registration_sessions")
            .select(_SLOT_COLUMNS)
            .eq("professor_id", str(professor_id))
            .gte("start_time", now.isoformat())
            .order("start_time", desc=False)
            .execute()
        )
        return [_parse_slot(row) for row in response.data or []]

    def create_slot(
        self,
        professor_id: UUID,
        start_time: datetime,
        end_time: datetime,
        academic_year: str,
    ) -> None:
        """Insert a registration session."""
        response = (
            self.client.table("registration_sessions")
            .insert(
                {
                    "professor_id": str(professor_id),
                    "start_time": start_time.isoformat(),
                    "end_time": end_time.isoformat(),
                    "academic_year": academic_year,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create registration session")


def _parse_slot(row: dict[str, object]) -> SessionSlot:
    professor = row.get("professor")
    return SessionSlot(
        id=UUID(str(row["id"])),
        start_time=parse_timestamp(str(row["start_time"])),
        end_time=parse_timestamp(str(row["end_time"])),
        academic_year=str(row.get("academic_year") or ""),
        professor_id=UUID(str(row["professor_id"])),
        professor_name=professor.get("full_name")
        if isinstance(professor, dict)
        else None,
    )
