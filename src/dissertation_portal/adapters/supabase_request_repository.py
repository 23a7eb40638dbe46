"""Supabase repository for coordination requests."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from dissertation_portal.domain.models import (
    CoordinationRequest,
    RequestStatus,
    UserType,
    parse_timestamp,
)
from dissertation_portal.services.dashboard import RequestRepository

_REQUEST_COLUMNS = (
    "id, student_id, professor_id, session_id, status, rejection_reason, "
    "student_file_url, professor_file_url, created_at, "
    "professor:profiles!professor_id(full_name), "
    "student:profiles!student_id(full_name), "
    "session:registration_sessions(start_time, end_time)"
)

_OWNER_COLUMNS = {
    UserType.STUDENT: "student_id",
    UserType.PROFESSOR: "professor_id",
}


@dataclass
class SupabaseRequestRepository(RequestRepository):
    """Supabase implementation for coordination requests."""

    client: Client

    def list_for_user(
        self, user_id: UUID, user_type: UserType
    ) -> list[CoordinationRequest]:
        """Return requests where the user is the student or the professor."""
        response = (
            self.client.table("coordination_requests")
            .select(_REQUEST_COLUMNS)
            .eq(_OWNER_COLUMNS[user_type], str(user_id))
            .order("created_at", desc=True)
            .execute()
        )
        return [_parse_request(row) for row in response.data or []]

    def get_request(self, request_id: UUID) -> CoordinationRequest | None:
        """Return a request by id, if present."""
        response = (
            self.client.table("coordination_requests")
            .select(_REQUEST_COLUMNS)
            .eq("id", str(request_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_request(response.data[0])

    def create_request(
        self, student_id: UUID, professor_id: UUID, session_id: UUID
    ) -> None:
        """Insert a pending request."""
        response = (
            self.client.table("coordination_requests")
            .insert(
                {
                    "student_id": str(student_id),
                    "professor_id": str(professor_id),
                    "session_id": str(session_id),
                    "status": RequestStatus.PENDING.value,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create coordination request")

    def decide(
        self, request_id: UUID, status: RequestStatus, rejection_reason: str | None
    ) -> None:
        """Update a request that is still pending."""
        response = (
            self.client.table("coordination_requests")
            .update(
                {
                    "status": status.value,
                    "rejection_reason": rejection_reason
                    if status is RequestStatus.REJECTED
                    else None,
                }
            )
            .eq("id", str(request_id))
            .eq("status", RequestStatus.PENDING.value)
            .execute()
        )
        if not response.data:
            raise RuntimeError("Coordination request is no longer pending")

    def set_file_url(self, request_id: UUID, field_name: str, url: str) -> None:
        """Store an uploaded file URL."""
        response = (
            self.client.table("coordination_requests")
            .update({field_name: url})
            .eq("id", str(request_id))
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to attach file to coordination request")


def _parse_request(row: dict[str, object]) -> CoordinationRequest:
    session = _embedded(row, "session")
    session_start = session.get("start_time")
    session_end = session.get("end_time")
    return CoordinationRequest(
        id=UUID(str(row["id"])),
        student_id=UUID(str(row["student_id"])),
        professor_id=UUID(str(row["professor_id"])),
        session_id=UUID(str(row["session_id"])),
        status=RequestStatus(row["status"]),
        rejection_reason=row.get("rejection_reason"),
        student_file_url=row.get("student_file_url"),
        professor_file_url=row.get("professor_file_url"),
        created_at=parse_timestamp(str(row["created_at"])),
        student_name=_embedded(row, "student").get("full_name"),
        professor_name=_embedded(row, "professor").get("full_name"),
        session_start=parse_timestamp(session_start)
        if isinstance(session_start, str)
        else None,
        session_end=parse_timestamp(session_end)
        if isinstance(session_end, str)
        else None,
    )


def _embedded(row: dict[str, object], name: str) -> dict[str, object]:
    value = row.get(name)
    return value if isinstance(value, dict) else {}
