"""Domain models for the dissertation portal."""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from uuid import UUID


class UserType(StrEnum):
    """Role carried by a profile."""

    STUDENT = "student"
    PROFESSOR = "professor"


class RequestStatus(StrEnum):
    """Approval state of a coordination request."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass(frozen=True)
class Profile:
    """Identity record of an authenticated user."""

    id: UUID
    email: str
    full_name: str
    user_type: UserType

    @property
    def is_professor(self) -> bool:
        return self.user_type is UserType.PROFESSOR

    @property
    def is_student(self) -> bool:
        return self.user_type is UserType.STUDENT


@dataclass(frozen=True)
class ProfessorSummary:
    """Professor entry offered to students."""

    id: UUID
    full_name: str


@dataclass(frozen=True)
class SessionSlot:
    """A professor-published coordination window."""

    id: UUID
    start_time: datetime
    end_time: datetime
    academic_year: str
    professor_id: UUID
    professor_name: str | None = None


@dataclass(frozen=True)
class CoordinationRequest:
    """A student's request against a session slot, with joined names."""

    id: UUID
    student_id: UUID
    professor_id: UUID
    session_id: UUID
    status: RequestStatus
    rejection_reason: str | None
    student_file_url: str | None
    professor_file_url: str | None
    created_at: datetime
    student_name: str | None = None
    professor_name: str | None = None
    session_start: datetime | None = None
    session_end: datetime | None = None


def as_utc(value: datetime) -> datetime:
    """Return an aware datetime, treating naive values as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def parse_timestamp(raw: str) -> datetime:
    """Parse an ISO timestamp returned by the backend."""
    return as_utc(datetime.fromisoformat(raw))
