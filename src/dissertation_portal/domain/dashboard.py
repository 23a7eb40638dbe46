"""View models for the role-scoped dashboard."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from dissertation_portal.domain.models import RequestStatus, UserType


@dataclass(frozen=True)
class SlotOption:
    """A session slot as listed on the dashboard."""

    id: UUID
    label: str
    start_time: datetime
    end_time: datetime
    academic_year: str


@dataclass(frozen=True)
class FileLink:
    label: str
    url: str


@dataclass(frozen=True)
class RequestCard:
    """A coordination request with the controls the viewer may use."""

    id: UUID
    counterpart_name: str
    session_start: datetime | None
    status: RequestStatus
    status_label: str
    rejection_reason: str | None
    can_approve: bool
    can_reject: bool
    can_upload: bool
    files: list[FileLink]


@dataclass(frozen=True)
class ProfessorOption:
    id: UUID
    full_name: str


@dataclass(frozen=True)
class DashboardView:
    """Everything the dashboard renders for the current user."""

    user_type: UserType
    requests_title: str
    can_create_session: bool
    can_select_professor: bool
    can_request_coordination: bool
    default_academic_year: str | None
    professors: list[ProfessorOption]
    sessions: list[SlotOption]
    selected_professor_id: UUID | None
    selected_session_id: UUID | None
    requests: list[RequestCard]
    action_in_progress: str | None
