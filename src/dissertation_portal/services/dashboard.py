"""Role-scoped dashboard orchestration."""

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import Protocol
from uuid import UUID, uuid4

from dissertation_portal.domain.dashboard import (
    DashboardView,
    FileLink,
    ProfessorOption,
    RequestCard,
    SlotOption,
)
from dissertation_portal.domain.errors import (
    ActionInProgressError,
    BackendOperationError,
    InputValidationError,
    PermissionDeniedError,
    PortalError,
)
from dissertation_portal.domain.models import (
    CoordinationRequest,
    ProfessorSummary,
    Profile,
    RequestStatus,
    SessionSlot,
    UserType,
    as_utc,
)
from dissertation_portal.services.auth import ProfileRepository, SessionContext

logger = logging.getLogger(__name__)

_FILE_URL_FIELDS = {
    UserType.STUDENT: "student_file_url",
    UserType.PROFESSOR: "professor_file_url",
}


class SlotRepository(Protocol):
    """Persistence interface for session slots."""

    def list_for_professor(self, professor_id: UUID) -> list[SessionSlot]:
        """Return all slots of a professor ordered by start time."""

    def list_upcoming_for_professor(
        self, professor_id: UUID, now: datetime
    ) -> list[SessionSlot]:
        """Return slots starting at or after now, ordered by start time."""

    def create_slot(
        self,
        professor_id: UUID,
        start_time: datetime,
        end_time: datetime,
        academic_year: str,
    ) -> None:
        """Insert a new slot."""


class RequestRepository(Protocol):
    """Persistence interface for coordination requests."""

    def list_for_user(
        self, user_id: UUID, user_type: UserType
    ) -> list[CoordinationRequest]:
        """Return the user's requests, newest first."""

    def get_request(self, request_id: UUID) -> CoordinationRequest | None:
        """Return a request by id, if present."""

    def create_request(
        self, student_id: UUID, professor_id: UUID, session_id: UUID
    ) -> None:
        """Insert a pending request."""

    def decide(
        self, request_id: UUID, status: RequestStatus, rejection_reason: str | None
    ) -> None:
        """Move a pending request to approved or rejected."""

    def set_file_url(self, request_id: UUID, field_name: str, url: str) -> None:
        """Store an uploaded file URL in the given column."""


class FileStorage(Protocol):
    """Interface to the object store."""

    def upload(self, path: str, content: bytes, content_type: str | None) -> None:
        """Store the object at path, replacing nothing."""

    def get_public_url(self, path: str) -> str:
        """Return a publicly fetchable URL for path."""


@dataclass
class ActionGate:
    """Allows one mutation at a time and records which one is running."""

    token: str | None = None
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @contextmanager
    def hold(self, token: str) -> Iterator[None]:
        if not self._lock.acquire(blocking=False):
            raise ActionInProgressError("Another action is already in progress.")
        self.token = token
        try:
            yield
        finally:
            self.token = None
            self._lock.release()


@dataclass
class DashboardState:
    """Last successfully fetched data plus the student's selection."""

    owner_id: UUID | None = None
    loaded: bool = False
    professors: list[ProfessorSummary] = field(default_factory=list)
    sessions: list[SessionSlot] = field(default_factory=list)
    requests: list[CoordinationRequest] = field(default_factory=list)
    selected_professor_id: UUID | None = None
    selected_session_id: UUID | None = None


def default_academic_year(today: date) -> str:
    """Return the academic year in progress; it starts in September."""
    return str(today.year if today.month >= 9 else today.year - 1)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@contextmanager
def _surface_failure(alert: str, log_message: str, **extra: object) -> Iterator[None]:
    try:
        yield
    except PortalError:
        raise
    except Exception as exc:
        logger.exception(log_message, extra=extra)
        raise BackendOperationError(alert) from exc


@dataclass
class DashboardService:
    """Fetches role-scoped data and dispatches dashboard mutations.

    Every mutation runs under the action gate and is followed by a full
    re-fetch, so the state always mirrors the last successful read.
    """

    context: SessionContext
    profile_repository: ProfileRepository
    slot_repository: SlotRepository
    request_repository: RequestRepository
    storage: FileStorage
    clock: Callable[[], datetime] = _utcnow
    gate: ActionGate = field(default_factory=ActionGate)
    state: DashboardState = field(default_factory=DashboardState)

    def __post_init__(self) -> None:
        self.context.subscribe(self._on_context_change)

    def refresh(self) -> DashboardView:
        """Re-fetch slots, requests and (for students) professors."""
        user = self.context.require_user()
        self._reset_if_new_owner(user)
        professors = self.state.professors
        with _surface_failure(
            "Error loading dashboard. Please try again.",
            "Error fetching data",
            user_id=str(user.id),
        ):
            if user.is_professor:
                sessions = self.slot_repository.list_for_professor(user.id)
            else:
                professors = self.profile_repository.list_professors()
                sessions = self._upcoming_sessions(self.state.selected_professor_id)
            requests = self.request_repository.list_for_user(user.id, user.user_type)

        self.state.professors = professors
        self.state.sessions = sessions
        self.state.requests = requests
        self.state.loaded = True
        if self.state.selected_session_id not in {slot.id for slot in sessions}:
            self.state.selected_session_id = None
        return self._build_view(user)

    def select_professor(self, professor_id: UUID | None) -> DashboardView:
        """Pick a professor and list their upcoming slots."""
        user = self._require_role(
            UserType.STUDENT, "Only students can pick a professor."
        )
        if not self.state.loaded:
            self.refresh()
        if professor_id is None:
            self.state.selected_professor_id = None
            self.state.sessions = []
            self.state.selected_session_id = None
            return self._build_view(user)
        if professor_id not in {professor.id for professor in self.state.professors}:
            raise InputValidationError("Please select a valid professor.")
        with _surface_failure(
            "Error loading sessions. Please try again.",
            "Error fetching professor sessions",
            professor_id=str(professor_id),
        ):
            sessions = self._upcoming_sessions(professor_id)
        self.state.selected_professor_id = professor_id
        self.state.sessions = sessions
        self.state.selected_session_id = None
        return self._build_view(user)

    def select_session(self, session_id: UUID | None) -> DashboardView:
        """Pick one of the listed slots of the selected professor."""
        user = self._require_role(UserType.STUDENT, "Only students can pick a session.")
        if session_id is not None and session_id not in {
            slot.id for slot in self.state.sessions
        }:
            raise InputValidationError("Please select a valid session.")
        self.state.selected_session_id = session_id
        return self._build_view(user)

    def create_session(
        self,
        start_time: datetime | None,
        end_time: datetime | None,
        academic_year: str | None,
    ) -> DashboardView:
        """Publish a new registration session for the current professor."""
        user = self._require_role(
            UserType.PROFESSOR, "Only professors can create sessions."
        )
        if start_time is None or end_time is None or not (academic_year or "").strip():
            raise InputValidationError(
                "Start time, end time and academic year are required."
            )
        with self.gate.hold("create-session"):
            with _surface_failure(
                "Error creating session. Please try again.",
                "Error creating session",
                professor_id=str(user.id),
            ):
                self.slot_repository.create_slot(
                    professor_id=user.id,
                    start_time=as_utc(start_time),
                    end_time=as_utc(end_time),
                    academic_year=academic_year.strip(),
                )
            return self.refresh()

    def create_request(
        self, professor_id: UUID | None = None, session_id: UUID | None = None
    ) -> DashboardView:
        """Request coordination for a slot; defaults to the current selection."""
        user = self._require_role(
            UserType.STUDENT, "Only students can request coordination."
        )
        professor_id = professor_id or self.state.selected_professor_id
        session_id = session_id or self.state.selected_session_id
        if professor_id is None or session_id is None:
            raise InputValidationError("Please select a professor and a session.")
        with self.gate.hold("create"):
            with _surface_failure(
                "Error creating request. Please try again.",
                "Error creating request",
                student_id=str(user.id),
                session_id=str(session_id),
            ):
                upcoming = self.slot_repository.list_upcoming_for_professor(
                    professor_id, self.clock()
                )
                if session_id not in {slot.id for slot in upcoming}:
                    raise PermissionDeniedError(
                        "That session is not open for the selected professor."
                    )
                self.request_repository.create_request(
                    student_id=user.id,
                    professor_id=professor_id,
                    session_id=session_id,
                )
            self.state.selected_professor_id = None
            self.state.selected_session_id = None
            return self.refresh()

    def approve(self, request_id: UUID) -> DashboardView:
        """Approve a pending request owned by the current professor."""
        return self._decide(request_id, RequestStatus.APPROVED, None)

    def reject(self, request_id: UUID, reason: str | None) -> DashboardView:
        """Reject a pending request; the reason is stored verbatim."""
        if not reason:
            raise InputValidationError("Please provide a reason for rejection")
        return self._decide(request_id, RequestStatus.REJECTED, reason)

    def upload_file(
        self,
        request_id: UUID,
        filename: str,
        content: bytes,
        content_type: str | None = None,
    ) -> DashboardView:
        """Attach a file to an approved request in the uploader's role field."""
        user = self.context.require_user()
        if not filename:
            raise InputValidationError("Please choose a file to upload.")
        with self.gate.hold(str(request_id)):
            with _surface_failure(
                "Error uploading file. Please try again.",
                "Error uploading file",
                request_id=str(request_id),
            ):
                request = self._load_request(request_id)
                if user.id not in {request.student_id, request.professor_id}:
                    raise PermissionDeniedError("You are not part of this request.")
                if request.status is not RequestStatus.APPROVED:
                    raise PermissionDeniedError(
                        "Files can only be exchanged on approved requests."
                    )
                path = _storage_path(user.id, request_id, filename)
                self.storage.upload(path, content, content_type)
                url = self.storage.get_public_url(path)
                self.request_repository.set_file_url(
                    request_id, _FILE_URL_FIELDS[user.user_type], url
                )
            return self.refresh()

    def _decide(
        self, request_id: UUID, status: RequestStatus, reason: str | None
    ) -> DashboardView:
        user = self._require_role(
            UserType.PROFESSOR, "Only professors can decide on requests."
        )
        with self.gate.hold(str(request_id)):
            with _surface_failure(
                "Error updating request. Please try again.",
                "Error updating request",
                request_id=str(request_id),
                status=status.value,
            ):
                request = self._load_request(request_id)
                if request.professor_id != user.id:
                    raise PermissionDeniedError(
                        "This request belongs to another professor."
                    )
                if request.status is not RequestStatus.PENDING:
                    raise PermissionDeniedError(
                        "This request has already been decided."
                    )
                self.request_repository.decide(request_id, status, reason)
            return self.refresh()

    def _load_request(self, request_id: UUID) -> CoordinationRequest:
        request = self.request_repository.get_request(request_id)
        if request is None:
            raise PermissionDeniedError("Request not found.")
        return request

    def _upcoming_sessions(self, professor_id: UUID | None) -> list[SessionSlot]:
        if professor_id is None:
            return []
        return self.slot_repository.list_upcoming_for_professor(
            professor_id, self.clock()
        )

    def _require_role(self, user_type: UserType, message: str) -> Profile:
        user = self.context.require_user()
        if user.user_type is not user_type:
            raise PermissionDeniedError(message)
        return user

    def _reset_if_new_owner(self, user: Profile) -> None:
        if self.state.owner_id != user.id:
            self.state = DashboardState(owner_id=user.id)

    def _on_context_change(self, context: SessionContext) -> None:
        if context.user is None or context.user.id != self.state.owner_id:
            self.state = DashboardState(
                owner_id=context.user.id if context.user else None
            )

    def _build_view(self, user: Profile) -> DashboardView:
        is_student = user.is_student
        return DashboardView(
            user_type=user.user_type,
            requests_title="Your Requests" if is_student else "Coordination Requests",
            can_create_session=user.is_professor,
            can_select_professor=is_student,
            can_request_coordination=is_student
            and self.state.selected_session_id is not None,
            default_academic_year=(
                default_academic_year(self.clock().date())
                if user.is_professor
                else None
            ),
            professors=[
                ProfessorOption(id=professor.id, full_name=professor.full_name)
                for professor in self.state.professors
            ]
            if is_student
            else [],
            sessions=[_slot_option(slot) for slot in self.state.sessions],
            selected_professor_id=self.state.selected_professor_id,
            selected_session_id=self.state.selected_session_id,
            requests=[_request_card(user, request) for request in self.state.requests],
            action_in_progress=self.gate.token,
        )


def _storage_path(user_id: UUID, request_id: UUID, filename: str) -> str:
    extension = filename.rsplit(".", maxsplit=1)[-1]
    return f"{user_id}/{request_id}/{uuid4().hex}.{extension}"


def _format_timestamp(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %H:%M")


def _slot_option(slot: SessionSlot) -> SlotOption:
    return SlotOption(
        id=slot.id,
        label=(
            f"{_format_timestamp(slot.start_time)} - "
            f"{_format_timestamp(slot.end_time)}"
        ),
        start_time=slot.start_time,
        end_time=slot.end_time,
        academic_year=slot.academic_year,
    )


def _request_card(user: Profile, request: CoordinationRequest) -> RequestCard:
    decidable = (
        user.is_professor
        and request.professor_id == user.id
        and request.status is RequestStatus.PENDING
    )
    approved = request.status is RequestStatus.APPROVED
    files: list[FileLink] = []
    if approved and request.student_file_url:
        files.append(FileLink(label="Student File", url=request.student_file_url))
    if approved and request.professor_file_url:
        files.append(FileLink(label="Professor File", url=request.professor_file_url))
    counterpart = request.student_name if user.is_professor else request.professor_name
    return RequestCard(
        id=request.id,
        counterpart_name=counterpart or "",
        session_start=request.session_start,
        status=request.status,
        status_label=request.status.value.capitalize(),
        rejection_reason=request.rejection_reason,
        can_approve=decidable,
        can_reject=decidable,
        can_upload=approved,
        files=files,
    )
