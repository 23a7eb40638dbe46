"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

import pytest

from dissertation_portal.config import Settings, public_file_prefix
from dissertation_portal.containers import AppContainer
from dissertation_portal.domain.auth import AuthSession
from dissertation_portal.domain.errors import AuthenticationError
from dissertation_portal.domain.files import FetchedFile
from dissertation_portal.domain.models import (
    CoordinationRequest,
    ProfessorSummary,
    Profile,
    RequestStatus,
    SessionSlot,
    UserType,
)
from dissertation_portal.services.auth import (
    AuthGateway,
    AuthStateController,
    ProfileRepository,
    SessionContext,
    SessionListener,
)
from dissertation_portal.services.dashboard import (
    DashboardService,
    FileStorage,
    RequestRepository,
    SlotRepository,
)
from dissertation_portal.services.files import FileViewer
from dissertation_portal.services.shell import ShellRouter

NOW = datetime(2025, 8, 15, 12, 0, tzinfo=UTC)
PUBLIC_PREFIX = (
    "https://example.supabase.co/storage/v1/object/public/dissertation-files/"
)


@dataclass
class InMemoryProfileRepository(ProfileRepository):
    """In-memory profile repository for tests."""

    profiles: dict[UUID, Profile] = field(default_factory=dict)
    fail: bool = False

    def add(self, full_name: str, user_type: UserType) -> Profile:
        profile = Profile(
            id=uuid4(),
            email=f"{full_name.split()[0].lower()}@uni.test",
            full_name=full_name,
            user_type=user_type,
        )
        self.profiles[profile.id] = profile
        return profile

    def get_profile(self, user_id: UUID) -> Profile | None:
        if self.fail:
            raise RuntimeError("profiles unavailable")
        return self.profiles.get(user_id)

    def list_professors(self) -> list[ProfessorSummary]:
        if self.fail:
            raise RuntimeError("profiles unavailable")
        professors = [
            ProfessorSummary(id=profile.id, full_name=profile.full_name)
            for profile in self.profiles.values()
            if profile.user_type is UserType.PROFESSOR
        ]
        return sorted(professors, key=lambda professor: professor.full_name)


@dataclass
class FakeAuthGateway(AuthGateway):
    """Fake session store keyed by email."""

    profiles: InMemoryProfileRepository | None = None
    passwords: dict[str, tuple[str, UUID]] = field(default_factory=dict)
    session: AuthSession | None = None
    listeners: list[SessionListener] = field(default_factory=list)
    signups: list[dict[str, object]] = field(default_factory=list)
    issue_session_on_signup: bool = True
    fail_get_session: bool = False
    fail_sign_out: bool = False

    def register(self, profile: Profile, password: str = "secret") -> None:
        self.passwords[profile.email] = (password, profile.id)

    def sign_in(self, email: str, password: str) -> AuthSession:
        stored = self.passwords.get(email)
        if stored is None or stored[0] != password:
            raise AuthenticationError("Invalid login credentials")
        self.session = AuthSession(
            user_id=stored[1], email=email, access_token="token"
        )
        self._emit(self.session)
        return self.session

    def sign_up(
        self, email: str, password: str, metadata: dict[str, str]
    ) -> AuthSession | None:
        self.signups.append({"email": email, "metadata": metadata})
        if not self.issue_session_on_signup:
            return None
        user_id = uuid4()
        self.passwords[email] = (password, user_id)
        if self.profiles is not None:
            self.profiles.profiles[user_id] = Profile(
                id=user_id,
                email=email,
                full_name=metadata["full_name"],
                user_type=UserType(metadata["user_type"]),
            )
        self.session = AuthSession(user_id=user_id, email=email, access_token="token")
        return self.session

    def sign_out(self) -> None:
        if self.fail_sign_out:
            raise RuntimeError("network down")
        self.session = None
        self._emit(None)

    def get_session(self) -> AuthSession | None:
        if self.fail_get_session:
            raise RuntimeError("session store unavailable")
        return self.session

    def subscribe(self, listener: SessionListener):  # type: ignore[no-untyped-def]
        self.listeners.append(listener)
        return lambda: self.listeners.remove(listener)

    def _emit(self, session: AuthSession | None) -> None:
        for listener in list(self.listeners):
            listener(session)


@dataclass
class InMemorySlotRepository(SlotRepository):
    """In-memory slot repository for tests."""

    profiles: InMemoryProfileRepository
    slots: list[SessionSlot] = field(default_factory=list)
    writes: int = 0
    fail: bool = False

    def add(
        self,
        professor: Profile,
        start_time: datetime,
        hours: int = 1,
        academic_year: str = "2025",
    ) -> SessionSlot:
        slot = SessionSlot(
            id=uuid4(),
            start_time=start_time,
            end_time=start_time + timedelta(hours=hours),
            academic_year=academic_year,
            professor_id=professor.id,
            professor_name=professor.full_name,
        )
        self.slots.append(slot)
        return slot

    def get(self, slot_id: UUID) -> SessionSlot | None:
        return next((slot for slot in self.slots if slot.id == slot_id), None)

    def list_for_professor(self, professor_id: UUID) -> list[SessionSlot]:
        if self.fail:
            raise RuntimeError("slots unavailable")
        return sorted(
            (slot for slot in self.slots if slot.professor_id == professor_id),
            key=lambda slot: slot.start_time,
        )

    def list_upcoming_for_professor(
        self, professor_id: UUID, now: datetime
    ) -> list[SessionSlot]:
        return [
            slot
            for slot in self.list_for_professor(professor_id)
            if slot.start_time >= now
        ]

    def create_slot(
        self,
        professor_id: UUID,
        start_time: datetime,
        end_time: datetime,
        academic_year: str,
    ) -> None:
        if self.fail:
            raise RuntimeError("slots unavailable")
        self.writes += 1
        professor = self.profiles.profiles.get(professor_id)
        self.slots.append(
            SessionSlot(
                id=uuid4(),
                start_time=start_time,
                end_time=end_time,
                academic_year=academic_year,
                professor_id=professor_id,
                professor_name=professor.full_name if professor else None,
            )
        )


@dataclass
class InMemoryRequestRepository(RequestRepository):
    """In-memory coordination request repository for tests."""

    profiles: InMemoryProfileRepository
    slots: InMemorySlotRepository
    requests: dict[UUID, CoordinationRequest] = field(default_factory=dict)
    writes: int = 0
    fail_writes: bool = False
    _clock: datetime = NOW

    def add(
        self,
        student: Profile,
        slot: SessionSlot,
        status: RequestStatus = RequestStatus.PENDING,
        rejection_reason: str | None = None,
    ) -> CoordinationRequest:
        self._insert(student.id, slot.professor_id, slot.id)
        request_id = next(reversed(self.requests))
        updated = replace(
            self.requests[request_id],
            status=status,
            rejection_reason=rejection_reason,
        )
        self.requests[request_id] = updated
        return updated

    def list_for_user(
        self, user_id: UUID, user_type: UserType
    ) -> list[CoordinationRequest]:
        owned = [
            request
            for request in self.requests.values()
            if (
                request.student_id == user_id
                if user_type is UserType.STUDENT
                else request.professor_id == user_id
            )
        ]
        return sorted(owned, key=lambda request: request.created_at, reverse=True)

    def get_request(self, request_id: UUID) -> CoordinationRequest | None:
        return self.requests.get(request_id)

    def create_request(
        self, student_id: UUID, professor_id: UUID, session_id: UUID
    ) -> None:
        self._check_writable()
        self._insert(student_id, professor_id, session_id)

    def decide(
        self, request_id: UUID, status: RequestStatus, rejection_reason: str | None
    ) -> None:
        self._check_writable()
        current = self.requests[request_id]
        if current.status is not RequestStatus.PENDING:
            raise RuntimeError("Coordination request is no longer pending")
        self.requests[request_id] = replace(
            current,
            status=status,
            rejection_reason=(
                rejection_reason if status is RequestStatus.REJECTED else None
            ),
        )

    def set_file_url(self, request_id: UUID, field_name: str, url: str) -> None:
        self._check_writable()
        self.requests[request_id] = replace(
            self.requests[request_id], **{field_name: url}
        )

    def _check_writable(self) -> None:
        if self.fail_writes:
            raise RuntimeError("write rejected")
        self.writes += 1

    def _insert(self, student_id: UUID, professor_id: UUID, session_id: UUID) -> None:
        self._clock += timedelta(minutes=1)
        student = self.profiles.profiles.get(student_id)
        professor = self.profiles.profiles.get(professor_id)
        slot = self.slots.get(session_id)
        request = CoordinationRequest(
            id=uuid4(),
            student_id=student_id,
            professor_id=professor_id,
            session_id=session_id,
            status=RequestStatus.PENDING,
            rejection_reason=None,
            student_file_url=None,
            professor_file_url=None,
            created_at=self._clock,
            student_name=student.full_name if student else None,
            professor_name=professor.full_name if professor else None,
            session_start=slot.start_time if slot else None,
            session_end=slot.end_time if slot else None,
        )
        self.requests[request.id] = request


@dataclass
class InMemoryFileStorage(FileStorage):
    """In-memory object store for tests."""

    objects: dict[str, tuple[bytes, str | None]] = field(default_factory=dict)
    fail: bool = False

    def upload(self, path: str, content: bytes, content_type: str | None) -> None:
        if self.fail:
            raise RuntimeError("storage unavailable")
        self.objects[path] = (content, content_type)

    def get_public_url(self, path: str) -> str:
        return f"{PUBLIC_PREFIX}{path}"


@dataclass
class FakeFileFetcher:
    """Fake file fetcher serving files from the in-memory store."""

    storage: InMemoryFileStorage
    fetched: list[str] = field(default_factory=list)

    async def fetch(self, url: str) -> FetchedFile:
        self.fetched.append(url)
        path = url.removeprefix(PUBLIC_PREFIX)
        if path not in self.storage.objects:
            raise RuntimeError("404 Not Found")
        content, content_type = self.storage.objects[path]
        return FetchedFile(content_type=content_type, content=content)


@dataclass
class Portal:
    """Fakes and services wired together for service-level tests."""

    profiles: InMemoryProfileRepository
    gateway: FakeAuthGateway
    slots: InMemorySlotRepository
    requests: InMemoryRequestRepository
    storage: InMemoryFileStorage
    fetcher: FakeFileFetcher
    context: SessionContext
    auth: AuthStateController
    dashboard: DashboardService
    professor: Profile
    other_professor: Profile
    student: Profile

    def sign_in_as(self, profile: Profile) -> None:
        self.auth.sign_in(profile.email, "secret")


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_anon_key="header.payload.signature",
        environment="test",
    )


@pytest.fixture
def portal() -> Portal:
    profiles = InMemoryProfileRepository()
    professor = profiles.add("Ada Lovelace", UserType.PROFESSOR)
    other_professor = profiles.add("Alan Turing", UserType.PROFESSOR)
    student = profiles.add("Grace Hopper", UserType.STUDENT)
    gateway = FakeAuthGateway(profiles=profiles)
    for profile in (professor, other_professor, student):
        gateway.register(profile)
    slots = InMemorySlotRepository(profiles)
    requests = InMemoryRequestRepository(profiles, slots)
    storage = InMemoryFileStorage()
    context = SessionContext()
    auth = AuthStateController(context=context, gateway=gateway, profiles=profiles)
    dashboard = DashboardService(
        context=context,
        profile_repository=profiles,
        slot_repository=slots,
        request_repository=requests,
        storage=storage,
        clock=lambda: NOW,
    )
    auth.initialize()
    return Portal(
        profiles=profiles,
        gateway=gateway,
        slots=slots,
        requests=requests,
        storage=storage,
        fetcher=FakeFileFetcher(storage),
        context=context,
        auth=auth,
        dashboard=dashboard,
        professor=professor,
        other_professor=other_professor,
        student=student,
    )


@pytest.fixture
def container(settings: Settings, portal: Portal) -> AppContainer:
    # The app lifespan initializes auth itself.
    portal.auth.close()
    portal.context.loading = True

    async def close_resources() -> None:
        portal.auth.close()

    return AppContainer(
        settings=settings,
        session_context=portal.context,
        auth_controller=portal.auth,
        dashboard_service=portal.dashboard,
        file_viewer=FileViewer(
            fetcher=portal.fetcher, allowed_prefix=public_file_prefix(settings)
        ),
        shell_router=ShellRouter(portal.context),
        close_resources=close_resources,
    )
