"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from dissertation_portal.adapters.file_fetcher import HttpxFileFetcher
from dissertation_portal.adapters.supabase_auth_gateway import SupabaseAuthGateway
from dissertation_portal.adapters.supabase_file_storage import SupabaseFileStorage
from dissertation_portal.adapters.supabase_profile_repository import (
    SupabaseProfileRepository,
)
from dissertation_portal.adapters.supabase_request_repository import (
    SupabaseRequestRepository,
)
from dissertation_portal.adapters.supabase_slot_repository import (
    SupabaseSlotRepository,
)
from dissertation_portal.config import Settings, public_file_prefix
from dissertation_portal.services.auth import AuthStateController, SessionContext
from dissertation_portal.services.dashboard import DashboardService
from dissertation_portal.services.files import FileViewer
from dissertation_portal.services.shell import ShellRouter


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    session_context: SessionContext
    auth_controller: AuthStateController
    dashboard_service: DashboardService
    file_viewer: FileViewer
    shell_router: ShellRouter
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_anon_key
    )
    profile_repository = SupabaseProfileRepository(supabase_client)
    session_context = SessionContext()
    auth_controller = AuthStateController(
        context=session_context,
        gateway=SupabaseAuthGateway(supabase_client),
        profiles=profile_repository,
    )
    dashboard_service = DashboardService(
        context=session_context,
        profile_repository=profile_repository,
        slot_repository=SupabaseSlotRepository(supabase_client),
        request_repository=SupabaseRequestRepository(supabase_client),
        storage=SupabaseFileStorage(
            supabase_client, bucket=resolved_settings.storage_bucket
        ),
    )
    file_fetcher = HttpxFileFetcher.create(
        timeout=resolved_settings.file_fetch_timeout_seconds
    )
    file_viewer = FileViewer(
        fetcher=file_fetcher,
        allowed_prefix=public_file_prefix(resolved_settings),
    )

    async def close_resources() -> None:
        auth_controller.close()
        await file_fetcher.close()

    return AppContainer(
        settings=resolved_settings,
        session_context=session_context,
        auth_controller=auth_controller,
        dashboard_service=dashboard_service,
        file_viewer=file_viewer,
        shell_router=ShellRouter(session_context),
        close_resources=close_resources,
    )
