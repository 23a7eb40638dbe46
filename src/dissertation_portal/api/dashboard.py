"""Dashboard endpoints for students and professors."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, File, Request, UploadFile
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from dissertation_portal.api.dependencies import require_user
from dissertation_portal.api.models import (
    CreateRequestBody,
    CreateSessionBody,
    ProfessorSelectionBody,
    RejectBody,
    SessionSelectionBody,
)
from dissertation_portal.domain.dashboard import DashboardView

if TYPE_CHECKING:
    from dissertation_portal.containers import AppContainer

router = APIRouter(prefix="/dashboard", tags=["dashboard"])
files_router = APIRouter(prefix="/files", tags=["files"])


@router.get("", dependencies=[Depends(require_user)])
async def dashboard(request: Request) -> DashboardView:
    """Fetch role-scoped data and return the dashboard."""
    container: AppContainer = request.app.state.container
    return container.dashboard_service.refresh()


@router.post("/sessions", dependencies=[Depends(require_user)])
async def create_session(body: CreateSessionBody, request: Request) -> DashboardView:
    """Publish a registration session (professors only)."""
    container: AppContainer = request.app.state.container
    return container.dashboard_service.create_session(
        body.start_time, body.end_time, body.academic_year
    )


@router.post("/selection/professor", dependencies=[Depends(require_user)])
async def select_professor(
    body: ProfessorSelectionBody, request: Request
) -> DashboardView:
    """Select a professor and list their upcoming sessions (students only)."""
    container: AppContainer = request.app.state.container
    return container.dashboard_service.select_professor(body.professor_id)


@router.post("/selection/session", dependencies=[Depends(require_user)])
async def select_session(body: SessionSelectionBody, request: Request) -> DashboardView:
    """Select one of the listed sessions (students only)."""
    container: AppContainer = request.app.state.container
    return container.dashboard_service.select_session(body.session_id)


@router.post("/requests", dependencies=[Depends(require_user)])
async def create_request(body: CreateRequestBody, request: Request) -> DashboardView:
    """Request coordination for a session (students only)."""
    container: AppContainer = request.app.state.container
    return container.dashboard_service.create_request(
        professor_id=body.professor_id, session_id=body.session_id
    )


@router.post("/requests/{request_id}/approve", dependencies=[Depends(require_user)])
async def approve_request(request_id: UUID, request: Request) -> DashboardView:
    """Approve a pending request."""
    container: AppContainer = request.app.state.container
    return container.dashboard_service.approve(request_id)


@router.post("/requests/{request_id}/reject", dependencies=[Depends(require_user)])
async def reject_request(
    request_id: UUID, body: RejectBody, request: Request
) -> DashboardView:
    """Reject a pending request with a reason."""
    container: AppContainer = request.app.state.container
    return container.dashboard_service.reject(request_id, body.reason)


@router.post("/requests/{request_id}/files", dependencies=[Depends(require_user)])
async def upload_file(
    request_id: UUID, request: Request, file: UploadFile = File(...)
) -> DashboardView:
    """Upload a file to an approved request."""
    container: AppContainer = request.app.state.container
    content = await file.read()
    return container.dashboard_service.upload_file(
        request_id,
        filename=file.filename or "",
        content=content,
        content_type=file.content_type,
    )


@files_router.get(
    "/view", dependencies=[Depends(require_user)], response_model=None
)
async def view_file(url: str, request: Request) -> Response:
    """Show text files inline; redirect to anything else."""
    container: AppContainer = request.app.state.container
    display = await container.file_viewer.open_file(url)
    if display.html is not None:
        return HTMLResponse(display.html)
    return RedirectResponse(display.redirect_url or url)
