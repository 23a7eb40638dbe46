"""Sign-in, sign-up and sign-out endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Request

from dissertation_portal.api.models import LoginBody, SignupBody

if TYPE_CHECKING:
    from dissertation_portal.containers import AppContainer

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login")
async def login(body: LoginBody, request: Request) -> dict[str, object]:
    """Sign in and return the published profile."""
    container: AppContainer = request.app.state.container
    profile = container.auth_controller.sign_in(body.email, body.password)
    return {"user": profile}


@router.post("/signup")
async def signup(body: SignupBody, request: Request) -> dict[str, object]:
    """Create an account; confirmation may be required before signing in."""
    container: AppContainer = request.app.state.container
    profile = container.auth_controller.sign_up(
        body.email, body.password, body.full_name, body.user_type
    )
    return {"user": profile, "confirmation_required": profile is None}


@router.post("/logout")
async def logout(request: Request) -> dict[str, str]:
    """Sign out and clear the current user."""
    container: AppContainer = request.app.state.container
    container.auth_controller.sign_out()
    return {"status": "ok"}
