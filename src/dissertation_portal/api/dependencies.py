"""Shared FastAPI dependencies."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Request

from dissertation_portal.domain.models import Profile  # noqa: TC001

if TYPE_CHECKING:
    from dissertation_portal.containers import AppContainer


async def require_user(request: Request) -> Profile:
    """Return the signed-in profile or fail with an authentication error."""
    container: AppContainer = request.app.state.container
    return container.session_context.require_user()
