"""FastAPI application factory.

The app serves one local user: every request acts on the single session
context owned by the container, so whoever signed in last is the current
user for all clients. Run it bound to localhost only.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse, Response

from dissertation_portal.api.auth import router as auth_router
from dissertation_portal.api.dashboard import files_router
from dissertation_portal.api.dashboard import router as dashboard_router
from dissertation_portal.app_logging import configure_logging
from dissertation_portal.containers import AppContainer
from dissertation_portal.domain.errors import (
    ActionInProgressError,
    AuthenticationError,
    BackendOperationError,
    InputValidationError,
    PermissionDeniedError,
    PortalError,
)
from dissertation_portal.services.shell import (
    DASHBOARD_PATH,
    LOGIN_PATH,
    SIGNUP_PATH,
)

_ERROR_STATUS = (
    (AuthenticationError, 401),
    (PermissionDeniedError, 403),
    (ActionInProgressError, 409),
    (InputValidationError, 422),
    (BackendOperationError, 502),
)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.container.auth_controller.initialize()
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(auth_router)
    app.include_router(dashboard_router)
    app.include_router(files_router)

    @app.exception_handler(PortalError)
    async def portal_error(request: Request, exc: PortalError) -> JSONResponse:
        status_code = next(
            (code for error_type, code in _ERROR_STATUS if isinstance(exc, error_type)),
            400,
        )
        if status_code >= 500:
            logger.warning(
                "Backend failure surfaced to user", extra={"path": request.url.path}
            )
        return JSONResponse(
            status_code=status_code,
            content={"detail": _format_alert(request.app.state.container, exc)},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get(DASHBOARD_PATH, response_model=None)
    async def dashboard_route(request: Request) -> Response | dict[str, object]:
        """Dashboard inside the layout, or a redirect to the login page."""
        return _navigate(request.app.state.container, DASHBOARD_PATH)

    @app.get(LOGIN_PATH, response_model=None)
    async def login_route(request: Request) -> Response | dict[str, object]:
        """Login page, unless already signed in."""
        return _navigate(request.app.state.container, LOGIN_PATH)

    @app.get(SIGNUP_PATH, response_model=None)
    async def signup_route(request: Request) -> Response | dict[str, object]:
        """Signup page, unless already signed in."""
        return _navigate(request.app.state.container, SIGNUP_PATH)

    return app


def _navigate(container: AppContainer, path: str) -> Response | dict[str, object]:
    """Resolve a shell route into a redirect or a view document."""
    decision = container.shell_router.resolve(path)
    if decision.redirect_to is not None:
        return RedirectResponse(decision.redirect_to)
    payload: dict[str, object] = {
        "state": decision.state.value,
        "view": decision.view,
    }
    if decision.layout is not None:
        payload["layout"] = decision.layout
    if decision.view == "dashboard":
        payload["dashboard"] = container.dashboard_service.refresh()
    return payload


def _format_alert(container: AppContainer, exc: PortalError) -> str:
    """Return the user-facing alert, with cause details in local runs."""
    cause = exc.__cause__
    if container.settings.environment == "local" and cause is not None:
        detail = f"{type(cause).__name__}: {cause}".strip()
        return f"{exc.message} (debug: {detail})"
    return exc.message
