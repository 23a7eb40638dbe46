"""Navigation gating on authentication state."""

from dataclasses import dataclass
from enum import StrEnum

from dissertation_portal.services.auth import SessionContext

APP_TITLE = "Dissertation Portal"
LOGIN_PATH = "/login"
SIGNUP_PATH = "/signup"
DASHBOARD_PATH = "/"

_PUBLIC_VIEWS = {LOGIN_PATH: "login", SIGNUP_PATH: "signup"}


class ShellState(StrEnum):
    LOADING = "loading"
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class LayoutView:
    """Navigation chrome around authenticated pages."""

    title: str
    user_label: str
    sign_out_path: str


@dataclass(frozen=True)
class RouteDecision:
    """Outcome of navigating to a path."""

    state: ShellState
    view: str | None = None
    redirect_to: str | None = None
    layout: LayoutView | None = None

    @property
    def found(self) -> bool:
        return self.view is not None or self.redirect_to is not None


@dataclass
class ShellRouter:
    """Decides what each route shows for the current session context."""

    context: SessionContext

    @property
    def state(self) -> ShellState:
        if self.context.loading:
            return ShellState.LOADING
        if self.context.user is None:
            return ShellState.UNAUTHENTICATED
        return ShellState.AUTHENTICATED

    def resolve(self, path: str) -> RouteDecision:
        """Return the view or redirect for path."""
        state = self.state
        if state is ShellState.LOADING:
            return RouteDecision(state=state, view="loading")
        if path in _PUBLIC_VIEWS:
            if state is ShellState.AUTHENTICATED:
                return RouteDecision(state=state, redirect_to=DASHBOARD_PATH)
            return RouteDecision(state=state, view=_PUBLIC_VIEWS[path])
        if path == DASHBOARD_PATH:
            if state is ShellState.UNAUTHENTICATED:
                return RouteDecision(state=state, redirect_to=LOGIN_PATH)
            return RouteDecision(state=state, view="dashboard", layout=self.layout())
        return RouteDecision(state=state)

    def layout(self) -> LayoutView | None:
        user = self.context.user
        if user is None:
            return None
        return LayoutView(
            title=APP_TITLE,
            user_label=f"{user.full_name} ({user.user_type.value})",
            sign_out_path="/auth/logout",
        )
