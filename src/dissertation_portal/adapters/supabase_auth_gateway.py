"""Supabase Auth session store."""

from collections.abc import Callable
from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from dissertation_portal.domain.auth import AuthSession
from dissertation_portal.domain.errors import AuthenticationError
from dissertation_portal.services.auth import AuthGateway, SessionListener


@dataclass
class SupabaseAuthGateway(AuthGateway):
    """Supabase implementation of the session store."""

    client: Client

    def sign_in(self, email: str, password: str) -> AuthSession:
        """Sign in with email and password."""
        try:
            response = self.client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except Exception as exc:
            raise AuthenticationError(str(exc) or "Unable to sign in.") from exc
        session = _to_session(response.session)
        if session is None:
            raise AuthenticationError("Unable to sign in.")
        return session

    def sign_up(
        self, email: str, password: str, metadata: dict[str, str]
    ) -> AuthSession | None:
        """Register an identity with profile metadata."""
        try:
            response = self.client.auth.sign_up(
                {"email": email, "password": password, "options": {"data": metadata}}
            )
        except Exception as exc:
            raise AuthenticationError(str(exc) or "Unable to sign up.") from exc
        return _to_session(response.session)

    def sign_out(self) -> None:
        """Sign out of the current session."""
        self.client.auth.sign_out()

    def get_session(self) -> AuthSession | None:
        """Return the stored session, if any."""
        return _to_session(self.client.auth.get_session())

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Forward every auth state change to the listener."""

        def on_change(_event, session) -> None:  # type: ignore[no-untyped-def]
            listener(_to_session(session))

        subscription = self.client.auth.on_auth_state_change(on_change)
        return subscription.unsubscribe


def _to_session(session) -> AuthSession | None:  # type: ignore[no-untyped-def]
    if session is None or session.user is None:
        return None
    return AuthSession(
        user_id=UUID(str(session.user.id)),
        email=session.user.email,
        access_token=session.access_token,
    )
