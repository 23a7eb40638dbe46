"""Authentication state: session context and auth state controller."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol
from uuid import UUID

from dissertation_portal.domain.auth import AuthSession
from dissertation_portal.domain.errors import (
    AuthenticationError,
    BackendOperationError,
    InputValidationError,
)
from dissertation_portal.domain.models import ProfessorSummary, Profile, UserType

logger = logging.getLogger(__name__)

SessionListener = Callable[[AuthSession | None], None]
ContextObserver = Callable[["SessionContext"], None]


class AuthGateway(Protocol):
    """Interface to the hosted session store."""

    def sign_in(self, email: str, password: str) -> AuthSession:
        """Authenticate and return the new session."""

    def sign_up(
        self, email: str, password: str, metadata: dict[str, str]
    ) -> AuthSession | None:
        """Register an identity; return a session when one is issued."""

    def sign_out(self) -> None:
        """Invalidate the current session."""

    def get_session(self) -> AuthSession | None:
        """Return the current session, if any."""

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register for sign-in/sign-out transitions; return an unsubscriber."""


class ProfileRepository(Protocol):
    """Persistence interface for profiles."""

    def get_profile(self, user_id: UUID) -> Profile | None:
        """Return the profile for an identity, if present."""

    def list_professors(self) -> list[ProfessorSummary]:
        """Return all professors ordered by name."""


@dataclass
class SessionContext:
    """Holds the current user and the initial loading flag."""

    user: Profile | None = None
    loading: bool = True
    _observers: list[ContextObserver] = field(default_factory=list, repr=False)

    def publish(self, user: Profile | None) -> None:
        """Replace the current user and notify observers."""
        self.user = user
        self._notify()

    def clear(self) -> None:
        self.publish(None)

    def finish_loading(self) -> None:
        self.loading = False
        self._notify()

    def require_user(self) -> Profile:
        """Return the current user or raise when nobody is signed in."""
        if self.user is None:
            raise AuthenticationError("Please sign in to continue.")
        return self.user

    def subscribe(self, observer: ContextObserver) -> Callable[[], None]:
        """Register an observer and return a callable that removes it."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _notify(self) -> None:
        for observer in list(self._observers):
            try:
                observer(self)
            except Exception:
                logger.exception("Session context observer failed")


@dataclass
class AuthStateController:
    """Signs users in and out and keeps the session context current."""

    context: SessionContext
    gateway: AuthGateway
    profiles: ProfileRepository
    _unsubscribe: Callable[[], None] | None = field(default=None, repr=False)

    def initialize(self) -> None:
        """Resolve any existing session, then follow session transitions.

        The loading flag is always cleared, and a failure while resolving
        the existing session leaves the context without a user.
        """
        try:
            session = self.gateway.get_session()
            if session is not None:
                profile = self.profiles.get_profile(session.user_id)
                if profile is not None:
                    self.context.publish(profile)
        except Exception:
            logger.exception("Error initializing auth")
        finally:
            self.context.finish_loading()

        if self._unsubscribe is None:
            self._unsubscribe = self.gateway.subscribe(self._handle_transition)

    def sign_in(self, email: str, password: str) -> Profile:
        """Authenticate and publish the matching profile."""
        if not email or not password:
            raise InputValidationError("Email and password are required.")
        session = self.gateway.sign_in(email, password)
        profile = self._resolve_profile(session.user_id)
        self.context.publish(profile)
        return profile

    def sign_up(
        self, email: str, password: str, full_name: str, user_type: UserType
    ) -> Profile | None:
        """Register a new account; publish its profile when a session exists."""
        if not email or not password or not full_name.strip():
            raise InputValidationError("Email, password and full name are required.")
        session = self.gateway.sign_up(
            email,
            password,
            {"full_name": full_name, "user_type": user_type.value},
        )
        if session is None:
            return None
        profile = self._resolve_profile(session.user_id)
        self.context.publish(profile)
        return profile

    def sign_out(self) -> None:
        """Invalidate the backend session and clear the current user."""
        try:
            self.gateway.sign_out()
        except Exception as exc:
            logger.exception("Error signing out")
            raise BackendOperationError("Error signing out. Please try again.") from exc
        finally:
            self.context.clear()

    def close(self) -> None:
        """Stop following session transitions."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _resolve_profile(self, user_id: UUID) -> Profile:
        try:
            profile = self.profiles.get_profile(user_id)
        except Exception as exc:
            logger.exception("Failed to load profile", extra={"user_id": str(user_id)})
            raise AuthenticationError("Unable to load your profile.") from exc
        if profile is None:
            raise AuthenticationError("No profile exists for this account.")
        return profile

    def _handle_transition(self, session: AuthSession | None) -> None:
        if session is None:
            self.context.clear()
            return
        try:
            profile = self.profiles.get_profile(session.user_id)
        except Exception:
            logger.exception(
                "Failed to resolve profile after auth change",
                extra={"user_id": str(session.user_id)},
            )
            return
        if profile is not None:
            self.context.publish(profile)
