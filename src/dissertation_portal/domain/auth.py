"""Domain models for authentication state."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class AuthSession:
    """Backend session for a signed-in identity."""

    user_id: UUID
    email: str | None
    access_token: str
