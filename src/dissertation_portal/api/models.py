"""Pydantic models for portal request bodies."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from dissertation_portal.domain.models import UserType


class LoginBody(BaseModel):
    """Credentials for signing in."""

    email: str
    password: str


class SignupBody(BaseModel):
    """Account details for signing up."""

    email: str
    password: str
    full_name: str
    user_type: UserType = UserType.STUDENT


class CreateSessionBody(BaseModel):
    """New registration session; every field is required by the dashboard."""

    start_time: datetime | None = None
    end_time: datetime | None = None
    academic_year: str | None = None


class ProfessorSelectionBody(BaseModel):
    professor_id: UUID | None = None


class SessionSelectionBody(BaseModel):
    session_id: UUID | None = None


class CreateRequestBody(BaseModel):
    """Coordination request; missing ids fall back to the current selection."""

    professor_id: UUID | None = None
    session_id: UUID | None = None


class RejectBody(BaseModel):
    reason: str | None = None
