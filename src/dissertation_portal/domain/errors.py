"""Error taxonomy surfaced to portal users."""


class PortalError(Exception):
    """Base error carrying a human-readable message."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class AuthenticationError(PortalError):
    """Bad credentials, missing or expired session."""


class InputValidationError(PortalError):
    """Required input missing; raised before any backend call."""


class PermissionDeniedError(PortalError):
    """Role, ownership or status check failed."""


class ActionInProgressError(PortalError):
    """Another mutation is already in flight for this dashboard."""


class BackendOperationError(PortalError):
    """Relational store, object store or file fetch failed."""
