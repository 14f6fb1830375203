"""
Error taxonomy for the hiring engines.

Services raise these instead of HTTPException so the engines stay usable
outside a request. main.py renders them as JSON with the matching status code.
"""
from typing import List, Optional


class JobHuntError(Exception):
    """Base class for every recoverable domain failure."""
    status_code = 400
    retryable = False

    def __init__(self, message: str, fields: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.fields = fields or []

    def to_dict(self) -> dict:
        body = {"message": self.message, "success": False}
        if self.fields:
            body["fields"] = self.fields
        if self.retryable:
            body["retryable"] = True
        return body


class ValidationError(JobHuntError):
    """Malformed or out-of-range input. Nothing was written."""
    status_code = 400


class AuthorizationError(JobHuntError):
    """Caller does not own the resource."""
    status_code = 403


class NotFoundError(JobHuntError):
    status_code = 404


class JobInactiveError(NotFoundError):
    """Job exists but has been archived."""
    status_code = 410


class ConflictError(JobHuntError):
    """Request is well formed but clashes with the current state."""
    status_code = 409


class DuplicateApplicationError(ConflictError):
    pass


class InvalidTransitionError(ConflictError):
    pass


class LockedFieldError(ConflictError):
    pass


class ConcurrentUpdateError(ConflictError):
    retryable = True


class TransientError(JobHuntError):
    """Store or mail timeout. Safe to retry with backoff."""
    status_code = 503
    retryable = True


class ConfigurationError(Exception):
    """Missing or invalid settings. Not recoverable at request time."""
