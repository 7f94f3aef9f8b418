"""
Error taxonomy for NoteHub.

Every caller-facing failure is an HTTPException subclass so services can raise
them directly, the same way they raise HTTPException, while the app-level
handlers in main.py render them with the ErrorResponse envelope.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class NoteHubError(HTTPException):
    """Base class for errors surfaced to API callers."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error: str = "InternalError"
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(status_code=self.status_code, detail=self.message)


class Unauthenticated(NoteHubError):
    """No viewer identity present (or the token could not be verified)."""

    status_code = status.HTTP_401_UNAUTHORIZED
    error = "Unauthenticated"
    default_message = "Authentication required"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.headers = {"WWW-Authenticate": "Bearer"}


class InvalidRequest(NoteHubError):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "InvalidRequest"
    default_message = "Invalid request"


class NotFound(NoteHubError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "NotFound"
    default_message = "Note not found"


class Forbidden(NoteHubError):
    status_code = status.HTTP_403_FORBIDDEN
    error = "Forbidden"
    default_message = "Forbidden"


class StoreFailure(NoteHubError):
    """Persistence failed. The message never carries driver or SQL details."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error = "StoreFailure"
    default_message = "Internal server error"
