"""
Pydantic schemas for validating and documenting API requests and responses.
"""

from .common import ErrorResponse, HealthCheckResponse, PaginationResponse, SuccessResponse
from .identity import Viewer
from .notes import (
    NoteCreate,
    NoteListResponse,
    NoteResponse,
    NoteUpdate,
    ShareRequest,
    ShareResponse,
)
from .notifications import Notification, NotificationKind

__all__ = [
    # Note schemas
    "NoteCreate",
    "NoteUpdate",
    "NoteResponse",
    "NoteListResponse",
    "ShareRequest",
    "ShareResponse",
    # Identity
    "Viewer",
    # Notifications
    "Notification",
    "NotificationKind",
    # Common schemas
    "PaginationResponse",
    "ErrorResponse",
    "SuccessResponse",
    "HealthCheckResponse",
]
