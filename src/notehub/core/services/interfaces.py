"""
Service interfaces for NoteHub application.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict
from uuid import UUID

from ..schemas.common import HealthCheckResponse
from ..schemas.identity import Viewer
from ..schemas.notes import (
    NoteCreate,
    NoteListResponse,
    NoteResponse,
    NoteUpdate,
    ShareRequest,
    ShareResponse,
)


class INoteService(ABC):
    """Note lifecycle, sharing, copying and listing."""

    @abstractmethod
    async def create_note(self, viewer: Viewer, request: NoteCreate) -> NoteResponse:
        """Create new note, optionally shared with some users."""
        pass

    @abstractmethod
    async def get_note(self, note_id: UUID, viewer: Viewer) -> NoteResponse:
        """Get note by ID if the viewer may read it."""
        pass

    @abstractmethod
    async def update_note(self, note_id: UUID, viewer: Viewer, request: NoteUpdate) -> NoteResponse:
        """Owner-only update; merges recipients."""
        pass

    @abstractmethod
    async def delete_note(self, note_id: UUID, viewer: Viewer) -> bool:
        """Owner-only hard delete."""
        pass

    @abstractmethod
    async def share_note(self, note_id: UUID, viewer: Viewer, request: ShareRequest) -> ShareResponse:
        """Owner-only union of recipients."""
        pass

    @abstractmethod
    async def copy_note(self, note_id: UUID, viewer: Viewer) -> NoteResponse:
        """Create an independent copy owned by the viewer."""
        pass

    @abstractmethod
    async def list_visible_notes(self, viewer: Viewer, page: int = 1, per_page: int = 20) -> NoteListResponse:
        """Every note the viewer may read."""
        pass

    @abstractmethod
    async def list_my_notes(self, viewer: Viewer, page: int = 1, per_page: int = 20) -> NoteListResponse:
        pass

    @abstractmethod
    async def list_public_notes(self, viewer: Viewer, page: int = 1, per_page: int = 20) -> NoteListResponse:
        pass

    @abstractmethod
    async def list_copied_notes(self, viewer: Viewer, page: int = 1, per_page: int = 20) -> NoteListResponse:
        pass

    @abstractmethod
    async def list_shared_with_me(self, viewer: Viewer, page: int = 1, per_page: int = 20) -> NoteListResponse:
        pass

    @abstractmethod
    async def list_project_notes(
        self, project_id: UUID, viewer: Viewer, page: int = 1, per_page: int = 20
    ) -> NoteListResponse:
        pass


class IHealthService(ABC):
    """Health check service."""

    @abstractmethod
    async def get_health_status(self) -> HealthCheckResponse:
        """Get app health status."""
        pass

    @abstractmethod
    async def check_database_health(self) -> Dict[str, Any]:
        """Check DB connection."""
        pass

    @abstractmethod
    async def check_redis_health(self) -> Dict[str, Any]:
        """Check Redis connection."""
        pass
