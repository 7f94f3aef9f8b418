"""
Service layer interfaces and implementations.
"""

from .health_service import HealthService
from .interfaces import IHealthService, INoteService
from .note_service import NoteService

__all__ = [
    # Interfaces
    "INoteService",
    "IHealthService",

    # Implementations
    "NoteService",
    "HealthService",
]
