"""Repository layer for data access."""

from .note_repository import NoteFilter, NoteRepository

__all__ = [
    "NoteFilter",
    "NoteRepository",
]
