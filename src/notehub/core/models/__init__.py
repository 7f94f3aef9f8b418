"""
Database models for NoteHub.

Models included:
    - Note: note content, visibility flags and copy provenance
    - NoteShare: membership rows making up a note's shared-with set
"""

from .base import BaseModel
from .note import Note
from .share import NoteShare

__all__ = [
    "BaseModel",
    "Note",
    "NoteShare",
]
