"""
NoteHub Backend - Note Sharing and Collaboration Service

Owns the note records of the workspace: who can see them, who can change
them, how they are shared and copied, and who gets told about it.

Version: 1.0.0
"""

__version__ = "1.0.0"
