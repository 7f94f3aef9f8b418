"""
Note management schemas.

These schemas define the API contracts for note CRUD, sharing and copying.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from ..models.types import normalize_tags
from .common import PaginationResponse


def _clean_tags(v):
    if v is None:
        return v
    for tag in v:
        if len(tag.strip()) > 50:
            raise ValueError("Tags must be at most 50 characters")
    return normalize_tags(v)


class NoteCreate(BaseModel):
    """Note creation request schema."""

    title: str = Field(min_length=1, max_length=200, description="Note title")
    project_id: Optional[uuid.UUID] = Field(
        default=None,
        validation_alias=AliasChoices("project_id", "projectId"),
        description="External project reference",
    )
    blocks: List[Dict[str, Any]] = Field(default_factory=list, description="Editor content blocks")
    tags: List[str] = Field(default_factory=list, max_length=50, description="Note tags")
    is_public: bool = Field(
        default=False,
        validation_alias=AliasChoices("is_public", "isPublic"),
        description="Whether every authenticated user can read the note",
    )
    shared_with: List[uuid.UUID] = Field(
        default_factory=list,
        max_length=200,
        validation_alias=AliasChoices("shared_with", "sharedWith"),
        description="Users granted read access",
    )

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        if not v.strip():
            raise ValueError("Title required")
        return v.strip()

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v):
        return _clean_tags(v)

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "title": "Plan",
                "project_id": None,
                "blocks": [{"type": "paragraph", "data": {"text": "Kick-off agenda"}}],
                "tags": ["planning"],
                "is_public": False,
                "shared_with": ["456e7890-e89b-12d3-a456-426614174000"],
            }
        },
    )


class NoteUpdate(BaseModel):
    """Note update request schema.

    Fields left out are unchanged. ``blocks`` only replaces the stored blocks
    when non-empty, ``project_id`` sent as null clears the project and
    ``shared_with`` is merged into the existing recipients.
    """

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    project_id: Optional[uuid.UUID] = Field(
        default=None, validation_alias=AliasChoices("project_id", "projectId")
    )
    blocks: Optional[List[Dict[str, Any]]] = Field(default=None)
    tags: Optional[List[str]] = Field(default=None, max_length=50)
    is_public: Optional[bool] = Field(
        default=None, validation_alias=AliasChoices("is_public", "isPublic")
    )
    shared_with: Optional[List[uuid.UUID]] = Field(
        default=None, max_length=200, validation_alias=AliasChoices("shared_with", "sharedWith")
    )

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Title required")
        return v.strip() if v is not None else v

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v):
        return _clean_tags(v)

    model_config = ConfigDict(populate_by_name=True)


class ShareRequest(BaseModel):
    """Share a note with more users."""

    target_user_ids: List[uuid.UUID] = Field(
        default_factory=list,
        max_length=200,
        validation_alias=AliasChoices("target_user_ids", "targetUserIds"),
        description="Users to add to the note's shared-with set",
    )

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={"example": {"target_user_ids": ["456e7890-e89b-12d3-a456-426614174000"]}},
    )


class NoteResponse(BaseModel):
    """Note as exposed to one viewer."""

    id: uuid.UUID = Field(description="Note unique identifier")
    title: str
    project_id: Optional[uuid.UUID] = None
    blocks: List[Dict[str, Any]] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    is_public: bool

    created_by: uuid.UUID = Field(description="Owner id")
    created_username: str = Field(description="Owner display name at creation time")
    shared_with: List[uuid.UUID] = Field(default_factory=list)
    shared_original_id: Optional[uuid.UUID] = Field(
        default=None, description="Note this one was copied from"
    )
    copied_from: Optional[uuid.UUID] = Field(
        default=None, description="Owner of the original at copy time"
    )

    created_at: datetime
    updated_at: datetime

    # view projections, never stored
    can_edit: bool = Field(description="Whether the viewer owns the note")
    is_copy: bool = Field(description="Whether the note was copied from another note")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "title": "Plan",
                "project_id": None,
                "blocks": [],
                "tags": ["planning"],
                "is_public": False,
                "created_by": "456e7890-e89b-12d3-a456-426614174000",
                "created_username": "alice",
                "shared_with": [],
                "shared_original_id": None,
                "copied_from": None,
                "created_at": "2025-09-13T10:30:00Z",
                "updated_at": "2025-09-13T11:00:00Z",
                "can_edit": True,
                "is_copy": False,
            }
        },
    )


class NoteListResponse(PaginationResponse[NoteResponse]):
    """Paginated note list response."""


class ShareResponse(BaseModel):
    """Result of a share call."""

    message: str = Field(default="Note shared successfully")
    note: NoteResponse
    added: List[uuid.UUID] = Field(
        default_factory=list, description="Recipients that were not already in the set"
    )
