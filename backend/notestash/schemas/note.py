"""
NoteStash Backend: Note Schemas
================================

What:  Request bodies for creating and updating notes, and the note record
       returned by every note endpoint.

Partial update semantics (NoteUpdate):
    Every field is optional. A field that is omitted, or sent as null, keeps
    the stored value. A field that is present replaces it. Title, content and
    category can never be blank, so a present-but-blank value is rejected by
    NoteService with a 400 instead of being silently ignored.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from notestash.schemas.common import CamelModel

Priority = Literal["High", "Medium", "Low"]


class NoteCreate(CamelModel):
    """
    Body of POST /api/notes.

    Omitted category defaults to "General" and omitted priority to "Medium".
    A category that is present but blank is rejected like on update.
    """
    title: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1)
    category: Optional[str] = Field(default=None, max_length=100)
    priority: Optional[Priority] = None


class NoteUpdate(CamelModel):
    """Body of PUT /api/notes/{id}."""
    title: Optional[str] = Field(default=None, max_length=200)
    content: Optional[str] = None
    category: Optional[str] = Field(default=None, max_length=100)
    priority: Optional[Priority] = None


class NoteResponse(CamelModel):
    """A stored note."""
    id: str = Field(description="Note identifier (UUID hex)")
    owner_id: str = Field(description="Identifier of the owning user")
    title: str
    content: str
    category: str
    priority: Priority
    created_at: datetime
    updated_at: datetime


class NoteMutationResponse(CamelModel):
    """Returned by create and update: a message plus the resulting note."""
    message: str
    note: NoteResponse
