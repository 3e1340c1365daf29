"""
NoteStash Backend: Notes Route Handlers
========================================

What:  CRUD endpoints for the caller's notes.
How:   The caller is resolved from X-User-Email (see deps.get_current_user)
       and used as both owner and actor, so a note id that belongs to
       someone else is simply not found in the caller's partition.

Caching:
    Notes are mutable, so responses carry `Cache-Control: no-store`.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status

from notestash.exceptions import NotFoundError
from notestash.routes.deps import get_current_user, get_store
from notestash.schemas.common import ErrorResponse, MessageResponse
from notestash.schemas.note import (
    NoteCreate,
    NoteMutationResponse,
    NoteResponse,
    NoteUpdate,
)
from notestash.schemas.user import UserRecord
from notestash.services.note_service import note_service
from notestash.store import KeyValueStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notes", tags=["Notes"])

_NOT_FOUND = {404: {"description": "Note or user not found", "model": ErrorResponse}}


@router.get(
    "",
    response_model=List[NoteResponse],
    summary="List the caller's notes (oldest first)",
)
async def list_notes(
    response: Response,
    current_user: UserRecord = Depends(get_current_user),
    store: KeyValueStore = Depends(get_store),
) -> List[NoteResponse]:
    notes = await note_service.get_user_notes(store, current_user.id)
    response.headers["X-Total-Count"] = str(len(notes))
    response.headers["Cache-Control"] = "no-store"
    return notes


@router.post(
    "",
    response_model=NoteMutationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a note",
)
async def create_note(
    body: NoteCreate,
    current_user: UserRecord = Depends(get_current_user),
    store: KeyValueStore = Depends(get_store),
) -> NoteMutationResponse:
    note = await note_service.create_note(store, current_user.id, body)
    return NoteMutationResponse(message="Note created successfully", note=note)


@router.get(
    "/{note_id}",
    response_model=NoteResponse,
    responses=_NOT_FOUND,
    summary="Get one note",
)
async def get_note(
    note_id: str,
    response: Response,
    current_user: UserRecord = Depends(get_current_user),
    store: KeyValueStore = Depends(get_store),
) -> NoteResponse:
    note = await note_service.get_note(store, current_user.id, note_id)
    if note is None:
        raise NotFoundError(resource="note", resource_id=note_id)
    response.headers["Cache-Control"] = "no-store"
    return note


@router.put(
    "/{note_id}",
    response_model=NoteMutationResponse,
    responses=_NOT_FOUND,
    summary="Update a note (omitted fields keep their value)",
)
async def update_note(
    note_id: str,
    body: NoteUpdate,
    current_user: UserRecord = Depends(get_current_user),
    store: KeyValueStore = Depends(get_store),
) -> NoteMutationResponse:
    note = await note_service.update_note(
        store, current_user.id, note_id, body, actor_id=current_user.id
    )
    return NoteMutationResponse(message="Note updated successfully", note=note)


@router.delete(
    "/{note_id}",
    response_model=MessageResponse,
    responses=_NOT_FOUND,
    summary="Delete a note",
)
async def delete_note(
    note_id: str,
    current_user: UserRecord = Depends(get_current_user),
    store: KeyValueStore = Depends(get_store),
) -> MessageResponse:
    return await note_service.delete_note(
        store, current_user.id, note_id, actor_id=current_user.id
    )
