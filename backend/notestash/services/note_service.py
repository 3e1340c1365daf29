"""
NoteStash Backend: Note Service (Note Store)
=============================================

What:  CRUD over notes, each stored at (USER#<owner id>, NOTE#<note id>).
Who:   Called by the notes routes and by StatsService.

Query plans:
    get_user_notes:  pk = USER#<owner> AND sk LIKE 'NOTE#%'  (one partition;
                     the PROFILE sentinel is excluded by the prefix)
    get_note:        pk = USER#<owner> AND sk = NOTE#<id>    (keyed lookup)

Ownership:
    A note's partition key is its owner's id, so a lookup under the wrong
    owner simply finds nothing. Update and delete additionally require the
    acting user's id and refuse when it is not the owner.

Merge policy (update_note):
    Omitted or null field → keep the stored value.
    Present field         → replace the stored value.
    Present but blank title/content/category → ValidationError.
    updated_at always moves strictly forward, even within one clock tick.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from notestash.exceptions import (
    AlreadyExistsError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from notestash.models.item import DEFAULT_CATEGORY, DEFAULT_PRIORITY, Item
from notestash.models.keys import (
    NOTE_ENTITY,
    NOTE_PREFIX,
    USER_PREFIX,
    new_id,
    note_sk,
    strip_prefix,
    user_pk,
)
from notestash.schemas.common import MessageResponse
from notestash.schemas.note import NoteCreate, NoteResponse, NoteUpdate
from notestash.store import ConditionalCheckFailed, KeyValueStore

logger = logging.getLogger(__name__)

_TEXT_FIELDS = ("title", "content", "category")


def _to_note(item: Item) -> NoteResponse:
    return NoteResponse(
        id=strip_prefix(item.sk, NOTE_PREFIX),
        owner_id=strip_prefix(item.pk, USER_PREFIX),
        title=item.title,
        content=item.content,
        category=item.category,
        priority=item.priority,
        created_at=item.created_at,
        updated_at=item.updated_at,
    )


def _require_text(field: str, value: str) -> str:
    if not value or not value.strip():
        raise ValidationError(message=f"{field.capitalize()} cannot be empty", field=field)
    return value


def _advance(previous: Optional[datetime]) -> datetime:
    """Current UTC time, nudged past `previous` if the clock has not moved."""
    now = datetime.now(timezone.utc)
    if previous is not None and now <= previous:
        now = previous + timedelta(microseconds=1)
    return now


def _authorize(actor_id: str, owner_id: str, note_id: str) -> None:
    if actor_id != owner_id:
        logger.warning("User %s denied access to note %s owned by %s", actor_id, note_id, owner_id)
        raise PermissionDeniedError(context={"note_id": note_id})


class NoteService:
    """
    Business logic layer for note operations.

    Responsibilities:
        - create_note(): apply defaults, stamp timestamps, conditional put
        - get_user_notes() / get_note(): partition range query / keyed read
        - update_note(): ownership check + explicit merge policy
        - delete_note(): ownership check + keyed delete
    """

    async def create_note(
        self, store: KeyValueStore, owner_id: str, data: NoteCreate
    ) -> NoteResponse:
        """
        Create a note under `owner_id`.

        The caller resolves the owner; this layer does not check that the
        user exists (notes reference owners by key only).
        """
        title = _require_text("title", data.title)
        content = _require_text("content", data.content)
        category = DEFAULT_CATEGORY
        if data.category is not None:
            category = _require_text("category", data.category)
        now = datetime.now(timezone.utc)
        note_id = new_id()

        try:
            item = await store.put(
                {
                    "pk": user_pk(owner_id),
                    "sk": note_sk(note_id),
                    "entity_type": NOTE_ENTITY,
                    "title": title,
                    "content": content,
                    "category": category,
                    "priority": data.priority or DEFAULT_PRIORITY,
                    "created_at": now,
                    "updated_at": now,
                }
            )
        except ConditionalCheckFailed:
            raise AlreadyExistsError(resource="note")

        logger.info("Note %s created for user %s", note_id, owner_id)
        return _to_note(item)

    async def get_user_notes(self, store: KeyValueStore, owner_id: str) -> List[NoteResponse]:
        """All notes owned by `owner_id`, oldest first. Empty list if none."""
        items = await store.query(user_pk(owner_id), NOTE_PREFIX)
        return [_to_note(item) for item in items]

    async def get_note(
        self, store: KeyValueStore, owner_id: str, note_id: str
    ) -> Optional[NoteResponse]:
        item = await store.get(user_pk(owner_id), note_sk(note_id))
        return _to_note(item) if item is not None else None

    async def update_note(
        self,
        store: KeyValueStore,
        owner_id: str,
        note_id: str,
        changes: NoteUpdate,
        *,
        actor_id: str,
    ) -> NoteResponse:
        """
        Merge `changes` into an existing note.

        Raises:
            PermissionDeniedError: actor_id is not owner_id.
            NotFoundError: No such note under this owner.
            ValidationError: A present title/content/category is blank.
        """
        _authorize(actor_id, owner_id, note_id)

        existing = await store.get(user_pk(owner_id), note_sk(note_id))
        if existing is None:
            raise NotFoundError(resource="note", resource_id=note_id)

        attrs: Dict[str, Any] = {
            name: value
            for name, value in changes.model_dump(exclude_unset=True).items()
            if value is not None
        }
        for name in _TEXT_FIELDS:
            if name in attrs:
                _require_text(name, attrs[name])
        attrs["updated_at"] = _advance(existing.updated_at)

        item = await store.update(user_pk(owner_id), note_sk(note_id), attrs)
        if item is None:
            # Deleted between the read and the write
            raise NotFoundError(resource="note", resource_id=note_id)

        logger.info("Note %s updated (%s)", note_id, ", ".join(sorted(attrs)))
        return _to_note(item)

    async def delete_note(
        self,
        store: KeyValueStore,
        owner_id: str,
        note_id: str,
        *,
        actor_id: str,
    ) -> MessageResponse:
        """
        Raises:
            PermissionDeniedError: actor_id is not owner_id.
            NotFoundError: No such note under this owner.
        """
        _authorize(actor_id, owner_id, note_id)

        deleted = await store.delete(user_pk(owner_id), note_sk(note_id))
        if not deleted:
            raise NotFoundError(resource="note", resource_id=note_id)

        logger.info("Note %s deleted", note_id)
        return MessageResponse(message="Note deleted successfully")


note_service = NoteService()
