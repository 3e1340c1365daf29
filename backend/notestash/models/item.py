"""
NoteStash Backend: Key-Value Item Model
========================================

What:  ORM model for the single table that holds every record kind.
How:   Composite primary key (pk, sk). Attribute columns are nullable because
       each record kind uses a different subset of them:

           kind   | attributes used
           -------+-----------------------------------------------
           USER   | email, password_hash, created_at, updated_at
           EMAIL  | email, user_id, created_at
           NOTE   | title, content, category, priority, created_at, updated_at

Query Patterns:
    - Keyed lookup:      WHERE pk = :pk AND sk = :sk        → primary key
    - Partition range:   WHERE pk = :pk AND sk LIKE 'NOTE#%' → primary key prefix
    - Entity counts:     WHERE entity_type = :type          → idx_<table>_entity_type
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

from notestash.config import settings
from notestash.database import Base

DEFAULT_CATEGORY = "General"
DEFAULT_PRIORITY = "Medium"
PRIORITIES = ("High", "Medium", "Low")


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware UTC timestamps on every backend.

    PostgreSQL keeps the offset natively; SQLite drops it, so values read back
    without tzinfo are re-tagged as UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is None:
            raise ValueError("Naive datetimes are not allowed; use UTC-aware values")
        if value is not None:
            value = value.astimezone(timezone.utc)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


class Item(Base):
    """One record in the keyspace: a user profile, an email index entry or a note."""

    __tablename__ = settings.table_name

    pk: Mapped[str] = mapped_column(String(400), primary_key=True)
    sk: Mapped[str] = mapped_column(String(64), primary_key=True)
    entity_type: Mapped[str] = mapped_column(String(16), nullable=False)

    # ── User / email index attributes ─────────────────────────────────────
    email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True)
    user_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    password_hash: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)

    # ── Note attributes ───────────────────────────────────────────────────
    title: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    priority: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)

    # ── Timestamps ────────────────────────────────────────────────────────
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)

    __table_args__ = (
        Index(f"idx_{settings.table_name}_entity_type", "entity_type"),
    )

    def __repr__(self) -> str:
        return f"<Item(pk='{self.pk}', sk='{self.sk}', entity_type='{self.entity_type}')>"
