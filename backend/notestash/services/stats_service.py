"""
Aggregate statistics derived from stored notes.

Nothing here is persisted: per-user stats are recomputed from the owner's
partition on every call, which is fine at personal-notes scale.
"""

import logging
from collections import Counter

from notestash.models.item import PRIORITIES
from notestash.models.keys import NOTE_ENTITY, USER_ENTITY
from notestash.schemas.stats import GlobalStats, StatsResponse
from notestash.services.note_service import note_service
from notestash.store import KeyValueStore

logger = logging.getLogger(__name__)


class StatsService:

    async def get_user_stats(self, store: KeyValueStore, owner_id: str) -> StatsResponse:
        """Totals, distinct categories and per-category / per-priority counts for one user."""
        notes = await note_service.get_user_notes(store, owner_id)

        by_category = Counter(note.category for note in notes)
        priorities = Counter(note.priority for note in notes)
        by_priority = {level: priorities.get(level, 0) for level in PRIORITIES}

        return StatsResponse(
            total_notes=len(notes),
            high_priority=by_priority["High"],
            categories=len(by_category),
            by_category=dict(by_category),
            by_priority=by_priority,
        )

    async def get_global_stats(self, store: KeyValueStore) -> GlobalStats:
        """User and note counts across the whole table."""
        return GlobalStats(
            users=await store.count(USER_ENTITY),
            notes=await store.count(NOTE_ENTITY),
        )


stats_service = StatsService()
