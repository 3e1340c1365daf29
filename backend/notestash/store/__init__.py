"""
NoteStash Backend: Store Package
=================================

What:  Keyed-table access (`KeyValueStore`) over the single `(pk, sk)` table.
Why:   Services express every read and write as keyed-store primitives, so
       the partition/sort-key design stays in one place and the backing
       database can change without touching business rules.
"""

from notestash.store.keyvalue import ConditionalCheckFailed, KeyValueStore, kv_store

__all__ = ["ConditionalCheckFailed", "KeyValueStore", "kv_store"]
