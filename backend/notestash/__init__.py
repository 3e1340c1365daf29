"""
NoteStash Backend: Application Package
=======================================

What:  Multi-user note-taking backend built on a single-table key-value layout.
Who:   Imported by uvicorn (`notestash.main:app`), pytest, and the services.

Architecture Note:
    ┌─────────────────────────────────────┐
    │        Routes (Access Façade)       │  ← identity resolution, HTTP mapping
    ├─────────────────────────────────────┤
    │   Services (Identity / Notes /      │  ← business rules, merge policy,
    │             Stats)                  │    ownership checks
    ├─────────────────────────────────────┤
    │     Store (KeyValueStore gateway)   │  ← conditional put, range query,
    │                                     │    retries on transient failures
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← one `(pk, sk)` table, async engine
    └─────────────────────────────────────┘

    Users and notes share one keyspace. A user's profile lives at
    (USER#<id>, PROFILE); each of their notes lives at (USER#<id>, NOTE#<id>),
    so "all notes for user X" is a prefix range query inside one partition.
"""

__version__ = "1.0.0"
