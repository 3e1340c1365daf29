"""
NoteStash Backend: Services Layer
==================================

What:  Business logic between the routes (HTTP) and the key-value store.
How:   Services are stateless singletons; the store is passed into every
       call so routes can inject it and tests can swap it.

Service Inventory:
    - UserService:  identity store (profiles, email index, credentials)
    - NoteService:  note store (CRUD, merge policy, ownership checks)
    - StatsService: aggregates derived from a user's notes
    - security:     bcrypt hash / verify helpers
"""
