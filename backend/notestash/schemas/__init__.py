"""
NoteStash Backend: Schemas Package
===================================

What:  Pydantic models defining the API contract.
Why:   Schemas are separate from the ORM `Item` model because one table row
       can be a user, an email index entry or a note; the schemas give each
       record kind its own typed shape and hide storage-only fields such as
       the password hash and key prefixes.
"""
