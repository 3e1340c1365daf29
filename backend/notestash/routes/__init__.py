"""
NoteStash Backend: API Routes Package
======================================

Route Inventory:
    - auth.py:    POST /api/auth/register, POST /api/auth/login,
                  GET  /api/auth/profile,  PUT  /api/auth/password
    - notes.py:   GET/POST /api/notes, GET/PUT/DELETE /api/notes/{id}
    - stats.py:   GET  /api/stats
    - health.py:  GET  /health
    - deps.py:    store handle + X-User-Email identity resolution

Routes stay thin: resolve the caller, call one service method, return its
result. Status codes for failures come from the global exception handlers.
"""
