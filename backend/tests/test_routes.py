"""
NoteStash Backend: API Route Tests
===================================

What:  End-to-end tests through the FastAPI app (middleware, dependencies,
       exception handlers) against an in-memory store.
How:   HTTPX AsyncClient over ASGITransport (see conftest.test_client).

What we test:
    ✅ Register / login / profile / password change, camelCase bodies
    ✅ Identity header: missing → 401, unknown → 404
    ✅ Notes CRUD and the status code of every failure path
    ✅ Stats and health, including a 503 when the store is down
    ✅ Request ID propagation
"""

import pytest

from notestash.exceptions import StoreUnavailableError
from notestash.main import app
from notestash.models import keys
from notestash.routes.deps import get_store

TEST_EMAIL = "a@x.com"
TEST_PASSWORD = "secret1"


async def _create_note(client, headers, **fields):
    body = {"title": "T", "content": "C", **fields}
    response = await client.post("/api/notes", json=body, headers=headers)
    assert response.status_code == 201
    return response.json()["note"]


class TestAuthRoutes:

    @pytest.mark.asyncio
    async def test_register_returns_public_user(self, test_client):
        response = await test_client.post(
            "/api/auth/register", json={"email": TEST_EMAIL, "password": TEST_PASSWORD}
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "User registered successfully"
        assert set(body["user"]) == {"id", "email", "createdAt"}
        assert body["user"]["email"] == TEST_EMAIL

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, test_client, registered):
        response = await test_client.post(
            "/api/auth/register", json={"email": TEST_EMAIL, "password": "another1"}
        )

        assert response.status_code == 409
        assert response.json()["error"] == "already_exists"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            {"email": TEST_EMAIL, "password": "12345"},
            {"email": "not-an-email", "password": TEST_PASSWORD},
            {"email": TEST_EMAIL},
        ],
    )
    async def test_register_rejects_invalid_body(self, test_client, payload):
        response = await test_client.post("/api/auth/register", json=payload)

        assert response.status_code == 422

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "email", ["a@@x.com", "a b@x.com", "a@x..com", "a@x.com@y.org", "@x.com", "a@"]
    )
    async def test_register_rejects_malformed_email(self, test_client, store, email):
        response = await test_client.post(
            "/api/auth/register", json={"email": email, "password": TEST_PASSWORD}
        )

        assert response.status_code == 422
        assert await store.count(keys.USER_ENTITY) == 0

    @pytest.mark.asyncio
    async def test_register_keeps_email_spelling(self, test_client):
        response = await test_client.post(
            "/api/auth/register", json={"email": "Ann.Lee@X.com", "password": TEST_PASSWORD}
        )
        lowered = await test_client.get(
            "/api/auth/profile", headers={"X-User-Email": "ann.lee@x.com"}
        )

        assert response.status_code == 201
        assert response.json()["user"]["email"] == "Ann.Lee@X.com"
        assert lowered.status_code == 404

    @pytest.mark.asyncio
    async def test_padded_email_logs_in_as_registered(self, test_client):
        """Register and login strip the same surrounding whitespace."""
        padded = {"email": f"  {TEST_EMAIL} ", "password": TEST_PASSWORD}

        created = await test_client.post("/api/auth/register", json=padded)
        login = await test_client.post("/api/auth/login", json=padded)

        assert created.status_code == 201
        assert created.json()["user"]["email"] == TEST_EMAIL
        assert login.status_code == 200
        assert login.json()["user"]["id"] == created.json()["user"]["id"]

    @pytest.mark.asyncio
    async def test_login_with_blank_email(self, test_client):
        response = await test_client.post(
            "/api/auth/login", json={"email": "   ", "password": TEST_PASSWORD}
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_login(self, test_client, registered):
        ok = await test_client.post(
            "/api/auth/login", json={"email": TEST_EMAIL, "password": TEST_PASSWORD}
        )
        wrong = await test_client.post(
            "/api/auth/login", json={"email": TEST_EMAIL, "password": "wrong-pw"}
        )
        unknown = await test_client.post(
            "/api/auth/login", json={"email": "ghost@x.com", "password": TEST_PASSWORD}
        )

        assert ok.status_code == 200
        assert ok.json()["user"]["id"] == registered.id
        assert wrong.status_code == unknown.status_code == 401
        assert wrong.json()["message"] == unknown.json()["message"]

    @pytest.mark.asyncio
    async def test_profile(self, test_client, registered, auth_headers):
        response = await test_client.get("/api/auth/profile", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert set(body) == {"id", "email", "createdAt"}
        assert (body["id"], body["email"]) == (registered.id, TEST_EMAIL)

    @pytest.mark.asyncio
    async def test_profile_without_identity_header(self, test_client):
        response = await test_client.get("/api/auth/profile")

        assert response.status_code == 401
        assert response.json()["error"] == "authentication_required"

    @pytest.mark.asyncio
    async def test_profile_unknown_identity(self, test_client):
        response = await test_client.get(
            "/api/auth/profile", headers={"X-User-Email": "ghost@x.com"}
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_password_change(self, test_client, auth_headers):
        response = await test_client.put(
            "/api/auth/password", json={"newPassword": "brandnew"}, headers=auth_headers
        )
        login = await test_client.post(
            "/api/auth/login", json={"email": TEST_EMAIL, "password": "brandnew"}
        )

        assert response.status_code == 200
        assert response.json() == {"message": "Password updated successfully"}
        assert login.status_code == 200

    @pytest.mark.asyncio
    async def test_password_change_too_short(self, test_client, auth_headers):
        response = await test_client.put(
            "/api/auth/password", json={"newPassword": "123"}, headers=auth_headers
        )

        assert response.status_code == 422


class TestNoteRoutes:

    @pytest.mark.asyncio
    async def test_create_applies_defaults(self, test_client, registered, auth_headers):
        note = await _create_note(test_client, auth_headers)

        assert note["category"] == "General"
        assert note["priority"] == "Medium"
        assert note["ownerId"] == registered.id
        assert note["createdAt"] == note["updatedAt"]

    @pytest.mark.asyncio
    async def test_create_requires_title_and_content(self, test_client, auth_headers):
        response = await test_client.post(
            "/api/notes", json={"title": "", "content": "C"}, headers=auth_headers
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_create_rejects_unknown_priority(self, test_client, auth_headers):
        response = await test_client.post(
            "/api/notes",
            json={"title": "T", "content": "C", "priority": "Urgent"},
            headers=auth_headers,
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_list_and_get(self, test_client, auth_headers):
        first = await _create_note(test_client, auth_headers, title="first")
        second = await _create_note(test_client, auth_headers, title="second")

        listing = await test_client.get("/api/notes", headers=auth_headers)
        single = await test_client.get(f"/api/notes/{second['id']}", headers=auth_headers)

        assert listing.status_code == 200
        assert {n["id"] for n in listing.json()} == {first["id"], second["id"]}
        assert listing.headers["X-Total-Count"] == "2"
        assert listing.headers["Cache-Control"] == "no-store"
        assert single.json() == second

    @pytest.mark.asyncio
    async def test_get_missing_note(self, test_client, auth_headers):
        response = await test_client.get("/api/notes/missing", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_update_merges_fields(self, test_client, auth_headers):
        note = await _create_note(test_client, auth_headers, category="Work")

        response = await test_client.put(
            f"/api/notes/{note['id']}",
            json={"title": "New", "content": None},
            headers=auth_headers,
        )

        assert response.status_code == 200
        updated = response.json()["note"]
        assert updated["title"] == "New"
        assert updated["content"] == "C"
        assert updated["category"] == "Work"
        assert updated["updatedAt"] != note["updatedAt"]

    @pytest.mark.asyncio
    async def test_update_with_blank_title(self, test_client, auth_headers):
        note = await _create_note(test_client, auth_headers)

        response = await test_client.put(
            f"/api/notes/{note['id']}", json={"title": "  "}, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["details"] == {"field": "title"}

    @pytest.mark.asyncio
    async def test_delete(self, test_client, auth_headers):
        note = await _create_note(test_client, auth_headers)

        first = await test_client.delete(f"/api/notes/{note['id']}", headers=auth_headers)
        second = await test_client.delete(f"/api/notes/{note['id']}", headers=auth_headers)

        assert first.status_code == 200
        assert first.json() == {"message": "Note deleted successfully"}
        assert second.status_code == 404

    @pytest.mark.asyncio
    async def test_other_users_note_is_invisible(self, test_client, auth_headers):
        note = await _create_note(test_client, auth_headers)
        await test_client.post(
            "/api/auth/register", json={"email": "b@x.com", "password": "secret2"}
        )
        intruder = {"X-User-Email": "b@x.com"}

        read = await test_client.get(f"/api/notes/{note['id']}", headers=intruder)
        edit = await test_client.put(
            f"/api/notes/{note['id']}", json={"title": "x"}, headers=intruder
        )
        remove = await test_client.delete(f"/api/notes/{note['id']}", headers=intruder)

        assert read.status_code == edit.status_code == remove.status_code == 404
        assert (await test_client.get("/api/notes", headers=intruder)).json() == []

    @pytest.mark.asyncio
    async def test_notes_require_identity(self, test_client):
        assert (await test_client.get("/api/notes")).status_code == 401
        response = await test_client.post("/api/notes", json={"title": "T", "content": "C"})
        assert response.status_code == 401


class TestStatsAndHealth:

    @pytest.mark.asyncio
    async def test_stats(self, test_client, auth_headers):
        await _create_note(test_client, auth_headers, category="Work", priority="High")
        await _create_note(test_client, auth_headers, category="Work", priority="Low")

        response = await test_client.get("/api/stats", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {
            "totalNotes": 2,
            "highPriority": 1,
            "categories": 1,
            "byCategory": {"Work": 2},
            "byPriority": {"High": 1, "Medium": 0, "Low": 1},
        }

    @pytest.mark.asyncio
    async def test_health_reports_counts(self, test_client, auth_headers):
        await _create_note(test_client, auth_headers)

        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert (body["users"], body["notes"]) == (1, 1)

    @pytest.mark.asyncio
    async def test_health_when_store_is_down(self, test_client):
        class DownStore:
            async def ping(self):
                raise StoreUnavailableError()

        app.dependency_overrides[get_store] = lambda: DownStore()

        response = await test_client.get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"
        assert response.json()["database"] == "disconnected"

    @pytest.mark.asyncio
    async def test_store_outage_on_api_call_is_503(self, test_client):
        class DownStore:
            async def get(self, pk, sk):
                raise StoreUnavailableError(retry_after=7)

        app.dependency_overrides[get_store] = lambda: DownStore()

        response = await test_client.get(
            "/api/auth/profile", headers={"X-User-Email": TEST_EMAIL}
        )

        assert response.status_code == 503
        assert response.headers["Retry-After"] == "7"

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, test_client):
        response = await test_client.get("/health", headers={"X-Request-ID": "abc123"})
        generated = await test_client.get("/health")

        assert response.headers["X-Request-ID"] == "abc123"
        assert len(generated.headers["X-Request-ID"]) == 8

    @pytest.mark.asyncio
    async def test_error_body_carries_request_id(self, test_client):
        response = await test_client.get(
            "/api/auth/profile", headers={"X-Request-ID": "trace-1"}
        )

        assert response.json()["request_id"] == "trace-1"

    @pytest.mark.asyncio
    async def test_oversized_request_id_is_truncated(self, test_client):
        response = await test_client.get("/health", headers={"X-Request-ID": "r" * 500})

        assert response.headers["X-Request-ID"] == "r" * 64
