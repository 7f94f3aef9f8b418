"""Integration tests for the note sharing workflow over HTTP."""

import uuid

from httpx import ASGITransport, AsyncClient

from notehub.core.schemas.notifications import NotificationKind


class TestNoteSharingWorkflow:
    """Create, share, update, copy and delete through the API."""

    async def test_create_with_shares(self, async_client, auth_headers, sink, alice, bob, carol):
        resp = await async_client.post(
            "/api/notes/",
            json={"title": "Plan", "sharedWith": [str(bob.id), str(carol.id)]},
            headers=auth_headers(alice),
        )

        assert resp.status_code == 201
        body = resp.json()
        assert body["created_by"] == str(alice.id)
        assert body["created_username"] == "alice"
        assert set(body["shared_with"]) == {str(bob.id), str(carol.id)}
        assert body["is_public"] is False
        assert body["can_edit"] is True

        assert sink.kinds() == [NotificationKind.NOTE_SHARED_SELF, NotificationKind.NOTE_SHARED_WITH_USER]

        as_bob = await async_client.get(f"/api/notes/{body['id']}", headers=auth_headers(bob))
        assert as_bob.status_code == 200
        assert as_bob.json()["can_edit"] is False

        shared = await async_client.get("/api/notes/shared-with-me", headers=auth_headers(carol))
        assert [n["id"] for n in shared.json()["items"]] == [body["id"]]

    async def test_forbidden_edit(self, async_client, auth_headers, alice, bob):
        created = await async_client.post(
            "/api/notes/", json={"title": "Plan", "sharedWith": [str(bob.id)]}, headers=auth_headers(alice)
        )
        note_id = created.json()["id"]

        resp = await async_client.put(
            f"/api/notes/{note_id}", json={"title": "Mine now"}, headers=auth_headers(bob)
        )

        assert resp.status_code == 403
        assert resp.json()["error"] == "Forbidden"
        assert resp.json()["message"] == "Forbidden: not your note"

        unchanged = await async_client.get(f"/api/notes/{note_id}", headers=auth_headers(alice))
        assert unchanged.json()["title"] == "Plan"

    async def test_update_body_cannot_change_owner(self, async_client, auth_headers, alice, bob):
        created = await async_client.post("/api/notes/", json={"title": "Plan"}, headers=auth_headers(alice))
        note_id = created.json()["id"]

        resp = await async_client.put(
            f"/api/notes/{note_id}",
            json={"title": "Q", "createdBy": str(bob.id), "created_by": str(bob.id)},
            headers=auth_headers(alice),
        )

        assert resp.status_code == 200
        assert resp.json()["title"] == "Q"
        assert resp.json()["created_by"] == str(alice.id)

        as_bob = await async_client.put(
            f"/api/notes/{note_id}", json={"title": "Bob's"}, headers=auth_headers(bob)
        )
        assert as_bob.status_code == 403

    async def test_copy_then_delete_original(self, async_client, auth_headers, sink, alice, bob):
        created = await async_client.post(
            "/api/notes/",
            json={"title": "Recipe", "isPublic": True, "tags": ["food"]},
            headers=auth_headers(alice),
        )
        original_id = created.json()["id"]

        copied = await async_client.post(f"/api/notes/{original_id}/copy", headers=auth_headers(bob))
        assert copied.status_code == 201
        copy = copied.json()
        assert copy["shared_original_id"] == original_id
        assert copy["created_by"] == str(bob.id)
        assert copy["is_copy"] is True
        assert sink.for_kind(NotificationKind.NOTE_COPIED)[0].recipients == [alice.id]

        deleted = await async_client.delete(f"/api/notes/{original_id}", headers=auth_headers(alice))
        assert deleted.status_code == 200
        assert deleted.json() == {"success": True, "message": "Note deleted"}

        gone = await async_client.get(f"/api/notes/{original_id}", headers=auth_headers(alice))
        assert gone.status_code == 404
        assert gone.json()["error"] == "NotFound"

        kept = await async_client.get(f"/api/notes/{copy['id']}", headers=auth_headers(bob))
        assert kept.status_code == 200
        edited = await async_client.put(
            f"/api/notes/{copy['id']}", json={"title": "My recipe"}, headers=auth_headers(bob)
        )
        assert edited.status_code == 200
        assert edited.json()["title"] == "My recipe"

        copies = await async_client.get("/api/notes/copied", headers=auth_headers(bob))
        assert [n["id"] for n in copies.json()["items"]] == [copy["id"]]

    async def test_reshare_is_noop_for_existing_recipients(self, async_client, auth_headers, sink, alice, bob, carol):
        created = await async_client.post(
            "/api/notes/", json={"title": "Plan", "sharedWith": [str(bob.id)]}, headers=auth_headers(alice)
        )
        note_id = created.json()["id"]
        sink.delivered.clear()

        resp = await async_client.post(
            f"/api/notes/{note_id}/share",
            json={"targetUserIds": [str(bob.id), str(carol.id)]},
            headers=auth_headers(alice),
        )

        assert resp.status_code == 200
        body = resp.json()
        assert body["message"] == "Note shared successfully"
        assert set(body["note"]["shared_with"]) == {str(bob.id), str(carol.id)}
        assert body["added"] == [str(carol.id)]
        assert [n.recipients for n in sink.delivered] == [[carol.id]]

    async def test_share_with_nobody_is_invalid(self, async_client, auth_headers, alice):
        created = await async_client.post("/api/notes/", json={"title": "Plan"}, headers=auth_headers(alice))

        resp = await async_client.post(
            f"/api/notes/{created.json()['id']}/share", json={"targetUserIds": []}, headers=auth_headers(alice)
        )

        assert resp.status_code == 400
        assert resp.json()["error"] == "InvalidRequest"
        assert resp.json()["message"] == "No users selected"

    async def test_validation_errors_use_error_envelope(self, async_client, auth_headers, alice):
        resp = await async_client.post("/api/notes/", json={"title": "   "}, headers=auth_headers(alice))

        assert resp.status_code == 400
        body = resp.json()
        assert body["error"] == "InvalidRequest"
        assert "Title required" in body["message"]
        assert body["details"]["errors"]

    async def test_unknown_note_and_bad_id(self, async_client, auth_headers, alice):
        missing = await async_client.get(f"/api/notes/{uuid.uuid4()}", headers=auth_headers(alice))
        assert missing.status_code == 404

        bad = await async_client.get("/api/notes/not-a-uuid", headers=auth_headers(alice))
        assert bad.status_code == 400

    async def test_listing_endpoints(self, async_client, auth_headers, alice, bob):
        project = str(uuid.uuid4())
        await async_client.post(
            "/api/notes/", json={"title": "mine", "projectId": project}, headers=auth_headers(alice)
        )
        await async_client.post(
            "/api/notes/", json={"title": "public", "isPublic": True}, headers=auth_headers(bob)
        )
        await async_client.post("/api/notes/", json={"title": "private"}, headers=auth_headers(bob))

        async def titles(path):
            resp = await async_client.get(path, headers=auth_headers(alice))
            assert resp.status_code == 200
            return {n["title"] for n in resp.json()["items"]}

        assert await titles("/api/notes/") == {"mine", "public"}
        assert await titles("/api/notes/all") == {"mine", "public"}
        assert await titles("/api/notes/mine") == {"mine"}
        assert await titles("/api/notes/public") == {"public"}
        assert await titles(f"/api/notes/project/{project}") == {"mine"}

    async def test_pagination_metadata(self, async_client, auth_headers, alice):
        for i in range(3):
            await async_client.post("/api/notes/", json={"title": f"n{i}"}, headers=auth_headers(alice))

        resp = await async_client.get("/api/notes/mine?page=2&per_page=2", headers=auth_headers(alice))

        body = resp.json()
        assert body["total"] == 3
        assert body["pages"] == 2
        assert body["has_prev"] is True
        assert body["has_next"] is False
        assert len(body["items"]) == 1

    async def test_notification_outage_does_not_fail_requests(self, async_client, auth_headers, sink, alice, bob):
        sink.fail_kinds = set(NotificationKind)

        created = await async_client.post(
            "/api/notes/", json={"title": "Plan", "sharedWith": [str(bob.id)]}, headers=auth_headers(alice)
        )
        assert created.status_code == 201

        deleted = await async_client.delete(f"/api/notes/{created.json()['id']}", headers=auth_headers(alice))
        assert deleted.status_code == 200
        assert sink.delivered == []


async def test_unexpected_errors_render_internal_error(test_app, auth_headers, alice, monkeypatch):
    from notehub.core.services.note_service import NoteService

    async def boom(self, viewer, page=1, per_page=20):
        raise RuntimeError("kaboom")

    monkeypatch.setattr(NoteService, "list_my_notes", boom)

    transport = ASGITransport(app=test_app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.get("/api/notes/mine", headers=auth_headers(alice))

    assert resp.status_code == 500
    assert resp.json()["error"] == "InternalError"
    assert "kaboom" not in resp.text


async def test_database_health_endpoint(async_client):
    resp = await async_client.get("/api/health/database")
    assert resp.status_code == 200
    assert resp.json()["connected"] is True
