"""Integration smoke tests for REST API (using in-memory fakes via dependency override)."""
from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import jwt
import pytest
from fastapi.testclient import TestClient

from dm_service.api.deps import get_attachment_storage, get_notifications, get_uow
from dm_service.app import create_app
from dm_service.config import settings
from tests.conftest import FakeNotifier, FakeStorage, FakeUoW, make_chat, make_message


def _make_token(sub: int = 42, roles: list | None = None) -> str:
    return jwt.encode(
        {"sub": str(sub), "roles": roles or []},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )


def _auth(sub: int = 42) -> dict[str, str]:
    return {"Authorization": f"Bearer {_make_token(sub)}"}


@pytest.fixture
def env():
    app = create_app()
    uow = FakeUoW()
    uow.directory.add(42, "Alice")
    uow.directory.add(43, "Bob")
    notifier = FakeNotifier()
    storage = FakeStorage()

    async def _override():
        yield uow

    app.dependency_overrides[get_uow] = _override
    app.dependency_overrides[get_notifications] = lambda: notifier
    app.dependency_overrides[get_attachment_storage] = lambda: storage
    client = TestClient(app, raise_server_exceptions=False)
    return client, uow, notifier, storage


@pytest.fixture
def client(env):
    return env[0]


@pytest.fixture
def uow(env):
    return env[1]


def test_healthz(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_request_id_is_echoed(client):
    resp = client.get("/healthz", headers={"X-Request-ID": "req-123"})
    assert resp.headers["X-Request-ID"] == "req-123"
    assert resp.headers["Server-Timing"].startswith("app;dur=")


def test_missing_token_rejected(client):
    resp = client.get("/api/v1/chats")
    assert resp.status_code in (401, 403)


def test_bad_token_rejected(client):
    resp = client.get("/api/v1/chats", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


def test_create_chat(client):
    resp = client.post("/api/v1/chats", json={"user_id": 43}, headers=_auth())
    assert resp.status_code == 201
    data = resp.json()
    assert [p["display_name"] for p in data["participants"]] == ["Alice", "Bob"]

    again = client.post("/api/v1/chats", json={"user_id": 42}, headers=_auth(43))
    assert again.json()["id"] == data["id"]


def test_create_chat_with_self(client):
    resp = client.post("/api/v1/chats", json={"user_id": 42}, headers=_auth())
    assert resp.status_code == 400
    assert resp.json()["error"] == "invalid_request"


def test_create_chat_with_unknown_user(client):
    resp = client.post("/api/v1/chats", json={"user_id": 777}, headers=_auth())
    assert resp.status_code == 404
    assert resp.json()["error"] == "participants_invalid"


def test_list_chats_paged(client, uow):
    uow.chats.add(make_chat())

    resp = client.get("/api/v1/chats", params={"page_size": 500}, headers=_auth())
    assert resp.status_code == 200
    data = resp.json()
    assert len(data["items"]) == 1
    assert data["page_info"] == {
        "page": 1,
        "page_size": 100,
        "total_items": 1,
        "total_pages": 1,
    }


def test_get_chat_as_outsider(client, uow):
    chat = uow.chats.add(make_chat())

    resp = client.get(f"/api/v1/chats/{chat.id}", headers=_auth(99))
    assert resp.status_code == 404
    assert resp.json()["error"] == "not_found_or_forbidden"


def test_delete_chat(client, uow):
    chat = uow.chats.add(make_chat())

    resp = client.delete(f"/api/v1/chats/{chat.id}", headers=_auth())
    assert resp.status_code == 200
    assert client.get(f"/api/v1/chats/{chat.id}", headers=_auth()).status_code == 404


def test_send_and_list_messages(client, uow, env):
    notifier = env[2]
    chat = uow.chats.add(make_chat())

    resp = client.post(
        f"/api/v1/chats/{chat.id}/messages",
        json={"content": "hi"},
        headers=_auth(),
    )
    assert resp.status_code == 201
    assert resp.json()["sender"]["display_name"] == "Alice"
    assert resp.json()["temporary"] is False
    assert [n.recipient_id for n in notifier.queued] == [43]

    resp = client.get(f"/api/v1/chats/{chat.id}/messages", headers=_auth(43))
    assert resp.status_code == 200
    data = resp.json()
    assert [m["content"] for m in data["items"]] == ["hi"]
    assert data["page_info"]["page_size"] == 50


def test_send_empty_message(client, uow):
    chat = uow.chats.add(make_chat())

    resp = client.post(
        f"/api/v1/chats/{chat.id}/messages",
        json={"content": "   "},
        headers=_auth(),
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "invalid_content"


def test_send_temporary_too_long(client, uow):
    chat = uow.chats.add(make_chat())
    expires = datetime.now(timezone.utc) + timedelta(hours=25)

    resp = client.post(
        f"/api/v1/chats/{chat.id}/messages",
        json={"content": "bye", "temporary": True, "expires_at": expires.isoformat()},
        headers=_auth(),
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "invalid_expiry"


def test_send_temporary(client, uow):
    chat = uow.chats.add(make_chat())
    expires = datetime.now(timezone.utc) + timedelta(minutes=5)

    resp = client.post(
        f"/api/v1/chats/{chat.id}/messages",
        json={"content": "bye", "temporary": True, "expires_at": expires.isoformat()},
        headers=_auth(),
    )
    assert resp.status_code == 201
    assert resp.json()["temporary"] is True


def test_mark_read(client, uow):
    chat = uow.chats.add(make_chat())
    uow.messages.add(make_message(chat.id, sender_id=43))
    uow.messages.add(make_message(chat.id, sender_id=42))

    resp = client.patch(f"/api/v1/chats/{chat.id}/messages/read", headers=_auth())
    assert resp.status_code == 200
    assert resp.json()["updated"] == 1


def test_delete_message_by_recipient(client, uow):
    chat = uow.chats.add(make_chat())
    msg = uow.messages.add(make_message(chat.id, sender_id=42))

    resp = client.delete(f"/api/v1/chats/messages/{msg.id}", headers=_auth(43))
    assert resp.status_code == 404

    resp = client.delete(f"/api/v1/chats/messages/{msg.id}", headers=_auth(42))
    assert resp.status_code == 200


def test_attach_files(client, uow):
    chat = uow.chats.add(make_chat())
    msg = uow.messages.add(make_message(chat.id, sender_id=42))

    resp = client.post(
        f"/api/v1/chats/{chat.id}/messages/{msg.id}/attachments",
        files=[("files", ("photo.png", b"\x89PNG", "image/png"))],
        headers=_auth(),
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data[0]["original_name"] == "photo.png"
    assert data[0]["url"].startswith("/uploads/chat/")


def test_attach_without_files(client, uow):
    chat = uow.chats.add(make_chat())
    msg = uow.messages.add(make_message(chat.id, sender_id=42))

    resp = client.post(
        f"/api/v1/chats/{chat.id}/messages/{msg.id}/attachments",
        headers=_auth(),
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "invalid_request"


def test_store_unavailable_maps_to_503(client, uow):
    chat = uow.chats.add(make_chat())

    async def _down(*args, **kwargs):
        from dm_service.application.exceptions import StoreUnavailableError

        raise StoreUnavailableError("Storage temporarily unavailable")

    uow.messages.list_visible = _down

    resp = client.get(f"/api/v1/chats/{chat.id}/messages", headers=_auth())
    assert resp.status_code == 503
    assert resp.json()["error"] == "store_unavailable"


def test_unexpected_error_exposes_detail_outside_production(client, uow):
    async def _boom(*args, **kwargs):
        raise RuntimeError("boom")

    uow.chats.get_active_for_participant = _boom

    resp = client.get(f"/api/v1/chats/{uuid.uuid4()}", headers=_auth())
    assert resp.status_code == 500
    assert resp.json() == {"error": "internal_error", "detail": "boom"}


def test_attach_too_many_files_rejected_before_reading(client, uow, env, monkeypatch):
    storage = env[3]
    monkeypatch.setattr(settings, "UPLOAD_MAX_FILES", 1)
    chat = uow.chats.add(make_chat())
    msg = uow.messages.add(make_message(chat.id, sender_id=42))

    resp = client.post(
        f"/api/v1/chats/{chat.id}/messages/{msg.id}/attachments",
        files=[
            ("files", ("a.png", b"\x89PNG", "image/png")),
            ("files", ("b.png", b"\x89PNG", "image/png")),
        ],
        headers=_auth(),
    )
    assert resp.status_code == 400
    assert resp.json() == {"error": "invalid_request", "detail": "At most 1 files per message"}
    assert storage.stored == []


def test_attach_oversized_file_rejected_before_reading(client, uow, env, monkeypatch):
    storage = env[3]
    monkeypatch.setattr(settings, "UPLOAD_MAX_BYTES", 8)
    chat = uow.chats.add(make_chat())
    msg = uow.messages.add(make_message(chat.id, sender_id=42))

    resp = client.post(
        f"/api/v1/chats/{chat.id}/messages/{msg.id}/attachments",
        files=[("files", ("big.png", b"x" * 16, "image/png"))],
        headers=_auth(),
    )
    assert resp.status_code == 400
    assert "big.png exceeds the 8 byte limit" in resp.json()["detail"]
    assert storage.stored == []
