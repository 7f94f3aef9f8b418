"""Unit tests for security/jwt.py"""

import uuid
from datetime import timedelta

from jose import jwt

from notehub.security import jwt as jwt_module
from notehub.security.jwt import create_access_token, decode_access_token, get_viewer_from_token


class DummySettings:
    secret_key = "test-secret"
    algorithm = "HS256"
    access_token_expire_minutes = 30


def test_create_and_decode_access_token(monkeypatch):
    monkeypatch.setattr(jwt_module, "get_settings", lambda: DummySettings())

    sub = str(uuid.uuid4())
    token = create_access_token({"sub": sub, "username": "alice"}, expires_delta=timedelta(minutes=5))
    assert isinstance(token, str)

    payload = decode_access_token(token)
    assert payload["sub"] == sub
    assert payload["type"] == "access"
    assert payload["jti"]


def test_uuid_subject_is_serialized(monkeypatch):
    monkeypatch.setattr(jwt_module, "get_settings", lambda: DummySettings())
    user = uuid.uuid4()

    viewer = get_viewer_from_token(create_access_token({"sub": user}))

    assert viewer.id == user
    assert viewer.username == ""


def test_decode_rejects_bad_signature(monkeypatch):
    monkeypatch.setattr(jwt_module, "get_settings", lambda: DummySettings())
    token = jwt.encode({"sub": str(uuid.uuid4()), "type": "access"}, "other-secret", algorithm="HS256")
    assert decode_access_token(token) is None


def test_decode_rejects_expired(monkeypatch):
    monkeypatch.setattr(jwt_module, "get_settings", lambda: DummySettings())
    token = create_access_token({"sub": str(uuid.uuid4())}, expires_delta=timedelta(seconds=-10))
    assert decode_access_token(token) is None


def test_decode_rejects_non_access_tokens(monkeypatch):
    monkeypatch.setattr(jwt_module, "get_settings", lambda: DummySettings())
    token = jwt.encode({"sub": str(uuid.uuid4()), "type": "refresh"}, "test-secret", algorithm="HS256")
    assert decode_access_token(token) is None


def test_viewer_from_token(monkeypatch):
    monkeypatch.setattr(jwt_module, "get_settings", lambda: DummySettings())
    user = uuid.uuid4()

    viewer = get_viewer_from_token(create_access_token({"sub": str(user), "username": "bob"}))

    assert viewer.id == user
    assert viewer.username == "bob"


def test_viewer_from_token_rejects_bad_subject(monkeypatch):
    monkeypatch.setattr(jwt_module, "get_settings", lambda: DummySettings())
    assert get_viewer_from_token(create_access_token({"sub": "nope"})) is None
    assert get_viewer_from_token(create_access_token({"username": "nobody"})) is None
    assert get_viewer_from_token("garbage") is None
