from __future__ import annotations

import hashlib
from dataclasses import replace

import pytest

from bookreview.core.config import get_settings
from bookreview.core.security import hash_password, is_legacy_hash, verify_password
from bookreview.domain.entities import User
from bookreview.services.auth_service import (
    AccountExistsError,
    AuthService,
    InvalidCredentialsError,
    RegistrationError,
)
from bookreview.services.session_service import SessionService


@pytest.fixture()
def sessions():
    return SessionService(replace(get_settings(), session_ttl_seconds=600))


@pytest.fixture()
def auth(memory_store, sessions):
    return AuthService(store=memory_store, sessions=sessions)


def test_register_hashes_password_and_issues_session(auth, memory_store):
    result = auth.register("alice", "secret1", "alice@example.com", "Alice A.")

    stored = memory_store.get(User, result.user.id)
    assert stored.username == "alice"
    assert stored.full_name == "Alice A."
    assert stored.password != "secret1"
    assert verify_password("secret1", stored.password)
    assert auth.current_user(result.session_token) == stored


def test_register_rejects_taken_username(auth):
    auth.register("alice", "secret1", "alice@example.com")
    with pytest.raises(AccountExistsError):
        auth.register("alice", "another1", "other@example.com")


def test_register_requires_username(auth):
    with pytest.raises(RegistrationError):
        auth.register("   ", "secret1", "x@example.com")


def test_login_checks_credentials(auth):
    auth.register("alice", "secret1", "alice@example.com")
    assert auth.login("alice", "secret1").user.username == "alice"
    with pytest.raises(InvalidCredentialsError):
        auth.login("alice", "wrong-password")
    with pytest.raises(InvalidCredentialsError):
        auth.login("nobody", "secret1")


def test_login_upgrades_legacy_scrypt_hash(auth, memory_store):
    salt = "a1b2c3d4"
    digest = hashlib.scrypt(b"secret1", salt=salt.encode(), n=2**14, r=8, p=1, dklen=64).hex()
    memory_store.insert(User, {"username": "legacy", "password": f"{digest}.{salt}"})

    result = auth.login("legacy", "secret1")

    stored = memory_store.get(User, result.user.id)
    assert not is_legacy_hash(stored.password)
    assert verify_password("secret1", stored.password)


def test_verify_password_rejects_garbage():
    assert verify_password("x", None) is False
    assert verify_password("x", "no-separator") is False
    assert verify_password("x", "argon2$not-a-hash") is False
    assert verify_password("x", hash_password("x")) is True


def test_logout_revokes_session(auth):
    token = auth.register("alice", "secret1", "alice@example.com").session_token
    auth.logout(token)
    assert auth.current_user(token) is None


def test_session_of_deleted_user_is_anonymous(auth, memory_store):
    result = auth.register("alice", "secret1", "alice@example.com")
    memory_store.delete(User, result.user.id)
    assert auth.current_user(result.session_token) is None


def test_session_expires_after_ttl(sessions, monkeypatch):
    token = sessions.issue(1)
    now = sessions._now()
    assert sessions.user_id_for(token) == 1

    monkeypatch.setattr(sessions, "_now", lambda: now + 601)
    assert sessions.user_id_for(token) is None
    assert sessions.user_id_for(None) is None
