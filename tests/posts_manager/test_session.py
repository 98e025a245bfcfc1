"""Tests for the session store (login, logout, remembered sessions)."""

import pytest
import requests

from src.posts_manager.errors import AuthError
from src.posts_manager.models import NotificationKind
from src.posts_manager.session import EMAIL_KEY, TOKEN_KEY, SessionState, SessionStore
from src.posts_manager.storage import MemoryStore
from tests.fakes import POSTS, FakeResponse


def _accept_login(fake_session, token="tok-123"):
    fake_session.add("POST", "/admin/login", FakeResponse(200, {"data": {"token": token}}))


def _reject_login(fake_session):
    fake_session.add(
        "POST", "/admin/login",
        FakeResponse(400, {"error": {"message": "Invalid credentials"}}),
    )


class TestLogin:
    def test_success_authenticates(self, session_store, fake_session, notifier):
        _accept_login(fake_session)
        session_store.login("admin@example.com", "secret")

        assert session_store.is_authenticated is True
        assert session_store.auth_token == "tok-123"
        assert session_store.email == "admin@example.com"
        assert notifier.last.message == "Successfully logged in as admin!"

    def test_remember_me_persists(self, session_store, fake_session, storage):
        _accept_login(fake_session)
        session_store.login("admin@example.com", "secret", remember_me=True)

        assert storage.get(TOKEN_KEY) == "tok-123"
        assert storage.get(EMAIL_KEY) == "admin@example.com"

    def test_without_remember_me_nothing_persisted(self, session_store, fake_session, storage):
        _accept_login(fake_session)
        session_store.login("admin@example.com", "secret", remember_me=False)

        assert storage.get(TOKEN_KEY) is None
        assert storage.get(EMAIL_KEY) is None

    def test_rejected_credentials(self, session_store, fake_session, storage, notifier):
        _reject_login(fake_session)
        with pytest.raises(AuthError, match="Invalid credentials"):
            session_store.login("admin@example.com", "wrong", remember_me=True)

        assert session_store.is_authenticated is False
        assert session_store.auth_token == ""
        assert storage.get(TOKEN_KEY) is None
        assert notifier.last.kind == NotificationKind.ERROR

    def test_network_failure_is_auth_error(self, session_store, fake_session):
        fake_session.add("POST", "/admin/login", requests.ConnectionError("refused"))
        with pytest.raises(AuthError):
            session_store.login("admin@example.com", "secret")
        assert session_store.is_authenticated is False


class TestLogout:
    def test_clears_memory_and_storage(self, session_store, fake_session, storage, notifier):
        _accept_login(fake_session)
        session_store.login("admin@example.com", "secret", remember_me=True)

        session_store.logout()

        assert session_store.is_authenticated is False
        assert session_store.auth_token == ""
        assert session_store.email == ""
        assert storage.get(TOKEN_KEY) is None
        assert storage.get(EMAIL_KEY) is None
        assert notifier.last.message == "Successfully signed out!"

    def test_logout_when_logged_out(self, session_store):
        session_store.logout()
        assert session_store.state == SessionState.UNAUTHENTICATED

    def test_reload_after_logout_skips_validation(self, client, fake_session, storage, notifier):
        _accept_login(fake_session)
        first = SessionStore(client, storage, notifier)
        first.login("admin@example.com", "secret", remember_me=True)
        first.logout()
        calls_before = len(fake_session.calls)

        restarted = SessionStore(client, storage, notifier)
        assert restarted.is_initializing is True
        restarted.initialize()

        assert restarted.is_initializing is False
        assert restarted.is_authenticated is False
        assert len(fake_session.calls) == calls_before


class TestInitialize:
    def test_no_saved_session(self, session_store, fake_session):
        assert session_store.state == SessionState.UNINITIALIZED
        assert session_store.initialize() == SessionState.UNAUTHENTICATED
        assert session_store.is_initializing is False
        assert fake_session.calls == []

    def test_saved_token_valid(self, client, fake_session, notifier):
        storage = MemoryStore({TOKEN_KEY: "saved", EMAIL_KEY: "admin@example.com"})
        fake_session.add("GET", POSTS, FakeResponse(200, {"results": []}))
        store = SessionStore(client, storage, notifier)

        assert store.initialize() == SessionState.AUTHENTICATED
        assert store.auth_token == "saved"
        assert store.email == "admin@example.com"
        assert store.is_initializing is False
        assert fake_session.calls[0].headers["Authorization"] == "Bearer saved"
        assert notifier.last.message == "Welcome back, admin@example.com!"

    def test_saved_token_expired(self, client, fake_session, notifier):
        storage = MemoryStore({TOKEN_KEY: "stale", EMAIL_KEY: "admin@example.com"})
        fake_session.add("GET", POSTS, FakeResponse(401, {}))
        store = SessionStore(client, storage, notifier)

        assert store.initialize() == SessionState.UNAUTHENTICATED
        assert store.auth_token == ""
        assert store.email == ""
        assert TOKEN_KEY not in storage
        assert EMAIL_KEY not in storage
        assert store.is_initializing is False
        assert notifier.last.message == "Session expired. Please login again."

    def test_backend_unreachable_purges(self, client, fake_session):
        storage = MemoryStore({TOKEN_KEY: "saved", EMAIL_KEY: "admin@example.com"})
        fake_session.add("GET", POSTS, requests.ConnectionError("down"))
        store = SessionStore(client, storage)

        assert store.initialize() == SessionState.UNAUTHENTICATED
        assert TOKEN_KEY not in storage

    def test_token_without_email_is_ignored(self, client, fake_session):
        storage = MemoryStore({TOKEN_KEY: "saved"})
        store = SessionStore(client, storage)

        assert store.initialize() == SessionState.UNAUTHENTICATED
        assert fake_session.calls == []

    def test_runs_once(self, client, fake_session):
        storage = MemoryStore({TOKEN_KEY: "saved", EMAIL_KEY: "admin@example.com"})
        fake_session.add("GET", POSTS, FakeResponse(200, {"results": []}))
        store = SessionStore(client, storage)

        store.initialize()
        store.initialize()
        assert len(fake_session.calls) == 1
