"""Shared test fixtures for the posts manager."""

import sys
from pathlib import Path

import pytest

# Ensure src is importable
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.posts_manager.client import CMSClient
from src.posts_manager.notifications import Notifier
from src.posts_manager.session import SessionStore
from src.posts_manager.storage import MemoryStore
from tests.fakes import BASE_URL, FakeResponse, FakeSession


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def client(fake_session) -> CMSClient:
    return CMSClient(base_url=BASE_URL, api_token="static-token", session=fake_session)


@pytest.fixture
def notifier() -> Notifier:
    return Notifier()


@pytest.fixture
def storage() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def session_store(client, storage, notifier) -> SessionStore:
    return SessionStore(client, storage, notifier)


@pytest.fixture
def logged_in(session_store, fake_session) -> SessionStore:
    """A session already authenticated with token 'tok-123'."""
    fake_session.add(
        "POST", "/admin/login", FakeResponse(200, {"data": {"token": "tok-123"}})
    )
    session_store.login("admin@example.com", "secret")
    return session_store
