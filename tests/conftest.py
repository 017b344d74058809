"""Shared fixtures for the session core."""

import pytest
from fakes import FakeClient, MemoryStorage

from chat_bridge.history import SessionID


@pytest.fixture
def session_id() -> SessionID:
    return SessionID(user=1, chat=2, model="gpt-4")


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def client() -> FakeClient:
    return FakeClient()
