import os

import pytest
from fastapi.testclient import TestClient

# Ensure we default to memory backend for tests to avoid filesystem dependencies
os.environ.setdefault("PERSISTENCE_BACKEND", "memory")

from src.api.main import app  # noqa: E402
from src.api.repositories import InMemoryRepository, get_repository  # noqa: E402
from src.api.schemas import EventCreate  # noqa: E402

OWNER = "owner@example.com"
OTHER_OWNER = "someone.else@example.com"


@pytest.fixture
def repo():
    return InMemoryRepository()


@pytest.fixture
def client(repo):
    # Every test talks to its own empty store
    app.dependency_overrides[get_repository] = lambda: repo
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def add_event(repo):
    """Create an event straight in the store; keyword args override defaults."""

    def _add(title="Meeting", date="2024-01-01", time="09:00", email=OWNER, **fields):
        return repo.create(EventCreate(title=title, date=date, time=time, email=email, **fields))

    return _add
