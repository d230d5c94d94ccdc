"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta, timezone

import pytest
from rest_framework.test import APIClient

from events.services.event_service import EventService
from events.services.swap_service import SwapService
from events.stores.memory_store import InMemoryStore

NOW = datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(NOW)


@pytest.fixture
def at():
    """Return the instant `hours` after the fixed test clock's start."""

    def _at(hours: float) -> datetime:
        return NOW + timedelta(hours=hours)

    return _at


@pytest.fixture
def store(clock) -> InMemoryStore:
    return InMemoryStore(clock)


@pytest.fixture
def alice(store):
    return store.add_user("alice")


@pytest.fixture
def bob(store):
    return store.add_user("bob")


@pytest.fixture
def event_service(store, clock) -> EventService:
    return EventService(store, store, clock)


@pytest.fixture
def swap_service(store, clock) -> SwapService:
    return SwapService(store, store, clock)


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture
def make_user(db):
    from accounts.models import User

    def _make(name: str, password: str = "correct-horse-battery"):
        return User.objects.create_user(
            email=f"{name}@example.com", user_name=name, password=password
        )

    return _make


@pytest.fixture
def client_for():
    """Return an APIClient authenticated as the given user with a bearer token."""
    from accounts.authentication import token_service

    def _client(user) -> APIClient:
        client = APIClient()
        token = token_service().issue_access_token(user)
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        return client

    return _client
