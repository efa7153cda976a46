"""
Pytest configuration and shared fixtures.
"""

from unittest.mock import MagicMock

import pytest

from event_calendar.auth.base import AuthUser
from event_calendar.auth.local_auth import LocalIdentityProvider
from event_calendar.auth.session import SessionBootstrapper
from event_calendar.config import AppConfig, FirebaseConfig
from event_calendar.events.adapter import EventStoreAdapter
from event_calendar.store.base import DocumentStore
from event_calendar.store.memory_store import InMemoryDocumentStore
from event_calendar.utils.exceptions import AuthenticationError


class FailingIdentityProvider(LocalIdentityProvider):
    """Identity provider whose sign-in calls always fail."""

    def sign_in_anonymously(self) -> AuthUser:
        raise AuthenticationError("ADMIN_ONLY_OPERATION")


@pytest.fixture
def app_config():
    """Config with no Firebase settings and no pre-issued token."""
    return AppConfig.model_construct(app_namespace="test-app")


@pytest.fixture
def firebase_config():
    return FirebaseConfig(apiKey="test-api-key", projectId="test-project")


@pytest.fixture
def provider():
    return LocalIdentityProvider()


@pytest.fixture
def memory_store():
    return InMemoryDocumentStore()


@pytest.fixture
def spy_store(memory_store):
    """In-memory store whose calls are recorded."""
    return MagicMock(spec=DocumentStore, wraps=memory_store)


@pytest.fixture
def ready_session(provider):
    """Session signed in anonymously with the local provider."""
    bootstrapper = SessionBootstrapper(provider)
    session = bootstrapper.establish()
    yield session
    session.close()


@pytest.fixture
def adapter(spy_store, ready_session):
    return EventStoreAdapter(spy_store, ready_session, "test-app")


@pytest.fixture
def sample_documents():
    """Store documents as delivered in a snapshot."""
    return [
        {"id": "evt-1", "title": "Dentist", "date": "2024-03-05", "createdAt": "2024-02-01T10:00:00.000Z"},
        {"id": "evt-2", "title": "Team lunch", "date": "2024-03-06", "createdAt": "2024-02-02T10:00:00.000Z"},
    ]
