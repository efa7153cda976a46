"""Tests for the event store adapter."""

from unittest.mock import MagicMock

import pytest

from event_calendar.auth.session import Session, SessionBootstrapper
from event_calendar.events.adapter import (
    ADD_FAILED_MESSAGE,
    ADDED_MESSAGE,
    DELETE_FAILED_MESSAGE,
    MISSING_FIELDS_MESSAGE,
    NOT_READY_MESSAGE,
    EventStoreAdapter,
    WriteStatus,
)
from event_calendar.models.event import EventDraft
from event_calendar.store.base import DocumentStore
from event_calendar.utils.exceptions import NotReadyError, StoreReadError, StoreWriteError

from conftest import FailingIdentityProvider

DRAFT = EventDraft(title="Dentist", date="2024-03-05")


@pytest.fixture
def mock_store():
    """Store that accepts writes but never pushes."""
    store = MagicMock(spec=DocumentStore)
    store.create_document.return_value = "new-id"
    return store


class TestPreconditions:
    def test_unready_session(self, mock_store):
        adapter = EventStoreAdapter(mock_store, Session(), "test-app")

        assert adapter.add(DRAFT).status is WriteStatus.NOT_READY
        assert adapter.add(DRAFT).message == NOT_READY_MESSAGE
        assert adapter.delete("evt-1").status is WriteStatus.NOT_READY
        with pytest.raises(NotReadyError):
            adapter.subscribe()
        mock_store.create_document.assert_not_called()
        mock_store.delete_document.assert_not_called()
        mock_store.subscribe_collection.assert_not_called()

    def test_ready_session_without_identity(self, mock_store):
        session = SessionBootstrapper(FailingIdentityProvider()).establish()
        adapter = EventStoreAdapter(mock_store, session, "test-app")

        assert session.ready
        assert adapter.add(DRAFT).status is WriteStatus.NOT_READY
        with pytest.raises(NotReadyError):
            adapter.scope()

    def test_scope_path(self, adapter, ready_session):
        assert adapter.scope().collection_path == f"artifacts/test-app/users/{ready_session.user_id}/events"


class TestAdd:
    @pytest.mark.parametrize("draft", [EventDraft(title="", date="2024-03-05"), EventDraft(title="Dentist"), EventDraft()])
    def test_incomplete_draft_is_rejected_without_store_call(self, adapter, spy_store, draft):
        result = adapter.add(draft)

        assert result.status is WriteStatus.VALIDATION_ERROR
        assert result.message == MISSING_FIELDS_MESSAGE
        spy_store.create_document.assert_not_called()

    def test_complete_draft_issues_exactly_one_write(self, mock_store, ready_session):
        adapter = EventStoreAdapter(mock_store, ready_session, "test-app")
        mock_store.subscribe_collection.side_effect = lambda path, on_snapshot, on_error: on_snapshot([])
        subscription = adapter.subscribe()

        result = adapter.add(DRAFT)

        assert result.ok
        assert result.message == ADDED_MESSAGE
        assert result.event_id == "new-id"
        mock_store.create_document.assert_called_once()
        path, fields = mock_store.create_document.call_args.args
        assert path == adapter.scope().collection_path
        assert fields["title"] == "Dentist"
        assert fields["date"] == "2024-03-05"
        assert fields["createdAt"].endswith("Z")
        # Nothing is inserted locally; only a push would change the snapshot
        assert subscription.latest == ()
        assert subscription.version == 1

    def test_store_failure(self, mock_store, ready_session):
        mock_store.create_document.side_effect = StoreWriteError("PERMISSION_DENIED")
        result = EventStoreAdapter(mock_store, ready_session, "test-app").add(DRAFT)

        assert result.status is WriteStatus.WRITE_FAILED
        assert result.message == ADD_FAILED_MESSAGE
        assert "PERMISSION_DENIED" in result.error
        mock_store.create_document.assert_called_once()


class TestDelete:
    def test_deletes_existing_event(self, adapter, spy_store):
        event_id = adapter.add(DRAFT).event_id
        result = adapter.delete(event_id)

        assert result.ok
        spy_store.delete_document.assert_called_once_with(adapter.scope().collection_path, event_id)

    def test_nonexistent_id_still_calls_store(self, adapter, spy_store):
        result = adapter.delete("missing")

        spy_store.delete_document.assert_called_once_with(adapter.scope().collection_path, "missing")
        assert result.status is WriteStatus.DELETE_FAILED
        assert result.message == DELETE_FAILED_MESSAGE

    def test_empty_id_is_rejected(self, adapter, spy_store):
        assert adapter.delete("").status is WriteStatus.VALIDATION_ERROR
        spy_store.delete_document.assert_not_called()

    def test_delete_does_not_touch_local_snapshot(self, mock_store, ready_session, sample_documents):
        mock_store.subscribe_collection.side_effect = (
            lambda path, on_snapshot, on_error: on_snapshot(sample_documents)
        )
        adapter = EventStoreAdapter(mock_store, ready_session, "test-app")
        subscription = adapter.subscribe()

        assert adapter.delete("evt-1").ok
        assert [e.id for e in subscription.latest] == ["evt-1", "evt-2"]


class TestSubscribe:
    def test_snapshot_round_trip_through_store(self, adapter):
        snapshots = []
        with adapter.subscribe(on_snapshot=snapshots.append) as subscription:
            adapter.add(DRAFT)
            adapter.add(EventDraft(title="Lunch", date="2024-03-06"))

        assert [len(s) for s in snapshots] == [0, 1, 2]
        assert [e.title for e in subscription.latest] == ["Dentist", "Lunch"]

    def test_resubscribe_yields_fresh_full_snapshot(self, adapter):
        adapter.add(DRAFT)
        first = adapter.subscribe()
        first.close()
        adapter.add(EventDraft(title="Lunch", date="2024-03-06"))

        second = adapter.subscribe()
        assert [e.title for e in second.latest] == ["Dentist", "Lunch"]
        assert first.version == 1
        second.close()

    def test_store_error_on_open_is_reported(self, mock_store, ready_session):
        mock_store.subscribe_collection.side_effect = StoreReadError("PERMISSION_DENIED")
        errors = []
        subscription = EventStoreAdapter(mock_store, ready_session, "test-app").subscribe(
            on_error=errors.append
        )

        assert isinstance(subscription.error, StoreReadError)
        assert errors == [subscription.error]
        assert not subscription.wait_for_snapshot(timeout=0)
