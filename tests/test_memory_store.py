"""Tests for the in-memory document store."""

import pytest

from event_calendar.store.memory_store import InMemoryDocumentStore
from event_calendar.utils.exceptions import StoreDeleteError

PATH = "artifacts/test-app/users/uid-1/events"


def test_subscribe_pushes_current_snapshot(memory_store):
    memory_store.create_document(PATH, {"title": "A"})
    snapshots = []
    memory_store.subscribe_collection(PATH, snapshots.append, pytest.fail)

    assert len(snapshots) == 1
    assert snapshots[0][0]["title"] == "A"


def test_every_write_pushes_full_snapshot_in_insertion_order(memory_store):
    snapshots = []
    memory_store.subscribe_collection(PATH, snapshots.append, pytest.fail)
    first = memory_store.create_document(PATH, {"title": "A"})
    memory_store.create_document(PATH, {"title": "B"})
    memory_store.delete_document(PATH, first)

    assert [[d["title"] for d in s] for s in snapshots] == [[], ["A"], ["A", "B"], ["B"]]


def test_collections_are_isolated(memory_store):
    other = []
    memory_store.subscribe_collection("artifacts/test-app/users/uid-2/events", other.append, pytest.fail)
    memory_store.create_document(PATH, {"title": "A"})
    assert other == [[]]


def test_unsubscribe_stops_pushes(memory_store):
    snapshots = []
    registration = memory_store.subscribe_collection(PATH, snapshots.append, pytest.fail)
    registration.unsubscribe()
    memory_store.create_document(PATH, {"title": "A"})

    assert snapshots == [[]]
    assert not registration.active


def test_delete_missing_document():
    with pytest.raises(StoreDeleteError):
        InMemoryDocumentStore().delete_document(PATH, "missing")


def test_snapshots_are_copies(memory_store):
    snapshots = []
    memory_store.subscribe_collection(PATH, snapshots.append, pytest.fail)
    memory_store.create_document(PATH, {"title": "A"})
    snapshots[-1][0]["title"] = "mutated"

    fresh = []
    memory_store.subscribe_collection(PATH, fresh.append, pytest.fail)
    assert fresh[0][0]["title"] == "A"
