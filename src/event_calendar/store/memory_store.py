"""In-memory document store with synchronous pushes."""

import logging
import threading
import uuid
from collections import defaultdict
from typing import Any

from ..utils.exceptions import StoreDeleteError, StoreWriteError
from .base import (
    Document,
    DocumentStore,
    ErrorCallback,
    ListenerRegistration,
    SnapshotCallback,
)

logger = logging.getLogger(__name__)


class InMemoryDocumentStore(DocumentStore):
    """Keeps collections in process memory, in insertion order.

    Listeners receive the current snapshot when they subscribe and a new
    one after every write to their collection.
    """

    def __init__(self) -> None:
        self._collections: dict[str, list[Document]] = defaultdict(list)
        self._listeners: dict[str, list[SnapshotCallback]] = defaultdict(list)
        self._lock = threading.RLock()

    def subscribe_collection(
        self,
        path: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> ListenerRegistration:
        with self._lock:
            self._listeners[path].append(on_snapshot)
            snapshot = self._snapshot(path)

        def release() -> None:
            with self._lock:
                if on_snapshot in self._listeners[path]:
                    self._listeners[path].remove(on_snapshot)

        on_snapshot(snapshot)
        return ListenerRegistration(release)

    def create_document(self, path: str, fields: dict[str, Any]) -> str:
        if not path:
            raise StoreWriteError("Collection path is empty")

        doc_id = uuid.uuid4().hex[:20]
        with self._lock:
            self._collections[path].append({"id": doc_id, **fields})
        logger.debug(f"Created document {doc_id} in {path}")
        self._push(path)
        return doc_id

    def delete_document(self, path: str, doc_id: str) -> None:
        with self._lock:
            documents = self._collections.get(path, [])
            remaining = [doc for doc in documents if doc["id"] != doc_id]
            if len(remaining) == len(documents):
                raise StoreDeleteError(f"Document {doc_id} not found in {path}")
            self._collections[path] = remaining
        logger.debug(f"Deleted document {doc_id} from {path}")
        self._push(path)

    def _snapshot(self, path: str) -> list[Document]:
        return [dict(doc) for doc in self._collections.get(path, [])]

    def _push(self, path: str) -> None:
        with self._lock:
            listeners = list(self._listeners.get(path, []))
            snapshot = self._snapshot(path)
        for listener in listeners:
            listener(list(snapshot))
