"""Abstract base class for document stores."""

from abc import ABC, abstractmethod
from typing import Any, Callable

Document = dict[str, Any]
SnapshotCallback = Callable[[list[Document]], None]
ErrorCallback = Callable[[Exception], None]


class ListenerRegistration:
    """Handle for a live collection listener."""

    def __init__(self, release: Callable[[], None]):
        self._release = release
        self.active = True

    def unsubscribe(self) -> None:
        """Stop receiving snapshots. Safe to call more than once."""
        if self.active:
            self.active = False
            self._release()


class DocumentStore(ABC):
    """Abstract base class for document stores.

    Collection paths are slash-separated with an odd number of segments,
    e.g. ``artifacts/my-app/users/<uid>/events``.
    """

    @abstractmethod
    def subscribe_collection(
        self,
        path: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> ListenerRegistration:
        """
        Listen to a collection.

        Every push carries the complete current document list
        (``{"id": ..., **fields}`` dicts in store order).

        Args:
            path: Collection path
            on_snapshot: Called with each full snapshot
            on_error: Called once if the listener fails; no further pushes follow

        Returns:
            Registration used to stop listening
        """

    @abstractmethod
    def create_document(self, path: str, fields: dict[str, Any]) -> str:
        """
        Create a document with a store-assigned ID.

        Args:
            path: Collection path
            fields: Document fields

        Returns:
            Created document ID

        Raises:
            StoreWriteError: If creation fails
        """

    @abstractmethod
    def delete_document(self, path: str, doc_id: str) -> None:
        """
        Delete a document.

        Args:
            path: Collection path
            doc_id: Document identifier

        Raises:
            StoreDeleteError: If deletion fails, including when the document does not exist
        """
