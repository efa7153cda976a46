"""Live event subscription: the latest-snapshot cell for one scope."""

import logging
import threading
from typing import Callable, Iterator, Optional

from ..models.event import Event
from ..store.base import Document, ListenerRegistration
from .scope import EventScope

logger = logging.getLogger(__name__)

EventsCallback = Callable[[tuple[Event, ...]], None]
ErrorCallback = Callable[[Exception], None]


class EventSubscription:
    """Single-slot holder of the most recent full snapshot.

    Every push overwrites the slot; nothing is patched. Iterating yields
    the latest snapshot each time a newer one has arrived and stops once the
    subscription is closed or has failed.
    """

    def __init__(
        self,
        scope: EventScope,
        on_snapshot: Optional[EventsCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ):
        self.scope = scope
        self.error: Optional[Exception] = None
        self._on_snapshot = on_snapshot
        self._on_error = on_error
        self._latest: Optional[tuple[Event, ...]] = None
        self._version = 0
        self._closed = False
        self._changed = threading.Condition()
        self._registration: Optional[ListenerRegistration] = None

    @property
    def latest(self) -> Optional[tuple[Event, ...]]:
        """Most recent snapshot, or None before the first push."""
        return self._latest

    @property
    def version(self) -> int:
        """Number of snapshots received so far."""
        return self._version

    @property
    def closed(self) -> bool:
        return self._closed

    def attach(self, registration: ListenerRegistration) -> None:
        self._registration = registration
        if self._closed:
            registration.unsubscribe()

    def wait_for_snapshot(self, timeout: Optional[float] = None) -> bool:
        """
        Block until at least one snapshot has arrived.

        Returns:
            False on timeout, or if the subscription failed or closed first
        """
        with self._changed:
            self._changed.wait_for(
                lambda: self._version > 0 or self._closed or self.error is not None,
                timeout,
            )
            return self._version > 0

    def close(self) -> None:
        """Stop the live listener. Safe to call more than once."""
        with self._changed:
            if self._closed:
                return
            self._closed = True
            self._changed.notify_all()
        if self._registration is not None:
            self._registration.unsubscribe()
        logger.debug(f"Closed subscription for {self.scope.collection_path}")

    def __iter__(self) -> Iterator[tuple[Event, ...]]:
        seen = 0
        while True:
            with self._changed:
                self._changed.wait_for(
                    lambda: self._version > seen or self._closed or self.error is not None
                )
                if self._version > seen:
                    seen = self._version
                    snapshot = self._latest
                else:
                    return
            yield snapshot

    def __enter__(self) -> "EventSubscription":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def handle_snapshot(self, documents: list[Document]) -> None:
        """Replace the slot with a new snapshot. Store order is kept."""
        if self._closed:
            return
        events = tuple(Event.from_document(doc) for doc in documents)
        with self._changed:
            self._latest = events
            self._version += 1
            self._changed.notify_all()
        logger.debug(f"Snapshot {self._version}: {len(events)} event(s)")
        if self._on_snapshot:
            self._on_snapshot(events)

    def handle_error(self, error: Exception) -> None:
        """Record a listener failure. Ignored after close."""
        if self._closed:
            return
        with self._changed:
            self.error = error
            self._changed.notify_all()
        logger.error(f"Event subscription for {self.scope.collection_path} failed: {error}")
        if self._on_error:
            self._on_error(error)
