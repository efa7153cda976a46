"""Event store adapter: the user's event collection on top of a document store."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..auth.session import Session
from ..models.event import EventDraft
from ..store.base import DocumentStore
from ..utils.date_utils import utc_timestamp
from ..utils.exceptions import AuthenticationError, NotReadyError, StoreError
from .scope import EventScope
from .subscription import ErrorCallback, EventsCallback, EventSubscription

logger = logging.getLogger(__name__)

NOT_READY_MESSAGE = "Not ready yet. Please wait."
MISSING_FIELDS_MESSAGE = "Please enter both a title and a date."
MISSING_ID_MESSAGE = "No event selected."
ADDED_MESSAGE = "Event added!"
ADD_FAILED_MESSAGE = "Error adding event."
DELETED_MESSAGE = "Event deleted."
DELETE_FAILED_MESSAGE = "Error deleting event."


class WriteStatus(str, Enum):
    """Outcome of an add or delete."""

    OK = "ok"
    NOT_READY = "not_ready"
    VALIDATION_ERROR = "validation_error"
    WRITE_FAILED = "write_failed"
    DELETE_FAILED = "delete_failed"


@dataclass
class WriteResult:
    """Result of a write operation."""

    status: WriteStatus
    message: str
    event_id: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is WriteStatus.OK


class EventStoreAdapter:
    """Subscribe to, add and delete the current user's events.

    Writes never touch local state. The change shows up once the live
    subscription pushes the next snapshot.
    """

    def __init__(self, store: DocumentStore, session: Session, app_namespace: str):
        """
        Initialize event store adapter.

        Args:
            store: Backing document store
            session: Session providing the user id
            app_namespace: Application namespace the user scopes live under
        """
        self.store = store
        self.session = session
        self.app_namespace = app_namespace

    @property
    def is_ready(self) -> bool:
        return self.session.has_identity

    def scope(self) -> EventScope:
        """
        Current storage scope.

        Raises:
            NotReadyError: If the session has no resolved identity
        """
        if not self.is_ready:
            raise NotReadyError("Session is not ready")
        return EventScope(self.app_namespace, self.session.user_id)

    def subscribe(
        self,
        on_snapshot: Optional[EventsCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> EventSubscription:
        """
        Open a live subscription to the user's events.

        Each call opens a new listener that starts with a fresh full snapshot.
        The caller must close it.

        Args:
            on_snapshot: Called with every full snapshot
            on_error: Called once if the subscription fails

        Returns:
            The live subscription

        Raises:
            NotReadyError: If the session has no resolved identity
        """
        scope = self.scope()
        subscription = EventSubscription(scope, on_snapshot=on_snapshot, on_error=on_error)
        logger.info(f"Subscribing to {scope.collection_path}")
        try:
            registration = self.store.subscribe_collection(
                scope.collection_path,
                subscription.handle_snapshot,
                subscription.handle_error,
            )
        except (StoreError, AuthenticationError) as e:
            subscription.handle_error(e)
            return subscription
        subscription.attach(registration)
        return subscription

    def add(self, draft: EventDraft) -> WriteResult:
        """
        Create an event from a draft.

        Args:
            draft: Title and date to store

        Returns:
            WriteResult with the store-assigned ID on success
        """
        if not self.is_ready:
            return WriteResult(WriteStatus.NOT_READY, NOT_READY_MESSAGE)
        if not draft.is_complete:
            return WriteResult(WriteStatus.VALIDATION_ERROR, MISSING_FIELDS_MESSAGE)

        scope = self.scope()
        try:
            event_id = self.store.create_document(
                scope.collection_path, draft.to_fields(utc_timestamp())
            )
        except (StoreError, AuthenticationError) as e:
            logger.error(f"Failed to add event '{draft.title}': {e}")
            return WriteResult(WriteStatus.WRITE_FAILED, ADD_FAILED_MESSAGE, error=str(e))

        logger.info(f"Added event {event_id} on {draft.date.strip()}")
        return WriteResult(WriteStatus.OK, ADDED_MESSAGE, event_id=event_id)

    def delete(self, event_id: str) -> WriteResult:
        """
        Delete an event.

        No local existence check is made; the store reports unknown IDs.

        Args:
            event_id: Event identifier

        Returns:
            WriteResult describing the outcome
        """
        if not self.is_ready:
            return WriteResult(WriteStatus.NOT_READY, NOT_READY_MESSAGE)
        if not event_id or not event_id.strip():
            return WriteResult(WriteStatus.VALIDATION_ERROR, MISSING_ID_MESSAGE)

        scope = self.scope()
        try:
            self.store.delete_document(scope.collection_path, event_id)
        except (StoreError, AuthenticationError) as e:
            logger.error(f"Failed to delete event {event_id}: {e}")
            return WriteResult(
                WriteStatus.DELETE_FAILED, DELETE_FAILED_MESSAGE, event_id=event_id, error=str(e)
            )

        logger.info(f"Deleted event {event_id}")
        return WriteResult(WriteStatus.OK, DELETED_MESSAGE, event_id=event_id)
