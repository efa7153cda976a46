"""Application controller tying session, event store and view state together."""

import logging
import threading
from datetime import date
from typing import Optional

from .auth.base import IdentityProvider
from .auth.session import Session, SessionBootstrapper
from .config import AppConfig
from .events.adapter import EventStoreAdapter, WriteResult
from .events.subscription import EventSubscription
from .models.event import Event, EventDraft
from .models.month import Month
from .store.base import DocumentStore
from .utils.exceptions import NotReadyError
from .view.grid import MonthGrid, compute_month_grid
from .view.state import ViewState, ViewStore

logger = logging.getLogger(__name__)

NOT_SIGNED_IN_MESSAGE = "Not signed in. Events are unavailable."
LOAD_FAILED_MESSAGE = "Error loading events."
OUT_OF_RANGE_MESSAGE = "No months beyond this one."


class CalendarApp:
    """One running calendar instance.

    Owns the session and the view state. At most one event subscription is
    open at a time, always for the current identity.
    """

    def __init__(
        self,
        config: AppConfig,
        identity_provider: IdentityProvider,
        document_store: DocumentStore,
        view_store: Optional[ViewStore] = None,
    ):
        """
        Initialize calendar app.

        Args:
            config: Application configuration
            identity_provider: Identity provider used by the session
            document_store: Store holding the events
            view_store: State container (a fresh one when omitted)
        """
        self.config = config
        self.bootstrapper = SessionBootstrapper(identity_provider, config.initial_auth_token)
        self.adapter = EventStoreAdapter(
            document_store, self.bootstrapper.session, config.app_namespace
        )
        self.view = view_store or ViewStore()
        self.subscription: Optional[EventSubscription] = None
        self._subscription_lock = threading.RLock()
        self._release_identity_listener = None

    @property
    def session(self) -> Session:
        return self.bootstrapper.session

    @property
    def state(self) -> ViewState:
        return self.view.state

    def start(self, timeout: Optional[float] = None) -> Session:
        """
        Establish the session and open the event subscription.

        Args:
            timeout: Seconds to wait for the identity provider (None waits indefinitely)

        Returns:
            The session
        """
        self._release_identity_listener = self.session.on_identity_change(
            self._on_identity_change
        )
        session = self.bootstrapper.establish(timeout)
        self._open_subscription()
        return session

    def close(self) -> None:
        """Tear down the subscription and the auth listener."""
        self._close_subscription()
        if self._release_identity_listener:
            self._release_identity_listener()
            self._release_identity_listener = None
        self.bootstrapper.close()
        logger.info("Calendar closed")

    # Navigation

    def next_month(self) -> Month:
        return self._shift_month(1)

    def previous_month(self) -> Month:
        return self._shift_month(-1)

    def go_to_month(self, month: Month) -> Month:
        return self.view.update(reference_month=month).reference_month

    def go_to_today(self, today: Optional[date] = None) -> Month:
        return self.go_to_month(Month.current(today))

    def _shift_month(self, months: int) -> Month:
        current = self.state.reference_month
        try:
            target = current.shift(months)
        except ValueError as e:
            logger.warning(str(e))
            self.view.update(status_message=OUT_OF_RANGE_MESSAGE)
            return current
        return self.view.update(reference_month=target).reference_month

    # Entry form and writes

    def set_draft(self, title: Optional[str] = None, date: Optional[str] = None) -> EventDraft:
        """Update one or both draft fields."""
        draft = self.state.draft
        draft = EventDraft(
            title=draft.title if title is None else title,
            date=draft.date if date is None else date,
        )
        return self.view.update(draft=draft).draft

    def submit_draft(self) -> WriteResult:
        """
        Store the draft as a new event.

        The draft is cleared only on success. The event itself appears once
        the subscription pushes it.
        """
        result = self.adapter.add(self.state.draft)
        if result.ok:
            self.view.update(draft=EventDraft(), status_message=result.message)
        else:
            self.view.update(status_message=result.message)
        return result

    def add_event(self, title: str, date: str) -> WriteResult:
        """Fill in the draft and submit it."""
        self.set_draft(title=title, date=date)
        return self.submit_draft()

    def delete_event(self, event_id: str) -> WriteResult:
        result = self.adapter.delete(event_id)
        self.view.update(status_message=result.message)
        return result

    def sign_out(self) -> None:
        """Switch to a fresh anonymous identity (and its own event list)."""
        self.bootstrapper.sign_out()

    # Rendering

    def grid(self, today: Optional[date] = None) -> MonthGrid:
        """Grid for the current reference month and snapshot."""
        state = self.state
        return compute_month_grid(state.reference_month, state.events, today)

    def events_on(self, day: int) -> list[Event]:
        return self.grid().events_for_day(day)

    def wait_for_events(self, timeout: Optional[float] = None) -> bool:
        """Block until the current subscription delivered its first snapshot."""
        subscription = self.subscription
        if subscription is None:
            return False
        return subscription.wait_for_snapshot(timeout)

    # Subscription handling

    def _on_identity_change(self, user_id: Optional[str]) -> None:
        logger.info(f"Identity changed to {user_id or 'none'}")
        self._open_subscription()

    def _open_subscription(self) -> None:
        with self._subscription_lock:
            self._close_subscription()
            try:
                scope = self.adapter.scope()
            except NotReadyError:
                logger.warning("No identity resolved, not subscribing to events")
                self.view.update(
                    user_id=None, events=(), loading=False, status_message=NOT_SIGNED_IN_MESSAGE
                )
                return

            status = self.state.status_message
            if status in (NOT_SIGNED_IN_MESSAGE, LOAD_FAILED_MESSAGE):
                status = ""
            self.view.update(user_id=scope.user_id, events=(), loading=True, status_message=status)
            subscription = self.adapter.subscribe(
                on_snapshot=self._make_snapshot_handler(scope.user_id),
                on_error=self._make_error_handler(scope.user_id),
            )
            self.subscription = subscription

    def _close_subscription(self) -> None:
        with self._subscription_lock:
            if self.subscription is not None:
                self.subscription.close()
                self.subscription = None

    def _make_snapshot_handler(self, user_id: str):
        def on_snapshot(events: tuple[Event, ...]) -> None:
            # A late push from a previous identity must not overwrite the view
            if self.session.user_id != user_id:
                return
            self.view.update(events=events, loading=False)

        return on_snapshot

    def _make_error_handler(self, user_id: str):
        def on_error(error: Exception) -> None:
            # The listener of a previous identity may fail while it is torn down
            if self.session.user_id != user_id:
                return
            self.view.update(loading=False, status_message=LOAD_FAILED_MESSAGE)

        return on_error
