"""View state container with change notification."""

import logging
import threading
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Optional

from ..models.event import Event, EventDraft
from ..models.month import Month

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ViewState:
    """Everything the view renders."""

    reference_month: Month = field(default_factory=Month.current)
    events: tuple[Event, ...] = ()
    draft: EventDraft = field(default_factory=EventDraft)
    status_message: str = ""
    user_id: Optional[str] = None
    loading: bool = True


StateListener = Callable[[ViewState], None]


class ViewStore:
    """Holds the current ViewState and tells listeners when it changes.

    Updates replace the whole state object; listeners always see a
    consistent snapshot.
    """

    def __init__(self, initial: Optional[ViewState] = None):
        self._state = initial or ViewState()
        self._listeners: list[StateListener] = []
        self._lock = threading.RLock()

    @property
    def state(self) -> ViewState:
        return self._state

    def update(self, **changes: Any) -> ViewState:
        """Replace the state with ``changes`` applied and notify listeners."""
        with self._lock:
            self._state = replace(self._state, **changes)
            state = self._state
            listeners = list(self._listeners)
        for listener in listeners:
            listener(state)
        return state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Register a render callback.

        Returns:
            Callable that unregisters the listener
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe
