"""Abstract base class for identity providers."""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable, Optional

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class AuthUser(BaseModel):
    """Signed-in identity as reported by the provider."""

    uid: str
    is_anonymous: bool = False

    model_config = {"frozen": True}


AuthStateListener = Callable[[Optional[AuthUser]], None]


class IdentityProvider(ABC):
    """Abstract base class for identity providers.

    Subclasses implement the sign-in calls; listener bookkeeping lives here.
    Registering a listener delivers the current state to it right away (after
    :meth:`_initialize` has run once), then every later change.
    """

    def __init__(self) -> None:
        self._current_user: Optional[AuthUser] = None
        self._listeners: list[AuthStateListener] = []
        self._listeners_lock = threading.Lock()
        self._initialized = False

    @property
    def current_user(self) -> Optional[AuthUser]:
        return self._current_user

    @abstractmethod
    def sign_in_anonymously(self) -> AuthUser:
        """
        Sign in as a fresh anonymous user.

        Returns:
            The new identity

        Raises:
            AuthenticationError: If sign-in fails
        """

    @abstractmethod
    def sign_in_with_token(self, token: str) -> AuthUser:
        """
        Sign in with a pre-issued custom token.

        Args:
            token: Custom token issued out of band

        Returns:
            The identity the token belongs to

        Raises:
            AuthenticationError: If sign-in fails
        """

    @abstractmethod
    def get_id_token(self) -> str:
        """
        Get a valid ID token for the current user.

        Returns:
            Bearer token accepted by the document store

        Raises:
            AuthenticationError: If nobody is signed in or renewal fails
        """

    def sign_out(self) -> None:
        """Forget the current identity and notify listeners."""
        self._set_current_user(None)

    def on_auth_state_change(self, listener: AuthStateListener) -> Callable[[], None]:
        """
        Register an auth-state listener.

        Args:
            listener: Called with the current user, or None when signed out

        Returns:
            Callable that unregisters the listener
        """
        if not self._initialized:
            self._initialized = True
            self._initialize()

        with self._listeners_lock:
            self._listeners.append(listener)

        listener(self._current_user)

        def unsubscribe() -> None:
            with self._listeners_lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _initialize(self) -> None:
        """Restore a persisted identity before the first listener is told about it."""

    def _set_current_user(self, user: Optional[AuthUser]) -> None:
        previous = self._current_user
        self._current_user = user
        if previous == user:
            return

        logger.debug(f"Auth state changed: {previous and previous.uid} -> {user and user.uid}")
        with self._listeners_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(user)
