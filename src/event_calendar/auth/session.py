"""Session bootstrapping: resolve an identity before touching the store."""

import logging
import threading
from typing import Callable, Optional

from ..config import AppConfig
from ..utils.exceptions import AuthenticationError, ConfigurationError
from .base import AuthUser, IdentityProvider
from .firebase_auth import FirebaseAuthProvider
from .token_cache import SessionCache

logger = logging.getLogger(__name__)

IdentityListener = Callable[[Optional[str]], None]


class Session:
    """Identity of the running application instance.

    ``ready`` flips to True exactly once, after the first auth-state
    notification, whether or not that notification carried a user.
    """

    def __init__(self) -> None:
        self.user_id: Optional[str] = None
        self._ready = threading.Event()
        self._identity_listeners: list[IdentityListener] = []
        self._release: Optional[Callable[[], None]] = None

    @property
    def ready(self) -> bool:
        return self._ready.is_set()

    @property
    def has_identity(self) -> bool:
        return self.ready and bool(self.user_id)

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the session is ready. Returns False on timeout."""
        return self._ready.wait(timeout)

    def on_identity_change(self, listener: IdentityListener) -> Callable[[], None]:
        """
        Register a listener for ``user_id`` changes after the session is ready.

        Returns:
            Callable that unregisters the listener
        """
        self._identity_listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._identity_listeners:
                self._identity_listeners.remove(listener)

        return unsubscribe

    def close(self) -> None:
        """Release the auth-state subscription."""
        if self._release is not None:
            self._release()
            self._release = None

    def _set_user_id(self, user_id: Optional[str]) -> None:
        if user_id == self.user_id:
            return
        self.user_id = user_id
        if self.ready:
            for listener in list(self._identity_listeners):
                listener(user_id)

    def _mark_ready(self) -> None:
        if not self._ready.is_set():
            self._ready.set()
            logger.info(f"Session ready (user: {self.user_id or 'none'})")


class SessionBootstrapper:
    """Drives an identity provider until the session is ready."""

    def __init__(self, provider: IdentityProvider, initial_auth_token: Optional[str] = None):
        """
        Initialize session bootstrapper.

        Args:
            provider: Identity provider to sign in with
            initial_auth_token: Pre-issued custom token tried before anything else
        """
        self.provider = provider
        self.initial_auth_token = initial_auth_token
        self.session = Session()

    def start(self) -> Session:
        """
        Sign in and subscribe to auth-state changes.

        Returns immediately; use :meth:`Session.wait_until_ready` to block.
        """
        if self.initial_auth_token:
            try:
                self.provider.sign_in_with_token(self.initial_auth_token)
            except AuthenticationError as e:
                logger.warning(f"Sign-in with pre-issued token failed, falling back: {e}")

        self.session._release = self.provider.on_auth_state_change(self._on_auth_state)
        return self.session

    def establish(self, timeout: Optional[float] = None) -> Session:
        """Start and wait until the session is ready."""
        self.start()
        self.session.wait_until_ready(timeout)
        return self.session

    def sign_out(self) -> None:
        """Drop the current identity. A fresh anonymous one replaces it."""
        self.provider.sign_out()

    def close(self) -> None:
        self.session.close()

    def _on_auth_state(self, user: Optional[AuthUser]) -> None:
        if user is not None:
            self.session._set_user_id(user.uid)
        else:
            self.session._set_user_id(None)
            try:
                # Success re-enters this handler with the new user
                self.provider.sign_in_anonymously()
            except AuthenticationError as e:
                logger.warning(f"Anonymous sign-in failed: {e}")
        self.session._mark_ready()


def establish_session(
    config: AppConfig,
    provider: Optional[IdentityProvider] = None,
    timeout: Optional[float] = None,
) -> Session:
    """
    Establish an authenticated session.

    Args:
        config: Application configuration
        provider: Identity provider; built from ``config.firebase`` when omitted
        timeout: Seconds to wait for the provider (None waits indefinitely)

    Returns:
        The ready session. Release it with :meth:`Session.close` on shutdown.

    Raises:
        ConfigurationError: If no provider is given and Firebase is not configured
    """
    if provider is None:
        provider = build_identity_provider(config)

    bootstrapper = SessionBootstrapper(provider, config.initial_auth_token)
    return bootstrapper.establish(timeout)


def build_identity_provider(config: AppConfig) -> IdentityProvider:
    """Build the Firebase identity provider described by ``config``."""
    firebase = config.firebase
    if firebase is None:
        logger.error("Firebase configuration is missing; set FIREBASE_CONFIG or FIREBASE_CONFIG_FILE")
        raise ConfigurationError("Firebase configuration is missing")

    cache = SessionCache(
        cache_location=config.session_cache_path,
        encrypted=config.session_cache_encrypted,
    )
    return FirebaseAuthProvider(firebase, session_cache=cache)
