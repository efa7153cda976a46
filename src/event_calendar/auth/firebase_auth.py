"""Firebase Authentication over the Identity Toolkit REST API."""

import logging
import threading
from datetime import datetime, timedelta
from typing import Any, Optional

import requests

from ..config import FirebaseConfig
from ..utils.date_utils import utc_now
from ..utils.exceptions import AuthenticationError, SessionCacheError
from .base import AuthUser, IdentityProvider
from .token_cache import SessionCache

logger = logging.getLogger(__name__)

IDENTITY_TOOLKIT_BASE = "https://identitytoolkit.googleapis.com/v1"
SECURE_TOKEN_URL = "https://securetoken.googleapis.com/v1/token"

# Renew the ID token this long before it expires
TOKEN_REFRESH_MARGIN = timedelta(seconds=60)


class FirebaseAuthProvider(IdentityProvider):
    """Anonymous and custom-token sign-in against Firebase Authentication."""

    def __init__(
        self,
        config: FirebaseConfig,
        session_cache: Optional[SessionCache] = None,
    ):
        """
        Initialize Firebase authentication provider.

        Args:
            config: Firebase web app configuration
            session_cache: Where to persist the identity between runs (optional)
        """
        super().__init__()
        self.config = config
        self.session_cache = session_cache
        self._id_token: Optional[str] = None
        self._refresh_token: Optional[str] = None
        self._expires_at: Optional[datetime] = None
        self._token_lock = threading.Lock()

    def _post(self, url: str, **kwargs: Any) -> dict[str, Any]:
        """POST to a Firebase auth endpoint and return the JSON body."""
        try:
            resp = requests.post(url, params={"key": self.config.api_key}, **kwargs)
        except requests.RequestException as e:
            raise AuthenticationError(f"Identity provider unreachable: {e}") from e

        if not resp.ok:
            raise AuthenticationError(_error_message(resp))
        return resp.json()

    def sign_in_anonymously(self) -> AuthUser:
        data = self._post(
            f"{IDENTITY_TOOLKIT_BASE}/accounts:signUp",
            json={"returnSecureToken": True},
        )
        user = AuthUser(uid=data["localId"], is_anonymous=True)
        self._store_tokens(data["idToken"], data["refreshToken"], data["expiresIn"])
        logger.info(f"Signed in anonymously as {user.uid}")
        self._signed_in(user)
        return user

    def sign_in_with_token(self, token: str) -> AuthUser:
        data = self._post(
            f"{IDENTITY_TOOLKIT_BASE}/accounts:signInWithCustomToken",
            json={"token": token, "returnSecureToken": True},
        )
        # The custom token response carries no user id, look it up
        lookup = self._post(
            f"{IDENTITY_TOOLKIT_BASE}/accounts:lookup",
            json={"idToken": data["idToken"]},
        )
        users = lookup.get("users") or []
        if not users:
            raise AuthenticationError("Custom token sign-in returned no user")

        user = AuthUser(uid=users[0]["localId"], is_anonymous=False)
        self._store_tokens(data["idToken"], data["refreshToken"], data["expiresIn"])
        logger.info(f"Signed in with custom token as {user.uid}")
        self._signed_in(user)
        return user

    def get_id_token(self) -> str:
        with self._token_lock:
            if self._current_user is None or not self._refresh_token:
                raise AuthenticationError("Not signed in")

            if self._expires_at is None or utc_now() >= self._expires_at - TOKEN_REFRESH_MARGIN:
                logger.debug("ID token expired or about to, refreshing")
                self._refresh(self._refresh_token)
            return self._id_token

    def sign_out(self) -> None:
        with self._token_lock:
            self._id_token = None
            self._refresh_token = None
            self._expires_at = None
        if self.session_cache:
            try:
                self.session_cache.clear()
            except SessionCacheError as e:
                logger.warning(f"Could not clear cached session: {e}")
        logger.info("Signed out")
        super().sign_out()

    def _initialize(self) -> None:
        """Restore the cached session, unless someone already signed in."""
        if not self.session_cache or self._current_user is not None:
            return
        try:
            cached = self.session_cache.load()
        except SessionCacheError as e:
            logger.warning(f"Could not read cached session: {e}")
            return
        if not cached:
            return

        try:
            uid = self._refresh(cached["refresh_token"])
        except AuthenticationError as e:
            logger.warning(f"Cached session rejected, starting signed out: {e}")
            try:
                self.session_cache.clear()
            except SessionCacheError as cache_error:
                logger.warning(f"Could not clear cached session: {cache_error}")
            return

        user = AuthUser(uid=uid, is_anonymous=bool(cached.get("is_anonymous", True)))
        logger.info(f"Restored session for {user.uid}")
        self._current_user = user
        self._persist(user)

    def _refresh(self, refresh_token: str) -> str:
        """Exchange a refresh token for a new ID token. Returns the user id."""
        try:
            resp = requests.post(
                SECURE_TOKEN_URL,
                params={"key": self.config.api_key},
                data={"grant_type": "refresh_token", "refresh_token": refresh_token},
            )
        except requests.RequestException as e:
            raise AuthenticationError(f"Token refresh failed: {e}") from e

        if not resp.ok:
            raise AuthenticationError(f"Token refresh failed: {_error_message(resp)}")

        data = resp.json()
        self._store_tokens(data["id_token"], data["refresh_token"], data["expires_in"])
        return data["user_id"]

    def _store_tokens(self, id_token: str, refresh_token: str, expires_in: Any) -> None:
        self._id_token = id_token
        self._refresh_token = refresh_token
        self._expires_at = utc_now() + timedelta(seconds=int(expires_in))

    def _signed_in(self, user: AuthUser) -> None:
        self._persist(user)
        self._set_current_user(user)

    def _persist(self, user: AuthUser) -> None:
        if not self.session_cache or not self._refresh_token:
            return
        try:
            self.session_cache.save(user.uid, self._refresh_token, user.is_anonymous)
        except SessionCacheError as e:
            logger.warning(f"Could not persist session: {e}")


def _error_message(resp: requests.Response) -> str:
    """Extract the provider error code (e.g. ``INVALID_CUSTOM_TOKEN``)."""
    try:
        error = resp.json().get("error", {})
        if isinstance(error, dict):
            return error.get("message") or f"HTTP {resp.status_code}"
        return str(error)
    except ValueError:
        return f"HTTP {resp.status_code}: {resp.text[:200]}"
