"""Persisted session cache using msal-extensions."""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

from msal_extensions import (
    FilePersistence,
    FilePersistenceWithDataProtection,
    KeychainPersistence,
    LibsecretPersistence,
)
from msal_extensions.persistence import BasePersistence, PersistenceNotFound

from ..utils.exceptions import SessionCacheError

logger = logging.getLogger(__name__)


class SessionCache:
    """Keeps the signed-in identity across runs.

    Only the user id and the provider refresh token are stored. Restoring them
    brings back the same anonymous identity, and with it the same events.
    """

    def __init__(
        self,
        cache_location: Path,
        cache_name: str = "event_calendar_session",
        encrypted: bool = True,
    ):
        """
        Initialize session cache.

        Args:
            cache_location: Directory for cache storage
            cache_name: Name of the cache file
            encrypted: Whether to use the platform's encrypted storage
        """
        self.cache_location = cache_location
        self.cache_name = cache_name
        self.encrypted = encrypted
        self._persistence: Optional[BasePersistence] = None

    def _get_persistence(self) -> BasePersistence:
        if self._persistence is not None:
            return self._persistence

        try:
            self.cache_location.mkdir(parents=True, exist_ok=True)

            if self.encrypted:
                location = self.cache_location / f"{self.cache_name}.bin"
                if sys.platform == "win32":
                    persistence = FilePersistenceWithDataProtection(str(location))
                elif sys.platform == "darwin":
                    persistence = KeychainPersistence(
                        str(location), "event_calendar", self.cache_name
                    )
                else:  # Linux
                    try:
                        persistence = LibsecretPersistence(
                            str(location),
                            schema_name="event_calendar",
                            attributes={"app": self.cache_name},
                        )
                    except Exception as e:
                        logger.warning(f"libsecret unavailable ({e}), storing session unencrypted")
                        persistence = FilePersistence(str(location))
            else:
                persistence = FilePersistence(
                    str(self.cache_location / f"{self.cache_name}.json")
                )

            self._persistence = persistence
            logger.debug(f"Session cache initialized at {self.cache_location}")
            return persistence

        except Exception as e:
            raise SessionCacheError(f"Failed to initialize session cache: {e}") from e

    def load(self) -> Optional[dict[str, Any]]:
        """
        Load the cached session.

        Returns:
            Dict with ``user_id``, ``refresh_token`` and ``is_anonymous``,
            or None if nothing usable is cached
        """
        try:
            raw = self._get_persistence().load()
        except PersistenceNotFound:
            return None
        except Exception as e:
            raise SessionCacheError(f"Failed to read session cache: {e}") from e

        if not raw:
            return None
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Session cache is corrupt, ignoring it")
            return None
        if not isinstance(data, dict) or not data.get("refresh_token"):
            return None
        return data

    def save(self, user_id: str, refresh_token: str, is_anonymous: bool = True) -> None:
        """Persist the session."""
        payload = json.dumps(
            {
                "user_id": user_id,
                "refresh_token": refresh_token,
                "is_anonymous": is_anonymous,
            }
        )
        try:
            self._get_persistence().save(payload)
        except SessionCacheError:
            raise
        except Exception as e:
            raise SessionCacheError(f"Failed to write session cache: {e}") from e

    def clear(self) -> None:
        """Forget the cached session."""
        try:
            self._get_persistence().save("")
            logger.info("Session cache cleared")
        except SessionCacheError:
            raise
        except Exception as e:
            raise SessionCacheError(f"Failed to clear session cache: {e}") from e
