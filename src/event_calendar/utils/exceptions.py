"""Custom exceptions for the Event Calendar application."""


class CalendarAppError(Exception):
    """Base exception for event calendar errors."""


class ConfigurationError(CalendarAppError):
    """Raised when backend configuration is missing or invalid."""


class AuthenticationError(CalendarAppError):
    """Raised when signing in with the identity provider fails."""


class SessionCacheError(CalendarAppError):
    """Raised when the persisted session cannot be read or written."""


class NotReadyError(CalendarAppError):
    """Raised when an operation needs a resolved identity that is not there yet."""


class StoreError(CalendarAppError):
    """Base exception for document store failures."""


class StoreReadError(StoreError):
    """Raised when listing or watching a collection fails."""


class StoreWriteError(StoreError):
    """Raised when creating a document fails."""


class StoreDeleteError(StoreError):
    """Raised when deleting a document fails."""
