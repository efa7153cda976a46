"""Storage scope for a user's events."""

from dataclasses import dataclass

# Firestore collection paths need an odd number of segments
NAMESPACE_ROOT = "artifacts"


@dataclass(frozen=True)
class EventScope:
    """Namespace and user under which events are stored and subscribed."""

    app_namespace: str
    user_id: str

    @property
    def collection_path(self) -> str:
        return f"{NAMESPACE_ROOT}/{self.app_namespace}/users/{self.user_id}/events"
