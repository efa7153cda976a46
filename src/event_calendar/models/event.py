"""Calendar event data models."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class Event(BaseModel):
    """An event record mirrored from the document store.

    Records are owned by the store. Local copies are read-only snapshots, so
    the model is frozen and tolerant of missing fields.
    """

    id: str  # Store-assigned document ID
    title: str = ""
    date: str = ""  # YYYY-MM-DD, no time component, no timezone
    created_at: Optional[str] = Field(None, alias="createdAt")

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "Event":
        """
        Build an event from a store document.

        Args:
            document: ``{"id": ..., **fields}`` as delivered in a snapshot

        Returns:
            Event with non-string fields coerced to strings
        """
        created = document.get("createdAt")
        return cls(
            id=str(document["id"]),
            title=_as_text(document.get("title")),
            date=_as_text(document.get("date")),
            createdAt=None if created is None else str(created),
        )


class EventDraft(BaseModel):
    """Title and date pair being composed in the entry form."""

    title: str = ""
    date: str = ""

    model_config = ConfigDict(frozen=True)

    @property
    def is_complete(self) -> bool:
        return bool(self.title.strip()) and bool(self.date.strip())

    def to_fields(self, created_at: str) -> dict[str, str]:
        """Fields written to the store for a new event."""
        return {
            "title": self.title.strip(),
            "date": self.date.strip(),
            "createdAt": created_at,
        }


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)
