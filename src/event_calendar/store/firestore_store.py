"""Cloud Firestore document store using the REST API directly."""

import logging
import threading
from typing import Any, Callable, Optional

import requests

from ..config import FirebaseConfig
from ..utils.exceptions import StoreDeleteError, StoreReadError, StoreWriteError
from .base import (
    Document,
    DocumentStore,
    ErrorCallback,
    ListenerRegistration,
    SnapshotCallback,
)

logger = logging.getLogger(__name__)

FIRESTORE_BASE = "https://firestore.googleapis.com/v1"
PAGE_SIZE = 300


class FirestoreDocumentStore(DocumentStore):
    """Read and write Firestore documents as the signed-in user.

    The REST API has no streaming listen call, so collection listeners are
    polling watches: the collection is listed every ``poll_interval`` seconds
    and a full snapshot is pushed whenever its contents changed.
    """

    def __init__(
        self,
        config: FirebaseConfig,
        token_provider: Callable[[], str],
        poll_interval: float = 2.0,
    ):
        """
        Initialize Firestore store.

        Args:
            config: Firebase web app configuration
            token_provider: Returns a valid Firebase ID token for each request
            poll_interval: Seconds between collection polls for listeners
        """
        self.config = config
        self.token_provider = token_provider
        self.poll_interval = poll_interval

    @property
    def _documents_root(self) -> str:
        return (
            f"{FIRESTORE_BASE}/projects/{self.config.project_id}"
            f"/databases/{self.config.database_id}/documents"
        )

    def _headers(self) -> dict[str, str]:
        token = self.token_provider()
        return {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

    def list_documents(self, path: str) -> list[Document]:
        """
        Fetch every document in a collection.

        Returns:
            ``{"id": ..., **fields}`` dicts, each with the Firestore
            ``updateTime`` under the ``_update_time`` key

        Raises:
            StoreReadError: If listing fails
        """
        try:
            url = f"{self._documents_root}/{path}"
            params: dict[str, Any] = {"pageSize": PAGE_SIZE}
            documents = []
            while True:
                resp = requests.get(url, headers=self._headers(), params=params)
                resp.raise_for_status()
                data = resp.json()
                for raw in data.get("documents", []):
                    documents.append(_from_firestore_document(raw))
                page_token = data.get("nextPageToken")
                if not page_token:
                    break
                params = {"pageSize": PAGE_SIZE, "pageToken": page_token}
            return documents

        except Exception as e:
            raise StoreReadError(f"Failed to list {path}: {e}") from e

    def subscribe_collection(
        self,
        path: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> ListenerRegistration:
        watch = _PollingWatch(self, path, on_snapshot, on_error, self.poll_interval)
        watch.start()
        return ListenerRegistration(watch.stop)

    def create_document(self, path: str, fields: dict[str, Any]) -> str:
        try:
            url = f"{self._documents_root}/{path}"
            body = {"fields": {k: encode_value(v) for k, v in fields.items()}}
            resp = requests.post(url, headers=self._headers(), json=body)
            resp.raise_for_status()
            doc_id = resp.json()["name"].rsplit("/", 1)[-1]
            logger.info(f"Created document {doc_id} in {path}")
            return doc_id

        except Exception as e:
            raise StoreWriteError(f"Failed to create document in {path}: {e}") from e

    def delete_document(self, path: str, doc_id: str) -> None:
        try:
            url = f"{self._documents_root}/{path}/{doc_id}"
            # Without the precondition Firestore reports success for missing documents
            resp = requests.delete(
                url,
                headers=self._headers(),
                params={"currentDocument.exists": "true"},
            )
            resp.raise_for_status()
            logger.info(f"Deleted document {doc_id} from {path}")

        except Exception as e:
            raise StoreDeleteError(f"Failed to delete document {doc_id} from {path}: {e}") from e


class _PollingWatch:
    """Background poll loop feeding one collection listener."""

    def __init__(
        self,
        store: FirestoreDocumentStore,
        path: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
        interval: float,
    ):
        self.store = store
        self.path = path
        self.on_snapshot = on_snapshot
        self.on_error = on_error
        self.interval = interval
        self._stopped = threading.Event()
        self._thread = threading.Thread(
            target=self._run, name=f"firestore-watch:{path}", daemon=True
        )
        self._fingerprint: Optional[tuple] = None

    def start(self) -> None:
        logger.debug(f"Watching {self.path} every {self.interval}s")
        self._thread.start()

    def stop(self) -> None:
        self._stopped.set()
        if self._thread.is_alive() and self._thread is not threading.current_thread():
            self._thread.join(timeout=self.interval + 1)
        logger.debug(f"Stopped watching {self.path}")

    def poll_once(self) -> bool:
        """
        List the collection and push it if it changed.

        Returns:
            True if a snapshot was pushed
        """
        documents = self.store.list_documents(self.path)
        fingerprint = tuple((doc["id"], doc.get("_update_time")) for doc in documents)
        if fingerprint == self._fingerprint:
            return False

        self._fingerprint = fingerprint
        snapshot = [
            {k: v for k, v in doc.items() if k != "_update_time"} for doc in documents
        ]
        if not self._stopped.is_set():
            self.on_snapshot(snapshot)
        return True

    def _run(self) -> None:
        while not self._stopped.is_set():
            try:
                self.poll_once()
            except Exception as e:
                if not self._stopped.is_set():
                    logger.error(f"Watch on {self.path} failed: {e}")
                    self.on_error(e)
                return
            self._stopped.wait(self.interval)


def encode_value(value: Any) -> dict[str, Any]:
    """Encode a Python value as a Firestore typed value."""
    if value is None:
        return {"nullValue": None}
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, int):
        return {"integerValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, str):
        return {"stringValue": value}
    if isinstance(value, dict):
        return {"mapValue": {"fields": {k: encode_value(v) for k, v in value.items()}}}
    if isinstance(value, (list, tuple)):
        return {"arrayValue": {"values": [encode_value(v) for v in value]}}
    raise TypeError(f"Cannot store value of type {type(value).__name__}")


def decode_value(value: dict[str, Any]) -> Any:
    """Decode a Firestore typed value."""
    if "stringValue" in value:
        return value["stringValue"]
    if "integerValue" in value:
        return int(value["integerValue"])
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "booleanValue" in value:
        return value["booleanValue"]
    if "timestampValue" in value:
        return value["timestampValue"]
    if "mapValue" in value:
        fields = value["mapValue"].get("fields", {})
        return {k: decode_value(v) for k, v in fields.items()}
    if "arrayValue" in value:
        return [decode_value(v) for v in value["arrayValue"].get("values", [])]
    # nullValue, referenceValue, geoPointValue, bytesValue
    return value.get("referenceValue") or value.get("bytesValue")


def _from_firestore_document(raw: dict[str, Any]) -> Document:
    fields = {k: decode_value(v) for k, v in raw.get("fields", {}).items()}
    return {
        **fields,
        "id": raw["name"].rsplit("/", 1)[-1],
        "_update_time": raw.get("updateTime"),
    }
