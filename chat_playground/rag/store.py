"""Process-lifetime session document store.

Maps session id -> file id -> Document. Nothing is persisted; the store
lives as long as the application object that owns it.
"""

import logging
import threading

from chat_playground.errors import StorageError
from chat_playground.models.documents import Document

logger = logging.getLogger(__name__)


class SessionDocumentStore:
    """Thread-safe in-memory registry of documents per session.

    Readers receive snapshot copies, so a concurrent ``delete`` never
    invalidates an iteration in progress.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, dict[str, Document]] = {}
        self._lock = threading.Lock()

    def put(self, session_id: str, file_id: str, document: Document) -> None:
        """Store a document for a session, replacing any previous one.

        Raises:
            StorageError: If the document could not be stored.
        """
        try:
            with self._lock:
                self._sessions.setdefault(session_id, {})[file_id] = document
        except Exception as e:
            raise StorageError("Failed to store document", details=str(e)) from e
        logger.debug(f"Stored document {file_id} for session {session_id}")

    def get(self, session_id: str) -> dict[str, Document]:
        """Return a snapshot of the session's documents, empty if none."""
        with self._lock:
            return dict(self._sessions.get(session_id, {}))

    def delete(self, session_id: str) -> int:
        """Remove a session and return how many documents it held."""
        with self._lock:
            removed = self._sessions.pop(session_id, None)
        return len(removed) if removed else 0

    def has(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._sessions

    def session_ids(self) -> list[str]:
        with self._lock:
            return list(self._sessions)

    def count(self) -> int:
        """Total number of documents across all sessions."""
        with self._lock:
            return sum(len(docs) for docs in self._sessions.values())

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()
