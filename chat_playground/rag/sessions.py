"""Session activity tracking and reclamation.

Sessions own uploaded files (``{session_id}__{file_id}{ext}`` in the uploads
directory) and store entries. Idle sessions are swept opportunistically when
a cleanup request arrives; there is no background timer.

Every cleanup operation is total: a file that cannot be deleted is logged,
recorded and skipped, and the remaining files and sessions are still processed.
"""

import logging
import os
import threading
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path

from chat_playground.errors import CleanupError
from chat_playground.rag.store import SessionDocumentStore

logger = logging.getLogger(__name__)

DEFAULT_IDLE_TIMEOUT = 60 * 60  # seconds
FILE_PREFIX_SEPARATOR = "__"


def session_file_prefix(session_id: str) -> str:
    """Filename prefix that marks an upload as owned by ``session_id``."""
    return f"{session_id}{FILE_PREFIX_SEPARATOR}"


@dataclass
class CleanupReport:
    """Outcome of clearing one session.

    Attributes:
        files_deleted: Uploaded files removed from disk.
        documents_cleared: 1 if the store held the session, else 0.
        errors: One message per file that could not be deleted.
    """

    files_deleted: int = 0
    documents_cleared: int = 0
    errors: list[str] = field(default_factory=list)


class SessionLifecycleManager:
    """Tracks last activity per session and reclaims session state.

    Args:
        store: Store holding the sessions' documents.
        uploads_dir: Directory containing uploaded files.
        idle_timeout: Default idle threshold in seconds.
        clock: Returns the current time in epoch seconds.
    """

    def __init__(
        self,
        store: SessionDocumentStore,
        uploads_dir: str | Path,
        idle_timeout: float = DEFAULT_IDLE_TIMEOUT,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.uploads_dir = Path(uploads_dir)
        self.idle_timeout = idle_timeout
        self._clock = clock
        self._activity: dict[str, float] = {}
        self._lock = threading.Lock()

    def touch(self, session_id: str) -> None:
        """Record the current time as the session's last activity."""
        with self._lock:
            self._activity[session_id] = self._clock()

    def last_activity(self, session_id: str) -> float | None:
        with self._lock:
            return self._activity.get(session_id)

    def tracked_sessions(self) -> list[str]:
        with self._lock:
            return list(self._activity)

    def _list_uploads(self) -> list[str]:
        self.uploads_dir.mkdir(parents=True, exist_ok=True)
        return [entry.name for entry in os.scandir(self.uploads_dir) if entry.is_file()]

    def _unlink(self, filename: str) -> None:
        try:
            (self.uploads_dir / filename).unlink()
        except OSError as e:
            raise CleanupError(f"Failed to delete {filename}", details=str(e)) from e

    def _delete_session_files(
        self, session_id: str, filenames: Iterable[str]
    ) -> tuple[int, list[str]]:
        """Delete the session's files among ``filenames``.

        Returns:
            Number of files deleted and the error messages collected.
        """
        prefix = session_file_prefix(session_id)
        deleted = 0
        errors: list[str] = []
        for filename in filenames:
            if not filename.startswith(prefix):
                continue
            try:
                self._unlink(filename)
            except CleanupError as e:
                logger.error(f"{e.error}: {e.details}")
                errors.append(f"{e.error}: {e.details}")
                continue
            deleted += 1
            logger.debug(f"Deleted file: {filename}")
        return deleted, errors

    def sweep_idle(self, idle_threshold: float | None = None) -> int:
        """Reclaim every session idle for longer than the threshold.

        Idle sessions are removed from the activity map atomically, then their
        files and store entries are deleted. Store entries with no activity
        record (orphans) are cleared too but not counted.

        Args:
            idle_threshold: Seconds of inactivity. Defaults to ``idle_timeout``.

        Returns:
            Number of idle sessions reclaimed.
        """
        threshold = self.idle_timeout if idle_threshold is None else idle_threshold
        now = self._clock()

        with self._lock:
            idle = [sid for sid, last in self._activity.items() if now - last > threshold]
            for session_id in idle:
                del self._activity[session_id]
            tracked = set(self._activity)

        orphans = [
            sid for sid in self.store.session_ids() if sid not in tracked and sid not in idle
        ]

        if not idle and not orphans:
            logger.debug("Idle sweep found nothing to reclaim")
            return 0

        try:
            filenames = self._list_uploads()
        except OSError as e:
            logger.error(f"Error listing uploads directory {self.uploads_dir}: {e}")
            filenames = []

        for session_id in idle:
            self._delete_session_files(session_id, filenames)
            self.store.delete(session_id)
            logger.info(f"Cleaned up idle session: {session_id}")

        for session_id in orphans:
            self.store.delete(session_id)
            logger.warning(f"Cleared orphaned store entry for session: {session_id}")

        logger.info(f"Completed idle cleanup, sessions cleaned: {len(idle)}")
        return len(idle)

    def clear_session(self, session_id: str) -> CleanupReport:
        """Unconditionally delete a session's files, documents and activity."""
        report = CleanupReport()

        try:
            filenames = self._list_uploads()
        except OSError as e:
            logger.error(f"Error listing uploads directory {self.uploads_dir}: {e}")
            report.errors.append(str(e))
            filenames = []

        report.files_deleted, errors = self._delete_session_files(session_id, filenames)
        report.errors.extend(errors)

        if self.store.has(session_id):
            report.documents_cleared = 1
        self.store.delete(session_id)

        with self._lock:
            self._activity.pop(session_id, None)

        logger.info(
            f"Cleared session {session_id}: {report.files_deleted} files, "
            f"{report.documents_cleared} document store entries"
        )
        return report
