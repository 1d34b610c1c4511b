"""
Session Store

File-backed table of authenticated sessions keyed by caller-supplied ids.

The whole table is rewritten to the backing file on every mutation. Each
put/delete is atomic with its own write inside this process, but two
processes (or two stores on the same file) still race last-writer-wins.
The store is best-effort, not transactional.

Usage:
    from gamecode_agent.store import SessionStore

    store = SessionStore(Path("sessions.json"))
    store.load()
    record = store.get("session_123")
"""

import json
import logging
import threading
import time
from pathlib import Path
from typing import Callable, Optional

from pydantic import ValidationError

from .config import SESSION_TTL_MS
from .errors import StoreIOError
from .models import SessionRecord

logger = logging.getLogger(__name__)


def now_ms() -> int:
    """Current time in milliseconds since the epoch."""
    return int(time.time() * 1000)


class SessionStore:
    """
    Sole owner of all SessionRecords.

    Features:
    - Expiry on access (records older than the TTL are evicted and never returned)
    - Synchronous whole-file persistence after each mutation
    - Corrupt or unreadable files degrade to an empty store
    """

    def __init__(
        self,
        path: Path,
        ttl_ms: int = SESSION_TTL_MS,
        clock: Callable[[], int] = now_ms,
    ):
        """
        Initialize the store.

        Args:
            path: Backing JSON file
            ttl_ms: Record lifetime in milliseconds (default: 24h)
            clock: Returns the current time in epoch milliseconds
        """
        self.path = Path(path)
        self.ttl_ms = ttl_ms
        self._clock = clock
        self._records: dict[str, SessionRecord] = {}
        self._lock = threading.RLock()

    def load(self) -> int:
        """
        Read the backing file if present.

        Never raises: a missing, unreadable or corrupt file leaves the store
        empty. Malformed individual records are skipped.

        Returns:
            Number of records loaded
        """
        with self._lock:
            self._records.clear()

            if not self.path.exists():
                logger.info(f"No session file at {self.path}, starting empty")
                return 0

            try:
                raw = json.loads(self.path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as e:
                logger.error(f"Error loading sessions from {self.path}: {e}")
                return 0

            if not isinstance(raw, dict):
                logger.error(f"Session file {self.path} does not contain a JSON object, ignoring it")
                return 0

            for session_id, value in raw.items():
                try:
                    self._records[session_id] = SessionRecord.model_validate(value)
                except ValidationError as e:
                    logger.warning(f"Skipping malformed session record '{session_id}': {e.error_count()} errors")

            logger.info(f"Loaded {len(self._records)} sessions from file")
            return len(self._records)

    def save(self) -> None:
        """
        Write the whole table to the backing file.

        Raises:
            StoreIOError: If the file cannot be written
        """
        with self._lock:
            data = {sid: record.to_json_dict() for sid, record in self._records.items()}
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self.path.write_text(json.dumps(data), encoding="utf-8")
            except OSError as e:
                raise StoreIOError(self.path, e) from e

    def _persist(self) -> None:
        # In-memory state stays authoritative; the next successful save reconciles
        try:
            self.save()
        except StoreIOError as e:
            logger.error(f"Error saving sessions: {e}")

    def get(self, session_id: str) -> Optional[SessionRecord]:
        """
        Return the record for session_id if it has not expired.

        An expired record is evicted (and the eviction persisted) instead.
        """
        with self._lock:
            record = self._records.get(session_id)
            if record is None:
                return None

            if record.is_expired(self._clock(), self.ttl_ms):
                logger.info(f"Session '{session_id}' expired, removing")
                del self._records[session_id]
                self._persist()
                return None

            return record

    def put(self, session_id: str, record: SessionRecord) -> None:
        """Insert or replace a record, then persist the table."""
        with self._lock:
            self._records[session_id] = record
            self._persist()
        logger.info(f"Session '{session_id}' saved")

    def delete(self, session_id: str) -> bool:
        """
        Remove a record if present, then persist.

        Returns:
            True if a record was removed
        """
        with self._lock:
            removed = self._records.pop(session_id, None) is not None
            self._persist()
        if removed:
            logger.info(f"Session '{session_id}' deleted")
        return removed

    def ids(self) -> list[str]:
        """List live session ids, evicting expired ones on the way."""
        with self._lock:
            now = self._clock()
            expired = [
                sid for sid, record in self._records.items()
                if record.is_expired(now, self.ttl_ms)
            ]
            for sid in expired:
                del self._records[sid]
            if expired:
                logger.info(f"Evicted {len(expired)} expired sessions")
                self._persist()
            return list(self._records)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._records

    def __len__(self) -> int:
        return len(self._records)
