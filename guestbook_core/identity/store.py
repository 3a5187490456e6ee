"""
Identity Store: persisted social identity across sessions.

Behavioral Contract:
- One record under one well-known key; absence of the key means no identity
- Writes are all-or-nothing: a failed write leaves the previous record intact
- A record that fails to deserialize is removed and reported as absent
- Single writer: only the Identity Reconciler holds a store
"""

import logging
import sqlite3
from typing import Optional

from pydantic import ValidationError as ModelValidationError

from guestbook_core.errors import PersistenceError
from guestbook_core.models.identity import SocialIdentity

logger = logging.getLogger(__name__)

DEFAULT_KEY = "farcasterUser"


class IdentityStore:
    """
    Key/value identity persistence.
    Prototype: SQLite. A browser build would map this onto localStorage.
    """

    def __init__(self, db_path: str = ":memory:", key: str = DEFAULT_KEY):
        self.db_path = db_path
        self.key = key
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._init_schema()

    def _init_schema(self) -> None:
        """Create the key/value table if it doesn't exist."""
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS identity (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL DEFAULT (datetime('now'))
            )
        """)
        self._conn.commit()

    def load(self) -> Optional[SocialIdentity]:
        """Load the stored identity. Corrupt records are discarded."""
        try:
            row = self._conn.execute(
                "SELECT value FROM identity WHERE key = ?", (self.key,)
            ).fetchone()
        except sqlite3.Error as e:
            logger.warning("Failed to read stored identity: %s", e)
            return None

        if row is None:
            return None

        try:
            return SocialIdentity.model_validate_json(row[0])
        except ModelValidationError as e:
            logger.warning("Discarding corrupt stored identity: %s", e.errors()[:1])
            self.clear()
            return None

    def save(self, identity: SocialIdentity) -> None:
        """
        Persist the identity in a single transaction.

        Raises PersistenceError on failure; the previous record is left
        exactly as it was.
        """
        payload = identity.model_dump_json()
        try:
            with self._conn:
                self._conn.execute(
                    "INSERT OR REPLACE INTO identity (key, value) VALUES (?, ?)",
                    (self.key, payload),
                )
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not persist identity: {e}") from e

    def clear(self) -> None:
        """Remove the stored identity, if any."""
        try:
            with self._conn:
                self._conn.execute("DELETE FROM identity WHERE key = ?", (self.key,))
        except sqlite3.Error as e:
            logger.warning("Failed to clear stored identity: %s", e)

    def exists(self) -> bool:
        row = self._conn.execute(
            "SELECT 1 FROM identity WHERE key = ?", (self.key,)
        ).fetchone()
        return row is not None

    def close(self) -> None:
        self._conn.close()
