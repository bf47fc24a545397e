"""Local SQLite storage for journal entries."""

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator

from ..errors import PersistenceError
from ..models import Entry, Mood, mood_value

logger = logging.getLogger(__name__)

# SQL schema for the entry database
SCHEMA = """
CREATE TABLE IF NOT EXISTS entries (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    identifier TEXT UNIQUE,
    title TEXT NOT NULL,
    body_text TEXT NOT NULL,
    timestamp TEXT NOT NULL,
    mood TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_entries_timestamp ON entries(timestamp);
"""

_COLUMNS = "id, identifier, title, body_text, timestamp, mood"


def _local_time(timestamp: datetime) -> datetime:
    """Stored timestamps are naive local time."""
    if timestamp.tzinfo is None:
        return timestamp
    return timestamp.astimezone().replace(tzinfo=None)


def _row_to_entry(row: sqlite3.Row) -> Entry:
    return Entry(
        pk=row["id"],
        identifier=row["identifier"],
        title=row["title"],
        body_text=row["body_text"],
        timestamp=datetime.fromisoformat(row["timestamp"]),
        mood=row["mood"],
    )


class EntryStore:
    """SQLite-backed store for journal entries.

    Every write runs inside its own short-lived transaction unless the
    caller passes the connection of an enclosing :meth:`transaction`.
    """

    def __init__(self, db_path: str | Path):
        """Initialize the entry store.

        Args:
            db_path: Path to SQLite database file, or ":memory:".
        """
        self.db_path = Path(db_path).expanduser()
        self._conn: sqlite3.Connection | None = None

    def connect(self) -> None:
        """Initialize database connection and schema."""
        if self._conn is not None:
            return

        if str(self.db_path) != ":memory:":
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.executescript(SCHEMA)
            self._conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not open entry store: {e}") from e

        logger.info(f"EntryStore connected to {self.db_path}")

    def close(self) -> None:
        """Close database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None
            logger.info("EntryStore connection closed")

    def _ensure_connected(self) -> sqlite3.Connection:
        """Ensure we have a database connection."""
        if self._conn is None:
            self.connect()
        return self._conn

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Run a block of work as one committed unit.

        Commits when the block exits normally and rolls back on any
        exception. Database errors are re-raised as PersistenceError.
        """
        conn = self._ensure_connected()
        try:
            with conn:
                yield conn
        except sqlite3.Error as e:
            logger.error(f"Could not save entry store transaction: {e}")
            raise PersistenceError(str(e)) from e

    @contextmanager
    def _reading(self, action: str) -> Iterator[sqlite3.Connection]:
        conn = self._ensure_connected()
        try:
            yield conn
        except sqlite3.Error as e:
            logger.error(f"Error {action}: {e}")
            raise PersistenceError(str(e)) from e

    @contextmanager
    def _context(self, conn: sqlite3.Connection | None) -> Iterator[sqlite3.Connection]:
        if conn is not None:
            yield conn
        else:
            with self.transaction() as own:
                yield own

    # ==================== Write Operations ====================

    def create(
        self,
        title: str,
        body_text: str,
        mood: Mood | str = Mood.NEUTRAL,
        identifier: str | None = None,
        timestamp: datetime | None = None,
    ) -> Entry:
        """Build and persist a new entry.

        Args:
            title: Entry title.
            body_text: Entry body.
            mood: Mood of the entry.
            identifier: Sync identifier, or None for a local-only entry.
            timestamp: Entry time, defaults to now.

        Returns:
            The saved Entry with its pk set.
        """
        entry = Entry(
            title=title,
            body_text=body_text,
            timestamp=timestamp or datetime.now(),
            mood=mood_value(mood),
            identifier=identifier,
        )
        return self.save(entry)

    def save(self, entry: Entry, conn: sqlite3.Connection | None = None) -> Entry:
        """Insert a new entry or overwrite every field of an existing one."""
        entry.timestamp = _local_time(entry.timestamp)
        values = (
            entry.identifier,
            entry.title,
            entry.body_text,
            entry.timestamp.isoformat(),
            entry.mood,
        )

        with self._context(conn) as c:
            if entry.pk is None:
                cursor = c.execute(
                    """
                    INSERT INTO entries (identifier, title, body_text, timestamp, mood)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    values,
                )
                entry.pk = cursor.lastrowid
                logger.debug(f"Inserted entry pk={entry.pk} identifier={entry.identifier}")
            else:
                c.execute(
                    """
                    UPDATE entries
                    SET identifier = ?, title = ?, body_text = ?, timestamp = ?, mood = ?
                    WHERE id = ?
                    """,
                    (*values, entry.pk),
                )
                logger.debug(f"Updated entry pk={entry.pk}")

        return entry

    def update(
        self,
        entry: Entry,
        title: str,
        body_text: str,
        timestamp: datetime | None = None,
        mood: Mood | str = Mood.NEUTRAL,
    ) -> Entry:
        """Overwrite an entry's fields, loading it fresh by its row identity.

        Raises:
            PersistenceError: If the entry was never saved or no longer exists.
        """
        if entry.pk is None:
            raise PersistenceError("Entry has not been saved to the store")

        with self.transaction() as conn:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM entries WHERE id = ?", (entry.pk,)
            ).fetchone()
            if row is None:
                raise PersistenceError(f"Entry pk={entry.pk} no longer exists")

            scratch = _row_to_entry(row)
            scratch.title = title
            scratch.body_text = body_text
            scratch.timestamp = timestamp or datetime.now()
            scratch.mood = mood_value(mood)
            self.save(scratch, conn)

        return scratch

    def delete(self, entry: Entry) -> bool:
        """Remove an entry from the store.

        Returns:
            True if a row was deleted.
        """
        if entry.pk is None:
            return False

        with self.transaction() as conn:
            cursor = conn.execute("DELETE FROM entries WHERE id = ?", (entry.pk,))

        deleted = cursor.rowcount > 0
        if deleted:
            logger.debug(f"Deleted entry pk={entry.pk}")
        return deleted

    # ==================== Read Operations ====================

    def fetch_by_identifier(
        self, identifier: str, conn: sqlite3.Connection | None = None
    ) -> Entry | None:
        """Look up a single entry by its sync identifier.

        Returns:
            The matching Entry, or None if there is none.

        Raises:
            PersistenceError: If the query itself fails.
        """
        c = conn or self._ensure_connected()
        try:
            row = c.execute(
                f"SELECT {_COLUMNS} FROM entries WHERE identifier = ? LIMIT 1",
                (identifier,),
            ).fetchone()
        except sqlite3.Error as e:
            logger.error(f"Error fetching single entry: {e}")
            raise PersistenceError(str(e)) from e

        return _row_to_entry(row) if row else None

    def get(self, pk: int) -> Entry | None:
        with self._reading("loading entry") as conn:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM entries WHERE id = ?", (pk,)
            ).fetchone()
        return _row_to_entry(row) if row else None

    def list_entries(self, limit: int | None = None) -> list[Entry]:
        """List entries, newest first."""
        query = f"SELECT {_COLUMNS} FROM entries ORDER BY timestamp DESC, id DESC"
        params: tuple = ()
        if limit is not None:
            query += " LIMIT ?"
            params = (limit,)

        with self._reading("listing entries") as conn:
            rows = conn.execute(query, params).fetchall()
        return [_row_to_entry(row) for row in rows]

    def count(self) -> int:
        with self._reading("counting entries") as conn:
            return conn.execute("SELECT COUNT(*) FROM entries").fetchone()[0]
