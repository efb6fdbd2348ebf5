"""
sqlite_store.py — SecretStore kept in a local SQLite file.

One connection per operation: opened, used inside a transaction, closed on
every exit path. `sqlite3` errors (locked file, unreadable path, timeout
waiting for a lock) surface as BackendUnavailable.
"""

import logging
import sqlite3
from contextlib import closing, contextmanager
from typing import Iterator, List

from .. import config
from ..core.errors import BackendUnavailable, DuplicateName, NotFound, UnsupportedParameters
from ..core.models import SecretEntry
from .base import BackendKind, SecretStore
from .setup_database import ensure_parent_dir, setup_database

logger = logging.getLogger(__name__)


class SqliteStore(SecretStore):

    kind = BackendKind.SQLITE

    def __init__(self, path: str = config.DATABASE_FILE, timeout: float = config.BACKEND_TIMEOUT) -> None:
        if path == ":memory:":
            # every operation opens its own connection, so nothing would persist
            raise UnsupportedParameters("sqlite backend needs a database file, not \":memory:\"")
        self.path = path
        self.timeout = timeout

    @contextmanager
    def get_db_connection(self) -> Iterator[sqlite3.Connection]:
        """Open a connection (rows as sqlite3.Row) and make sure the schema exists."""
        try:
            ensure_parent_dir(self.path)
            conn = sqlite3.connect(self.path, timeout=self.timeout)
        except (OSError, sqlite3.Error) as e:
            raise BackendUnavailable("Cannot open database {}: {}".format(self.path, e)) from e

        with closing(conn):
            conn.row_factory = sqlite3.Row
            try:
                setup_database(conn)
                yield conn
            except sqlite3.Error as e:
                raise BackendUnavailable("Database error on {}: {}".format(self.path, e)) from e

    def _insert(self, entry: SecretEntry) -> None:
        with self.get_db_connection() as conn:
            try:
                with conn:
                    conn.execute(
                        "INSERT INTO secrets (name, payload) VALUES (?, ?)",
                        (entry.name, entry.to_payload()),
                    )
            except sqlite3.IntegrityError:
                raise DuplicateName("Secret {!r} already exists".format(entry.name), name=entry.name) from None

    def list(self) -> List[SecretEntry]:
        with self.get_db_connection() as conn:
            rows = conn.execute("SELECT name, payload FROM secrets ORDER BY id").fetchall()
        return [SecretEntry.from_payload(row["name"], row["payload"]) for row in rows]

    def get(self, name: str) -> SecretEntry:
        with self.get_db_connection() as conn:
            row = conn.execute("SELECT payload FROM secrets WHERE name = ?", (name,)).fetchone()
        if row is None:
            raise NotFound("Secret {!r} not found".format(name), name=name)
        return SecretEntry.from_payload(name, row["payload"])

    def remove(self, name: str) -> None:
        with self.get_db_connection() as conn:
            with conn:
                deleted = conn.execute("DELETE FROM secrets WHERE name = ?", (name,)).rowcount
        if deleted == 0:
            raise NotFound("Secret {!r} not found".format(name), name=name)
        logger.info("Secret %r removed from %s", name, self.path)
