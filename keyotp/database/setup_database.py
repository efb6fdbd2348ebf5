import logging
import os
import sqlite3

from .. import config

logger = logging.getLogger(__name__)


def setup_database(conn: sqlite3.Connection) -> None:
    """Create the secrets table on `conn` if it does not exist yet."""
    conn.execute('''
    CREATE TABLE IF NOT EXISTS secrets (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL UNIQUE,
        payload TEXT NOT NULL,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    ''')
    conn.commit()


def ensure_parent_dir(path: str) -> None:
    """Create the directory holding the database file, readable by the owner only."""
    parent = os.path.dirname(os.path.abspath(path))
    if not os.path.isdir(parent):
        os.makedirs(parent, mode=0o700, exist_ok=True)
        logger.debug("Created database directory %s", parent)


if __name__ == "__main__":
    ensure_parent_dir(config.DATABASE_FILE)
    with sqlite3.connect(config.DATABASE_FILE) as connection:
        setup_database(connection)
    print("Database setup completed successfully!")
