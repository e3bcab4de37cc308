"""
SQLite database integration and simple migration system.

This module provides functions for obtaining a database connection
(``get_connection``) and applying migrations on application start
(``init_db``).  It uses SQLite as a lightweight embedded database; to
switch to another DBMS you would replace connection logic and adapt
SQL syntax accordingly.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.

Duplicate prevention for addresses lives here as well: a partial
unique index over the scoping and content columns of live (not
deleted) rows.  The service layer checks for duplicates before
writing, but only this index closes the race between two concurrent
inserts of the same address.
"""

import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from .config import settings


ADDRESS_UNIQUE_INDEX = "uq_addresses_live_content"


MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: address book schema
    (
        1,
        f"""
        CREATE TABLE IF NOT EXISTS addresses (
            address_id TEXT PRIMARY KEY,
            tenant_id TEXT NOT NULL,
            user_id TEXT NOT NULL,
            line1 TEXT NOT NULL,
            -- Absent line2 is stored as '' so that the unique index
            -- compares it like any other value (NULLs never collide).
            line2 TEXT NOT NULL DEFAULT '',
            city TEXT NOT NULL,
            state TEXT NOT NULL,
            postcode TEXT NOT NULL,
            country TEXT NOT NULL,
            deleted INTEGER NOT NULL DEFAULT 0,
            deleted_at TIMESTAMP,
            created_at TIMESTAMP NOT NULL,
            updated_at TIMESTAMP NOT NULL
        );

        CREATE UNIQUE INDEX IF NOT EXISTS {ADDRESS_UNIQUE_INDEX}
            ON addresses(tenant_id, user_id, line1, line2, city, state, postcode, country)
            WHERE deleted = 0;

        CREATE INDEX IF NOT EXISTS idx_addresses_tenant_user
            ON addresses(tenant_id, user_id, deleted);
        """,
    ),
    # Migration 2: audit trail
    (
        2,
        """
        CREATE TABLE IF NOT EXISTS audit_logs (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            tenant_id TEXT NOT NULL,
            user_id TEXT,
            action TEXT NOT NULL,
            object_type TEXT,
            object_id TEXT,
            timestamp TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            details TEXT
        );

        CREATE INDEX IF NOT EXISTS idx_audit_logs_tenant ON audit_logs(tenant_id);
        """,
    ),
]


def get_database_path() -> str:
    """Compute the path to the SQLite database file.

    If ``settings.database_url`` is an absolute path, use it directly.
    Otherwise resolve it relative to the project root.
    """
    db_url = settings.database_url
    if os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent  # address_book_api/
    return str((base_dir / db_url).resolve())


def get_connection() -> sqlite3.Connection:
    """Create and return a new SQLite connection.

    The connection uses a row factory to access columns by name.
    Timestamps are stored and returned as ISO‑8601 strings; no type
    detection is enabled.
    """
    conn = sqlite3.connect(get_database_path())
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def get_cursor() -> Iterator[sqlite3.Cursor]:
    """Context manager that yields a cursor and closes the connection on exit."""
    conn = get_connection()
    try:
        yield conn.cursor()
        conn.commit()
    finally:
        conn.close()


def is_unique_violation(exc: sqlite3.IntegrityError) -> bool:
    """Return ``True`` if ``exc`` was raised by the live‑address unique index."""
    message = str(exc)
    return "UNIQUE constraint failed" in message and "addresses.line1" in message


def init_db() -> None:
    """Initialise the database and apply pending migrations.

    Creates the ``migrations`` table if it does not exist, checks the
    current schema version, and applies any new migrations defined in
    ``MIGRATIONS``.  If you add a new migration, append it with an
    incremented version number.
    """
    with get_cursor() as cursor:
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        cursor.execute("SELECT MAX(version) as version FROM migrations")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in MIGRATIONS:
            if version > current_version:
                cursor.executescript(sql)
                cursor.execute(
                    "INSERT INTO migrations (version) VALUES (?)", (version,)
                )
                current_version = version
