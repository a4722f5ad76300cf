"""SQLite database management for the Rumo profile store.

Handles connection lifecycle, schema creation, and migrations.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

logger = logging.getLogger(__name__)

# Current schema version
SCHEMA_VERSION = 2

# ---------------------------------------------------------------------------
# Schema DDL
# ---------------------------------------------------------------------------

_SCHEMA_V1 = """
CREATE TABLE IF NOT EXISTS accounts (
    id            TEXT PRIMARY KEY,
    email         TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    name          TEXT,
    created_at    TEXT NOT NULL DEFAULT (datetime('now'))
);

-- id is the user id; every other column stays NULL until onboarding fills it
CREATE TABLE IF NOT EXISTS profiles (
    id                TEXT PRIMARY KEY,
    name              TEXT,
    rhythm            TEXT,
    consistency       TEXT,
    support_level     TEXT,
    morning_person    INTEGER,
    main_goal         TEXT,
    current_challenge TEXT,
    created_at        TEXT NOT NULL DEFAULT (datetime('now')),
    updated_at        TEXT NOT NULL DEFAULT (datetime('now'))
);

-- One row per user per calendar day
CREATE TABLE IF NOT EXISTS daily_states (
    id                TEXT PRIMARY KEY,
    user_id           TEXT NOT NULL,
    state_date        TEXT NOT NULL,
    mission_day       INTEGER NOT NULL DEFAULT 1 CHECK (mission_day BETWEEN 1 AND 30),
    streak            INTEGER NOT NULL DEFAULT 0 CHECK (streak >= 0),
    focus_completed   INTEGER NOT NULL DEFAULT 0,
    checkin_done      INTEGER NOT NULL DEFAULT 0,
    mission_completed INTEGER NOT NULL DEFAULT 0,
    created_at        TEXT NOT NULL DEFAULT (datetime('now')),
    UNIQUE (user_id, state_date)
);

CREATE TABLE IF NOT EXISTS schema_version (
    version    INTEGER NOT NULL,
    applied_at TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE INDEX IF NOT EXISTS idx_daily_states_user ON daily_states(user_id, state_date);
"""

# ---------------------------------------------------------------------------
# V2: Action log (check-ins and other loosely structured user events)
# ---------------------------------------------------------------------------

_SCHEMA_V2 = """
CREATE TABLE IF NOT EXISTS action_log (
    id          TEXT PRIMARY KEY,
    user_id     TEXT NOT NULL,
    kind        TEXT NOT NULL,
    payload_enc TEXT,
    state_date  TEXT NOT NULL,
    created_at  TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE INDEX IF NOT EXISTS idx_actions_user    ON action_log(user_id);
CREATE INDEX IF NOT EXISTS idx_actions_kind    ON action_log(kind);
CREATE INDEX IF NOT EXISTS idx_actions_created ON action_log(created_at);
"""


class DatabaseError(Exception):
    """Raised when database operations fail."""


class RumoDatabase:
    """SQLite database manager for the Rumo profile store.

    Supports both file-based and in-memory (`:memory:`) databases.
    In-memory mode backs tests and runs without persistence.

    Usage::

        db = RumoDatabase(":memory:")
        db.initialize()
        conn = db.connection
        # ... use connection ...
        db.close()
    """

    def __init__(self, db_path: str = ":memory:") -> None:
        """Initialize database manager.

        Args:
            db_path: Path to SQLite file, or ":memory:" for in-memory DB.
        """
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None

    @property
    def is_persistent(self) -> bool:
        return self._db_path != ":memory:"

    @property
    def connection(self) -> sqlite3.Connection:
        """Get the active database connection.

        Raises:
            DatabaseError: If the database has not been initialized.
        """
        if self._conn is None:
            raise DatabaseError("Database not initialized. Call initialize() first.")
        return self._conn

    def initialize(self) -> None:
        """Create the database connection and ensure schema exists.

        Idempotent: safe to call multiple times.
        """
        if self._conn is not None:
            return

        if self.is_persistent:
            db_file = Path(self._db_path).expanduser()
            db_file.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(str(db_file))
        else:
            self._conn = sqlite3.connect(":memory:")

        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA foreign_keys=ON")

        self._ensure_schema()
        logger.info("Rumo database initialized: %s", self._db_path)

    def _ensure_schema(self) -> None:
        """Create tables if they don't exist and apply migrations."""
        conn = self.connection
        conn.executescript(_SCHEMA_V1)

        cursor = conn.execute("SELECT MAX(version) FROM schema_version")
        row = cursor.fetchone()
        current_version = row[0] if row[0] is not None else 0

        if current_version < 2:
            conn.executescript(_SCHEMA_V2)
            logger.info("Applied schema migration V2: action_log table")

        if current_version < SCHEMA_VERSION:
            conn.execute(
                "INSERT INTO schema_version (version) VALUES (?)",
                (SCHEMA_VERSION,),
            )
            conn.commit()
            logger.info(
                "Schema updated from version %d to %d", current_version, SCHEMA_VERSION
            )

    def get_schema_version(self) -> int:
        """Return the current schema version."""
        cursor = self.connection.execute("SELECT MAX(version) FROM schema_version")
        row = cursor.fetchone()
        return row[0] if row[0] is not None else 0

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.info("Rumo database closed")

    def __enter__(self) -> RumoDatabase:
        self.initialize()
        return self

    def __exit__(self, *args) -> None:
        self.close()
