"""Action log — append-only record of loosely structured user events.

Check-ins and other UI-originated events are stored here as opaque,
Fernet-encrypted payloads tagged with a ``kind``. Nothing in this module
interprets the payload.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone
from typing import Any

from rumo.core.storage.database import RumoDatabase
from rumo.core.storage.encryption import PayloadEncryptor
from rumo.core.storage.models import ActionLogEntry

logger = logging.getLogger(__name__)


class ActionLogger:
    """Records action events to the ``action_log`` SQLite table.

    All writes are committed immediately.

    Usage::

        actions = ActionLogger(db, encryptor)
        entry_id = actions.log_action(
            user_id="u-1",
            kind="checkin",
            payload={"mood": 4},
            state_date=date.today(),
        )
    """

    def __init__(self, database: RumoDatabase, encryptor: PayloadEncryptor) -> None:
        self._db = database
        self._enc = encryptor

    # ---------------------------------------------------------------
    # Write
    # ---------------------------------------------------------------

    def log_action(
        self,
        *,
        user_id: str,
        kind: str,
        payload: dict[str, Any] | None,
        state_date: date,
    ) -> str:
        """Insert an action event and return its UUID.

        Args:
            user_id: Owner of the event.
            kind: Event tag, e.g. ``"checkin"``.
            payload: Opaque mapping; encrypted before storage.
            state_date: Calendar day the event belongs to.

        Returns:
            The generated event ID.
        """
        if not kind:
            raise ValueError("Action kind must not be empty")

        event_id = str(uuid.uuid4())
        conn = self._db.connection
        conn.execute(
            """INSERT INTO action_log (id, user_id, kind, payload_enc, state_date, created_at)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (
                event_id,
                user_id,
                kind,
                self._enc.encrypt(payload) or None,
                state_date.isoformat(),
                datetime.now(timezone.utc).isoformat(),
            ),
        )
        conn.commit()
        logger.info("Logged %s action %s for %s", kind, event_id, user_id)
        return event_id

    # ---------------------------------------------------------------
    # Read
    # ---------------------------------------------------------------

    def get_actions(
        self,
        user_id: str,
        *,
        kind: str | None = None,
        since: str | None = None,
        limit: int = 50,
    ) -> list[ActionLogEntry]:
        """Query a user's actions, newest first, with payloads decrypted."""
        conditions = ["user_id = ?"]
        params: list[Any] = [user_id]

        if kind:
            conditions.append("kind = ?")
            params.append(kind)
        if since:
            conditions.append("created_at >= ?")
            params.append(since)

        where = " AND ".join(conditions)
        query = f"SELECT * FROM action_log WHERE {where} ORDER BY created_at DESC, rowid DESC LIMIT ?"
        params.append(limit)

        rows = self._db.connection.execute(query, params).fetchall()
        return [
            ActionLogEntry(
                id=row["id"],
                user_id=row["user_id"],
                kind=row["kind"],
                state_date=row["state_date"],
                payload=self._enc.decrypt(row["payload_enc"]),
                created_at=row["created_at"],
            )
            for row in rows
        ]

    def count_actions(self, user_id: str, *, kind: str | None = None) -> int:
        """Count a user's actions, optionally of one kind."""
        if kind:
            row = self._db.connection.execute(
                "SELECT COUNT(*) FROM action_log WHERE user_id = ? AND kind = ?",
                (user_id, kind),
            ).fetchone()
        else:
            row = self._db.connection.execute(
                "SELECT COUNT(*) FROM action_log WHERE user_id = ?", (user_id,)
            ).fetchone()
        return row[0]
