"""Profile repository — CRUD for accounts, profiles and per-day states.

The repository mediates between the storage models (StoredProfile,
StoredDailyState, Account) and the SQLite database. It holds no notion of a
"current user"; callers pass user ids explicitly.
"""

from __future__ import annotations

import logging
import sqlite3
import uuid
from datetime import date, datetime, timezone
from typing import Any

from rumo.core.storage.database import RumoDatabase
from rumo.core.storage.models import (
    DAILY_FLAGS,
    PROFILE_FIELDS,
    Account,
    StoredDailyState,
    StoredProfile,
)

logger = logging.getLogger(__name__)


class RepositoryError(Exception):
    """Raised when repository operations fail."""


class DuplicateAccountError(RepositoryError):
    """Raised when an account with the same email already exists."""


class ProfileRepository:
    """CRUD repository for the profile store.

    Usage::

        db = RumoDatabase(":memory:")
        db.initialize()
        repo = ProfileRepository(db)

        repo.upsert_profile(user_id, {"rhythm": "daily"})
        state = repo.ensure_daily_state(user_id, date.today())
    """

    def __init__(self, database: RumoDatabase) -> None:
        self._db = database

    @staticmethod
    def _new_id() -> str:
        return str(uuid.uuid4())

    @staticmethod
    def _now_iso() -> str:
        return datetime.now(timezone.utc).isoformat()

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    def create_account(self, email: str, password_hash: str, name: str | None = None) -> Account:
        """Insert a new account.

        Raises:
            DuplicateAccountError: If ``email`` is already registered.
        """
        account = Account(
            id=self._new_id(),
            email=email,
            password_hash=password_hash,
            name=name,
            created_at=self._now_iso(),
        )
        conn = self._db.connection
        try:
            conn.execute(
                """INSERT INTO accounts (id, email, password_hash, name, created_at)
                   VALUES (?, ?, ?, ?, ?)""",
                (account.id, account.email, account.password_hash, account.name, account.created_at),
            )
        except sqlite3.IntegrityError as exc:
            raise DuplicateAccountError(f"Account already exists for {email!r}") from exc
        conn.commit()
        logger.info("Created account %s", account.id)
        return account

    def get_account_by_email(self, email: str) -> Account | None:
        row = self._db.connection.execute(
            "SELECT * FROM accounts WHERE email = ?", (email,)
        ).fetchone()
        if row is None:
            return None
        return Account(
            id=row["id"],
            email=row["email"],
            password_hash=row["password_hash"],
            name=row["name"],
            created_at=row["created_at"],
        )

    # ------------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------------

    def get_profile(self, user_id: str) -> StoredProfile | None:
        """Return the user's profile, or None if onboarding never wrote one."""
        row = self._db.connection.execute(
            "SELECT * FROM profiles WHERE id = ?", (user_id,)
        ).fetchone()
        if row is None:
            return None
        return self._row_to_profile(row)

    def upsert_profile(self, user_id: str, fields: dict[str, Any]) -> StoredProfile:
        """Create the profile if missing, then write only the given columns.

        Columns not named in ``fields`` are left untouched.

        Raises:
            RepositoryError: If ``fields`` names an unknown column.
        """
        unknown = set(fields) - set(PROFILE_FIELDS)
        if unknown:
            raise RepositoryError(
                f"Unknown profile fields: {sorted(unknown)}. Valid: {PROFILE_FIELDS}"
            )

        conn = self._db.connection
        conn.execute("INSERT OR IGNORE INTO profiles (id) VALUES (?)", (user_id,))

        if fields:
            # Column names are safe — validated above against PROFILE_FIELDS
            assignments = ", ".join(f"{name} = ?" for name in fields)
            params: list[Any] = [
                int(value) if name == "morning_person" and value is not None else value
                for name, value in fields.items()
            ]
            params.extend([self._now_iso(), user_id])
            conn.execute(
                f"UPDATE profiles SET {assignments}, updated_at = ? WHERE id = ?",
                params,
            )
        conn.commit()
        logger.info("Profile %s updated (%d field(s))", user_id, len(fields))

        profile = self.get_profile(user_id)
        if profile is None:
            raise RepositoryError(f"Profile {user_id} vanished after upsert")
        return profile

    # ------------------------------------------------------------------
    # Daily states
    # ------------------------------------------------------------------

    def get_daily_state(self, user_id: str, state_date: date) -> StoredDailyState | None:
        row = self._db.connection.execute(
            "SELECT * FROM daily_states WHERE user_id = ? AND state_date = ?",
            (user_id, state_date.isoformat()),
        ).fetchone()
        if row is None:
            return None
        return self._row_to_state(row)

    def get_latest_daily_state_before(
        self, user_id: str, state_date: date
    ) -> StoredDailyState | None:
        """Most recent record strictly before ``state_date``."""
        row = self._db.connection.execute(
            """SELECT * FROM daily_states
               WHERE user_id = ? AND state_date < ?
               ORDER BY state_date DESC LIMIT 1""",
            (user_id, state_date.isoformat()),
        ).fetchone()
        if row is None:
            return None
        return self._row_to_state(row)

    def ensure_daily_state(self, user_id: str, state_date: date) -> StoredDailyState:
        """Return the record for ``state_date``, creating it on first use.

        A new record carries ``mission_day`` and ``streak`` over from the
        user's most recent earlier record with all flags cleared, or starts at
        day 1 with streak 0. Advancing the mission day is not done here.
        """
        existing = self.get_daily_state(user_id, state_date)
        if existing is not None:
            return existing

        previous = self.get_latest_daily_state_before(user_id, state_date)
        mission_day = previous.mission_day if previous else 1
        streak = previous.streak if previous else 0

        conn = self._db.connection
        conn.execute(
            """INSERT OR IGNORE INTO daily_states
               (id, user_id, state_date, mission_day, streak)
               VALUES (?, ?, ?, ?, ?)""",
            (self._new_id(), user_id, state_date.isoformat(), mission_day, streak),
        )
        conn.commit()
        logger.info("Opened daily state for %s on %s (mission day %d)", user_id, state_date, mission_day)

        state = self.get_daily_state(user_id, state_date)
        if state is None:
            raise RepositoryError(f"Daily state for {user_id} on {state_date} vanished after write")
        return state

    def set_daily_flag(self, user_id: str, state_date: date, flag: str) -> StoredDailyState:
        """Set one completion flag on the day's record (creating it if needed).

        Raises:
            RepositoryError: If ``flag`` is not a known daily flag.
        """
        if flag not in DAILY_FLAGS:
            raise RepositoryError(f"Invalid daily flag: {flag!r}. Valid: {DAILY_FLAGS}")

        self.ensure_daily_state(user_id, state_date)
        conn = self._db.connection
        # Column name is safe — validated above against DAILY_FLAGS
        conn.execute(
            f"UPDATE daily_states SET {flag} = 1 WHERE user_id = ? AND state_date = ?",
            (user_id, state_date.isoformat()),
        )
        conn.commit()

        state = self.get_daily_state(user_id, state_date)
        if state is None:
            raise RepositoryError(f"Daily state for {user_id} on {state_date} vanished after write")
        return state

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _row_to_profile(row: Any) -> StoredProfile:
        morning_person = row["morning_person"]
        return StoredProfile(
            id=row["id"],
            name=row["name"],
            rhythm=row["rhythm"],
            consistency=row["consistency"],
            support_level=row["support_level"],
            morning_person=bool(morning_person) if morning_person is not None else None,
            main_goal=row["main_goal"],
            current_challenge=row["current_challenge"],
        )

    @staticmethod
    def _row_to_state(row: Any) -> StoredDailyState:
        return StoredDailyState(
            state_date=date.fromisoformat(row["state_date"]),
            mission_day=row["mission_day"],
            streak=row["streak"],
            focus_completed=bool(row["focus_completed"]),
            checkin_done=bool(row["checkin_done"]),
            mission_completed=bool(row["mission_completed"]),
        )
