"""SQLite-backed ProfileStore.

Reads and writes go to the ProfileRepository for whichever user the shared
Session is bound to. "Today" comes from an injectable clock so tests can pin
the calendar day.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Callable

from rumo.core.audit.logger import ActionLogger
from rumo.core.auth.base import Session
from rumo.core.storage.models import StoredDailyState, StoredProfile
from rumo.core.storage.repository import ProfileRepository
from rumo.domains.wellness.connectors import CHECKIN_ACTION, StoreError

logger = logging.getLogger(__name__)


class SqliteProfileStore:
    """ProfileStore backed by the local SQLite database.

    The first read or write of a calendar day opens that day's record (see
    ``ProfileRepository.ensure_daily_state``). A ``"checkin"`` action also
    sets today's ``checkin_done`` flag.
    """

    def __init__(
        self,
        repository: ProfileRepository,
        action_logger: ActionLogger,
        session: Session,
        *,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._repo = repository
        self._actions = action_logger
        self._session = session
        self._today = today
        self._loading = False

    @property
    def loading(self) -> bool:
        return self._loading

    def _user_id(self) -> str:
        if self._session.user_id is None:
            raise StoreError("No signed-in user; sign up or sign in first")
        return self._session.user_id

    async def read(self) -> tuple[StoredProfile | None, StoredDailyState | None]:
        """Return the profile and today's record for the session user.

        Signed-out sessions read as (None, None). Today's record is opened
        only once a profile exists.
        """
        if self._session.user_id is None:
            return None, None

        self._loading = True
        try:
            user_id = self._session.user_id
            profile = self._repo.get_profile(user_id)
            if profile is None:
                return None, None
            return profile, self._repo.ensure_daily_state(user_id, self._today())
        finally:
            self._loading = False

    async def update_profile(self, fields: dict[str, Any]) -> None:
        self._repo.upsert_profile(self._user_id(), fields)

    async def complete_onboarding(self, fields: dict[str, Any]) -> None:
        user_id = self._user_id()
        self._repo.upsert_profile(user_id, fields)
        self._repo.ensure_daily_state(user_id, self._today())
        logger.info("Onboarding saved for %s", user_id)

    async def complete_focus(self) -> None:
        self._repo.set_daily_flag(self._user_id(), self._today(), "focus_completed")

    async def complete_mission(self) -> None:
        self._repo.set_daily_flag(self._user_id(), self._today(), "mission_completed")

    async def log_action(self, kind: str, payload: dict[str, Any]) -> None:
        user_id = self._user_id()
        today = self._today()
        self._actions.log_action(user_id=user_id, kind=kind, payload=payload, state_date=today)
        if kind == CHECKIN_ACTION:
            self._repo.set_daily_flag(user_id, today, "checkin_done")
