"""UserContext — derived daily state plus the mutations screens invoke.

One UserContext exists per signed-in session. It is the only client of the
ProfileStore: every mutation is forwarded to the store as an independent call,
then the store is re-read so derived state reflects the store's result.

Known limitation: ``complete_focus``, ``complete_mission`` and
``add_check_in`` all touch today's record with no transaction between them.
Two rapid calls race at the store; last write wins.
"""

from __future__ import annotations

import logging
from typing import Any

from rumo.core.storage.models import StoredDailyState, StoredProfile
from rumo.domains.wellness.connectors import CHECKIN_ACTION, ProfileStore
from rumo.domains.wellness.domain_logic.field_mapping import (
    map_onboarding_fields,
    to_storage_fields,
    view_profile_fields,
)
from rumo.domains.wellness.domain_logic.projection import ProjectionCache
from rumo.domains.wellness.domain_logic.view_models import (
    DEFAULT_MISSION_DAY,
    ViewDailyFocus,
    ViewUserProfile,
)

logger = logging.getLogger(__name__)


class MissingContextError(RuntimeError):
    """Raised when a UserContext is used before ``open()`` or after ``close()``."""


class UserContext:
    """Daily-state layer over an injected ProfileStore.

    Usage::

        async with UserContext(store) as ctx:
            if ctx.is_onboarded:
                await ctx.complete_focus()
                print(ctx.today_focus.completed)
    """

    def __init__(self, store: ProfileStore) -> None:
        self._store = store
        self._cache = ProjectionCache()
        self._profile: StoredProfile | None = None
        self._today_state: StoredDailyState | None = None
        self._open = False
        # Bumped on every open and close; a read started under an older
        # generation is stale.
        self._generation = 0

    # ---------------------------------------------------------------
    # Lifecycle
    # ---------------------------------------------------------------

    @property
    def is_open(self) -> bool:
        return self._open

    async def open(self) -> None:
        """Mark the context live and load the initial state."""
        self._open = True
        self._generation += 1
        await self.refresh()

    async def close(self) -> None:
        """Tear down. Reads still in flight are discarded when they land."""
        self._open = False
        self._generation += 1
        self._profile = None
        self._today_state = None

    async def __aenter__(self) -> UserContext:
        await self.open()
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()

    def _require_open(self, operation: str) -> None:
        if not self._open:
            raise MissingContextError(f"{operation} must be used within an open UserContext")

    async def refresh(self) -> None:
        """Re-read the store and keep the result if anything changed."""
        self._require_open("refresh")
        generation = self._generation
        profile, today_state = await self._store.read()
        if generation != self._generation:
            logger.debug("Discarding store read that resolved after close")
            return

        # Keep the old references when content is unchanged so the projection
        # cache does not recompute.
        if profile != self._profile:
            self._profile = profile
        if today_state != self._today_state:
            self._today_state = today_state

    # ---------------------------------------------------------------
    # Derived state
    # ---------------------------------------------------------------

    @property
    def user(self) -> ViewUserProfile | None:
        self._require_open("user")
        return self._cache.get(self._profile, self._today_state)[0]

    @property
    def today_focus(self) -> ViewDailyFocus | None:
        self._require_open("today_focus")
        return self._cache.get(self._profile, self._today_state)[1]

    @property
    def mission_day(self) -> int:
        self._require_open("mission_day")
        state = self._today_state
        return (state.mission_day if state else 0) or DEFAULT_MISSION_DAY

    @property
    def mission_completed_today(self) -> bool:
        self._require_open("mission_completed_today")
        return bool(self._today_state and self._today_state.mission_completed)

    @property
    def is_onboarded(self) -> bool:
        self._require_open("is_onboarded")
        return self._profile is not None

    @property
    def loading(self) -> bool:
        return self._store.loading

    def snapshot(self) -> dict[str, Any]:
        """Everything a screen reads, in presentation casing."""
        user = self.user
        focus = self.today_focus
        return {
            "user": user.to_dict() if user else None,
            "todayFocus": focus.to_dict() if focus else None,
            "missionDay": self.mission_day,
            "missionCompletedToday": self.mission_completed_today,
            "isOnboarded": self.is_onboarded,
            "loading": self.loading,
        }

    # ---------------------------------------------------------------
    # Mutations
    # ---------------------------------------------------------------

    async def update_profile(self, partial: dict[str, Any]) -> None:
        """Forward the present, non-None profile fields in storage casing."""
        self._require_open("update_profile")
        fields = to_storage_fields(partial)
        if not fields:
            logger.debug("update_profile called with no stored fields; nothing to write")
            return
        await self._store.update_profile(fields)
        await self.refresh()

    async def set_user(self, user: ViewUserProfile) -> None:
        """Compatibility wrapper: write back every stored field of ``user``."""
        await self.update_profile(view_profile_fields(user))

    async def complete_focus(self) -> None:
        self._require_open("complete_focus")
        await self._store.complete_focus()
        await self.refresh()

    async def add_check_in(self, check_in: dict[str, Any]) -> None:
        """Log the check-in as an opaque action.

        ``checkin_done`` is the store's business; it is not set here.
        """
        self._require_open("add_check_in")
        await self._store.log_action(CHECKIN_ACTION, dict(check_in))
        await self.refresh()

    async def complete_onboarding(self, partial: dict[str, Any]) -> None:
        self._require_open("complete_onboarding")
        await self._store.complete_onboarding(map_onboarding_fields(partial))
        await self.refresh()

    async def complete_mission(self) -> None:
        """Mark today's mission done. Day advancement and wraparound stay with the store."""
        self._require_open("complete_mission")
        await self._store.complete_mission()
        await self.refresh()

    async def set_today_focus(self, focus: ViewDailyFocus) -> None:
        # Focus content is a fixed template; there is nowhere to store a choice.
        self._require_open("set_today_focus")
        logger.info("set_today_focus called with %s; focus is static, ignoring", focus.id)

    async def reset_mission_cycle(self) -> None:
        # Mission day lives in the store's daily records; nothing to reset here.
        self._require_open("reset_mission_cycle")
        logger.info("reset_mission_cycle called; cycle reset is handled by the store")
