"""Profile store connectors — abstraction layer for profile/state persistence."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from rumo.core.storage.models import StoredDailyState, StoredProfile


# Action tag for check-ins in the action log.
CHECKIN_ACTION = "checkin"


class StoreError(Exception):
    """Raised when a profile store cannot serve a request."""


@runtime_checkable
class ProfileStore(Protocol):
    """Abstract interface for the signed-in user's profile and today's state.

    The daily-state layer calls these methods without knowing whether data
    lives in SQLite, a hosted backend, or a test double. Day rollover and
    mission-day advancement belong to the store.
    """

    @property
    def loading(self) -> bool:
        """True while a read is in flight."""
        ...

    async def read(self) -> tuple[StoredProfile | None, StoredDailyState | None]:
        """Current profile and today's state record; either may be absent."""
        ...

    async def update_profile(self, fields: dict[str, Any]) -> None:
        """Write the given storage-cased profile fields; others untouched."""
        ...

    async def complete_focus(self) -> None:
        """Set today's ``focus_completed``."""
        ...

    async def complete_mission(self) -> None:
        """Set today's ``mission_completed``."""
        ...

    async def complete_onboarding(self, fields: dict[str, Any]) -> None:
        """Persist onboarding answers, creating the profile if needed."""
        ...

    async def log_action(self, kind: str, payload: dict[str, Any]) -> None:
        """Append an opaque action event tagged ``kind``."""
        ...
