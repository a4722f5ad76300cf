"""Data models for the profile/state persistence layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any

# Length of the weight-loss mission cycle; mission_day runs 1..30 then wraps.
MISSION_CYCLE_LENGTH = 30

# Profile columns a caller may write. Order matches the profiles table.
PROFILE_FIELDS = (
    "name",
    "rhythm",
    "consistency",
    "support_level",
    "morning_person",
    "main_goal",
    "current_challenge",
)

# Per-day completion flags a caller may set.
DAILY_FLAGS = ("focus_completed", "checkin_done", "mission_completed")


class InvalidDailyStateError(ValueError):
    """Raised when a daily state record violates its range invariants."""


@dataclass
class StoredProfile:
    """A user's persisted profile.

    ``id`` never changes once created. Every other field stays ``None``
    until onboarding fills it in.
    """

    id: str
    name: str | None = None
    rhythm: str | None = None
    consistency: str | None = None
    support_level: str | None = None
    morning_person: bool | None = None
    main_goal: str | None = None
    current_challenge: str | None = None


@dataclass
class StoredDailyState:
    """Today's (or any one day's) mission and completion record."""

    state_date: date
    mission_day: int = 1
    streak: int = 0
    focus_completed: bool = False
    checkin_done: bool = False
    mission_completed: bool = False

    def __post_init__(self) -> None:
        if not 1 <= self.mission_day <= MISSION_CYCLE_LENGTH:
            raise InvalidDailyStateError(
                f"mission_day must be in [1, {MISSION_CYCLE_LENGTH}], got {self.mission_day}"
            )
        if self.streak < 0:
            raise InvalidDailyStateError(f"streak must be >= 0, got {self.streak}")


@dataclass
class Account:
    """Credentials record owned by the local auth service."""

    id: str
    email: str
    password_hash: str
    name: str | None = None
    created_at: str = ""


@dataclass
class ActionLogEntry:
    """A loosely structured user event (e.g. a check-in)."""

    id: str
    user_id: str
    kind: str
    state_date: str
    payload: dict[str, Any] = field(default_factory=dict)
    created_at: str = ""
