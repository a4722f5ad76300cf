"""View-facing models derived from the stored profile and today's state."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

# ---------------------------------------------------------------------------
# Defaults used when today's state record is absent
# ---------------------------------------------------------------------------

DEFAULT_MISSION_DAY = 1
DEFAULT_STREAK = 0

# Pillar rotation is not modeled yet; every user sits on pillar 1.
CURRENT_PILLAR = 1

# ---------------------------------------------------------------------------
# Daily focus template (identical for every user and day)
# ---------------------------------------------------------------------------

FOCUS_ID = "daily-focus-1"
FOCUS_TITLE = "Planejamento Alimentar"
FOCUS_DESCRIPTION = "Organize suas refeições do dia"
FOCUS_PILLAR_ID = 1
FOCUS_TYPE = "action"
FOCUS_DURATION = "10 min"


@dataclass(frozen=True)
class ViewUserProfile:
    """The profile as screens see it, plus fields derived from today's state."""

    id: str
    name: str | None
    rhythm: str | None
    consistency: str | None
    support_level: str | None
    morning_person: bool | None
    main_goal: str | None
    current_challenge: str | None
    current_day: int
    current_pillar: int
    streak: int
    today_completed: bool
    last_check_in: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        """Presentation-cased mapping; absent values are omitted."""
        data = {
            "id": self.id,
            "name": self.name,
            "rhythm": self.rhythm,
            "consistency": self.consistency,
            "supportLevel": self.support_level,
            "morningPerson": self.morning_person,
            "mainGoal": self.main_goal,
            "currentChallenge": self.current_challenge,
            "currentDay": self.current_day,
            "currentPillar": self.current_pillar,
            "streak": self.streak,
            "todayCompleted": self.today_completed,
            "lastCheckIn": self.last_check_in.isoformat() if self.last_check_in else None,
        }
        return {k: v for k, v in data.items() if v is not None}


@dataclass(frozen=True)
class ViewDailyFocus:
    """Today's single actionable task."""

    id: str
    title: str
    description: str
    pillar_id: int
    type: str
    duration: str
    completed: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "pillarId": self.pillar_id,
            "type": self.type,
            "duration": self.duration,
            "completed": self.completed,
        }
