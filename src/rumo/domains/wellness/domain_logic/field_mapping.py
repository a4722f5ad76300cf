"""Mapping between presentation-cased profile payloads and storage fields.

Screens speak ``supportLevel``/``morningPerson``; the store speaks
``support_level``/``morning_person``. Keys that are not stored profile fields
(``id``, ``currentDay``, ``streak``, ...) are never forwarded.
"""

from __future__ import annotations

from typing import Any

from rumo.domains.wellness.domain_logic.view_models import ViewUserProfile

# Presentation key -> storage column
PROFILE_FIELD_MAP: dict[str, str] = {
    "name": "name",
    "rhythm": "rhythm",
    "consistency": "consistency",
    "supportLevel": "support_level",
    "morningPerson": "morning_person",
    "mainGoal": "main_goal",
    "currentChallenge": "current_challenge",
}

_BOOLEAN_FIELDS = frozenset({"morningPerson"})


def to_storage_fields(partial: dict[str, Any]) -> dict[str, Any]:
    """Rename a partial profile update to storage casing.

    Only keys that are present with a non-None value are forwarded, so an
    omitted field is never cleared.
    """
    return {
        PROFILE_FIELD_MAP[key]: value
        for key, value in partial.items()
        if key in PROFILE_FIELD_MAP and value is not None
    }


def map_onboarding_fields(partial: dict[str, Any]) -> dict[str, Any]:
    """Build the storage partial for onboarding answers.

    String answers are kept only when truthy, so ``""`` counts as unanswered.
    The boolean ``morningPerson`` is kept whenever it is not None, so an
    explicit ``False`` is saved.
    """
    fields: dict[str, Any] = {}
    for key, column in PROFILE_FIELD_MAP.items():
        value = partial.get(key)
        if key in _BOOLEAN_FIELDS:
            if value is not None:
                fields[column] = value
        elif value:
            fields[column] = value
    return fields


def view_profile_fields(user: ViewUserProfile) -> dict[str, Any]:
    """Presentation-cased stored fields of a full view profile."""
    return {
        "name": user.name,
        "rhythm": user.rhythm,
        "consistency": user.consistency,
        "supportLevel": user.support_level,
        "morningPerson": user.morning_person,
        "mainGoal": user.main_goal,
        "currentChallenge": user.current_challenge,
    }
