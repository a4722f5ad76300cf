"""Tests for presentation <-> storage profile field mapping."""

from __future__ import annotations

from conftest import make_profile

from rumo.domains.wellness.domain_logic.field_mapping import (
    map_onboarding_fields,
    to_storage_fields,
    view_profile_fields,
)
from rumo.domains.wellness.domain_logic.projection import project_profile


class TestOnboardingMapping:
    def test_empty_string_dropped_false_kept(self):
        result = map_onboarding_fields({"name": "", "rhythm": "daily", "morningPerson": False})
        assert result == {"rhythm": "daily", "morning_person": False}

    def test_all_fields_renamed(self):
        result = map_onboarding_fields({
            "name": "Alice",
            "rhythm": "daily",
            "consistency": "often",
            "supportLevel": "high",
            "morningPerson": True,
            "mainGoal": "weightloss",
            "currentChallenge": "time",
        })
        assert result == {
            "name": "Alice",
            "rhythm": "daily",
            "consistency": "often",
            "support_level": "high",
            "morning_person": True,
            "main_goal": "weightloss",
            "current_challenge": "time",
        }

    def test_none_morning_person_dropped(self):
        assert map_onboarding_fields({"morningPerson": None}) == {}

    def test_missing_keys_dropped(self):
        assert map_onboarding_fields({}) == {}

    def test_unknown_and_derived_keys_ignored(self):
        result = map_onboarding_fields({"id": "x", "streak": 4, "currentDay": 2, "rhythm": "weekly"})
        assert result == {"rhythm": "weekly"}


class TestUpdateMapping:
    def test_renames_present_fields(self):
        assert to_storage_fields({"supportLevel": "low", "mainGoal": "energy"}) == {
            "support_level": "low",
            "main_goal": "energy",
        }

    def test_none_values_not_forwarded(self):
        assert to_storage_fields({"name": None, "rhythm": "daily"}) == {"rhythm": "daily"}

    def test_empty_string_forwarded_on_update(self):
        # Updates forward anything present; only onboarding treats "" as unset.
        assert to_storage_fields({"currentChallenge": ""}) == {"current_challenge": ""}

    def test_false_forwarded(self):
        assert to_storage_fields({"morningPerson": False}) == {"morning_person": False}

    def test_id_and_derived_fields_ignored(self):
        assert to_storage_fields({"id": "other", "streak": 9, "todayCompleted": True}) == {}


class TestViewProfileFields:
    def test_round_trips_through_storage_names(self):
        user = project_profile(make_profile(), None)
        fields = to_storage_fields(view_profile_fields(user))
        assert fields == {
            "name": "Alice",
            "rhythm": "daily",
            "consistency": "sometimes",
            "support_level": "high",
            "morning_person": True,
            "main_goal": "weightloss",
            "current_challenge": "snacking",
        }
