"""Shared test fixtures for Rumo tests."""

from __future__ import annotations

import dataclasses
import sys
from datetime import date
from pathlib import Path
from typing import Any

import pytest

# ---------------------------------------------------------------------------
# Test hermeticity
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _force_hermetic_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENCRYPTION_KEY", "")
    monkeypatch.setenv("DEV_USER_ID", "")
    monkeypatch.setenv("BCRYPT_ROUNDS", "4")

# Allow running tests without `pip install -e .` by making `src/` importable.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_SRC_DIR = _PROJECT_ROOT / "src"
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from rumo.core.auth.base import AuthError, AuthErrorKind, AuthResult, Session  # noqa: E402
from rumo.core.storage.models import StoredDailyState, StoredProfile  # noqa: E402

TODAY = date(2026, 3, 14)


def make_profile(**overrides: Any) -> StoredProfile:
    """Create an onboarded profile with sensible defaults."""
    defaults = dict(
        id="user-1",
        name="Alice",
        rhythm="daily",
        consistency="sometimes",
        support_level="high",
        morning_person=True,
        main_goal="weightloss",
        current_challenge="snacking",
    )
    defaults.update(overrides)
    return StoredProfile(**defaults)


def make_state(**overrides: Any) -> StoredDailyState:
    """Create today's state record with sensible defaults."""
    defaults = dict(
        state_date=TODAY,
        mission_day=7,
        streak=3,
        focus_completed=False,
        checkin_done=False,
        mission_completed=False,
    )
    defaults.update(overrides)
    return StoredDailyState(**defaults)


# ---------------------------------------------------------------------------
# Recording profile store
# ---------------------------------------------------------------------------

class RecordingProfileStore:
    """In-memory ProfileStore that records every call.

    Writes replace the stored objects (never mutate them in place), so
    identity changes exactly when content changes, as with a real backend.
    ``log_action`` only records; it does not touch ``checkin_done``.
    """

    WRITE_METHODS = frozenset({
        "update_profile",
        "complete_focus",
        "complete_mission",
        "complete_onboarding",
        "log_action",
    })

    def __init__(
        self,
        profile: StoredProfile | None = None,
        today_state: StoredDailyState | None = None,
        *,
        user_id: str = "user-1",
    ) -> None:
        self.profile = profile
        self.today_state = today_state
        self.user_id = user_id
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.loading = False

    @property
    def write_calls(self) -> list[tuple[str, tuple[Any, ...]]]:
        return [c for c in self.calls if c[0] in self.WRITE_METHODS]

    def calls_to(self, method: str) -> list[tuple[Any, ...]]:
        return [args for name, args in self.calls if name == method]

    def _today(self) -> StoredDailyState:
        if self.today_state is None:
            self.today_state = StoredDailyState(state_date=TODAY)
        return self.today_state

    def _set_flag(self, flag: str) -> None:
        state = self._today()
        if not getattr(state, flag):
            self.today_state = dataclasses.replace(state, **{flag: True})

    async def read(self):
        self.calls.append(("read", ()))
        return self.profile, self.today_state

    async def update_profile(self, fields: dict[str, Any]) -> None:
        self.calls.append(("update_profile", (dict(fields),)))
        if self.profile is None:
            self.profile = StoredProfile(id=self.user_id, **fields)
        else:
            self.profile = dataclasses.replace(self.profile, **fields)

    async def complete_onboarding(self, fields: dict[str, Any]) -> None:
        self.calls.append(("complete_onboarding", (dict(fields),)))
        if self.profile is None:
            self.profile = StoredProfile(id=self.user_id, **fields)
        elif fields:
            self.profile = dataclasses.replace(self.profile, **fields)

    async def complete_focus(self) -> None:
        self.calls.append(("complete_focus", ()))
        self._set_flag("focus_completed")

    async def complete_mission(self) -> None:
        self.calls.append(("complete_mission", ()))
        self._set_flag("mission_completed")

    async def log_action(self, kind: str, payload: dict[str, Any]) -> None:
        self.calls.append(("log_action", (kind, dict(payload))))


@pytest.fixture
def recording_store() -> RecordingProfileStore:
    """A store holding an onboarded profile and today's record."""
    return RecordingProfileStore(make_profile(), make_state())


@pytest.fixture
def empty_store() -> RecordingProfileStore:
    """A store for a user who has not onboarded yet."""
    return RecordingProfileStore()


# ---------------------------------------------------------------------------
# Fake auth service
# ---------------------------------------------------------------------------

class FakeAuthService:
    """AuthService double returning canned results and recording calls."""

    def __init__(
        self,
        *,
        sign_up_result: AuthResult | None = None,
        sign_in_result: AuthResult | None = None,
        raises: Exception | None = None,
    ) -> None:
        self._sign_up = sign_up_result or AuthResult(user_id="user-1")
        self._sign_in = sign_in_result or AuthResult(user_id="user-1")
        self._raises = raises
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    async def sign_up(self, email: str, password: str, name: str | None = None) -> AuthResult:
        self.calls.append(("sign_up", (email, password, name)))
        if self._raises is not None:
            raise self._raises
        return self._sign_up

    async def sign_in(self, email: str, password: str) -> AuthResult:
        self.calls.append(("sign_in", (email, password)))
        if self._raises is not None:
            raise self._raises
        return self._sign_in


def auth_failure(message: str, kind: AuthErrorKind | None = None) -> AuthResult:
    return AuthResult(error=AuthError(message, kind))


# ---------------------------------------------------------------------------
# In-memory storage fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def rumo_db():
    """Create an in-memory RumoDatabase for testing."""
    from rumo.core.storage.database import RumoDatabase

    db = RumoDatabase(":memory:")
    db.initialize()
    yield db
    db.close()


@pytest.fixture
def payload_encryptor():
    """Create a PayloadEncryptor with a test key."""
    from cryptography.fernet import Fernet

    from rumo.core.storage.encryption import PayloadEncryptor

    return PayloadEncryptor(Fernet.generate_key().decode())


@pytest.fixture
def profile_repository(rumo_db):
    """Create a ProfileRepository backed by in-memory SQLite."""
    from rumo.core.storage.repository import ProfileRepository

    return ProfileRepository(rumo_db)


@pytest.fixture
def action_logger(rumo_db, payload_encryptor):
    """Create an ActionLogger backed by in-memory SQLite."""
    from rumo.core.audit.logger import ActionLogger

    return ActionLogger(rumo_db, payload_encryptor)


@pytest.fixture
def session() -> Session:
    return Session()
