"""Authentication interface consumed by onboarding.

Adapters return an ``AuthResult`` instead of raising for expected failures
(wrong password, duplicate email). Unexpected transport errors may still
raise; onboarding catches those at its boundary.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Protocol, runtime_checkable


class AuthErrorKind(enum.Enum):
    """Typed reason for an auth failure."""

    ALREADY_REGISTERED = "already_registered"
    INVALID_CREDENTIALS = "invalid_credentials"
    OTHER = "other"


@dataclass(frozen=True)
class AuthError:
    """An expected auth failure.

    ``message`` is human-readable. ``kind`` is set by adapters that know why
    they failed; remote services that only return a message leave it None.
    """

    message: str
    kind: AuthErrorKind | None = None


@dataclass(frozen=True)
class AuthResult:
    user_id: str | None = None
    error: AuthError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class Session:
    """The signed-in user, shared by the auth service and the profile store."""

    user_id: str | None = None
    email: str | None = None

    def bind(self, user_id: str, email: str | None = None) -> None:
        self.user_id = user_id
        self.email = email

    def clear(self) -> None:
        self.user_id = None
        self.email = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None


@runtime_checkable
class AuthService(Protocol):
    """Email/password sign-up and sign-in."""

    async def sign_up(self, email: str, password: str, name: str | None = None) -> AuthResult:
        """Create an account and sign it in."""
        ...

    async def sign_in(self, email: str, password: str) -> AuthResult:
        """Sign in to an existing account."""
        ...
