"""Onboarding orchestration — account creation/sign-in, then the profile save.

The save is awaited only after the auth call resolves, and never issued when
auth fails. Each attempt produces exactly one notification.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Literal, Protocol

from rumo.core.auth.base import AuthError, AuthErrorKind, AuthService
from rumo.domains.wellness.domain_logic.user_context import MissingContextError, UserContext

logger = logging.getLogger(__name__)

AuthMode = Literal["signup", "login"]
_AUTH_MODES = ("signup", "login")

# ---------------------------------------------------------------------------
# User-facing copy
# ---------------------------------------------------------------------------

MESSAGE_ALREADY_REGISTERED = "Este email já está cadastrado. Tente fazer login."
MESSAGE_INVALID_CREDENTIALS = "Email ou senha incorretos."
MESSAGE_UNEXPECTED = "Erro inesperado na autenticação."
MESSAGE_LOGIN_SUCCESS = "Login realizado com sucesso!"
MESSAGE_SIGNUP_SUCCESS = "Conta criada com sucesso!"
MESSAGE_PROFILE_SAVED = "Perfil salvo com sucesso!"
MESSAGE_INCOMPLETE_CREDENTIALS = "Informe email e senha para continuar."

# Substrings hosted auth services put in their error messages. Only consulted
# when the adapter did not supply an AuthErrorKind.
_ALREADY_REGISTERED_MARKER = "already registered"
_INVALID_CREDENTIALS_MARKER = "Invalid login credentials"


@dataclass(frozen=True)
class Credentials:
    email: str
    password: str
    mode: AuthMode = "signup"

    def __post_init__(self) -> None:
        if self.mode not in _AUTH_MODES:
            raise ValueError(f"mode must be one of {_AUTH_MODES}, got {self.mode!r}")


@dataclass(frozen=True)
class Notification:
    level: Literal["success", "error"]
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"level": self.level, "message": self.message}


class Notifier(Protocol):
    def notify(self, notification: Notification) -> None:
        ...


class CollectingNotifier:
    """Notifier that keeps what it was sent, for callers that render later."""

    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)


def classify_auth_error(error: AuthError) -> AuthErrorKind:
    """Return the adapter's typed kind, falling back to message matching."""
    if error.kind is not None:
        return error.kind

    # Fragile: depends on the service's wording.
    logger.debug("Auth error has no kind; classifying by message")
    if _ALREADY_REGISTERED_MARKER in error.message:
        return AuthErrorKind.ALREADY_REGISTERED
    if _INVALID_CREDENTIALS_MARKER in error.message:
        return AuthErrorKind.INVALID_CREDENTIALS
    return AuthErrorKind.OTHER


def failure_message(kind: AuthErrorKind, mode: AuthMode, detail: str) -> str:
    if kind is AuthErrorKind.ALREADY_REGISTERED:
        return MESSAGE_ALREADY_REGISTERED
    if kind is AuthErrorKind.INVALID_CREDENTIALS:
        return MESSAGE_INVALID_CREDENTIALS
    action = "entrar" if mode == "login" else "criar conta"
    return f"Erro ao {action}: {detail}"


class OnboardingOrchestrator:
    """Runs one onboarding attempt against injected collaborators."""

    def __init__(
        self,
        auth: AuthService,
        user_context: UserContext,
        notifier: Notifier,
    ) -> None:
        self._auth = auth
        self._user_context = user_context
        self._notifier = notifier

    def _emit(self, notification: Notification) -> Notification:
        self._notifier.notify(notification)
        return notification

    async def complete(
        self,
        data: dict[str, Any],
        credentials: Credentials | None = None,
    ) -> Notification:
        """Authenticate (when credentials are given), then save onboarding answers.

        Without credentials the answers are saved directly for the session's
        current user; that path is for local development. On either path any
        unexpected exception is logged and reported as a generic error.
        """
        if credentials is None:
            try:
                await self._user_context.complete_onboarding(dict(data))
            except MissingContextError:
                raise
            except Exception:
                logger.exception("Unexpected failure saving onboarding without credentials")
                return self._emit(Notification("error", MESSAGE_UNEXPECTED))
            return self._emit(Notification("success", MESSAGE_PROFILE_SAVED))

        mode = credentials.mode
        try:
            if mode == "login":
                result = await self._auth.sign_in(credentials.email, credentials.password)
            else:
                result = await self._auth.sign_up(
                    credentials.email, credentials.password, data.get("name")
                )

            if result.error is not None:
                kind = classify_auth_error(result.error)
                logger.info("Onboarding %s rejected: %s", mode, kind.value)
                return self._emit(Notification(
                    "error", failure_message(kind, mode, result.error.message)
                ))

            payload = dict(data)
            if mode == "login":
                # Keep the existing account's name
                payload.pop("name", None)

            await self._user_context.complete_onboarding(payload)
        except MissingContextError:
            raise
        except Exception:
            logger.exception("Unexpected failure during onboarding %s", mode)
            return self._emit(Notification("error", MESSAGE_UNEXPECTED))

        return self._emit(Notification(
            "success", MESSAGE_LOGIN_SUCCESS if mode == "login" else MESSAGE_SIGNUP_SUCCESS
        ))
