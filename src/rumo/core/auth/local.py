"""Local email/password auth backed by the accounts table.

Error messages follow the wording of hosted auth services ("User already
registered", "Invalid login credentials") so message-based classification
keeps working when a remote adapter is swapped in.
"""

from __future__ import annotations

import asyncio
import logging

from rumo.core.auth.base import AuthError, AuthErrorKind, AuthResult, Session
from rumo.core.auth.passwords import hash_password, verify_password
from rumo.core.storage.repository import DuplicateAccountError, ProfileRepository

logger = logging.getLogger(__name__)

MESSAGE_ALREADY_REGISTERED = "User already registered"
MESSAGE_INVALID_CREDENTIALS = "Invalid login credentials"


def _normalize_email(email: str) -> str:
    return email.strip().casefold()


class LocalAuthService:
    """AuthService over ProfileRepository accounts.

    A successful sign-up or sign-in binds the account to ``session`` so the
    profile store writes to the right user.
    """

    def __init__(
        self,
        repository: ProfileRepository,
        session: Session,
        *,
        min_password_length: int = 6,
        bcrypt_rounds: int = 12,
    ) -> None:
        self._repo = repository
        self._session = session
        self._min_password_length = min_password_length
        self._rounds = bcrypt_rounds

    async def sign_up(self, email: str, password: str, name: str | None = None) -> AuthResult:
        normalized = _normalize_email(email)
        if "@" not in normalized:
            return AuthResult(error=AuthError("Unable to validate email address: invalid format"))
        if len(password) < self._min_password_length:
            return AuthResult(error=AuthError(
                f"Password should be at least {self._min_password_length} characters"
            ))

        # bcrypt is deliberately slow; keep it off the event loop
        password_hash = await asyncio.to_thread(hash_password, password, self._rounds)
        try:
            account = self._repo.create_account(normalized, password_hash, name or None)
        except DuplicateAccountError:
            return AuthResult(error=AuthError(
                MESSAGE_ALREADY_REGISTERED, AuthErrorKind.ALREADY_REGISTERED
            ))

        self._session.bind(account.id, account.email)
        logger.info("Signed up account %s", account.id)
        return AuthResult(user_id=account.id)

    async def sign_in(self, email: str, password: str) -> AuthResult:
        account = self._repo.get_account_by_email(_normalize_email(email))
        if account is None or not await asyncio.to_thread(
            verify_password, password, account.password_hash
        ):
            return AuthResult(error=AuthError(
                MESSAGE_INVALID_CREDENTIALS, AuthErrorKind.INVALID_CREDENTIALS
            ))

        self._session.bind(account.id, account.email)
        logger.info("Signed in account %s", account.id)
        return AuthResult(user_id=account.id)
