"""Fernet-based encryption for action payloads at rest.

Check-in payloads are free-form wellbeing notes, so they are encrypted before
they reach SQLite. Profile columns and daily flags stay in the clear because
the store queries them directly.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from cryptography.fernet import Fernet, InvalidToken

logger = logging.getLogger(__name__)


class EncryptionError(Exception):
    """Raised when encryption/decryption fails."""


class PayloadEncryptor:
    """Encrypts and decrypts JSON mappings with Fernet symmetric encryption.

    Usage::

        encryptor = PayloadEncryptor(key="...")
        token = encryptor.encrypt({"mood": "ok"})
        encryptor.decrypt(token)  # {"mood": "ok"}
    """

    def __init__(self, key: str) -> None:
        """Initialize with a Fernet key.

        Raises:
            EncryptionError: If the key is empty or invalid.
        """
        if not key or not key.strip():
            raise EncryptionError("Encryption key must not be empty")
        try:
            self._fernet = Fernet(key.encode())
        except ValueError as exc:
            raise EncryptionError(f"Invalid encryption key: {exc}") from exc

    def encrypt(self, payload: dict[str, Any] | None) -> str:
        """Encrypt a mapping to a Fernet token string. Empty payloads encrypt to ``""``."""
        if not payload:
            return ""
        try:
            plaintext = json.dumps(payload, separators=(",", ":"), default=str)
        except (TypeError, ValueError) as exc:
            raise EncryptionError(f"Payload is not JSON-serializable: {exc}") from exc
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("utf-8")

    def decrypt(self, token: str | None) -> dict[str, Any]:
        """Decrypt a Fernet token back to a mapping.

        Raises:
            EncryptionError: If the token is invalid or was written with another key.
        """
        if not token:
            return {}
        try:
            plaintext = self._fernet.decrypt(token.encode("utf-8"))
        except InvalidToken as exc:
            raise EncryptionError("Decryption failed: invalid token or wrong key") from exc
        return json.loads(plaintext)

    @staticmethod
    def generate_key() -> str:
        """Generate a new Fernet key."""
        return Fernet.generate_key().decode("utf-8")
