"""bcrypt password hashing with SHA-256 pre-hashing.

Pre-hashing sidesteps bcrypt's 72-byte input limit so long passphrases are
not silently truncated.
"""

from __future__ import annotations

import base64
import hashlib

import bcrypt


def _prehash(password: str) -> bytes:
    digest = hashlib.sha256(password.encode("utf-8")).digest()
    return base64.b64encode(digest)


def hash_password(password: str, rounds: int = 12) -> str:
    """Hash a password for storage."""
    return bcrypt.hashpw(_prehash(password), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Check ``password`` against a hash produced by :func:`hash_password`."""
    try:
        return bcrypt.checkpw(_prehash(password), hashed.encode("utf-8"))
    except ValueError:
        # Malformed hash
        return False
