"""Application settings loaded from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Rumo daily-state server configuration."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Server
    # Default to loopback; the server has no transport-level auth of its own.
    rumo_host: str = "127.0.0.1"
    rumo_port: int = 8003
    rumo_log_level: str = "info"
    rumo_allow_insecure_bind: bool = False

    # Storage (profiles, daily states, action log)
    db_path: str = "~/.rumo/rumo.db"

    # Encryption for action payloads (check-ins). Empty means no persistence:
    # an in-memory database with a throwaway key is used instead.
    encryption_key: str = ""

    # Accounts
    min_password_length: int = 6
    bcrypt_rounds: int = 12

    # When set, the session starts bound to this user id so onboarding without
    # credentials (local development) has somewhere to write.
    dev_user_id: str = ""


def get_settings() -> Settings:
    """Create and return a Settings instance."""
    return Settings()
