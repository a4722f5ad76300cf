"""Rumo daily-state MCP server — application factory.

This module provides:
- create_app() for testability (integration tests create fresh server instances)
- Module-level `mcp` variable for FastMCP discovery
"""

from __future__ import annotations

import logging

from fastmcp import FastMCP

from rumo.core.audit.logger import ActionLogger
from rumo.core.auth.base import AuthService, Session
from rumo.core.auth.local import LocalAuthService
from rumo.core.config.settings import get_settings
from rumo.core.storage.database import RumoDatabase
from rumo.core.storage.encryption import EncryptionError, PayloadEncryptor
from rumo.core.storage.repository import ProfileRepository
from rumo.domains.wellness.connectors import ProfileStore
from rumo.domains.wellness.connectors.sqlite_store import SqliteProfileStore
from rumo.domains.wellness.domain_logic.user_context import UserContext
from rumo.domains.wellness.tools.daily_state_tools import register_daily_state_tools
from rumo.domains.wellness.tools.onboarding_tools import register_onboarding_tools

logger = logging.getLogger(__name__)


def create_app(
    *,
    store_override: ProfileStore | None = None,
    auth_override: AuthService | None = None,
    session_override: Session | None = None,
) -> FastMCP:
    """Create and configure the Rumo MCP server.

    This is the main application factory. It:
    1. Creates the FastMCP server instance
    2. Opens the SQLite database (file-backed when ENCRYPTION_KEY is set,
       in-memory otherwise)
    3. Builds the session, auth service and profile store
    4. Creates the session's UserContext
    5. Registers all tools
    """
    settings = get_settings()

    server = FastMCP(
        "Rumo Daily State",
        instructions=(
            "Daily state for a wellness habit app: today's focus task, the "
            "30-day weight-loss mission, streaks, check-ins and onboarding."
        ),
    )

    if session_override is not None:
        session = session_override
    else:
        session = Session(user_id=settings.dev_user_id or None)

    # --- Storage ---
    encryptor: PayloadEncryptor | None = None
    db_path = settings.db_path
    if settings.encryption_key:
        try:
            encryptor = PayloadEncryptor(settings.encryption_key)
        except EncryptionError as exc:
            logger.error("Failed to initialize storage: %s", exc)
            logger.warning("Continuing without persistence — data will not be stored")
    else:
        logger.info(
            "No ENCRYPTION_KEY configured — running without persistence. "
            "Set ENCRYPTION_KEY to keep profiles between runs."
        )
    if encryptor is None:
        encryptor = PayloadEncryptor(PayloadEncryptor.generate_key())
        db_path = ":memory:"

    database = RumoDatabase(db_path)
    database.initialize()
    repository = ProfileRepository(database)
    logger.info(
        "Profile store initialized: %s (schema v%d)", db_path, database.get_schema_version()
    )

    # --- Collaborators ---
    action_logger: ActionLogger | None = None
    if store_override is not None:
        store = store_override
    else:
        action_logger = ActionLogger(database, encryptor)
        store = SqliteProfileStore(repository, action_logger, session)

    if auth_override is not None:
        auth = auth_override
    else:
        auth = LocalAuthService(
            repository,
            session,
            min_password_length=settings.min_password_length,
            bcrypt_rounds=settings.bcrypt_rounds,
        )

    user_context = UserContext(store)

    # --- Register tools ---
    @server.tool
    def health_check() -> dict:
        """Check server health and return basic status information."""
        return {
            "status": "ok",
            "server": "Rumo Daily State",
            "version": "0.1.0",
            "storage_persistent": database.is_persistent,
            "signed_in": session.is_authenticated,
        }

    register_daily_state_tools(server, user_context, session, action_logger)
    register_onboarding_tools(server, auth, user_context)
    logger.info("Daily state and onboarding tools registered")

    return server


# Module-level instance for FastMCP discovery.
# Lazy: only created when this module is loaded directly (not when tests import create_app).
def __getattr__(name: str):
    if name == "mcp":
        global mcp  # noqa: PLW0603
        mcp = create_app()
        return mcp
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
