"""MCP tool for finishing onboarding (with optional sign-up or sign-in)."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from fastmcp import Context, FastMCP

from rumo.domains.wellness.domain_logic.onboarding import (
    MESSAGE_INCOMPLETE_CREDENTIALS,
    CollectingNotifier,
    Credentials,
    Notification,
    OnboardingOrchestrator,
)
from rumo.domains.wellness.tools.daily_state_tools import ensure_open

if TYPE_CHECKING:
    from rumo.core.auth.base import AuthService
    from rumo.domains.wellness.domain_logic.user_context import UserContext


def register_onboarding_tools(
    mcp: FastMCP,
    auth: AuthService,
    user_context: UserContext,
) -> None:
    """Register onboarding tools on the MCP server."""

    @mcp.tool
    async def complete_onboarding(
        ctx: Context,
        name: str = "",
        rhythm: str = "",
        consistency: str = "",
        support_level: str = "",
        morning_person: bool | None = None,
        main_goal: str = "",
        current_challenge: str = "",
        email: str = "",
        password: str = "",
        mode: str = "signup",
    ) -> str:
        """Save onboarding answers, creating an account or signing in first.

        Without email and password the answers are saved for the current
        session as-is; supplying only one of them is rejected with no save.
        On login the stored name is kept.

        Args:
            name: Display name (ignored on login).
            rhythm: Preferred routine rhythm.
            consistency: Self-reported consistency level.
            support_level: How much guidance the user wants.
            morning_person: Whether the user is most active in the morning.
            main_goal: Main goal (e.g. 'weightloss').
            current_challenge: What currently gets in the way.
            email: Account email.
            password: Account password.
            mode: 'signup' or 'login'.
        """
        if mode not in ("signup", "login"):
            return json.dumps({
                "status": "error",
                "message": "mode must be 'signup' or 'login'.",
            })

        uc = await ensure_open(user_context)
        if bool(email) != bool(password):
            # Half-filled credentials must never fall through to the
            # credential-less save, which writes to the session's current user.
            notification = Notification("error", MESSAGE_INCOMPLETE_CREDENTIALS)
            return json.dumps({
                "status": "error",
                "notification": notification.to_dict(),
                "state": uc.snapshot(),
            })

        credentials = Credentials(email, password, mode) if email else None
        notifier = CollectingNotifier()
        orchestrator = OnboardingOrchestrator(auth, uc, notifier)

        notification = await orchestrator.complete(
            {
                "name": name,
                "rhythm": rhythm,
                "consistency": consistency,
                "supportLevel": support_level,
                "morningPerson": morning_person,
                "mainGoal": main_goal,
                "currentChallenge": current_challenge,
            },
            credentials,
        )
        return json.dumps({
            "status": "ok" if notification.level == "success" else "error",
            "notification": notification.to_dict(),
            "state": uc.snapshot(),
        })
