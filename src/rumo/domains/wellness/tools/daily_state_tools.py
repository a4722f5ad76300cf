"""MCP tools for today's derived state and the daily mutations.

Each tool returns the same presentation-cased snapshot a screen would render,
so a client never has to re-derive mission day, streak or completion itself.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from fastmcp import Context, FastMCP

from rumo.domains.wellness.domain_logic.view_models import ViewDailyFocus

if TYPE_CHECKING:
    from rumo.core.audit.logger import ActionLogger
    from rumo.core.auth.base import Session
    from rumo.domains.wellness.domain_logic.user_context import UserContext

logger = logging.getLogger(__name__)


async def ensure_open(user_context: UserContext) -> UserContext:
    """Open the session's context on first use."""
    if not user_context.is_open:
        await user_context.open()
    return user_context


def register_daily_state_tools(
    mcp: FastMCP,
    user_context: UserContext,
    session: Session,
    action_logger: ActionLogger | None = None,
) -> None:
    """Register daily-state tools on the MCP server."""

    @mcp.tool
    async def get_today(ctx: Context) -> str:
        """Return today's profile, focus, mission day and completion flags."""
        uc = await ensure_open(user_context)
        await uc.refresh()
        return json.dumps(uc.snapshot())

    @mcp.tool
    async def update_profile(
        ctx: Context,
        name: str | None = None,
        rhythm: str | None = None,
        consistency: str | None = None,
        support_level: str | None = None,
        morning_person: bool | None = None,
        main_goal: str | None = None,
        current_challenge: str | None = None,
    ) -> str:
        """Update profile fields. Omitted fields keep their stored value.

        Args:
            name: Display name.
            rhythm: Preferred routine rhythm (e.g. 'daily').
            consistency: Self-reported consistency level.
            support_level: How much guidance the user wants.
            morning_person: Whether the user is most active in the morning.
            main_goal: Main goal (e.g. 'weightloss').
            current_challenge: What currently gets in the way.
        """
        uc = await ensure_open(user_context)
        await uc.update_profile({
            "name": name,
            "rhythm": rhythm,
            "consistency": consistency,
            "supportLevel": support_level,
            "morningPerson": morning_person,
            "mainGoal": main_goal,
            "currentChallenge": current_challenge,
        })
        return json.dumps(uc.snapshot())

    @mcp.tool
    async def complete_focus(ctx: Context) -> str:
        """Mark today's focus task as done. Safe to call more than once."""
        uc = await ensure_open(user_context)
        await uc.complete_focus()
        return json.dumps(uc.snapshot())

    @mcp.tool
    async def complete_mission(ctx: Context) -> str:
        """Mark today's weight-loss mission as done. Safe to call more than once."""
        uc = await ensure_open(user_context)
        await uc.complete_mission()
        return json.dumps(uc.snapshot())

    @mcp.tool
    async def add_check_in(ctx: Context, check_in: dict[str, Any]) -> str:
        """Log a daily check-in.

        Args:
            check_in: Free-form check-in answers (mood, energy, notes...).
        """
        uc = await ensure_open(user_context)
        await uc.add_check_in(check_in)
        return json.dumps(uc.snapshot())

    @mcp.tool
    async def set_today_focus(
        ctx: Context,
        focus_id: str,
        title: str,
        description: str = "",
        pillar_id: int = 1,
        focus_type: str = "action",
        duration: str = "",
    ) -> str:
        """Choose today's focus task. Not supported yet: the focus is fixed."""
        uc = await ensure_open(user_context)
        await uc.set_today_focus(ViewDailyFocus(
            id=focus_id,
            title=title,
            description=description,
            pillar_id=pillar_id,
            type=focus_type,
            duration=duration,
            completed=False,
        ))
        return json.dumps({"status": "ignored", "state": uc.snapshot()})

    @mcp.tool
    async def reset_mission_cycle(ctx: Context) -> str:
        """Restart the 30-day mission. Not supported yet: the mission cycle belongs to the store."""
        uc = await ensure_open(user_context)
        await uc.reset_mission_cycle()
        return json.dumps({"status": "ignored", "state": uc.snapshot()})

    @mcp.tool
    async def sign_out(ctx: Context) -> str:
        """End the session and tear down its derived state."""
        await user_context.close()
        session.clear()
        logger.info("Session signed out")
        return json.dumps({"status": "signed_out"})

    if action_logger is not None:

        @mcp.tool
        async def get_recent_actions(
            ctx: Context,
            kind: str = "",
            limit: int = 20,
        ) -> str:
            """List the signed-in user's recent logged actions, newest first, with the total count.

            Args:
                kind: Only return actions with this tag (e.g. 'checkin').
                limit: Maximum number of actions (1-100).
            """
            if session.user_id is None:
                return json.dumps({"status": "error", "message": "Not signed in."})
            limit = max(1, min(limit, 100))
            entries = action_logger.get_actions(session.user_id, kind=kind or None, limit=limit)
            return json.dumps({
                "status": "ok",
                "total": action_logger.count_actions(session.user_id, kind=kind or None),
                "actions": [
                    {
                        "id": e.id,
                        "kind": e.kind,
                        "stateDate": e.state_date,
                        "payload": e.payload,
                        "createdAt": e.created_at,
                    }
                    for e in entries
                ],
            })
