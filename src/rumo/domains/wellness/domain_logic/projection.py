"""Projection of stored profile/state into view models.

``project_profile`` and ``synthesize_focus`` are pure. ``ProjectionCache``
holds the last result and recomputes only when the identity of either input
changes; screens key re-renders off that identity, so handing back a fresh
but equal object counts as a change.
"""

from __future__ import annotations

import logging
from datetime import datetime, time

from rumo.core.storage.models import StoredDailyState, StoredProfile
from rumo.domains.wellness.domain_logic.view_models import (
    CURRENT_PILLAR,
    DEFAULT_MISSION_DAY,
    DEFAULT_STREAK,
    FOCUS_DESCRIPTION,
    FOCUS_DURATION,
    FOCUS_ID,
    FOCUS_PILLAR_ID,
    FOCUS_TITLE,
    FOCUS_TYPE,
    ViewDailyFocus,
    ViewUserProfile,
)

logger = logging.getLogger(__name__)


def project_profile(
    profile: StoredProfile | None,
    today_state: StoredDailyState | None,
) -> ViewUserProfile | None:
    """Derive the view profile. None means not loaded or not onboarded yet."""
    if profile is None:
        return None

    last_check_in = None
    if today_state is not None and today_state.checkin_done:
        last_check_in = datetime.combine(today_state.state_date, time.min)

    return ViewUserProfile(
        id=profile.id,
        name=profile.name,
        rhythm=profile.rhythm,
        consistency=profile.consistency,
        support_level=profile.support_level,
        morning_person=profile.morning_person,
        main_goal=profile.main_goal,
        current_challenge=profile.current_challenge,
        current_day=(today_state.mission_day if today_state else 0) or DEFAULT_MISSION_DAY,
        current_pillar=CURRENT_PILLAR,
        streak=(today_state.streak if today_state else 0) or DEFAULT_STREAK,
        today_completed=bool(today_state and today_state.focus_completed),
        last_check_in=last_check_in,
    )


def synthesize_focus(
    user: ViewUserProfile | None,
    today_state: StoredDailyState | None,
) -> ViewDailyFocus | None:
    """Today's focus task.

    Content is a fixed template; only ``completed`` follows the stored flag.
    """
    if user is None:
        return None
    # TODO: pick the focus per day from the user's current pillar once pillar
    # rotation is stored.
    return ViewDailyFocus(
        id=FOCUS_ID,
        title=FOCUS_TITLE,
        description=FOCUS_DESCRIPTION,
        pillar_id=FOCUS_PILLAR_ID,
        type=FOCUS_TYPE,
        duration=FOCUS_DURATION,
        completed=bool(today_state and today_state.focus_completed),
    )


_UNSET = object()


class ProjectionCache:
    """Memoizes ``project_profile`` + ``synthesize_focus`` on input identity."""

    def __init__(self) -> None:
        self._profile_ref: object = _UNSET
        self._state_ref: object = _UNSET
        self._user: ViewUserProfile | None = None
        self._focus: ViewDailyFocus | None = None
        self.computations = 0

    def get(
        self,
        profile: StoredProfile | None,
        today_state: StoredDailyState | None,
    ) -> tuple[ViewUserProfile | None, ViewDailyFocus | None]:
        if profile is self._profile_ref and today_state is self._state_ref:
            return self._user, self._focus

        self._user = project_profile(profile, today_state)
        self._focus = synthesize_focus(self._user, today_state)
        self._profile_ref = profile
        self._state_ref = today_state
        self.computations += 1
        logger.debug("Recomputed projection (#%d)", self.computations)
        return self._user, self._focus
