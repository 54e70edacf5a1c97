"""
podium.constants — Shared Constants
====================================

Single source of truth for presentation constants and form bounds.
Import from here instead of duplicating in services and routes.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Badge glyphs (used by the default badge ladder)
# ---------------------------------------------------------------------------
BADGE_ICONS: dict[str, str] = {
    "first_achievement": "\U0001f3c5",  # 🏅
    "achiever": "\U0001f31f",           # 🌟
    "champion": "\U0001f451",           # 👑
    "legend": "\U0001f525",             # 🔥
    "point_master": "\U0001f48e",       # 💎
}

RANK_MEDALS: list[str] = ["\U0001f947", "\U0001f948", "\U0001f949"]  # 🥇🥈🥉


# ---------------------------------------------------------------------------
# Team code shape
# ---------------------------------------------------------------------------
TEAM_CODE_NAME_CHARS = 3
TEAM_CODE_ID_CHARS = 4


# ---------------------------------------------------------------------------
# Form bounds
# ---------------------------------------------------------------------------
MIN_TASK_POINTS = 1
MAX_TASK_POINTS = 1000
MIN_TEAM_NAME_LENGTH = 3
MAX_PASSWORD_BYTES = 72  # bcrypt input limit
DEFAULT_MAX_ATHLETES = 50

SELF_SIGNUP_ROLES: tuple[str, ...] = ("athlete", "coach")
SUBSCRIPTION_TIERS: tuple[str, ...] = ("free", "basic", "premium", "enterprise")
