"""
podium.engine.badges — Badge Ladder Evaluation
===============================================

Badges are derived, never stored: every read re-evaluates the ladder
against a user's verified achievement count and total points.  Each rule is
checked independently, so a user holds every badge whose threshold they
meet (12 achievements and 600 points → First Achievement, Achiever,
Champion and Point Master).

:class:`BadgeCache` is an explicit memo keyed on
``(user_id, achievement_count, total_points)``.  Callers invalidate a user's
entries whenever that user's achievements change.

Evaluation is pure — no database I/O.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from podium.constants import BADGE_ICONS

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Rule + result types
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class BadgeRule:
    """One rung of the ladder.

    ``metric`` selects which value ``threshold`` is compared against
    (``"achievement_count"`` or ``"total_points"``).
    """

    id: str
    name: str
    icon: str
    description: str
    requirement: str
    metric: str
    threshold: int


@dataclass(frozen=True, slots=True)
class EarnedBadge:
    id: str
    name: str
    icon: str
    description: str
    requirement: str

    def to_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "name": self.name,
            "icon": self.icon,
            "description": self.description,
            "requirement": self.requirement,
        }


# ---------------------------------------------------------------------------
# Metric handlers — (rule, count, points) → bool
# ---------------------------------------------------------------------------
def _check_achievement_count(rule: BadgeRule, count: int, points: int) -> bool:
    return count >= rule.threshold


def _check_total_points(rule: BadgeRule, count: int, points: int) -> bool:
    return points >= rule.threshold


METRIC_HANDLERS: dict[str, Callable[[BadgeRule, int, int], bool]] = {
    "achievement_count": _check_achievement_count,
    "total_points": _check_total_points,
}


# ---------------------------------------------------------------------------
# Default ladder — ascending difficulty
# ---------------------------------------------------------------------------
DEFAULT_BADGE_LADDER: tuple[BadgeRule, ...] = (
    BadgeRule(
        id="first_achievement", name="First Achievement",
        icon=BADGE_ICONS["first_achievement"],
        description="Earned your first achievement",
        requirement="Complete your first task",
        metric="achievement_count", threshold=1,
    ),
    BadgeRule(
        id="achiever", name="Achiever",
        icon=BADGE_ICONS["achiever"],
        description="Earned 5 achievements",
        requirement="Complete 5 tasks",
        metric="achievement_count", threshold=5,
    ),
    BadgeRule(
        id="champion", name="Champion",
        icon=BADGE_ICONS["champion"],
        description="Earned 10 achievements",
        requirement="Complete 10 tasks",
        metric="achievement_count", threshold=10,
    ),
    BadgeRule(
        id="legend", name="Legend",
        icon=BADGE_ICONS["legend"],
        description="Earned 20 achievements",
        requirement="Complete 20 tasks",
        metric="achievement_count", threshold=20,
    ),
    BadgeRule(
        id="point_master", name="Point Master",
        icon=BADGE_ICONS["point_master"],
        description="Earned 500+ points",
        requirement="Earn 500+ points",
        metric="total_points", threshold=500,
    ),
)


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------
def evaluate_badges(
    achievement_count: int,
    total_points: int,
    ladder: Sequence[BadgeRule] = DEFAULT_BADGE_LADDER,
) -> list[EarnedBadge]:
    """Return every badge whose rule is satisfied, in ladder order.

    Raises
    ------
    ValueError
        If either input is negative.
    """
    if achievement_count < 0 or total_points < 0:
        raise ValueError("achievement_count and total_points must be non-negative")

    earned: list[EarnedBadge] = []
    for rule in ladder:
        handler = METRIC_HANDLERS.get(rule.metric)
        if handler is None:
            logger.warning("Unknown badge metric %r on rule %s", rule.metric, rule.id)
            continue
        if handler(rule, achievement_count, total_points):
            earned.append(EarnedBadge(
                id=rule.id,
                name=rule.name,
                icon=rule.icon,
                description=rule.description,
                requirement=rule.requirement,
            ))
    return earned


def count_badges(achievement_count: int, total_points: int) -> int:
    """Badge count against the default ladder (leaderboard helper)."""
    return len(evaluate_badges(achievement_count, total_points))


# ---------------------------------------------------------------------------
# Explicit memoization
# ---------------------------------------------------------------------------
class BadgeCache:
    """Thread-safe memo of badge sets.

    Keys include the count and points, so a stale entry can only be served
    if a caller skips :meth:`invalidate` after an achievement write.
    """

    def __init__(self, ladder: Sequence[BadgeRule] = DEFAULT_BADGE_LADDER) -> None:
        self._ladder = tuple(ladder)
        self._lock = threading.Lock()
        self._entries: dict[tuple[str, int, int], tuple[EarnedBadge, ...]] = {}

    def get(self, user_id: str, achievement_count: int, total_points: int) -> list[EarnedBadge]:
        key = (user_id, achievement_count, total_points)
        with self._lock:
            cached = self._entries.get(key)
        if cached is not None:
            return list(cached)

        badges = evaluate_badges(achievement_count, total_points, self._ladder)
        with self._lock:
            self._entries[key] = tuple(badges)
        return badges

    def invalidate(self, user_id: str) -> None:
        """Drop every cached entry for *user_id*."""
        with self._lock:
            stale = [k for k in self._entries if k[0] == user_id]
            for key in stale:
                del self._entries[key]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
