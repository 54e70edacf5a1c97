"""
podium.engine.leaderboard — Points Aggregation & Ranking
=========================================================

Reduces a flat collection of achievements into a ranked per-user table.

Rules:
  * Only ``verified`` achievements count toward points and counts.
  * If ``tasks`` and ``team_id`` are given, only achievements whose task
    belongs to that team count.
  * A user appears only if they have at least one qualifying achievement.
  * Rank is the 1-based position after sorting by points, highest first.

Tie-break policy: when points are equal, the user whose first qualifying
achievement was completed earlier ranks higher.  Remaining ties (equal or
missing timestamps) fall back to user id, ascending.

This module is pure calculation — no database I/O.  Inputs are read, never
mutated, and the output depends only on the inputs.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

__all__ = ["LeaderboardEntry", "aggregate_leaderboard"]


@dataclass(frozen=True, slots=True)
class LeaderboardEntry:
    """One ranked row.  ``user`` is ``None`` if the record was not found."""

    user_id: str
    user: Any
    points: int
    achievements_count: int
    badges_count: int
    rank: int
    first_completed_at: datetime | None = None


@dataclass(slots=True)
class _Tally:
    points: int = 0
    count: int = 0
    first_at: datetime | None = None


def _sort_key(item: tuple[str, _Tally]) -> tuple:
    user_id, tally = item
    missing = tally.first_at is None
    return (-tally.points, missing, tally.first_at if not missing else 0, user_id)


def aggregate_leaderboard(
    achievements: Iterable[Any],
    users: Iterable[Any] = (),
    *,
    tasks: Iterable[Any] | None = None,
    team_id: str | None = None,
    badge_counter: Callable[[str, int, int], int] | None = None,
) -> list[LeaderboardEntry]:
    """Build the ranked leaderboard.

    Parameters
    ----------
    achievements : objects with ``user_id``, ``task_id``, ``points_earned``,
        ``verified`` and (optionally) ``completed_at``.
    users : objects with ``id``; attached to entries for display.
    tasks : objects with ``id`` and ``team_id``; with *team_id*, restricts
        achievements to that team's tasks.
    team_id : team to restrict to (ignored unless *tasks* is given).
    badge_counter : ``(user_id, achievement_count, total_points) -> int`` used
        to fill ``badges_count``.  Defaults to 0 when omitted.

    Returns
    -------
    Entries in rank order (rank 1 first).
    """
    team_task_ids: set[str] | None = None
    if tasks is not None and team_id is not None:
        team_task_ids = {t.id for t in tasks if t.team_id == team_id}

    tallies: dict[str, _Tally] = {}
    for ach in achievements:
        if not ach.verified:
            continue
        if team_task_ids is not None and ach.task_id not in team_task_ids:
            continue

        tally = tallies.setdefault(ach.user_id, _Tally())
        tally.points += ach.points_earned or 0
        tally.count += 1

        completed_at = getattr(ach, "completed_at", None)
        if completed_at is not None and (
            tally.first_at is None or completed_at < tally.first_at
        ):
            tally.first_at = completed_at

    users_by_id = {u.id: u for u in users}

    entries: list[LeaderboardEntry] = []
    for position, (user_id, tally) in enumerate(
        sorted(tallies.items(), key=_sort_key), start=1
    ):
        badges = badge_counter(user_id, tally.count, tally.points) if badge_counter else 0
        entries.append(LeaderboardEntry(
            user_id=user_id,
            user=users_by_id.get(user_id),
            points=tally.points,
            achievements_count=tally.count,
            badges_count=badges,
            rank=position,
            first_completed_at=tally.first_at,
        ))
    return entries
