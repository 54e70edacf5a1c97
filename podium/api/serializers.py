"""
podium.api.serializers — ORM/engine objects → JSON-ready dicts
===============================================================
"""

from __future__ import annotations

from datetime import datetime

from podium.constants import RANK_MEDALS
from podium.database.models import Achievement, Task, TaskProgress, Team, User
from podium.engine.leaderboard import LeaderboardEntry
from podium.services.team_service import team_code_for


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def user_dict(u: User | None) -> dict | None:
    if u is None:
        return None
    return {
        "id": u.id,
        "name": u.name,
        "email": u.email,
        "role": u.role,
        "avatar_url": u.avatar_url,
        "created_at": _iso(u.created_at),
    }


def team_dict(t: Team) -> dict:
    return {
        "id": t.id,
        "name": t.name,
        "sport": t.sport,
        "description": t.description,
        "logo_url": t.logo_url,
        "coach_id": t.coach_id,
        "subscription_tier": t.subscription_tier,
        "max_athletes": t.max_athletes,
        "code": team_code_for(t),
        "created_at": _iso(t.created_at),
    }


def task_dict(t: Task) -> dict:
    return {
        "id": t.id,
        "team_id": t.team_id,
        "title": t.title,
        "description": t.description,
        "points": t.points,
        "assigned_by": t.assigned_by,
        "due_date": _iso(t.due_date),
        "target_value": t.target_value,
        "progress_unit": t.progress_unit,
        "kind": "progress" if t.is_progress_task else "completion",
        "is_active": t.is_active,
        "created_at": _iso(t.created_at),
    }


def achievement_dict(a: Achievement) -> dict:
    return {
        "id": a.id,
        "user_id": a.user_id,
        "task_id": a.task_id,
        "source": a.source,
        "proof_text": a.proof_text,
        "proof_url": a.proof_url,
        "points_earned": a.points_earned,
        "verified": a.verified,
        "verified_by": a.verified_by,
        "verified_at": _iso(a.verified_at),
        "completed_at": _iso(a.completed_at),
    }


def progress_entry_dict(p: TaskProgress) -> dict:
    return {
        "id": p.id,
        "value_added": p.value_added,
        "notes": p.notes,
        "created_at": _iso(p.created_at),
    }


def leaderboard_entry_dict(e: LeaderboardEntry) -> dict:
    return {
        "rank": e.rank,
        "medal": RANK_MEDALS[e.rank - 1] if e.rank <= len(RANK_MEDALS) else None,
        "user_id": e.user_id,
        "user": user_dict(e.user),
        "points": e.points,
        "achievements_count": e.achievements_count,
        "badges_count": e.badges_count,
    }
