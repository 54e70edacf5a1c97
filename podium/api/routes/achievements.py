"""
podium.api.routes.achievements — Proof, progress, leaderboard & badges
=======================================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from podium.api.deps import get_badge_cache, get_current_user_id, get_engine
from podium.api.serializers import (
    achievement_dict,
    leaderboard_entry_dict,
    progress_entry_dict,
)
from podium.engine.badges import BadgeCache
from podium.services import achievement_service, team_service

router = APIRouter(tags=["achievements"])


class ProofSubmit(BaseModel):
    proof_text: str
    proof_type: str = "text"


class ProgressSubmit(BaseModel):
    value: float
    notes: str | None = None


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------
@router.post("/tasks/{task_id}/proof", status_code=201)
def submit_proof(
    task_id: str,
    body: ProofSubmit,
    user_id: str = Depends(get_current_user_id),
    engine=Depends(get_engine),
    badge_cache: BadgeCache = Depends(get_badge_cache),
):
    achievement = achievement_service.submit_proof(
        engine,
        task_id=task_id,
        user_id=user_id,
        proof_text=body.proof_text,
        proof_type=body.proof_type,
        badge_cache=badge_cache,
    )
    return {"achievement": achievement_dict(achievement)}


@router.post("/tasks/{task_id}/progress", status_code=201)
def add_progress(
    task_id: str,
    body: ProgressSubmit,
    user_id: str = Depends(get_current_user_id),
    engine=Depends(get_engine),
    badge_cache: BadgeCache = Depends(get_badge_cache),
):
    outcome = achievement_service.add_progress(
        engine,
        task_id=task_id,
        user_id=user_id,
        value=body.value,
        notes=body.notes,
        badge_cache=badge_cache,
    )
    return {
        "entry": progress_entry_dict(outcome.entry),
        "total": outcome.new_total,
        "target_value": outcome.target_value,
        "completed": outcome.completed,
        "achievement": (
            achievement_dict(outcome.achievement) if outcome.achievement else None
        ),
    }


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------
@router.get("/tasks/{task_id}/progress")
def get_progress(
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    engine=Depends(get_engine),
):
    summary = achievement_service.get_progress(engine, task_id, user_id)
    return {
        "task_id": summary.task_id,
        "total": summary.total,
        "target_value": summary.target_value,
        "progress_unit": summary.progress_unit,
        "completed": summary.completed,
        "history": [progress_entry_dict(p) for p in summary.entries],
    }


@router.get("/teams/{team_id}/leaderboard")
def get_leaderboard(
    team_id: str,
    limit: int | None = Query(None, ge=1, le=500),
    user_id: str = Depends(get_current_user_id),
    engine=Depends(get_engine),
    badge_cache: BadgeCache = Depends(get_badge_cache),
):
    team_service.get_team(engine, team_id)
    entries = achievement_service.get_team_leaderboard(engine, team_id, badge_cache)
    return {
        "total": len(entries),
        "entries": [leaderboard_entry_dict(e) for e in entries[:limit]],
    }


@router.get("/teams/{team_id}/stats")
def get_team_stats(
    team_id: str,
    user_id: str = Depends(get_current_user_id),
    engine=Depends(get_engine),
    badge_cache: BadgeCache = Depends(get_badge_cache),
):
    team_service.get_team(engine, team_id)
    stats = achievement_service.get_team_stats(engine, team_id, badge_cache)
    return {
        "members": stats.members,
        "active_tasks": stats.active_tasks,
        "completed_achievements": stats.completed_achievements,
        "total_badges": stats.total_badges,
    }


@router.get("/users/{target_id}/achievements")
def list_user_achievements(
    target_id: str,
    team_id: str | None = Query(None),
    user_id: str = Depends(get_current_user_id),
    engine=Depends(get_engine),
):
    rows = achievement_service.get_user_achievements(engine, target_id, team_id)
    return {"achievements": [achievement_dict(a) for a in rows]}


@router.get("/users/{target_id}/badges")
def list_user_badges(
    target_id: str,
    team_id: str | None = Query(None),
    user_id: str = Depends(get_current_user_id),
    engine=Depends(get_engine),
    badge_cache: BadgeCache = Depends(get_badge_cache),
):
    badges = achievement_service.get_user_badges(engine, target_id, team_id, badge_cache)
    return {"badges": [b.to_dict() for b in badges]}
