"""
podium.api.routes.teams — Teams, membership & join codes
=========================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from podium.api.deps import get_config, get_current_user_id, get_engine
from podium.api.serializers import team_dict, user_dict
from podium.config import PodiumConfig
from podium.services import team_service

router = APIRouter(prefix="/teams", tags=["teams"])


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class TeamCreate(BaseModel):
    name: str
    sport: str
    description: str | None = None
    logo_url: str | None = None
    subscription_tier: str = "free"
    max_athletes: int | None = None


class TeamUpdate(BaseModel):
    name: str | None = None
    sport: str | None = None
    description: str | None = None
    logo_url: str | None = None
    subscription_tier: str | None = None
    max_athletes: int | None = None


class JoinByCode(BaseModel):
    code: str


# ---------------------------------------------------------------------------
# Collection
# ---------------------------------------------------------------------------
@router.get("")
def list_teams(
    user_id: str = Depends(get_current_user_id),
    engine=Depends(get_engine),
):
    """Every team, for the browse tab of the join page."""
    return {"teams": [team_dict(t) for t in team_service.list_teams(engine)]}


@router.post("", status_code=201)
def create_team(
    body: TeamCreate,
    user_id: str = Depends(get_current_user_id),
    engine=Depends(get_engine),
    cfg: PodiumConfig = Depends(get_config),
):
    team = team_service.create_team(
        engine,
        name=body.name,
        sport=body.sport,
        coach_id=user_id,
        description=body.description,
        logo_url=body.logo_url,
        subscription_tier=body.subscription_tier,
        max_athletes=(
            cfg.default_max_athletes if body.max_athletes is None else body.max_athletes
        ),
    )
    return {"team": team_dict(team)}


@router.get("/mine")
def my_teams(
    user_id: str = Depends(get_current_user_id),
    engine=Depends(get_engine),
):
    return {"teams": [team_dict(t) for t in team_service.get_user_teams(engine, user_id)]}


@router.post("/join-by-code")
def join_by_code(
    body: JoinByCode,
    user_id: str = Depends(get_current_user_id),
    engine=Depends(get_engine),
    cfg: PodiumConfig = Depends(get_config),
):
    if not body.code.strip():
        raise HTTPException(400, "Please enter a team code")
    team, _ = team_service.join_team_by_code(
        engine, body.code, user_id, strict=cfg.strict_team_codes,
    )
    return {"team": team_dict(team)}


# ---------------------------------------------------------------------------
# Single team
# ---------------------------------------------------------------------------
@router.get("/{team_id}")
def get_team(
    team_id: str,
    user_id: str = Depends(get_current_user_id),
    engine=Depends(get_engine),
):
    return {"team": team_dict(team_service.get_team(engine, team_id))}


@router.patch("/{team_id}")
def update_team(
    team_id: str,
    body: TeamUpdate,
    user_id: str = Depends(get_current_user_id),
    engine=Depends(get_engine),
):
    kwargs = body.model_dump(exclude_none=True)
    if not kwargs:
        raise HTTPException(400, "No fields to update")
    team = team_service.update_team(engine, team_id, actor_id=user_id, **kwargs)
    return {"team": team_dict(team)}


@router.get("/{team_id}/code")
def get_team_code(
    team_id: str,
    user_id: str = Depends(get_current_user_id),
    engine=Depends(get_engine),
):
    team = team_service.get_team(engine, team_id)
    return {"team_id": team.id, "code": team_service.team_code_for(team)}


@router.get("/{team_id}/members")
def list_members(
    team_id: str,
    user_id: str = Depends(get_current_user_id),
    engine=Depends(get_engine),
):
    team_service.get_team(engine, team_id)
    return {"members": [user_dict(u) for u in team_service.get_team_members(engine, team_id)]}


@router.post("/{team_id}/join", status_code=201)
def join_team(
    team_id: str,
    user_id: str = Depends(get_current_user_id),
    engine=Depends(get_engine),
):
    member = team_service.join_team_by_id(engine, team_id, user_id)
    return {"team_id": member.team_id, "user_id": member.user_id, "role": member.role}
