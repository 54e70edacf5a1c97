"""
podium.api.routes.tasks — Team task management
===============================================
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from podium.api.deps import get_current_user_id, get_engine
from podium.api.serializers import task_dict
from podium.services import task_service, team_service

router = APIRouter(tags=["tasks"])


class TaskCreate(BaseModel):
    title: str
    description: str = ""
    points: int = 50
    due_date: datetime | None = None
    target_value: float | None = None
    progress_unit: str | None = None


@router.get("/teams/{team_id}/tasks")
def list_tasks(
    team_id: str,
    user_id: str = Depends(get_current_user_id),
    engine=Depends(get_engine),
):
    team_service.get_team(engine, team_id)
    return {"tasks": [task_dict(t) for t in task_service.get_team_tasks(engine, team_id)]}


@router.post("/teams/{team_id}/tasks", status_code=201)
def create_task(
    team_id: str,
    body: TaskCreate,
    user_id: str = Depends(get_current_user_id),
    engine=Depends(get_engine),
):
    task = task_service.create_task(
        engine,
        team_id=team_id,
        actor_id=user_id,
        title=body.title,
        description=body.description,
        points=body.points,
        due_date=body.due_date,
        target_value=body.target_value,
        progress_unit=body.progress_unit,
    )
    return {"task": task_dict(task)}


@router.get("/tasks/{task_id}")
def get_task(
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    engine=Depends(get_engine),
):
    return {"task": task_dict(task_service.get_task(engine, task_id))}


@router.delete("/tasks/{task_id}")
def delete_task(
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    engine=Depends(get_engine),
):
    """Soft delete. The task leaves the list but its achievements remain."""
    task = task_service.deactivate_task(engine, task_id, actor_id=user_id)
    return {"task": task_dict(task)}
