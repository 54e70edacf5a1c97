"""
podium.services.task_service — Team Tasks
==========================================

Coaches create tasks for their own team.  Deleting a task is a soft delete
(``is_active = False``) so achievements that reference it keep their
history.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import select

from podium.database.engine import get_session
from podium.database.models import Role, Task, Team, User
from podium.engine.validation import validate_task_fields
from podium.errors import NotFound, PermissionDenied

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)


def _check_coach(session, team: Team, actor_id: str) -> None:
    actor = session.get(User, actor_id)
    if actor is None:
        raise NotFound("User not found")
    if team.coach_id != actor_id and actor.role != Role.ADMIN:
        raise PermissionDenied("Only the team's coach can manage tasks")


def get_task(engine: Engine, task_id: str) -> Task:
    with get_session(engine) as session:
        task = session.get(Task, task_id)
        if task is None:
            raise NotFound("Task not found")
        return task


def get_team_tasks(engine: Engine, team_id: str) -> list[Task]:
    """Active tasks for *team_id*, newest first."""
    with get_session(engine) as session:
        return list(session.scalars(
            select(Task)
            .where(Task.team_id == team_id, Task.is_active.is_(True))
            .order_by(Task.created_at.desc())
        ).all())


def create_task(
    engine: Engine,
    *,
    team_id: str,
    actor_id: str,
    title: str,
    points: int,
    description: str = "",
    due_date: datetime | None = None,
    target_value: float | None = None,
    progress_unit: str | None = None,
) -> Task:
    """Create a completion task, or a progress task when a target is given."""
    validate_task_fields(
        title, points, target_value=target_value, progress_unit=progress_unit,
    )

    with get_session(engine) as session:
        team = session.get(Team, team_id)
        if team is None:
            raise NotFound("Team not found")
        _check_coach(session, team, actor_id)

        task = Task(
            team_id=team_id,
            title=title.strip(),
            description=description.strip(),
            points=int(points),
            assigned_by=actor_id,
            due_date=due_date,
            target_value=target_value,
            progress_unit=progress_unit.strip() if progress_unit else None,
        )
        session.add(task)
        session.flush()

    logger.info(
        "Task created: %s (%s, %d pts%s) on team %s",
        task.title, task.id, task.points,
        f", target {task.target_value} {task.progress_unit}" if task.is_progress_task else "",
        team_id,
    )
    return task


def deactivate_task(engine: Engine, task_id: str, *, actor_id: str) -> Task:
    """Soft-delete a task.  Already-inactive tasks are returned unchanged."""
    with get_session(engine) as session:
        task = session.get(Task, task_id)
        if task is None:
            raise NotFound("Task not found")
        _check_coach(session, task.team, actor_id)
        task.is_active = False
        session.flush()

    logger.info("Task %s deactivated by %s", task_id, actor_id)
    return task
