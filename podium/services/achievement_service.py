"""
podium.services.achievement_service — Proof, Progress & Standings
==================================================================

Write paths:
  * :func:`submit_proof` — one achievement for a completion task.
  * :func:`add_progress` — one ``task_progress`` row, plus a completion
    achievement when the running total reaches the target.

Both write paths pass new achievements through
:func:`apply_verification_policy`.  Today that auto-verifies; a review
step (pending → verified / rejected) can replace it without touching the
leaderboard, which only ever counts ``verified`` rows.

Completion awards are limited to one per (task, user).  The service checks
for an existing progress-sourced achievement first, and the partial unique
index ``ix_achievements_progress_once`` rejects a concurrent second insert.
The losing transaction is rolled back whole (its progress row included)
and surfaces as :class:`~podium.errors.DuplicateCompletionAward`.

Read paths build the leaderboard, badge sets and team stats from fetched
rows using the pure engine modules.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from podium.database.engine import get_session
from podium.database.models import (
    Achievement,
    AchievementSource,
    Task,
    TaskProgress,
    TeamMember,
    User,
)
from podium.engine.badges import BadgeCache, EarnedBadge, count_badges, evaluate_badges
from podium.engine.leaderboard import LeaderboardEntry, aggregate_leaderboard
from podium.engine.progress import (
    REASON_NOT_POSITIVE,
    completion_proof_text,
    crosses_completion,
    current_total,
    is_complete,
    validate_contribution,
)
from podium.engine.validation import validate_proof
from podium.errors import (
    DuplicateCompletionAward,
    NotFound,
    PermissionDenied,
    ValidationError,
)

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------
@dataclass
class ProgressOutcome:
    entry: TaskProgress
    previous_total: float
    new_total: float
    target_value: float
    achievement: Achievement | None = None

    @property
    def completed(self) -> bool:
        return is_complete(self.new_total, self.target_value)


@dataclass
class ProgressSummary:
    task_id: str
    user_id: str
    total: float
    target_value: float | None
    progress_unit: str | None
    entries: list[TaskProgress] = field(default_factory=list)

    @property
    def completed(self) -> bool:
        return self.target_value is not None and is_complete(self.total, self.target_value)


@dataclass(frozen=True, slots=True)
class TeamStats:
    members: int
    active_tasks: int
    completed_achievements: int
    total_badges: int


# ---------------------------------------------------------------------------
# Verification hook
# ---------------------------------------------------------------------------
def apply_verification_policy(
    achievement: Achievement, *, verifier_id: str | None = None
) -> Achievement:
    """Decide the initial verification state of a new achievement.

    Current policy: every achievement is verified at creation.
    """
    achievement.verified = True
    achievement.verified_by = verifier_id
    achievement.verified_at = datetime.now(UTC)
    return achievement


# ---------------------------------------------------------------------------
# Shared lookups
# ---------------------------------------------------------------------------
def _load_active_task(session: Session, task_id: str) -> Task:
    task = session.get(Task, task_id)
    if task is None or not task.is_active:
        raise NotFound("Task not found")
    return task


def _require_membership(session: Session, team_id: str, user_id: str) -> None:
    member = session.scalar(
        select(TeamMember.id).where(
            TeamMember.team_id == team_id, TeamMember.user_id == user_id,
        )
    )
    if member is None:
        raise PermissionDenied("You are not a member of this team")


def _progress_entries(session: Session, task_id: str, user_id: str) -> list[TaskProgress]:
    return list(session.scalars(
        select(TaskProgress)
        .where(TaskProgress.task_id == task_id, TaskProgress.user_id == user_id)
        .order_by(TaskProgress.created_at.desc())
    ).all())


def _has_completion_award(session: Session, task_id: str, user_id: str) -> bool:
    return session.scalar(
        select(Achievement.id).where(
            Achievement.task_id == task_id,
            Achievement.user_id == user_id,
            Achievement.source == AchievementSource.PROGRESS.value,
        )
    ) is not None


def _team_achievements(session: Session, team_id: str) -> tuple[list[Achievement], list[Task]]:
    """All achievements on *team_id*'s tasks, including soft-deleted tasks."""
    tasks = list(session.scalars(select(Task).where(Task.team_id == team_id)).all())
    task_ids = [t.id for t in tasks]
    if not task_ids:
        return [], tasks
    achievements = list(session.scalars(
        select(Achievement)
        .where(Achievement.task_id.in_(task_ids))
        .order_by(Achievement.completed_at)
    ).all())
    return achievements, tasks


def _badge_counter(badge_cache: BadgeCache | None):
    if badge_cache is None:
        return lambda user_id, count, points: count_badges(count, points)
    return lambda user_id, count, points: len(badge_cache.get(user_id, count, points))


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------
def submit_proof(
    engine: Engine,
    *,
    task_id: str,
    user_id: str,
    proof_text: str,
    proof_type: str = "text",
    badge_cache: BadgeCache | None = None,
) -> Achievement:
    """Record completion of a completion task.

    ``points_earned`` is copied from the task now and never recomputed.
    """
    validate_proof(proof_text, proof_type)
    proof = proof_text.strip()

    with get_session(engine) as session:
        task = _load_active_task(session, task_id)
        if task.is_progress_task:
            raise ValidationError({
                "task_id": "Progress tasks are completed by logging progress",
            })
        _require_membership(session, task.team_id, user_id)

        achievement = Achievement(
            user_id=user_id,
            task_id=task_id,
            source=AchievementSource.PROOF.value,
            proof_text=proof if proof_type == "text" else None,
            proof_url=proof if proof_type == "link" else None,
            points_earned=task.points,
        )
        apply_verification_policy(achievement)
        session.add(achievement)
        session.flush()

    if badge_cache is not None:
        badge_cache.invalidate(user_id)
    logger.info(
        "Achievement %s: user %s completed task %s (+%d pts)",
        achievement.id, user_id, task_id, achievement.points_earned,
    )
    return achievement


def add_progress(
    engine: Engine,
    *,
    task_id: str,
    user_id: str,
    value: float,
    notes: str | None = None,
    badge_cache: BadgeCache | None = None,
) -> ProgressOutcome:
    """Log a contribution toward a progress task.

    Raises
    ------
    ValidationError
        Non-positive value, value past the target, or not a progress task.
    DuplicateCompletionAward
        The completion achievement for this (task, user) already exists.
    """
    with get_session(engine) as session:
        task = _load_active_task(session, task_id)
        if not task.is_progress_task:
            raise ValidationError({
                "task_id": "This task is completed by submitting proof",
            })
        _require_membership(session, task.team_id, user_id)

        target = task.target_value
        before = current_total(task_id, user_id, _progress_entries(session, task_id, user_id))

        check = validate_contribution(before, value, target)
        if not check:
            if check.reason == REASON_NOT_POSITIVE:
                message = "Progress value must be greater than 0"
            else:
                message = (
                    f"Adding {value:g} would exceed the target of "
                    f"{target:g} {task.progress_unit or ''}".rstrip()
                )
            raise ValidationError({"value": message})

        entry = TaskProgress(
            task_id=task_id,
            user_id=user_id,
            value_added=value,
            notes=(notes or "").strip() or None,
        )
        session.add(entry)
        session.flush()

        after = before + value
        outcome = ProgressOutcome(
            entry=entry, previous_total=before, new_total=after, target_value=target,
        )

        if crosses_completion(before, after, target):
            if _has_completion_award(session, task_id, user_id):
                logger.warning(
                    "Completion already awarded for task %s / user %s; refusing a second",
                    task_id, user_id,
                )
                raise DuplicateCompletionAward(task_id, user_id)

            achievement = Achievement(
                user_id=user_id,
                task_id=task_id,
                source=AchievementSource.PROGRESS.value,
                proof_text=completion_proof_text(after, target, task.progress_unit),
                points_earned=task.points,
            )
            apply_verification_policy(achievement)
            try:
                with session.begin_nested():   # SAVEPOINT
                    session.add(achievement)
                    session.flush()
            except IntegrityError as exc:
                # A concurrent request won the award; drop this whole write.
                logger.warning(
                    "Duplicate completion award race on task %s / user %s",
                    task_id, user_id,
                )
                raise DuplicateCompletionAward(task_id, user_id) from exc
            outcome.achievement = achievement

    if outcome.achievement is not None:
        if badge_cache is not None:
            badge_cache.invalidate(user_id)
        logger.info(
            "Achievement %s: user %s reached %s/%s on task %s (+%d pts)",
            outcome.achievement.id, user_id, after, target, task_id,
            outcome.achievement.points_earned,
        )
    return outcome


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------
def get_progress(engine: Engine, task_id: str, user_id: str) -> ProgressSummary:
    """Current total and history (newest first) for (task, user)."""
    with get_session(engine) as session:
        task = session.get(Task, task_id)
        if task is None:
            raise NotFound("Task not found")
        entries = _progress_entries(session, task_id, user_id)
        return ProgressSummary(
            task_id=task_id,
            user_id=user_id,
            total=current_total(task_id, user_id, entries),
            target_value=task.target_value,
            progress_unit=task.progress_unit,
            entries=entries,
        )


def get_user_achievements(
    engine: Engine, user_id: str, team_id: str | None = None
) -> list[Achievement]:
    """A user's achievements, newest first, optionally limited to one team."""
    with get_session(engine) as session:
        query = select(Achievement).where(Achievement.user_id == user_id)
        if team_id is not None:
            query = query.join(Task, Task.id == Achievement.task_id).where(
                Task.team_id == team_id
            )
        return list(session.scalars(query.order_by(Achievement.completed_at.desc())).all())


def get_team_leaderboard(
    engine: Engine,
    team_id: str,
    badge_cache: BadgeCache | None = None,
) -> list[LeaderboardEntry]:
    with get_session(engine) as session:
        achievements, tasks = _team_achievements(session, team_id)
        user_ids = {a.user_id for a in achievements}
        users = list(session.scalars(
            select(User).where(User.id.in_(user_ids))
        ).all()) if user_ids else []

    return aggregate_leaderboard(
        achievements,
        users,
        tasks=tasks,
        team_id=team_id,
        badge_counter=_badge_counter(badge_cache),
    )


def _user_totals(session: Session, user_id: str, team_id: str | None) -> tuple[int, int]:
    """(verified achievement count, verified points) for a user."""
    query = select(
        func.count(Achievement.id),
        func.coalesce(func.sum(Achievement.points_earned), 0),
    ).where(Achievement.user_id == user_id, Achievement.verified.is_(True))
    if team_id is not None:
        query = query.join(Task, Task.id == Achievement.task_id).where(
            Task.team_id == team_id
        )
    count, points = session.execute(query).one()
    return int(count or 0), int(points or 0)


def get_user_badges(
    engine: Engine,
    user_id: str,
    team_id: str | None = None,
    badge_cache: BadgeCache | None = None,
) -> list[EarnedBadge]:
    with get_session(engine) as session:
        count, points = _user_totals(session, user_id, team_id)
    if badge_cache is not None:
        return badge_cache.get(user_id, count, points)
    return evaluate_badges(count, points)


def get_team_stats(
    engine: Engine,
    team_id: str,
    badge_cache: BadgeCache | None = None,
) -> TeamStats:
    """Headline numbers for a team's overview card."""
    with get_session(engine) as session:
        member_ids = list(session.scalars(
            select(TeamMember.user_id).where(TeamMember.team_id == team_id)
        ).all())
        active_tasks = session.scalar(
            select(func.count()).select_from(Task).where(
                Task.team_id == team_id, Task.is_active.is_(True),
            )
        ) or 0
        achievements, _ = _team_achievements(session, team_id)

    verified = [a for a in achievements if a.verified]
    totals: dict[str, tuple[int, int]] = {uid: (0, 0) for uid in member_ids}
    for ach in verified:
        if ach.user_id in totals:
            count, points = totals[ach.user_id]
            totals[ach.user_id] = (count + 1, points + ach.points_earned)

    counter = _badge_counter(badge_cache)
    total_badges = sum(counter(uid, c, p) for uid, (c, p) in totals.items())

    return TeamStats(
        members=len(member_ids),
        active_tasks=active_tasks,
        completed_achievements=len(verified),
        total_badges=total_badges,
    )
