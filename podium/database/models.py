"""
podium.database.models — SQLAlchemy 2.0 Data Models
====================================================

Tables:
- users          — Athletes, coaches and admins
- teams          — Coach-owned teams
- team_members   — (team, user) join rows, unique per pair
- tasks          — Point-valued completion or progress tasks
- achievements   — Recorded task completions (points frozen at creation)
- task_progress  — Incremental contributions toward progress tasks

Badges and leaderboard rows are derived on read and have no table.
"""

from __future__ import annotations

import enum
import uuid
from datetime import UTC, datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(UTC)


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all Podium ORM models."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class Role(enum.StrEnum):
    ATHLETE = "athlete"
    COACH = "coach"
    ADMIN = "admin"


class SubscriptionTier(enum.StrEnum):
    FREE = "free"
    BASIC = "basic"
    PREMIUM = "premium"
    ENTERPRISE = "enterprise"


class AchievementSource(enum.StrEnum):
    """How an achievement came to exist."""
    PROOF = "proof"        # Athlete submitted proof for a completion task
    PROGRESS = "progress"  # Progress total crossed the task's target


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------
class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=Role.ATHLETE.value)
    password_hash: Mapped[str | None] = mapped_column(String(100), default=None)
    avatar_url: Mapped[str | None] = mapped_column(String(500), default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), onupdate=_utcnow
    )

    memberships: Mapped[list[TeamMember]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} name={self.name!r} role={self.role}>"


# ---------------------------------------------------------------------------
# Teams
# ---------------------------------------------------------------------------
class Team(Base):
    __tablename__ = "teams"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    sport: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    logo_url: Mapped[str | None] = mapped_column(String(500), default=None)
    coach_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    subscription_tier: Mapped[str] = mapped_column(
        String(20), nullable=False, default=SubscriptionTier.FREE.value
    )
    max_athletes: Mapped[int] = mapped_column(Integer, nullable=False, default=50)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), onupdate=_utcnow
    )

    members: Mapped[list[TeamMember]] = relationship(
        back_populates="team", cascade="all, delete-orphan"
    )
    tasks: Mapped[list[Task]] = relationship(
        back_populates="team", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_teams_coach_id", "coach_id"),
    )

    def __repr__(self) -> str:
        return f"<Team id={self.id} name={self.name!r}>"


# ---------------------------------------------------------------------------
# TeamMember — (team, user) join entity
# ---------------------------------------------------------------------------
class TeamMember(Base):
    __tablename__ = "team_members"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    team_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("teams.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=Role.ATHLETE.value)
    joined_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    team: Mapped[Team] = relationship(back_populates="members")
    user: Mapped[User] = relationship(back_populates="memberships")

    __table_args__ = (
        UniqueConstraint("team_id", "user_id", name="uq_team_members_team_user"),
        Index("ix_team_members_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<TeamMember team={self.team_id} user={self.user_id} role={self.role}>"


# ---------------------------------------------------------------------------
# Task — completion task (no target) or progress task (target + unit)
# ---------------------------------------------------------------------------
class Task(Base):
    __tablename__ = "tasks"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    team_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("teams.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    points: Mapped[int] = mapped_column(Integer, nullable=False)
    assigned_by: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    due_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)
    target_value: Mapped[float | None] = mapped_column(Float, default=None)
    progress_unit: Mapped[str | None] = mapped_column(String(50), default=None)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), onupdate=_utcnow
    )

    team: Mapped[Team] = relationship(back_populates="tasks")

    __table_args__ = (
        Index("ix_tasks_team_active", "team_id", "is_active"),
    )

    @property
    def is_progress_task(self) -> bool:
        return self.target_value is not None

    def __repr__(self) -> str:
        return f"<Task id={self.id} title={self.title!r} points={self.points}>"


# ---------------------------------------------------------------------------
# Achievement — a user's recorded completion of a task
# ---------------------------------------------------------------------------
class Achievement(Base):
    """Recorded completion.

    ``points_earned`` is copied from the task when the row is written and
    is never recomputed, so later task edits leave history untouched.
    """
    __tablename__ = "achievements"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    task_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False
    )
    source: Mapped[str] = mapped_column(
        String(20), nullable=False, default=AchievementSource.PROOF.value
    )
    proof_text: Mapped[str | None] = mapped_column(Text, default=None)
    proof_url: Mapped[str | None] = mapped_column(String(500), default=None)
    points_earned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    verified: Mapped[bool] = mapped_column(Boolean, default=False)
    verified_by: Mapped[str | None] = mapped_column(String(36), default=None)
    verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)
    completed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    task: Mapped[Task] = relationship()
    user: Mapped[User] = relationship()

    __table_args__ = (
        Index("ix_achievements_user_time", "user_id", "completed_at"),
        Index("ix_achievements_task", "task_id"),
        # At most one progress-completion award per (task, user)
        Index(
            "ix_achievements_progress_once",
            "task_id",
            "user_id",
            unique=True,
            postgresql_where=text("source = 'progress'"),
            sqlite_where=text("source = 'progress'"),
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<Achievement id={self.id} user={self.user_id} "
            f"task={self.task_id} pts={self.points_earned}>"
        )


# ---------------------------------------------------------------------------
# TaskProgress — incremental contribution to a progress task
# ---------------------------------------------------------------------------
class TaskProgress(Base):
    __tablename__ = "task_progress"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    task_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    value_added: Mapped[float] = mapped_column(Float, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, default=None)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    __table_args__ = (
        Index("ix_task_progress_task_user", "task_id", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<TaskProgress task={self.task_id} user={self.user_id} "
            f"value={self.value_added}>"
        )
