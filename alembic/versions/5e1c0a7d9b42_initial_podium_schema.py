"""Initial Podium schema: users, teams, tasks, achievements, progress

Revision ID: 5e1c0a7d9b42
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "5e1c0a7d9b42"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now()
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="athlete"),
        sa.Column("password_hash", sa.String(100)),
        sa.Column("avatar_url", sa.String(500)),
        *_timestamps(),
    )

    op.create_table(
        "teams",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("sport", sa.String(50), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("logo_url", sa.String(500)),
        sa.Column(
            "coach_id",
            sa.String(36),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "subscription_tier", sa.String(20), nullable=False, server_default="free"
        ),
        sa.Column("max_athletes", sa.Integer(), nullable=False, server_default="50"),
        *_timestamps(),
    )
    op.create_index("ix_teams_coach_id", "teams", ["coach_id"])

    op.create_table(
        "team_members",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "team_id",
            sa.String(36),
            sa.ForeignKey("teams.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            sa.String(36),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("role", sa.String(20), nullable=False, server_default="athlete"),
        sa.Column("joined_at", sa.DateTime(timezone=True)),
        sa.UniqueConstraint("team_id", "user_id", name="uq_team_members_team_user"),
    )
    op.create_index("ix_team_members_user_id", "team_members", ["user_id"])

    op.create_table(
        "tasks",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "team_id",
            sa.String(36),
            sa.ForeignKey("teams.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("points", sa.Integer(), nullable=False),
        sa.Column(
            "assigned_by",
            sa.String(36),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("due_date", sa.DateTime(timezone=True)),
        sa.Column("target_value", sa.Float()),
        sa.Column("progress_unit", sa.String(50)),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_tasks_team_active", "tasks", ["team_id", "is_active"])

    op.create_table(
        "achievements",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "user_id",
            sa.String(36),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "task_id",
            sa.String(36),
            sa.ForeignKey("tasks.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("source", sa.String(20), nullable=False, server_default="proof"),
        sa.Column("proof_text", sa.Text()),
        sa.Column("proof_url", sa.String(500)),
        sa.Column("points_earned", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("verified", sa.Boolean(), server_default=sa.false()),
        sa.Column("verified_by", sa.String(36)),
        sa.Column("verified_at", sa.DateTime(timezone=True)),
        sa.Column("completed_at", sa.DateTime(timezone=True)),
    )
    op.create_index(
        "ix_achievements_user_time", "achievements", ["user_id", "completed_at"]
    )
    op.create_index("ix_achievements_task", "achievements", ["task_id"])
    op.create_index(
        "ix_achievements_progress_once",
        "achievements",
        ["task_id", "user_id"],
        unique=True,
        postgresql_where=sa.text("source = 'progress'"),
        sqlite_where=sa.text("source = 'progress'"),
    )

    op.create_table(
        "task_progress",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "task_id",
            sa.String(36),
            sa.ForeignKey("tasks.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            sa.String(36),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("value_added", sa.Float(), nullable=False),
        sa.Column("notes", sa.Text()),
        sa.Column("created_at", sa.DateTime(timezone=True)),
    )
    op.create_index(
        "ix_task_progress_task_user",
        "task_progress",
        ["task_id", "user_id", "created_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_task_progress_task_user", table_name="task_progress")
    op.drop_table("task_progress")
    op.drop_index("ix_achievements_progress_once", table_name="achievements")
    op.drop_index("ix_achievements_task", table_name="achievements")
    op.drop_index("ix_achievements_user_time", table_name="achievements")
    op.drop_table("achievements")
    op.drop_index("ix_tasks_team_active", table_name="tasks")
    op.drop_table("tasks")
    op.drop_index("ix_team_members_user_id", table_name="team_members")
    op.drop_table("team_members")
    op.drop_index("ix_teams_coach_id", table_name="teams")
    op.drop_table("teams")
    op.drop_table("users")
