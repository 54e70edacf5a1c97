"""
podium.services.team_service — Teams & Membership
==================================================

Creating a team is two independent writes: the team row, then the
creator's ``coach`` membership.  If the second write fails the team still
exists and the error propagates to the caller.

Joining goes through :func:`add_team_member`, which enforces the
``(team, user)`` uniqueness and the team's athlete cap.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from podium.constants import DEFAULT_MAX_ATHLETES
from podium.database.engine import get_session
from podium.database.models import Role, Team, TeamMember, User
from podium.engine.team_code import encode_team_code, resolve_team_code
from podium.engine.validation import validate_team_fields
from podium.errors import DuplicateMembership, NotFound, PermissionDenied, TeamFull

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)

UPDATABLE_TEAM_FIELDS: frozenset[str] = frozenset({
    "name", "sport", "description", "logo_url", "subscription_tier", "max_athletes",
})


def team_code_for(team: Team) -> str:
    return encode_team_code(team.name, team.id)


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------
def get_team(engine: Engine, team_id: str) -> Team:
    with get_session(engine) as session:
        team = session.get(Team, team_id)
        if team is None:
            raise NotFound("Team not found")
        return team


def list_teams(engine: Engine) -> list[Team]:
    """All teams, oldest first (the order join-code lookup scans in)."""
    with get_session(engine) as session:
        return list(session.scalars(select(Team).order_by(Team.created_at, Team.id)).all())


def get_user_teams(engine: Engine, user_id: str) -> list[Team]:
    with get_session(engine) as session:
        return list(session.scalars(
            select(Team)
            .join(TeamMember, TeamMember.team_id == Team.id)
            .where(TeamMember.user_id == user_id)
            .order_by(TeamMember.joined_at)
        ).all())


def get_team_members(engine: Engine, team_id: str) -> list[User]:
    with get_session(engine) as session:
        return list(session.scalars(
            select(User)
            .join(TeamMember, TeamMember.user_id == User.id)
            .where(TeamMember.team_id == team_id)
            .order_by(TeamMember.joined_at)
        ).all())


def is_member(engine: Engine, team_id: str, user_id: str) -> bool:
    with get_session(engine) as session:
        return session.scalar(
            select(TeamMember.id).where(
                TeamMember.team_id == team_id, TeamMember.user_id == user_id,
            )
        ) is not None


def _require_coach(team: Team, actor: User | None) -> None:
    if actor is None:
        raise NotFound("User not found")
    if team.coach_id != actor.id and actor.role != Role.ADMIN:
        raise PermissionDenied("Only the team's coach can do that")


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------
def add_team_member(
    engine: Engine,
    team_id: str,
    user_id: str,
    role: str = Role.ATHLETE.value,
) -> TeamMember:
    """Insert a membership row.

    Raises
    ------
    NotFound
        Team or user does not exist.
    DuplicateMembership
        The user is already on the team.
    TeamFull
        Adding an athlete would exceed ``max_athletes``.
    """
    try:
        with get_session(engine) as session:
            team = session.get(Team, team_id)
            if team is None:
                raise NotFound("Team not found")
            if session.get(User, user_id) is None:
                raise NotFound("User not found")

            existing = session.scalar(
                select(TeamMember.id).where(
                    TeamMember.team_id == team_id, TeamMember.user_id == user_id,
                )
            )
            if existing is not None:
                raise DuplicateMembership("You are already a member of this team")

            if role == Role.ATHLETE:
                athletes = session.scalar(
                    select(func.count()).select_from(TeamMember).where(
                        TeamMember.team_id == team_id,
                        TeamMember.role == Role.ATHLETE.value,
                    )
                ) or 0
                if athletes >= team.max_athletes:
                    raise TeamFull(f"Team is full ({team.max_athletes} athletes)")

            member = TeamMember(team_id=team_id, user_id=user_id, role=role)
            session.add(member)
            session.flush()
    except IntegrityError as exc:
        raise DuplicateMembership("You are already a member of this team") from exc

    logger.info("User %s joined team %s as %s", user_id, team_id, role)
    return member


def create_team(
    engine: Engine,
    *,
    name: str,
    sport: str,
    coach_id: str,
    description: str | None = None,
    logo_url: str | None = None,
    subscription_tier: str = "free",
    max_athletes: int = DEFAULT_MAX_ATHLETES,
) -> Team:
    """Create a team owned by *coach_id* and enrol the coach as a member."""
    validate_team_fields(
        name, sport, max_athletes=max_athletes, subscription_tier=subscription_tier,
    )

    with get_session(engine) as session:
        coach = session.get(User, coach_id)
        if coach is None:
            raise NotFound("User not found")
        if coach.role not in (Role.COACH, Role.ADMIN):
            raise PermissionDenied("Only coaches can create teams")

        team = Team(
            name=name.strip(),
            sport=sport.strip(),
            description=(description or "").strip() or None,
            logo_url=logo_url,
            coach_id=coach_id,
            subscription_tier=subscription_tier,
            max_athletes=max_athletes,
        )
        session.add(team)
        session.flush()

    logger.info("Team created: %s (%s) by %s", team.name, team.id, coach_id)
    add_team_member(engine, team.id, coach_id, Role.COACH.value)
    return team


def update_team(
    engine: Engine,
    team_id: str,
    *,
    actor_id: str,
    **fields: Any,
) -> Team:
    """Apply coach edits.  Unknown or ``None`` fields are ignored."""
    changes = {
        k: v for k, v in fields.items() if k in UPDATABLE_TEAM_FIELDS and v is not None
    }

    with get_session(engine) as session:
        team = session.get(Team, team_id)
        if team is None:
            raise NotFound("Team not found")
        _require_coach(team, session.get(User, actor_id))

        validate_team_fields(
            changes.get("name", team.name),
            changes.get("sport", team.sport),
            max_athletes=changes.get("max_athletes"),
            subscription_tier=changes.get("subscription_tier"),
        )
        for key, value in changes.items():
            setattr(team, key, value.strip() if isinstance(value, str) else value)
        session.flush()

    logger.info("Team %s updated by %s: %s", team_id, actor_id, sorted(changes))
    return team


def join_team_by_id(engine: Engine, team_id: str, user_id: str) -> TeamMember:
    return add_team_member(engine, team_id, user_id, Role.ATHLETE.value)


def join_team_by_code(
    engine: Engine,
    code: str,
    user_id: str,
    *,
    strict: bool = False,
) -> tuple[Team, TeamMember]:
    """Resolve *code* against every team and join the match.

    Raises :class:`NotFound` for an unknown code and, with ``strict=True``,
    :class:`~podium.errors.AmbiguousTeamCode` when several teams share it.
    """
    team = resolve_team_code(code, list_teams(engine), strict=strict)
    if team is None:
        raise NotFound("Invalid team code")
    member = join_team_by_id(engine, team.id, user_id)
    return team, member
