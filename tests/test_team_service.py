"""
tests/test_team_service.py — Team & Membership Service Tests
=============================================================
Uses an in-memory SQLite database via the shared conftest fixtures.
"""

from __future__ import annotations

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from podium.database.models import Role, Team, TeamMember
from podium.errors import (
    AmbiguousTeamCode,
    DuplicateMembership,
    NotFound,
    PermissionDenied,
    TeamFull,
    ValidationError,
)
from podium.services import team_service
from conftest import make_team, make_user


def _member_rows(engine, team_id: str) -> int:
    with Session(engine) as session:
        return session.scalar(
            select(func.count()).select_from(TeamMember).where(TeamMember.team_id == team_id)
        )


# ===========================================================================
# create_team
# ===========================================================================
class TestCreateTeam:
    def test_coach_is_enrolled(self, db_engine, coach):
        team = team_service.create_team(
            db_engine, name="Warriors", sport="Soccer", coach_id=coach.id,
        )
        members = team_service.get_team_members(db_engine, team.id)
        assert [m.id for m in members] == [coach.id]
        assert team_service.is_member(db_engine, team.id, coach.id)

    def test_athlete_cannot_create(self, db_engine, athlete):
        with pytest.raises(PermissionDenied):
            team_service.create_team(
                db_engine, name="Warriors", sport="Soccer", coach_id=athlete.id,
            )

    def test_invalid_fields(self, db_engine, coach):
        with pytest.raises(ValidationError):
            team_service.create_team(db_engine, name="AB", sport="", coach_id=coach.id)

    def test_code_matches_name_and_id(self, db_engine, coach):
        team = team_service.create_team(
            db_engine, name="Warriors", sport="Soccer", coach_id=coach.id,
        )
        assert team_service.team_code_for(team) == ("WAR" + team.id[:4]).upper()


# ===========================================================================
# Membership
# ===========================================================================
class TestMembership:
    def test_duplicate_membership_rejected(self, db_engine, team, athlete):
        with pytest.raises(DuplicateMembership):
            team_service.join_team_by_id(db_engine, team.id, athlete.id)
        assert _member_rows(db_engine, team.id) == 2

    def test_unknown_team(self, db_engine, athlete):
        with pytest.raises(NotFound):
            team_service.join_team_by_id(db_engine, "missing", athlete.id)

    def test_athlete_cap_ignores_coach(self, db_engine, coach):
        team = make_team(db_engine, coach, "Hawks", max_athletes=1)
        first = make_user(db_engine, "First")
        second = make_user(db_engine, "Second")
        team_service.join_team_by_id(db_engine, team.id, first.id)
        with pytest.raises(TeamFull):
            team_service.join_team_by_id(db_engine, team.id, second.id)

    def test_user_teams(self, db_engine, team, athlete, coach):
        other = make_team(db_engine, coach, "Hawks")
        assert [t.id for t in team_service.get_user_teams(db_engine, athlete.id)] == [team.id]
        assert {t.id for t in team_service.get_user_teams(db_engine, coach.id)} == {
            team.id, other.id,
        }


# ===========================================================================
# Join by code
# ===========================================================================
class TestJoinByCode:
    def test_join_case_insensitive(self, db_engine, coach):
        make_team(db_engine, coach, "Warriors", id="w1234567")
        newcomer = make_user(db_engine, "Newcomer")
        team, member = team_service.join_team_by_code(db_engine, "WARw123", newcomer.id)
        assert team.id == "w1234567"
        assert member.role == Role.ATHLETE

    def test_unknown_code(self, db_engine, coach, athlete):
        with pytest.raises(NotFound, match="Invalid team code"):
            team_service.join_team_by_code(db_engine, "ZZZ0000", athlete.id)

    def test_collision_joins_first_team(self, db_engine, coach, athlete):
        make_team(db_engine, coach, "Saints", id="abcd1111")
        make_team(db_engine, coach, "Sailors", id="abcd2222")
        team, _ = team_service.join_team_by_code(db_engine, "SAIABCD", athlete.id)
        assert team.id in {"abcd1111", "abcd2222"}
        assert len(team_service.get_user_teams(db_engine, athlete.id)) == 1

    def test_strict_collision_rejected(self, db_engine, coach, athlete):
        make_team(db_engine, coach, "Saints", id="abcd1111")
        make_team(db_engine, coach, "Sailors", id="abcd2222")
        with pytest.raises(AmbiguousTeamCode):
            team_service.join_team_by_code(db_engine, "saiabcd", athlete.id, strict=True)
        assert team_service.get_user_teams(db_engine, athlete.id) == []


# ===========================================================================
# update_team
# ===========================================================================
class TestUpdateTeam:
    def test_coach_updates(self, db_engine, team, coach):
        updated = team_service.update_team(
            db_engine, team.id, actor_id=coach.id, sport="Cross Country", bogus="x",
        )
        assert updated.sport == "Cross Country"
        with Session(db_engine) as session:
            assert session.get(Team, team.id).sport == "Cross Country"

    def test_athlete_cannot_update(self, db_engine, team, athlete):
        with pytest.raises(PermissionDenied):
            team_service.update_team(db_engine, team.id, actor_id=athlete.id, name="Mine")

    def test_admin_can_update(self, db_engine, team):
        admin = make_user(db_engine, "Root", Role.ADMIN.value)
        updated = team_service.update_team(db_engine, team.id, actor_id=admin.id, max_athletes=10)
        assert updated.max_athletes == 10
