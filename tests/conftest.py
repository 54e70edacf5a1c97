"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import os

# ---------------------------------------------------------------------------
# Ensure a valid JWT_SECRET is always set for test runs.
# This must happen before any import of podium.api.deps, which validates
# the secret at module-load time.
# ---------------------------------------------------------------------------
_TEST_JWT_SECRET = "test-secret-for-pytest-only-" + "x" * 40  # > 32 chars
os.environ.setdefault("JWT_SECRET", _TEST_JWT_SECRET)

import pytest  # noqa: E402
from sqlalchemy import Engine, create_engine  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from podium.config import PodiumConfig  # noqa: E402
from podium.database.engine import init_db  # noqa: E402
from podium.database.models import Role, Team, TeamMember, User  # noqa: E402


@pytest.fixture
def db_engine() -> Engine:
    """Create an in-memory SQLite engine with all Podium tables.

    Uses StaticPool so all threads share the same in-memory database
    (required by ``asyncio.to_thread`` used in :func:`run_db`).
    """
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    return engine


@pytest.fixture
def test_config() -> PodiumConfig:
    return PodiumConfig(
        app_name="Podium Test",
        dashboard_port=8000,
        default_max_athletes=3,
        strict_team_codes=False,
        session_ttl_hours=1,
    )


# ---------------------------------------------------------------------------
# Seed helpers — plain ORM inserts, no password hashing
# ---------------------------------------------------------------------------
def make_user(engine: Engine, name: str, role: str = Role.ATHLETE.value, **kw) -> User:
    with Session(engine, expire_on_commit=False) as session:
        user = User(
            email=kw.pop("email", f"{name.lower()}@example.com"),
            name=name,
            role=role,
            **kw,
        )
        session.add(user)
        session.commit()
        return user


def make_team(
    engine: Engine,
    coach: User,
    name: str = "Warriors",
    *,
    members: tuple[User, ...] = (),
    **kw,
) -> Team:
    """Insert a team with the coach (and optional athletes) as members."""
    with Session(engine, expire_on_commit=False) as session:
        team = Team(name=name, sport="Track", coach_id=coach.id, **kw)
        session.add(team)
        session.flush()
        session.add(TeamMember(team_id=team.id, user_id=coach.id, role=Role.COACH.value))
        for athlete in members:
            session.add(TeamMember(team_id=team.id, user_id=athlete.id))
        session.commit()
        return team


@pytest.fixture
def coach(db_engine) -> User:
    return make_user(db_engine, "Coach", Role.COACH.value)


@pytest.fixture
def athlete(db_engine) -> User:
    return make_user(db_engine, "Alice")


@pytest.fixture
def team(db_engine, coach, athlete) -> Team:
    return make_team(db_engine, coach, members=(athlete,))


@pytest.fixture
def client(db_engine, test_config):
    """FastAPI TestClient bound to the in-memory database.

    Entered as a context manager so the lifespan creates the session store
    and badge cache on ``app.state``.
    """
    from fastapi.testclient import TestClient

    from podium.api import main

    main.app.dependency_overrides[main.get_engine] = lambda: db_engine
    main.app.dependency_overrides[main.get_config] = lambda: test_config
    with TestClient(main.app, raise_server_exceptions=False) as c:
        yield c
    main.app.dependency_overrides.clear()
