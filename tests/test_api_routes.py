"""
tests/test_api_routes.py — FastAPI Route Integration Tests
============================================================
End-to-end flows through the TestClient against the in-memory database:
auth guards, sign-up / sign-in / sign-out, team creation and join codes,
tasks, progress and the leaderboard.
"""

from __future__ import annotations

import jwt
import pytest

from podium.api.deps import JWT_ALGORITHM


def _auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def _signup_and_login(client, name: str, role: str = "athlete") -> tuple[str, dict]:
    email = f"{name.lower()}@example.com"
    resp = client.post("/api/auth/signup", json={
        "email": email, "password": "correct-horse", "name": name, "role": role,
    })
    assert resp.status_code == 201, resp.text
    resp = client.post("/api/auth/login", json={"email": email, "password": "correct-horse"})
    assert resp.status_code == 200, resp.text
    body = resp.json()
    return body["access_token"], body["user"]


# ===========================================================================
# Health endpoint
# ===========================================================================
class TestHealthEndpoint:
    def test_health_returns_ok(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}


# ===========================================================================
# Auth guards
# ===========================================================================
class TestAuthGuards:
    PROTECTED_GET_ENDPOINTS = [
        "/api/auth/me",
        "/api/teams",
        "/api/teams/mine",
        "/api/teams/some-id/leaderboard",
        "/api/users/some-id/badges",
    ]

    @pytest.mark.parametrize("endpoint", PROTECTED_GET_ENDPOINTS)
    def test_no_token_returns_401(self, client, endpoint):
        assert client.get(endpoint).status_code == 401

    @pytest.mark.parametrize("endpoint", PROTECTED_GET_ENDPOINTS)
    def test_garbage_token_returns_401(self, client, endpoint):
        assert client.get(endpoint, headers=_auth("not-a-jwt")).status_code == 401

    def test_validly_signed_token_without_session_rejected(self, client):
        """A correctly signed JWT whose jti was never issued is refused."""
        import podium.api.deps as deps

        token = jwt.encode(
            {"sub": "u1", "jti": "never-issued", "role": "admin"},
            deps.JWT_SECRET,
            algorithm=JWT_ALGORITHM,
        )
        resp = client.get("/api/auth/me", headers=_auth(token))
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Session expired or signed out"


# ===========================================================================
# Sign-up / sign-in / sign-out
# ===========================================================================
class TestAuthFlow:
    def test_login_then_me(self, client):
        token, user = _signup_and_login(client, "Alice")
        resp = client.get("/api/auth/me", headers=_auth(token))
        assert resp.status_code == 200
        assert resp.json()["user"]["id"] == user["id"]
        assert "password_hash" not in resp.json()["user"]

    def test_duplicate_email(self, client):
        _signup_and_login(client, "Alice")
        resp = client.post("/api/auth/signup", json={
            "email": "ALICE@example.com", "password": "another-one", "name": "Alice 2",
        })
        assert resp.status_code == 409

    def test_wrong_password(self, client):
        _signup_and_login(client, "Alice")
        resp = client.post("/api/auth/login", json={
            "email": "alice@example.com", "password": "wrong-password",
        })
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Invalid email or password"

    def test_signup_validation_errors(self, client):
        resp = client.post("/api/auth/signup", json={
            "email": "bad", "password": "short", "name": "X", "role": "admin",
        })
        assert resp.status_code == 422
        assert set(resp.json()["errors"]) == {"email", "password", "role"}

    def test_password_over_bcrypt_limit(self, client):
        resp = client.post("/api/auth/signup", json={
            "email": "long@example.com", "password": "x" * 80, "name": "Long",
        })
        assert resp.status_code == 422
        assert set(resp.json()["errors"]) == {"password"}

    def test_login_with_overlong_password_is_refused(self, client):
        _signup_and_login(client, "Alice")
        resp = client.post("/api/auth/login", json={
            "email": "alice@example.com", "password": "x" * 80,
        })
        assert resp.status_code == 401

    def test_logout_revokes_token(self, client):
        token, _ = _signup_and_login(client, "Alice")
        resp = client.post("/api/auth/logout", headers=_auth(token))
        assert resp.json() == {"signed_out": True}
        assert client.get("/api/auth/me", headers=_auth(token)).status_code == 401


# ===========================================================================
# Teams, tasks, progress, leaderboard
# ===========================================================================
class TestTeamFlow:
    @pytest.fixture
    def coach_token(self, client):
        return _signup_and_login(client, "Coach", role="coach")[0]

    @pytest.fixture
    def team(self, client, coach_token):
        resp = client.post("/api/teams", json={"name": "Warriors", "sport": "Track"},
                           headers=_auth(coach_token))
        assert resp.status_code == 201, resp.text
        return resp.json()["team"]

    def test_athlete_cannot_create_team(self, client):
        token, _ = _signup_and_login(client, "Alice")
        resp = client.post("/api/teams", json={"name": "Mine", "sport": "Golf"},
                           headers=_auth(token))
        assert resp.status_code == 403

    def test_explicit_zero_cap_rejected(self, client, coach_token):
        resp = client.post("/api/teams", json={
            "name": "Warriors", "sport": "Track", "max_athletes": 0,
        }, headers=_auth(coach_token))
        assert resp.status_code == 422
        assert set(resp.json()["errors"]) == {"max_athletes"}

    def test_team_uses_configured_cap(self, team):
        assert team["max_athletes"] == 3
        assert team["code"] == ("WAR" + team["id"][:4]).upper()

    def test_join_by_code_lower_case(self, client, team):
        token, _ = _signup_and_login(client, "Alice")
        resp = client.post("/api/teams/join-by-code", json={"code": team["code"].lower()},
                           headers=_auth(token))
        assert resp.status_code == 200
        assert resp.json()["team"]["id"] == team["id"]

        mine = client.get("/api/teams/mine", headers=_auth(token)).json()["teams"]
        assert [t["id"] for t in mine] == [team["id"]]

        again = client.post(f"/api/teams/{team['id']}/join", headers=_auth(token))
        assert again.status_code == 409

    def test_bad_code(self, client, team):
        token, _ = _signup_and_login(client, "Alice")
        resp = client.post("/api/teams/join-by-code", json={"code": "NOPE123"},
                           headers=_auth(token))
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Invalid team code"

    def test_unknown_team(self, client, coach_token):
        resp = client.get("/api/teams/missing", headers=_auth(coach_token))
        assert resp.status_code == 404

    def test_progress_to_leaderboard(self, client, coach_token, team):
        resp = client.post(f"/api/teams/{team['id']}/tasks", json={
            "title": "Run 10 miles", "points": 100,
            "target_value": 10, "progress_unit": "miles",
        }, headers=_auth(coach_token))
        assert resp.status_code == 201, resp.text
        task = resp.json()["task"]
        assert task["kind"] == "progress"

        token, user = _signup_and_login(client, "Alice")
        client.post(f"/api/teams/{team['id']}/join", headers=_auth(token))

        first = client.post(f"/api/tasks/{task['id']}/progress", json={"value": 6},
                            headers=_auth(token)).json()
        assert first["completed"] is False
        assert first["achievement"] is None

        done = client.post(f"/api/tasks/{task['id']}/progress", json={"value": 4},
                           headers=_auth(token)).json()
        assert done["completed"] is True
        assert done["achievement"]["points_earned"] == 100

        over = client.post(f"/api/tasks/{task['id']}/progress", json={"value": 1},
                           headers=_auth(token))
        assert over.status_code == 422

        board = client.get(f"/api/teams/{team['id']}/leaderboard",
                           headers=_auth(token)).json()
        assert board["total"] == 1
        assert board["entries"][0]["user"]["id"] == user["id"]
        assert board["entries"][0]["rank"] == 1
        assert board["entries"][0]["medal"] == "\U0001f947"
        assert board["entries"][0]["badges_count"] == 1

        history = client.get(f"/api/tasks/{task['id']}/progress", headers=_auth(token)).json()
        assert history["total"] == 10
        assert [h["value_added"] for h in history["history"]] == [4, 6]

        badges = client.get(f"/api/users/{user['id']}/badges", headers=_auth(token)).json()
        assert [b["id"] for b in badges["badges"]] == ["first_achievement"]

    def test_coach_soft_deletes_task(self, client, coach_token, team):
        task = client.post(f"/api/teams/{team['id']}/tasks", json={
            "title": "Stretch", "points": 10,
        }, headers=_auth(coach_token)).json()["task"]
        resp = client.delete(f"/api/tasks/{task['id']}", headers=_auth(coach_token))
        assert resp.json()["task"]["is_active"] is False
        listed = client.get(f"/api/teams/{team['id']}/tasks", headers=_auth(coach_token))
        assert listed.json()["tasks"] == []

    def test_stats(self, client, coach_token, team):
        resp = client.get(f"/api/teams/{team['id']}/stats", headers=_auth(coach_token))
        assert resp.json() == {
            "members": 1, "active_tasks": 0, "completed_achievements": 0, "total_badges": 0,
        }

    def test_non_finite_numbers_rejected(self, client, coach_token, team):
        # httpx refuses to encode NaN, so send the raw JSON text
        json_headers = {**_auth(coach_token), "Content-Type": "application/json"}
        resp = client.post(
            f"/api/teams/{team['id']}/tasks",
            content='{"title": "Run", "points": 10, "target_value": NaN, "progress_unit": "miles"}',
            headers=json_headers,
        )
        assert resp.status_code == 422
        assert resp.json()["errors"] == {"target_value": "Target value must be greater than 0"}

        task = client.post(f"/api/teams/{team['id']}/tasks", json={
            "title": "Run", "points": 10, "target_value": 10, "progress_unit": "miles",
        }, headers=_auth(coach_token)).json()["task"]
        resp = client.post(
            f"/api/tasks/{task['id']}/progress",
            content='{"value": NaN}',
            headers=json_headers,
        )
        assert resp.status_code == 422
        assert resp.json()["errors"] == {"value": "Progress value must be greater than 0"}
