"""
tests/test_validation.py — Form Validation Rules
=================================================
"""

from __future__ import annotations

import pytest

from podium.engine.validation import (
    is_valid_url,
    validate_proof,
    validate_signup,
    validate_task_fields,
    validate_team_fields,
)
from podium.errors import ValidationError


class TestTaskFields:
    @pytest.mark.parametrize("points", [0, 1001, -5])
    def test_points_out_of_range(self, points):
        with pytest.raises(ValidationError) as exc_info:
            validate_task_fields("Run", points)
        assert exc_info.value.errors["points"] == "Points must be between 1 and 1000"

    @pytest.mark.parametrize("points", [1, 1000])
    def test_points_bounds_inclusive(self, points):
        validate_task_fields("Run", points)

    def test_blank_title(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_task_fields("   ", 50)
        assert "title" in exc_info.value.errors

    def test_progress_task_needs_unit(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_task_fields("Run", 50, target_value=10)
        assert set(exc_info.value.errors) == {"progress_unit"}

    def test_progress_task_needs_positive_target(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_task_fields("Run", 50, target_value=0, progress_unit="miles")
        assert set(exc_info.value.errors) == {"target_value"}

    @pytest.mark.parametrize("target", [float("nan"), float("inf")])
    def test_non_finite_target(self, target):
        with pytest.raises(ValidationError) as exc_info:
            validate_task_fields("Run", 50, target_value=target, progress_unit="miles")
        assert exc_info.value.errors == {"target_value": "Target value must be greater than 0"}

    def test_unit_without_target(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_task_fields("Run", 50, progress_unit="miles")
        assert "target_value" in exc_info.value.errors

    def test_all_errors_collected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_task_fields("", 0, target_value=-1, progress_unit="")
        assert set(exc_info.value.errors) == {"title", "points", "target_value", "progress_unit"}


class TestTeamFields:
    def test_short_name(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_team_fields("AB", "Soccer")
        assert "at least 3" in exc_info.value.errors["name"]

    def test_unknown_tier(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_team_fields("Warriors", "Soccer", subscription_tier="gold")
        assert "subscription_tier" in exc_info.value.errors

    def test_valid(self):
        validate_team_fields("Warriors", "Soccer", max_athletes=25, subscription_tier="premium")


class TestProof:
    @pytest.mark.parametrize(
        "url, ok",
        [
            ("https://strava.com/activities/1", True),
            ("http://example.com", True),
            ("ftp://example.com", False),
            ("strava.com/activities/1", False),
            ("https://", False),
        ],
    )
    def test_is_valid_url(self, url, ok):
        assert is_valid_url(url) is ok

    def test_bad_link(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_proof("not a url", "link")
        assert exc_info.value.errors["proof_text"] == (
            "Please enter a valid URL (including http:// or https://)"
        )

    def test_blank_text(self):
        with pytest.raises(ValidationError):
            validate_proof("  ", "text")

    def test_unknown_type(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_proof("photo.png", "image")
        assert "proof_type" in exc_info.value.errors


class TestSignup:
    def test_admin_cannot_self_register(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_signup("a@b.com", "longenough", "Ann", "admin")
        assert "role" in exc_info.value.errors

    def test_short_password(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_signup("a@b.com", "short", "Ann", "athlete")
        assert "password" in exc_info.value.errors

    def test_message_joins_field_errors(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_signup("nope", "short", "", "athlete")
        assert exc_info.value.status_code == 422
        assert "Password must be at least 8 characters" in exc_info.value.message

    def test_password_over_bcrypt_limit(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_signup("a@b.com", "x" * 73, "Ann", "athlete")
        assert exc_info.value.errors == {"password": "Password must be at most 72 bytes"}

    def test_password_limit_counts_bytes(self):
        validate_signup("a@b.com", "x" * 72, "Ann", "athlete")
        with pytest.raises(ValidationError):
            validate_signup("a@b.com", "é" * 40, "Ann", "athlete")
