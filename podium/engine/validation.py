"""
podium.engine.validation — Form Validation Rules
=================================================

Pre-submission checks for team, task, proof and sign-up forms.  Each
validator collects every problem into a ``field → message`` dict and raises
a single :class:`~podium.errors.ValidationError`, so callers can render all
messages next to their fields at once.  Nothing here touches the store.
"""

from __future__ import annotations

import math
from urllib.parse import urlparse

from podium.constants import (
    MAX_PASSWORD_BYTES,
    MAX_TASK_POINTS,
    MIN_TASK_POINTS,
    MIN_TEAM_NAME_LENGTH,
    SELF_SIGNUP_ROLES,
    SUBSCRIPTION_TIERS,
)
from podium.errors import ValidationError


def _raise_if(errors: dict[str, str]) -> None:
    if errors:
        raise ValidationError(errors)


def is_valid_url(value: str) -> bool:
    """True for absolute ``http``/``https`` URLs with a host."""
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def validate_team_fields(
    name: str,
    sport: str,
    *,
    max_athletes: int | None = None,
    subscription_tier: str | None = None,
) -> None:
    errors: dict[str, str] = {}
    if not name.strip():
        errors["name"] = "Team name is required"
    elif len(name.strip()) < MIN_TEAM_NAME_LENGTH:
        errors["name"] = f"Team name must be at least {MIN_TEAM_NAME_LENGTH} characters"
    if not sport.strip():
        errors["sport"] = "Sport is required"
    if max_athletes is not None and max_athletes < 1:
        errors["max_athletes"] = "Member cap must be at least 1"
    if subscription_tier is not None and subscription_tier not in SUBSCRIPTION_TIERS:
        errors["subscription_tier"] = f"Unknown subscription tier: {subscription_tier}"
    _raise_if(errors)


def validate_task_fields(
    title: str,
    points: int,
    *,
    target_value: float | None = None,
    progress_unit: str | None = None,
) -> None:
    """Validate a task form.

    A task is a progress task when either ``target_value`` or
    ``progress_unit`` is supplied; both are then required.
    """
    errors: dict[str, str] = {}
    if not title.strip():
        errors["title"] = "Task title is required"
    if points < MIN_TASK_POINTS or points > MAX_TASK_POINTS:
        errors["points"] = f"Points must be between {MIN_TASK_POINTS} and {MAX_TASK_POINTS}"

    if target_value is not None or progress_unit is not None:
        if target_value is None or not math.isfinite(target_value) or target_value <= 0:
            errors["target_value"] = "Target value must be greater than 0"
        if not (progress_unit or "").strip():
            errors["progress_unit"] = "Progress unit is required (e.g., miles, reps, minutes)"
    _raise_if(errors)


def validate_proof(proof_text: str, proof_type: str = "text") -> None:
    errors: dict[str, str] = {}
    value = proof_text.strip()
    if proof_type not in ("text", "link"):
        errors["proof_type"] = f"Unknown proof type: {proof_type}"
    elif not value:
        errors["proof_text"] = (
            "Please provide a valid link" if proof_type == "link"
            else "Please describe your proof of completion"
        )
    elif proof_type == "link" and not is_valid_url(value):
        errors["proof_text"] = "Please enter a valid URL (including http:// or https://)"
    _raise_if(errors)


def validate_signup(email: str, password: str, name: str, role: str) -> None:
    errors: dict[str, str] = {}
    if "@" not in email or not email.strip():
        errors["email"] = "A valid email is required"
    if len(password) < 8:
        errors["password"] = "Password must be at least 8 characters"
    elif len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        errors["password"] = f"Password must be at most {MAX_PASSWORD_BYTES} bytes"
    if not name.strip():
        errors["name"] = "Name is required"
    if role not in SELF_SIGNUP_ROLES:
        errors["role"] = "Role must be athlete or coach"
    _raise_if(errors)
