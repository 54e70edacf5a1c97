"""
podium.errors — Error Taxonomy
===============================

Three families of failure, all rooted at :class:`PodiumError`:

* **Validation** — bad form input caught before any write.  Carries a
  ``field → message`` mapping so callers can show errors inline.
* **Collaborator** — store or auth failures (not found, duplicates,
  permission, credentials).  Message text is shown to the user verbatim.
* **Logical** — derived-state hazards (ambiguous join codes, duplicate
  completion awards).  Logged where detected and reported explicitly.

Every error carries ``status_code`` so the API can map it in one place.
"""

from __future__ import annotations


class PodiumError(Exception):
    """Base class for all Podium errors."""

    status_code: int = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------
class ValidationError(PodiumError):
    """One or more fields failed validation."""

    status_code = 422

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = dict(errors)
        super().__init__("; ".join(self.errors.values()) or "Invalid input")


# ---------------------------------------------------------------------------
# Collaborator errors
# ---------------------------------------------------------------------------
class NotFound(PodiumError):
    status_code = 404


class DuplicateRecord(PodiumError):
    status_code = 409


class DuplicateMembership(DuplicateRecord):
    """The (team, user) pair already exists in ``team_members``."""


class TeamFull(PodiumError):
    status_code = 409


class PermissionDenied(PodiumError):
    status_code = 403


class AuthenticationFailed(PodiumError):
    status_code = 401


# ---------------------------------------------------------------------------
# Logical / derived-state errors
# ---------------------------------------------------------------------------
class AmbiguousTeamCode(PodiumError):
    """More than one team encodes to the same join code."""

    status_code = 409

    def __init__(self, code: str, team_ids: list[str]) -> None:
        self.code = code
        self.team_ids = list(team_ids)
        super().__init__(
            f"Team code {code!r} matches {len(self.team_ids)} teams; "
            "ask your coach to share the team directly."
        )


class DuplicateCompletionAward(PodiumError):
    """A completion achievement already exists for this (task, user)."""

    status_code = 409

    def __init__(self, task_id: str, user_id: str) -> None:
        self.task_id = task_id
        self.user_id = user_id
        super().__init__("Completion for this task has already been awarded.")
