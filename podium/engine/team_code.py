"""
podium.engine.team_code — Team Join Codes
==========================================

A join code is the first three characters of the team name followed by the
first four characters of the team id, upper-cased::

    encode_team_code("Warriors", "w1234567")  ->  "WARW123"

There is no reverse derivation: lookup re-encodes every candidate team and
compares.  Short names or ids are truncated, never padded.

The scheme has no collision resistance.  Two teams whose names share a
three-letter prefix and whose ids share a four-character prefix get the
same code.  Codes are already in circulation, so the encoding stays as is;
collisions are logged and can be rejected with ``strict=True``.

This module is pure calculation — no database I/O.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Protocol, TypeVar

from podium.constants import TEAM_CODE_ID_CHARS, TEAM_CODE_NAME_CHARS
from podium.errors import AmbiguousTeamCode

logger = logging.getLogger(__name__)


class _HasCode(Protocol):
    id: str
    name: str


TeamT = TypeVar("TeamT", bound=_HasCode)


def encode_team_code(name: str, team_id: str) -> str:
    """Derive the shareable join code for a team."""
    return (name[:TEAM_CODE_NAME_CHARS] + team_id[:TEAM_CODE_ID_CHARS]).upper()


def _normalize(code: str) -> str:
    return code.strip().upper()


def find_code_collisions(code: str, candidates: Iterable[TeamT]) -> list[TeamT]:
    """Return every candidate whose code matches *code*, in input order."""
    wanted = _normalize(code)
    return [t for t in candidates if encode_team_code(t.name, t.id) == wanted]


def lookup_team_by_code(code: str, candidates: Iterable[TeamT]) -> TeamT | None:
    """Return the first candidate whose code matches *code* (case-insensitive).

    Returns ``None`` when nothing matches.  A collision is logged but the
    first match in *candidates* order is still returned.
    """
    matches = find_code_collisions(code, candidates)
    if not matches:
        return None
    if len(matches) > 1:
        logger.warning(
            "Team code %s is ambiguous: %d teams match (%s); using %s",
            _normalize(code), len(matches),
            ", ".join(t.id for t in matches), matches[0].id,
        )
    return matches[0]


def resolve_team_code(
    code: str,
    candidates: Iterable[TeamT],
    *,
    strict: bool = False,
) -> TeamT | None:
    """Lookup used by the join flow.

    With ``strict=True`` an ambiguous code raises :class:`AmbiguousTeamCode`
    instead of resolving to the first match.
    """
    candidates = list(candidates)
    if strict:
        matches = find_code_collisions(code, candidates)
        if len(matches) > 1:
            logger.warning(
                "Rejecting ambiguous team code %s (%d matches)",
                _normalize(code), len(matches),
            )
            raise AmbiguousTeamCode(_normalize(code), [t.id for t in matches])
        return matches[0] if matches else None
    return lookup_team_by_code(code, candidates)
