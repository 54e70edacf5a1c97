"""
podium.engine.progress — Cumulative Progress Accumulation
==========================================================

A progress task has a numeric ``target_value``.  Athletes log contributions
(``value_added > 0``) and the current total is their sum.  A contribution
that would push the total past the target is rejected before it is written;
entries already stored are never clamped.

Crossing from incomplete to complete is what triggers the completion
award.  Guarding that award to at most once per (task, user) is the
caller's job; see :mod:`podium.services.achievement_service`.

This module is pure calculation — no database I/O.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

REASON_NOT_POSITIVE = "must be positive"
REASON_EXCEEDS_TARGET = "would exceed target"


@dataclass(frozen=True, slots=True)
class ContributionResult:
    """Outcome of :func:`validate_contribution`."""

    ok: bool
    reason: str | None = None

    def __bool__(self) -> bool:
        return self.ok


def current_total(task_id: str, user_id: str, entries: Iterable[Any]) -> float:
    """Sum ``value_added`` over entries matching (task_id, user_id)."""
    return sum(
        (e.value_added for e in entries if e.task_id == task_id and e.user_id == user_id),
        0,
    )


def validate_contribution(
    current: float, proposed: float, target: float
) -> ContributionResult:
    """Pre-submission guard for a new contribution.

    Non-finite values (NaN, infinity) are not positive amounts.  A total that
    lands on the target within float rounding counts as reaching it.
    """
    if not math.isfinite(proposed) or proposed <= 0:
        return ContributionResult(False, REASON_NOT_POSITIVE)
    total = current + proposed
    if total > target and not math.isclose(total, target):
        return ContributionResult(False, REASON_EXCEEDS_TARGET)
    return ContributionResult(True)


def is_complete(current: float, target: float) -> bool:
    return current >= target or math.isclose(current, target)


def crosses_completion(before: float, after: float, target: float) -> bool:
    """True only for the false → true transition."""
    return not is_complete(before, target) and is_complete(after, target)


def _fmt(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


def completion_proof_text(total: float, target: float, unit: str | None) -> str:
    """Human-readable proof line for a completion award."""
    text = f"Completed {_fmt(total)}/{_fmt(target)}"
    return f"{text} {unit}" if unit else text
