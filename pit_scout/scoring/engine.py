"""
Score rule engine.

Maps per-phase action counts to points under a Ruleset:

    total = sum over phases, sum over actions of count_or_bool * points[phase][action]

Pure functions, no I/O. Input is assumed validated (non-negative counts);
callers reject negatives before reaching the engine. Unknown action keys are
ignored so partially-populated or newer records still score.
"""
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from ..errors import ValidationError
from ..mappings import PHASES
from .rulesets import Ruleset, DEFAULT_RULESET


def _as_number(value: Any) -> float:
    # None / missing counters score nothing; booleans weigh 0 or 1
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    return value


def _as_points(total: float) -> int:
    return int(round(total))


def compute_points(
    phase: str,
    action_counts: Optional[Mapping[str, Any]],
    ruleset: Ruleset = DEFAULT_RULESET,
) -> int:
    """
    Points earned in one phase.

    Parameters
    ----------
    phase : str
        One of "auto", "teleop", "endgame"
    action_counts : mapping
        Action name -> count (int) or flag (bool). Unknown names are ignored.
    ruleset : Ruleset
        Point table to score against

    Returns
    -------
    int
        Non-negative point total for the phase
    """
    if not action_counts:
        return 0

    table = ruleset.phase_points(phase)
    total = 0
    for action, value in action_counts.items():
        if action in table:
            total += _as_number(value) * table[action]
    return _as_points(total)


def compute_phase_scores(
    record: Optional[Mapping[str, Any]],
    ruleset: Ruleset = DEFAULT_RULESET,
) -> Dict[str, int]:
    """
    Points per phase for a record shaped {auto: {...}, teleop: {...}, endgame: {...}}.

    Missing phases score 0.
    """
    record = record or {}
    return {phase: compute_points(phase, record.get(phase), ruleset) for phase in PHASES}


def compute_alliance_total(phase_scores: Mapping[str, Any]) -> int:
    """Sum of per-phase scores."""
    return _as_points(sum(_as_number(v) for v in phase_scores.values()))


def compute_total(
    record: Optional[Mapping[str, Any]],
    ruleset: Ruleset = DEFAULT_RULESET,
) -> int:
    return compute_alliance_total(compute_phase_scores(record, ruleset))


def validate_action_counts(record: Mapping[str, Any], context: str = "") -> None:
    """
    Reject malformed action counts before they reach the engine.

    Every phase present must be a mapping; every value must be a bool, None,
    or a non-negative integer.

    Raises
    ------
    ValidationError
        On the first offending phase or value
    """
    prefix = f"{context}: " if context else ""
    for phase in PHASES:
        counts = record.get(phase)
        if counts is None:
            continue
        if not isinstance(counts, Mapping):
            raise ValidationError(f"{prefix}{phase} must be a mapping of action -> count")
        for action, value in counts.items():
            if value is None or isinstance(value, bool):
                continue
            if not isinstance(value, int) or value < 0:
                raise ValidationError(
                    f"{prefix}{phase}.{action} must be a non-negative integer, got {value!r}"
                )
