"""
Quick scores: per-match, per-alliance action counters with a derived total.

A QuickScoreSheet holds one counter set per alliance. Every edit goes through
``update_score`` which validates the value and recomputes the alliance total,
so ``sheet.total(alliance)`` always equals the engine's score of the counters.

Stored shape (under ``quick_scores``, keyed by match number):
    {"red":  {"auto": {...}, "teleop": {...}, "endgame": {...}, "total": 42},
     "blue": {...}}
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from ..errors import ValidationError
from ..mappings import ALLIANCES, PHASES, normalize_alliance, normalize_phase
from .engine import compute_total
from .rulesets import Ruleset, DEFAULT_RULESET


def empty_alliance_score(ruleset: Ruleset = DEFAULT_RULESET) -> Dict[str, Any]:
    """Zeroed counters for every action in the ruleset."""
    score: Dict[str, Any] = {}
    for phase in PHASES:
        score[phase] = {
            action: (False if ruleset.is_flag(action) else 0)
            for action in ruleset.actions(phase)
        }
    score["total"] = 0
    return score


class QuickScoreSheet:
    """
    Red and blue counter sets for one match.

    Parameters
    ----------
    ruleset : Ruleset
        Point table used for the derived totals
    data : dict, optional
        Previously stored {"red": {...}, "blue": {...}} to resume from
    """

    def __init__(self, ruleset: Ruleset = DEFAULT_RULESET, data: Optional[Dict[str, Any]] = None):
        self.ruleset = ruleset
        self._scores = {alliance: empty_alliance_score(ruleset) for alliance in ALLIANCES}
        if data:
            for alliance in ALLIANCES:
                stored = data.get(alliance) or {}
                for phase in PHASES:
                    for action, value in (stored.get(phase) or {}).items():
                        if action in self._scores[alliance][phase]:
                            self._scores[alliance][phase][action] = value
                self._recompute(alliance)

    def _recompute(self, alliance: str) -> None:
        self._scores[alliance]["total"] = compute_total(self._scores[alliance], self.ruleset)

    def update_score(self, alliance: str, phase: str, field: str, value: Any) -> int:
        """
        Set one counter and recompute that alliance's total.

        Returns the new alliance total.
        """
        alliance = normalize_alliance(alliance)
        phase = normalize_phase(phase)
        counters = self._scores[alliance][phase]
        if field not in counters:
            raise ValidationError(
                f"Unknown {phase} action '{field}' for ruleset {self.ruleset.name}"
            )

        if self.ruleset.is_flag(field):
            if not isinstance(value, bool):
                raise ValidationError(f"{phase}.{field} is a yes/no action, got {value!r}")
        elif isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValidationError(f"{phase}.{field} must be a non-negative integer, got {value!r}")

        counters[field] = value
        self._recompute(alliance)
        return self._scores[alliance]["total"]

    def increment(self, alliance: str, phase: str, field: str, step: int = 1) -> int:
        """
        Add ``step`` to a counter, never going below zero.

        Yes/no actions have no count; set them with ``update_score``.
        """
        alliance = normalize_alliance(alliance)
        phase = normalize_phase(phase)
        if self.ruleset.is_flag(field):
            raise ValidationError(
                f"{phase}.{field} is a yes/no action and cannot be incremented; use update_score"
            )
        current = self._scores[alliance][phase].get(field, 0)
        return self.update_score(alliance, phase, field, max(0, int(current) + step))

    def reset(self, alliance: str) -> None:
        alliance = normalize_alliance(alliance)
        self._scores[alliance] = empty_alliance_score(self.ruleset)

    def total(self, alliance: str) -> int:
        return self._scores[normalize_alliance(alliance)]["total"]

    def alliance(self, alliance: str) -> Dict[str, Any]:
        score = self._scores[normalize_alliance(alliance)]
        return {key: (dict(value) if isinstance(value, dict) else value) for key, value in score.items()}

    def to_dict(self) -> Dict[str, Any]:
        return {alliance: self.alliance(alliance) for alliance in ALLIANCES}

    @staticmethod
    def from_dict(data: Dict[str, Any], ruleset: Ruleset = DEFAULT_RULESET) -> "QuickScoreSheet":
        return QuickScoreSheet(ruleset=ruleset, data=data)
