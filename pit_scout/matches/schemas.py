"""
Match record schema and validation.

A Match is stored as a plain dict under ``match_data``:

    {"match_number": 12, "comp_level": "qualification",
     "red_alliance": [1, 2, 3], "blue_alliance": [4, 5, 6],
     "status": "completed",
     "score_breakdown": {"red": {"total_points": 80}, "blue": {"total_points": 95}},
     "winning_alliance": "blue"}

``score_breakdown`` and ``winning_alliance`` are present if and only if the
status is completed.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..errors import ValidationError
from ..mappings import (
    ALLIANCE_SIZE,
    ALLIANCES,
    MATCH_STATUSES,
    STATUS_COMPLETED,
    STATUS_SCHEDULED,
    WINNER_TIE,
    normalize_comp_level,
)


def determine_winner(red_total: int, blue_total: int) -> str:
    """
    Winning alliance for final totals.

    >>> determine_winner(150, 100)
    'red'
    >>> determine_winner(120, 120)
    'tie'
    """
    if red_total > blue_total:
        return "red"
    if blue_total > red_total:
        return "blue"
    return WINNER_TIE


def _positive_int(value: Any, what: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{what} must be a positive integer, got {value!r}")
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    if not isinstance(value, int) or value <= 0:
        raise ValidationError(f"{what} must be a positive integer, got {value!r}")
    return value


def _total(value: Any, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError(f"{what} must be a non-negative integer, got {value!r}")
    return value


def _team_list(value: Any, color: str) -> List[Any]:
    if value is None:
        return []
    # strings are iterable but never a team list
    if not isinstance(value, (list, tuple)):
        raise ValidationError(f"{color}_alliance must be a list of team numbers, got {value!r}")
    return list(value)


def _alliance_total(breakdown: Mapping, color: str) -> Any:
    entry = breakdown.get(color) or {}
    if not isinstance(entry, Mapping):
        raise ValidationError(f"score_breakdown.{color} must be an object, got {entry!r}")
    return entry.get("total_points")


@dataclass
class Match:
    match_number: int
    red_alliance: List[int]
    blue_alliance: List[int]
    comp_level: str = "qualification"
    status: str = STATUS_SCHEDULED
    red_total: Optional[int] = None
    blue_total: Optional[int] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_completed(self) -> bool:
        return self.status == STATUS_COMPLETED

    @property
    def winning_alliance(self) -> Optional[str]:
        if not self.is_completed:
            return None
        return determine_winner(self.red_total, self.blue_total)

    def alliance_of(self, team_number: int) -> Optional[str]:
        if team_number in self.red_alliance:
            return "red"
        if team_number in self.blue_alliance:
            return "blue"
        return None

    def teams(self) -> List[int]:
        return list(self.red_alliance) + list(self.blue_alliance)

    def validate(self) -> "Match":
        """
        Check every record invariant and normalize in place.

        Raises
        ------
        ValidationError
            If the match number, alliances, level, status or totals are malformed
        """
        self.match_number = _positive_int(self.match_number, "match_number")
        self.comp_level = normalize_comp_level(self.comp_level)

        for color in ALLIANCES:
            teams = getattr(self, f"{color}_alliance")
            if not isinstance(teams, (list, tuple)) or len(teams) != ALLIANCE_SIZE:
                raise ValidationError(
                    f"Match {self.match_number}: {color} alliance must have exactly "
                    f"{ALLIANCE_SIZE} teams, got {teams!r}"
                )
            teams = [_positive_int(t, f"{color} alliance team") for t in teams]
            if len(set(teams)) != ALLIANCE_SIZE:
                raise ValidationError(
                    f"Match {self.match_number}: {color} alliance has duplicate teams {teams}"
                )
            setattr(self, f"{color}_alliance", teams)

        shared = sorted(set(self.red_alliance) & set(self.blue_alliance))
        if shared:
            raise ValidationError(
                f"Match {self.match_number}: teams {shared} appear in both alliances"
            )

        if self.status not in MATCH_STATUSES:
            raise ValidationError(
                f"Match {self.match_number}: unknown status '{self.status}'. "
                f"Must be one of: {', '.join(MATCH_STATUSES)}"
            )

        if self.is_completed:
            if self.red_total is None or self.blue_total is None:
                raise ValidationError(
                    f"Match {self.match_number}: completed matches need both alliance totals"
                )
            self.red_total = _total(self.red_total, "red total")
            self.blue_total = _total(self.blue_total, "blue total")
        else:
            # Scheduled matches carry no result
            self.red_total = None
            self.blue_total = None

        return self

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = dict(self.extra)
        data.update({
            "match_number": self.match_number,
            "comp_level": self.comp_level,
            "red_alliance": list(self.red_alliance),
            "blue_alliance": list(self.blue_alliance),
            "status": self.status,
        })
        if self.is_completed:
            data["score_breakdown"] = {
                "red": {"total_points": self.red_total},
                "blue": {"total_points": self.blue_total},
            }
            data["winning_alliance"] = self.winning_alliance
        else:
            data.pop("score_breakdown", None)
            data.pop("winning_alliance", None)
        return data

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Match":
        if not isinstance(data, dict):
            raise ValidationError(f"Match record must be an object, got {type(data).__name__}")
        for key in ("match_number", "red_alliance", "blue_alliance"):
            if key not in data:
                raise ValidationError(f"Match record is missing required field '{key}'")

        breakdown = data.get("score_breakdown") or {}
        if not isinstance(breakdown, Mapping):
            raise ValidationError("score_breakdown must be an object keyed by alliance")
        known = {
            "match_number", "comp_level", "red_alliance", "blue_alliance",
            "status", "score_breakdown", "winning_alliance",
        }
        return Match(
            match_number=data["match_number"],
            red_alliance=_team_list(data["red_alliance"], "red"),
            blue_alliance=_team_list(data["blue_alliance"], "blue"),
            comp_level=data.get("comp_level", "qualification"),
            status=data.get("status", STATUS_SCHEDULED),
            red_total=_alliance_total(breakdown, "red"),
            blue_total=_alliance_total(breakdown, "blue"),
            extra={k: v for k, v in data.items() if k not in known},
        )


def new_match(
    match_number: int,
    red_alliance: List[int],
    blue_alliance: List[int],
    comp_level: str = "qualification",
    red_score: Optional[int] = None,
    blue_score: Optional[int] = None,
    status: str = STATUS_SCHEDULED,
) -> Match:
    """
    Build a Match the way the entry form does.

    A completed status without both scores is downgraded to scheduled, which
    keeps the breakdown/winner invariant intact.
    """
    if status == STATUS_COMPLETED and (red_score is None or blue_score is None):
        status = STATUS_SCHEDULED
    return Match(
        match_number=match_number,
        red_alliance=list(red_alliance),
        blue_alliance=list(blue_alliance),
        comp_level=comp_level,
        status=status,
        red_total=red_score,
        blue_total=blue_score,
    ).validate()
