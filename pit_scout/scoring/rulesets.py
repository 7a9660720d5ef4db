"""
Season rulesets: point values per phase and action.

A ruleset is data, not code. The score engine takes one as a parameter, so a
new season means a new table here (or a ruleset file), never a change to the
engine.

Shipped rulesets:
- reefscape_2025: quick-scoring counters (coral levels, processor, net, cage)
- crescendo_2024: scouting-form counters (speaker, amp, trap, climb)

Ruleset files (JSON or YAML):
    name: reefscape_2025
    season: 2025
    points:
      auto: {leave: 3, coralL1: 3, ...}
      teleop: {...}
      endgame: {...}
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Mapping
import pathlib

from ..errors import ValidationError
from ..mappings import PHASES
from ..settings import load_config_file


@dataclass(frozen=True)
class Ruleset:
    """Versioned point table keyed by phase, then action name."""

    name: str
    season: int
    points: Mapping[str, Mapping[str, float]] = field(default_factory=dict)
    # Actions recorded as yes/no rather than counted
    flags: FrozenSet[str] = frozenset()

    def phase_points(self, phase: str) -> Mapping[str, float]:
        return self.points.get(phase, {})

    def point_value(self, phase: str, action: str) -> float:
        return self.phase_points(phase).get(action, 0)

    def actions(self, phase: str) -> Iterable[str]:
        return tuple(self.phase_points(phase).keys())

    def is_flag(self, action: str) -> bool:
        return action in self.flags

    @staticmethod
    def from_dict(data: Dict) -> "Ruleset":
        for key in ("name", "season", "points"):
            if key not in data:
                raise ValidationError(f"Ruleset is missing required key '{key}'")

        points = data["points"]
        if not isinstance(points, dict):
            raise ValidationError("Ruleset 'points' must be a mapping of phase -> actions")

        unknown = [p for p in points if p not in PHASES]
        if unknown:
            raise ValidationError(f"Ruleset '{data['name']}' has unknown phases: {unknown}")

        clean: Dict[str, Dict[str, float]] = {}
        for phase, actions in points.items():
            clean[phase] = {}
            for action, value in (actions or {}).items():
                if not isinstance(value, (int, float)) or isinstance(value, bool) or value < 0:
                    raise ValidationError(
                        f"Ruleset '{data['name']}': {phase}.{action} must be a non-negative number"
                    )
                clean[phase][action] = value

        flags = frozenset(data.get("flags", ()))
        known = {a for actions in clean.values() for a in actions}
        stray = sorted(flags - known)
        if stray:
            raise ValidationError(f"Ruleset '{data['name']}' flags unknown actions: {stray}")

        return Ruleset(name=str(data["name"]), season=int(data["season"]), points=clean, flags=flags)

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "season": self.season,
            "points": {phase: dict(actions) for phase, actions in self.points.items()},
            "flags": sorted(self.flags),
        }


REEFSCAPE_2025 = Ruleset(
    name="reefscape_2025",
    season=2025,
    points={
        "auto": {
            "leave": 3,
            "coralL1": 3,
            "coralL2": 4,
            "coralL3": 6,
            "coralL4": 7,
            "processor": 6,
            "net": 4,
        },
        "teleop": {
            "coralL1": 2,
            "coralL2": 3,
            "coralL3": 4,
            "coralL4": 5,
            "processor": 6,
            "net": 4,
        },
        "endgame": {
            "bargePark": 2,
            "shallowCage": 6,
            "deepCage": 12,
        },
    },
    flags=frozenset({"leave", "bargePark", "shallowCage", "deepCage"}),
)

CRESCENDO_2024 = Ruleset(
    name="crescendo_2024",
    season=2024,
    points={
        "auto": {
            "autoSpeaker": 4,
            "autoAmp": 2,
            "mobility": 2,
        },
        "teleop": {
            "teleopSpeaker": 2,
            "teleopAmp": 1,
            "teleopTrap": 5,
        },
        "endgame": {
            "climb": 3,
            "harmony": 2,
            "spotlight": 1,
            "park": 1,
        },
    },
    flags=frozenset({"mobility", "climb", "harmony", "spotlight", "park"}),
)

DEFAULT_RULESET = REEFSCAPE_2025

RULESETS: Dict[str, Ruleset] = {
    REEFSCAPE_2025.name: REEFSCAPE_2025,
    CRESCENDO_2024.name: CRESCENDO_2024,
}


def get_ruleset(name: str) -> Ruleset:
    """Look up a shipped ruleset by name."""
    if name not in RULESETS:
        valid = ", ".join(sorted(RULESETS))
        raise ValidationError(f"Unknown ruleset '{name}'. Must be one of: {valid}")
    return RULESETS[name]


def load_ruleset_file(path: str | pathlib.Path) -> Ruleset:
    """Load a ruleset from a JSON or YAML file."""
    return Ruleset.from_dict(load_config_file(path))


def resolve_ruleset(name_or_path: str) -> Ruleset:
    """A shipped ruleset name, or a path to a ruleset file."""
    if name_or_path in RULESETS:
        return RULESETS[name_or_path]
    p = pathlib.Path(name_or_path)
    if p.suffix.lower() in {".json", ".yaml", ".yml"}:
        return load_ruleset_file(p)
    return get_ruleset(name_or_path)
