"""
Canonical identifiers for Pit Scout.

Single source of truth for match phases, alliance colors, competition levels,
match statuses and strategy list names. All input code should normalize raw
strings through this module before storing them.
"""
from __future__ import annotations

from typing import Dict, Tuple

from .errors import ValidationError

# Match phases in play order
PHASES: Tuple[str, ...] = ("auto", "teleop", "endgame")

ALLIANCES: Tuple[str, ...] = ("red", "blue")

ALLIANCE_SIZE = 3

# Match status (one-way: scheduled -> completed)
STATUS_SCHEDULED = "scheduled"
STATUS_COMPLETED = "completed"
MATCH_STATUSES: Tuple[str, ...] = (STATUS_SCHEDULED, STATUS_COMPLETED)

WINNER_TIE = "tie"

COMP_LEVELS: Tuple[str, ...] = ("practice", "qualification", "playoff")

# Raw competition level codes -> canonical level.
# Short codes are the ones the event schedule feeds and the match entry form use.
COMP_LEVEL_ALIASES: Dict[str, str] = {
    "practice": "practice",
    "p": "practice",
    "pr": "practice",
    "qualification": "qualification",
    "qual": "qualification",
    "qm": "qualification",
    "q": "qualification",
    "playoff": "playoff",
    "playoffs": "playoff",
    "qf": "playoff",
    "sf": "playoff",
    "f": "playoff",
    "final": "playoff",
}

# Phase aliases seen in drawing-mode toggles and imported records
PHASE_ALIASES: Dict[str, str] = {
    "auto": "auto",
    "autonomous": "auto",
    "teleop": "teleop",
    "teleoperated": "teleop",
    "dc": "teleop",
    "endgame": "endgame",
    "end": "endgame",
}

STRATEGY_LISTS: Tuple[str, ...] = ("strengths", "weaknesses", "recommendations")

# Singular names used by the strategy dialogs
STRATEGY_LIST_ALIASES: Dict[str, str] = {
    "strengths": "strengths",
    "strength": "strengths",
    "weaknesses": "weaknesses",
    "weakness": "weaknesses",
    "recommendations": "recommendations",
    "recommendation": "recommendations",
    "strategies": "recommendations",
    "strategy": "recommendations",
}


def _normalize(value: str, aliases: Dict[str, str], what: str) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{what} must be a string, got {value!r}")
    key = value.strip().lower()
    if key in aliases:
        return aliases[key]
    valid = ", ".join(sorted(set(aliases.values())))
    raise ValidationError(f"Unknown {what} '{value}'. Must be one of: {valid}")


def normalize_phase(phase: str) -> str:
    """
    Normalize a phase name to one of PHASES.

    >>> normalize_phase("Autonomous")
    'auto'
    """
    return _normalize(phase, PHASE_ALIASES, "phase")


def normalize_comp_level(level: str) -> str:
    """
    Normalize a competition level code to one of COMP_LEVELS.

    >>> normalize_comp_level("qm")
    'qualification'
    >>> normalize_comp_level("sf")
    'playoff'
    """
    return _normalize(level, COMP_LEVEL_ALIASES, "competition level")


def normalize_alliance(alliance: str) -> str:
    return _normalize(alliance, {a: a for a in ALLIANCES}, "alliance")


def normalize_list_name(name: str) -> str:
    return _normalize(name, STRATEGY_LIST_ALIASES, "strategy list")
