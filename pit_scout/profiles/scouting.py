"""
Scouting bucket: per-match observations entered by scouts.

One entry per (team_number, match_number) observation, with nested raw action
counts per phase:

    {"team_number": 118, "match_number": 12,
     "auto": {"autoSpeaker": 2, "autoAmp": 0, "mobility": true},
     "teleop": {...}, "endgame": {...}}

Stored under ``scouting_data`` as an append-only list. Counts are validated
here, before anything reaches the score engine.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..errors import ValidationError
from ..mappings import PHASES
from ..scoring.engine import validate_action_counts
from ..storage import keys as K
from ..storage.adapter import PersistenceAdapter

logger = logging.getLogger(__name__)


def validate_entry(entry: Dict[str, Any]) -> Dict[str, Any]:
    """
    Check an entry's identity fields and action counts.

    Returns a normalized copy with every phase present.
    """
    if not isinstance(entry, dict):
        raise ValidationError(f"Scouting entry must be an object, got {type(entry).__name__}")

    for key in ("team_number", "match_number"):
        value = entry.get(key)
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ValidationError(f"Scouting entry {key} must be a positive integer, got {value!r}")

    context = f"team {entry['team_number']} match {entry['match_number']}"
    validate_action_counts(entry, context=context)

    clean = dict(entry)
    for phase in PHASES:
        clean[phase] = dict(entry.get(phase) or {})
    return clean


class ScoutingLog:
    """Append-only scouting entries."""

    def __init__(self, adapter: PersistenceAdapter):
        self.adapter = adapter

    def entries(self, team_number: Optional[int] = None) -> List[Dict[str, Any]]:
        data = self.adapter.get(K.SCOUTING_DATA) or []
        if team_number is None:
            return data
        return [e for e in data if e.get("team_number") == team_number]

    def add(self, entry: Dict[str, Any]) -> Dict[str, Any]:
        """
        Append one observation.

        Raises ValidationError for missing identity fields or negative counts.
        """
        clean = validate_entry(entry)
        clean.setdefault("timestamp", datetime.now().isoformat())
        data = self.entries()
        self.adapter.set(K.SCOUTING_DATA, data + [clean])
        logger.info(f"Logged scouting entry for team {clean['team_number']} match {clean['match_number']}")
        return clean

    def scouted_teams(self) -> List[int]:
        """Team numbers in order of first observation."""
        seen: List[int] = []
        for e in self.entries():
            if e.get("team_number") not in seen:
                seen.append(e.get("team_number"))
        return seen
