"""
Notes bucket: free-text team notes and match analysis.

Three record kinds:
- team notes, ``notes_<team>``: [{id, text, timestamp}]
- per-team match analysis, ``match_analysis_<team>``:
  [{id, match_number, text, timestamp}]
- per-match quick analysis, ``match_analysis``: {"<match>": {match_number,
  notes, team_performance, timestamp}}

Item ids are millisecond timestamps, bumped when two items land in the same
millisecond.
"""
from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..errors import NotFoundError, ValidationError
from ..storage import keys as K
from ..storage.adapter import PersistenceAdapter

logger = logging.getLogger(__name__)

DEFAULT_DEFENSE_RATING = 3

PERFORMANCE_FIELDS = ("auto_points", "teleop_points", "endgame_points")


def _new_id(items: List[Dict[str, Any]]) -> int:
    new_id = int(time.time() * 1000)
    taken = {i.get("id") for i in items}
    while new_id in taken:
        new_id += 1
    return new_id


def _require_text(text: Optional[str], what: str) -> str:
    if text is None or not str(text).strip():
        raise ValidationError(f"{what} text cannot be empty")
    return str(text)


class TeamNotes:
    """Free-text notes per team."""

    def __init__(self, adapter: PersistenceAdapter):
        self.adapter = adapter

    def list(self, team_number: int) -> List[Dict[str, Any]]:
        return self.adapter.get(K.notes_key(team_number)) or []

    def add(self, team_number: int, text: str) -> Dict[str, Any]:
        text = _require_text(text, "Note")
        notes = self.list(team_number)
        note = {"id": _new_id(notes), "text": text, "timestamp": datetime.now().isoformat()}
        self.adapter.set(K.notes_key(team_number), notes + [note])
        return note

    def edit(self, team_number: int, note_id: int, text: str) -> Dict[str, Any]:
        text = _require_text(text, "Note")
        notes = self.list(team_number)
        for note in notes:
            if note.get("id") == note_id:
                note["text"] = text
                self.adapter.set(K.notes_key(team_number), notes)
                return note
        raise NotFoundError(f"Note {note_id} not found for team {team_number}")

    def delete(self, team_number: int, note_id: int) -> None:
        notes = self.list(team_number)
        kept = [n for n in notes if n.get("id") != note_id]
        if len(kept) == len(notes):
            raise NotFoundError(f"Note {note_id} not found for team {team_number}")
        self.adapter.set(K.notes_key(team_number), kept)


class MatchAnalysisLog:
    """Per-team match write-ups and per-match quick analysis."""

    def __init__(self, adapter: PersistenceAdapter):
        self.adapter = adapter

    # Per-team items

    def list(self, team_number: int, match_number: Optional[int] = None) -> List[Dict[str, Any]]:
        items = self.adapter.get(K.team_match_analysis_key(team_number)) or []
        if match_number is None:
            return items
        return [i for i in items if str(i.get("match_number")) == str(match_number)]

    def add(self, team_number: int, match_number: int, text: str) -> Dict[str, Any]:
        if match_number in (None, ""):
            raise ValidationError("no match selected")
        text = _require_text(text, "Analysis")
        items = self.list(team_number)
        item = {
            "id": _new_id(items),
            "match_number": int(match_number),
            "text": text,
            "timestamp": datetime.now().isoformat(),
        }
        self.adapter.set(K.team_match_analysis_key(team_number), items + [item])
        return item

    def delete(self, team_number: int, analysis_id: int) -> None:
        items = self.list(team_number)
        kept = [i for i in items if i.get("id") != analysis_id]
        if len(kept) == len(items):
            raise NotFoundError(f"Analysis {analysis_id} not found for team {team_number}")
        self.adapter.set(K.team_match_analysis_key(team_number), kept)

    # Per-match quick analysis

    def get_quick_analysis(self, match_number: int) -> Optional[Dict[str, Any]]:
        return (self.adapter.get(K.MATCH_ANALYSIS) or {}).get(str(match_number))

    def save_quick_analysis(
        self,
        match_number: int,
        notes: str = "",
        team_performance: Optional[Dict[Any, Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        """
        Store the quick analysis for a match, replacing any earlier one.

        ``team_performance`` maps team number to {auto_points, teleop_points,
        endgame_points, defense_rating (1..5), notes}; missing fields default
        to 0 points and a rating of 3.
        """
        performance: Dict[str, Dict[str, Any]] = {}
        for team, raw in (team_performance or {}).items():
            row = {f: _points(raw.get(f), f) for f in PERFORMANCE_FIELDS}
            row["defense_rating"] = _rating(raw.get("defense_rating"))
            row["notes"] = raw.get("notes") or ""
            performance[str(team)] = row

        record = {
            "match_number": int(match_number),
            "notes": notes or "",
            "team_performance": performance,
            "timestamp": datetime.now().isoformat(),
        }
        data = self.adapter.get(K.MATCH_ANALYSIS) or {}
        data[str(match_number)] = record
        self.adapter.set(K.MATCH_ANALYSIS, data)
        logger.info(f"Saved quick analysis for match {match_number}")
        return record

    @staticmethod
    def team_total(analysis: Dict[str, Any], team_number: int) -> int:
        """Auto + teleop + endgame points for one team in a quick analysis."""
        row = (analysis.get("team_performance") or {}).get(str(team_number))
        if not row:
            return 0
        return sum(int(row.get(f) or 0) for f in PERFORMANCE_FIELDS)


def _points(value: Any, name: str) -> int:
    if value in (None, ""):
        return 0
    try:
        value = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise ValidationError(f"{name} must be non-negative, got {value}")
    return value


def _rating(value: Any) -> int:
    """Defense rating clamped to 1..5; blank means the default."""
    if value in (None, ""):
        return DEFAULT_DEFENSE_RATING
    if isinstance(value, bool):
        raise ValidationError(f"defense_rating must be an integer, got {value!r}")
    try:
        value = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"defense_rating must be an integer, got {value!r}")
    return min(max(value, 1), 5)
