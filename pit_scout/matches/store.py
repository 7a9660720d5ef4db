"""
Match record store: CRUD over ``match_data`` with its invariants.

Invariants held after every operation:
- match numbers are unique
- the stored list is ascending by match_number
- each alliance has 3 distinct teams, alliances are disjoint
- score_breakdown / winning_alliance present iff status == completed
- completed never goes back to scheduled

Consistency: the store keeps no collection between calls. Each operation
reads from the adapter, builds the new state, and writes it; nothing is
observable until the write succeeds (write-then-apply). Operations touching
several keys (removal cascades, quick-score saves) go through apply_writes,
which restores earlier keys if a later write fails.

Usage:
    store = MatchRecordStore(adapter)
    store.add(new_match(12, [1, 2, 3], [4, 5, 6]))
    store.record_result(12, 80, 95)   # blue wins
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

from ..errors import DuplicateMatchError, NotFoundError, StorageError, ValidationError
from ..mappings import STATUS_COMPLETED, STATUS_SCHEDULED
from ..scoring.quick_scores import QuickScoreSheet
from ..scoring.rulesets import Ruleset, DEFAULT_RULESET
from ..storage import keys as K
from ..storage.adapter import PersistenceAdapter, apply_writes, REMOVE
from .schemas import Match

logger = logging.getLogger(__name__)


class MatchRecordStore:
    """CRUD over match records persisted through a PersistenceAdapter."""

    def __init__(self, adapter: PersistenceAdapter):
        self.adapter = adapter

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _raw(self) -> List[Dict[str, Any]]:
        raw = self.adapter.get(K.MATCH_DATA)
        if raw is None:
            return []
        if not isinstance(raw, list):
            raise StorageError(f"Stored {K.MATCH_DATA} must be a list, got {type(raw).__name__}")
        return raw

    def records(self) -> List[Dict[str, Any]]:
        """Stored match dicts, ascending by match_number."""
        return self._raw()

    def list(self) -> List[Match]:
        """All matches, ascending by match_number."""
        return [Match.from_dict(m) for m in self._raw()]

    def get(self, match_number: int) -> Match:
        for record in self._raw():
            if record.get("match_number") == match_number:
                return Match.from_dict(record)
        raise NotFoundError(f"Match {match_number} not found")

    def exists(self, match_number: int) -> bool:
        return any(m.get("match_number") == match_number for m in self._raw())

    def current_status(self) -> Dict[str, Any]:
        """
        Current and next scheduled matches.

        Returns
        -------
        dict
            current_match, next_match (match numbers or None) and status:
            "unknown" with no matches, "completed" when nothing is scheduled,
            otherwise "scheduled"
        """
        records = self._raw()
        if not records:
            return {"current_match": None, "next_match": None, "status": "unknown"}

        scheduled = sorted(
            m["match_number"] for m in records if m.get("status") == STATUS_SCHEDULED
        )
        if not scheduled:
            return {"current_match": None, "next_match": None, "status": STATUS_COMPLETED}

        return {
            "current_match": scheduled[0],
            "next_match": scheduled[1] if len(scheduled) > 1 else None,
            "status": STATUS_SCHEDULED,
        }

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _write(self, records: List[Dict[str, Any]]) -> None:
        records = sorted(records, key=lambda m: m["match_number"])
        self.adapter.set(K.MATCH_DATA, records)

    def add(self, match: Union[Match, Dict[str, Any]]) -> Match:
        """
        Insert a new match.

        Raises
        ------
        DuplicateMatchError
            If the match number is already stored (state untouched)
        ValidationError
            If the record breaks an alliance/status invariant
        StorageError
            If the adapter write fails (state untouched)
        """
        if isinstance(match, dict):
            match = Match.from_dict(match)
        match.validate()

        records = self._raw()
        if any(m.get("match_number") == match.match_number for m in records):
            raise DuplicateMatchError(match.match_number)

        self._write(records + [match.to_dict()])
        logger.info(f"Added match {match.match_number} ({match.comp_level}, {match.status})")
        return match

    def remove(self, match_number: int) -> None:
        """
        Delete a match and the sub-records it owns.

        Cascades to quick_scores[match_number], match_analysis[match_number]
        and per-team analysis items of the six alliance teams for this match.
        """
        records = self._raw()
        target = next((m for m in records if m.get("match_number") == match_number), None)
        if target is None:
            raise NotFoundError(f"Match {match_number} not found")

        remaining = [m for m in records if m.get("match_number") != match_number]
        writes: Dict[str, Any] = {K.MATCH_DATA: remaining}

        key = str(match_number)
        quick_scores = self.adapter.get(K.QUICK_SCORES) or {}
        if key in quick_scores:
            quick_scores.pop(key)
            writes[K.QUICK_SCORES] = quick_scores if quick_scores else REMOVE

        analysis = self.adapter.get(K.MATCH_ANALYSIS) or {}
        if key in analysis:
            analysis.pop(key)
            writes[K.MATCH_ANALYSIS] = analysis if analysis else REMOVE

        teams = list(target.get("red_alliance") or []) + list(target.get("blue_alliance") or [])
        for team_number in teams:
            team_key = K.team_match_analysis_key(team_number)
            items = self.adapter.get(team_key)
            if not items:
                continue
            kept = [i for i in items if _as_int(i.get("match_number")) != match_number]
            if len(kept) != len(items):
                writes[team_key] = kept if kept else REMOVE

        apply_writes(self.adapter, writes)
        logger.info(f"Removed match {match_number} ({len(writes) - 1} owned records touched)")

    def _completed(self, match_number: int, red_total: int, blue_total: int):
        records = self._raw()
        index = next(
            (i for i, m in enumerate(records) if m.get("match_number") == match_number), None
        )
        if index is None:
            raise NotFoundError(f"Match {match_number} not found")

        match = Match.from_dict(records[index])
        match.status = STATUS_COMPLETED
        match.red_total = red_total
        match.blue_total = blue_total
        match.validate()

        updated = list(records)
        updated[index] = match.to_dict()
        return match, sorted(updated, key=lambda m: m["match_number"])

    def record_result(self, match_number: int, red_total: int, blue_total: int) -> Match:
        """
        Complete a match with final alliance totals.

        Red wins if red_total > blue_total, blue if blue_total > red_total,
        otherwise the match is a tie. Re-recording overwrites the totals;
        the match never returns to scheduled.
        """
        for name, value in (("red_total", red_total), ("blue_total", blue_total)):
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValidationError(f"{name} must be a non-negative integer, got {value!r}")

        match, records = self._completed(match_number, red_total, blue_total)
        self.adapter.set(K.MATCH_DATA, records)
        logger.info(
            f"Recorded match {match_number}: red {red_total} - blue {blue_total} "
            f"({match.winning_alliance})"
        )
        return match

    def record_quick_scores(self, match_number: int, sheet: QuickScoreSheet) -> Match:
        """
        Save a quick-score sheet and complete the match from its totals.

        Both keys are written together; a failure leaves neither changed.
        """
        red_total, blue_total = sheet.total("red"), sheet.total("blue")
        match, records = self._completed(match_number, red_total, blue_total)

        quick_scores = self.adapter.get(K.QUICK_SCORES) or {}
        quick_scores[str(match_number)] = sheet.to_dict()

        apply_writes(self.adapter, {K.MATCH_DATA: records, K.QUICK_SCORES: quick_scores})
        logger.info(f"Saved quick scores for match {match_number}: {red_total}-{blue_total}")
        return match

    def quick_scores(
        self,
        match_number: int,
        ruleset: Ruleset = DEFAULT_RULESET,
    ) -> Optional[QuickScoreSheet]:
        """Stored quick-score sheet for a match, or None."""
        stored = (self.adapter.get(K.QUICK_SCORES) or {}).get(str(match_number))
        if stored is None:
            return None
        return QuickScoreSheet.from_dict(stored, ruleset=ruleset)


def _as_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
