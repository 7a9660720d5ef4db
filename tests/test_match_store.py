"""
Tests for pit_scout.matches.store.

Verifies that:
- Matches always list in ascending match_number order
- Duplicate adds leave stored bytes untouched
- Results derive the winner, including ties
- Removal cascades to owned records
- A failed multi-key write leaves nothing changed
"""
from __future__ import annotations

import json

import numpy as np
import pytest

from pit_scout.errors import DuplicateMatchError, NotFoundError, StorageError, ValidationError
from pit_scout.matches import MatchRecordStore, new_match
from pit_scout.profiles.notes import MatchAnalysisLog
from pit_scout.scoring.quick_scores import QuickScoreSheet
from pit_scout.storage import keys as K


def _alliances(n):
    base = n * 10
    return [base + 1, base + 2, base + 3], [base + 4, base + 5, base + 6]


def test_list_is_ascending_for_any_insertion_order(adapter):
    rng = np.random.default_rng(7)
    numbers = [int(n) for n in rng.permutation(np.arange(1, 21))]
    store = MatchRecordStore(adapter)
    for n in numbers:
        red, blue = _alliances(n)
        store.add(new_match(n, red, blue))

    listed = [m.match_number for m in store.list()]
    assert listed == sorted(numbers)
    assert [m["match_number"] for m in adapter.get(K.MATCH_DATA)] == listed


def test_duplicate_add_leaves_store_untouched(adapter):
    store = MatchRecordStore(adapter)
    store.add(new_match(5, [1, 2, 3], [4, 5, 6]))
    store.add(new_match(2, [7, 8, 9], [10, 11, 12]))
    before = json.dumps(adapter.get(K.MATCH_DATA))

    with pytest.raises(DuplicateMatchError) as exc_info:
        store.add(new_match(5, [21, 22, 23], [24, 25, 26]))

    assert exc_info.value.match_number == 5
    assert exc_info.value.category == "duplicate_match"
    assert json.dumps(adapter.get(K.MATCH_DATA)) == before


def test_add_accepts_dict_and_validates(adapter):
    store = MatchRecordStore(adapter)
    store.add({"match_number": 1, "red_alliance": [1, 2, 3], "blue_alliance": [4, 5, 6]})
    assert store.exists(1)

    with pytest.raises(ValidationError):
        store.add({"match_number": 2, "red_alliance": [1, 2, 3], "blue_alliance": [3, 5, 6]})
    assert not store.exists(2)


def test_match_12_scenario(adapter):
    store = MatchRecordStore(adapter)
    store.add(new_match(12, [1, 2, 3], [4, 5, 6], status="scheduled"))
    store.record_result(12, 80, 95)

    match = store.get(12)
    assert match.status == "completed"
    assert match.winning_alliance == "blue"
    assert adapter.get(K.MATCH_DATA)[0]["winning_alliance"] == "blue"


@pytest.mark.parametrize("red, blue, winner", [(120, 120, "tie"), (150, 100, "red"), (0, 1, "blue")])
def test_record_result_winner(adapter, red, blue, winner):
    store = MatchRecordStore(adapter)
    store.add(new_match(1, [1, 2, 3], [4, 5, 6]))
    assert store.record_result(1, red, blue).winning_alliance == winner


def test_record_result_again_stays_completed(adapter):
    store = MatchRecordStore(adapter)
    store.add(new_match(1, [1, 2, 3], [4, 5, 6]))
    store.record_result(1, 10, 20)
    match = store.record_result(1, 30, 20)
    assert match.status == "completed"
    assert match.winning_alliance == "red"


def test_record_result_errors(adapter):
    store = MatchRecordStore(adapter)
    with pytest.raises(NotFoundError):
        store.record_result(99, 1, 2)

    store.add(new_match(1, [1, 2, 3], [4, 5, 6]))
    with pytest.raises(ValidationError):
        store.record_result(1, -5, 2)
    assert store.get(1).status == "scheduled"


def test_get_and_remove_missing(adapter):
    store = MatchRecordStore(adapter)
    with pytest.raises(NotFoundError):
        store.get(3)
    with pytest.raises(NotFoundError):
        store.remove(3)


def test_remove_cascades_to_owned_records(adapter):
    store = MatchRecordStore(adapter)
    store.add(new_match(1, [1, 2, 3], [4, 5, 6]))
    store.add(new_match(2, [1, 7, 8], [9, 10, 11]))

    sheet = QuickScoreSheet()
    sheet.update_score("red", "teleop", "net", 3)
    store.record_quick_scores(1, sheet)
    store.record_quick_scores(2, QuickScoreSheet())

    analysis = MatchAnalysisLog(adapter)
    analysis.save_quick_analysis(1, notes="red carried")
    analysis.add(1, 1, "fast cycles")
    analysis.add(1, 2, "broke down")
    analysis.add(4, 1, "good defense")

    store.remove(1)

    assert not store.exists(1)
    assert set(adapter.get(K.QUICK_SCORES)) == {"2"}
    assert adapter.get(K.MATCH_ANALYSIS) is None
    assert [i["match_number"] for i in analysis.list(1)] == [2]
    assert adapter.get(K.team_match_analysis_key(4)) is None


def test_record_quick_scores_completes_match(adapter):
    store = MatchRecordStore(adapter)
    store.add(new_match(4, [1, 2, 3], [4, 5, 6]))
    sheet = QuickScoreSheet()
    sheet.update_score("red", "auto", "leave", True)
    sheet.update_score("blue", "teleop", "coralL4", 1)

    match = store.record_quick_scores(4, sheet)
    assert (match.red_total, match.blue_total) == (3, 5)
    assert match.winning_alliance == "blue"
    assert store.quick_scores(4).total("blue") == 5
    assert store.quick_scores(5) is None


def test_failed_quick_score_write_rolls_back(failing_adapter_factory):
    adapter = failing_adapter_factory()
    store = MatchRecordStore(adapter)
    store.add(new_match(4, [1, 2, 3], [4, 5, 6]))
    before = json.dumps(adapter.get(K.MATCH_DATA))

    adapter.fail_keys = {K.QUICK_SCORES}
    sheet = QuickScoreSheet()
    sheet.update_score("red", "teleop", "net", 1)
    with pytest.raises(StorageError):
        store.record_quick_scores(4, sheet)

    assert json.dumps(adapter.get(K.MATCH_DATA)) == before
    assert adapter.get(K.QUICK_SCORES) is None


def test_failed_add_leaves_nothing(failing_adapter_factory):
    adapter = failing_adapter_factory(fail_keys={K.MATCH_DATA})
    store = MatchRecordStore(adapter)
    with pytest.raises(StorageError):
        store.add(new_match(1, [1, 2, 3], [4, 5, 6]))
    assert store.list() == []


def test_current_status(adapter):
    store = MatchRecordStore(adapter)
    assert store.current_status()["status"] == "unknown"

    for n in (1, 2, 3):
        red, blue = _alliances(n)
        store.add(new_match(n, red, blue))
    store.record_result(1, 10, 10)
    assert store.current_status() == {"current_match": 2, "next_match": 3, "status": "scheduled"}

    store.record_result(2, 10, 10)
    store.record_result(3, 10, 10)
    assert store.current_status() == {"current_match": None, "next_match": None, "status": "completed"}


@pytest.mark.parametrize(
    "overrides",
    [
        {"red_alliance": 5},
        {"red_alliance": "123"},
        {"score_breakdown": [1, 2]},
    ],
)
def test_add_rejects_malformed_record_shapes(adapter, overrides):
    store = MatchRecordStore(adapter)
    raw = {"match_number": 3, "red_alliance": [1, 2, 3], "blue_alliance": [4, 5, 6]}
    raw.update(overrides)
    with pytest.raises(ValidationError):
        store.add(raw)
    assert adapter.get(K.MATCH_DATA) is None
