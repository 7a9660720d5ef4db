"""
Tests for pit_scout.scoring.quick_scores.

Verifies that every edit recomputes the alliance total and that invalid
edits are rejected without touching the sheet.
"""
from __future__ import annotations

import pytest

from pit_scout.errors import ValidationError
from pit_scout.scoring.quick_scores import QuickScoreSheet, empty_alliance_score
from pit_scout.scoring.rulesets import REEFSCAPE_2025


def test_empty_alliance_score_shape():
    score = empty_alliance_score(REEFSCAPE_2025)
    assert score["auto"]["leave"] is False
    assert score["auto"]["coralL4"] == 0
    assert score["endgame"] == {"bargePark": False, "shallowCage": False, "deepCage": False}
    assert score["total"] == 0


def test_update_score_recomputes_total():
    sheet = QuickScoreSheet()
    assert sheet.update_score("red", "auto", "leave", True) == 3
    assert sheet.update_score("red", "auto", "coralL4", 2) == 17
    assert sheet.update_score("red", "endgame", "deepCage", True) == 29
    assert sheet.total("red") == 29
    assert sheet.total("blue") == 0


def test_update_score_rejects_bad_values():
    sheet = QuickScoreSheet()
    sheet.update_score("blue", "teleop", "net", 2)

    with pytest.raises(ValidationError):
        sheet.update_score("blue", "teleop", "net", -1)
    with pytest.raises(ValidationError, match="yes/no"):
        sheet.update_score("blue", "auto", "leave", 1)
    with pytest.raises(ValidationError, match="Unknown"):
        sheet.update_score("blue", "teleop", "trap", 1)
    with pytest.raises(ValidationError, match="alliance"):
        sheet.update_score("green", "teleop", "net", 1)

    assert sheet.alliance("blue")["teleop"]["net"] == 2
    assert sheet.total("blue") == 8


def test_increment_never_goes_negative():
    sheet = QuickScoreSheet()
    sheet.increment("red", "teleop", "coralL1")
    sheet.increment("red", "teleop", "coralL1")
    assert sheet.total("red") == 4
    sheet.increment("red", "teleop", "coralL1", step=-5)
    assert sheet.alliance("red")["teleop"]["coralL1"] == 0


def test_increment_rejects_yes_no_actions():
    sheet = QuickScoreSheet()
    with pytest.raises(ValidationError, match="yes/no action"):
        sheet.increment("red", "auto", "leave")
    assert sheet.alliance("red")["auto"]["leave"] is False
    assert sheet.total("red") == 0

    sheet.update_score("red", "auto", "leave", True)
    assert sheet.total("red") == 3


def test_reset_clears_one_alliance():
    sheet = QuickScoreSheet()
    sheet.update_score("red", "teleop", "processor", 1)
    sheet.update_score("blue", "teleop", "processor", 2)
    sheet.reset("red")
    assert sheet.total("red") == 0
    assert sheet.total("blue") == 12


def test_from_dict_recomputes_stale_total():
    stored = {
        "red": {"auto": {"leave": True}, "teleop": {}, "endgame": {}, "total": 999},
        "blue": {"auto": {}, "teleop": {"coralL3": 1}, "endgame": {}, "total": 0},
    }
    sheet = QuickScoreSheet.from_dict(stored)
    assert sheet.total("red") == 3
    assert sheet.total("blue") == 4
    assert sheet.to_dict()["red"]["total"] == 3
