"""
Tests for pit_scout.scoring.engine.

Verifies that:
- Phase points match the closed-form weighted sum for random counts
- Booleans weigh 0/1, None counts as 0, unknown actions are ignored
- Alliance totals sum phase scores
- Malformed counts are rejected before scoring
"""
from __future__ import annotations

import numpy as np
import pytest

from pit_scout.errors import ValidationError
from pit_scout.mappings import PHASES
from pit_scout.scoring.engine import (
    compute_alliance_total,
    compute_phase_scores,
    compute_points,
    compute_total,
    validate_action_counts,
)
from pit_scout.scoring.rulesets import CRESCENDO_2024, REEFSCAPE_2025


def _reference_points(ruleset, phase, counts):
    return sum(int(counts[a]) * ruleset.points[phase][a] for a in counts)


@pytest.mark.parametrize("ruleset", [REEFSCAPE_2025, CRESCENDO_2024], ids=lambda r: r.name)
def test_compute_points_matches_weighted_sum(ruleset):
    """Random non-negative counts score exactly the weighted sum."""
    rng = np.random.default_rng(42)
    for _ in range(200):
        for phase in PHASES:
            counts = {}
            for action in ruleset.actions(phase):
                if ruleset.is_flag(action):
                    counts[action] = bool(rng.integers(0, 2))
                else:
                    counts[action] = int(rng.integers(0, 25))
            assert compute_points(phase, counts, ruleset) == _reference_points(ruleset, phase, counts)


def test_compute_points_examples():
    assert compute_points("auto", {"leave": True, "coralL4": 2}) == 17
    assert compute_points("teleop", {"coralL1": 3, "net": 1}) == 10
    assert compute_points("endgame", {"deepCage": True, "bargePark": False}) == 12
    assert compute_points("auto", {"autoSpeaker": 2, "mobility": True}, CRESCENDO_2024) == 10


def test_compute_points_ignores_unknown_and_none():
    assert compute_points("auto", {"coralL4": None, "flyingCar": 9}) == 0
    assert compute_points("auto", {}) == 0
    assert compute_points("auto", None) == 0


def test_compute_points_unknown_phase_scores_zero():
    assert compute_points("overtime", {"coralL1": 5}) == 0


def test_phase_scores_and_total():
    record = {
        "auto": {"leave": True, "coralL1": 1},
        "teleop": {"coralL2": 2},
        "endgame": {"shallowCage": True},
    }
    phases = compute_phase_scores(record)
    assert phases == {"auto": 6, "teleop": 6, "endgame": 6}
    assert compute_alliance_total(phases) == 18
    assert compute_total(record) == 18


def test_missing_phases_score_zero():
    assert compute_phase_scores({"teleop": {"net": 2}}) == {"auto": 0, "teleop": 8, "endgame": 0}
    assert compute_total(None) == 0


def test_validate_action_counts_rejects_negative():
    with pytest.raises(ValidationError, match="non-negative"):
        validate_action_counts({"teleop": {"coralL1": -1}})


def test_validate_action_counts_rejects_non_mapping_phase():
    with pytest.raises(ValidationError, match="mapping"):
        validate_action_counts({"auto": [1, 2, 3]})


def test_validate_action_counts_accepts_flags_and_none():
    validate_action_counts({"auto": {"leave": True, "coralL1": None, "coralL2": 0}})


def test_validate_action_counts_context_in_message():
    with pytest.raises(ValidationError, match="team 118"):
        validate_action_counts({"auto": {"coralL1": 1.5}}, context="team 118")
