"""
Scoring: season rulesets, the score rule engine and quick-score sheets.

Usage:
    from pit_scout.scoring import compute_points, REEFSCAPE_2025

    compute_points("auto", {"leave": True, "coralL4": 2}, REEFSCAPE_2025)  # 17
"""
from .rulesets import (
    Ruleset,
    REEFSCAPE_2025,
    CRESCENDO_2024,
    DEFAULT_RULESET,
    RULESETS,
    get_ruleset,
    load_ruleset_file,
    resolve_ruleset,
)
from .engine import (
    compute_points,
    compute_phase_scores,
    compute_alliance_total,
    compute_total,
    validate_action_counts,
)
from .quick_scores import QuickScoreSheet, empty_alliance_score

__all__ = [
    "Ruleset",
    "REEFSCAPE_2025",
    "CRESCENDO_2024",
    "DEFAULT_RULESET",
    "RULESETS",
    "get_ruleset",
    "load_ruleset_file",
    "resolve_ruleset",
    "compute_points",
    "compute_phase_scores",
    "compute_alliance_total",
    "compute_total",
    "validate_action_counts",
    "QuickScoreSheet",
    "empty_alliance_score",
]
