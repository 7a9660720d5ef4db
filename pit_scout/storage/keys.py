"""
Persisted key schema.

Every component owns its keys; no two components write the same key.
Map-shaped values use string keys (team and match numbers are stringified)
because values round-trip through JSON.
"""
from __future__ import annotations

TEAMS = "teams"
MATCH_DATA = "match_data"
QUICK_SCORES = "quick_scores"
SCOUTING_DATA = "scouting_data"
HEATMAPS = "heatmaps"
TEAM_HEATMAPS = "team_heatmaps"
TEAM_STRATEGIES = "team_strategies"
MATCH_ANALYSIS = "match_analysis"
APP_SETTINGS = "app_settings"
DARK_MODE = "darkMode"

STRATEGY_PREFIX = "strategy_"
NOTES_PREFIX = "notes_"
TEAM_MATCH_ANALYSIS_PREFIX = "match_analysis_"

# Keys kept when cached data is cleared
PRESERVED_KEYS = (APP_SETTINGS, DARK_MODE)


def strategy_key(team_number: int) -> str:
    return f"{STRATEGY_PREFIX}{int(team_number)}"


def notes_key(team_number: int) -> str:
    return f"{NOTES_PREFIX}{int(team_number)}"


def team_match_analysis_key(team_number: int) -> str:
    return f"{TEAM_MATCH_ANALYSIS_PREFIX}{int(team_number)}"
