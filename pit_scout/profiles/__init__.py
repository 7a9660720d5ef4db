"""
Team profile buckets for Pit Scout.

Each bucket reads and writes its own storage keys through a PersistenceAdapter
and joins on team_number.

Buckets:
- identity: Imported team records and lookup
- scouting: Per-match scouting observations (append-only)
- performance: Averages, win rate and top performer (computed on read)
- heatmap: Field position point sets per team and phase
- strategy: Capability ratings, strengths/weaknesses/recommendations
- notes: Free-text team notes and match analysis

Usage:
    from pit_scout.profiles import performance, scouting

    entries = scouting.ScoutingLog(adapter).entries()
    stats = performance.aggregate(entries, matches, 118)
"""

from . import identity
from . import scouting
from . import performance
from . import heatmap
from . import strategy
from . import notes

__all__ = [
    "identity",
    "scouting",
    "performance",
    "heatmap",
    "strategy",
    "notes",
]
