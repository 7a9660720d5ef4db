"""
Pit Scout

Offline scouting and analysis engine for robotics competitions.

This package implements:
- Season rulesets and the score calculator under pit_scout.scoring
- The match record repository under pit_scout.matches
- Team profiles (identity, scouting log, performance, heatmaps, strategy,
  notes) under pit_scout.profiles
- Key-value persistence adapters and data transfer under pit_scout.storage

All state lives behind a PersistenceAdapter; nothing talks to a server.
"""
__all__ = ["scoring", "matches", "profiles", "storage"]

__version__ = "0.3.0"
