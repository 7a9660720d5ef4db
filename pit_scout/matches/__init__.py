"""
Match records: schema, validation and the match record store.
"""
from .schemas import Match, determine_winner, new_match
from .store import MatchRecordStore

__all__ = ["Match", "determine_winner", "new_match", "MatchRecordStore"]
