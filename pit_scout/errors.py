"""
Error taxonomy for Pit Scout.

Every error carries a short ``category`` so a front end can report
"message + category" without inspecting the class hierarchy. The classes also
derive from the matching builtin (ValueError, LookupError, RuntimeError) so
callers that only know the builtins still catch them.
"""
from __future__ import annotations


class PitScoutError(Exception):
    """Base class for all Pit Scout errors."""

    category = "error"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"category": self.category, "message": self.message}


class ValidationError(PitScoutError, ValueError):
    """Malformed input: missing field, wrong shape, empty required selection."""

    category = "validation"


class DuplicateMatchError(PitScoutError, ValueError):
    """A match with the same match_number already exists."""

    category = "duplicate_match"

    def __init__(self, match_number: int):
        super().__init__(f"Match number {match_number} already exists")
        self.match_number = match_number


class NotFoundError(PitScoutError, LookupError):
    """Referenced match, team, profile or item is absent."""

    category = "not_found"


class StorageError(PitScoutError, RuntimeError):
    """Persistence adapter read/write failure, including capacity exceeded."""

    category = "storage"
