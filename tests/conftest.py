"""
Shared fixtures for Pit Scout tests.
"""
from __future__ import annotations

import pytest

from pit_scout.errors import StorageError
from pit_scout.storage.adapter import InMemoryAdapter


class FailingAdapter(InMemoryAdapter):
    """In-memory adapter that fails every write to the listed keys."""

    def __init__(self, fail_keys=(), **kwargs):
        self.fail_keys = set(fail_keys)
        super().__init__(**kwargs)

    def set(self, key, value):
        if key in self.fail_keys:
            raise StorageError(f"Simulated write failure for '{key}'")
        super().set(key, value)

    def remove(self, key):
        if key in self.fail_keys:
            raise StorageError(f"Simulated remove failure for '{key}'")
        super().remove(key)


@pytest.fixture
def adapter():
    return InMemoryAdapter()


@pytest.fixture
def failing_adapter_factory():
    return FailingAdapter


def scouting_entry(team_number, match_number, auto=None, teleop=None, endgame=None):
    return {
        "team_number": team_number,
        "match_number": match_number,
        "auto": auto or {},
        "teleop": teleop or {},
        "endgame": endgame or {},
    }


@pytest.fixture
def make_entry():
    return scouting_entry
