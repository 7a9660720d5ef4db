"""
Strategy bucket: qualitative per-team strategy profiles.

A profile is a capability vector over a fixed set of named axes plus three
ordered string lists and free-text notes:

    {"capabilities": {"shooting": 7, "climbing": 4, ...},
     "strengths": [...], "weaknesses": [...], "recommendations": [...],
     "notes": "...", "lastUpdated": "2025-03-14T10:22:31"}

Two schemas are in use:
- PLANNING_SCHEMA: 0..10 axes, all profiles in one ``team_strategies`` map
- TEAM_STRATEGY_SCHEMA: 1..5 axes defaulting to 3, one ``strategy_<team>`` key
  per team

Capability values are always clamped into the schema's range.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from ..errors import NotFoundError, ValidationError
from ..mappings import STRATEGY_LISTS, STRATEGY_LIST_ALIASES, normalize_list_name
from ..storage import keys as K
from ..storage.adapter import PersistenceAdapter

logger = logging.getLogger(__name__)

LAYOUT_MAP = "map"
LAYOUT_PER_TEAM = "per_team"


@dataclass(frozen=True)
class CapabilitySchema:
    """Named capability axes with an inclusive integer range."""

    name: str
    axes: Tuple[str, ...]
    floor: int
    ceiling: int
    default: int

    def clamp(self, value: Any) -> int:
        try:
            value = int(round(float(value)))
        except (TypeError, ValueError):
            raise ValidationError(f"Capability value must be numeric, got {value!r}")
        return min(max(value, self.floor), self.ceiling)

    def defaults(self) -> Dict[str, int]:
        return {axis: self.default for axis in self.axes}


PLANNING_SCHEMA = CapabilitySchema(
    name="planning",
    axes=("shooting", "climbing", "defense", "speed", "control", "intake"),
    floor=0,
    ceiling=10,
    default=0,
)

TEAM_STRATEGY_SCHEMA = CapabilitySchema(
    name="team_strategy",
    axes=("scoring", "defense", "speed", "maneuverability", "consistency"),
    floor=1,
    ceiling=5,
    default=3,
)


def empty_profile(schema: CapabilitySchema) -> Dict[str, Any]:
    """Template for a team with no saved profile."""
    profile: Dict[str, Any] = {"capabilities": schema.defaults()}
    for name in STRATEGY_LISTS:
        profile[name] = []
    profile["notes"] = ""
    profile["lastUpdated"] = None
    return profile


def normalize_profile(
    raw: Dict[str, Any],
    schema: CapabilitySchema,
    fill_defaults: bool = True,
) -> Dict[str, Any]:
    """
    Coerce a stored or user-supplied profile into canonical shape.

    List names written by older pages (``strategies``) are folded into their
    canonical list. Unknown capability axes are kept. With ``fill_defaults``
    declared axes that are missing get the schema default; without it only
    the axes present in ``raw`` are returned (the persisted form).
    """
    if not isinstance(raw, dict):
        raise ValidationError(f"Strategy profile must be an object, got {type(raw).__name__}")

    profile = empty_profile(schema)
    if not fill_defaults:
        profile["capabilities"] = {}
    caps = raw.get("capabilities") or {}
    if not isinstance(caps, dict):
        raise ValidationError("Strategy profile capabilities must be an object")
    for axis, value in caps.items():
        profile["capabilities"][axis] = schema.clamp(value)

    for raw_name, name in STRATEGY_LIST_ALIASES.items():
        items = raw.get(raw_name)
        if raw_name != name and name in raw:
            continue
        if items is None:
            continue
        if not isinstance(items, list):
            raise ValidationError(f"Strategy list '{raw_name}' must be an array")
        profile[name] = [str(i) for i in items]

    profile["notes"] = raw.get("notes") or ""
    profile["lastUpdated"] = raw.get("lastUpdated")
    return profile


class StrategyProfileStore:
    """
    Load/save strategy profiles for one schema.

    Parameters
    ----------
    adapter : PersistenceAdapter
    schema : CapabilitySchema
    layout : str
        "map" stores every team under ``team_strategies``; "per_team" uses one
        ``strategy_<team>`` key per team
    """

    def __init__(
        self,
        adapter: PersistenceAdapter,
        schema: CapabilitySchema = PLANNING_SCHEMA,
        layout: str = LAYOUT_MAP,
    ):
        if layout not in (LAYOUT_MAP, LAYOUT_PER_TEAM):
            raise ValueError(f"Unknown strategy layout: {layout}")
        self.adapter = adapter
        self.schema = schema
        self.layout = layout

    @classmethod
    def planning(cls, adapter: PersistenceAdapter) -> "StrategyProfileStore":
        return cls(adapter, PLANNING_SCHEMA, LAYOUT_MAP)

    @classmethod
    def team_strategy(cls, adapter: PersistenceAdapter) -> "StrategyProfileStore":
        return cls(adapter, TEAM_STRATEGY_SCHEMA, LAYOUT_PER_TEAM)

    def _stored(self, team_number: int) -> Optional[Dict[str, Any]]:
        if self.layout == LAYOUT_PER_TEAM:
            return self.adapter.get(K.strategy_key(team_number))
        return (self.adapter.get(K.TEAM_STRATEGIES) or {}).get(str(int(team_number)))

    def _write(self, team_number: int, profile: Dict[str, Any]) -> None:
        if self.layout == LAYOUT_PER_TEAM:
            self.adapter.set(K.strategy_key(team_number), profile)
            return
        data = self.adapter.get(K.TEAM_STRATEGIES) or {}
        data[str(int(team_number))] = profile
        self.adapter.set(K.TEAM_STRATEGIES, data)

    def exists(self, team_number: int) -> bool:
        return self._stored(team_number) is not None

    def load(self, team_number: int) -> Dict[str, Any]:
        """Saved profile, or the default template (lastUpdated None)."""
        stored = self._stored(team_number)
        if stored is None:
            return empty_profile(self.schema)
        return normalize_profile(stored, self.schema)

    def _stored_capabilities(self, team_number: int) -> Dict[str, int]:
        """Axes the team actually has a value for, without default fill."""
        stored = self._stored(team_number) or {}
        return normalize_profile(stored, self.schema, fill_defaults=False)["capabilities"]

    def _editable(self, team_number: int) -> Dict[str, Any]:
        profile = self.load(team_number)
        profile["capabilities"] = self._stored_capabilities(team_number)
        return profile

    def save(self, team_number: int, profile: Dict[str, Any]) -> Dict[str, Any]:
        """
        Replace the team's profile and stamp lastUpdated.

        Only the capability axes present in ``profile`` are persisted. The
        returned profile has the declared axes filled in, same as ``load``.
        """
        record = normalize_profile(profile, self.schema, fill_defaults=False)
        record["lastUpdated"] = datetime.now().isoformat()
        self._write(team_number, record)
        logger.info(f"Saved {self.schema.name} strategy for team {team_number}")
        return normalize_profile(record, self.schema)

    def add_list_item(self, team_number: int, list_name: str, text: str) -> Dict[str, Any]:
        name = normalize_list_name(list_name)
        text = (text or "").strip()
        if not text:
            raise ValidationError(f"Cannot add an empty item to {name}")
        profile = self._editable(team_number)
        profile[name].append(text)
        return self.save(team_number, profile)

    def update_list_item(self, team_number: int, list_name: str, index: int, text: str) -> Dict[str, Any]:
        name = normalize_list_name(list_name)
        text = (text or "").strip()
        if not text:
            raise ValidationError(f"Cannot set an empty item in {name}")
        profile = self._editable(team_number)
        _check_index(profile[name], index, name)
        profile[name][index] = text
        return self.save(team_number, profile)

    def remove_list_item(self, team_number: int, list_name: str, index: int) -> Dict[str, Any]:
        name = normalize_list_name(list_name)
        profile = self._editable(team_number)
        _check_index(profile[name], index, name)
        del profile[name][index]
        return self.save(team_number, profile)

    def set_capability(self, team_number: int, axis: str, value: Any) -> Dict[str, Any]:
        if axis not in self.schema.axes:
            raise ValidationError(
                f"Unknown capability '{axis}'. Must be one of: {', '.join(self.schema.axes)}"
            )
        profile = self._editable(team_number)
        profile["capabilities"][axis] = self.schema.clamp(value)
        return self.save(team_number, profile)

    def compare(self, team_a: int, team_b: int) -> Dict[str, Tuple[int, int]]:
        """
        Side-by-side capabilities over the declared axes plus any extra axes
        team A has stored.

        An axis with no stored value on a side reads as the schema floor, not
        the display default.
        """
        caps_a = self._stored_capabilities(team_a)
        caps_b = self._stored_capabilities(team_b)
        floor = self.schema.floor
        axes = list(self.schema.axes) + [a for a in caps_a if a not in self.schema.axes]
        return {axis: (caps_a.get(axis, floor), caps_b.get(axis, floor)) for axis in axes}


def _check_index(items: list, index: int, name: str) -> None:
    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(items):
        raise NotFoundError(f"No item at index {index!r} in {name} ({len(items)} items)")
