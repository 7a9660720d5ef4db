"""
Heatmap bucket: where on the field a team operates, per phase.

Points are captured by pointer drags. A drag opens a HeatmapSession, every move
appends a point, and releasing the pointer ends the drag. Nothing is persisted
until the set is saved.

Stored shape (under ``heatmaps`` or ``team_heatmaps``):

    {"118": {"auto": [{"x": 10.0, "y": 20.0, "intensity": 1}, ...],
             "teleop": [...]}}

Usage:
    model = HeatmapModel(adapter)
    session = model.begin_session(118, "auto")
    session.append_point(120, 45)
    session.end()
    session.save()
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..errors import ValidationError
from ..mappings import normalize_phase
from ..settings import FieldConfig
from ..storage import keys as K
from ..storage.adapter import PersistenceAdapter

logger = logging.getLogger(__name__)

POINT_INTENSITY = 1


def _coords(point: Any) -> Tuple[Any, Any]:
    """Accept ``{"x": .., "y": ..}`` mappings and ``(x, y)`` pairs."""
    if isinstance(point, Mapping):
        if "x" not in point or "y" not in point:
            raise ValidationError(f"heatmap point {point!r} needs both x and y")
        return point["x"], point["y"]
    if isinstance(point, (list, tuple)) and len(point) == 2:
        return point[0], point[1]
    raise ValidationError(f"heatmap point {point!r} must be an (x, y) pair or an {{x, y}} mapping")


def _team_key(team_number: Any) -> str:
    if team_number is None or str(team_number).strip() == "":
        raise ValidationError("no team selected")
    return str(team_number).strip()


class HeatmapSession:
    """
    Append target for one (team, phase) point set.

    Coordinates are clamped into the field; every call stores a point (no
    dedup, no resampling). After ``abandon()`` further appends are dropped.
    """

    def __init__(self, model: "HeatmapModel", team_number: Any, phase: str, points: List[Dict[str, Any]]):
        self.model = model
        self.team_number = team_number
        self.phase = phase
        self._points = list(points)
        self.drawing = True
        self.abandoned = False

    def append_point(self, x: float, y: float) -> None:
        if self.abandoned:
            return
        self._points.append(self.model.make_point(x, y))

    def end(self) -> None:
        """Pointer released: stop drawing, keep the points for saving."""
        self.drawing = False

    def abandon(self) -> None:
        """Pointer left the field mid-drag: later appends are discarded."""
        self.drawing = False
        self.abandoned = True

    @property
    def points(self) -> List[Dict[str, Any]]:
        return list(self._points)

    def save(self) -> List[Dict[str, Any]]:
        return self.model.save(self.team_number, self.phase, self._points)


class HeatmapModel:
    """
    Per-team, per-phase point sets persisted under one adapter key.

    Parameters
    ----------
    adapter : PersistenceAdapter
    key : str
        Storage key (``heatmaps`` for the scouting page, ``team_heatmaps`` for
        the team view)
    field : FieldConfig
        Coordinate bounds used for clamping and density grids
    """

    def __init__(
        self,
        adapter: PersistenceAdapter,
        key: str = K.HEATMAPS,
        field: Optional[FieldConfig] = None,
    ):
        self.adapter = adapter
        self.key = key
        self.field = field or FieldConfig()

    def make_point(self, x: float, y: float) -> Dict[str, Any]:
        try:
            x, y = float(x), float(y)
        except (TypeError, ValueError):
            raise ValidationError(f"heatmap coordinates must be numeric, got ({x!r}, {y!r})") from None
        if np.isnan(x) or np.isnan(y):
            raise ValidationError("heatmap coordinates must not be NaN")
        x = min(max(x, 0.0), float(self.field.width))
        y = min(max(y, 0.0), float(self.field.height))
        return {"x": x, "y": y, "intensity": POINT_INTENSITY}

    def _all(self) -> Dict[str, Dict[str, List[Dict[str, Any]]]]:
        return self.adapter.get(self.key) or {}

    def load(self, team_number: Any, phase: str) -> List[Dict[str, Any]]:
        """Stored points for (team, phase); empty when nothing was saved."""
        phase = normalize_phase(phase)
        return list(self._all().get(_team_key(team_number), {}).get(phase, []))

    def phases(self, team_number: Any) -> List[str]:
        return sorted(self._all().get(_team_key(team_number), {}))

    def begin_session(self, team_number: Any, phase: str, resume: bool = True) -> HeatmapSession:
        """
        Open a drag session.

        With ``resume`` the session starts from the stored points, so new
        strokes draw on top of the saved set.
        """
        team = _team_key(team_number)
        phase = normalize_phase(phase)
        seed = self.load(team, phase) if resume else []
        return HeatmapSession(self, team, phase, seed)

    def save(self, team_number: Any, phase: str, points: Sequence[Any]) -> List[Dict[str, Any]]:
        """
        Replace the point set for (team, phase) and persist the whole map.

        Points may be ``(x, y)`` pairs or ``{x, y}`` mappings; any other shape
        raises ValidationError before storage is touched. Zero points behaves
        like ``clear``.
        """
        team = _team_key(team_number)
        phase = normalize_phase(phase)
        if not points:
            self.clear(team, phase)
            return []

        clean = [self.make_point(*_coords(p)) for p in points]
        data = self._all()
        data.setdefault(team, {})[phase] = clean
        self.adapter.set(self.key, data)
        logger.info(f"Saved {len(clean)} {phase} heatmap points for team {team}")
        return clean

    def clear(self, team_number: Any, phase: str) -> None:
        """
        Remove one phase; drop the team entry when no phases remain, and the
        storage key when no teams remain.
        """
        team = _team_key(team_number)
        phase = normalize_phase(phase)
        data = self._all()
        team_data = data.get(team)
        if team_data is None or phase not in team_data:
            return

        del team_data[phase]
        if not team_data:
            del data[team]
        if data:
            self.adapter.set(self.key, data)
        else:
            self.adapter.remove(self.key)
        logger.info(f"Cleared {phase} heatmap for team {team}")

    def density_grid(self, team_number: Any, phase: str, bins: int = 20) -> np.ndarray:
        """
        Point counts over a ``bins x bins`` grid covering the field.

        Row index follows y, column index follows x.
        """
        points = self.load(team_number, phase)
        extent = [[0.0, float(self.field.height)], [0.0, float(self.field.width)]]
        if not points:
            return np.zeros((bins, bins))

        ys = np.array([p["y"] for p in points], dtype=float)
        xs = np.array([p["x"] for p in points], dtype=float)
        grid, _, _ = np.histogram2d(ys, xs, bins=bins, range=extent)
        return grid
