"""
Identity bucket: team records and the structured team import.

Teams are created by import and never auto-deleted. The import payload comes
from the event data feed and looks like:

    {"teams": [{"teamNumber": 9029, "nameShort": "...", "nameFull": "...",
                "city": "...", "stateProv": "...", "country": "...",
                "rookieYear": 2023, "robotName": "...", "schoolName": "..."}]}

Stored under ``teams`` as a list of canonical Team dicts.

Primary key: team_number
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Sequence

from ..errors import NotFoundError, ValidationError
from ..storage import keys as K
from ..storage.adapter import PersistenceAdapter

logger = logging.getLogger(__name__)


@dataclass
class Team:
    team_number: int
    nickname: str = ""
    name: str = ""
    city: str = ""
    state_prov: str = ""
    country: str = ""
    rookie_year: Optional[int] = None
    robot_name: str = ""
    school_name: str = ""
    website: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Team":
        fields = Team.__dataclass_fields__
        return Team(**{k: v for k, v in data.items() if k in fields})


# Raw import field -> canonical Team field
IMPORT_FIELD_MAP: Dict[str, str] = {
    "teamNumber": "team_number",
    "nameShort": "nickname",
    "nameFull": "name",
    "city": "city",
    "stateProv": "state_prov",
    "country": "country",
    "rookieYear": "rookie_year",
    "robotName": "robot_name",
    "schoolName": "school_name",
    "website": "website",
}


def team_from_import_record(raw: Dict[str, Any], index: int = 0) -> Team:
    """
    Map one raw import record onto a canonical Team.

    Raises
    ------
    ValidationError
        If the record is not an object or has no usable teamNumber
    """
    if not isinstance(raw, dict):
        raise ValidationError(f"teams[{index}] must be an object, got {type(raw).__name__}")

    number = raw.get("teamNumber")
    if isinstance(number, str) and number.strip().isdigit():
        number = int(number.strip())
    if isinstance(number, bool) or not isinstance(number, int) or number <= 0:
        raise ValidationError(f"teams[{index}] has an invalid teamNumber: {number!r}")

    values: Dict[str, Any] = {}
    for raw_key, field_name in IMPORT_FIELD_MAP.items():
        value = raw.get(raw_key)
        if field_name == "team_number":
            values[field_name] = number
        elif field_name == "rookie_year":
            values[field_name] = value
        else:
            values[field_name] = value or ""
    return Team(**values)


def parse_import_payload(payload: Any) -> List[Team]:
    """
    Translate an import payload into Team records.

    The whole payload is rejected if ``teams`` is missing or not a sequence,
    or if any record is malformed. Duplicate team numbers keep the last record.
    """
    if not isinstance(payload, dict) or "teams" not in payload:
        raise ValidationError("Import payload must contain a 'teams' array")

    raw_teams = payload["teams"]
    if isinstance(raw_teams, (str, bytes, dict)) or not isinstance(raw_teams, Sequence):
        raise ValidationError("Import payload 'teams' must be an array")

    by_number: Dict[int, Team] = {}
    for i, raw in enumerate(raw_teams):
        team = team_from_import_record(raw, i)
        by_number[team.team_number] = team
    return list(by_number.values())


def import_teams(adapter: PersistenceAdapter, payload: Any) -> List[Team]:
    """
    Replace the stored team list with the payload's teams.

    Returns the imported Team records.
    """
    teams = parse_import_payload(payload)
    adapter.set(K.TEAMS, [t.to_dict() for t in teams])
    logger.info(f"Successfully imported {len(teams)} teams")
    return teams


class TeamRegistry:
    """Read access to the stored teams."""

    def __init__(self, adapter: PersistenceAdapter):
        self.adapter = adapter

    def list(self) -> List[Team]:
        return [Team.from_dict(t) for t in (self.adapter.get(K.TEAMS) or [])]

    def get(self, team_number: int) -> Team:
        for team in self.list():
            if team.team_number == int(team_number):
                return team
        raise NotFoundError(f"Team {team_number} not found")

    def find(self, team_number: int) -> Optional[Team]:
        try:
            return self.get(team_number)
        except NotFoundError:
            return None

    def search(self, query: str) -> List[Team]:
        """
        Teams whose number contains the query, or whose nickname contains it
        (case-insensitive). A blank query returns every team.
        """
        q = (query or "").strip().lower()
        if not q:
            return self.list()
        return [
            t for t in self.list()
            if q in str(t.team_number) or q in (t.nickname or "").lower()
        ]
