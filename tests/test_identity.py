"""
Tests for pit_scout.profiles.identity and pit_scout.profiles.scouting.
"""
from __future__ import annotations

import pytest

from pit_scout.errors import NotFoundError, ValidationError
from pit_scout.profiles.identity import TeamRegistry, import_teams, parse_import_payload
from pit_scout.profiles.scouting import ScoutingLog
from pit_scout.storage import keys as K

PAYLOAD = {
    "teams": [
        {
            "teamNumber": 9029,
            "nameShort": "Gear Grinders",
            "nameFull": "Gear Grinders Robotics",
            "city": "Austin",
            "stateProv": "TX",
            "country": "USA",
            "rookieYear": 2023,
            "robotName": "Torque",
            "schoolName": "Austin High",
        },
        {
            "teamNumber": 6436,
            "nameShort": "Pi-Rates",
            "nameFull": "Pi-Rates Robotics",
            "city": "Dallas",
            "stateProv": "TX",
            "country": "USA",
            "rookieYear": 2017,
        },
    ]
}


def test_import_two_teams(adapter):
    teams = import_teams(adapter, PAYLOAD)
    assert len(teams) == 2

    registry = TeamRegistry(adapter)
    assert len(registry.list()) == 2
    team = registry.get(9029)
    assert team.nickname == "Gear Grinders"
    assert team.name == "Gear Grinders Robotics"
    assert team.state_prov == "TX"
    assert team.rookie_year == 2023
    assert team.robot_name == "Torque"
    assert registry.get(6436).robot_name == ""


def test_import_rejects_bad_payload(adapter):
    for payload in ({}, {"teams": "9029"}, {"teams": {"teamNumber": 1}}, []):
        with pytest.raises(ValidationError):
            import_teams(adapter, payload)
    assert adapter.get(K.TEAMS) is None


def test_import_rejects_whole_payload_on_bad_record(adapter):
    payload = {"teams": [{"teamNumber": 1}, {"nameShort": "no number"}]}
    with pytest.raises(ValidationError, match="teams\\[1\\]"):
        import_teams(adapter, payload)
    assert adapter.get(K.TEAMS) is None


def test_duplicate_team_numbers_keep_last():
    teams = parse_import_payload({"teams": [
        {"teamNumber": 1, "nameShort": "old"},
        {"teamNumber": "1", "nameShort": "new"},
    ]})
    assert [t.nickname for t in teams] == ["new"]


def test_registry_lookup_and_search(adapter):
    import_teams(adapter, PAYLOAD)
    registry = TeamRegistry(adapter)
    with pytest.raises(NotFoundError):
        registry.get(118)
    assert registry.find(118) is None
    assert [t.team_number for t in registry.search("pi-")] == [6436]
    assert [t.team_number for t in registry.search("90")] == [9029]
    assert len(registry.search("")) == 2


def test_scouting_log(adapter, make_entry):
    log = ScoutingLog(adapter)
    log.add(make_entry(118, 1, auto={"autoSpeaker": 2}))
    log.add(make_entry(254, 1))
    log.add(make_entry(118, 2))

    assert len(log.entries()) == 3
    assert len(log.entries(118)) == 2
    assert log.scouted_teams() == [118, 254]
    assert "timestamp" in log.entries()[0]

    with pytest.raises(ValidationError):
        log.add(make_entry(118, 3, teleop={"teleopAmp": -2}))
    with pytest.raises(ValidationError):
        log.add(make_entry(0, 3))
    assert len(log.entries()) == 3
