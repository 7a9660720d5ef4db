"""
Tests for pit_scout.storage.transfer.
"""
from __future__ import annotations

import pytest

from pit_scout.errors import ValidationError
from pit_scout.storage import keys as K
from pit_scout.storage import transfer
from pit_scout.storage.adapter import InMemoryAdapter


@pytest.fixture
def populated():
    return InMemoryAdapter(initial={
        K.TEAMS: [{"team_number": 118}],
        K.MATCH_DATA: [],
        K.APP_SETTINGS: {"offlineMode": True},
        K.DARK_MODE: True,
        K.notes_key(118): [{"id": 1, "text": "x"}],
    })


def test_export_and_import_dump(populated, tmp_path):
    path = transfer.write_dump(populated, tmp_path / "export" / "dump.json")
    data = transfer.read_dump(path)
    assert data == transfer.export_dump(populated)

    target = InMemoryAdapter(initial={K.TEAMS: [], "heatmaps": {"1": {}}})
    imported = transfer.import_dump(target, data)
    assert K.TEAMS in imported
    assert target.get(K.TEAMS) == [{"team_number": 118}]
    # Keys missing from the dump are left alone
    assert target.get("heatmaps") == {"1": {}}


def test_import_dump_rejects_non_object(adapter, tmp_path):
    with pytest.raises(ValidationError):
        transfer.import_dump(adapter, [1, 2])

    bad = tmp_path / "bad.json"
    bad.write_text("nope")
    with pytest.raises(ValidationError):
        transfer.read_dump(bad)


def test_format_bytes():
    assert transfer.format_bytes(0) == "0 Bytes"
    assert transfer.format_bytes(512) == "512 Bytes"
    assert transfer.format_bytes(1536) == "1.5 KB"
    assert transfer.format_bytes(5 * 1024 * 1024) == "5 MB"


def test_list_cached_items_skips_settings_and_notes(populated):
    keys = [item["key"] for item in transfer.list_cached_items(populated)]
    assert keys == [K.MATCH_DATA, K.TEAMS]


def test_clear_cached_data_keeps_settings(populated):
    removed = transfer.clear_cached_data(populated)
    assert K.TEAMS in removed
    assert sorted(populated.keys()) == sorted([K.APP_SETTINGS, K.DARK_MODE])


def test_delete_cached_item(populated):
    transfer.delete_cached_item(populated, K.TEAMS)
    assert populated.get(K.TEAMS) is None
