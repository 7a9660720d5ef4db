"""
Tests for pit_scout.settings.
"""
from __future__ import annotations

import json

import pytest
import yaml

from pit_scout.errors import ValidationError
from pit_scout.settings import (
    AppSettings,
    EngineConfig,
    load_engine_config,
    load_settings,
    save_settings,
)
from pit_scout.storage import keys as K


def test_load_settings_defaults(adapter):
    settings = load_settings(adapter)
    assert settings.offline_mode is False
    assert settings.data_retention_days == 30


def test_settings_round_trip(adapter):
    settings = AppSettings(offline_mode=True, data_retention_days=7, year=2025, event_code="TXAUS")
    settings.credentials.username = "scout"
    save_settings(adapter, settings)

    stored = adapter.get(K.APP_SETTINGS)
    assert stored["offlineMode"] is True
    assert stored["credentials"]["username"] == "scout"
    assert load_settings(adapter) == settings


def test_legacy_settings_keys(adapter):
    adapter.set(K.APP_SETTINGS, {"dataRetention": 14, "firstUsername": "u", "firstApiKey": "k"})
    settings = load_settings(adapter)
    assert settings.data_retention_days == 14
    assert settings.credentials.api_key == "k"


def test_negative_retention_rejected(adapter):
    with pytest.raises(ValidationError):
        save_settings(adapter, AppSettings(data_retention_days=-1))
    assert adapter.get(K.APP_SETTINGS) is None


def test_load_engine_config_yaml_and_json(tmp_path):
    cfg = {"data_dir": "scout_data", "field": {"width": 1654, "height": 821}, "storage": {"backend": "memory"}}
    yaml_path = tmp_path / "config.yaml"
    yaml_path.write_text(yaml.safe_dump(cfg))
    json_path = tmp_path / "config.json"
    json_path.write_text(json.dumps(cfg))

    for path in (yaml_path, json_path):
        config = load_engine_config(path)
        assert config.data_dir == "scout_data"
        assert config.field.width == 1654
        assert config.storage.backend == "memory"
        assert config.ruleset == "reefscape_2025"


def test_engine_config_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_engine_config(tmp_path / "missing.yaml")
    bad = tmp_path / "config.toml"
    bad.write_text("")
    with pytest.raises(ValueError):
        load_engine_config(bad)


def test_engine_config_defaults():
    config = EngineConfig.from_dict({})
    assert config.heatmap_key == K.HEATMAPS
    assert config.field.height == 400.0


def test_engine_config_constructs_with_defaults():
    first, second = EngineConfig(), EngineConfig()
    assert first.field.width == 800.0
    assert first.storage.backend == "file"
    assert first.field is not second.field
    assert first.storage is not second.storage
