# pit_scout/settings.py

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Dict, Any, Optional
import json
import logging
import pathlib

import yaml

from .errors import ValidationError
from .storage import keys as K
from .storage.adapter import PersistenceAdapter

logger = logging.getLogger(__name__)


@dataclass
class FieldConfig:
    # Heatmap coordinate space (canvas units)
    width: float = 800.0
    height: float = 400.0


@dataclass
class StorageConfig:
    backend: str = "file"  # "file" or "memory"
    capacity_bytes: Optional[int] = 5 * 1024 * 1024


@dataclass
class EngineConfig:
    data_dir: str = "data"
    ruleset: str = "reefscape_2025"
    scouting_ruleset: str = "crescendo_2024"
    heatmap_key: str = K.HEATMAPS
    # attribute shadows dataclasses.field inside this class body
    field: FieldConfig = dataclasses.field(default_factory=FieldConfig)
    storage: StorageConfig = dataclasses.field(default_factory=StorageConfig)

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "EngineConfig":
        field_cfg = FieldConfig(**data.get("field", {}))
        storage_cfg = StorageConfig(**data.get("storage", {}))

        return EngineConfig(
            data_dir=data.get("data_dir", "data"),
            ruleset=data.get("ruleset", "reefscape_2025"),
            scouting_ruleset=data.get("scouting_ruleset", "crescendo_2024"),
            heatmap_key=data.get("heatmap_key", K.HEATMAPS),
            field=field_cfg,
            storage=storage_cfg,
        )


@dataclass
class ApiCredentials:
    username: str = ""
    api_key: str = ""


@dataclass
class AppSettings:
    """User-facing settings persisted under the ``app_settings`` key."""

    offline_mode: bool = False
    data_retention_days: int = 30
    year: Optional[int] = None
    event_code: str = ""
    credentials: ApiCredentials = field(default_factory=ApiCredentials)

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "AppSettings":
        creds = data.get("credentials") or {}
        # Older saves kept the retention window as "dataRetention"
        retention = data.get("dataRetentionDays", data.get("dataRetention", 30))
        return AppSettings(
            offline_mode=bool(data.get("offlineMode", False)),
            data_retention_days=int(retention),
            year=data.get("year"),
            event_code=data.get("eventCode", "") or "",
            credentials=ApiCredentials(
                username=creds.get("username", data.get("firstUsername", "")) or "",
                api_key=creds.get("apiKey", data.get("firstApiKey", "")) or "",
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "offlineMode": self.offline_mode,
            "dataRetentionDays": self.data_retention_days,
            "year": self.year,
            "eventCode": self.event_code,
            "credentials": {
                "username": self.credentials.username,
                "apiKey": self.credentials.api_key,
            },
        }


def load_settings(adapter: PersistenceAdapter) -> AppSettings:
    """Stored settings, or defaults when nothing was saved yet."""
    raw = adapter.get(K.APP_SETTINGS)
    if raw is None:
        return AppSettings()
    if not isinstance(raw, dict):
        raise ValidationError(f"Stored app_settings must be an object, got {type(raw).__name__}")
    return AppSettings.from_dict(raw)


def save_settings(adapter: PersistenceAdapter, settings: AppSettings) -> None:
    if settings.data_retention_days < 0:
        raise ValidationError("dataRetentionDays must be non-negative")
    adapter.set(K.APP_SETTINGS, settings.to_dict())
    logger.info("Settings saved")


def _load_json(path: pathlib.Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def _load_yaml(path: pathlib.Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_config_file(path: str | pathlib.Path) -> Dict[str, Any]:
    """Read a JSON or YAML file into a dict, chosen by extension."""
    p = pathlib.Path(path)
    if not p.exists():
        raise FileNotFoundError(p)

    if p.suffix.lower() in {".json"}:
        return _load_json(p)
    elif p.suffix.lower() in {".yaml", ".yml"}:
        return _load_yaml(p)
    else:
        raise ValueError(f"Unsupported config extension: {p.suffix}")


def load_engine_config(path: str | pathlib.Path) -> EngineConfig:
    """
    Load an EngineConfig from a JSON or YAML file.

    Expected top-level keys (all optional):
    - data_dir, ruleset, scouting_ruleset, heatmap_key
    - field:   {width, height}
    - storage: {backend, capacity_bytes}
    """
    return EngineConfig.from_dict(load_config_file(path))
