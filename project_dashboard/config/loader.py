from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import (
    DEFAULT_CRITICAL_DAYS_THRESHOLD,
    DEFAULT_REFRESH_INTERVAL_SECONDS,
    DashboardSettings,
)

"""Config loader.

Responsibilities:
- Load YAML config (default config/dashboard.yml)
- Validate against config_schema.json shipped next to this module
- Apply defaults (threshold 7 days, refresh every 300 s, es-ES / EUR)
- Apply environment overrides (DASHBOARD_SOURCE)
"""

__all__ = [
    "ConfigError",
    "DashboardConfig",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "load_config",
    "resolve_config_path",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/dashboard.yml")
ENV_CONFIG_PATH = "DASHBOARD_CONFIG"
ENV_SOURCE_PATH = "DASHBOARD_SOURCE"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class DashboardConfig:
    source_path: str
    sheet_name: str | None
    settings: DashboardSettings


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing or not valid JSON, or the config
            data violates the schema (missing keys, wrong types, unknown keys)
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def resolve_config_path(path: Path | None = None) -> Path:
    """Explicit path > DASHBOARD_CONFIG > config/dashboard.yml."""
    if path is not None:
        return path
    env_path = os.getenv(ENV_CONFIG_PATH)
    return Path(env_path) if env_path else DEFAULT_CONFIG_PATH


def load_config(path: Path | None = None) -> DashboardConfig:
    path = resolve_config_path(path)
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config root must be a mapping")

    _validate_config_schema(data)

    settings = DashboardSettings(
        critical_days_threshold=data.get("critical_days_threshold", DEFAULT_CRITICAL_DAYS_THRESHOLD),
        refresh_interval_seconds=data.get("refresh_interval_seconds", DEFAULT_REFRESH_INTERVAL_SECONDS),
        date_locale=data.get("date_locale", "es-ES"),
        currency=data.get("currency", "EUR"),
        currency_symbol=data.get("currency_symbol", "€"),
    )
    # 環境変数が最優先
    source_path = os.getenv(ENV_SOURCE_PATH) or data["source_path"]
    return DashboardConfig(
        source_path=source_path,
        sheet_name=data.get("sheet_name"),
        settings=settings,
    )
