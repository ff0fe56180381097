"""Configuration management for the user service."""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml

from .database import resolve_database_path

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}
_KNOWN_KEYS = {"database_path", "host", "port", "api_prefix", "log_level"}

_ENV_OVERRIDES = {
    "USERSERVICE_HOST": "host",
    "USERSERVICE_PORT": "port",
    "USERSERVICE_API_PREFIX": "api_prefix",
    "USERSERVICE_LOG_LEVEL": "log_level",
}


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the HTTP service."""

    database_path: Path
    host: str = "0.0.0.0"
    port: int = 8080
    api_prefix: str = ""
    log_level: str = "INFO"

    @staticmethod
    def from_dict(data: Mapping[str, object], base_path: Path | None = None) -> "Settings":
        """Create :class:`Settings` from raw dictionary data."""

        unknown = set(data.keys()) - _KNOWN_KEYS
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        raw_db_path = data.get("database_path")
        if raw_db_path:
            candidate = Path(str(raw_db_path)).expanduser()
            if not candidate.is_absolute() and base_path is not None:
                candidate = base_path / candidate
            database_path = candidate.resolve(strict=False)
        else:
            database_path = resolve_database_path(None)

        try:
            port = int(data.get("port", 8080))  # type: ignore[arg-type]
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid port: {data.get('port')!r}") from exc
        if not 1 <= port <= 65535:
            raise ValueError(f"Port must be between 1 and 65535, got {port}")

        log_level = str(data.get("log_level", "INFO")).strip().upper()
        if log_level not in _LOG_LEVELS:
            raise ValueError(f"Unsupported log level: {log_level}")

        return Settings(
            database_path=database_path,
            host=str(data.get("host", "0.0.0.0")),
            port=port,
            api_prefix=str(data.get("api_prefix") or ""),
            log_level=log_level,
        )


def resolve_config_path(env_value: Optional[str]) -> Path:
    """Resolve the path to the configuration file."""
    if env_value:
        candidate = Path(env_value).expanduser().resolve(strict=False)
    else:
        candidate = (Path(__file__).resolve().parent.parent / "config" / "userservice.yaml").resolve(strict=False)
    return candidate


def _read_config_file(config_path: Path) -> Dict[str, object]:
    with config_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}

    if not isinstance(raw, dict):
        raise ValueError(f"Configuration file {config_path} must contain a mapping")
    section = raw.get("userservice", {})
    if not isinstance(section, dict):
        raise ValueError("The 'userservice' configuration section must be a mapping")
    return dict(section)


def load_settings(
    config_path: Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Load settings from an optional YAML file, then apply environment overrides."""

    env = os.environ if environ is None else environ
    if config_path is None:
        config_path = resolve_config_path(env.get("USERSERVICE_CONFIG"))

    data: Dict[str, object] = {}
    if config_path.is_file():
        data = _read_config_file(config_path)

    for variable, key in _ENV_OVERRIDES.items():
        value = env.get(variable)
        if value:
            data[key] = value

    settings = Settings.from_dict(data, base_path=config_path.parent)
    db_override = env.get("USERSERVICE_DB_PATH")
    if db_override:
        settings = replace(settings, database_path=resolve_database_path(db_override))
    return settings


__all__ = ["Settings", "load_settings", "resolve_config_path"]
