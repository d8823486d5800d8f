"""
config.py

Responsibility: Resolve runtime settings into a deterministic, typed model.

Sources, lowest to highest priority:
- built-in defaults
- environment variables (`FMTCONV_STRICT`, `FMTCONV_LOG_LEVEL`, `FMTCONV_FLOAT_PRECISION`)
- an optional YAML file (top-level mapping), passed in as init values

CLI flags are applied on top by `cli.py`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SettingsError(ValueError):
    pass


class Settings(BaseSettings):
    """Runtime settings shared by the CLI and the console helpers."""

    model_config = SettingsConfigDict(
        env_prefix="FMTCONV_",
        case_sensitive=False,
        extra="forbid",
        frozen=True,
    )

    strict: bool = False
    log_level: str = "WARNING"
    float_precision: int = 64

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, v: Any) -> str:
        level = str(v).strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"must be a logging level name, got {v!r}")
        return level

    @field_validator("float_precision")
    @classmethod
    def _check_float_precision(cls, v: int) -> int:
        if v not in (32, 64):
            raise ValueError(f"must be 32 or 64, got {v}")
        return v


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise SettingsError(f"Config file does not exist: {path}")
    try:
        with path.open(encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except yaml.YAMLError as e:
        raise SettingsError(f"Config file is not valid YAML: {path}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise SettingsError("Config file must be a mapping/object at the top level.")
    return data


def _build(values: dict[str, Any]) -> Settings:
    try:
        return Settings(**values)
    except ValidationError as e:
        raise SettingsError(f"Invalid settings: {e}") from e


def load_settings(path: str | Path | None = None) -> Settings:
    """
    Build `Settings` from the environment and, when given, a YAML config file.
    File values win over environment values.

    Example file:

        strict: true
        log_level: debug
        float_precision: 32
    """
    values = _read_yaml(Path(path)) if path is not None else {}
    return _build(values)


def apply_overrides(settings: Settings, **overrides: Any) -> Settings:
    """Return `settings` with the given (validated) values replaced; `None` values are ignored."""
    values = settings.model_dump()
    values.update({key: value for key, value in overrides.items() if value is not None})
    return _build(values)
