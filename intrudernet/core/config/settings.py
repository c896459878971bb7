"""Monitor configuration.

Settings are loaded from YAML defaults and overridden by environment variables
prefixed with `INET_`.
"""

from __future__ import annotations

import math
import os
from pathlib import Path
from typing import Any, cast

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from intrudernet.core.alerts.dedup import AlertConfig
from intrudernet.core.zone import zone_from_values

SENSITIVITY_RANGE = (1, 10)
CONFIDENCE_THRESHOLD_RANGE = (0.1, 0.9)


class MonitorSettings(BaseSettings):
    """Runtime configuration loaded from YAML defaults and `INET_` env overrides."""

    # Operator controls
    sensitivity: int = Field(5, description="1 (relaxed) .. 10 (most sensitive)")
    confidence_threshold: float = 0.5
    privacy_mode: bool = False
    # Restricted zone as [x, y, w, h] in frame pixels; None = whole frame.
    zone: list[float] | None = None

    # Alert windows (milliseconds)
    update_interval_ms: float = 200.0
    danger_cooldown_ms: float = 3000.0
    info_cooldown_ms: float = 10000.0
    snapshot_interval_ms: float = 5000.0
    info_min_confidence: float = 0.6

    # Sinks
    max_events: int = 50
    telemetry_size: int = 30
    snapshot_jpeg_quality: int = 60
    enable_overlays: bool = True
    audio_enabled: bool = True
    report_dir: str = "reports"

    model_config = SettingsConfigDict(env_prefix="INET_", validate_assignment=True)

    @field_validator("sensitivity")
    @classmethod
    def _validate_sensitivity(cls, v: int) -> int:
        lo, hi = SENSITIVITY_RANGE
        if not lo <= v <= hi:
            raise ValueError("sensitivity must be in [1, 10]")
        return v

    @field_validator("confidence_threshold")
    @classmethod
    def _validate_confidence_threshold(cls, v: float) -> float:
        lo, hi = CONFIDENCE_THRESHOLD_RANGE
        if not lo <= v <= hi:
            raise ValueError("confidence_threshold must be in [0.1, 0.9]")
        return float(v)

    @field_validator("zone")
    @classmethod
    def _validate_zone(cls, v: list[float] | None) -> list[float] | None:
        if v is None:
            return v
        if len(v) != 4:
            raise ValueError("zone must be [x, y, w, h]")
        zone_from_values(v)  # will raise on negative size
        return [float(x) for x in v]

    @field_validator("update_interval_ms", "danger_cooldown_ms", "info_cooldown_ms", "snapshot_interval_ms")
    @classmethod
    def _validate_window(cls, v: float) -> float:
        if v < 0:
            raise ValueError("time windows must be >= 0")
        return float(v)

    @field_validator("info_min_confidence")
    @classmethod
    def _validate_info_min_confidence(cls, v: float) -> float:
        if not 0.0 <= float(v) <= 1.0:
            raise ValueError("info_min_confidence must be in [0, 1]")
        return float(v)

    @field_validator("max_events", "telemetry_size")
    @classmethod
    def _validate_capacity(cls, v: int) -> int:
        if v < 1:
            raise ValueError("capacities must be >= 1")
        return v

    @field_validator("snapshot_jpeg_quality")
    @classmethod
    def _validate_jpeg_quality(cls, v: int) -> int:
        if not 10 <= v <= 100:
            raise ValueError("snapshot_jpeg_quality must be in [10, 100]")
        return v


def _require_finite(name: str, v: float) -> float:
    f = float(v)
    if not math.isfinite(f):
        raise ValueError(f"{name} must be a finite number, got {v!r}")
    return f


def clamp_sensitivity(v: float) -> int:
    """Clamp an operator sensitivity into range; non-finite values raise ValueError."""

    lo, hi = SENSITIVITY_RANGE
    return int(min(hi, max(lo, round(_require_finite("sensitivity", v)))))


def clamp_confidence_threshold(v: float) -> float:
    lo, hi = CONFIDENCE_THRESHOLD_RANGE
    return float(min(hi, max(lo, _require_finite("confidence_threshold", v))))


def settings_to_dict(settings: MonitorSettings) -> dict[str, Any]:
    return cast(dict[str, Any], settings.model_dump())


def _fields_set(obj: MonitorSettings) -> set[str]:
    """Return the set of fields explicitly provided/overridden on the model."""

    return set(obj.model_fields_set)


def _config_path() -> Path:
    """Return the YAML configuration path (defaults to config/monitor.config.yml)."""

    return Path(os.getenv("INET_CONFIG", "config/monitor.config.yml"))


def load_settings() -> MonitorSettings:
    """Load settings from YAML and environment variables.

    YAML provides defaults; environment variables override.
    """

    data: dict[str, Any] = {}
    path = _config_path()
    if path.exists():
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

    env_settings = MonitorSettings()
    env_overrides: dict[str, Any] = {
        name: getattr(env_settings, name) for name in _fields_set(env_settings)
    }

    merged = {**data, **env_overrides}
    return MonitorSettings(**merged)


def alert_config_from_settings(settings: MonitorSettings) -> AlertConfig:
    return AlertConfig(
        update_interval_ms=float(settings.update_interval_ms),
        danger_cooldown_ms=float(settings.danger_cooldown_ms),
        info_cooldown_ms=float(settings.info_cooldown_ms),
        snapshot_interval_ms=float(settings.snapshot_interval_ms),
        info_min_confidence=float(settings.info_min_confidence),
    )
