from __future__ import annotations

from typing import Any

# Operator presets, applied as patches over the current settings.
# Higher sensitivity declares crawling after fewer frames with looser posture
# thresholds; a higher confidence threshold ignores more partially visible subjects.

PRESETS: dict[str, dict[str, Any]] = {
    "balanced": {"sensitivity": 5, "confidence_threshold": 0.5},
    # Night watch / high-value areas; accepts more false positives.
    "high_alert": {"sensitivity": 8, "confidence_threshold": 0.4},
    # Busy scenes (pets, cleaning staff); needs sustained, clear evidence.
    "low_false_alarm": {"sensitivity": 3, "confidence_threshold": 0.65},
}

PRESET_LABELS: dict[str, str] = {
    "balanced": "Balanced",
    "high_alert": "High alert",
    "low_false_alarm": "Low false alarm",
}


def _normalize_id(preset_id: str) -> str:
    return preset_id.strip().lower().replace("-", "_").replace(" ", "_")


def list_presets() -> list[dict[str, Any]]:
    out: list[dict[str, Any]] = []
    for key, patch in PRESETS.items():
        out.append({"id": key, "label": PRESET_LABELS.get(key, key), "settings": dict(patch)})
    return out


def preset_patch(preset_id: str) -> dict[str, Any]:
    """Return a copy of the settings patch for `preset_id` ("High alert" works too)."""

    key = _normalize_id(preset_id)
    try:
        return dict(PRESETS[key])
    except KeyError:
        raise KeyError(f"unknown preset {preset_id!r}; expected one of {sorted(PRESETS)}") from None
