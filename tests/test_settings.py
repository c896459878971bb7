from pathlib import Path

import pytest

from intrudernet.core.config import settings as cfg
from intrudernet.core.config.presets import PRESETS, list_presets, preset_patch


def test_load_settings_reads_updated_file(tmp_path: Path, monkeypatch):
    conf_path = tmp_path / "config.yml"
    conf_path.write_text("sensitivity: 7\nconfidence_threshold: 0.3\n", encoding="utf-8")
    monkeypatch.setenv("INET_CONFIG", str(conf_path))

    first = cfg.load_settings()
    assert first.sensitivity == 7
    assert first.confidence_threshold == 0.3

    conf_path.write_text("sensitivity: 2\nzone: [10, 20, 30, 40]\n", encoding="utf-8")

    second = cfg.load_settings()
    assert second.sensitivity == 2
    assert second.confidence_threshold == 0.5
    assert second.zone == [10.0, 20.0, 30.0, 40.0]


def test_env_overrides_yaml(tmp_path: Path, monkeypatch):
    conf_path = tmp_path / "config.yml"
    conf_path.write_text("sensitivity: 7\nprivacy_mode: false\n", encoding="utf-8")
    monkeypatch.setenv("INET_CONFIG", str(conf_path))
    monkeypatch.setenv("INET_SENSITIVITY", "9")
    monkeypatch.setenv("INET_PRIVACY_MODE", "true")

    s = cfg.load_settings()
    assert s.sensitivity == 9
    assert s.privacy_mode is True


def test_missing_file_uses_defaults(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("INET_CONFIG", str(tmp_path / "nope.yml"))
    s = cfg.load_settings()
    assert s.sensitivity == 5
    assert s.zone is None
    assert s.max_events == 50


def test_shipped_config_matches_defaults(monkeypatch):
    monkeypatch.setenv("INET_CONFIG", str(Path(__file__).resolve().parents[1] / "config" / "monitor.config.yml"))
    assert cfg.load_settings().model_dump() == cfg.MonitorSettings().model_dump()


def test_sensitivity_validation():
    with pytest.raises(ValueError):
        cfg.MonitorSettings(sensitivity=0)
    with pytest.raises(ValueError):
        cfg.MonitorSettings(sensitivity=11)
    assert cfg.MonitorSettings(sensitivity=10).sensitivity == 10


def test_confidence_threshold_validation():
    with pytest.raises(ValueError):
        cfg.MonitorSettings(confidence_threshold=0.05)
    with pytest.raises(ValueError):
        cfg.MonitorSettings(confidence_threshold=0.95)
    assert cfg.MonitorSettings(confidence_threshold=0.9).confidence_threshold == 0.9


def test_zone_validation():
    with pytest.raises(ValueError):
        cfg.MonitorSettings(zone=[0, 0, 10])
    with pytest.raises(ValueError):
        cfg.MonitorSettings(zone=[0, 0, -10, 10])
    assert cfg.MonitorSettings(zone=[1, 2, 3, 4]).zone == [1.0, 2.0, 3.0, 4.0]


def test_window_and_capacity_validation():
    with pytest.raises(ValueError):
        cfg.MonitorSettings(danger_cooldown_ms=-1)
    with pytest.raises(ValueError):
        cfg.MonitorSettings(max_events=0)
    with pytest.raises(ValueError):
        cfg.MonitorSettings(telemetry_size=0)
    with pytest.raises(ValueError):
        cfg.MonitorSettings(info_min_confidence=1.5)
    with pytest.raises(ValueError):
        cfg.MonitorSettings(snapshot_jpeg_quality=5)
    assert cfg.MonitorSettings(update_interval_ms=0).update_interval_ms == 0.0


def test_validate_assignment():
    s = cfg.MonitorSettings()
    with pytest.raises(ValueError):
        s.sensitivity = 42
    s.sensitivity = 8
    assert s.sensitivity == 8


@pytest.mark.parametrize("raw,expected", [(0, 1), (-3, 1), (5.4, 5), (5.6, 6), (99, 10)])
def test_clamp_sensitivity(raw, expected):
    assert cfg.clamp_sensitivity(raw) == expected


@pytest.mark.parametrize("raw,expected", [(0.0, 0.1), (0.5, 0.5), (1.0, 0.9)])
def test_clamp_confidence_threshold(raw, expected):
    assert cfg.clamp_confidence_threshold(raw) == expected


def test_alert_config_from_settings():
    s = cfg.MonitorSettings(danger_cooldown_ms=1000, info_min_confidence=0.7)
    alert = cfg.alert_config_from_settings(s)
    assert alert.danger_cooldown_ms == 1000.0
    assert alert.info_min_confidence == 0.7
    assert alert.update_interval_ms == 200.0


def test_settings_to_dict_includes_expected_keys():
    data = cfg.settings_to_dict(cfg.MonitorSettings(privacy_mode=True))
    assert data["privacy_mode"] is True
    assert "report_dir" in data


def test_list_presets_has_expected_shape_and_labels():
    presets = list_presets()
    ids = {p["id"] for p in presets}
    assert set(PRESETS.keys()) == ids

    by_id = {p["id"]: p for p in presets}
    assert by_id["high_alert"]["label"] == "High alert"
    assert by_id["balanced"]["settings"]["sensitivity"] == 5


def test_presets_are_valid_settings():
    for preset_id in PRESETS:
        cfg.MonitorSettings(**preset_patch(preset_id))


def test_preset_patch_is_a_copy():
    patch = preset_patch("balanced")
    patch["sensitivity"] = 999
    assert PRESETS["balanced"]["sensitivity"] == 5


def test_unknown_preset():
    with pytest.raises(KeyError):
        preset_patch("paranoid")


def test_preset_ids_are_normalized():
    assert preset_patch("High alert") == PRESETS["high_alert"]
    assert preset_patch(" low-false-alarm ")["sensitivity"] == 3


@pytest.mark.parametrize("raw", [float("inf"), float("-inf"), float("nan")])
def test_clamps_reject_non_finite(raw):
    with pytest.raises(ValueError):
        cfg.clamp_sensitivity(raw)
    with pytest.raises(ValueError):
        cfg.clamp_confidence_threshold(raw)


def test_non_finite_settings_rejected():
    with pytest.raises(ValueError):
        cfg.MonitorSettings(confidence_threshold=float("nan"))
    with pytest.raises(ValueError):
        cfg.MonitorSettings(zone=[float("nan"), 0, 10, 10])
