from __future__ import annotations

import pytest
import yaml

from tempmon.app.config import MonitorConfig, load_config, save_config
from tempmon.core.errors import ConfigError


def test_defaults():
    cfg = MonitorConfig()
    assert cfg.target_mac == "B8:59:CE:33:0F:93"
    assert cfg.scan_timeout_secs == 20.0
    assert cfg.scan_pause_secs == 20.0
    assert cfg.duplicate_threshold_secs == 30.0
    assert cfg.continuous_mode is True
    assert cfg.continuous_scan_window_secs == 60.0
    assert cfg.temp_warn_high == 30.0
    assert cfg.temp_warn_low == 10.0
    assert cfg.load_all_history is True
    assert cfg.adapter is None


def test_scan_window_depends_on_mode():
    assert MonitorConfig(continuous_mode=True).scan_window_s == 60.0
    assert MonitorConfig(continuous_mode=False, scan_timeout_secs=7).scan_window_s == 7


def test_matches_is_case_insensitive():
    cfg = MonitorConfig(target_mac="b8:59:ce:33:0f:93")
    assert cfg.matches("B8:59:CE:33:0F:93")
    assert not cfg.matches("B8:59:CE:33:0F:94")


@pytest.mark.parametrize("field", [
    "scan_timeout_secs",
    "scan_pause_secs",
    "duplicate_threshold_secs",
    "continuous_scan_window_secs",
])
def test_negative_duration_rejected(field):
    with pytest.raises(ConfigError):
        MonitorConfig(**{field: -1.0})


def test_zero_durations_allowed():
    cfg = MonitorConfig(scan_timeout_secs=0, scan_pause_secs=0, duplicate_threshold_secs=0)
    assert cfg.duplicate_threshold_secs == 0


def test_with_updates_coerces_strings():
    cfg = MonitorConfig().with_updates(
        continuous_mode="off",
        scan_pause_secs="5",
        adapter="hci1",
        target_mac="AA:BB:CC:DD:EE:FF",
    )
    assert cfg.continuous_mode is False
    assert cfg.scan_pause_secs == 5.0
    assert cfg.adapter == "hci1"
    assert cfg.target_mac == "AA:BB:CC:DD:EE:FF"
    assert cfg.with_updates(adapter="none").adapter is None


def test_with_updates_unknown_key():
    with pytest.raises(ConfigError) as ei:
        MonitorConfig().with_updates(bogus=1)
    assert "bogus" in ei.value.message
    assert ei.value.hint


def test_with_updates_bad_values():
    with pytest.raises(ConfigError):
        MonitorConfig().with_updates(continuous_mode="maybe")
    with pytest.raises(ConfigError):
        MonitorConfig().with_updates(scan_pause_secs="soon")
    with pytest.raises(ConfigError):
        MonitorConfig().with_updates(scan_pause_secs="-3")


def test_missing_file_gives_defaults(tmp_path):
    assert load_config(tmp_path / "nope.yml") == MonitorConfig()


def test_round_trip(tmp_path):
    path = tmp_path / "sub" / "config.yml"
    cfg = MonitorConfig(target_mac="11:22:33:44:55:66", continuous_mode=False, scan_pause_secs=3.5)
    save_config(path, cfg)
    assert load_config(path) == cfg


def test_partial_file_and_unknown_keys(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text(yaml.safe_dump({"scan_pause_secs": 12, "extra": "x"}), encoding="utf-8")
    cfg = load_config(path)
    assert cfg.scan_pause_secs == 12.0
    assert cfg.target_mac == MonitorConfig().target_mac


@pytest.mark.parametrize("text", [
    "target_mac: [unclosed\n",
    "- 1\n- 2\n",
    "scan_timeout_secs: -5\n",
    "continuous_mode: perhaps\n",
])
def test_corrupt_or_invalid_file_gives_defaults(tmp_path, text):
    path = tmp_path / "config.yml"
    path.write_text(text, encoding="utf-8")
    assert load_config(path) == MonitorConfig()


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == MonitorConfig()
