# tempmon/app/config.py
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from tempmon.core.errors import ConfigError

CONFIG_FILE = "config.yml"

_log = logging.getLogger(__name__)

_DURATION_FIELDS = (
    "scan_timeout_secs",
    "scan_pause_secs",
    "duplicate_threshold_secs",
    "continuous_scan_window_secs",
)


@dataclass(frozen=True)
class MonitorConfig:
    target_mac: str = "B8:59:CE:33:0F:93"
    scan_timeout_secs: float = 20.0
    scan_pause_secs: float = 20.0
    duplicate_threshold_secs: float = 30.0
    continuous_mode: bool = True
    continuous_scan_window_secs: float = 60.0
    temp_warn_high: float = 30.0
    temp_warn_low: float = 10.0
    load_all_history: bool = True
    adapter: Optional[str] = None
    log_dir: str = "."

    def __post_init__(self) -> None:
        for name in _DURATION_FIELDS:
            if getattr(self, name) < 0:
                raise ConfigError(
                    f"{name} must be non-negative",
                    details={name: getattr(self, name)},
                )

    # ---------------- scan-cycle helpers ----------------
    @property
    def scan_window_s(self) -> float:
        return self.continuous_scan_window_secs if self.continuous_mode else self.scan_timeout_secs

    def matches(self, address: str) -> bool:
        return address.strip().lower() == self.target_mac.strip().lower()

    # ---------------- (de)serialization ----------------
    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "MonitorConfig":
        """Build from a loose mapping: unknown keys ignored, missing keys defaulted."""
        known = {f.name: f for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                _log.debug("CONFIG_UNKNOWN_KEY key=%s", key)
                continue
            kwargs[key] = _coerce(key, value)
        return cls(**kwargs)

    def with_updates(self, **changes: Any) -> "MonitorConfig":
        known = {f.name for f in fields(self)}
        unknown = sorted(set(changes) - known)
        if unknown:
            raise ConfigError(
                f"Unknown config key(s): {', '.join(unknown)}",
                hint=f"Known keys: {', '.join(sorted(known))}",
            )
        return replace(self, **{k: _coerce(k, v) for k, v in changes.items()})


def _coerce(key: str, value: Any) -> Any:
    default = getattr(MonitorConfig, key, None)
    try:
        if key == "adapter":
            return None if value in (None, "", "none", "None") else str(value)
        if isinstance(default, bool):
            if isinstance(value, str):
                s = value.strip().lower()
                if s in ("1", "true", "yes", "on"):
                    return True
                if s in ("0", "false", "no", "off"):
                    return False
                raise ValueError(f"invalid bool literal '{value}'")
            return bool(value)
        if isinstance(default, float):
            return float(value)
        return str(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value for {key}: {value!r}", hint=str(e)) from None


# ---------------- file I/O ----------------

def load_config(path: str | Path = CONFIG_FILE) -> MonitorConfig:
    """
    Load the configuration file; absent or corrupt files yield defaults.
    """
    path = Path(path)
    _log.info("CONFIG_LOAD path=%s", path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        _log.info("CONFIG_MISSING path=%s using defaults", path)
        return MonitorConfig()
    except (OSError, yaml.YAMLError) as e:
        _log.warning("CONFIG_UNREADABLE path=%s error=%s using defaults", path, e)
        return MonitorConfig()

    if not isinstance(data, dict):
        _log.warning("CONFIG_CORRUPT path=%s root is %s, using defaults", path, type(data).__name__)
        return MonitorConfig()

    try:
        return MonitorConfig.from_mapping(data)
    except ConfigError as e:
        _log.warning("CONFIG_INVALID path=%s error=%s using defaults", path, e.message)
        return MonitorConfig()


def save_config(path: str | Path, config: MonitorConfig) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(config.as_dict(), f, sort_keys=False)
