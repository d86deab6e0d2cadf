# tempmon/cli/commands.py
from __future__ import annotations

import time
from datetime import date
from pathlib import Path
from typing import Optional

from tempmon.app.config import MonitorConfig
from tempmon.app.config_cell import ConfigStore
from tempmon.app.controller import MonitorController
from tempmon.common.logging_setup import APP_LOG_NAME, configure_file_logging
from tempmon.core.errors import ChannelClosedError, DecodeError
from tempmon.core.messages import Message, NewData, PersistenceResult, StatusUpdate
from tempmon.model.decoder import decode_manufacturer_data
from tempmon.model.history import MAX_HISTORY_POINTS, HistoryBuffer
from tempmon.recording.daily_log import DailyLog, load_history

_POLL_S = 0.2


# ---------------- Outbound consumer ----------------

class PrintConsumer:
    """Print outbound messages to stdout and keep a bounded history."""

    def __init__(self, config: MonitorConfig, *, history: Optional[HistoryBuffer] = None):
        self._config = config
        self.history = history if history is not None else HistoryBuffer(maxlen=None if config.load_all_history else MAX_HISTORY_POINTS)
        self.last_write_ok = True
        self.status = ""

    def on_message(self, msg: Message) -> None:
        if isinstance(msg, StatusUpdate):
            self.status = msg.text
            print(f"STATUS  {msg.text}")
        elif isinstance(msg, PersistenceResult):
            self.last_write_ok = msg.ok
            if not msg.ok:
                print("LOG     write failed")
        elif isinstance(msg, NewData):
            r = msg.reading
            self.history.add(r)
            flag = self._temperature_flag(r.temperature)
            rssi = f"{r.rssi} dBm" if r.rssi is not None else "N/A"
            print(
                f"READING {r.timestamp:%H:%M:%S} {r.temperature:.1f}°C{flag} {r.humidity}% "
                f"rssi={rssi} device={r.device_id} raw={r.raw_hex}"
            )

    def _temperature_flag(self, temperature: float) -> str:
        if temperature > self._config.temp_warn_high:
            return " (HIGH)"
        if temperature < self._config.temp_warn_low:
            return " (LOW)"
        return ""


# ---------------- Commands ----------------

def cmd_run(store: ConfigStore, *, secs: Optional[float] = None) -> int:
    cfg = store.current()
    configure_file_logging(Path(cfg.log_dir) / APP_LOG_NAME)

    consumer = PrintConsumer(cfg)
    print(f"Target:  {cfg.target_mac} ({'continuous' if cfg.continuous_mode else 'timed'} mode)")
    print(f"Log dir: {Path(cfg.log_dir).resolve()}")

    controller = MonitorController(store.cell)
    t0 = time.monotonic()
    try:
        with controller:
            while secs is None or time.monotonic() - t0 < secs:
                try:
                    msg = controller.outbound.recv(timeout=_POLL_S)
                except ChannelClosedError:
                    break
                if msg is not None:
                    consumer.on_message(msg)
    except KeyboardInterrupt:
        print("Interrupted.")

    for msg in controller.poll():
        consumer.on_message(msg)
    print(f"Accepted readings this run: {len(consumer.history)}")
    last = consumer.history.latest
    if last is not None:
        print(f"Last reading: {last.timestamp:%Y-%m-%d %H:%M:%S} {last.temperature:.1f}°C {last.humidity}%")
    return 0


def cmd_history(store: ConfigStore, *, day: Optional[date] = None, show_all: bool = False) -> int:
    cfg = store.current()
    log = DailyLog(cfg.log_dir)
    path = log.path_for(day or date.today())

    limit = None if (show_all or cfg.load_all_history) else MAX_HISTORY_POINTS
    points = load_history(path, limit=limit)
    if not points:
        print(f"No readings in {path}")
        return 0

    hist = HistoryBuffer(points, maxlen=None)
    for p in hist:
        print(f"{p.timestamp:%Y-%m-%d %H:%M:%S}  {p.temperature:5.1f}°C  {p.humidity:3d}%")

    t_min, t_max = hist.temperature_range()  # type: ignore[misc]
    h_min, h_max = hist.humidity_range()  # type: ignore[misc]
    print(f"{len(hist)} readings  Temp min/max: {t_min:.1f}/{t_max:.1f}°C  Hum min/max: {h_min}/{h_max}%")
    return 0


def cmd_decode(payload_hex: str, *, company_id: int = 0) -> int:
    try:
        payload = bytes.fromhex(payload_hex.replace(" ", "").replace(":", ""))
    except ValueError as e:
        raise DecodeError("Payload is not valid hex.", hint=str(e)) from None

    temperature, humidity = decode_manufacturer_data({company_id: payload})
    print(f"Temperature: {temperature:.1f}°C")
    print(f"Humidity:    {humidity}%")
    return 0


def cmd_config_show(store: ConfigStore) -> int:
    print(f"# {store.path}")
    for key, value in store.current().as_dict().items():
        print(f"{key}: {value}")
    return 0


def cmd_config_set(store: ConfigStore, updates: dict) -> int:
    new = store.current().with_updates(**updates)
    changed = store.apply(new)
    print("Configuration saved." if changed else "Configuration unchanged.")
    return 0
