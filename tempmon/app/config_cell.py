# tempmon/app/config_cell.py
from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional

from tempmon.app.config import MonitorConfig, load_config, save_config


class SharedConfigCell:
    """
    Whole-value configuration snapshot shared between threads.

    MonitorConfig is frozen, so read() hands out the stored object itself;
    write() swaps it. Last writer wins.
    """

    def __init__(self, initial: Optional[MonitorConfig] = None):
        self._lock = threading.Lock()
        self._value = initial or MonitorConfig()

    def read(self) -> MonitorConfig:
        with self._lock:
            return self._value

    def write(self, config: MonitorConfig) -> None:
        with self._lock:
            self._value = config


class ConfigStore:
    """
    Config file + shared cell: apply() publishes a new value to the cell and
    rewrites the file only when the value actually changed.
    """

    def __init__(self, path: str | Path, *, logger: Optional[logging.Logger] = None):
        self._path = Path(path)
        self._log = logger or logging.getLogger(__name__)
        self.cell = SharedConfigCell(load_config(self._path))

    @property
    def path(self) -> Path:
        return self._path

    def current(self) -> MonitorConfig:
        return self.cell.read()

    def apply(self, new: MonitorConfig) -> bool:
        old = self.cell.read()
        self.cell.write(new)
        if new == old:
            return False

        self._log.info("CONFIG_CHANGED path=%s", self._path)
        try:
            save_config(self._path, new)
        except OSError:
            self._log.exception("CONFIG_SAVE_FAILED path=%s", self._path)
        return True
