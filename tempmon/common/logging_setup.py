# tempmon/common/logging_setup.py
from __future__ import annotations

import logging
from pathlib import Path

CONSOLE_FORMAT = "[%(asctime)s] [%(levelname)s] - %(message)s"
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
APP_LOG_NAME = "tempmon.log"


def configure_console_logging(level: int = logging.INFO) -> None:
    """Console handler on the root logger (idempotent)."""
    root = logging.getLogger()
    for h in root.handlers:
        if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler):
            h.setLevel(level)
            break
    else:
        sh = logging.StreamHandler()
        sh.setLevel(level)
        sh.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
        root.addHandler(sh)

    if root.level == logging.NOTSET or root.level > level:
        root.setLevel(level)


def configure_file_logging(app_log_path: Path) -> None:
    """
    Add a file handler to the root logger (idempotent).
    """
    root = logging.getLogger()
    app_log_path.parent.mkdir(parents=True, exist_ok=True)
    target = str(app_log_path.resolve())

    for h in root.handlers:
        if isinstance(h, logging.FileHandler) and getattr(h, "baseFilename", None) == target:
            return

    fh = logging.FileHandler(app_log_path, encoding="utf-8", delay=True)
    fh.setLevel(logging.INFO)
    fh.setFormatter(logging.Formatter(FILE_FORMAT))
    root.addHandler(fh)

    if root.level == logging.NOTSET or root.level > logging.INFO:
        root.setLevel(logging.INFO)
