# tempmon/recording/daily_log.py
from __future__ import annotations

import csv
import logging
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional

from tempmon.core.errors import PersistenceError
from tempmon.model.history import HistoryPoint
from tempmon.model.reading import Reading

DELIMITER = ";"
HEADER = ("Date", "Time", "Temperature", "Humidity")
DATE_FMT = "%Y.%m.%d"
TIME_FMT = "%H:%M:%S"

_log = logging.getLogger(__name__)


def daily_log_name(day: date) -> str:
    return day.strftime("log_%Y-%m-%d.csv")


def format_temperature(value: float) -> str:
    return f"{value:.1f}".replace(".", ",")


def parse_temperature(text: str) -> float:
    return float(text.strip().replace(",", "."))


class DailyLog:
    """
    Append-only, one file per local calendar day under `directory`.

    Rows are dated by the reading's own timestamp, so a reading captured just
    before midnight lands in that day's file.
    """

    def __init__(self, directory: str | Path = "."):
        self._dir = Path(directory)

    @property
    def directory(self) -> Path:
        return self._dir

    def path_for(self, day: date) -> Path:
        return self._dir / daily_log_name(day)

    def append(self, reading: Reading) -> Path:
        ts = reading.timestamp
        path = self.path_for(ts.date())
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            new_file = not path.exists()
            with open(path, "a", newline="", encoding="utf-8") as f:
                w = csv.writer(f, delimiter=DELIMITER, lineterminator="\n")
                if new_file:
                    w.writerow(HEADER)
                w.writerow([
                    ts.strftime(DATE_FMT),
                    ts.strftime(TIME_FMT),
                    format_temperature(reading.temperature),
                    str(int(reading.humidity)),
                ])
        except OSError as e:
            raise PersistenceError(
                "Could not write daily log.",
                hint=str(e),
                details={"path": str(path)},
            ) from None
        return path


def load_history(path: str | Path, *, limit: Optional[int] = None) -> List[HistoryPoint]:
    """
    Parse a daily log back into history points.

    Malformed rows are skipped. With `limit`, only the last `limit` rows are
    considered. A missing file yields an empty list.
    """
    path = Path(path)
    try:
        with open(path, "r", newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f, delimiter=DELIMITER))
    except FileNotFoundError:
        _log.warning("HISTORY_FILE_MISSING path=%s", path)
        return []

    records = [r for r in rows if r and tuple(r[:4]) != HEADER]
    _log.info("HISTORY_RECORDS path=%s count=%d", path, len(records))
    if limit is not None:
        records = records[-limit:] if limit > 0 else []

    points: List[HistoryPoint] = []
    for row in records:
        if len(row) < 4:
            continue
        try:
            ts = datetime.strptime(f"{row[0]} {row[1]}", f"{DATE_FMT} {TIME_FMT}")
            points.append(HistoryPoint(
                timestamp=ts,
                temperature=parse_temperature(row[2]),
                humidity=int(row[3]),
            ))
        except ValueError:
            continue

    _log.info("HISTORY_LOADED path=%s points=%d", path, len(points))
    return points
