# tempmon/model/history.py
from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Deque, Iterable, Iterator, Optional, Tuple

from tempmon.model.reading import Reading

MAX_HISTORY_POINTS = 200


@dataclass(frozen=True)
class HistoryPoint:
    timestamp: datetime
    temperature: float
    humidity: int

    @classmethod
    def from_reading(cls, reading: Reading) -> "HistoryPoint":
        return cls(
            timestamp=reading.timestamp,
            temperature=reading.temperature,
            humidity=reading.humidity,
        )


class HistoryBuffer:
    """
    In-memory history kept by a consumer of the outbound channel.

    maxlen=None keeps everything (load_all_history); otherwise the oldest
    points are evicted first.
    """

    def __init__(self, points: Iterable[HistoryPoint] = (), *, maxlen: Optional[int] = MAX_HISTORY_POINTS):
        self._points: Deque[HistoryPoint] = deque(points, maxlen=maxlen)

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[HistoryPoint]:
        return iter(self._points)

    @property
    def maxlen(self) -> Optional[int]:
        return self._points.maxlen

    @property
    def latest(self) -> Optional[HistoryPoint]:
        return self._points[-1] if self._points else None

    def add(self, reading: Reading) -> HistoryPoint:
        point = HistoryPoint.from_reading(reading)
        self._points.append(point)
        return point

    def temperature_range(self) -> Optional[Tuple[float, float]]:
        if not self._points:
            return None
        temps = [p.temperature for p in self._points]
        return min(temps), max(temps)

    def humidity_range(self) -> Optional[Tuple[int, int]]:
        if not self._points:
            return None
        hums = [p.humidity for p in self._points]
        return min(hums), max(hums)
