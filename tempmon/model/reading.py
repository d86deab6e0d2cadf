# tempmon/model/reading.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Reading:
    """
    One decoded temperature/humidity advertisement from the target device.
    """
    timestamp: datetime          # local time, second resolution
    temperature: float           # °C, one decimal
    humidity: int                # %, raw unsigned byte (not clamped)
    device_id: str
    rssi: Optional[int] = None   # dBm
    raw_data: bytes = b""

    @property
    def raw_hex(self) -> str:
        return " ".join(f"{b:02X}" for b in self.raw_data)
