# tempmon/model/decoder.py
from __future__ import annotations

import struct
from datetime import datetime
from typing import Mapping, Optional, Tuple

from tempmon.core.errors import DecodeError
from tempmon.model.reading import Reading

MIN_PAYLOAD_LEN = 2


def decode_manufacturer_data(manufacturer_data: Mapping[int, bytes]) -> Tuple[float, int]:
    """
    Decode (temperature_c, humidity_pct) from advertisement manufacturer data.

    Layout (first manufacturer entry only):
      company_id  u16, its HIGH byte is the temperature LSB
      payload[0]  temperature MSB
      payload[1]  humidity, unsigned percent

    Temperature is a signed 16-bit little-endian value in tenths of a degree.
    Humidity is not range-checked; some devices report values above 100.
    """
    if not manufacturer_data:
        raise DecodeError("advertisement carries no manufacturer data")

    company_id, payload = next(iter(manufacturer_data.items()))
    payload = bytes(payload)
    if len(payload) < MIN_PAYLOAD_LEN:
        raise DecodeError(
            f"manufacturer payload too short: {len(payload)} < {MIN_PAYLOAD_LEN}",
            details={"company_id": int(company_id), "payload": payload.hex()},
        )

    lsb = (int(company_id) >> 8) & 0xFF
    (raw_temp,) = struct.unpack("<h", bytes([lsb, payload[0]]))
    return raw_temp / 10.0, payload[1]


def reading_from_advertisement(
    manufacturer_data: Mapping[int, bytes],
    *,
    device_id: str,
    rssi: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Reading:
    """Decode and wrap into a Reading stamped with local time (seconds)."""
    temperature, humidity = decode_manufacturer_data(manufacturer_data)
    _, payload = next(iter(manufacturer_data.items()))
    ts = (now or datetime.now()).replace(microsecond=0)
    return Reading(
        timestamp=ts,
        temperature=temperature,
        humidity=humidity,
        device_id=device_id,
        rssi=rssi,
        raw_data=bytes(payload),
    )
