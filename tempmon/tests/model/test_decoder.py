from __future__ import annotations

from datetime import datetime

import pytest

from tempmon.core.errors import DecodeError
from tempmon.model.decoder import decode_manufacturer_data, reading_from_advertisement


def test_decode_positive_temperature():
    # 235 = 0x00EB -> LSB in company id high byte, MSB in payload[0]
    temp, hum = decode_manufacturer_data({0xEB01: bytes([0x00, 45])})
    assert temp == pytest.approx(23.5)
    assert hum == 45


def test_decode_negative_temperature():
    # -50 = 0xFFCE
    temp, hum = decode_manufacturer_data({0xCE12: bytes([0xFF, 60])})
    assert temp == pytest.approx(-5.0)
    assert hum == 60


def test_company_id_low_byte_is_ignored():
    a = decode_manufacturer_data({0x2000: bytes([0x01, 10])})
    b = decode_manufacturer_data({0x20FF: bytes([0x01, 10])})
    assert a == b
    # 0x0120 = 288
    assert a[0] == pytest.approx(28.8)


def test_humidity_not_clamped():
    _, hum = decode_manufacturer_data({0x0000: bytes([0x00, 250])})
    assert hum == 250


def test_extra_payload_bytes_ignored():
    temp, hum = decode_manufacturer_data({0x6400: bytes([0x00, 33, 0xAA, 0xBB])})
    assert temp == pytest.approx(10.0)
    assert hum == 33


def test_only_first_entry_used():
    data = {0x6400: bytes([0x00, 33]), 0xC800: bytes([0x00, 99])}
    temp, hum = decode_manufacturer_data(data)
    assert temp == pytest.approx(10.0)
    assert hum == 33


def test_empty_mapping_raises():
    with pytest.raises(DecodeError):
        decode_manufacturer_data({})


@pytest.mark.parametrize("payload", [b"", b"\x01"])
def test_short_payload_raises(payload):
    with pytest.raises(DecodeError) as ei:
        decode_manufacturer_data({0x1234: payload})
    assert ei.value.details["company_id"] == 0x1234


def test_reading_from_advertisement_truncates_to_seconds():
    now = datetime(2024, 5, 1, 12, 30, 15, 987654)
    r = reading_from_advertisement(
        {0xEB01: bytes([0x00, 45])},
        device_id="dev-1",
        rssi=-70,
        now=now,
    )
    assert r.timestamp == datetime(2024, 5, 1, 12, 30, 15)
    assert r.temperature == pytest.approx(23.5)
    assert r.humidity == 45
    assert r.device_id == "dev-1"
    assert r.rssi == -70
    assert r.raw_data == bytes([0x00, 45])
    assert r.raw_hex == "00 2D"
