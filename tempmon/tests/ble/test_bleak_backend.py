from __future__ import annotations

import asyncio
from types import SimpleNamespace

import pytest
from bleak.exc import BleakError

import tempmon.ble.bleak_backend as bb
from tempmon.ble.errors import ManagerOpenError, ScanStartError


class FakeScanner:
    instances = []
    fail_init = None
    fail_start = None
    fail_stop = None
    adverts = []

    def __init__(self, **kwargs):
        if FakeScanner.fail_init is not None:
            raise FakeScanner.fail_init
        self.kwargs = kwargs
        self.started = 0
        self.stopped = 0
        FakeScanner.instances.append(self)

    async def start(self):
        if FakeScanner.fail_start is not None:
            raise FakeScanner.fail_start
        self.started += 1

    async def stop(self):
        self.stopped += 1
        if FakeScanner.fail_stop is not None:
            raise FakeScanner.fail_stop

    async def advertisement_data(self):
        for device, adv in FakeScanner.adverts:
            yield device, adv


@pytest.fixture(autouse=True)
def fake_scanner(monkeypatch):
    FakeScanner.instances = []
    FakeScanner.fail_init = None
    FakeScanner.fail_start = None
    FakeScanner.fail_stop = None
    FakeScanner.adverts = []
    monkeypatch.setattr(bb, "BleakScanner", FakeScanner)
    return FakeScanner


def _collect(adapter):
    async def go():
        await adapter.start_scan()
        try:
            return [e async for e in adapter.events()]
        finally:
            await adapter.stop_scan()
    return asyncio.run(go())


def test_events_are_translated():
    FakeScanner.adverts = [
        (SimpleNamespace(address="B8:59:CE:33:0F:93"), SimpleNamespace(rssi=-71, manufacturer_data={0xE600: b"\x00\x29"})),
        (SimpleNamespace(address="11:22:33:44:55:66"), SimpleNamespace(rssi=-90, manufacturer_data={})),
    ]
    events = _collect(bb.BleakAdapter())

    assert [e.address for e in events] == ["B8:59:CE:33:0F:93", "11:22:33:44:55:66"]
    assert events[0].rssi == -71
    assert events[0].manufacturer_data == {0xE600: b"\x00\x29"}
    assert FakeScanner.instances[0].kwargs == {}
    assert FakeScanner.instances[0].stopped == 1


def test_named_adapter_passed_to_scanner():
    _collect(bb.BleakAdapter("hci1"))
    assert FakeScanner.instances[0].kwargs == {"adapter": "hci1"}


def test_start_failure_raises_scan_start_error():
    FakeScanner.fail_start = BleakError("Bluetooth device is turned off")
    adapter = bb.BleakAdapter()

    with pytest.raises(ScanStartError):
        asyncio.run(adapter.start_scan())
    # no scanner kept: stop and events are no-ops
    asyncio.run(adapter.stop_scan())
    assert _events_without_start(adapter) == []


def _events_without_start(adapter):
    async def go():
        return [e async for e in adapter.events()]
    return asyncio.run(go())


def test_stop_failure_is_swallowed():
    FakeScanner.fail_stop = BleakError("gone")
    _collect(bb.BleakAdapter())
    assert FakeScanner.instances[0].stopped == 1


def test_open_failure_raises_manager_open_error():
    FakeScanner.fail_init = BleakError("No Bluetooth adapters found.")
    with pytest.raises(ManagerOpenError):
        asyncio.run(bb.open_bleak_manager())


def test_adapter_names_from_sysfs(tmp_path, monkeypatch):
    monkeypatch.setattr(bb.sys, "platform", "linux")
    for name in ("hci1", "hci0", "rfkill0"):
        (tmp_path / name).mkdir()

    assert bb.BleakManager(sysfs_root=tmp_path).adapter_names() == ["hci0", "hci1"]
    assert bb.BleakManager(adapter="hci1", sysfs_root=tmp_path).adapter_names() == ["hci1"]
    assert bb.BleakManager(adapter="hci7", sysfs_root=tmp_path).adapter_names() == []

    adapters = asyncio.run(bb.BleakManager(sysfs_root=tmp_path).adapters())
    assert [a.name for a in adapters] == ["hci0", "hci1"]


def test_adapter_names_without_sysfs(tmp_path, monkeypatch):
    monkeypatch.setattr(bb.sys, "platform", "darwin")
    assert bb.BleakManager(sysfs_root=tmp_path).adapter_names() == ["default"]
    assert bb.BleakManager(adapter="hci0", sysfs_root=tmp_path).adapter_names() == ["hci0"]


def test_open_fails_without_registered_adapter(tmp_path, monkeypatch):
    monkeypatch.setattr(bb.sys, "platform", "linux")
    (tmp_path / "rfkill0").mkdir()

    with pytest.raises(ManagerOpenError):
        asyncio.run(bb.BleakManager.open(sysfs_root=tmp_path))
    with pytest.raises(ManagerOpenError):
        asyncio.run(bb.BleakManager.open(adapter="hci3", sysfs_root=tmp_path))

    (tmp_path / "hci0").mkdir()
    manager = asyncio.run(bb.BleakManager.open(sysfs_root=tmp_path))
    assert manager.adapter_names() == ["hci0"]


def test_open_without_sysfs_uses_default(tmp_path, monkeypatch):
    monkeypatch.setattr(bb.sys, "platform", "darwin")
    manager = asyncio.run(bb.BleakManager.open(sysfs_root=tmp_path / "missing"))
    assert manager.adapter_names() == ["default"]
