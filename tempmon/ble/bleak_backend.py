# tempmon/ble/bleak_backend.py
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import AsyncIterator, List, Optional

from bleak import BleakScanner
from bleak.exc import BleakError

from .base import AdvertisementEvent, BleAdapter, BleManager
from .errors import ManagerOpenError, ScanStartError

_log = logging.getLogger(__name__)

DEFAULT_ADAPTER = "default"
SYSFS_BLUETOOTH = Path("/sys/class/bluetooth")


class BleakAdapter(BleAdapter):
    """Adapter backed by a fresh BleakScanner per scan cycle."""

    def __init__(self, name: str = DEFAULT_ADAPTER):
        self._name = name
        self._scanner: Optional[BleakScanner] = None

    @property
    def name(self) -> str:
        return self._name

    def _scanner_kwargs(self) -> dict:
        if self._name == DEFAULT_ADAPTER:
            return {}
        return {"adapter": self._name}

    async def start_scan(self) -> None:
        try:
            scanner = BleakScanner(**self._scanner_kwargs())
            await scanner.start()
        except (BleakError, OSError) as e:
            self._scanner = None
            raise ScanStartError(f"scan start failed on {self._name}: {e}") from e
        self._scanner = scanner

    async def stop_scan(self) -> None:
        scanner, self._scanner = self._scanner, None
        if scanner is None:
            return
        try:
            await scanner.stop()
        except (BleakError, OSError):
            _log.warning("BLEAK_STOP_FAILED adapter=%s", self._name, exc_info=True)

    async def events(self) -> AsyncIterator[AdvertisementEvent]:
        scanner = self._scanner
        if scanner is None:
            return
        async for device, adv in scanner.advertisement_data():
            yield AdvertisementEvent(
                device_id=str(device.address),
                address=str(device.address),
                rssi=adv.rssi,
                manufacturer_data=dict(adv.manufacturer_data),
            )


class BleakManager(BleManager):
    """
    Host BLE stack via bleak.

    On Linux adapters are enumerated from sysfs (hci0, hci1, ...); elsewhere
    the platform default adapter is the only one.
    """

    def __init__(self, *, adapter: Optional[str] = None, sysfs_root: Path = SYSFS_BLUETOOTH):
        self._adapter_hint = adapter
        self._sysfs_root = Path(sysfs_root)

    @classmethod
    async def open(
        cls,
        *,
        adapter: Optional[str] = None,
        sysfs_root: Path = SYSFS_BLUETOOTH,
    ) -> "BleakManager":
        # Constructing a scanner resolves the platform backend (CoreBluetooth,
        # WinRT). BlueZ defers D-Bus until start(), so on Linux the kernel's
        # adapter registry is checked as well.
        try:
            BleakScanner(**({"adapter": adapter} if adapter else {}))
        except (BleakError, OSError) as e:
            raise ManagerOpenError(str(e)) from e

        manager = cls(adapter=adapter, sysfs_root=sysfs_root)
        if manager._uses_sysfs() and not manager.adapter_names():
            raise ManagerOpenError(f"no Bluetooth adapter registered under {manager._sysfs_root}")
        return manager

    def _uses_sysfs(self) -> bool:
        return sys.platform.startswith("linux") and self._sysfs_root.is_dir()

    def adapter_names(self) -> List[str]:
        if self._uses_sysfs():
            names = sorted(p.name for p in self._sysfs_root.iterdir() if p.name.startswith("hci"))
            if self._adapter_hint:
                return [self._adapter_hint] if self._adapter_hint in names else []
            return names
        return [self._adapter_hint or DEFAULT_ADAPTER]

    async def adapters(self) -> List[BleAdapter]:
        return [BleakAdapter(name) for name in self.adapter_names()]


async def open_bleak_manager(adapter: Optional[str] = None) -> BleManager:
    return await BleakManager.open(adapter=adapter)
