# tempmon/ble/errors.py
from __future__ import annotations

class BleError(Exception):
    """Base class for BLE backend failures."""

class ManagerOpenError(BleError):
    pass

class ScanStartError(BleError):
    pass
