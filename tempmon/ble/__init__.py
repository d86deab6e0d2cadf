from .base import AdvertisementEvent, BleAdapter, BleManager
from .errors import BleError, ManagerOpenError, ScanStartError

__all__ = ["AdvertisementEvent",
           "BleAdapter",
           "BleManager",
           "BleError",
           "ManagerOpenError",
           "ScanStartError"]
