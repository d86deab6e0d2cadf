# tempmon/ble/base.py
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import AsyncIterator, List, Mapping, Optional


@dataclass(frozen=True)
class AdvertisementEvent:
    """One discovery/update notification for a peripheral."""
    device_id: str
    address: str
    rssi: Optional[int] = None
    manufacturer_data: Mapping[int, bytes] = field(default_factory=dict)


class BleAdapter(ABC):
    """
    One BLE radio, valid for a single scan cycle.

    Contract:
      - start_scan() begins an unfiltered passive discovery
      - events() yields advertisement events until the caller stops iterating
      - stop_scan() is safe to call even if start_scan() failed
    """

    @property
    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    async def start_scan(self) -> None: ...

    @abstractmethod
    async def stop_scan(self) -> None: ...

    @abstractmethod
    def events(self) -> AsyncIterator[AdvertisementEvent]: ...


class BleManager(ABC):
    """Entry point to the host BLE stack; enumerates adapters on demand."""

    @abstractmethod
    async def adapters(self) -> List[BleAdapter]: ...
