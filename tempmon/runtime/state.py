# tempmon/runtime/state.py
from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

# Status texts pushed to the consumer
STATUS_ADAPTER_NOT_FOUND = "Adapter not found"
STATUS_ADAPTER_ERROR = "Adapter error"
STATUS_SCANNING = "Scanning..."
STATUS_SCANNING_CONTINUOUS = "Scanning (continuous mode)..."
STATUS_WAITING = "Waiting..."
STATUS_SCANNER_ERROR = "Scanner error"


class ScanPhase(str, Enum):
    ACQUIRE_ADAPTER = "acquire_adapter"
    SCANNING = "scanning"
    PAUSING = "pausing"


@dataclass
class ScanCycleState:
    """
    Per-cycle scratch state; created at AcquireAdapter and dropped at cycle end.
    """
    cycle: int
    phase: ScanPhase = ScanPhase.ACQUIRE_ADAPTER
    adapter_name: Optional[str] = None
    scanning: bool = False
    emitted: int = 0
    started_monotonic: float = field(default_factory=time.monotonic)

    @property
    def elapsed_s(self) -> float:
        return time.monotonic() - self.started_monotonic
