# tempmon/runtime/scanner_thread.py
from __future__ import annotations

import asyncio
import logging
import threading
from typing import Optional

from tempmon.runtime.scan_loop import ScanLoop


class ScannerThread(threading.Thread):
    """Thread that owns an asyncio event loop running one ScanLoop."""

    def __init__(self, scan_loop: ScanLoop, *, logger: Optional[logging.Logger] = None):
        super().__init__(name="ble-scanner", daemon=True)
        self.scan_loop = scan_loop
        self._log = logger or logging.getLogger(__name__)

    def run(self) -> None:
        try:
            asyncio.run(self.scan_loop.run())
        except Exception:
            self._log.exception("SCANNER_THREAD_EXCEPTION")

    def stop(self) -> None:
        self.scan_loop.request_stop()
