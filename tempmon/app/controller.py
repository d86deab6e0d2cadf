# tempmon/app/controller.py
from __future__ import annotations

import logging
import time
from typing import List, Optional

from tempmon.app.config import MonitorConfig
from tempmon.app.config_cell import SharedConfigCell
from tempmon.ble.base import BleManager
from tempmon.core.channel import MessageChannel
from tempmon.core.messages import Message
from tempmon.recording.daily_log import DailyLog
from tempmon.runtime.debounce_worker import Clock, DebounceWorker
from tempmon.runtime.scan_loop import ManagerFactory, ScanLoop
from tempmon.runtime.scanner_thread import ScannerThread


async def _open_default_manager(cfg: MonitorConfig) -> BleManager:
    from tempmon.ble.bleak_backend import open_bleak_manager
    return await open_bleak_manager(cfg.adapter)


class MonitorController:
    """
    App-level owner of the acquisition pipeline:

        ScanLoop (thread + asyncio) -> raw channel -> DebounceWorker -> outbound

    The consumer polls `outbound` and writes configuration through
    `config_cell`; nothing else is shared.
    """

    def __init__(
        self,
        config_cell: SharedConfigCell,
        *,
        open_manager: Optional[ManagerFactory] = None,
        daily_log: Optional[DailyLog] = None,
        clock: Clock = time.monotonic,
        logger: Optional[logging.Logger] = None,
    ):
        self._cell = config_cell
        self._open_manager = open_manager or _open_default_manager
        self._daily_log = daily_log
        self._clock = clock
        self._log = logger or logging.getLogger(__name__)

        self._raw: Optional[MessageChannel] = None
        self._outbound: Optional[MessageChannel] = None
        self._worker: Optional[DebounceWorker] = None
        self._scanner: Optional[ScannerThread] = None

    @property
    def config_cell(self) -> SharedConfigCell:
        return self._cell

    @property
    def outbound(self) -> MessageChannel:
        if self._outbound is None:
            raise RuntimeError("MonitorController not started (outbound is None)")
        return self._outbound

    @property
    def is_running(self) -> bool:
        return self._scanner is not None and self._scanner.is_alive()

    def start(self) -> None:
        if self._scanner is not None:
            return

        cfg = self._cell.read()
        daily_log = self._daily_log or DailyLog(cfg.log_dir)
        self._log.info(
            "MONITOR_START target=%s continuous=%s log_dir=%s",
            cfg.target_mac, cfg.continuous_mode, daily_log.directory,
        )

        self._raw = MessageChannel("scanner->debounce")
        self._outbound = MessageChannel("debounce->consumer")

        self._worker = DebounceWorker(
            inbound=self._raw,
            outbound=self._outbound,
            config_cell=self._cell,
            daily_log=daily_log,
            clock=self._clock,
            logger=self._log,
        )
        loop = ScanLoop(
            config_cell=self._cell,
            channel=self._raw,
            open_manager=self._open_manager,
            logger=self._log,
        )
        self._scanner = ScannerThread(loop, logger=self._log)

        self._worker.start()
        self._scanner.start()

    def stop(self, timeout: float = 5.0) -> None:
        self._log.info("MONITOR_STOP")
        scanner, self._scanner = self._scanner, None
        worker, self._worker = self._worker, None

        if scanner is not None:
            scanner.stop()
            scanner.join(timeout=timeout)
            if scanner.is_alive():
                self._log.warning("SCANNER_THREAD_STILL_ALIVE")

        # closing the raw channel lets the worker drain what is queued, then exit
        if self._raw is not None:
            self._raw.close()
        if worker is not None:
            worker.join(timeout=timeout)
            if worker.is_alive():
                worker.stop()
                self._log.warning("DEBOUNCE_WORKER_STILL_ALIVE")

        if self._outbound is not None:
            self._outbound.close()

    def poll(self) -> List[Message]:
        """Non-blocking: all messages currently waiting for the consumer."""
        return self.outbound.drain()

    def __enter__(self) -> "MonitorController":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
