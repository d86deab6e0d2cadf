# tempmon/runtime/debounce_worker.py
from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

from tempmon.app.config_cell import SharedConfigCell
from tempmon.core.channel import MessageChannel
from tempmon.core.errors import ChannelClosedError, PersistenceError
from tempmon.core.messages import Message, NewData, PersistenceResult, StatusUpdate
from tempmon.model.reading import Reading
from tempmon.recording.daily_log import DailyLog

Clock = Callable[[], float]
_RECV_TIMEOUT_S = 0.1


class DebounceWorker(threading.Thread):
    """
    Sequential stage between the scanner and the consumer.

    A reading is accepted when at least `duplicate_threshold_secs` passed
    since the previously *accepted* reading (clock sampled at processing
    time). Accepted readings are written to the daily log, followed by a
    PersistenceResult and the NewData itself. Status messages pass through.
    """

    def __init__(
        self,
        *,
        inbound: MessageChannel,
        outbound: MessageChannel,
        config_cell: SharedConfigCell,
        daily_log: DailyLog,
        clock: Clock = time.monotonic,
        logger: Optional[logging.Logger] = None,
    ):
        super().__init__(name="debounce-worker", daemon=True)
        self._inbound = inbound
        self._outbound = outbound
        self._config_cell = config_cell
        self._daily_log = daily_log
        self._clock = clock
        self._log = logger or logging.getLogger(__name__)

        self._stop_event = threading.Event()
        self._last_accepted: Optional[float] = None

        self.accepted = 0
        self.suppressed = 0

    @property
    def last_accepted(self) -> Optional[float]:
        return self._last_accepted

    def stop(self) -> None:
        self._stop_event.set()

    def run(self) -> None:
        self._log.info("DEBOUNCE_WORKER_START")
        try:
            while not self._stop_event.is_set():
                try:
                    msg = self._inbound.recv(timeout=_RECV_TIMEOUT_S)
                except ChannelClosedError:
                    self._log.info("DEBOUNCE_INBOUND_CLOSED")
                    break
                if msg is None:
                    continue
                try:
                    self.handle(msg)
                except ChannelClosedError:
                    self._log.error("DEBOUNCE_OUTBOUND_CLOSED stopping worker")
                    break
                except Exception:
                    self._log.exception("DEBOUNCE_HANDLE_FAILED msg=%r", msg)
        finally:
            self._log.info(
                "DEBOUNCE_WORKER_STOP accepted=%d suppressed=%d",
                self.accepted, self.suppressed,
            )

    # ---------------- processing ----------------
    def handle(self, msg: Message) -> bool:
        """
        Process one inbound message; returns True if anything was forwarded.

        Raises ChannelClosedError when the outbound side is gone.
        """
        if isinstance(msg, NewData):
            return self._on_reading(msg.reading)
        if isinstance(msg, StatusUpdate):
            self._outbound.send(msg)
            return True
        self._log.debug("DEBOUNCE_IGNORED kind=%s", type(msg).__name__)
        return False

    def _on_reading(self, reading: Reading) -> bool:
        threshold = self._config_cell.read().duplicate_threshold_secs
        now = self._clock()

        if self._last_accepted is not None and (now - self._last_accepted) < threshold:
            self.suppressed += 1
            self._log.debug(
                "DEBOUNCE_SUPPRESSED elapsed_s=%.3f threshold_s=%.1f",
                now - self._last_accepted, threshold,
            )
            return False

        self._log.info(
            "DEBOUNCE_ACCEPTED temperature=%.1f humidity=%d",
            reading.temperature, reading.humidity,
        )
        ok = self._persist(reading)
        self._last_accepted = now
        self.accepted += 1

        self._outbound.send(PersistenceResult(ok))
        self._outbound.send(NewData(reading))
        return True

    def _persist(self, reading: Reading) -> bool:
        try:
            path = self._daily_log.append(reading)
        except PersistenceError as e:
            self._log.error("DAILY_LOG_WRITE_FAILED hint=%s details=%s", e.hint, e.details)
            return False
        except Exception:
            self._log.exception("DAILY_LOG_WRITE_ERROR")
            return False
        self._log.debug("DAILY_LOG_APPENDED path=%s", path)
        return True
