# tempmon/runtime/scan_loop.py
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from tempmon.app.config import MonitorConfig
from tempmon.app.config_cell import SharedConfigCell
from tempmon.ble.base import BleAdapter, BleManager
from tempmon.ble.errors import BleError
from tempmon.core.channel import MessageChannel
from tempmon.core.errors import ChannelClosedError, DecodeError
from tempmon.core.messages import NewData, StatusUpdate
from tempmon.model.decoder import reading_from_advertisement
from tempmon.runtime.state import (
    STATUS_ADAPTER_ERROR,
    STATUS_ADAPTER_NOT_FOUND,
    STATUS_SCANNER_ERROR,
    STATUS_SCANNING,
    STATUS_SCANNING_CONTINUOUS,
    STATUS_WAITING,
    ScanCycleState,
    ScanPhase,
)

ManagerFactory = Callable[[MonitorConfig], Awaitable[BleManager]]

CONTINUOUS_PAUSE_S = 1.0


class ScanLoop:
    """
    Endless acquire-adapter / scan / pause cycle feeding decoded readings
    into `channel`.

    - configuration is read from the cell once per cycle
    - the adapter is re-enumerated every cycle (recovers from replugs)
    - only a closed channel or request_stop() ends run()
    """

    def __init__(
        self,
        *,
        config_cell: SharedConfigCell,
        channel: MessageChannel,
        open_manager: ManagerFactory,
        continuous_pause_s: float = CONTINUOUS_PAUSE_S,
        logger: Optional[logging.Logger] = None,
    ):
        self._config_cell = config_cell
        self._channel = channel
        self._open_manager = open_manager
        self._continuous_pause_s = float(continuous_pause_s)
        self._log = logger or logging.getLogger(__name__)

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._stop_event: Optional[asyncio.Event] = None
        self._stop_requested = False
        self._cycles = 0

    @property
    def cycles(self) -> int:
        return self._cycles

    def request_stop(self) -> None:
        """Thread-safe; takes effect at the next suspension point."""
        self._stop_requested = True
        loop, ev = self._loop, self._stop_event
        if loop is None or ev is None:
            return
        try:
            loop.call_soon_threadsafe(ev.set)
        except RuntimeError:
            # loop already closed
            pass

    @property
    def _stopping(self) -> bool:
        return self._stop_event is not None and self._stop_event.is_set()

    # ---------------- main loop ----------------
    async def run(self) -> None:
        self._loop = asyncio.get_running_loop()
        self._stop_event = asyncio.Event()
        if self._stop_requested:
            self._stop_event.set()

        self._log.info("SCAN_LOOP_START")
        try:
            while not self._stopping:
                self._cycles += 1
                cfg = self._config_cell.read()
                state = ScanCycleState(cycle=self._cycles)
                self._log.debug(
                    "SCAN_CYCLE_START cycle=%d target=%s continuous=%s",
                    state.cycle, cfg.target_mac, cfg.continuous_mode,
                )
                try:
                    await self._run_cycle(cfg, state)
                except ChannelClosedError:
                    self._log.error("SCAN_CHANNEL_CLOSED stopping scanner")
                    return
                except Exception as e:
                    self._log.exception("SCAN_CYCLE_FAILED cycle=%d phase=%s", state.cycle, state.phase.value)
                    try:
                        self._emit_status(f"{STATUS_SCANNER_ERROR}: {e}")
                        await self._pause(cfg, state)
                    except ChannelClosedError:
                        self._log.error("SCAN_CHANNEL_CLOSED stopping scanner")
                        return
        finally:
            self._log.info("SCAN_LOOP_STOP cycles=%d", self._cycles)

    async def _run_cycle(self, cfg: MonitorConfig, state: ScanCycleState) -> None:
        state.phase = ScanPhase.ACQUIRE_ADAPTER
        try:
            manager = await self._open_manager(cfg)
        except BleError as e:
            self._log.warning("BLE_MANAGER_OPEN_FAILED error=%s", e)
            manager = None
        except Exception:
            self._log.exception("BLE_MANAGER_OPEN_ERROR")
            manager = None

        if manager is None:
            self._emit_status(STATUS_ADAPTER_NOT_FOUND)
            await self._sleep(self._pause_for(cfg))
            return

        adapters = await manager.adapters()
        if adapters:
            await self._scan(cfg, state, adapters[0])
        else:
            self._log.info("BLE_NO_ADAPTER")

        await self._pause(cfg, state)

    # ---------------- phases ----------------
    async def _scan(self, cfg: MonitorConfig, state: ScanCycleState, adapter: BleAdapter) -> None:
        state.phase = ScanPhase.SCANNING
        state.adapter_name = adapter.name

        try:
            await adapter.start_scan()
        except BleError as e:
            self._log.warning("SCAN_START_FAILED adapter=%s error=%s", adapter.name, e)
            self._emit_status(STATUS_ADAPTER_ERROR)
            return

        state.scanning = True
        window_s = cfg.scan_window_s
        self._log.info("SCAN_START adapter=%s window_s=%.1f continuous=%s", adapter.name, window_s, cfg.continuous_mode)
        try:
            self._emit_status(STATUS_SCANNING_CONTINUOUS if cfg.continuous_mode else STATUS_SCANNING)
            await self._scan_until_deadline(cfg, state, adapter, window_s)
        finally:
            state.scanning = False
            try:
                await adapter.stop_scan()
            except Exception:
                self._log.exception("SCAN_STOP_FAILED adapter=%s", adapter.name)
            self._log.info("SCAN_END adapter=%s emitted=%d elapsed_s=%.1f", adapter.name, state.emitted, state.elapsed_s)

    async def _scan_until_deadline(
        self,
        cfg: MonitorConfig,
        state: ScanCycleState,
        adapter: BleAdapter,
        window_s: float,
    ) -> None:
        assert self._stop_event is not None
        consume = asyncio.ensure_future(self._consume_events(cfg, state, adapter))
        stopper = asyncio.ensure_future(self._stop_event.wait())
        try:
            await asyncio.wait({consume, stopper}, timeout=window_s, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for t in (consume, stopper):
                if not t.done():
                    t.cancel()
            await asyncio.gather(consume, stopper, return_exceptions=True)

        if consume.done() and not consume.cancelled():
            exc = consume.exception()
            if exc is not None:
                raise exc

    async def _consume_events(self, cfg: MonitorConfig, state: ScanCycleState, adapter: BleAdapter) -> None:
        events = adapter.events()
        try:
            async for event in events:
                if not cfg.matches(event.address):
                    continue

                try:
                    reading = reading_from_advertisement(
                        event.manufacturer_data,
                        device_id=event.device_id,
                        rssi=event.rssi,
                    )
                except DecodeError as e:
                    self._log.debug("DECODE_SKIPPED address=%s reason=%s", event.address, e.message)
                    continue

                self._channel.send(NewData(reading))
                state.emitted += 1
                self._log.info(
                    "READING_EMITTED address=%s temperature=%.1f humidity=%d rssi=%s",
                    event.address, reading.temperature, reading.humidity, event.rssi,
                )
                if not cfg.continuous_mode:
                    return
        finally:
            aclose = getattr(events, "aclose", None)
            if aclose is not None:
                await aclose()

    async def _pause(self, cfg: MonitorConfig, state: ScanCycleState) -> None:
        state.phase = ScanPhase.PAUSING
        self._emit_status(STATUS_WAITING)
        pause_s = self._pause_for(cfg)
        self._log.debug("SCAN_PAUSE seconds=%.1f", pause_s)
        await self._sleep(pause_s)

    # ---------------- helpers ----------------
    def _pause_for(self, cfg: MonitorConfig) -> float:
        return self._continuous_pause_s if cfg.continuous_mode else cfg.scan_pause_secs

    def _emit_status(self, text: str) -> None:
        self._channel.send(StatusUpdate(text))

    async def _sleep(self, seconds: float) -> None:
        assert self._stop_event is not None
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=max(0.0, seconds))
        except asyncio.TimeoutError:
            pass
