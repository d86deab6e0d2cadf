# tempmon/core/channel.py
from __future__ import annotations

import threading
import time
from queue import Empty, Queue
from typing import List, Optional

from tempmon.core.errors import ChannelClosedError
from tempmon.core.messages import Message

_POLL_S = 0.1


class MessageChannel:
    """
    Unbounded FIFO between two execution contexts.

    - send() never blocks; it raises ChannelClosedError once the channel is closed
    - recv() blocks up to `timeout` and returns None on timeout
    - messages already queued stay receivable after close()
    """

    def __init__(self, name: str = "channel"):
        self.name = name
        self._queue: Queue[Message] = Queue()
        self._closed = threading.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def close(self) -> None:
        self._closed.set()

    def send(self, msg: Message) -> None:
        if self._closed.is_set():
            raise ChannelClosedError(f"{self.name} is closed")
        self._queue.put_nowait(msg)

    def recv(self, timeout: Optional[float] = None) -> Optional[Message]:
        """
        Wait for the next message.

        Raises ChannelClosedError when the channel is closed and drained.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            if deadline is None:
                wait = _POLL_S
            else:
                wait = min(_POLL_S, deadline - time.monotonic())
                if wait <= 0:
                    return self.try_recv()
            try:
                return self._queue.get(timeout=wait)
            except Empty:
                if self._closed.is_set() and self._queue.empty():
                    raise ChannelClosedError(f"{self.name} is closed") from None

    def try_recv(self) -> Optional[Message]:
        try:
            return self._queue.get_nowait()
        except Empty:
            if self._closed.is_set():
                raise ChannelClosedError(f"{self.name} is closed") from None
            return None

    def drain(self) -> List[Message]:
        """Non-blocking: everything currently queued, in order."""
        out: List[Message] = []
        while True:
            try:
                out.append(self._queue.get_nowait())
            except Empty:
                return out

    def __len__(self) -> int:
        return self._queue.qsize()
