from __future__ import annotations

import threading
import time

import pytest

from tempmon.core.channel import MessageChannel
from tempmon.core.errors import ChannelClosedError
from tempmon.core.messages import PersistenceResult, StatusUpdate


def test_fifo_order():
    ch = MessageChannel("t")
    ch.send(StatusUpdate("a"))
    ch.send(PersistenceResult(True))
    ch.send(StatusUpdate("b"))

    assert len(ch) == 3
    assert ch.recv(timeout=0.1) == StatusUpdate("a")
    assert ch.try_recv() == PersistenceResult(True)
    assert ch.drain() == [StatusUpdate("b")]
    assert ch.try_recv() is None


def test_recv_timeout_returns_none():
    ch = MessageChannel()
    t0 = time.monotonic()
    assert ch.recv(timeout=0.05) is None
    assert time.monotonic() - t0 >= 0.04


def test_send_after_close_raises():
    ch = MessageChannel("closed")
    ch.close()
    assert ch.closed
    with pytest.raises(ChannelClosedError):
        ch.send(StatusUpdate("x"))


def test_queued_messages_survive_close():
    ch = MessageChannel()
    ch.send(StatusUpdate("last"))
    ch.close()

    assert ch.recv(timeout=0.1) == StatusUpdate("last")
    with pytest.raises(ChannelClosedError):
        ch.recv(timeout=0.1)
    with pytest.raises(ChannelClosedError):
        ch.try_recv()


def test_blocking_recv_wakes_on_close():
    ch = MessageChannel()
    errors = []

    def consumer():
        try:
            ch.recv()
        except ChannelClosedError as e:
            errors.append(e)

    t = threading.Thread(target=consumer)
    t.start()
    time.sleep(0.05)
    ch.close()
    t.join(timeout=1.0)

    assert not t.is_alive()
    assert len(errors) == 1


def test_cross_thread_delivery():
    ch = MessageChannel()

    def producer():
        for i in range(50):
            ch.send(StatusUpdate(str(i)))

    t = threading.Thread(target=producer)
    t.start()
    got = []
    deadline = time.monotonic() + 2.0
    while len(got) < 50 and time.monotonic() < deadline:
        msg = ch.recv(timeout=0.05)
        if msg is not None:
            got.append(msg.text)
    t.join(timeout=1.0)

    assert got == [str(i) for i in range(50)]
