"""Tests for the ZMQ worker channels."""

import asyncio

import pytest

from crdt_bench.worker import ChannelConfig, MessageReceiver, MessageSender


@pytest.fixture
def channel():
    config = ChannelConfig.for_name("test")
    receiver = MessageReceiver(config, bind=True)
    sender = MessageSender(config, bind=False)
    yield sender, receiver
    sender.stop()
    receiver.stop()


class TestChannelConfig:
    """Validate ChannelConfig inputs."""

    def test_for_name_is_unique(self):
        a = ChannelConfig.for_name("control")
        b = ChannelConfig.for_name("control")
        assert a.path != b.path
        assert a.path.startswith("ipc://")
        assert "control" in a.path

    @pytest.mark.parametrize("path", ["tcp://127.0.0.1:5555", "inproc://x", ""])
    def test_path_must_be_ipc(self, path):
        with pytest.raises(ValueError, match="path"):
            ChannelConfig(path=path)

    @pytest.mark.parametrize("backlog", [0, -1])
    def test_backlog_must_be_positive(self, backlog):
        with pytest.raises(ValueError, match="backlog"):
            ChannelConfig(path="ipc:///tmp/crdt_bench_test", backlog=backlog)

    def test_linger_must_be_non_negative(self):
        with pytest.raises(ValueError, match="linger_ms"):
            ChannelConfig(path="ipc:///tmp/crdt_bench_test", linger_ms=-1)


class TestMessaging:
    def test_send_recv(self, channel):
        sender, receiver = channel
        sender.send(b"hello")
        assert receiver.recv() == b"hello"

    def test_drain(self, channel, wait_for):
        sender, receiver = channel
        for i in range(3):
            sender.send(str(i).encode())
        drained: list[bytes] = []
        assert wait_for(lambda: drained.extend(receiver.drain()) or len(drained) == 3)
        assert drained == [b"0", b"1", b"2"]

    def test_drain_empty(self, channel):
        _, receiver = channel
        assert receiver.drain() == []

    @pytest.mark.asyncio
    async def test_async_recv(self, channel):
        sender, receiver = channel
        sender.send(b"async")
        assert await asyncio.wait_for(receiver.arecv(), timeout=1.0) == b"async"

    @pytest.mark.asyncio
    async def test_async_iteration(self, channel):
        sender, receiver = channel
        sender.send(b"a")
        sender.send(b"b")
        received = []
        async for message in receiver:
            received.append(message)
            if len(received) == 2:
                break
        assert received == [b"a", b"b"]

    def test_stopped_sender_raises(self):
        config = ChannelConfig.for_name("stopped")
        sender = MessageSender(config, bind=True)
        sender.stop()
        with pytest.raises(RuntimeError, match="not started"):
            sender.send(b"x")
