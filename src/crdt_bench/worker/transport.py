"""ZMQ PUSH/PULL channels between the host and the worker process."""

import os
import tempfile
import uuid
from collections.abc import AsyncIterator
from typing import Self

import zmq
import zmq.asyncio as azmq
from msgspec import Struct
from zmq.constants import SocketType as ZmqSocketType


class ChannelConfig(Struct):
    """Configuration for one direction of the worker channel.

    Args:
        path: ZMQ ``ipc://`` endpoint.
        backlog: High-water mark of queued messages.
        linger_ms: Time pending messages are kept on close.
    """

    path: str
    backlog: int = 1024
    linger_ms: int = 1000

    def __post_init__(self) -> None:
        if not self.path.startswith("ipc://"):
            raise ValueError(f"Invalid path; expected 'ipc://' but got {self.path}")
        if self.backlog <= 0:
            raise ValueError(f"Invalid backlog; expected >0 but got {self.backlog}")
        if self.linger_ms < 0:
            raise ValueError(f"Invalid linger_ms; expected >=0 but got {self.linger_ms}")

    @classmethod
    def for_name(cls, name: str) -> Self:
        """Unique endpoint in the temp directory for this process."""
        token = uuid.uuid4().hex[:8]
        path = os.path.join(tempfile.gettempdir(), f"crdt_bench_{os.getpid()}_{name}_{token}")
        return cls(path=f"ipc://{path}")


class MessageSender:
    """PUSH side of a channel.

    Args:
        config: Channel configuration.
        bind: Bind the endpoint when True, connect to it otherwise.
    """

    def __init__(self, config: ChannelConfig, bind: bool) -> None:
        self._path = config.path
        self._context = zmq.Context()
        self._socket = self._context.socket(ZmqSocketType.PUSH)
        self._socket.setsockopt(zmq.SNDHWM, config.backlog)
        self._socket.setsockopt(zmq.LINGER, config.linger_ms)
        if bind:
            self._socket.bind(self._path)
        else:
            self._socket.connect(self._path)
        self._is_started = True

    @property
    def path(self) -> str:
        return self._path

    def send(self, payload: bytes) -> None:
        """Queue one message."""
        self.__enforce_started()
        self._socket.send(payload)

    def stop(self) -> None:
        """Close the socket and terminate the context."""
        if self._socket is not None:
            self._socket.close()
            self._socket = None
        self._context.term()
        self._is_started = False

    def __enforce_started(self) -> None:
        if not self._is_started:
            raise RuntimeError("Sender not started")


class MessageReceiver:
    """PULL side of a channel.

    Args:
        config: Channel configuration.
        bind: Bind the endpoint when True, connect to it otherwise.
    """

    def __init__(self, config: ChannelConfig, bind: bool) -> None:
        self._path = config.path
        self._context = zmq.Context()
        self._socket = self._context.socket(ZmqSocketType.PULL)
        self._socket.setsockopt(zmq.RCVHWM, config.backlog)
        self._socket.setsockopt(zmq.LINGER, config.linger_ms)
        self._asocket = azmq.Socket.shadow(self._socket)
        if bind:
            self._socket.bind(self._path)
        else:
            self._socket.connect(self._path)
        self._is_started = True

    @property
    def path(self) -> str:
        return self._path

    def recv(self) -> bytes:
        """Receive one message, blocking until one is available."""
        self.__enforce_started()
        return self._socket.recv()

    def drain(self) -> list[bytes]:
        """Receive every queued message without blocking."""
        self.__enforce_started()
        messages: list[bytes] = []
        while True:
            try:
                messages.append(self._socket.recv(flags=zmq.DONTWAIT))
            except zmq.Again:
                break
        return messages

    async def arecv(self) -> bytes:
        """Mirror of recv for use inside an event loop."""
        self.__enforce_started()
        return await self._asocket.recv()

    def stop(self) -> None:
        """Close the socket and terminate the context."""
        self._asocket = None
        if self._socket is not None:
            self._socket.close()
            self._socket = None
        self._context.term()
        self._is_started = False

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self

    async def __anext__(self) -> bytes:
        return await self.arecv()

    def __enforce_started(self) -> None:
        if not self._is_started:
            raise RuntimeError("Receiver not started")
