"""Worker process host and its client.

The client binds both channels, then spawns the worker which connects to
them: ``control`` carries inbound requests to the worker and ``events``
carries outbound messages back.
"""

from __future__ import annotations

import asyncio
import multiprocessing
from collections.abc import AsyncIterator, Callable
from typing import Self

from crdt_bench.errors import BenchError, TaskExecutionError
from crdt_bench.logging import FileLogHandler, LoggerConfig, LogLevel, configure, get_logger
from crdt_bench.results import BenchmarkResult, ResultMerger
from crdt_bench.worker.context import ExecutionContext
from crdt_bench.worker.protocol import (
    START,
    CompleteMessage,
    ErrorMessage,
    InboundMessage,
    OutboundMessage,
    ProgressMessage,
    decode_outbound,
    encode,
)
from crdt_bench.worker.transport import ChannelConfig, MessageReceiver, MessageSender

_LIVENESS_POLL_S = 0.5

logger = get_logger("crdt_bench.worker")


def worker_main(
    control_path: str,
    events_path: str,
    redelivery_delay_s: float = 0.5,
    log_level: int = LogLevel.INFO,
    log_file: str | None = None,
) -> None:
    """Entry point of the spawned worker process.

    Handles inbound messages one at a time until the process is terminated.
    """
    handlers = [] if log_file is None else [FileLogHandler(log_file)]
    configure(LoggerConfig(base_level=LogLevel(log_level)), handlers)
    asyncio.run(_serve(control_path, events_path, redelivery_delay_s))


async def _serve(control_path: str, events_path: str, redelivery_delay_s: float) -> None:
    receiver = MessageReceiver(ChannelConfig(path=control_path), bind=False)
    sender = MessageSender(ChannelConfig(path=events_path), bind=False)
    context = ExecutionContext(
        emit=lambda message: sender.send(encode(message)),
        redelivery_delay_s=redelivery_delay_s,
    )
    logger.info("Worker ready")
    try:
        async for raw in receiver:
            await context.handle(raw)
    finally:
        sender.stop()
        receiver.stop()


class BenchmarkWorker:
    """Runs the benchmark suite in a spawned process.

    Args:
        redelivery_delay_s: Delay between the two completion messages.
        log_level: Log level of the worker process.
        log_file: Text file the worker also appends its log lines to.
    """

    def __init__(
        self,
        redelivery_delay_s: float = 0.5,
        log_level: LogLevel = LogLevel.INFO,
        log_file: str | None = None,
    ) -> None:
        self.redelivery_delay_s = redelivery_delay_s
        self.log_level = log_level
        self.log_file = log_file
        self._process: multiprocessing.process.BaseProcess | None = None
        self._control: MessageSender | None = None
        self._events: MessageReceiver | None = None

    @property
    def is_running(self) -> bool:
        return self._process is not None and self._process.is_alive()

    def start(self) -> Self:
        """Bind the channels and spawn the worker process."""
        if self._process is not None:
            raise RuntimeError("Worker already started")
        self._control = MessageSender(ChannelConfig.for_name("control"), bind=True)
        self._events = MessageReceiver(ChannelConfig.for_name("events"), bind=True)
        ctx = multiprocessing.get_context("spawn")
        self._process = ctx.Process(
            target=worker_main,
            args=(
                self._control.path,
                self._events.path,
                self.redelivery_delay_s,
                int(self.log_level),
                self.log_file,
            ),
            name="crdt-bench-worker",
            daemon=True,
        )
        self._process.start()
        logger.debug(f"Spawned worker pid={self._process.pid}")
        return self

    def post(self, message: InboundMessage | str) -> None:
        """Send an inbound message; the string ``"start"`` is sent as is."""
        if self._control is None:
            raise RuntimeError("Worker not started")
        if isinstance(message, str):
            self._control.send(message.encode())
        else:
            self._control.send(encode(message))

    async def next_event(self, timeout_s: float | None = None) -> OutboundMessage:
        """Wait for the next outbound message.

        Raises:
            TimeoutError: If nothing arrives within ``timeout_s``.
            BenchError: If the worker process exits while waiting.
        """
        if self._events is None:
            raise RuntimeError("Worker not started")
        loop = asyncio.get_running_loop()
        deadline = None if timeout_s is None else loop.time() + timeout_s
        while True:
            wait_s = _LIVENESS_POLL_S
            if deadline is not None:
                wait_s = min(wait_s, deadline - loop.time())
                if wait_s <= 0:
                    raise TimeoutError(f"No worker message within {timeout_s}s")
            try:
                raw = await asyncio.wait_for(self._events.arecv(), wait_s)
            except TimeoutError:
                if not self.is_running:
                    exitcode = self._process.exitcode if self._process is not None else None
                    raise BenchError(f"Worker exited with code {exitcode}") from None
                continue
            return decode_outbound(raw)

    async def events(self) -> AsyncIterator[OutboundMessage]:
        """Yield outbound messages as they arrive."""
        while True:
            yield await self.next_event()

    async def run(
        self,
        message: InboundMessage | str = START,
        on_message: Callable[[OutboundMessage], None] | None = None,
        timeout_s: float | None = None,
    ) -> list[BenchmarkResult]:
        """Post a run request and consume messages until it finishes.

        Results of progress and completion messages are merged by key, so the
        redelivered completion message is absorbed.

        Args:
            message: Run request.
            on_message: Called with every outbound message of this run.
            timeout_s: Maximum wait for each message.

        Raises:
            TaskExecutionError: If the worker reports an error.
        """
        if self._events is None:
            raise RuntimeError("Worker not started")
        stale = self._events.drain()
        if stale:
            logger.debug(f"Dropped {len(stale)} stale worker messages")

        merger = ResultMerger()
        self.post(message)
        while True:
            event = await self.next_event(timeout_s)
            if on_message is not None:
                on_message(event)
            match event:
                case ProgressMessage(results=results):
                    merger.merge(results)
                case CompleteMessage(results=results):
                    merger.merge(results)
                    await self._absorb_redelivery(merger, on_message)
                    return merger.results
                case ErrorMessage(error=error):
                    raise TaskExecutionError(error)

    async def _absorb_redelivery(
        self,
        merger: ResultMerger,
        on_message: Callable[[OutboundMessage], None] | None,
    ) -> None:
        try:
            event = await self.next_event(self.redelivery_delay_s + 1.0)
        except TimeoutError:
            return
        if on_message is not None:
            on_message(event)
        if isinstance(event, CompleteMessage):
            merger.merge(event.results)

    def stop(self) -> None:
        """Terminate the worker process and close the channels."""
        if self._process is not None:
            if self._process.is_alive():
                self._process.terminate()
            self._process.join(timeout=5.0)
            self._process = None
        if self._control is not None:
            self._control.stop()
            self._control = None
        if self._events is not None:
            self._events.stop()
            self._events = None

    def __enter__(self) -> Self:
        return self.start()

    def __exit__(self, *exc_info: object) -> None:
        self.stop()
