"""Worker-side execution context.

Inbound messages drive a small state machine::

    IDLE --start/runSingle--> RUNNING --done--> COMPLETED
                                      --raise-> FAILED

A run request received while RUNNING is ignored. COMPLETED and FAILED accept
a new request. The completion message is emitted twice, ``redelivery_delay_s``
apart, so a consumer that missed the first copy still receives the final
results; consumers merge by key, which makes the duplicate harmless.
"""

from __future__ import annotations

import asyncio
import inspect
import traceback
from collections.abc import Awaitable, Callable
from enum import StrEnum
from typing import Any

from crdt_bench.harness import HarnessConfig
from crdt_bench.logging import get_logger
from crdt_bench.results import BenchmarkResult
from crdt_bench.suite import SuiteConfig, SuiteOrchestrator, TaskRegistry, build_default_registry
from crdt_bench.worker.protocol import (
    CompleteMessage,
    ErrorMessage,
    InboundMessage,
    OutboundMessage,
    ProgressMessage,
    RunSingleMessage,
    StatusMessage,
    decode_inbound,
)

Emit = Callable[[OutboundMessage], "None | Awaitable[None]"]

logger = get_logger("crdt_bench.worker")


class ContextState(StrEnum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class ExecutionContext:
    """Runs the suite on request and reports through ``emit``.

    Args:
        emit: Sink for outbound messages; may be sync or async.
        registry: Tasks to run; defaults to the full catalogue.
        config: Workload configuration that request overrides apply to.
        harness_config: Measurement budget that request overrides apply to.
        redelivery_delay_s: Delay before the completion message is re-sent.
    """

    def __init__(
        self,
        emit: Emit,
        registry: TaskRegistry | None = None,
        config: SuiteConfig | None = None,
        harness_config: HarnessConfig | None = None,
        redelivery_delay_s: float = 0.5,
    ) -> None:
        if redelivery_delay_s < 0:
            raise ValueError(
                f"Invalid redelivery_delay_s; expected >=0 but got {redelivery_delay_s}"
            )
        self._emit = emit
        self._registry = registry if registry is not None else build_default_registry()
        self._config = config if config is not None else SuiteConfig.default()
        self._harness_config = (
            harness_config if harness_config is not None else HarnessConfig.default()
        )
        self.redelivery_delay_s = redelivery_delay_s
        self._state = ContextState.IDLE

    @property
    def state(self) -> ContextState:
        return self._state

    async def handle(self, raw: Any) -> None:
        """Handle one inbound message; unknown messages are ignored."""
        message = decode_inbound(raw)
        if message is None:
            return
        if self._state is ContextState.RUNNING:
            logger.warning(f"Ignoring {type(message).__name__}; a run is in progress")
            return
        await self.run(message)

    async def run(self, message: InboundMessage) -> None:
        """Execute a run request and emit status, progress and completion."""
        self._state = ContextState.RUNNING
        try:
            await self._send(StatusMessage(message="Starting benchmarks"))
            results, summary = await self._execute(message)
        except Exception as exc:
            self._state = ContextState.FAILED
            logger.error(f"Benchmark run failed: {exc!r}")
            await self._send(
                ErrorMessage(
                    error=str(exc) or type(exc).__name__,
                    stack="".join(traceback.format_exception(exc)),
                )
            )
            return

        self._state = ContextState.COMPLETED
        complete = CompleteMessage(results=results, message=summary)
        await self._send(complete)
        await asyncio.sleep(self.redelivery_delay_s)
        await self._send(complete)

    async def _execute(self, message: InboundMessage) -> tuple[list[BenchmarkResult], str]:
        orchestrator = SuiteOrchestrator(
            self._registry,
            message.suite_config(self._config),
            message.harness_config(self._harness_config),
        )

        if isinstance(message, RunSingleMessage):
            total = 1
        else:
            total = len(orchestrator.categories())
        done = 0

        async def on_progress(results: list[BenchmarkResult], category: str) -> None:
            nonlocal done
            done += 1
            await self._send(
                ProgressMessage(results=results, message=f"Completed {done} of {total} suites")
            )

        if isinstance(message, RunSingleMessage):
            results = await orchestrator.run_single(message.operation, on_progress)
            return results, f"{message.operation} benchmarks completed"
        results = await orchestrator.run_all(on_progress)
        return results, "All benchmarks completed"

    async def _send(self, message: OutboundMessage) -> None:
        outcome = self._emit(message)
        if inspect.isawaitable(outcome):
            await outcome
