"""Timing harness.

Runs registered tasks one after another: a warmup phase whose timings are
discarded, then a measurement phase bounded by a soft wall-clock budget and a
hard iteration cap. The budget is checked after each call, never used to
interrupt one, so every task yields at least one sample.
"""

from __future__ import annotations

import inspect
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from crdt_bench.errors import TaskExecutionError
from crdt_bench.harness.config import HarnessConfig
from crdt_bench.harness.stats import ops_per_second, relative_error_pct
from crdt_bench.keys import TaskKey
from crdt_bench.logging import get_logger
from crdt_bench.results import BenchmarkResult

Executable = Callable[[], "None | Awaitable[None]"]

_NS_PER_MS = 1_000_000

logger = get_logger("crdt_bench.harness")


@dataclass(frozen=True)
class BenchmarkTask:
    """A registered task.

    Args:
        key: Implementation and operation being measured.
        executable: Sync or async callable performing one iteration.
        display_code: Code shown alongside the result.
    """

    key: TaskKey
    executable: Executable
    display_code: str = ""


async def _invoke(executable: Executable) -> None:
    outcome = executable()
    if inspect.isawaitable(outcome):
        await outcome


class TimingHarness:
    """Sequential task timer.

    Args:
        config: Measurement budget; defaults to ``HarnessConfig.default()``.
    """

    def __init__(self, config: HarnessConfig | None = None) -> None:
        self.config = config if config is not None else HarnessConfig.default()
        self._tasks: list[BenchmarkTask] = []
        self._results: list[BenchmarkResult] = []

    def add(
        self,
        name: TaskKey | str,
        executable: Executable,
        display_code: str = "",
    ) -> TimingHarness:
        """Register a task.

        Args:
            name: Task key, or a composite ``"<implementation> - <operation>"`` name.
            executable: Callable performing one iteration.
            display_code: Code shown alongside the result.

        Returns:
            Self for method chaining.
        """
        key = name if isinstance(name, TaskKey) else TaskKey.parse(name)
        self._tasks.append(BenchmarkTask(key, executable, display_code))
        return self

    def reset(self) -> None:
        """Drop all registered tasks and previous results."""
        self._tasks = []
        self._results = []

    @property
    def tasks(self) -> list[BenchmarkTask]:
        """Registered tasks in registration order."""
        return list(self._tasks)

    @property
    def results(self) -> list[BenchmarkResult]:
        """Results of the last run."""
        return list(self._results)

    async def run_task(self, task: BenchmarkTask) -> BenchmarkResult:
        """Warm up, measure and summarize a single task.

        Raises:
            TaskExecutionError: If the executable raises; the original
                exception is chained.
        """
        logger.info(f"Running benchmark for {task.key}...")
        try:
            for _ in range(self.config.warmup_iterations):
                await _invoke(task.executable)

            budget_ns = int(self.config.timeout_ms * _NS_PER_MS)
            samples: list[float] = []
            start = time.perf_counter_ns()
            while True:
                call_start = time.perf_counter_ns()
                await _invoke(task.executable)
                samples.append((time.perf_counter_ns() - call_start) / _NS_PER_MS)
                if (
                    time.perf_counter_ns() - start >= budget_ns
                    or len(samples) >= self.config.max_iterations
                ):
                    break
            execution_time_ms = (time.perf_counter_ns() - start) / _NS_PER_MS
        except Exception as exc:
            logger.error(f"Benchmark {task.key} failed: {exc!r}")
            raise TaskExecutionError(f"{task.key}: {exc}", key=task.key) from exc

        result = BenchmarkResult(
            operation=task.key.operation,
            implementation=task.key.implementation,
            ops_per_second=ops_per_second(len(samples), execution_time_ms),
            relative_error_pct=relative_error_pct(samples),
            sample_count=len(samples),
            samples=tuple(samples),
            execution_time_ms=execution_time_ms,
            display_code=task.display_code,
        )
        logger.info(
            f"Benchmark {task.key}: {round(result.ops_per_second)} ops/sec "
            f"(±{result.relative_error_pct:.2f}%)"
        )
        return result

    async def run(self) -> list[BenchmarkResult]:
        """Run every registered task in registration order.

        Returns:
            One result per task, in the same order.
        """
        self._results = []
        for task in self._tasks:
            self._results.append(await self.run_task(task))
        return self.results
