"""Result model shared by the harness, the orchestrator and the worker.

Results cross the worker boundary as camelCase JSON, so the struct is declared
with ``rename="camel"``. Consumers receive the final batch at least once and
must merge by ``(operation, implementation)`` rather than append.
"""

from __future__ import annotations

from collections.abc import Iterable

from msgspec import Struct

from crdt_bench.keys import TaskKey


class BenchmarkResult(Struct, frozen=True, rename="camel"):
    """Measured throughput of one task.

    Args:
        operation: Logical operation being compared (the category).
        implementation: Label of the compared implementation.
        ops_per_second: ``sample_count / execution_time_ms * 1000``.
        relative_error_pct: Coefficient of variation of the samples, in percent.
        sample_count: Number of measured invocations.
        samples: Duration of each measured invocation, in milliseconds.
        execution_time_ms: Wall-clock time of the whole measurement phase.
        display_code: Code shown to the user for this task.
    """

    operation: str
    implementation: str
    ops_per_second: float
    relative_error_pct: float
    sample_count: int
    samples: tuple[float, ...]
    execution_time_ms: float
    display_code: str = ""

    def __post_init__(self) -> None:
        """Validate the sample accounting."""
        if self.sample_count < 0:
            raise ValueError(
                f"Invalid sample_count; expected >=0 but got {self.sample_count}"
            )
        if self.sample_count != len(self.samples):
            raise ValueError(
                f"Invalid sample_count; expected {len(self.samples)} but got {self.sample_count}"
            )
        if self.relative_error_pct < 0.0:
            raise ValueError(
                f"Invalid relative_error_pct; expected >=0 but got {self.relative_error_pct}"
            )

    @property
    def key(self) -> TaskKey:
        """Merge key of this result."""
        return TaskKey(implementation=self.implementation, operation=self.operation)


def merge_results(
    current: Iterable[BenchmarkResult], batch: Iterable[BenchmarkResult]
) -> list[BenchmarkResult]:
    """Merge a batch into a result list by ``(operation, implementation)``.

    Order of first appearance is kept; a later result for an existing key
    replaces the earlier one in place. Merging the same batch twice is a no-op.
    """
    merged: dict[TaskKey, BenchmarkResult] = {r.key: r for r in current}
    for result in batch:
        merged[result.key] = result
    return list(merged.values())


class ResultMerger:
    """Accumulates result batches received from a worker.

    Progress and completion messages both carry the cumulative list, and the
    completion message is delivered twice, so every batch is merged by key.
    """

    def __init__(self) -> None:
        self._results: dict[TaskKey, BenchmarkResult] = {}

    def merge(self, batch: Iterable[BenchmarkResult]) -> list[BenchmarkResult]:
        """Merge a batch and return the merged list."""
        for result in batch:
            self._results[result.key] = result
        return self.results

    def clear(self) -> None:
        """Drop everything merged so far."""
        self._results.clear()

    @property
    def results(self) -> list[BenchmarkResult]:
        """Merged results in order of first appearance."""
        return list(self._results.values())

    @property
    def completed_operations(self) -> set[str]:
        """Operations with at least one result."""
        return {key.operation for key in self._results}

    def by_operation(self) -> dict[str, dict[str, float]]:
        """Pivot throughput into ``{operation: {implementation: ops_per_second}}``."""
        table: dict[str, dict[str, float]] = {}
        for result in self._results.values():
            table.setdefault(result.operation, {})[result.implementation] = (
                result.ops_per_second
            )
        return table

    def __len__(self) -> int:
        return len(self._results)
