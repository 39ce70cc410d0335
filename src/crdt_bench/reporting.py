"""Report formatting for benchmark results."""

from __future__ import annotations

from collections.abc import Sequence

from crdt_bench.harness import SampleStatistics
from crdt_bench.results import BenchmarkResult, ResultMerger


class ResultReporter:
    """Prints one performance table per operation.

    Args:
        title: Report title.
        config_info: Configuration values shown under the title.
    """

    def __init__(
        self,
        title: str = "CRDT Benchmarks",
        config_info: dict[str, str | int | float] | None = None,
    ) -> None:
        self.title = title
        self.config_info = config_info or {}

    def print_header(self, results: Sequence[BenchmarkResult]) -> None:
        print("=" * 100)
        print(self.title)
        print("=" * 100)

        for key, value in self.config_info.items():
            print(f"{key}: {value}")

        total_samples = sum(r.sample_count for r in results)
        total_time_s = sum(r.execution_time_ms for r in results) / 1000.0
        print(f"Tasks: {len(results)} | Samples: {total_samples:,} | Measured: {total_time_s:.3f}s")
        print()

    def print_operation_table(self, operation: str, results: Sequence[BenchmarkResult]) -> None:
        """Print the table of one operation, fastest implementation first."""
        print(operation)
        print("-" * 100)
        print(
            f"{'Implementation':<20} {'ops/sec':>12} {'±%':>8} {'Samples':>8} "
            f"{'Mean ms':>10} {'P50':>10} {'P95':>10} {'Time ms':>10}"
        )
        for result in sorted(results, key=lambda r: r.ops_per_second, reverse=True):
            stats = SampleStatistics.from_samples(result.samples)
            print(
                f"{result.implementation:<20} {result.ops_per_second:>12.0f} "
                f"{result.relative_error_pct:>8.2f} {result.sample_count:>8} "
                f"{stats.mean_ms:>10.3f} {stats.p50_ms:>10.3f} {stats.p95_ms:>10.3f} "
                f"{result.execution_time_ms:>10.1f}"
            )
        print()

    def print_results(self, results: Sequence[BenchmarkResult]) -> None:
        """Print the header and every operation table in sorted order."""
        self.print_header(results)
        grouped: dict[str, list[BenchmarkResult]] = {}
        for result in results:
            grouped.setdefault(result.operation, []).append(result)
        for operation in sorted(grouped):
            self.print_operation_table(operation, grouped[operation])
        print("=" * 100)


class ComparativeReporter:
    """Prints an operation by implementation matrix of ops/sec.

    Args:
        title: Title of the table.
    """

    def __init__(self, title: str = "Throughput (ops/sec)") -> None:
        self.title = title

    def print_comparative_table(self, results: Sequence[BenchmarkResult]) -> None:
        merger = ResultMerger()
        merger.merge(results)
        table = merger.by_operation()
        implementations = sorted({r.implementation for r in results})

        print("=" * 100)
        print(self.title)
        print("=" * 100)

        header = f"{'Operation':<30}"
        for name in implementations:
            header += f" {name:>15}"
        print(header)
        print("-" * 100)

        for operation in sorted(table):
            row = f"{operation:<30}"
            for name in implementations:
                value = table[operation].get(name)
                if value is not None:
                    row += f" {value:>15.0f}"
                else:
                    row += f" {'-':>15}"
            print(row)

        print("=" * 100)
