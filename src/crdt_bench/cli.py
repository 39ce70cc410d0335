"""Command-line interface.

Examples:
    crdt-bench
    crdt-bench --operation "Map Operations" --op-size 512
    crdt-bench --in-process --timeout-ms 100 --max-iterations 10
"""

from __future__ import annotations

import argparse
import asyncio
from collections.abc import Sequence

import msgspec

from crdt_bench.errors import BenchError
from crdt_bench.harness import HarnessConfig
from crdt_bench.logging import FileLogHandler, LoggerConfig, LogLevel, configure, get_logger
from crdt_bench.reporting import ComparativeReporter, ResultReporter
from crdt_bench.results import BenchmarkResult
from crdt_bench.suite import SuiteConfig, SuiteOrchestrator, build_default_registry
from crdt_bench.worker import (
    BenchmarkWorker,
    OutboundMessage,
    ProgressMessage,
    RunSingleMessage,
    StartMessage,
    StatusMessage,
)

logger = get_logger("crdt_bench.cli")


class BenchmarkCLI:
    """Builder for the benchmark command-line interface.

    Args:
        description: Description shown by --help.
    """

    def __init__(self, description: str) -> None:
        self.parser = argparse.ArgumentParser(prog="crdt-bench", description=description)
        self._add_common_args()

    def _add_common_args(self) -> None:
        defaults = HarnessConfig.default()
        self.parser.add_argument(
            "--timeout-ms",
            type=float,
            default=None,
            help=f"Measurement budget per task in ms (default: {defaults.timeout_ms:g})",
        )
        self.parser.add_argument(
            "--max-iterations",
            type=int,
            default=None,
            help=f"Maximum measured calls per task (default: {defaults.max_iterations})",
        )
        self.parser.add_argument(
            "--warmup",
            "-w",
            type=int,
            default=None,
            help=f"Warmup calls per task (default: {defaults.warmup_iterations})",
        )
        self.parser.add_argument(
            "--log-level",
            choices=[level.name for level in LogLevel],
            default=LogLevel.INFO.name,
            help="Log level (default: INFO)",
        )
        self.parser.add_argument(
            "--log-file",
            default=None,
            help="Also append log lines to this .txt file",
        )

    def add_workload_args(self) -> BenchmarkCLI:
        """Add the workload size arguments.

        Returns:
            Self for method chaining.
        """
        defaults = SuiteConfig.default()
        self.parser.add_argument(
            "--op-size",
            "-n",
            type=int,
            default=None,
            help=f"Mutations per measured call (default: {defaults.op_size})",
        )
        self.parser.add_argument(
            "--sync-iterations",
            type=int,
            default=None,
            help=f"Rounds per sync call (default: {defaults.sync_iterations})",
        )
        self.parser.add_argument(
            "--sync-concurrent-docs",
            type=int,
            default=None,
            help=f"Replicas per concurrent sync round (default: {defaults.sync_concurrent_docs})",
        )
        self.parser.add_argument(
            "--sync-concurrent-ops",
            type=int,
            default=None,
            help=f"Edits per replica per round (default: {defaults.sync_concurrent_ops})",
        )
        return self

    def add_selection_args(self) -> BenchmarkCLI:
        """Add --operation, --list and --in-process.

        Returns:
            Self for method chaining.
        """
        self.parser.add_argument(
            "--operation",
            "-o",
            default=None,
            help="Run a single operation category instead of the full suite",
        )
        self.parser.add_argument(
            "--list",
            action="store_true",
            help="List operation categories and implementations, then exit",
        )
        self.parser.add_argument(
            "--in-process",
            action="store_true",
            help="Run in this process instead of a spawned worker",
        )
        return self

    def parse(self, argv: Sequence[str] | None = None) -> argparse.Namespace:
        args = self.parser.parse_args(argv)
        if args.log_file is not None and not args.log_file.endswith(".txt"):
            self.parser.error(f"--log-file must end with .txt, got {args.log_file}")
        return args


def build_parser() -> BenchmarkCLI:
    return (
        BenchmarkCLI("Compare CRDT implementations on a fixed operation catalogue.")
        .add_workload_args()
        .add_selection_args()
    )


def _harness_config(args: argparse.Namespace) -> HarnessConfig:
    values = msgspec.structs.asdict(HarnessConfig.default())
    overrides = {
        "timeout_ms": args.timeout_ms,
        "max_iterations": args.max_iterations,
        "warmup_iterations": args.warmup,
    }
    values.update({k: v for k, v in overrides.items() if v is not None})
    return HarnessConfig(**values)


def _suite_config(args: argparse.Namespace) -> SuiteConfig:
    return SuiteConfig.default().with_overrides(
        op_size=args.op_size,
        sync_iterations=args.sync_iterations,
        sync_concurrent_docs=args.sync_concurrent_docs,
        sync_concurrent_ops=args.sync_concurrent_ops,
    )


def _print_event(message: OutboundMessage) -> None:
    if isinstance(message, StatusMessage | ProgressMessage):
        logger.info(message.message)


def _list_categories() -> None:
    registry = build_default_registry()
    for category in registry.categories():
        names = ", ".join(d.key.implementation for d in registry.for_category(category))
        print(f"{category}: {names}")


async def _run_in_process(
    args: argparse.Namespace, config: SuiteConfig, harness_config: HarnessConfig
) -> list[BenchmarkResult]:
    orchestrator = SuiteOrchestrator(config=config, harness_config=harness_config)
    total = 1 if args.operation else len(orchestrator.categories())
    done = 0

    def on_progress(results: list[BenchmarkResult], category: str) -> None:
        nonlocal done
        done += 1
        logger.info(f"Completed {done} of {total} suites")

    if args.operation:
        return await orchestrator.run_single(args.operation, on_progress)
    return await orchestrator.run_all(on_progress)


async def _run_in_worker(
    args: argparse.Namespace, config: SuiteConfig, harness_config: HarnessConfig
) -> list[BenchmarkResult]:
    overrides = msgspec.structs.asdict(config) | msgspec.structs.asdict(harness_config)
    if args.operation:
        message = RunSingleMessage(operation=args.operation, **overrides)
    else:
        message = StartMessage(**overrides)

    with BenchmarkWorker(log_level=LogLevel[args.log_level], log_file=args.log_file) as worker:
        return await worker.run(message, on_message=_print_event)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the benchmarks and print the report.

    Returns:
        Process exit code: 0 on success, 1 on failure.
    """
    args = build_parser().parse(argv)
    handlers = [] if args.log_file is None else [FileLogHandler(args.log_file, create=True)]
    configure(LoggerConfig(base_level=LogLevel[args.log_level]), handlers)

    if args.list:
        _list_categories()
        return 0

    try:
        config = _suite_config(args)
        harness_config = _harness_config(args)
        if args.in_process:
            results = asyncio.run(_run_in_process(args, config, harness_config))
        else:
            results = asyncio.run(_run_in_worker(args, config, harness_config))
    except BenchError as exc:
        logger.error(f"Benchmark run failed: {exc}")
        return 1

    config_info: dict[str, str | int | float] = {
        **msgspec.structs.asdict(config),
        **msgspec.structs.asdict(harness_config),
    }
    ResultReporter(config_info=config_info).print_results(results)
    ComparativeReporter().print_comparative_table(results)
    return 0
