"""Suite orchestrator.

Runs the registry one category at a time, in sorted category order, and
reports the cumulative results after each category. A category's tasks are
built from the effective configuration right before they are handed to the
harness.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Sequence

from crdt_bench.errors import ConfigurationError
from crdt_bench.harness import HarnessConfig, TimingHarness
from crdt_bench.logging import get_logger
from crdt_bench.results import BenchmarkResult
from crdt_bench.suite.catalogue import build_default_registry
from crdt_bench.suite.config import SuiteConfig
from crdt_bench.suite.registry import TaskRegistry

ProgressCallback = Callable[[list[BenchmarkResult], str], "None | Awaitable[None]"]

logger = get_logger("crdt_bench.suite")


class SuiteOrchestrator:
    """Groups registered tasks by operation and runs them in sequence.

    Args:
        registry: Tasks to run; defaults to the catalogue over all available adapters.
        config: Default workload configuration.
        harness_config: Measurement budget, used when ``harness`` is not given.
        harness: Timing harness to drive.
    """

    def __init__(
        self,
        registry: TaskRegistry | None = None,
        config: SuiteConfig | None = None,
        harness_config: HarnessConfig | None = None,
        harness: TimingHarness | None = None,
    ) -> None:
        self.registry = registry if registry is not None else build_default_registry()
        self.config = config if config is not None else SuiteConfig.default()
        self.harness = harness if harness is not None else TimingHarness(harness_config)

    def categories(self) -> list[str]:
        """Sorted, de-duplicated operations of the registry."""
        return self.registry.categories()

    async def run_all(
        self,
        on_progress: ProgressCallback | None = None,
        config: SuiteConfig | None = None,
    ) -> list[BenchmarkResult]:
        """Run every category.

        Args:
            on_progress: Called with the cumulative results and the category
                label after each category.
            config: Overrides the orchestrator's configuration for this run.

        Returns:
            Results of all categories, category by category.
        """
        return await self._run(self.categories(), on_progress, config)

    async def run_single(
        self,
        operation: str,
        on_progress: ProgressCallback | None = None,
        config: SuiteConfig | None = None,
    ) -> list[BenchmarkResult]:
        """Run one category.

        Raises:
            ConfigurationError: If no task is registered for ``operation``.
        """
        if operation not in self.categories():
            raise ConfigurationError(
                f"Unknown operation; expected one of {self.categories()} but got {operation!r}"
            )
        return await self._run([operation], on_progress, config)

    async def _run(
        self,
        categories: Sequence[str],
        on_progress: ProgressCallback | None,
        config: SuiteConfig | None,
    ) -> list[BenchmarkResult]:
        effective = config if config is not None else self.config
        logger.info(f"Starting benchmarks with {effective}")

        results: list[BenchmarkResult] = []
        for category in categories:
            logger.info(f"Running {category} benchmarks...")
            self.harness.reset()
            for descriptor in self.registry.for_category(category):
                self.harness.add(
                    descriptor.key,
                    descriptor.build(effective),
                    descriptor.render_code(effective),
                )
            results.extend(await self.harness.run())
            logger.info(f"{category} benchmark completed")

            if on_progress is not None:
                outcome = on_progress(list(results), category)
                if inspect.isawaitable(outcome):
                    await outcome

        logger.info("All benchmarks completed")
        return results
