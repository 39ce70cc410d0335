"""Tests for the suite orchestrator."""

import pytest

from crdt_bench.errors import ConfigurationError, TaskExecutionError
from crdt_bench.harness import HarnessConfig, TimingHarness
from crdt_bench.suite import SuiteConfig, SuiteOrchestrator, TaskRegistry


def _noop_builder(config: SuiteConfig):
    def run() -> None:
        pass

    return run


@pytest.fixture
def insert_registry() -> TaskRegistry:
    registry = TaskRegistry()
    registry.add("X", "Insert", _noop_builder)
    registry.add("Y", "Insert", _noop_builder)
    registry.add("X", "Delete", _noop_builder)
    return registry


class TestRunSingle:
    @pytest.mark.asyncio
    async def test_runs_only_requested_category(self, insert_registry, fast_harness_config):
        orchestrator = SuiteOrchestrator(insert_registry, harness_config=fast_harness_config)
        progress = []
        results = await orchestrator.run_single(
            "Insert", lambda results, category: progress.append((len(results), category))
        )
        assert [(r.implementation, r.operation) for r in results] == [("X", "Insert"), ("Y", "Insert")]
        assert all(r.sample_count >= 1 for r in results)
        assert all(r.ops_per_second > 0 for r in results)
        assert progress == [(2, "Insert")]

    @pytest.mark.asyncio
    async def test_unknown_operation_rejected(self, insert_registry):
        orchestrator = SuiteOrchestrator(insert_registry)
        with pytest.raises(ConfigurationError, match="Unknown operation"):
            await orchestrator.run_single("Rename")


class TestRunAll:
    @pytest.mark.asyncio
    async def test_categories_in_sorted_order_with_cumulative_progress(self, insert_registry, fast_harness_config):
        orchestrator = SuiteOrchestrator(insert_registry, harness_config=fast_harness_config)
        progress = []
        results = await orchestrator.run_all(
            lambda results, category: progress.append(([r.operation for r in results], category))
        )
        assert progress == [
            (["Delete"], "Delete"),
            (["Delete", "Insert", "Insert"], "Insert"),
        ]
        assert [r.operation for r in results] == ["Delete", "Insert", "Insert"]

    @pytest.mark.asyncio
    async def test_async_progress_callback_is_awaited(self, insert_registry, fast_harness_config):
        orchestrator = SuiteOrchestrator(insert_registry, harness_config=fast_harness_config)
        seen = []

        async def on_progress(results, category):
            seen.append(category)

        await orchestrator.run_all(on_progress)
        assert seen == ["Delete", "Insert"]

    @pytest.mark.asyncio
    async def test_progress_results_are_snapshots(self, insert_registry, fast_harness_config):
        orchestrator = SuiteOrchestrator(insert_registry, harness_config=fast_harness_config)
        snapshots = []
        await orchestrator.run_all(lambda results, category: snapshots.append(results))
        assert len(snapshots[0]) == 1
        assert len(snapshots[1]) == 3

    @pytest.mark.asyncio
    async def test_failure_aborts_run(self, fast_harness_config):
        def failing_builder(config):
            def run():
                raise RuntimeError("kaput")

            return run

        registry = TaskRegistry()
        registry.add("X", "Alpha", failing_builder)
        registry.add("X", "Beta", _noop_builder)
        orchestrator = SuiteOrchestrator(registry, harness_config=fast_harness_config)
        progress = []
        with pytest.raises(TaskExecutionError, match="kaput"):
            await orchestrator.run_all(lambda results, category: progress.append(category))
        assert progress == []

    @pytest.mark.asyncio
    async def test_full_reference_catalogue(self, reference_registry, small_suite_config, fast_harness_config):
        orchestrator = SuiteOrchestrator(
            reference_registry, config=small_suite_config, harness_config=fast_harness_config
        )
        results = await orchestrator.run_all()
        assert len(results) == len(reference_registry)
        assert {r.operation for r in results} == set(reference_registry.categories())


class TestConfigurationSnapshot:
    @pytest.mark.asyncio
    async def test_tasks_use_config_in_effect_at_build_time(self, fast_harness_config):
        seen_sizes = []

        def builder(config: SuiteConfig):
            op_size = config.op_size

            def run():
                seen_sizes.append(op_size)

            return run

        registry = TaskRegistry()
        registry.add("X", "Insert", builder, "for i in range(OP_SIZE): pass")
        orchestrator = SuiteOrchestrator(registry, config=SuiteConfig(op_size=3), harness_config=fast_harness_config)

        results = await orchestrator.run_all(config=SuiteConfig(op_size=9))
        assert set(seen_sizes) == {9}
        assert results[0].display_code == "for i in range(9): pass"

        seen_sizes.clear()
        results = await orchestrator.run_all()
        assert set(seen_sizes) == {3}
        assert results[0].display_code == "for i in range(3): pass"

    def test_explicit_harness_is_used(self, insert_registry):
        harness = TimingHarness(HarnessConfig(max_iterations=2))
        orchestrator = SuiteOrchestrator(insert_registry, harness=harness)
        assert orchestrator.harness is harness
        assert orchestrator.categories() == ["Delete", "Insert"]
