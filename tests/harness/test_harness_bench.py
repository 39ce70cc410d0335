"""Tests for the timing harness."""

import asyncio
import math
import time

import pytest

from crdt_bench.errors import ConfigurationError, TaskExecutionError
from crdt_bench.harness import HarnessConfig, TimingHarness
from crdt_bench.keys import TaskKey


class CallRecorder:
    """Executable that records every call."""

    def __init__(self, sleep_s: float = 0.0, fail_on: int | None = None) -> None:
        self.calls = 0
        self.sleep_s = sleep_s
        self.fail_on = fail_on

    def __call__(self) -> None:
        self.calls += 1
        if self.fail_on is not None and self.calls >= self.fail_on:
            raise RuntimeError("boom")
        if self.sleep_s:
            time.sleep(self.sleep_s)


class TestHarnessConfig:
    """Validate HarnessConfig inputs."""

    def test_defaults(self):
        cfg = HarnessConfig.default()
        assert cfg.warmup_iterations == 5
        assert cfg.timeout_ms == 500.0
        assert cfg.max_iterations == 50

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"warmup_iterations": -1},
            {"timeout_ms": 0.0},
            {"timeout_ms": -5.0},
            {"timeout_ms": math.inf},
            {"timeout_ms": math.nan},
            {"max_iterations": 0},
        ],
    )
    def test_invalid_values_rejected(self, kwargs):
        with pytest.raises(ConfigurationError):
            HarnessConfig(**kwargs)

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            HarnessConfig(max_iterations=0)


class TestRegistration:
    def test_add_parses_composite_name(self):
        harness = TimingHarness()
        harness.add("X - Insert", lambda: None)
        assert harness.tasks[0].key == TaskKey("X", "Insert")

    def test_add_accepts_task_key_and_chains(self):
        harness = TimingHarness()
        returned = harness.add(TaskKey("X", "Insert"), lambda: None, "code")
        assert returned is harness
        assert harness.tasks[0].display_code == "code"

    def test_reset_is_idempotent(self):
        harness = TimingHarness()
        harness.add("X - Insert", lambda: None)
        harness.reset()
        harness.reset()
        assert harness.tasks == []
        assert harness.results == []


class TestMeasurement:
    @pytest.mark.asyncio
    async def test_accounting_identity(self):
        harness = TimingHarness(HarnessConfig(warmup_iterations=0, timeout_ms=50.0, max_iterations=20))
        harness.add("X - Insert", CallRecorder())
        (result,) = await harness.run()
        assert result.sample_count == len(result.samples)
        assert result.ops_per_second == pytest.approx(
            result.sample_count / result.execution_time_ms * 1000.0
        )
        assert result.execution_time_ms >= sum(result.samples)

    @pytest.mark.asyncio
    async def test_at_least_one_sample_when_call_exceeds_budget(self):
        harness = TimingHarness(HarnessConfig(warmup_iterations=0, timeout_ms=1.0, max_iterations=50))
        harness.add("X - Slow", CallRecorder(sleep_s=0.01))
        (result,) = await harness.run()
        assert result.sample_count == 1
        assert result.relative_error_pct == 0.0
        assert result.samples[0] >= 10.0

    @pytest.mark.asyncio
    async def test_max_iterations_caps_samples(self):
        recorder = CallRecorder()
        harness = TimingHarness(HarnessConfig(warmup_iterations=0, timeout_ms=10_000.0, max_iterations=7))
        harness.add("X - Insert", recorder)
        (result,) = await harness.run()
        assert result.sample_count == 7
        assert recorder.calls == 7

    @pytest.mark.asyncio
    async def test_warmup_calls_are_excluded(self):
        recorder = CallRecorder()
        harness = TimingHarness(HarnessConfig(warmup_iterations=4, timeout_ms=10_000.0, max_iterations=3))
        harness.add("X - Insert", recorder)
        (result,) = await harness.run()
        assert recorder.calls == 4 + 3
        assert result.sample_count == 3

    @pytest.mark.asyncio
    async def test_async_executable_is_awaited(self):
        calls = []

        async def executable() -> None:
            await asyncio.sleep(0)
            calls.append(1)

        harness = TimingHarness(HarnessConfig(warmup_iterations=2, timeout_ms=10_000.0, max_iterations=3))
        harness.add("X - Async", executable)
        (result,) = await harness.run()
        assert len(calls) == 5
        assert result.sample_count == 3

    @pytest.mark.asyncio
    async def test_tasks_run_sequentially_in_order(self):
        active = 0
        overlaps = 0
        order: list[str] = []

        def make(name: str):
            async def executable() -> None:
                nonlocal active, overlaps
                active += 1
                overlaps += active > 1
                order.append(name)
                await asyncio.sleep(0)
                active -= 1

            return executable

        harness = TimingHarness(HarnessConfig(warmup_iterations=0, timeout_ms=10_000.0, max_iterations=2))
        harness.add("A - Insert", make("A")).add("B - Insert", make("B"))
        results = await harness.run()
        assert overlaps == 0
        assert order == ["A", "A", "B", "B"]
        assert [r.implementation for r in results] == ["A", "B"]

    @pytest.mark.asyncio
    async def test_result_carries_display_code(self):
        harness = TimingHarness(HarnessConfig(warmup_iterations=0, max_iterations=1))
        harness.add("X - Insert", lambda: None, "doc.insert()")
        (result,) = await harness.run()
        assert result.display_code == "doc.insert()"
        assert result.operation == "Insert"
        assert result.implementation == "X"


class TestFailures:
    @pytest.mark.asyncio
    async def test_exception_is_wrapped_with_key(self):
        harness = TimingHarness(HarnessConfig(warmup_iterations=2, max_iterations=5))
        harness.add("X - Insert", CallRecorder(fail_on=1))
        with pytest.raises(TaskExecutionError) as excinfo:
            await harness.run()
        assert excinfo.value.key == TaskKey("X", "Insert")
        assert isinstance(excinfo.value.__cause__, RuntimeError)
        assert "X - Insert" in str(excinfo.value)

    @pytest.mark.asyncio
    async def test_failure_aborts_remaining_tasks(self):
        survivor = CallRecorder()
        harness = TimingHarness(HarnessConfig(warmup_iterations=0, max_iterations=2))
        harness.add("X - Insert", CallRecorder(fail_on=2)).add("Y - Insert", survivor)
        with pytest.raises(TaskExecutionError):
            await harness.run()
        assert survivor.calls == 0
