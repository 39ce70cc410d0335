import time
from collections.abc import Callable

import pytest

from crdt_bench.adapters import ReferenceAdapter
from crdt_bench.harness import HarnessConfig
from crdt_bench.suite import SuiteConfig, TaskRegistry, build_default_registry

WAIT_TIMEOUT_S = 1.0


def pytest_configure(config: pytest.Config) -> None:
    """Register shared markers."""
    config.addinivalue_line("markers", "slow: mark test as slow running")


@pytest.fixture
def wait_for() -> Callable[[Callable[[], bool], float, float], bool]:
    """Return a helper to poll for a condition instead of sleeping a fixed amount."""

    def _wait_for(
        predicate: Callable[[], bool],
        timeout_s: float = WAIT_TIMEOUT_S,
        interval_s: float = 0.01,
    ) -> bool:
        deadline = time.monotonic() + timeout_s
        while time.monotonic() < deadline:
            if predicate():
                return True
            time.sleep(interval_s)
        return predicate()

    return _wait_for


@pytest.fixture
def fast_harness_config() -> HarnessConfig:
    """A budget small enough to run the whole catalogue in a test."""
    return HarnessConfig(warmup_iterations=1, timeout_ms=5.0, max_iterations=3)


@pytest.fixture
def small_suite_config() -> SuiteConfig:
    return SuiteConfig(op_size=8, sync_iterations=2, sync_concurrent_docs=2, sync_concurrent_ops=2)


@pytest.fixture
def reference_registry() -> TaskRegistry:
    return build_default_registry([ReferenceAdapter()])
