"""Timing harness: warmup, measurement and sample statistics."""

from __future__ import annotations

__all__ = [
    "BenchmarkTask",
    "Executable",
    "HarnessConfig",
    "SampleStatistics",
    "TimingHarness",
    "ops_per_second",
    "relative_error_pct",
]

from .bench import BenchmarkTask, Executable, TimingHarness
from .config import HarnessConfig
from .stats import SampleStatistics, ops_per_second, relative_error_pct
