"""Statistical summaries of per-invocation samples.

The relative error is the coefficient of variation of individual call
durations. It is reported next to the throughput figure, which the harness
derives from total elapsed time, and the two are not reconciled.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np


def relative_error_pct(samples: Sequence[float]) -> float:
    """Population standard deviation over mean, in percent.

    Returns 0.0 for fewer than two samples or a zero mean.
    """
    if len(samples) <= 1:
        return 0.0
    arr = np.asarray(samples, dtype=np.float64)
    mean = float(np.mean(arr))
    if mean <= 0.0:
        return 0.0
    return float(np.std(arr)) / mean * 100.0


def ops_per_second(sample_count: int, execution_time_ms: float) -> float:
    """Throughput implied by ``sample_count`` calls in ``execution_time_ms``."""
    if sample_count <= 0 or execution_time_ms <= 0.0:
        return 0.0
    return sample_count / execution_time_ms * 1000.0


@dataclass(frozen=True)
class SampleStatistics:
    """Summary of a sample set, durations in milliseconds.

    Args:
        count: Number of samples.
        mean_ms: Arithmetic mean.
        std_ms: Population standard deviation.
        relative_error_pct: ``std_ms / mean_ms * 100`` (0 for <= 1 sample).
        p50_ms: Median.
        p95_ms: 95th percentile.
        p99_ms: 99th percentile.
    """

    count: int
    mean_ms: float
    std_ms: float
    relative_error_pct: float
    p50_ms: float
    p95_ms: float
    p99_ms: float

    @classmethod
    def from_samples(cls, samples: Sequence[float]) -> SampleStatistics:
        """Compute statistics for a sample set.

        Args:
            samples: Per-invocation durations in milliseconds.

        Returns:
            Statistics; all zero for an empty sample set.
        """
        if not samples:
            return cls(
                count=0,
                mean_ms=0.0,
                std_ms=0.0,
                relative_error_pct=0.0,
                p50_ms=0.0,
                p95_ms=0.0,
                p99_ms=0.0,
            )

        arr = np.asarray(samples, dtype=np.float64)
        return cls(
            count=len(samples),
            mean_ms=float(np.mean(arr)),
            std_ms=float(np.std(arr)),
            relative_error_pct=relative_error_pct(samples),
            p50_ms=float(np.percentile(arr, 50)),
            p95_ms=float(np.percentile(arr, 95)),
            p99_ms=float(np.percentile(arr, 99)),
        )
