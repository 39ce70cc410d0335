"""Timing harness configuration."""

import math
from typing import Self

from msgspec import Struct

from crdt_bench.errors import ConfigurationError


class HarnessConfig(Struct, kw_only=True):
    """Per-task measurement budget.

    Args:
        warmup_iterations: Discarded invocations before measurement.
        timeout_ms: Soft wall-clock budget for the measurement loop.
        max_iterations: Hard cap on measured invocations.
    """

    warmup_iterations: int = 5
    timeout_ms: float = 500.0
    max_iterations: int = 50

    def __post_init__(self) -> None:
        """Validate the measurement budget."""
        if self.warmup_iterations < 0:
            raise ConfigurationError(
                f"Invalid warmup_iterations; expected >=0 but got {self.warmup_iterations}"
            )
        if not math.isfinite(self.timeout_ms) or self.timeout_ms <= 0:
            raise ConfigurationError(
                f"Invalid timeout_ms; expected finite >0 but got {self.timeout_ms}"
            )
        if self.max_iterations < 1:
            raise ConfigurationError(
                f"Invalid max_iterations; expected >=1 but got {self.max_iterations}"
            )

    @classmethod
    def default(cls) -> Self:
        """Five warmup calls, then up to 50 samples within 500ms."""
        return cls()
