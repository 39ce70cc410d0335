"""Exception taxonomy for benchmark runs.

Every error is terminal for the run in progress; nothing in the package
retries.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from crdt_bench.keys import TaskKey


class BenchError(Exception):
    """Base class for all benchmark errors."""


class TaskExecutionError(BenchError):
    """A benchmarked operation raised during warmup or measurement.

    Args:
        key: Key of the failing task, if known.
        message: Human readable description.
    """

    def __init__(self, message: str, key: TaskKey | None = None) -> None:
        super().__init__(message)
        self.key = key


class ConfigurationError(BenchError, ValueError):
    """A configuration value is invalid or out of range."""


class ProtocolError(BenchError, ValueError):
    """An inbound message does not match any known shape."""
