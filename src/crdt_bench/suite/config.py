"""Suite configuration.

The configuration is immutable. Task executables are built from a specific
value, so an override only affects tasks built after it; nothing reads the
configuration while a task runs.
"""

from __future__ import annotations

from typing import Any, Self

import msgspec
from msgspec import Struct

from crdt_bench.errors import ConfigurationError


class SuiteConfig(Struct, frozen=True, kw_only=True):
    """Workload sizes for the benchmark catalogue.

    Args:
        op_size: Mutations performed by one measured iteration.
        sync_iterations: Replica round trips per sync iteration.
        sync_concurrent_docs: Replicas editing concurrently in a sync round.
        sync_concurrent_ops: Edits per replica in a concurrent sync round.
    """

    op_size: int = 128
    sync_iterations: int = 20
    sync_concurrent_docs: int = 5
    sync_concurrent_ops: int = 10

    def __post_init__(self) -> None:
        """Reject non-integer or non-positive sizes."""
        for name in self.__struct_fields__:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(
                    f"Invalid {name}; expected int but got {type(value).__name__}"
                )
            if value < 1:
                raise ConfigurationError(f"Invalid {name}; expected >=1 but got {value}")

    @classmethod
    def default(cls) -> Self:
        """Return the default workload: 128 ops, 20 sync rounds of 5 docs x 10 ops."""
        return cls()

    def with_overrides(self, **overrides: Any) -> Self:
        """Return a copy with the given fields replaced; ``None`` values are skipped.

        Raises:
            ConfigurationError: On unknown fields or invalid values.
        """
        unknown = set(overrides) - set(self.__struct_fields__)
        if unknown:
            raise ConfigurationError(f"Unknown configuration fields: {sorted(unknown)}")
        values = msgspec.structs.asdict(self)
        values.update({k: v for k, v in overrides.items() if v is not None})
        return type(self)(**values)

    def placeholders(self) -> dict[str, int]:
        """Values substituted into display code templates."""
        return {
            "OP_SIZE": self.op_size,
            "SYNC_ITERATIONS": self.sync_iterations,
            "SYNC_CONCURRENT_DOCS": self.sync_concurrent_docs,
            "SYNC_CONCURRENT_OPS": self.sync_concurrent_ops,
        }
