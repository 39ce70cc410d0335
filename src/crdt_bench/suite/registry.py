"""Task registry keyed by ``TaskKey``."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass

from crdt_bench.harness import Executable
from crdt_bench.keys import TaskKey
from crdt_bench.suite.config import SuiteConfig

TaskBuilder = Callable[[SuiteConfig], Executable]

_PLACEHOLDER = re.compile(
    r"\b(OP_SIZE|SYNC_ITERATIONS|SYNC_CONCURRENT_DOCS|SYNC_CONCURRENT_OPS)\b"
)


@dataclass(frozen=True)
class TaskDescriptor:
    """How to build one task.

    Args:
        key: Implementation and operation.
        build: Returns the executable for a given configuration. Values must be
            read from the configuration here, not inside the executable.
        code_template: Display code; configuration placeholders are replaced
            by ``render_code``.
    """

    key: TaskKey
    build: TaskBuilder
    code_template: str = ""

    def render_code(self, config: SuiteConfig) -> str:
        """Display code with configuration placeholders filled in."""
        values = config.placeholders()
        return _PLACEHOLDER.sub(lambda m: str(values[m.group(1)]), self.code_template)


class TaskRegistry:
    """Ordered mapping of task keys to descriptors."""

    def __init__(self) -> None:
        self._tasks: dict[TaskKey, TaskDescriptor] = {}

    def register(self, descriptor: TaskDescriptor) -> None:
        """Add a descriptor.

        Raises:
            ValueError: If the key is already registered.
        """
        if descriptor.key in self._tasks:
            raise ValueError(f"Task already registered: {descriptor.key}")
        self._tasks[descriptor.key] = descriptor

    def add(
        self,
        implementation: str,
        operation: str,
        build: TaskBuilder,
        code_template: str = "",
    ) -> TaskDescriptor:
        """Build and register a descriptor in one call."""
        descriptor = TaskDescriptor(
            key=TaskKey(implementation=implementation, operation=operation),
            build=build,
            code_template=code_template,
        )
        self.register(descriptor)
        return descriptor

    def categories(self) -> list[str]:
        """Distinct operations, sorted ascending."""
        return sorted({key.operation for key in self._tasks})

    def for_category(self, operation: str) -> list[TaskDescriptor]:
        """Descriptors of one operation in registration order."""
        return [d for key, d in self._tasks.items() if key.operation == operation]

    def keys(self) -> list[TaskKey]:
        return list(self._tasks)

    def get(self, key: TaskKey) -> TaskDescriptor | None:
        return self._tasks.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._tasks

    def __iter__(self) -> Iterator[TaskDescriptor]:
        return iter(self._tasks.values())

    def __len__(self) -> int:
        return len(self._tasks)
