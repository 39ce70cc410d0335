"""Typed task keys."""

from __future__ import annotations

from typing import Self

from msgspec import Struct

KEY_DELIMITER = " - "


class TaskKey(Struct, frozen=True, order=True):
    """Identifies one benchmark task by implementation and operation."""

    implementation: str
    operation: str

    @classmethod
    def parse(cls, name: str) -> Self:
        """Parse a composite ``"<implementation> - <operation>"`` name.

        Splits on the first delimiter only. Names without a delimiter use the
        whole name for both fields.
        """
        implementation, sep, operation = name.partition(KEY_DELIMITER)
        if not sep:
            return cls(implementation=name, operation=name)
        return cls(implementation=implementation, operation=operation)

    def __str__(self) -> str:
        return f"{self.implementation}{KEY_DELIMITER}{self.operation}"
