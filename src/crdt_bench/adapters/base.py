"""Capability interface for compared document libraries.

The benchmark catalogue only talks to documents through this interface.
Update payloads are opaque bytes; nothing outside an adapter inspects them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any, ClassVar


class DocumentAdapter(ABC):
    """One compared implementation.

    Subclasses set ``name`` (the implementation label used in results) and
    ``supports_tree`` when ``tree_create_node`` is available.
    """

    name: ClassVar[str]
    supports_tree: ClassVar[bool] = False

    @abstractmethod
    def new_document(self) -> Any:
        """Create a fresh, empty document."""

    @abstractmethod
    def text_insert(self, doc: Any, index: int, value: str) -> None:
        """Insert ``value`` into the document's text at ``index``."""

    @abstractmethod
    def list_append(self, doc: Any, value: Any) -> None:
        """Append ``value`` to the document's list."""

    @abstractmethod
    def map_set(self, doc: Any, key: str, value: Any) -> None:
        """Set ``key`` to ``value`` in the document's map."""

    def tree_create_node(self, doc: Any, parent: Any = None) -> Any:
        """Create a tree node under ``parent`` (a root node when None).

        Returns:
            An identifier of the new node, usable as a later ``parent``.
        """
        raise NotImplementedError(f"{self.name} does not support tree operations")

    @abstractmethod
    def export_update(self, doc: Any) -> bytes:
        """Export the document's full state as an update payload."""

    @abstractmethod
    def import_update(self, doc: Any, update: bytes) -> None:
        """Apply an update payload produced by ``export_update``."""

    def import_batch(self, doc: Any, updates: Iterable[bytes]) -> None:
        """Apply several update payloads."""
        for update in updates:
            self.import_update(doc, update)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
