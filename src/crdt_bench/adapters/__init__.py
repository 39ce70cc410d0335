"""Compared document implementations."""

from __future__ import annotations

import importlib
import importlib.util

from .base import DocumentAdapter
from .reference import ReferenceAdapter, ReferenceDocument

__all__ = [
    "DocumentAdapter",
    "ReferenceAdapter",
    "ReferenceDocument",
    "available_adapters",
]

# (adapter module, class name, library it wraps)
_OPTIONAL_ADAPTERS = (
    ("crdt_bench.adapters.yjs", "YjsAdapter", "pycrdt"),
    ("crdt_bench.adapters.automerge", "AutomergeAdapter", "automerge"),
    ("crdt_bench.adapters.loro", "LoroAdapter", "loro"),
)


def available_adapters() -> list[DocumentAdapter]:
    """Reference adapter plus every optional adapter whose library is installed.

    Order is stable: the reference adapter first, then optional adapters in
    declaration order.
    """
    adapters: list[DocumentAdapter] = [ReferenceAdapter()]
    for module_name, class_name, library in _OPTIONAL_ADAPTERS:
        if importlib.util.find_spec(library) is None:
            continue
        module = importlib.import_module(module_name)
        adapters.append(getattr(module, class_name)())
    return adapters
