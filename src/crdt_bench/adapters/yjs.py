"""Yjs adapter backed by ``pycrdt`` (install the ``yjs`` extra)."""

from __future__ import annotations

from typing import Any

from pycrdt import Array, Doc, Map, Text

from crdt_bench.adapters.base import DocumentAdapter


class YjsAdapter(DocumentAdapter):
    """Yjs documents through the pycrdt bindings. No tree type."""

    name = "Yjs"

    def new_document(self) -> Doc:
        return Doc()

    def text_insert(self, doc: Doc, index: int, value: str) -> None:
        doc.get("text", type=Text).insert(index, value)

    def list_append(self, doc: Doc, value: Any) -> None:
        doc.get("list", type=Array).append(value)

    def map_set(self, doc: Doc, key: str, value: Any) -> None:
        doc.get("map", type=Map)[key] = value

    def export_update(self, doc: Doc) -> bytes:
        return doc.get_update()

    def import_update(self, doc: Doc, update: bytes) -> None:
        doc.apply_update(update)
