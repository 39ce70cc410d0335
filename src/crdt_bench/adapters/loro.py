"""Loro adapter backed by ``loro`` (install the ``loro`` extra)."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from loro import ExportMode, LoroDoc

from crdt_bench.adapters.base import DocumentAdapter


class LoroAdapter(DocumentAdapter):
    """Loro documents, including the movable tree type."""

    name = "Loro"
    supports_tree = True

    def new_document(self) -> LoroDoc:
        return LoroDoc()

    def text_insert(self, doc: LoroDoc, index: int, value: str) -> None:
        doc.get_text("text").insert(index, value)

    def list_append(self, doc: LoroDoc, value: Any) -> None:
        doc.get_list("list").push(value)

    def map_set(self, doc: LoroDoc, key: str, value: Any) -> None:
        doc.get_map("map").insert(key, value)

    def tree_create_node(self, doc: LoroDoc, parent: Any = None) -> Any:
        return doc.get_tree("tree").create(parent)

    def export_update(self, doc: LoroDoc) -> bytes:
        doc.commit()
        return doc.export(ExportMode.Snapshot())

    def import_update(self, doc: LoroDoc, update: bytes) -> None:
        doc.import_(update)

    def import_batch(self, doc: LoroDoc, updates: Iterable[bytes]) -> None:
        doc.import_batch(list(updates))
