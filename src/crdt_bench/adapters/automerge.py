"""Automerge adapter backed by ``automerge`` (install the ``automerge`` extra).

Documents are forked from one template that already holds the text, list and
map objects, so replicas share object ids and their edits merge into the same
containers.
"""

from __future__ import annotations

from typing import Any

from automerge.core import ROOT, Document, ObjType, ScalarType

from crdt_bench.adapters.base import DocumentAdapter


def _scalar(value: Any) -> tuple[ScalarType, Any]:
    # bool is an int subclass
    if isinstance(value, bool):
        return ScalarType.Boolean, value
    if isinstance(value, int):
        return ScalarType.Int, value
    if isinstance(value, float):
        return ScalarType.F64, value
    if isinstance(value, str):
        return ScalarType.Str, value
    if isinstance(value, bytes):
        return ScalarType.Bytes, value
    raise TypeError(
        f"Invalid value; expected bool, int, float, str or bytes but got {type(value).__name__}"
    )


class AutomergeAdapter(DocumentAdapter):
    """Automerge documents through the ``automerge.core`` bindings. No tree type."""

    name = "Automerge"

    def __init__(self) -> None:
        self._template = Document()
        with self._template.transaction() as tx:
            self.text_id = tx.put_object(ROOT, "text", ObjType.Text)
            self.list_id = tx.put_object(ROOT, "list", ObjType.List)
            self.map_id = tx.put_object(ROOT, "map", ObjType.Map)

    def new_document(self) -> Document:
        return self._template.fork()

    def text_insert(self, doc: Document, index: int, value: str) -> None:
        with doc.transaction() as tx:
            tx.splice_text(self.text_id, index, 0, value)

    def list_append(self, doc: Document, value: Any) -> None:
        value_type, value = _scalar(value)
        end = doc.length(self.list_id)
        with doc.transaction() as tx:
            tx.insert(self.list_id, end, value_type, value)

    def map_set(self, doc: Document, key: str, value: Any) -> None:
        value_type, value = _scalar(value)
        with doc.transaction() as tx:
            tx.put(self.map_id, key, value_type, value)

    def export_update(self, doc: Document) -> bytes:
        return doc.save()

    def import_update(self, doc: Document, update: bytes) -> None:
        doc.merge(Document.load(update))
