"""Pure-Python op-log replica used as a baseline implementation.

Each document keeps the log of operations it has seen. Exporting sends the
whole log as msgpack; importing replays operations not yet applied, keyed by
``(client, seq)``. Map entries resolve last-writer-wins on
``(lamport, client)``; list appends and tree creations are commutative. Text
inserts are applied at the recorded index without interleaving rules, so
concurrent text edits are not guaranteed to converge.
"""

from __future__ import annotations

import random
from typing import Any

import msgspec
from msgspec import Struct

from crdt_bench.adapters.base import DocumentAdapter

NodeId = tuple[int, int]


class TextInsertOp(Struct, tag="text", array_like=True):
    client: int
    seq: int
    lamport: int
    index: int
    value: str


class ListAppendOp(Struct, tag="list", array_like=True):
    client: int
    seq: int
    lamport: int
    value: Any


class MapSetOp(Struct, tag="map", array_like=True):
    client: int
    seq: int
    lamport: int
    key: str
    value: Any


class TreeCreateOp(Struct, tag="tree", array_like=True):
    client: int
    seq: int
    lamport: int
    parent: tuple[int, int] | None


Op = TextInsertOp | ListAppendOp | MapSetOp | TreeCreateOp

_encode = msgspec.msgpack.Encoder().encode
_decode = msgspec.msgpack.Decoder(type=list[Op]).decode


class ReferenceDocument:
    """A single replica."""

    def __init__(self, client: int | None = None) -> None:
        self.client = client if client is not None else random.getrandbits(48)
        self._seq = 0
        self._lamport = 0
        self._ops: list[Op] = []
        self._seen: set[NodeId] = set()
        self._text: list[str] = []
        self._list: list[Any] = []
        self._map: dict[str, tuple[int, int, Any]] = {}
        self._tree: dict[NodeId, NodeId | None] = {}

    @property
    def text(self) -> str:
        return "".join(self._text)

    @property
    def items(self) -> list[Any]:
        return list(self._list)

    @property
    def entries(self) -> dict[str, Any]:
        return {key: entry[2] for key, entry in self._map.items()}

    @property
    def tree(self) -> dict[NodeId, NodeId | None]:
        """Node id to parent id."""
        return dict(self._tree)

    @property
    def ops(self) -> list[Op]:
        return list(self._ops)

    def next_stamp(self) -> tuple[int, int, int]:
        """Allocate ``(client, seq, lamport)`` for a local operation."""
        self._seq += 1
        self._lamport += 1
        return self.client, self._seq, self._lamport

    def apply(self, op: Op) -> bool:
        """Apply an operation once.

        Returns:
            False if the operation had already been applied.
        """
        op_id = (op.client, op.seq)
        if op_id in self._seen:
            return False
        self._seen.add(op_id)
        self._ops.append(op)
        self._lamport = max(self._lamport, op.lamport)
        if op.client == self.client:
            self._seq = max(self._seq, op.seq)

        match op:
            case TextInsertOp(index=index, value=value):
                position = min(max(index, 0), len(self._text))
                self._text[position:position] = list(value)
            case ListAppendOp(value=value):
                self._list.append(value)
            case MapSetOp(key=key, value=value):
                current = self._map.get(key)
                if current is None or (op.lamport, op.client) > current[:2]:
                    self._map[key] = (op.lamport, op.client, value)
            case TreeCreateOp(parent=parent):
                self._tree[op_id] = parent
        return True


class ReferenceAdapter(DocumentAdapter):
    """Adapter over ``ReferenceDocument``."""

    name = "Reference"
    supports_tree = True

    def new_document(self) -> ReferenceDocument:
        return ReferenceDocument()

    def text_insert(self, doc: ReferenceDocument, index: int, value: str) -> None:
        doc.apply(TextInsertOp(*doc.next_stamp(), index=index, value=value))

    def list_append(self, doc: ReferenceDocument, value: Any) -> None:
        doc.apply(ListAppendOp(*doc.next_stamp(), value=value))

    def map_set(self, doc: ReferenceDocument, key: str, value: Any) -> None:
        doc.apply(MapSetOp(*doc.next_stamp(), key=key, value=value))

    def tree_create_node(
        self, doc: ReferenceDocument, parent: NodeId | None = None
    ) -> NodeId:
        op = TreeCreateOp(*doc.next_stamp(), parent=parent)
        doc.apply(op)
        return (op.client, op.seq)

    def export_update(self, doc: ReferenceDocument) -> bytes:
        return _encode(doc.ops)

    def import_update(self, doc: ReferenceDocument, update: bytes) -> None:
        for op in _decode(update):
            doc.apply(op)
