"""Default benchmark catalogue.

Every operation is written once against ``DocumentAdapter`` and registered
for each adapter. Builders copy the configuration values they need into
locals before returning the executable.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from crdt_bench.adapters import DocumentAdapter, available_adapters
from crdt_bench.harness import Executable
from crdt_bench.suite.config import SuiteConfig
from crdt_bench.suite.registry import TaskRegistry

TEXT_INSERT = "Text Insert"
LIST_OPERATIONS = "List Operations"
MAP_OPERATIONS = "Map Operations"
MAP_CONCURRENT_SAME_ENTRY = "Map Concurrent Same Entry"
TREE_OPERATIONS = "Tree Operations"
SIMPLE_SYNC = "Simple Sync"
CONCURRENT_SYNC = "Concurrent Sync"


def text_insert(adapter: DocumentAdapter, config: SuiteConfig) -> Executable:
    op_size = config.op_size

    def run() -> None:
        doc = adapter.new_document()
        for _ in range(op_size):
            adapter.text_insert(doc, 0, "a")

    return run


def list_operations(adapter: DocumentAdapter, config: SuiteConfig) -> Executable:
    op_size = config.op_size

    def run() -> None:
        doc = adapter.new_document()
        for i in range(op_size):
            adapter.list_append(doc, i)

    return run


def map_operations(adapter: DocumentAdapter, config: SuiteConfig) -> Executable:
    op_size = config.op_size

    def run() -> None:
        doc = adapter.new_document()
        for i in range(op_size):
            adapter.map_set(doc, f"key{i}", i)

    return run


def map_concurrent_same_entry(
    adapter: DocumentAdapter, config: SuiteConfig
) -> Executable:
    op_size = config.op_size

    def run() -> None:
        doc = adapter.new_document()
        adapter.map_set(doc, "key", 0)

        replicas = []
        for _ in range(op_size):
            replica = adapter.new_document()
            adapter.map_set(replica, "key", 0)
            replicas.append(replica)

        for i, replica in enumerate(replicas):
            adapter.map_set(replica, "key", i + 1)

        adapter.import_batch(doc, [adapter.export_update(r) for r in replicas])

    return run


def tree_operations(adapter: DocumentAdapter, config: SuiteConfig) -> Executable:
    op_size = config.op_size

    def run() -> None:
        doc = adapter.new_document()
        root = adapter.tree_create_node(doc)
        for i in range(op_size):
            node = adapter.tree_create_node(doc, root)
            if i % 10 == 0:
                adapter.tree_create_node(doc, node)

    return run


def simple_sync(adapter: DocumentAdapter, config: SuiteConfig) -> Executable:
    iterations = config.sync_iterations

    def run() -> None:
        for _ in range(iterations):
            doc1 = adapter.new_document()
            doc2 = adapter.new_document()
            adapter.text_insert(doc1, 0, "Hello")
            adapter.import_update(doc2, adapter.export_update(doc1))

    return run


def concurrent_sync(adapter: DocumentAdapter, config: SuiteConfig) -> Executable:
    iterations = config.sync_iterations
    num_docs = config.sync_concurrent_docs
    num_ops = config.sync_concurrent_ops

    def run() -> None:
        for _ in range(iterations):
            docs = [adapter.new_document() for _ in range(num_docs)]
            for idx, doc in enumerate(docs):
                for j in range(num_ops):
                    adapter.text_insert(doc, j, f"Doc{idx}-Change{j}")

            for j, source in enumerate(docs):
                for k, target in enumerate(docs):
                    if j != k:
                        adapter.import_update(target, adapter.export_update(source))

    return run


@dataclass(frozen=True)
class CatalogueEntry:
    operation: str
    builder: Callable[[DocumentAdapter, SuiteConfig], Executable]
    code_template: str
    requires_tree: bool = False


CATALOGUE: tuple[CatalogueEntry, ...] = (
    CatalogueEntry(
        TEXT_INSERT,
        text_insert,
        """
doc = adapter.new_document()
for i in range(OP_SIZE):
    adapter.text_insert(doc, 0, "a")""",
    ),
    CatalogueEntry(
        LIST_OPERATIONS,
        list_operations,
        """
doc = adapter.new_document()
for i in range(OP_SIZE):
    adapter.list_append(doc, i)""",
    ),
    CatalogueEntry(
        MAP_OPERATIONS,
        map_operations,
        """
doc = adapter.new_document()
for i in range(OP_SIZE):
    adapter.map_set(doc, f"key{i}", i)""",
    ),
    CatalogueEntry(
        MAP_CONCURRENT_SAME_ENTRY,
        map_concurrent_same_entry,
        """
doc = adapter.new_document()
adapter.map_set(doc, "key", 0)

# OP_SIZE replicas starting from the same value
replicas = []
for _ in range(OP_SIZE):
    replica = adapter.new_document()
    adapter.map_set(replica, "key", 0)
    replicas.append(replica)

# every replica writes the same entry
for i, replica in enumerate(replicas):
    adapter.map_set(replica, "key", i + 1)

# merge everything back into the original
adapter.import_batch(doc, [adapter.export_update(r) for r in replicas])""",
    ),
    CatalogueEntry(
        TREE_OPERATIONS,
        tree_operations,
        """
doc = adapter.new_document()
root = adapter.tree_create_node(doc)
for i in range(OP_SIZE):
    node = adapter.tree_create_node(doc, root)
    if i % 10 == 0:
        adapter.tree_create_node(doc, node)""",
        requires_tree=True,
    ),
    CatalogueEntry(
        SIMPLE_SYNC,
        simple_sync,
        """
for _ in range(SYNC_ITERATIONS):
    doc1 = adapter.new_document()
    doc2 = adapter.new_document()
    adapter.text_insert(doc1, 0, "Hello")
    adapter.import_update(doc2, adapter.export_update(doc1))""",
    ),
    CatalogueEntry(
        CONCURRENT_SYNC,
        concurrent_sync,
        """
for _ in range(SYNC_ITERATIONS):
    docs = [adapter.new_document() for _ in range(SYNC_CONCURRENT_DOCS)]
    for idx, doc in enumerate(docs):
        for j in range(SYNC_CONCURRENT_OPS):
            adapter.text_insert(doc, j, f"Doc{idx}-Change{j}")

    # full mesh exchange
    for j, source in enumerate(docs):
        for k, target in enumerate(docs):
            if j != k:
                adapter.import_update(target, adapter.export_update(source))""",
    ),
)


def register_adapter(registry: TaskRegistry, adapter: DocumentAdapter) -> None:
    """Register every supported catalogue entry for one adapter."""
    for entry in CATALOGUE:
        if entry.requires_tree and not adapter.supports_tree:
            continue
        registry.add(
            adapter.name,
            entry.operation,
            lambda config, entry=entry: entry.builder(adapter, config),
            entry.code_template,
        )


def build_default_registry(
    adapters: Sequence[DocumentAdapter] | None = None,
) -> TaskRegistry:
    """Registry of the full catalogue for the given (or all available) adapters."""
    registry = TaskRegistry()
    for adapter in adapters if adapters is not None else available_adapters():
        register_adapter(registry, adapter)
    return registry
