"""serdemap - classify serde behaviour of Rust types and map their dependencies.

Usage::

    from serdemap import build_graph, to_drawio_csv
    from serdemap.extract import build_registry

    registry = build_registry("/path/to/crate/src")
    graph = build_graph(registry)
    print(to_drawio_csv(graph))
"""

__version__ = "0.1.0"

from .model import TypeKind, Category, EdgeStrength, TypeRecord, Edge
from .errors import (
    SerdeMapError, DecompositionError, UnresolvedReferenceError,
    UnresolvedReferencesError, RegistryFrozenError, ExceptionTableError,
)
from .registry import TypeRegistry
from .classify import classify, classify_facts
from .paths import PathParts, decompose, split_reference, camelcase_to_snakecase
from .rules import (
    ExceptionTable, DomainPrefixRule, NamedPairRule, SkipRule,
    PRESETS, TENDERMINT, load_exception_table,
)
from .resolver import ReferenceResolver
from .graph import GraphBuilder, DependencyGraph, TypeNode, build_graph
from .export import to_drawio_csv, to_knowledge_graph

__all__ = [
    "__version__",
    "TypeKind", "Category", "EdgeStrength", "TypeRecord", "Edge",
    "SerdeMapError", "DecompositionError", "UnresolvedReferenceError",
    "UnresolvedReferencesError", "RegistryFrozenError", "ExceptionTableError",
    "TypeRegistry",
    "classify", "classify_facts",
    "PathParts", "decompose", "split_reference", "camelcase_to_snakecase",
    "ExceptionTable", "DomainPrefixRule", "NamedPairRule", "SkipRule",
    "PRESETS", "TENDERMINT", "load_exception_table",
    "ReferenceResolver",
    "GraphBuilder", "DependencyGraph", "TypeNode", "build_graph",
    "to_drawio_csv", "to_knowledge_graph",
]
