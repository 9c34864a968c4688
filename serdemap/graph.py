"""Classify every public type and link it to the types its fields reference."""

from __future__ import annotations

from dataclasses import dataclass, field

import pandas as pd

from .classify import classify
from .errors import UnresolvedReferenceError, UnresolvedReferencesError
from .model import Category, Edge, EdgeStrength, TypeKind
from .registry import TypeRegistry
from .resolver import ReferenceResolver
from .rules import ExceptionTable


@dataclass
class TypeNode:
    """Everything a renderer needs about one public type."""
    identifier: str
    kind: TypeKind
    category: Category
    strong: list[str] = field(default_factory=list)
    weak: list[str] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.identifier.rsplit("::", 1)[-1]


@dataclass
class DependencyGraph:
    nodes: list[TypeNode] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)
    errors: list[UnresolvedReferenceError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def raise_for_errors(self) -> None:
        if self.errors:
            raise UnresolvedReferencesError(self.errors)

    def to_dataframe(self) -> pd.DataFrame:
        """One row per node: identifier, name, kind, shape, category, refs."""
        columns = ["identifier", "name", "kind", "shape", "category",
                   "strong_refs", "weak_refs"]
        rows = [{
            "identifier": n.identifier,
            "name": n.name,
            "kind": n.kind.value,
            "shape": n.kind.shape,
            "category": n.category.value,
            "strong_refs": ",".join(n.strong),
            "weak_refs": ",".join(n.weak),
        } for n in self.nodes]
        return pd.DataFrame(rows, columns=columns)

    def edges_dataframe(self) -> pd.DataFrame:
        columns = ["source", "target", "strength"]
        rows = [{"source": e.source, "target": e.target,
                 "strength": e.strength.value} for e in self.edges]
        return pd.DataFrame(rows, columns=columns)


class GraphBuilder:
    """Run the classifier and resolver over a frozen registry.

    Unresolved references are collected on the result unless ``fail_fast``
    is set, in which case the first one is raised.
    """

    def __init__(self, registry: TypeRegistry,
                 exceptions: ExceptionTable | None = None, *,
                 fail_fast: bool = False, verbose: bool = False):
        if not registry.frozen:
            registry.freeze()
        self.registry = registry
        self.resolver = ReferenceResolver(registry, exceptions)
        self.fail_fast = fail_fast
        self.verbose = verbose

    def build(self, *, only_serializable: bool = False) -> DependencyGraph:
        """Build the dependency graph.

        Args:
            only_serializable: Leave out ``white`` types and weak edges.

        Returns:
            A DependencyGraph with nodes sorted by identifier and edges
            sorted by (source, target).
        """
        graph = DependencyGraph()
        edges: set[Edge] = set()
        for identifier, record in self.registry.public_items():
            category = classify(record)
            if only_serializable and category is Category.WHITE:
                continue
            node = TypeNode(identifier, record.kind, category)
            strength = (EdgeStrength.STRONG if category.is_derived
                        else EdgeStrength.WEAK)
            targets = node.strong if strength is EdgeStrength.STRONG else node.weak
            for reference in record.field_references:
                try:
                    target, rule = self.resolver.explain(identifier, reference)
                except UnresolvedReferenceError as e:
                    if self.fail_fast:
                        raise
                    graph.errors.append(e)
                    continue
                if self.verbose:
                    print(f"  {identifier}: {reference} -> {target or '-'} ({rule})")
                if target is None or target in targets:
                    continue
                if only_serializable and strength is EdgeStrength.WEAK:
                    continue
                targets.append(target)
                edges.add(Edge(identifier, target, strength))
            graph.nodes.append(node)

        graph.edges = sorted(edges)
        if self.verbose:
            print(f"Graph: {len(graph.nodes)} public types, "
                  f"{len(graph.edges)} edges, "
                  f"{len(graph.errors)} unresolved reference(s)")
        return graph


def build_graph(registry: TypeRegistry,
                exceptions: ExceptionTable | None = None, *,
                only_serializable: bool = False,
                fail_fast: bool = False,
                verbose: bool = False) -> DependencyGraph:
    """Convenience wrapper around :class:`GraphBuilder`."""
    builder = GraphBuilder(registry, exceptions,
                           fail_fast=fail_fast, verbose=verbose)
    return builder.build(only_serializable=only_serializable)
