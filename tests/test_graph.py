"""Tests for graph building: edge strength, ordering and error collection."""

import random

import pytest

from serdemap import (
    Category, Edge, EdgeStrength, GraphBuilder, TENDERMINT, TypeKind,
    TypeRegistry, UnresolvedReferenceError, UnresolvedReferencesError,
    build_graph,
)


def _decl(registry, identifier, *refs, public=True, ser=True, de=True, **facts):
    registry.add_declaration(identifier, facts.pop("kind", TypeKind.STRUCT),
                             is_public=public, derives_serialize=ser,
                             derives_deserialize=de, field_references=refs, **facts)


class TestEndToEnd:
    def test_foo_bar(self, foo_bar_registry):
        graph = build_graph(foo_bar_registry)
        assert graph.ok
        categories = {n.identifier: n.category for n in graph.nodes}
        assert categories == {"pkg::Bar": Category.GREEN, "pkg::Foo": Category.GREEN}
        assert graph.edges == [Edge("pkg::Foo", "pkg::Bar", EdgeStrength.STRONG)]
        foo = next(n for n in graph.nodes if n.identifier == "pkg::Foo")
        assert foo.strong == ["pkg::Bar"] and foo.weak == []

    def test_unresolvable_field(self):
        registry = TypeRegistry()
        _decl(registry, "x::Thing", "Id", de=False)
        graph = build_graph(registry)
        assert not graph.ok
        [err] = graph.errors
        assert (err.source, err.reference) == ("x::Thing", "Id")
        [node] = graph.nodes
        assert node.category is Category.GREEN_GRADIENT
        with pytest.raises(UnresolvedReferencesError) as exc:
            graph.raise_for_errors()
        assert "[x::Thing] Id" in str(exc.value)

    def test_fail_fast(self):
        registry = TypeRegistry()
        _decl(registry, "x::Thing", "Id")
        with pytest.raises(UnresolvedReferenceError) as exc:
            build_graph(registry, fail_fast=True)
        assert exc.value.source == "x::Thing"

    def test_block_fixture(self, block_registry):
        graph = build_graph(block_registry)
        assert graph.ok
        by_id = {n.identifier: n for n in graph.nodes}
        assert by_id["block/height::Height"].category is Category.YELLOW
        assert by_id["block::Block"].strong == [
            "block/header::Header", "block/commit::Commit", "block::Data",
        ]
        assert by_id["block/commit::Commit"].strong == [
            "block/height::Height", "block::Id",
        ]


class TestStrength:
    def test_weak_when_source_not_derived(self):
        registry = TypeRegistry()
        _decl(registry, "a::Raw", "a::Inner", ser=False, de=False)
        registry.add_implementation("a::Raw", "Serialize")
        _decl(registry, "a::Inner")
        graph = build_graph(registry)
        assert graph.edges == [Edge("a::Raw", "a::Inner", EdgeStrength.WEAK)]
        raw = graph.nodes[1]
        assert raw.identifier == "a::Raw"
        assert raw.category is Category.YELLOW_GRADIENT
        assert raw.weak == ["a::Inner"] and raw.strong == []

    def test_gradient_source_is_strong(self):
        registry = TypeRegistry()
        _decl(registry, "a::Out", "Inner", de=False)
        _decl(registry, "a::Inner")
        graph = build_graph(registry)
        assert graph.edges[0].strength is EdgeStrength.STRONG

    def test_private_types_not_nodes_but_targets(self):
        registry = TypeRegistry()
        _decl(registry, "a::Pub", "Hidden")
        _decl(registry, "a::Hidden", "Missing", public=False)
        graph = build_graph(registry)
        assert graph.ok
        assert [n.identifier for n in graph.nodes] == ["a::Pub"]
        assert graph.edges == [Edge("a::Pub", "a::Hidden", EdgeStrength.STRONG)]


class TestOptions:
    def test_only_serializable(self):
        registry = TypeRegistry()
        _decl(registry, "a::Plain", "a::Green", ser=False, de=False)
        _decl(registry, "a::Custom", "a::Green", ser=False, de=False)
        registry.add_implementation("a::Custom", "Serialize")
        registry.add_implementation("a::Custom", "Deserialize")
        _decl(registry, "a::Green", "a::Leaf")
        _decl(registry, "a::Leaf")
        graph = build_graph(registry, only_serializable=True)
        ids = [n.identifier for n in graph.nodes]
        assert "a::Plain" not in ids
        assert "a::Custom" in ids
        assert all(e.strength is EdgeStrength.STRONG for e in graph.edges)
        assert graph.edges == [Edge("a::Green", "a::Leaf", EdgeStrength.STRONG)]

    def test_skip_rule_drops_reference(self):
        registry = TypeRegistry()
        _decl(registry, "time::Time", "Utc", "DateTime", ser=True, de=True)
        graph = build_graph(registry, TENDERMINT)
        assert graph.ok
        assert graph.edges == []

    def test_builder_freezes_registry(self):
        registry = TypeRegistry()
        _decl(registry, "a::A")
        GraphBuilder(registry)
        assert registry.frozen

    def test_verbose(self, foo_bar_registry, capsys):
        build_graph(foo_bar_registry, verbose=True)
        out = capsys.readouterr().out
        assert "pkg::Foo: pkg::Bar -> pkg::Bar (exact)" in out
        assert "2 public types, 1 edges" in out


class TestDeterminism:
    def _registry(self, order):
        registry = TypeRegistry()
        decls = {
            "m::A": ("B", "m::C"),
            "m::B": ("C",),
            "m::C": (),
            "n::D": ("m::A", "m::B"),
        }
        for identifier in order:
            _decl(registry, identifier, *decls[identifier])
        return registry.freeze()

    def test_same_output_regardless_of_insertion_order(self):
        names = ["m::A", "m::B", "m::C", "n::D"]
        baseline = build_graph(self._registry(names))
        rng = random.Random(7)
        for _ in range(5):
            shuffled = names[:]
            rng.shuffle(shuffled)
            graph = build_graph(self._registry(shuffled))
            assert graph.edges == baseline.edges
            assert [n.identifier for n in graph.nodes] == \
                [n.identifier for n in baseline.nodes]

    def test_edges_sorted(self):
        graph = build_graph(self._registry(["n::D", "m::C", "m::B", "m::A"]))
        pairs = [(e.source, e.target) for e in graph.edges]
        assert pairs == sorted(pairs)
        assert build_graph(self._registry(["m::A", "m::B", "m::C", "n::D"])).edges \
            == graph.edges

    def test_duplicate_targets_collapsed(self):
        registry = TypeRegistry()
        _decl(registry, "a::A", "B", "a::B")
        _decl(registry, "a::B")
        graph = build_graph(registry)
        assert graph.nodes[0].strong == ["a::B"]
        assert len(graph.edges) == 1


class TestDataFrames:
    def test_nodes_frame(self, foo_bar_registry):
        df = build_graph(foo_bar_registry).to_dataframe()
        assert list(df["identifier"]) == ["pkg::Bar", "pkg::Foo"]
        assert list(df["shape"]) == ["rectangle", "rectangle"]
        assert df.loc[df["identifier"] == "pkg::Foo", "strong_refs"].iloc[0] == "pkg::Bar"

    def test_edges_frame(self, foo_bar_registry):
        df = build_graph(foo_bar_registry).edges_dataframe()
        assert df.to_dict("records") == [
            {"source": "pkg::Foo", "target": "pkg::Bar", "strength": "strong"},
        ]

    def test_empty_frames_have_columns(self):
        graph = build_graph(TypeRegistry())
        assert list(graph.to_dataframe().columns)[:2] == ["identifier", "name"]
        assert list(graph.edges_dataframe().columns) == ["source", "target", "strength"]
