"""Tests for the draw.io CSV renderer and the KGLite export."""

import pytest

from serdemap import TypeKind, TypeRegistry, build_graph, to_drawio_csv
from serdemap.export import LEGEND, drawio_header


@pytest.fixture
def mixed_graph():
    registry = TypeRegistry()
    registry.add_declaration("a::Msg", TypeKind.ENUM, is_public=True,
                             derives_serialize=True, derives_deserialize=True,
                             field_references=["Body", "Raw"])
    registry.add_declaration("a::Body", TypeKind.STRUCT, is_public=True)
    registry.add_declaration("a::Raw", TypeKind.STRUCT, is_public=True,
                             field_references=["a::Body"])
    registry.add_implementation("a::Raw", "Serialize")
    return build_graph(registry)


class TestDrawioCsv:
    def test_rows(self, mixed_graph):
        csv = to_drawio_csv(mixed_graph, header=False)
        assert csv.splitlines() == [
            'a::Body,rectangle,white,"",""',
            'a::Msg,ellipse,green,"a::Body,a::Raw",""',
            'a::Raw,rectangle,yellow_gradient,"","a::Body"',
        ]

    def test_header(self, mixed_graph):
        csv = to_drawio_csv(mixed_graph, title="Demo", namespace="demo-")
        lines = csv.splitlines()
        assert lines[0] == "## Demo - draw.io CSV export"
        assert "# namespace: demo-" in lines
        assert "name,shape,color,refs,refs2" in lines
        assert lines[-4].endswith(",rectangle,legend,")
        assert lines[-3].startswith("a::Body,")

    def test_header_styles_cover_all_categories(self):
        header = drawio_header()
        for name in ("red", "white", "green", "green_gradient", "blue",
                     "blue_gradient", "yellow", "yellow_gradient", "legend"):
            assert f'"{name}": "' in header

    def test_legend_quotes_escaped(self):
        header = drawio_header()
        assert '<b style=\\"color:#d5e8d4;\\">Green:</b>' in header
        assert LEGEND.startswith("<b>LEGEND")


class TestKnowledgeGraph:
    def test_load(self, mixed_graph):
        pytest.importorskip("kglite")
        from serdemap import to_knowledge_graph

        kg = to_knowledge_graph(mixed_graph)
        assert kg.type_filter("Struct").node_count() == 2
        assert kg.type_filter("Enum").node_count() == 1
