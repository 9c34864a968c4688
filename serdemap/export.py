"""Render a DependencyGraph as a draw.io CSV import or a KGLite graph."""

from __future__ import annotations

from collections import defaultdict

import pandas as pd

from .graph import DependencyGraph
from .model import TypeKind

_NODE_TYPES = {TypeKind.STRUCT: "Struct", TypeKind.ENUM: "Enum"}

_STYLE = "shape=%shape%;rounded=1;fillColor={fill};strokeColor={stroke};strokeWidth=2"
_COLORS = {
    "red": ("#f8cecc", "#b85450"),
    "green": ("#d5e8d4", "#82b366"),
    "blue": ("#dae8fc", "#6c8ebf"),
    "yellow": ("#fff2cc", "#d6b656"),
    "white": ("#ffffff", "#000000"),
}

LEGEND = (
    '<b>LEGEND<br><br>'
    '<b style="color:#d5e8d4;">Green:</b> #[derive(Deserialize, Serialize)]<br>'
    '<b style="color:#dae8fc;">Blue:</b> #[serde(try_from = "", into = "")]<br>'
    '<b style="color:#fff2cc;">Yellow:</b> impl Deserialize/Serialize for my_struct {}<br>'
    '<b style="color:#ffffff;">White:</b> No serialization<br><br>'
    'Gradient color: asymmetric serialization<br>'
    'Red: invalid combination of features<br>'
    'Rounded rectangle: struct<br>'
    'Ellipse: enum</b>'
)


def _styles() -> list[str]:
    styles = []
    for name, (fill, stroke) in _COLORS.items():
        styles.append(f'"{name}": "{_STYLE.format(fill=fill, stroke=stroke)}"')
    for name in ("green", "blue", "yellow"):
        fill, stroke = _COLORS[name]
        style = _STYLE.format(fill=fill, stroke=stroke)
        styles.append(f'"{name}_gradient": "{style};gradientColor=#ffffff"')
    styles.append(
        '"legend": "shape=%shape%;rounded=1;shadow=1;fontSize=16;align=left;'
        'whiteSpace=wrap;html=1;fillColor=#d0cee2;strokeWidth=2;strokeColor=#56517e;"'
    )
    return styles


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def drawio_header(title: str = "Public JSON-serializable structures",
                  namespace: str = "serdemap-") -> str:
    """The commented configuration block draw.io reads before the CSV rows."""
    lines = [
        f"## {title} - draw.io CSV export",
        "# label: %name%",
        "# stylename: color",
        "# styles: { \\",
    ]
    styles = _styles()
    for i, style in enumerate(styles):
        sep = "," if i < len(styles) - 1 else ""
        lines.append(f"#            {style}{sep}\\")
    lines += [
        "# }",
        '# connect: {"from":"refs", "to":"name", "invert":false, '
        '"style":"curved=1;endArrow=blockThin;endFill=1;"}',
        '# connect: {"from":"refs2", "to":"name", "invert":false, '
        '"style":"curved=1;endArrow=blockThin;endFill=1;dashed=1;'
        'dashPattern=1 4;strokeColor=none;"}',
        f"# namespace: {namespace}",
        "# width: auto",
        "# height: auto",
        "# padding: 10",
        "# ignore: refs,refs2",
        "# nodespacing: 60",
        "# levelspacing: 60",
        "# edgespacing: 60",
        "# layout: horizontalflow",
        "name,shape,color,refs,refs2",
        f"{_quote(LEGEND)},rectangle,legend,",
    ]
    return "\n".join(lines)


def to_drawio_csv(graph: DependencyGraph, *, header: bool = True,
                  title: str = "Public JSON-serializable structures",
                  namespace: str = "serdemap-") -> str:
    """Render the graph in draw.io's CSV import format.

    One row per node: ``identifier,shape,category,"strong refs","weak refs"``.
    Strong references are drawn as solid arrows, weak ones dotted.
    Set ``header=False`` to concatenate several outputs.
    """
    out = []
    if header:
        out.append(drawio_header(title, namespace))
    for node in graph.nodes:
        out.append(",".join([
            node.identifier,
            node.kind.shape,
            node.category.value,
            _quote(",".join(node.strong)),
            _quote(",".join(node.weak)),
        ]))
    return "\n".join(out) + "\n"


def to_knowledge_graph(graph: DependencyGraph):
    """Load the classified types into a KGLite knowledge graph.

    Nodes are ``Struct`` and ``Enum`` with ``category`` and ``shape``
    properties; edges are ``DEPENDS_ON`` with a ``strength`` property.
    Requires ``pip install serdemap[kglite]``.
    """
    try:
        import kglite
    except ImportError:
        raise ImportError(
            "to_knowledge_graph requires kglite. "
            "Install with: pip install serdemap[kglite]"
        ) from None

    kg = kglite.KnowledgeGraph()
    nodes_df = graph.to_dataframe()
    node_type_of = {n.identifier: _NODE_TYPES[n.kind] for n in graph.nodes}

    for kind, node_type in _NODE_TYPES.items():
        subset = nodes_df[nodes_df["kind"] == kind.value]
        if len(subset) > 0:
            kg.add_nodes(data=subset.reset_index(drop=True), node_type=node_type,
                         unique_id_field="identifier", node_title_field="name")

    edges_df = graph.edges_dataframe()
    # Targets outside the rendered node set (e.g. non-public types) have no node.
    groups: dict[tuple[str, str], list] = defaultdict(list)
    for _, row in edges_df.iterrows():
        src_nt = node_type_of.get(row["source"])
        tgt_nt = node_type_of.get(row["target"])
        if src_nt is None or tgt_nt is None:
            continue
        groups[(src_nt, tgt_nt)].append(row.to_dict())

    for (src_nt, tgt_nt), rows in sorted(groups.items()):
        kg.add_connections(
            data=pd.DataFrame(rows), connection_type="DEPENDS_ON",
            source_type=src_nt, source_id_field="source",
            target_type=tgt_nt, target_id_field="target",
            columns=["strength"],
        )
    return kg
