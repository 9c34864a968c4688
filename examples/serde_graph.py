#!/usr/bin/env python3
"""
Map serde serialization of a Rust crate and load it into a KGLite graph.

Usage:
    python serde_graph.py [src_directory] [output.csv]

Dependencies:
    pip install serdemap[kglite]
"""

import sys
from pathlib import Path

from serdemap import TENDERMINT, build_graph, to_drawio_csv, to_knowledge_graph
from serdemap.extract import build_registry


def main():
    src = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("src")
    out = Path(sys.argv[2]) if len(sys.argv) > 2 else Path("serde_graph.csv")

    registry = build_registry(src, verbose=True)
    graph = build_graph(registry, TENDERMINT)

    if graph.errors:
        print(f"\n  {len(graph.errors)} error(s):")
        for err in graph.errors:
            print(f"    [{err.source}] {err.reference}")

    out.write_text(to_drawio_csv(graph))
    print(f"Wrote {len(graph.nodes)} types to {out}")

    df = graph.to_dataframe()
    print("\nTypes per category:")
    print(df.groupby("category").size().sort_values(ascending=False).to_string())

    kg = to_knowledge_graph(graph)
    print(f"\nKnowledge graph: {kg.type_filter('Struct').node_count()} structs, "
          f"{kg.type_filter('Enum').node_count()} enums")


if __name__ == "__main__":
    main()
