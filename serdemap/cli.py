"""Command line entry point.

Usage::

    serdemap path/to/crate/src -o graph.csv
"""

from __future__ import annotations

import argparse
import contextlib
import sys
from pathlib import Path

from .errors import UnresolvedReferenceError
from .export import to_drawio_csv
from .graph import build_graph
from .rules import PRESETS, load_exception_table


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="serdemap",
        description="Map serde serialization and type dependencies of a Rust crate.",
    )
    parser.add_argument(
        "source_directory",
        type=Path,
        help="Rust source directory (or a single .rs file)",
    )
    parser.add_argument(
        "-n", "--no-header",
        action="store_true",
        help="Omit the draw.io CSV header, useful when concatenating outputs",
    )
    parser.add_argument(
        "-j", "--json",
        action="store_true",
        help="Only print serializable types and strong dependency links",
    )
    parser.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help="Output file (default: stdout)",
    )
    parser.add_argument(
        "--preset",
        choices=sorted(PRESETS),
        default="tendermint",
        help="Built-in exception table (default: tendermint)",
    )
    parser.add_argument(
        "--exceptions",
        type=Path,
        default=None,
        help="JSON exception table, applied after the preset",
    )
    parser.add_argument(
        "--fail-fast",
        action="store_true",
        help="Abort on the first unresolved field reference",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Print progress information to stderr",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    from .extract import build_registry

    exceptions = PRESETS[args.preset]
    if args.exceptions is not None:
        exceptions = exceptions.merge(load_exception_table(args.exceptions))

    # progress output goes to stderr so it never mixes with the CSV
    with contextlib.redirect_stdout(sys.stderr):
        registry = build_registry(args.source_directory, verbose=args.verbose)
        try:
            graph = build_graph(registry, exceptions,
                                only_serializable=args.json,
                                fail_fast=args.fail_fast,
                                verbose=args.verbose)
        except UnresolvedReferenceError as e:
            print(f"error: {e}", file=sys.stderr)
            return 1

    csv = to_drawio_csv(graph, header=not args.no_header)
    if args.output is not None:
        args.output.write_text(csv)
    else:
        sys.stdout.write(csv)

    if graph.errors:
        print(f"\n  {len(graph.errors)} error(s):", file=sys.stderr)
        for err in graph.errors:
            print(f"    [{err.source}] unresolved field reference {err.reference}",
                  file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
