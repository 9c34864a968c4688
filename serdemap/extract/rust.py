"""Rust type extractor using tree-sitter-rust."""

from __future__ import annotations

from pathlib import Path
from typing import Union

from tree_sitter import Language, Parser
import tree_sitter_rust as ts_rust

from ..model import TypeKind
from ..registry import DESERIALIZE_TRAIT, SERIALIZE_TRAIT, TypeRegistry
from .base import STRIPPED_TYPE_NAMES, compact_text, node_text
from .models import (
    ExtractResult, ImplementationSighting, RustAttribute, TypeDeclaration,
)

RUST_LANGUAGE = Language(ts_rust.language())

_SERDE_TRAITS = frozenset({SERIALIZE_TRAIT, DESERIALIZE_TRAIT})
_COMMENTS = ("line_comment", "block_comment")
# Type nodes whose single "type" child is looked through.
_WRAPPER_TYPES = ("reference_type", "pointer_type")


class RustTypeExtractor:
    """Collect struct/enum declarations and serde impl blocks from Rust files.

    Only top-level items are looked at. Identifiers are built from the file
    path relative to the scanned root: ``src/block/header.rs`` scanned from
    ``src`` gives ``block/header::Header``.
    """

    def __init__(self):
        self._parser = Parser(RUST_LANGUAGE)

    # ── Helpers ─────────────────────────────────────────────────────────

    def _get_visibility(self, node, source: bytes) -> str:
        for child in node.children:
            if child.type == "visibility_modifier":
                return compact_text(child, source)
        return "private"

    def _parse_attribute(self, node, source: bytes) -> RustAttribute | None:
        """Turn an ``attribute_item`` node into a RustAttribute."""
        attr = next((c for c in node.children if c.type == "attribute"), None)
        if attr is None:
            return None
        path = None
        idents: set[str] = set()
        for child in attr.children:
            if path is None and child.type in ("identifier", "scoped_identifier"):
                path = compact_text(child, source)
            elif child.type == "token_tree":
                idents.update(
                    node_text(tok, source) for tok in child.children
                    if tok.type == "identifier"
                )
        if path is None:
            return None
        return RustAttribute(path=path, idents=frozenset(idents))

    def _get_attributes(self, node, source: bytes) -> list[RustAttribute]:
        """Walk backward through siblings to collect #[...] attributes."""
        attrs = []
        sibling = node.prev_named_sibling
        while sibling is not None:
            if sibling.type == "attribute_item":
                parsed = self._parse_attribute(sibling, source)
                if parsed is not None:
                    attrs.insert(0, parsed)
            elif sibling.type not in _COMMENTS:
                break
            sibling = sibling.prev_named_sibling
        return attrs

    def _type_name(self, node, source: bytes) -> str | None:
        """Short name of a path in an impl header (``serde::Serialize`` -> ``Serialize``)."""
        if node is None:
            return None
        if node.type == "type_identifier":
            return node_text(node, source)
        if node.type == "generic_type":
            return self._type_name(node.child_by_field_name("type"), source)
        if node.type in ("scoped_type_identifier", "scoped_identifier"):
            return self._type_name(node.child_by_field_name("name"), source)
        return None

    def type_references(self, node, source: bytes) -> list[str]:
        """Type names mentioned by a type node, wrappers stripped.

        Generic arguments come before the type that carries them, so
        ``Vec<block::Id>`` gives ``["block::Id"]`` and ``Foo<Bar>`` gives
        ``["Bar", "Foo"]``. Function types contribute their return type;
        trait objects contribute nothing.
        """
        if node is None:
            return []
        t = node.type
        if t in ("type_identifier", "scoped_type_identifier", "scoped_identifier"):
            name = compact_text(node, source)
            return [] if name in STRIPPED_TYPE_NAMES else [name]
        if t == "generic_type":
            refs = []
            args = node.child_by_field_name("type_arguments")
            if args is not None:
                for arg in args.named_children:
                    if arg.type == "type_binding":
                        arg = arg.child_by_field_name("type")
                    refs.extend(self.type_references(arg, source))
            refs.extend(self.type_references(node.child_by_field_name("type"), source))
            return refs
        if t in _WRAPPER_TYPES:
            return self.type_references(node.child_by_field_name("type"), source)
        if t == "array_type":
            return self.type_references(node.child_by_field_name("element"), source)
        if t == "tuple_type":
            return [r for c in node.named_children
                    for r in self.type_references(c, source)]
        if t == "function_type":
            return self.type_references(node.child_by_field_name("return_type"), source)
        return []

    def _extract_fields(self, body, source: bytes) -> tuple[list[str], bool]:
        """Field type references and whether any field has #[serde(...)].

        Handles both ``{ name: Type }`` and ``(Type, Type)`` field lists.
        """
        refs: list[str] = []
        custom = False
        pending: list[RustAttribute] = []
        for child in body.named_children:
            if child.type == "attribute_item":
                parsed = self._parse_attribute(child, source)
                if parsed is not None:
                    pending.append(parsed)
                continue
            if child.type in _COMMENTS or child.type == "visibility_modifier":
                continue
            if child.type == "field_declaration":
                type_node = child.child_by_field_name("type")
            else:
                type_node = child
            if any(a.path == "serde" for a in pending):
                custom = True
            pending = []
            if type_node is not None:
                for ref in self.type_references(type_node, source):
                    if ref not in refs:
                        refs.append(ref)
        return refs, custom

    # ── Parsing ─────────────────────────────────────────────────────────

    def _parse_declaration(self, node, source: bytes, module_path: str,
                           rel_path: str, kind: TypeKind) -> TypeDeclaration | None:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return None
        decl = TypeDeclaration(
            identifier=f"{module_path}::{node_text(name_node, source)}",
            kind=kind,
            visibility=self._get_visibility(node, source),
            file_path=rel_path,
            line_number=node.start_point[0] + 1,
            attributes=self._get_attributes(node, source),
        )
        body = node.child_by_field_name("body")
        if body is None:
            return decl
        if kind is TypeKind.STRUCT:
            bodies = [body]
        else:
            bodies = [v.child_by_field_name("body") for v in body.named_children
                      if v.type == "enum_variant"]
        for b in bodies:
            if b is None:
                continue
            refs, custom = self._extract_fields(b, source)
            for ref in refs:
                if ref not in decl.field_references:
                    decl.field_references.append(ref)
            decl.has_custom_field_annotation = decl.has_custom_field_annotation or custom
        return decl

    def _parse_impl(self, node, source: bytes, module_path: str,
                    rel_path: str) -> ImplementationSighting | None:
        trait = self._type_name(node.child_by_field_name("trait"), source)
        if trait not in _SERDE_TRAITS:
            return None
        # Last non-stripped name, so ``impl Serialize for Vec<W>`` credits W.
        names = self.type_references(node.child_by_field_name("type"), source)
        if not names:
            return None
        self_type = names[-1].rsplit("::", 1)[-1]
        return ImplementationSighting(
            identifier=f"{module_path}::{self_type}",
            trait=trait,
            file_path=rel_path,
            line_number=node.start_point[0] + 1,
        )

    def parse_source(self, source: Union[bytes, str], module_path: str,
                     rel_path: str = "") -> ExtractResult:
        """Parse one file's source text under the given module path."""
        if isinstance(source, str):
            source = source.encode("utf8")
        tree = self._parser.parse(source)
        result = ExtractResult(files=[rel_path or module_path])
        for child in tree.root_node.children:
            if child.type == "struct_item":
                decl = self._parse_declaration(child, source, module_path,
                                               rel_path, TypeKind.STRUCT)
                if decl is not None:
                    result.declarations.append(decl)
            elif child.type == "enum_item":
                decl = self._parse_declaration(child, source, module_path,
                                               rel_path, TypeKind.ENUM)
                if decl is not None:
                    result.declarations.append(decl)
            elif child.type == "impl_item":
                sighting = self._parse_impl(child, source, module_path, rel_path)
                if sighting is not None:
                    result.implementations.append(sighting)
        return result

    def parse_file(self, filepath: Path, src_root: Path) -> ExtractResult:
        source = filepath.read_bytes()
        if filepath == src_root:
            module_path = filepath.stem
            rel_path = filepath.name
        else:
            rel = filepath.relative_to(src_root)
            module_path = rel.with_suffix("").as_posix()
            rel_path = rel.as_posix()
        return self.parse_source(source, module_path, rel_path)

    def parse_path(self, path: Union[str, Path], verbose: bool = False) -> ExtractResult:
        """Parse a single ``.rs`` file or every ``.rs`` file under a directory."""
        root = Path(path).resolve()
        if root.is_file():
            if root.suffix != ".rs":
                raise FileNotFoundError(f"Not a Rust source file: {root}")
            files = [root]
        elif root.is_dir():
            files = sorted(root.rglob("*.rs"))
        else:
            raise FileNotFoundError(f"No such file or directory: {root}")
        if verbose:
            print(f"  Found {len(files)} rust files")
        combined = ExtractResult()
        for filepath in files:
            combined.merge(self.parse_file(filepath, root))
        if verbose:
            print(f"Parsed: "
                  f"{len(combined.declarations)} declarations, "
                  f"{len(combined.implementations)} serde impl blocks")
        return combined


def build_registry(path: Union[str, Path], *, verbose: bool = False) -> TypeRegistry:
    """Parse Rust sources and return a frozen TypeRegistry.

    Args:
        path: A crate source directory or a single ``.rs`` file.
        verbose: If True, print progress information.

    Raises:
        FileNotFoundError: If path does not exist or is not a ``.rs`` file.
    """
    result = RustTypeExtractor().parse_path(path, verbose=verbose)
    registry = result.to_registry().freeze()
    if verbose:
        print(f"Registry: {len(registry)} types")
        if registry.orphans:
            print(f"\n  {len(registry.orphans)} warning(s):")
            for identifier in registry.orphans:
                print(f"    [{identifier}] serde impl without a declaration in the same file")
    return registry
