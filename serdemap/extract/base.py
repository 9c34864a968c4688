"""Shared tree-sitter helpers and the wrapper-type filter."""

# Names that never point at a registry type: wrappers whose generic
# arguments are looked at instead, primitives, and std utility types.
STRIPPED_TYPE_NAMES: frozenset[str] = frozenset({
    "i8", "u8", "i16", "u16", "i32", "u32", "i64", "u64", "i128", "u128",
    "isize", "usize", "f32", "f64", "bool", "char", "str",
    "Option", "Vec", "Box", "String", "Self",
    "std::time::Duration",
    # TODO: resolve these through `use` declarations instead of by name.
    "PathBuf",   # std::path::PathBuf
    "BTreeMap",  # std::collections::BTreeMap
})


def node_text(node, source: bytes) -> str:
    """Extract the text of a tree-sitter node."""
    return source[node.start_byte:node.end_byte].decode("utf8")


def compact_text(node, source: bytes) -> str:
    """Node text with all whitespace removed (``a :: B`` -> ``a::B``)."""
    return "".join(node_text(node, source).split())

