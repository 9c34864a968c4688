"""Extract serde facts from Rust source using tree-sitter.

Requires ``tree-sitter`` and ``tree-sitter-rust``.

Usage::

    from serdemap.extract import build_registry

    registry = build_registry("/path/to/crate/src")
"""

try:
    import tree_sitter  # noqa: F401
except ImportError:
    raise ImportError(
        "The serdemap.extract module requires tree-sitter. "
        "Install with: pip install tree-sitter tree-sitter-rust"
    ) from None

from .models import (
    RustAttribute, TypeDeclaration, ImplementationSighting, ExtractResult,
)
from .rust import RustTypeExtractor, build_registry

__all__ = [
    "RustAttribute", "TypeDeclaration", "ImplementationSighting",
    "ExtractResult", "RustTypeExtractor", "build_registry",
]
