"""Data models handed from the Rust extractor to the type registry."""

from dataclasses import dataclass, field

from ..model import TypeKind
from ..registry import TypeRegistry


@dataclass(frozen=True)
class RustAttribute:
    """An outer attribute such as ``#[derive(Serialize)]``.

    ``idents`` holds the identifiers directly inside the argument group;
    nested groups and string literals are not looked into.
    """
    path: str                   # "derive", "serde", "cfg_attr", ...
    idents: frozenset[str] = frozenset()

    def has(self, path: str, ident: str | None = None) -> bool:
        if self.path != path:
            return False
        return ident is None or ident in self.idents


@dataclass
class TypeDeclaration:
    identifier: str            # "<module path>::<Name>"
    kind: TypeKind
    visibility: str            # "pub" | "pub(crate)" | "private" | ...
    file_path: str
    line_number: int
    attributes: list[RustAttribute] = field(default_factory=list)
    field_references: list[str] = field(default_factory=list)
    has_custom_field_annotation: bool = False

    @property
    def is_public(self) -> bool:
        return self.visibility == "pub"

    def _has(self, path: str, ident: str | None = None) -> bool:
        return any(a.has(path, ident) for a in self.attributes)

    @property
    def derives_serialize(self) -> bool:
        return self._has("derive", "Serialize")

    @property
    def derives_deserialize(self) -> bool:
        return self._has("derive", "Deserialize")

    @property
    def has_from_conversion(self) -> bool:
        return self._has("serde", "try_from") or self._has("serde", "from")

    @property
    def has_into_conversion(self) -> bool:
        return self._has("serde", "into")


@dataclass
class ImplementationSighting:
    """An ``impl <Trait> for <Type>`` block."""
    identifier: str
    trait: str
    file_path: str
    line_number: int


@dataclass
class ExtractResult:
    files: list[str] = field(default_factory=list)
    declarations: list[TypeDeclaration] = field(default_factory=list)
    implementations: list[ImplementationSighting] = field(default_factory=list)

    def merge(self, other: "ExtractResult") -> "ExtractResult":
        """Merge another ExtractResult into this one (mutates self)."""
        self.files.extend(other.files)
        self.declarations.extend(other.declarations)
        self.implementations.extend(other.implementations)
        return self

    def to_registry(self) -> TypeRegistry:
        """Populate a new, unfrozen registry in source order."""
        registry = TypeRegistry()
        items = sorted(
            [(d.file_path, d.line_number, d) for d in self.declarations]
            + [(i.file_path, i.line_number, i) for i in self.implementations],
            key=lambda t: (t[0], t[1]),
        )
        for _, _, item in items:
            if isinstance(item, ImplementationSighting):
                registry.add_implementation(item.identifier, item.trait)
                continue
            registry.add_declaration(
                item.identifier, item.kind,
                is_public=item.is_public,
                derives_serialize=item.derives_serialize,
                derives_deserialize=item.derives_deserialize,
                has_from_conversion=item.has_from_conversion,
                has_into_conversion=item.has_into_conversion,
                has_custom_field_annotation=item.has_custom_field_annotation,
                field_references=item.field_references,
            )
        return registry
