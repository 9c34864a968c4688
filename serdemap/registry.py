"""Registry of type records keyed by fully-qualified identifier."""

from __future__ import annotations

from typing import Iterable, Iterator

from .errors import RegistryFrozenError
from .model import TypeKind, TypeRecord
from .paths import decompose

SERIALIZE_TRAIT = "Serialize"
DESERIALIZE_TRAIT = "Deserialize"


class TypeRegistry:
    """Insertion-ordered mapping of identifier -> TypeRecord.

    The registry is filled by an extractor in whatever order declarations
    and impl blocks turn up, then frozen before resolution starts. An impl
    block seen first creates an ``unknown`` placeholder which the matching
    declaration later promotes.
    """

    def __init__(self):
        self._records: dict[str, TypeRecord] = {}
        self._frozen = False
        self.orphans: list[str] = []

    # ── Population ──────────────────────────────────────────────────

    def _check_mutable(self) -> None:
        if self._frozen:
            raise RegistryFrozenError("registry is frozen")

    def add_declaration(
        self,
        identifier: str,
        kind: TypeKind,
        *,
        is_public: bool = False,
        derives_serialize: bool = False,
        derives_deserialize: bool = False,
        has_from_conversion: bool = False,
        has_into_conversion: bool = False,
        has_custom_field_annotation: bool = False,
        field_references: Iterable[str] = (),
    ) -> TypeRecord:
        """Record a struct or enum declaration.

        A placeholder created by an earlier impl block is promoted in place,
        keeping its custom (de)serializer flags. A type declared twice (e.g.
        under two ``cfg`` attributes) stays public once any declaration is
        public; the other declaration facts are those of the latest
        declaration and field references accumulate.
        """
        self._check_mutable()
        if kind is TypeKind.UNKNOWN:
            raise ValueError("a declaration needs a concrete kind")
        record = self._records.get(identifier)
        if record is None:
            record = TypeRecord(kind=kind)
            self._records[identifier] = record
        elif record.kind is TypeKind.UNKNOWN:
            record.kind = kind
        record.is_public = record.is_public or is_public
        record.derives_serialize = derives_serialize
        record.derives_deserialize = derives_deserialize
        record.has_from_conversion = has_from_conversion
        record.has_into_conversion = has_into_conversion
        record.has_custom_field_annotation = (
            record.has_custom_field_annotation or has_custom_field_annotation
        )
        record.add_field_references(field_references)
        return record

    def add_implementation(self, identifier: str, trait: str) -> TypeRecord | None:
        """Record a hand-written ``impl Serialize``/``impl Deserialize``.

        Other traits are ignored and return None.
        """
        self._check_mutable()
        if trait not in (SERIALIZE_TRAIT, DESERIALIZE_TRAIT):
            return None
        record = self._records.get(identifier)
        if record is None:
            record = TypeRecord(kind=TypeKind.UNKNOWN)
            self._records[identifier] = record
        if trait == SERIALIZE_TRAIT:
            record.has_custom_serializer = True
        else:
            record.has_custom_deserializer = True
        return record

    def freeze(self) -> TypeRegistry:
        """Validate the registry and make it and its records read-only.

        Every key must decompose. Placeholders never promoted by a
        declaration (an impl block for a type declared in another module)
        are dropped and listed in ``orphans``.

        Raises:
            DecompositionError: If any identifier is not fully qualified.
        """
        if self._frozen:
            return self
        for identifier in self._records:
            decompose(identifier)
        self.orphans = [
            identifier for identifier, record in self._records.items()
            if record.kind is TypeKind.UNKNOWN
        ]
        for identifier in self.orphans:
            del self._records[identifier]
        assert all(r.kind is not TypeKind.UNKNOWN for r in self._records.values())
        for record in self._records.values():
            record.freeze()
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    # ── Lookup ──────────────────────────────────────────────────────

    def __getitem__(self, identifier: str) -> TypeRecord:
        return self._records[identifier]

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._records

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def get(self, identifier: str) -> TypeRecord | None:
        return self._records.get(identifier)

    def items(self):
        return self._records.items()

    def public_items(self) -> list[tuple[str, TypeRecord]]:
        """Public records sorted by identifier."""
        return sorted(
            (item for item in self._records.items() if item[1].is_public),
            key=lambda item: item[0],
        )
