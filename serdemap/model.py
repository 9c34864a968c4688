"""Data models for type records, classification categories and edges."""

from dataclasses import FrozenInstanceError, dataclass, field
from enum import Enum


class TypeKind(str, Enum):
    STRUCT = "struct"
    ENUM = "enum"
    UNKNOWN = "unknown"     # impl block seen before the declaration

    @property
    def shape(self) -> str:
        """Diagram shape used by the renderers."""
        return _SHAPES[self]


_SHAPES = {
    TypeKind.STRUCT: "rectangle",
    TypeKind.ENUM: "ellipse",
    TypeKind.UNKNOWN: "rhombus",
}


class Category(str, Enum):
    """Serialization category of a type.

    Gradient variants mark asymmetric serialize/deserialize behaviour
    within the same mechanism.
    """
    RED = "red"                          # invalid combination of features
    WHITE = "white"                      # no serialization
    GREEN = "green"                      # #[derive(Serialize, Deserialize)]
    GREEN_GRADIENT = "green_gradient"
    BLUE = "blue"                        # #[serde(try_from/from, into)]
    BLUE_GRADIENT = "blue_gradient"
    YELLOW = "yellow"                    # hand-written impl Serialize/Deserialize
    YELLOW_GRADIENT = "yellow_gradient"

    @property
    def is_derived(self) -> bool:
        return self in (Category.GREEN, Category.GREEN_GRADIENT)

    @property
    def is_gradient(self) -> bool:
        return self.value.endswith("_gradient")


class EdgeStrength(str, Enum):
    STRONG = "strong"
    WEAK = "weak"


@dataclass
class TypeRecord:
    """Serialization facts and field references of one struct or enum.

    Records become read-only when their registry is frozen; field
    references are then held as a tuple.
    """
    kind: TypeKind = TypeKind.UNKNOWN
    is_public: bool = False
    derives_serialize: bool = False
    derives_deserialize: bool = False
    has_from_conversion: bool = False   # #[serde(from = ..)] or try_from
    has_into_conversion: bool = False   # #[serde(into = ..)]
    has_custom_serializer: bool = False
    has_custom_deserializer: bool = False
    has_custom_field_annotation: bool = False
    field_references: list[str] = field(default_factory=list)
    _frozen: bool = field(default=False, init=False, repr=False, compare=False)

    def __setattr__(self, name, value):
        if getattr(self, "_frozen", False):
            raise FrozenInstanceError(f"cannot assign to field {name!r}")
        super().__setattr__(name, value)

    def add_field_references(self, references) -> None:
        """Append references not seen yet, keeping first-occurrence order."""
        if self._frozen:
            raise FrozenInstanceError("cannot add field references")
        for ref in references:
            if ref not in self.field_references:
                self.field_references.append(ref)

    def freeze(self) -> None:
        self.field_references = tuple(self.field_references)
        self._frozen = True


@dataclass(frozen=True, order=True)
class Edge:
    source: str
    target: str
    strength: EdgeStrength
