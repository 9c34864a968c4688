"""Derive a serialization category from the boolean facts of a type."""

from .model import Category, TypeRecord


def classify_facts(serialize: bool, deserialize: bool,
                   from_: bool, into: bool,
                   custom_serializer: bool,
                   custom_deserializer: bool) -> Category:
    """Map six serialization facts to a category.

    The checks form a ladder; earlier branches shadow later ones. Deriving
    can never coexist with a hand-written impl, and from/into conversion
    only means something next to a derive, so both are red.
    """
    derived = serialize or deserialize
    converted = from_ or into
    custom = custom_serializer or custom_deserializer
    asymmetric = (
        serialize != deserialize
        or from_ != into
        or custom_serializer != custom_deserializer
    )

    if (derived and custom) or (not derived and converted):
        return Category.RED
    if derived:
        if converted:
            return Category.BLUE_GRADIENT if asymmetric else Category.BLUE
        return Category.GREEN_GRADIENT if asymmetric else Category.GREEN
    if custom:
        return Category.YELLOW_GRADIENT if asymmetric else Category.YELLOW
    return Category.WHITE


def classify(record: TypeRecord) -> Category:
    return classify_facts(
        record.derives_serialize,
        record.derives_deserialize,
        record.has_from_conversion,
        record.has_into_conversion,
        record.has_custom_serializer,
        record.has_custom_deserializer,
    )
