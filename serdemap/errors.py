"""Error types raised while building and resolving a type registry."""


class SerdeMapError(Exception):
    """Base class for all serdemap errors."""


class DecompositionError(SerdeMapError, ValueError):
    """An identifier is not of the form ``<module-path>::<TypeName>``.

    Registry keys are always fully qualified, so this points at malformed
    extractor output rather than at user input.
    """

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"received invalid path: {identifier!r}")


class UnresolvedReferenceError(SerdeMapError, LookupError):
    """A field reference matched no heuristic, exception or skip entry."""

    def __init__(self, source: str, reference: str):
        self.source = source
        self.reference = reference
        super().__init__(
            f"could not resolve field reference {reference!r} of {source!r}"
        )


class UnresolvedReferencesError(SerdeMapError):
    """Several unresolved references collected over one full pass."""

    def __init__(self, errors: list[UnresolvedReferenceError]):
        self.errors = list(errors)
        lines = [f"{len(self.errors)} unresolved field reference(s):"]
        lines.extend(f"  [{e.source}] {e.reference}" for e in self.errors)
        super().__init__("\n".join(lines))


class RegistryFrozenError(SerdeMapError, RuntimeError):
    """A frozen registry was asked to change."""


class ExceptionTableError(SerdeMapError, ValueError):
    """An exception table file does not have the expected shape."""
