"""Split and rebuild qualified type identifiers.

Identifiers look like ``block/header::Header``: a file-like module path
separated by ``/``, then one or more ``::`` namespace segments, the last of
which is the type's short name.

    block/header::Header            -> ("block", "header", "Header")
    some/path/with::complex::Types  -> ("some/path", "with::complex", "Types")
"""

from typing import Mapping, NamedTuple

from .errors import DecompositionError

NAMESPACE_SEP = "::"
PATH_SEP = "/"

# Short names whose module segment does not follow the general rule.
SNAKE_CASE_OVERRIDES: dict[str, str] = {
    "AppHash": "hash",
    "Type": "msg_type",
}


class PathParts(NamedTuple):
    module_path: str
    namespace: str
    name: str

    @property
    def prefix(self) -> str:
        """Everything before the short name, as a ``/`` path."""
        return join_nonempty(self.module_path, self.namespace, PATH_SEP)

    @property
    def object(self) -> str:
        """Namespace and short name, without the module path."""
        return join_nonempty(self.namespace, self.name, NAMESPACE_SEP)

    @property
    def is_bare(self) -> bool:
        return not self.module_path and not self.namespace

    @property
    def is_relative(self) -> bool:
        return not self.module_path

    def join(self) -> str:
        """Rebuild the identifier these parts were split from."""
        head = join_nonempty(self.module_path, self.namespace, PATH_SEP)
        return join_nonempty(head, self.name, NAMESPACE_SEP)


def join_nonempty(a: str, b: str, sep: str) -> str:
    """Join two strings with sep, dropping the separator if either is empty."""
    if not a:
        return b
    if not b:
        return a
    return f"{a}{sep}{b}"


def split_reference(reference: str) -> PathParts:
    """Decompose a field reference, which may be a bare short name."""
    segments = reference.split(NAMESPACE_SEP)
    name = segments.pop()
    module_path = ""
    if segments:
        head = segments[0].split(PATH_SEP)
        segments[0] = head.pop()
        module_path = PATH_SEP.join(head)
    return PathParts(module_path, NAMESPACE_SEP.join(segments), name)


def decompose(identifier: str) -> PathParts:
    """Decompose a fully-qualified registry identifier.

    Raises:
        DecompositionError: If identifier has no ``::`` separator.
    """
    if NAMESPACE_SEP not in identifier:
        raise DecompositionError(identifier)
    return split_reference(identifier)


def camelcase_to_snakecase(name: str,
                           overrides: Mapping[str, str] | None = None) -> str:
    """Convert a CamelCase short name to its snake_case module segment.

    Every uppercase character except the first gets an underscore in front
    of it, so ``ChainId`` becomes ``chain_id`` and ``HTTPConfig`` becomes
    ``h_t_t_p_config``.
    """
    if overrides is None:
        overrides = SNAKE_CASE_OVERRIDES
    if name in overrides:
        return overrides[name]
    out = []
    for i, ch in enumerate(name):
        if ch.isupper() and i != 0:
            out.append("_")
        out.append(ch.lower())
    return "".join(out)
