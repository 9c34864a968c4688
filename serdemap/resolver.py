"""Resolve field-type references to registry identifiers.

Each reference is tried against an ordered chain of rules. The first rule
whose candidate identifier exists in the registry wins:

1. exact          ``net::Address`` is itself a key
2. same_namespace ``block::Block`` + ``Header``       -> ``block::Header``
3. relative       ``validator::Info`` + ``vote::Power`` -> ``vote/power::Power``
4. sub_module     ``block::Block`` + ``Header``       -> ``block/header::Header``
5. super_module   ``block/commit::Commit`` + ``Height`` -> ``block/height::Height``
6. domain_prefix  exception table
7. named_pair     exception table
8. skip           exception table, resolves to no edge

A reference no rule accepts raises :class:`UnresolvedReferenceError`.
"""

from __future__ import annotations

from typing import Callable

from .errors import UnresolvedReferenceError
from .paths import NAMESPACE_SEP, PATH_SEP, decompose, join_nonempty
from .registry import TypeRegistry
from .rules import ExceptionTable, ReferenceContext

SKIP = "skip"


def _exact(ctx: ReferenceContext) -> str | None:
    return ctx.reference


def _same_namespace(ctx: ReferenceContext) -> str | None:
    if not ctx.reference_parts.is_bare:
        return None
    return join_nonempty(ctx.source_parts.prefix, ctx.reference_parts.name,
                         NAMESPACE_SEP)


def _relative(ctx: ReferenceContext) -> str | None:
    ref = ctx.reference_parts
    if not ref.is_relative:
        return None
    return join_nonempty(join_nonempty(ref.prefix, ctx.snake_name, PATH_SEP),
                         ref.name, NAMESPACE_SEP)


def _sub_module(ctx: ReferenceContext) -> str | None:
    if not ctx.reference_parts.is_bare:
        return None
    return join_nonempty(
        join_nonempty(ctx.source_parts.prefix, ctx.snake_name, PATH_SEP),
        ctx.reference_parts.name, NAMESPACE_SEP,
    )


def _super_module(ctx: ReferenceContext) -> str | None:
    if not ctx.reference_parts.is_bare:
        return None
    return join_nonempty(
        join_nonempty(ctx.source_parts.module_path, ctx.snake_name, PATH_SEP),
        ctx.reference_parts.name, NAMESPACE_SEP,
    )


HEURISTICS: tuple[tuple[str, Callable[[ReferenceContext], str | None]], ...] = (
    ("exact", _exact),
    ("same_namespace", _same_namespace),
    ("relative", _relative),
    ("sub_module", _sub_module),
    ("super_module", _super_module),
)


class ReferenceResolver:
    """Map (source identifier, field reference) pairs to registry keys."""

    def __init__(self, registry: TypeRegistry,
                 exceptions: ExceptionTable | None = None):
        self.registry = registry
        self.exceptions = exceptions if exceptions is not None else ExceptionTable()

    def _candidates(self, ctx: ReferenceContext):
        """Yield (rule name, candidate identifier) in priority order."""
        for name, rule in HEURISTICS:
            yield name, rule(ctx)
        for rule in self.exceptions.domain_prefixes:
            yield rule.kind, rule.candidate(ctx)
        for rule in self.exceptions.named_pairs:
            yield rule.kind, rule.candidate(ctx)

    def explain(self, source: str, reference: str) -> tuple[str | None, str]:
        """Resolve a reference and name the rule that decided it.

        Returns:
            ``(target, rule)`` where target is None when a skip rule matched.

        Raises:
            DecompositionError: If source is not fully qualified.
            UnresolvedReferenceError: If no rule applies.
        """
        ctx = ReferenceContext.create(
            source, decompose(source), reference,
            self.exceptions.snake_case_overrides,
        )
        for rule, candidate in self._candidates(ctx):
            if candidate is not None and candidate in self.registry:
                return candidate, rule
        for skip in self.exceptions.skips:
            if skip.matches(ctx):
                return None, SKIP
        raise UnresolvedReferenceError(source, reference)

    def resolve(self, source: str, reference: str) -> str | None:
        """Return the target identifier, or None for an excluded reference."""
        return self.explain(source, reference)[0]
