"""Declarative exception rules for field-reference resolution.

The naming heuristics in :mod:`serdemap.resolver` cover most references.
What they miss is described here as data, so a project can ship its own
table without touching resolver control flow:

* ``DomainPrefixRule`` retries a reference under a fixed top-level folder.
* ``NamedPairRule`` maps one (source, reference) pair to a fixed target.
* ``SkipRule`` marks a reference as pointing outside the registry (no edge).

Tables can be built in code, taken from :data:`PRESETS`, or loaded from
JSON with :func:`load_exception_table`::

    {
      "domain_prefixes": [{"domain": "abci", "shape": "relative"}],
      "named_pairs": [{"reference": "ChainId", "target": "chain/id::Id"}],
      "skips": [{"sources": ["time::Time"], "reference": "Utc"}],
      "snake_case_overrides": {"AppHash": "hash"}
    }
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, ClassVar, Mapping, Union

from .errors import ExceptionTableError
from .paths import (
    NAMESPACE_SEP, PATH_SEP, SNAKE_CASE_OVERRIDES, PathParts,
    camelcase_to_snakecase, join_nonempty, split_reference,
)


@dataclass(frozen=True)
class ReferenceContext:
    """One field reference seen from the type that declares it."""
    source: str
    reference: str
    source_parts: PathParts
    reference_parts: PathParts
    snake_case_overrides: Mapping[str, str] = field(
        default_factory=lambda: dict(SNAKE_CASE_OVERRIDES))

    @classmethod
    def create(cls, source: str, source_parts: PathParts, reference: str,
               snake_case_overrides: Mapping[str, str]) -> ReferenceContext:
        return cls(source, reference, source_parts,
                   split_reference(reference), snake_case_overrides)

    @property
    def snake_name(self) -> str:
        return camelcase_to_snakecase(self.reference_parts.name,
                                      self.snake_case_overrides)


@dataclass(frozen=True)
class DomainPrefixRule:
    """Look for the reference under a fixed top-level folder.

    ``relative``: ``tag::Key`` -> ``<domain>/tag::Key``
    ``bare``:     ``Tag``      -> ``<domain>/tag::Tag``
    """
    kind: ClassVar[str] = "domain_prefix"
    SHAPES: ClassVar[tuple[str, ...]] = ("relative", "bare")

    domain: str
    shape: str

    def __post_init__(self):
        if self.shape not in self.SHAPES:
            raise ExceptionTableError(
                f"domain prefix shape must be one of {self.SHAPES}, got {self.shape!r}"
            )

    def candidate(self, ctx: ReferenceContext) -> str | None:
        ref = ctx.reference_parts
        if self.shape == "relative":
            if ref.is_bare or not ref.is_relative:
                return None
            return join_nonempty(self.domain, ref.object, PATH_SEP)
        if not ref.is_bare:
            return None
        return join_nonempty(
            join_nonempty(self.domain, ctx.snake_name, PATH_SEP),
            ref.name, NAMESPACE_SEP,
        )


@dataclass(frozen=True)
class NamedPairRule:
    """Map a literal reference to a literal target. ``source=None`` matches any type."""
    kind: ClassVar[str] = "named_pair"

    reference: str
    target: str
    source: str | None = None

    def candidate(self, ctx: ReferenceContext) -> str | None:
        if ctx.reference != self.reference:
            return None
        if self.source is not None and ctx.source != self.source:
            return None
        return self.target


@dataclass(frozen=True)
class SkipRule:
    """A reference to a foreign type that is left out of the graph."""
    kind: ClassVar[str] = "skip"

    sources: tuple[str, ...]
    reference: str
    reason: str = ""

    def matches(self, ctx: ReferenceContext) -> bool:
        return ctx.reference == self.reference and ctx.source in self.sources


def _string_tuple(value: Any, key: str) -> tuple[str, ...]:
    # A bare string would otherwise be split into characters.
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        raise TypeError(f"{key!r} must be a list of strings, got {value!r}")
    return tuple(value)


@dataclass(frozen=True)
class ExceptionTable:
    domain_prefixes: tuple[DomainPrefixRule, ...] = ()
    named_pairs: tuple[NamedPairRule, ...] = ()
    skips: tuple[SkipRule, ...] = ()
    snake_case_overrides: Mapping[str, str] = field(
        default_factory=lambda: dict(SNAKE_CASE_OVERRIDES))

    def merge(self, other: ExceptionTable) -> ExceptionTable:
        """Return a table with other's rules appended after this table's."""
        return ExceptionTable(
            domain_prefixes=self.domain_prefixes + other.domain_prefixes,
            named_pairs=self.named_pairs + other.named_pairs,
            skips=self.skips + other.skips,
            snake_case_overrides={**self.snake_case_overrides,
                                  **other.snake_case_overrides},
        )

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> ExceptionTable:
        if not isinstance(raw, dict):
            raise ExceptionTableError("exception table must be a JSON object")
        unknown = set(raw) - {"domain_prefixes", "named_pairs", "skips",
                              "snake_case_overrides"}
        if unknown:
            raise ExceptionTableError(f"unknown keys: {', '.join(sorted(unknown))}")
        try:
            domain_prefixes = tuple(
                DomainPrefixRule(domain=r["domain"], shape=r["shape"])
                for r in raw.get("domain_prefixes", [])
            )
            named_pairs = tuple(
                NamedPairRule(reference=r["reference"], target=r["target"],
                              source=r.get("source"))
                for r in raw.get("named_pairs", [])
            )
            skips = tuple(
                SkipRule(sources=_string_tuple(r["sources"], "sources"),
                         reference=r["reference"], reason=r.get("reason", ""))
                for r in raw.get("skips", [])
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise ExceptionTableError(f"malformed rule: {e}") from None
        extra_overrides = raw.get("snake_case_overrides", {})
        if not isinstance(extra_overrides, dict):
            raise ExceptionTableError("snake_case_overrides must be a JSON object")
        overrides = {**SNAKE_CASE_OVERRIDES, **extra_overrides}
        return cls(domain_prefixes, named_pairs, skips, overrides)

    def to_dict(self) -> dict[str, Any]:
        return {
            "domain_prefixes": [
                {"domain": r.domain, "shape": r.shape} for r in self.domain_prefixes
            ],
            "named_pairs": [
                {k: v for k, v in (("source", r.source), ("reference", r.reference),
                                   ("target", r.target)) if v is not None}
                for r in self.named_pairs
            ],
            "skips": [
                {"sources": list(r.sources), "reference": r.reference,
                 "reason": r.reason}
                for r in self.skips
            ],
            "snake_case_overrides": dict(self.snake_case_overrides),
        }


def load_exception_table(path: Union[str, Path]) -> ExceptionTable:
    """Load an exception table from a JSON file.

    Raises:
        FileNotFoundError: If the file is missing.
        ExceptionTableError: If the JSON is malformed.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Exception table not found: {path}")
    try:
        with open(path) as f:
            raw = json.load(f)
    except json.JSONDecodeError as e:
        raise ExceptionTableError(f"{path}: {e}") from None
    return ExceptionTable.from_dict(raw)


# ── Presets ───────────────────────────────────────────────────────────


_EXTERNAL_SERDE = "custom serde serialization implemented for external type"
_EXTERNAL_RAW = "serde serialization implemented using raw type for external type"
_EXTERNAL_NONE = "no serialization implemented for external type"

TENDERMINT = ExceptionTable(
    domain_prefixes=(
        # config::TxIndexConfig, tag::Key -> abci/tag::Key
        DomainPrefixRule("abci", "relative"),
        # abci/responses::BeginBlock, Tag -> abci/tag::Tag
        DomainPrefixRule("abci", "bare"),
    ),
    named_pairs=(
        NamedPairRule("Channels", "channel::Channels", source="node/info::Info"),
        NamedPairRule("PartSetHeader", "block/parts::Header", source="block/id::Id"),
        NamedPairRule("super::Type", "vote::Type",
                      source="vote/canonical_vote::CanonicalVote"),
        NamedPairRule("ChainId", "chain/id::Id"),
        NamedPairRule("Height", "block/height::Height"),
        NamedPairRule("Round", "block/round::Round"),
        NamedPairRule("BlockId", "block/id::Id"),
        NamedPairRule("SignedHeader", "block/signed_header::SignedHeader"),
    ),
    skips=(
        SkipRule(("genesis::Genesis",), "AppState",
                 "trait bound on serde_json::Value"),
        SkipRule(("private_key::PrivateKey", "public_key::PublicKey"), "Ed25519",
                 _EXTERNAL_SERDE),
        SkipRule(("public_key::PublicKey",), "Secp256k1", _EXTERNAL_SERDE),
        SkipRule(("timeout::Timeout",), "Duration", _EXTERNAL_SERDE),
        SkipRule(("time::Time",), "Utc", _EXTERNAL_RAW),
        SkipRule(("time::Time",), "DateTime", _EXTERNAL_RAW),
        SkipRule(("proposal/sign_proposal::SignedProposalResponse",
                  "vote/sign_vote::SignedVoteResponse",
                  "public_key/pub_key_response::PubKeyResponse"),
                 "RemoteSignerError", _EXTERNAL_NONE),
        SkipRule(("signature::Signature",), "Ed25519Signature", _EXTERNAL_NONE),
        SkipRule(("validator::SimpleValidator",),
                 "tendermint_proto::crypto::PublicKey",
                 "no serialization implemented for SimpleValidator"),
    ),
)

PRESETS: dict[str, ExceptionTable] = {
    "none": ExceptionTable(),
    "tendermint": TENDERMINT,
}
