"""Shared fixtures for the serdemap test suite."""

import importlib.util

import pytest

from serdemap import TypeKind, TypeRegistry


def pytest_collect_file(parent, file_path):  # noqa: ARG001
    """Skip test_extract_* and test_cli files when tree-sitter is not installed."""
    if (file_path.name.startswith(("test_extract", "test_cli"))
            and file_path.suffix == ".py"):
        if importlib.util.find_spec("tree_sitter") is None:
            return None


def add_type(registry: TypeRegistry, identifier: str, *refs: str,
             kind: TypeKind = TypeKind.STRUCT, public: bool = True,
             ser: bool = True, de: bool = True, **facts):
    """Declare a type; derives Serialize + Deserialize unless told otherwise."""
    return registry.add_declaration(
        identifier, kind,
        is_public=public,
        derives_serialize=ser,
        derives_deserialize=de,
        field_references=refs,
        **facts,
    )


@pytest.fixture
def foo_bar_registry():
    """pkg::Foo references pkg::Bar; both public derived structs."""
    registry = TypeRegistry()
    add_type(registry, "pkg::Foo", "pkg::Bar")
    add_type(registry, "pkg::Bar")
    return registry.freeze()


@pytest.fixture
def block_registry():
    """A small slice of a blockchain crate laid out in nested modules.

    block::Block        -> Header (block/header), Commit (block/commit), Data
    block/commit::Commit -> Height (block/height), block::Id
    block/header::Header -> Time (time), chain::Id (chain/id)
    block/height::Height    white, custom impl only
    """
    registry = TypeRegistry()
    add_type(registry, "block::Block", "Header", "Commit", "Data")
    add_type(registry, "block::Data")
    add_type(registry, "block/header::Header", "Time", "chain::Id")
    add_type(registry, "block/commit::Commit", "Height", "block::Id")
    add_type(registry, "block::Id")
    add_type(registry, "block/height::Height", ser=False, de=False)
    registry.add_implementation("block/height::Height", "Serialize")
    registry.add_implementation("block/height::Height", "Deserialize")
    add_type(registry, "time::Time", kind=TypeKind.STRUCT)
    add_type(registry, "chain/id::Id")
    return registry.freeze()
