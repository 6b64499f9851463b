"""Tests for locating the owning package of a dependency-store file."""

from pathlib import Path

from modgraph_cli.package_root import in_dependency_store, resolve_package_root


def test_unscoped_package():
    name, root = resolve_package_root("/app/node_modules/foo/lib/index.js")
    assert name == "foo"
    assert root == Path("/app/node_modules/foo")


def test_scoped_package():
    name, root = resolve_package_root("/app/node_modules/@scope/bar/dist/index.js")
    assert name == "@scope/bar"
    assert root == Path("/app/node_modules/@scope/bar")


def test_nested_store_uses_last_occurrence():
    name, root = resolve_package_root("/app/node_modules/a/node_modules/@s/b/lib/x.js")
    assert name == "@s/b"
    assert root == Path("/app/node_modules/a/node_modules/@s/b")


def test_outside_store():
    assert resolve_package_root("/app/src/index.js") is None
    assert not in_dependency_store("src/index.js")
    assert in_dependency_store("node_modules/foo/index.js")


def test_store_directory_itself():
    assert resolve_package_root("/app/node_modules/") is None
    assert resolve_package_root("/app/node_modules/@scope") is None
