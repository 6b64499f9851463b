"""Tests for specifier classification."""

import pytest

from modgraph_cli.specifiers import (
    extract_package_name,
    is_bare_specifier,
    is_builtin_module,
    is_scoped_package,
)


@pytest.mark.parametrize("specifier", ["foo", "@scope/bar", "lodash/fp", "'quoted'", "Upper"])
def test_bare_specifiers(specifier):
    assert is_bare_specifier(specifier)


@pytest.mark.parametrize("specifier", ["./x.js", "../x.js", "/abs/x.js", "#internal", "", "1abc", "éclair"])
def test_non_bare_specifiers(specifier):
    assert not is_bare_specifier(specifier)


def test_scoped_package():
    assert is_scoped_package("@scope/pkg")
    assert not is_scoped_package("pkg")


def test_extract_package_name():
    assert extract_package_name("@scope/pkg/sub/file.js") == "@scope/pkg"
    assert extract_package_name("pkg/sub/file.js") == "pkg"
    assert extract_package_name("pkg") == "pkg"


def test_builtin_modules():
    assert is_builtin_module("fs")
    assert is_builtin_module("node:fs")
    assert is_builtin_module("fs/promises")
    assert is_builtin_module("node:test")
    assert not is_builtin_module("test")
    assert not is_builtin_module("lodash")
    assert not is_builtin_module("./fs")
