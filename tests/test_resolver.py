"""Tests for the default Node-style resolver."""

import json
from pathlib import Path

import pytest

from modgraph_cli.errors import ResolutionError
from modgraph_cli.resolver import NodeResolver, to_path


def _write(root: Path, files):
    for rel_path, content in files.items():
        target = root / rel_path
        target.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, dict):
            content = json.dumps(content)
        target.write_text(content, encoding="utf-8")


def test_to_path_accepts_file_urls(temp_dir: Path):
    assert to_path(temp_dir.as_uri()) == temp_dir
    assert to_path(str(temp_dir)) == temp_dir


def test_relative_with_extension_probing(temp_dir: Path):
    _write(temp_dir, {"index.js": "", "lib/util.mjs": "", "lib/dir/index.js": ""})
    resolver = NodeResolver()
    importer = temp_dir / "index.js"

    assert resolver.resolve("./lib/util.mjs", importer) == temp_dir / "lib/util.mjs"
    assert resolver.resolve("./lib/util", importer) == temp_dir / "lib/util.mjs"
    assert resolver.resolve("./lib/dir", importer) == temp_dir / "lib/dir/index.js"


def test_missing_relative_raises(temp_dir: Path):
    _write(temp_dir, {"index.js": ""})
    with pytest.raises(ResolutionError) as excinfo:
        NodeResolver().resolve("./missing.js", temp_dir / "index.js")
    assert excinfo.value.specifier == "./missing.js"
    assert excinfo.value.importer == str(temp_dir / "index.js")
    assert 'Failed to resolve "./missing.js"' in str(excinfo.value)


def test_package_main_fields(temp_dir: Path):
    _write(temp_dir, {
        "index.js": "",
        "node_modules/esm/package.json": {"name": "esm", "module": "esm.js", "main": "cjs.js"},
        "node_modules/esm/esm.js": "",
        "node_modules/esm/cjs.js": "",
        "node_modules/plain/index.js": "",
    })
    resolver = NodeResolver()
    importer = temp_dir / "index.js"

    assert resolver.resolve("esm", importer) == temp_dir / "node_modules/esm/esm.js"
    assert resolver.resolve("plain", importer) == temp_dir / "node_modules/plain/index.js"


def test_package_exports_conditions_and_subpaths(temp_dir: Path):
    _write(temp_dir, {
        "index.js": "",
        "node_modules/pkg/package.json": {
            "name": "pkg",
            "exports": {
                ".": {"require": "./main.cjs", "import": "./main.js"},
                "./feature": {"development": "./feature.dev.js", "default": "./feature.js"},
                "./utils/*": "./src/utils/*.js",
            },
        },
        "node_modules/pkg/main.js": "",
        "node_modules/pkg/main.cjs": "",
        "node_modules/pkg/feature.js": "",
        "node_modules/pkg/feature.dev.js": "",
        "node_modules/pkg/src/utils/format.js": "",
    })
    importer = temp_dir / "index.js"
    pkg = temp_dir / "node_modules/pkg"

    resolver = NodeResolver(export_conditions=["node", "import"])
    assert resolver.resolve("pkg", importer) == pkg / "main.js"
    assert resolver.resolve("pkg/feature", importer) == pkg / "feature.js"
    assert resolver.resolve("pkg/utils/format", importer) == pkg / "src/utils/format.js"

    dev = NodeResolver(export_conditions=["development"])
    assert dev.resolve("pkg/feature", importer) == pkg / "feature.dev.js"

    with pytest.raises(ResolutionError):
        resolver.resolve("pkg/not-exported", importer)


def test_nested_node_modules_win(temp_dir: Path):
    _write(temp_dir, {
        "node_modules/dep/index.js": "",
        "node_modules/a/index.js": "",
        "node_modules/a/node_modules/dep/index.js": "",
    })
    resolved = NodeResolver().resolve("dep", temp_dir / "node_modules/a/index.js")
    assert resolved == temp_dir / "node_modules/a/node_modules/dep/index.js"


def test_package_imports_map(temp_dir: Path):
    _write(temp_dir, {
        "package.json": {"name": "app", "imports": {"#internal/*": "./src/internal/*.js", "#dep": "dep"}},
        "src/index.js": "",
        "src/internal/db.js": "",
        "node_modules/dep/index.js": "",
    })
    resolver = NodeResolver()
    importer = temp_dir / "src/index.js"
    assert resolver.resolve("#internal/db", importer) == temp_dir / "src/internal/db.js"
    assert resolver.resolve("#dep", importer) == temp_dir / "node_modules/dep/index.js"


def test_symlinks_resolved_unless_preserved(temp_dir: Path):
    _write(temp_dir, {"index.js": "", "real/lib.js": ""})
    (temp_dir / "node_modules").mkdir()
    (temp_dir / "node_modules/linked").symlink_to(temp_dir / "real", target_is_directory=True)
    (temp_dir / "real/package.json").write_text('{"main": "lib.js"}', encoding="utf-8")
    importer = temp_dir / "index.js"

    assert NodeResolver().resolve("linked", importer) == temp_dir / "real/lib.js"
    assert NodeResolver(preserve_symlinks=True).resolve("linked", importer) == (
        temp_dir / "node_modules/linked/lib.js"
    )
