"""Tests for the bundled plugins and the plugin registry."""

from pathlib import Path

import pytest

from modgraph_cli import ConfigurationError, create_module_graph
from modgraph_cli.plugins import (
    BUILTIN_PLUGINS,
    barrel_file,
    exports_plugin,
    imports_plugin,
    load_builtin_plugins,
    typescript,
)
from modgraph_cli.plugins.typescript import TypeScriptResolver, load_tsconfig, strip_jsonc


# ===================================================================
# Registry
# ===================================================================

def test_load_builtin_plugins():
    plugins = load_builtin_plugins(["unused-exports", "barrel-file", "imports"])
    assert [p.name for p in plugins] == ["find-unused-exports", "barrel-file-plugin", "imports-plugin"]
    assert set(BUILTIN_PLUGINS) == {"barrel-file", "exports", "imports", "typescript", "unused-exports"}


def test_unknown_builtin_plugin():
    with pytest.raises(ConfigurationError, match="Unknown plugin 'nope'"):
        load_builtin_plugins(["nope"])


# ===================================================================
# imports / exports
# ===================================================================

@pytest.mark.asyncio
async def test_imports_and_exports_plugins(diamond_project: Path):
    graph = await create_module_graph(
        "a.js", base_path=diamond_project, plugins=[imports_plugin, exports_plugin]
    )
    a = graph.get("a.js")
    assert [(i.kind, i.module) for i in a.imports] == [("side-effect", "b.js"), ("side-effect", "d.js")]
    assert [e.name for e in graph.get("c.js").exports] == ["c"]


# ===================================================================
# barrel-file
# ===================================================================

@pytest.mark.asyncio
async def test_barrel_file(write_project):
    root = write_project({
        "index.js": "import './barrel.js';\nimport './small.js';\nimport './mixed.js';\n",
        "barrel.js": (
            "export * from './a.js';\n"
            "export { b, c, d } from './b.js';\n"
            "export { e as f, g } from './b.js';\n"
        ),
        "small.js": "export { b } from './b.js';\n",
        "mixed.js": "export { b, c, d, e, g } from './b.js';\nexport const local = 1;\n",
        "a.js": "export const a = 1;\n",
        "b.js": "export const b = 1, c = 2, d = 3, e = 4, g = 5;\n",
    })
    graph = await create_module_graph("index.js", base_path=root, plugins=[barrel_file()])

    assert graph.get("barrel.js").is_barrel_file
    assert not graph.get("small.js").is_barrel_file
    assert not graph.get("mixed.js").is_barrel_file
    assert not graph.get("b.js").is_barrel_file


@pytest.mark.asyncio
async def test_barrel_file_threshold(write_project):
    root = write_project({
        "index.js": "export { b } from './b.js';\nexport { c } from './b.js';\n",
        "b.js": "export const b = 1, c = 2;\n",
    })
    graph = await create_module_graph(
        "index.js",
        base_path=root,
        plugins=[barrel_file(amount_of_exports_to_consider_module_as_barrel=1)],
    )
    assert graph.get("index.js").is_barrel_file


# ===================================================================
# typescript
# ===================================================================

def test_strip_jsonc():
    text = '{\n  // comment\n  "a": "x//y", /* block */\n  "b": [1, 2,],\n}\n'
    assert strip_jsonc(text).replace(" ", "").replace("\n", "") == '{"a":"x//y","b":[1,2]}'


def test_load_tsconfig_follows_extends(temp_dir: Path):
    (temp_dir / "base.json").write_text('{"compilerOptions": {"baseUrl": "src", "strict": true}}')
    (temp_dir / "tsconfig.json").write_text(
        '{"extends": "./base", "compilerOptions": {"strict": false, "moduleResolution": "node16"}}'
    )
    options = load_tsconfig(temp_dir / "tsconfig.json")

    assert options["baseUrl"] == str(temp_dir / "src")
    assert options["strict"] is False
    assert options["moduleResolution"] == "node16"


@pytest.mark.asyncio
async def test_typescript_project(ts_project_path: Path):
    graph = await create_module_graph("./src/main.ts", base_path=ts_project_path, plugins=[typescript()])

    assert graph.adjacency["src/main.ts"] == ["src/helper.ts", "src/utils/format.ts", "src/shape.ts"]
    assert graph.find_import_chains("src/utils/format.ts") == [["src/main.ts", "src/utils/format.ts"]]


@pytest.mark.asyncio
async def test_typescript_sources_fail_without_plugin(ts_project_path: Path):
    graph = await create_module_graph("src/main.ts", base_path=ts_project_path, strict=False)
    assert graph.adjacency["src/main.ts"] == []


def test_js_specifier_maps_to_ts_source(temp_dir: Path):
    (temp_dir / "util.tsx").write_text("")
    resolver = TypeScriptResolver()
    resolver.configure(temp_dir)
    assert resolver.resolve("./util.js", temp_dir / "main.ts") == temp_dir / "util.tsx"


def test_declaration_files_defer_to_default_resolver(temp_dir: Path):
    (temp_dir / "types.d.ts").write_text("")
    resolver = TypeScriptResolver()
    resolver.configure(temp_dir)
    assert resolver.resolve("./types", temp_dir / "main.ts") is None


def test_index_probing(temp_dir: Path):
    (temp_dir / "lib").mkdir()
    (temp_dir / "lib/index.ts").write_text("")
    resolver = TypeScriptResolver()
    resolver.configure(temp_dir)
    assert resolver.resolve("./lib", temp_dir / "main.ts") == temp_dir / "lib/index.ts"


def test_node16_requires_extensions(temp_dir: Path):
    (temp_dir / "helper.ts").write_text("")
    resolver = TypeScriptResolver({"moduleResolution": "NodeNext"})
    resolver.configure(temp_dir)

    assert resolver.resolve("./helper", temp_dir / "main.ts") is None
    assert resolver.resolve("./helper.js", temp_dir / "main.ts") == temp_dir / "helper.ts"


def test_explicit_options_override_tsconfig(temp_dir: Path):
    (temp_dir / "tsconfig.json").write_text('{"compilerOptions": {"moduleResolution": "nodenext"}}')
    (temp_dir / "helper.ts").write_text("")
    resolver = TypeScriptResolver({"moduleResolution": "node"})
    resolver.configure(temp_dir)

    assert resolver.resolve("./helper", temp_dir / "main.ts") == temp_dir / "helper.ts"


def test_bare_specifiers_without_mapping_are_left_alone(temp_dir: Path):
    resolver = TypeScriptResolver()
    resolver.configure(temp_dir)
    assert resolver.resolve("react", temp_dir / "main.ts") is None
