"""Tests for ModuleGraph queries on hand-built graphs."""

from pathlib import Path

from modgraph_cli.graph import ModuleGraph
from modgraph_cli.models import Module


def _graph(edges, entrypoints=("a.js",)) -> ModuleGraph:
    graph = ModuleGraph(Path("/project"), list(entrypoints))
    for entry in entrypoints:
        graph.add_module(Module(path=entry, href=f"file:///project/{entry}", pathname=f"/project/{entry}"))
    for src, dst in edges:
        for path in (src, dst):
            if path not in graph.modules:
                graph.add_module(Module(path=path, href=f"file:///project/{path}", pathname=f"/project/{path}"))
        graph.add_edge(src, dst)
    return graph


def test_entrypoints_are_normalized():
    graph = ModuleGraph(Path("/project"), ["./a.js", "src/../b.js"])
    assert graph.entrypoints == ["a.js", "b.js"]


def test_diamond_chains_and_imported_by():
    graph = _graph([("a.js", "b.js"), ("a.js", "d.js"), ("b.js", "c.js"), ("d.js", "c.js")])

    assert graph.find_import_chains("c.js") == [["a.js", "b.js", "c.js"], ["a.js", "d.js", "c.js"]]
    assert graph.get("c.js").imported_by == ["b.js", "d.js"]


def test_cycle_terminates():
    graph = _graph([("a.js", "b.js"), ("b.js", "c.js"), ("c.js", "a.js")])

    assert len(graph.modules) == 3
    assert graph.find_import_chains("c.js") == [["a.js", "b.js", "c.js"]]
    assert graph.find_import_chains("missing.js") == []


def test_chain_search_stops_at_first_match():
    graph = _graph([("a.js", "b.js"), ("b.js", "c.js")])
    assert graph.find_import_chains(lambda path: path in ("b.js", "c.js")) == [["a.js", "b.js"]]


def test_chains_from_every_entrypoint():
    graph = _graph([("a.js", "c.js"), ("b.js", "c.js")], entrypoints=("a.js", "b.js"))
    assert graph.find_import_chains("c.js") == [["a.js", "c.js"], ["b.js", "c.js"]]


def test_edges_are_deduplicated():
    graph = _graph([("a.js", "b.js"), ("a.js", "b.js")])
    assert graph.adjacency["a.js"] == ["b.js"]
    assert graph.get("b.js").imported_by == ["a.js"]


def test_get_unique_modules_in_discovery_order():
    graph = _graph([("a.js", "b.js"), ("a.js", "d.js"), ("b.js", "c.js"), ("d.js", "c.js")])
    assert graph.get_unique_modules() == ["a.js", "b.js", "d.js", "c.js"]


def test_get_and_find():
    graph = _graph([("a.js", "src/b.js"), ("a.js", "src/c.js"), ("a.js", "lib/d.js")])

    assert graph.get("src/b.js").path == "src/b.js"
    assert graph.get("nope.js") is None
    assert graph.get(lambda path: path.startswith("lib/")).path == "lib/d.js"
    assert [m.path for m in graph.find("src/*.js")] == ["src/b.js", "src/c.js"]
    assert [m.path for m in graph.find("*.js")] == ["a.js"]
    assert [m.path for m in graph.find("**/*.js")] == ["a.js", "src/b.js", "src/c.js", "lib/d.js"]
    assert [m.path for m in graph.find("{lib,src}/[bd].js")] == ["src/b.js", "lib/d.js"]
    assert [m.path for m in graph.find("a.js")] == ["a.js"]
    assert graph.find("nope.js") == []
