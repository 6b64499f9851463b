"""Graph export helpers for DOT and simple standalone HTML outputs."""

from __future__ import annotations

import html
import json
from pathlib import Path
from typing import Dict, List

from .graph import ModuleGraph


def export_dot(graph: ModuleGraph, output_file: Path, focus: str = "") -> None:
    selected = _focused_subgraph(graph, focus)
    external = _external_paths(graph)

    lines = ["digraph ModuleGraph {"]
    lines.append("  rankdir=LR;")

    for path in selected["nodes"]:
        attrs = f'label="{_esc(path)}"'
        if path in graph.entrypoints:
            attrs += ", shape=box"
        if path in external:
            attrs += ", style=dashed"
        lines.append(f'  "{_esc(path)}" [{attrs}];')

    for src, dst in selected["edges"]:
        lines.append(f'  "{_esc(src)}" -> "{_esc(dst)}";')

    lines.append("}")
    output_file.write_text("\n".join(lines) + "\n", encoding="utf-8")


def export_html(graph: ModuleGraph, output_file: Path, focus: str = "") -> None:
    selected = _focused_subgraph(graph, focus)
    external = _external_paths(graph)
    graph_payload = {
        "nodes": [
            {
                "id": path,
                "entrypoint": path in graph.entrypoints,
                "external": path in external,
                "importedBy": graph.modules[path].imported_by if path in graph.modules else [],
            }
            for path in selected["nodes"]
        ],
        "edges": [{"src": src, "dst": dst} for src, dst in selected["edges"]],
    }
    output_file.write_text(_basic_html_export(graph_payload, str(graph.base_path)), encoding="utf-8")


def _basic_html_export(graph_payload: dict, title: str) -> str:
    return f"""<!doctype html>
<html>
<head>
  <meta charset="utf-8" />
  <title>Module graph: {html.escape(title)}</title>
  <style>
    body {{ font-family: ui-monospace, SFMono-Regular, Menlo, monospace; margin: 20px; }}
    #container {{ display: grid; grid-template-columns: 1fr 1fr; gap: 18px; }}
    .panel {{ border: 1px solid #ddd; border-radius: 8px; padding: 10px; }}
    ul {{ list-style: none; padding: 0; margin: 0; }}
    li {{ margin: 4px 0; }}
    .entrypoint {{ font-weight: bold; }}
    .external {{ color: #888; }}
  </style>
</head>
<body>
  <h1>Module graph</h1>
  <p>{html.escape(title)}</p>
  <div id="container">
    <div class="panel">
      <h2>Modules</h2>
      <ul id="nodes"></ul>
    </div>
    <div class="panel">
      <h2>Imports</h2>
      <ul id="edges"></ul>
    </div>
  </div>
  <script>
    const graph = {json.dumps(graph_payload)};
    const nodesEl = document.getElementById('nodes');
    const edgesEl = document.getElementById('edges');
    graph.nodes.forEach(n => {{
      const li = document.createElement('li');
      li.textContent = `${{n.id}} (imported by ${{n.importedBy.length}})`;
      if (n.entrypoint) li.classList.add('entrypoint');
      if (n.external) li.classList.add('external');
      nodesEl.appendChild(li);
    }});
    graph.edges.forEach(e => {{
      const li = document.createElement('li');
      li.textContent = `${{e.src}} --> ${{e.dst}}`;
      edgesEl.appendChild(li);
    }});
  </script>
</body>
</html>
"""


def _external_paths(graph: ModuleGraph) -> set:
    return {module.path for module in graph.external_modules.values()}


def _focused_subgraph(graph: ModuleGraph, focus: str) -> Dict[str, List]:
    edges = [(src, dst) for src, deps in graph.adjacency.items() for dst in deps]
    nodes = graph.get_unique_modules()
    if not focus:
        return {"nodes": nodes, "edges": edges}

    focus_ids = {path for path in nodes if focus in path}
    if not focus_ids:
        return {"nodes": nodes, "edges": edges}

    edge_subset = [e for e in edges if e[0] in focus_ids or e[1] in focus_ids]
    node_subset = set(focus_ids)
    for src, dst in edge_subset:
        node_subset.add(src)
        node_subset.add(dst)
    return {"nodes": sorted(node_subset), "edges": edge_subset}


def _esc(text: str) -> str:
    return text.replace('"', '\\"')
