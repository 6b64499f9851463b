"""Typer-based CLI for static ES module graph queries."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import __version__
from .builder import create_module_graph
from .config_manager import load_config, merge_options
from .errors import ModGraphError
from .graph import ModuleGraph
from .graph_export import export_dot, export_html
from .plugin import Plugin
from .plugins import load_builtin_plugins, typescript, unused_exports

app = typer.Typer(
    help="Static ES module graph: reachable modules, import chains, unused exports.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()
logger = logging.getLogger("modgraph_cli")

ENTRYPOINTS_ARG = typer.Argument(..., help="Comma-separated entrypoints, relative to the base path.")
BASE_PATH_OPTION = typer.Option(None, "--base-path", "-b", file_okay=False, help="Project root (default: cwd).")
TS_OPTION = typer.Option(False, "--ts", help="Analyze TypeScript source code.")
NODE_OPTION = typer.Option(False, "--node", help="Use moduleResolution 'node' for --ts.")
DYNAMIC_OPTION = typer.Option(False, "--ignore-dynamic-import", help="Do not follow import() calls.")
IGNORE_EXTERNAL_OPTION = typer.Option(False, "--ignore-external", help="Skip all package imports.")
INCLUDE_EXTERNAL_OPTION = typer.Option(None, "--include-external", help="Only follow these packages.")
EXCLUDE_EXTERNAL_OPTION = typer.Option(None, "--exclude-external", help="Never follow these packages.")
EXCLUDE_OPTION = typer.Option(None, "--exclude", "-e", help="Glob over resolved module paths to drop.")
STRICT_OPTION = typer.Option(None, "--strict/--lenient", help="Fail on, or skip, unresolvable imports.")


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"modgraph v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging."),
):
    """modgraph: build a module graph from entrypoints and query it."""
    _configure_logging(verbose)


def _configure_logging(verbose: bool) -> None:
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=Console(stderr=True), show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def _ensure_relative(file_path: str) -> str:
    if file_path.startswith(("./", "../", "/")):
        return file_path
    return "./" + file_path


def _split_entrypoints(entrypoints: str) -> List[str]:
    return [_ensure_relative(e.strip()) for e in entrypoints.split(",") if e.strip()]


def _split_names(values: Optional[List[str]]) -> Optional[List[str]]:
    if not values:
        return None
    return [name.strip() for value in values for name in value.split(",") if name.strip()]


def _build_graph(
    entrypoints: str,
    base_path: Optional[Path],
    ts: bool,
    node: bool,
    ignore_dynamic_import: bool,
    ignore_external: bool,
    include_external: Optional[List[str]],
    exclude_external: Optional[List[str]],
    exclude: Optional[List[str]],
    strict: Optional[bool],
    extra_plugins: Optional[List[Plugin]] = None,
) -> ModuleGraph:
    if node and not ts:
        typer.echo("Error: --node option can only be used in combination with --ts", err=True)
        raise typer.Exit(code=1)

    root = (base_path or Path.cwd()).resolve()
    try:
        options = merge_options(
            load_config(root),
            {
                "ignore_dynamic_import": ignore_dynamic_import or None,
                "exclude": exclude or None,
                "strict": strict,
                "external": {
                    "ignore": ignore_external or None,
                    "include": _split_names(include_external),
                    "exclude": _split_names(exclude_external),
                },
            },
        )
        plugin_names = [name for name in options.pop("plugins", []) if not (ts and name == "typescript")]
        plugins = load_builtin_plugins(plugin_names)
        if ts:
            plugins.append(typescript({"moduleResolution": "node"} if node else None))
        for plugin in extra_plugins or []:
            if all(p.name != plugin.name for p in plugins):
                plugins.append(plugin)

        return asyncio.run(
            create_module_graph(
                _split_entrypoints(entrypoints),
                base_path=root,
                plugins=plugins,
                **options,
            )
        )
    except (ModGraphError, OSError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)


@app.command("modules")
def modules(
    entrypoints: str = ENTRYPOINTS_ARG,
    base_path: Optional[Path] = BASE_PATH_OPTION,
    ts: bool = TS_OPTION,
    node: bool = NODE_OPTION,
    ignore_dynamic_import: bool = DYNAMIC_OPTION,
    ignore_external: bool = IGNORE_EXTERNAL_OPTION,
    include_external: Optional[List[str]] = INCLUDE_EXTERNAL_OPTION,
    exclude_external: Optional[List[str]] = EXCLUDE_EXTERNAL_OPTION,
    exclude: Optional[List[str]] = EXCLUDE_OPTION,
    strict: Optional[bool] = STRICT_OPTION,
):
    """List every module reachable from the entrypoints."""
    graph = _build_graph(
        entrypoints, base_path, ts, node, ignore_dynamic_import,
        ignore_external, include_external, exclude_external, exclude, strict,
    )
    for module in graph.get_unique_modules():
        typer.echo(module)


@app.command("find")
def find(
    entrypoints: str = ENTRYPOINTS_ARG,
    pattern: str = typer.Argument(..., help="Module path or glob to find."),
    base_path: Optional[Path] = BASE_PATH_OPTION,
    ts: bool = TS_OPTION,
    node: bool = NODE_OPTION,
    ignore_dynamic_import: bool = DYNAMIC_OPTION,
    ignore_external: bool = IGNORE_EXTERNAL_OPTION,
    include_external: Optional[List[str]] = INCLUDE_EXTERNAL_OPTION,
    exclude_external: Optional[List[str]] = EXCLUDE_EXTERNAL_OPTION,
    exclude: Optional[List[str]] = EXCLUDE_OPTION,
    strict: Optional[bool] = STRICT_OPTION,
):
    """Print the modules whose path matches a pattern."""
    graph = _build_graph(
        entrypoints, base_path, ts, node, ignore_dynamic_import,
        ignore_external, include_external, exclude_external, exclude, strict,
    )
    matches = graph.find(pattern)
    if not matches:
        typer.echo(f"No module matches '{pattern}'.", err=True)
        raise typer.Exit(code=1)
    for module in matches:
        typer.echo(module.path)


@app.command("import-chain")
def import_chain(
    entrypoints: str = ENTRYPOINTS_ARG,
    pattern: str = typer.Argument(..., help="Module path (or glob) to trace."),
    base_path: Optional[Path] = BASE_PATH_OPTION,
    ts: bool = TS_OPTION,
    node: bool = NODE_OPTION,
    ignore_dynamic_import: bool = DYNAMIC_OPTION,
    ignore_external: bool = IGNORE_EXTERNAL_OPTION,
    include_external: Optional[List[str]] = INCLUDE_EXTERNAL_OPTION,
    exclude_external: Optional[List[str]] = EXCLUDE_EXTERNAL_OPTION,
    exclude: Optional[List[str]] = EXCLUDE_OPTION,
    strict: Optional[bool] = STRICT_OPTION,
):
    """Print every import chain from an entrypoint to a module."""
    graph = _build_graph(
        entrypoints, base_path, ts, node, ignore_dynamic_import,
        ignore_external, include_external, exclude_external, exclude, strict,
    )
    targets = {module.path for module in graph.find(pattern)}
    chains = graph.find_import_chains(lambda path: path in targets)
    if not chains:
        typer.echo(f"No import chain leads to '{pattern}'.")
        return
    for i, chain in enumerate(chains, start=1):
        typer.echo(f"Chain {i}:")
        for path in chain:
            typer.echo(path)
        typer.echo("")


@app.command("unused-exports")
def unused_exports_command(
    entrypoints: str = ENTRYPOINTS_ARG,
    base_path: Optional[Path] = BASE_PATH_OPTION,
    ts: bool = TS_OPTION,
    node: bool = NODE_OPTION,
    ignore_dynamic_import: bool = DYNAMIC_OPTION,
    ignore_external: bool = IGNORE_EXTERNAL_OPTION,
    include_external: Optional[List[str]] = INCLUDE_EXTERNAL_OPTION,
    exclude_external: Optional[List[str]] = EXCLUDE_EXTERNAL_OPTION,
    exclude: Optional[List[str]] = EXCLUDE_OPTION,
    strict: Optional[bool] = STRICT_OPTION,
    include_entrypoints: bool = typer.Option(
        False, "--include-entrypoints", help="Also report exports of the entrypoints themselves."
    ),
):
    """Report exports that no importing module uses."""
    graph = _build_graph(
        entrypoints, base_path, ts, node, ignore_dynamic_import,
        ignore_external, include_external, exclude_external, exclude, strict,
        extra_plugins=[unused_exports()],
    )
    findings = [
        record for record in graph.unused_exports
        if include_entrypoints or record.declaration.module not in graph.entrypoints
    ]
    if not findings:
        typer.echo("No unused exports found.")
        return

    table = Table(title="Unused exports", show_header=True, show_lines=False)
    table.add_column("Module", style="cyan")
    table.add_column("Export", style="bold")
    table.add_column("Local name", style="dim")
    for record in findings:
        local = record.declaration.name
        table.add_row(
            record.declaration.module or "",
            record.name,
            local if local and local != record.name else "",
        )
    console.print(table)


@app.command("export-graph")
def export_graph(
    entrypoints: str = ENTRYPOINTS_ARG,
    fmt: str = typer.Option("html", "--format", "-f", help="Export format: html or dot."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file path."),
    focus: str = typer.Option("", "--focus", help="Only export edges touching matching modules."),
    base_path: Optional[Path] = BASE_PATH_OPTION,
    ts: bool = TS_OPTION,
    node: bool = NODE_OPTION,
    ignore_dynamic_import: bool = DYNAMIC_OPTION,
    ignore_external: bool = IGNORE_EXTERNAL_OPTION,
    include_external: Optional[List[str]] = INCLUDE_EXTERNAL_OPTION,
    exclude_external: Optional[List[str]] = EXCLUDE_EXTERNAL_OPTION,
    exclude: Optional[List[str]] = EXCLUDE_OPTION,
    strict: Optional[bool] = STRICT_OPTION,
):
    """Export the module graph to standalone HTML or Graphviz DOT."""
    fmt = fmt.lower()
    if fmt not in {"html", "dot"}:
        raise typer.BadParameter("Format must be one of: html, dot")

    graph = _build_graph(
        entrypoints, base_path, ts, node, ignore_dynamic_import,
        ignore_external, include_external, exclude_external, exclude, strict,
    )
    if output is None:
        output = Path.cwd() / f"module_graph.{fmt}"

    if fmt == "html":
        export_html(graph, output, focus=focus)
    else:
        export_dot(graph, output, focus=focus)

    typer.echo(f"Exported graph to {output}")


if __name__ == "__main__":
    app()
