"""Worklist-driven construction of a :class:`~modgraph_cli.graph.ModuleGraph`.

Starting from the entrypoints, each module is read, lexed, and every import
specifier is filtered, passed through the plugins' ``handle_import`` chain,
resolved, and recorded as an edge.  Modules are visited exactly once, which
keeps cyclic graphs finite.  Plugin hooks run in registration order:
``start`` before traversal, ``analyze`` after each module, ``end`` last.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from wcmatch import glob

from .config import DEFAULT_EXPORT_CONDITIONS, DEPENDENCY_STORE
from .errors import ConfigurationError, ResolutionError
from .graph import GLOB_FLAGS, ModuleGraph
from .lexer import ModuleLexer, get_lexer
from .models import ExternalModule, Module
from .package_root import in_dependency_store, resolve_package_root
from .pipeline import ResolutionPipeline, handle_import
from .plugin import Plugin, StartContext, call_hook, run_hook, validate_plugins
from .specifiers import (
    extract_package_name,
    is_bare_specifier,
    is_builtin_module,
    to_unix,
)
from .symbols import normalize_specifier

logger = logging.getLogger(__name__)

ExcludePattern = Union[str, Callable[[str], bool]]


@dataclass
class ExternalOptions:
    """Filtering of bare (package) specifiers before resolution."""

    ignore: bool = False
    include: List[str] = field(default_factory=list)
    exclude: List[str] = field(default_factory=list)

    @classmethod
    def coerce(cls, value: Union["ExternalOptions", Mapping[str, Any], None]) -> "ExternalOptions":
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        unknown = set(value) - {"ignore", "include", "exclude"}
        if unknown:
            raise ConfigurationError(f"Unknown external option(s): {', '.join(sorted(unknown))}")
        return cls(
            ignore=bool(value.get("ignore", False)),
            include=list(value.get("include") or []),
            exclude=list(value.get("exclude") or []),
        )

    def validate(self) -> None:
        if self.ignore and self.include:
            raise ConfigurationError('Cannot use both "ignore" and "include" in the external option.')

    def skips(self, specifier: str) -> bool:
        if not is_bare_specifier(specifier):
            return False
        if self.ignore:
            return True
        package = extract_package_name(specifier)
        if self.exclude and package in self.exclude:
            return True
        if self.include and package not in self.include:
            return True
        return False


def compile_excludes(patterns: Sequence[ExcludePattern]) -> List[Callable[[str], bool]]:
    matchers: List[Callable[[str], bool]] = []
    for pattern in patterns:
        if callable(pattern):
            matchers.append(pattern)
        elif isinstance(pattern, str):
            matchers.append(lambda path, p=pattern: glob.globmatch(path, p, flags=GLOB_FLAGS))
        else:
            raise ConfigurationError(f"Exclude entries must be glob strings or callables, got {pattern!r}")
    return matchers


def relative_module_path(base_path: Path, location: Union[str, Path]) -> str:
    """POSIX path of *location* relative to *base_path*."""
    return to_unix(os.path.relpath(os.path.join(base_path, location), base_path))


def _placeholder(module_path: str, location: Path) -> Module:
    href = location.as_uri()
    return Module(
        path=module_path,
        href=href,
        pathname=_url_path(href),
        source="",
        facade=False,
        has_module_syntax=True,
        imported_by=[],
    )


def _url_path(href: str) -> str:
    return href[len("file://"):] if href.startswith("file://") else href


async def create_module_graph(
    entrypoints: Union[str, Sequence[str]],
    *,
    base_path: Union[str, Path, None] = None,
    plugins: Sequence[Plugin] = (),
    export_conditions: Optional[Sequence[str]] = None,
    ignore_dynamic_import: bool = False,
    external: Union[ExternalOptions, Mapping[str, Any], None] = None,
    exclude: Sequence[ExcludePattern] = (),
    strict: bool = True,
    lexer: Optional[ModuleLexer] = None,
    **resolve_options: Any,
) -> ModuleGraph:
    """Build the module graph reachable from *entrypoints*.

    Args:
        entrypoints: One path or a list of paths, relative to *base_path*.
        base_path: Root all module paths are relative to (default: cwd).
        plugins: Ordered :class:`~modgraph_cli.plugin.Plugin` list.
        export_conditions: Package ``exports`` conditions (default ``node``, ``import``).
        ignore_dynamic_import: Do not follow ``import()`` calls.
        external: Bare specifier filtering (``ignore``/``include``/``exclude``).
        exclude: Globs or predicates over resolved relative paths; matching
            edges are dropped.
        strict: Abort on unresolvable specifiers instead of logging and
            skipping them.
        resolve_options: Passed to the default resolver and to ``resolve`` hooks.

    Raises:
        ConfigurationError: Conflicting options or an unnamed plugin.
        ResolutionError: In strict mode, when a specifier cannot be resolved.
        PluginHookError: When any plugin hook raises.
        OSError: When a module cannot be read.
    """
    base = Path(base_path).resolve() if base_path is not None else Path.cwd()
    conditions = list(export_conditions) if export_conditions is not None else list(DEFAULT_EXPORT_CONDITIONS)
    external_options = ExternalOptions.coerce(external)
    external_options.validate()
    plugins = validate_plugins(plugins)
    excludes = compile_excludes(exclude)
    lexer = lexer or get_lexer()
    pipeline = ResolutionPipeline(plugins, conditions, resolve_options)

    raw_entrypoints = [entrypoints] if isinstance(entrypoints, str) else list(entrypoints)
    modules = [relative_module_path(base, e) for e in raw_entrypoints]

    await run_hook(
        plugins,
        "start",
        StartContext(entrypoints=list(modules), base_path=base, export_conditions=list(conditions)),
    )

    graph = ModuleGraph(base, modules)
    for module_path in modules:
        graph.add_module(_placeholder(module_path, base / module_path))

    worklist: Dict[str, None] = dict.fromkeys(modules)

    while worklist:
        dep = next(iter(worklist))
        del worklist[dep]
        current = graph.modules[dep]
        importer = base / dep
        # Imported assets (images, fonts) may hold arbitrary bytes.
        source = importer.read_bytes().decode("utf-8", errors="replace")
        lexed = lexer.lex(source, dep)
        logger.debug("Visiting %s (%d imports)", dep, len(lexed.imports))

        for descriptor in lexed.imports:
            importee = descriptor.specifier
            if not importee:
                continue
            if ignore_dynamic_import and descriptor.is_dynamic:
                continue
            if external_options.skips(importee):
                logger.debug("Skipping external %r in %s", importee, dep)
                continue

            importee = await handle_import(plugins, source, dep, importee)
            if importee is None:
                continue
            if not importee:
                logger.debug("Skipping empty specifier rewritten in %s", dep)
                continue
            if is_builtin_module(importee):
                continue

            try:
                resolved = await pipeline.resolve(importee, importer)
            except ResolutionError as exc:
                if strict:
                    raise
                logger.warning("%s", exc)
                continue

            dependency_path = relative_module_path(base, resolved)
            # Excludes see the resolved path (node_modules/foo/index.js), not "foo".
            if any(match(dependency_path) for match in excludes):
                logger.debug("Excluded %s", dependency_path)
                continue

            if dependency_path not in graph.modules:
                module = _placeholder(dependency_path, resolved)
                if in_dependency_store(dependency_path, DEPENDENCY_STORE):
                    owner = resolve_package_root(resolved, DEPENDENCY_STORE)
                    if owner is not None:
                        module.package_root = owner[1]
                graph.add_module(module)
                worklist[dependency_path] = None

            _register_external(graph, graph.modules[dependency_path], importee, resolved)
            graph.add_edge(dep, dependency_path)
            current.resolved_imports[normalize_specifier(descriptor.specifier)] = dependency_path

        current.source = source
        current.facade = lexed.facade
        current.has_module_syntax = lexed.has_module_syntax

        external_module = graph.external_modules.get(current.pathname)
        if external_module is not None:
            external_module.source = source
            external_module.facade = lexed.facade
            external_module.has_module_syntax = lexed.has_module_syntax

        await run_hook(plugins, "analyze", current)

    for plugin in plugins:
        replacement = await call_hook(plugin, "end", graph)
        if isinstance(replacement, ModuleGraph):
            graph = replacement

    return graph


def _register_external(graph: ModuleGraph, module: Module, importee: str, location: Path) -> None:
    """Record a dependency-store module reached through a bare specifier."""
    if module.package_root is None or not is_bare_specifier(importee):
        return
    if module.pathname in graph.external_modules:
        return
    owner = resolve_package_root(location, DEPENDENCY_STORE)
    graph.external_modules[module.pathname] = ExternalModule(
        path=module.path,
        href=module.href,
        pathname=module.pathname,
        source=module.source,
        facade=module.facade,
        has_module_syntax=module.has_module_syntax,
        imported_by=module.imported_by,
        resolved_imports=module.resolved_imports,
        package_root=module.package_root,
        package_name=owner[0] if owner else extract_package_name(importee),
        import_specifier=importee,
    )
