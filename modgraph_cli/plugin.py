"""Plugin interface and guarded hook invocation.

A plugin is a named bundle of five optional hooks, each called in plugin
registration order:

``start(ctx: StartContext)``
    Once, before traversal.
``handle_import(ctx: ImportContext) -> None | False | str``
    Per import occurrence. ``False`` drops the import, a string rewrites the
    specifier, anything else leaves it alone.
``resolve(ctx: ResolveContext) -> location | None``
    Per import. The first truthy location wins; later plugins are skipped.
``analyze(module: Module)``
    Once per visited module; may attach attributes to it.
``end(graph: ModuleGraph) -> None | ModuleGraph``
    Once, after traversal; returning a graph replaces the result.

Hooks may be plain functions or coroutine functions.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from .errors import ConfigurationError, PluginHookError

HOOK_NAMES = ("start", "handle_import", "resolve", "analyze", "end")


@dataclass
class StartContext:
    entrypoints: List[str]
    base_path: Path
    export_conditions: List[str]


@dataclass
class ImportContext:
    source: str
    importer: str
    importee: str


@dataclass
class ResolveContext:
    importee: str
    importer: Path
    export_conditions: List[str]
    options: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Plugin:
    name: str
    start: Optional[Callable[..., Any]] = None
    handle_import: Optional[Callable[..., Any]] = None
    resolve: Optional[Callable[..., Any]] = None
    analyze: Optional[Callable[..., Any]] = None
    end: Optional[Callable[..., Any]] = None


def validate_plugins(plugins: Sequence[Plugin]) -> List[Plugin]:
    validated = list(plugins)
    for plugin in validated:
        if not getattr(plugin, "name", None):
            raise ConfigurationError("Plugin must have a name")
        for hook_name in HOOK_NAMES:
            hook = getattr(plugin, hook_name, None)
            if hook is not None and not callable(hook):
                raise ConfigurationError(f'Plugin "{plugin.name}" has a non-callable "{hook_name}" hook')
    return validated


async def call_hook(plugin: Plugin, hook_name: str, *args: Any) -> Any:
    """Run one hook; any error comes back wrapped with its origin."""
    hook = getattr(plugin, hook_name, None)
    if hook is None:
        return None
    try:
        result = hook(*args)
        if inspect.isawaitable(result):
            result = await result
    except Exception as exc:
        raise PluginHookError(plugin.name, hook_name, exc) from exc
    return result


async def run_hook(plugins: Sequence[Plugin], hook_name: str, *args: Any) -> None:
    """Call *hook_name* on every plugin that defines it, in order."""
    for plugin in plugins:
        await call_hook(plugin, hook_name, *args)
