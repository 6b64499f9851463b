"""Static ES module graph construction and queries."""

from __future__ import annotations

__version__ = "0.3.0"

from .builder import create_module_graph
from .errors import ConfigurationError, ModGraphError, PluginHookError, ResolutionError
from .graph import ModuleGraph
from .models import ExternalModule, Module
from .plugin import ImportContext, Plugin, ResolveContext, StartContext

__all__ = [
    "__version__",
    "ConfigurationError",
    "ExternalModule",
    "ImportContext",
    "ModGraphError",
    "Module",
    "ModuleGraph",
    "Plugin",
    "PluginHookError",
    "ResolutionError",
    "ResolveContext",
    "StartContext",
    "create_module_graph",
]
