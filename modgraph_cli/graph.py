"""The module graph produced by :func:`~modgraph_cli.builder.create_module_graph`."""

from __future__ import annotations

import posixpath
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Union

from wcmatch import glob

from .models import ExternalModule, Module

Target = Union[str, Callable[[str], bool]]

# `*` stays within one path segment; `**` spans directories.
GLOB_FLAGS = glob.GLOBSTAR | glob.BRACE


def _matcher(target: Target) -> Callable[[str], bool]:
    if callable(target):
        return target
    return lambda path: path == target


class ModuleGraph:
    """Path-keyed adjacency plus module records.

    ``adjacency`` maps a module path to the paths it imports directly, in
    discovery order without duplicates.  Every path in ``adjacency`` (key or
    edge) has a record in ``modules``.  ``external_modules`` is keyed by the
    resolved location's URL path and covers modules inside the dependency
    store that were reached through a bare specifier.

    Plugins may attach extra attributes (for example ``unused_exports``).
    """

    def __init__(self, base_path: Path, entrypoints: Sequence[str]) -> None:
        self.base_path = Path(base_path)
        self.entrypoints: List[str] = [posixpath.normpath(e) for e in entrypoints]
        self.adjacency: Dict[str, List[str]] = {}
        self.modules: Dict[str, Module] = {}
        self.external_modules: Dict[str, ExternalModule] = {}

    # ------------------------------------------------------------------
    # Mutation (builder only)
    # ------------------------------------------------------------------

    def add_module(self, module: Module) -> None:
        self.modules[module.path] = module
        self.adjacency.setdefault(module.path, [])

    def add_edge(self, importer: str, dependency: str) -> None:
        edges = self.adjacency.setdefault(importer, [])
        if dependency not in edges:
            edges.append(dependency)
        module = self.modules.get(dependency)
        if module is not None and importer not in module.imported_by:
            module.imported_by.append(importer)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, target: Target) -> Optional[Module]:
        """Exact path lookup, or the first module whose path satisfies *target*."""
        if not callable(target):
            return self.modules.get(target)
        for path, module in self.modules.items():
            if target(path):
                return module
        return None

    def find(self, target: Target) -> List[Module]:
        """Every module matching an exact path, a predicate, or a glob."""
        if callable(target):
            match = target
        elif any(ch in target for ch in "*?[{"):
            match = lambda path: glob.globmatch(path, target, flags=GLOB_FLAGS)  # noqa: E731
        else:
            match = _matcher(target)
        return [module for path, module in self.modules.items() if match(path)]

    def get_unique_modules(self) -> List[str]:
        unique: Dict[str, None] = {}
        for module, dependencies in self.adjacency.items():
            unique[module] = None
            for dependency in dependencies:
                unique[dependency] = None
        return list(unique)

    def find_import_chains(self, target: Target) -> List[List[str]]:
        """All import paths from an entrypoint to a module matching *target*.

        Depth-first per entrypoint; a branch stops at the first match.  A
        module already on the current path is never revisited, so cycles
        terminate while a module can still appear in several chains.
        """
        matches = _matcher(target)
        chains: List[List[str]] = []

        for entrypoint in self.entrypoints:
            stack: List[List[str]] = [[entrypoint]]
            while stack:
                chain = stack.pop()
                module = chain[-1]
                if matches(module):
                    chains.append(chain)
                    continue
                on_path = set(chain)
                dependencies = [
                    dep for dep in self.adjacency.get(module, []) if dep not in on_path
                ]
                for dependency in reversed(dependencies):
                    stack.append(chain + [dependency])

        return chains

    def __repr__(self) -> str:
        return (
            f"ModuleGraph(base_path={str(self.base_path)!r}, "
            f"entrypoints={self.entrypoints!r}, modules={len(self.modules)})"
        )
