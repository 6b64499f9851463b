"""Plugins shipped with modgraph."""

from __future__ import annotations

from typing import Callable, Dict, List, Sequence

from ..errors import ConfigurationError
from ..plugin import Plugin
from .barrel_file import barrel_file
from .exports import exports_plugin
from .imports import imports_plugin
from .typescript import typescript
from .unused_exports import unused_exports

# Names accepted by the ``plugins`` key of modgraph.toml.
BUILTIN_PLUGINS: Dict[str, Callable[[], Plugin]] = {
    "barrel-file": barrel_file,
    "exports": lambda: exports_plugin,
    "imports": lambda: imports_plugin,
    "typescript": typescript,
    "unused-exports": unused_exports,
}


def load_builtin_plugins(names: Sequence[str]) -> List[Plugin]:
    plugins: List[Plugin] = []
    for name in names:
        factory = BUILTIN_PLUGINS.get(name)
        if factory is None:
            known = ", ".join(sorted(BUILTIN_PLUGINS))
            raise ConfigurationError(f"Unknown plugin '{name}'. Available: {known}")
        plugins.append(factory())
    return plugins


__all__ = [
    "BUILTIN_PLUGINS",
    "barrel_file",
    "exports_plugin",
    "imports_plugin",
    "load_builtin_plugins",
    "typescript",
    "unused_exports",
]
