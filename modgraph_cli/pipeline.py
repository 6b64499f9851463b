"""Sequential plugin pipelines for specifier rewriting and resolution."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .plugin import ImportContext, Plugin, ResolveContext, call_hook
from .resolver import RESOLVER_OPTIONS, NodeResolver, to_path

logger = logging.getLogger(__name__)


async def handle_import(
    plugins: Sequence[Plugin],
    source: str,
    importer: str,
    importee: str,
) -> Optional[str]:
    """Run the ``handle_import`` chain; return the final specifier or None if dropped."""
    for plugin in plugins:
        if plugin.handle_import is None:
            continue
        result = await call_hook(
            plugin,
            "handle_import",
            ImportContext(source=source, importer=importer, importee=importee),
        )
        if result is False:
            logger.debug("%s dropped %r in %s", plugin.name, importee, importer)
            return None
        if isinstance(result, str):
            logger.debug("%s rewrote %r -> %r in %s", plugin.name, importee, result, importer)
            importee = result
    return importee


class ResolutionPipeline:
    """First plugin to return a location wins; otherwise the default resolver."""

    def __init__(
        self,
        plugins: Sequence[Plugin],
        export_conditions: List[str],
        resolve_options: Optional[Dict[str, Any]] = None,
        resolver: Optional[NodeResolver] = None,
    ) -> None:
        self.plugins = list(plugins)
        self.export_conditions = list(export_conditions)
        self.resolve_options = dict(resolve_options or {})
        self.resolver = resolver or NodeResolver(
            export_conditions=self.export_conditions,
            **{k: v for k, v in self.resolve_options.items() if k in RESOLVER_OPTIONS},
        )

    async def resolve(self, importee: str, importer: Path) -> Path:
        """Return the absolute resolved path; raises ``ResolutionError``."""
        for plugin in self.plugins:
            if plugin.resolve is None:
                continue
            result = await call_hook(
                plugin,
                "resolve",
                ResolveContext(
                    importee=importee,
                    importer=importer,
                    export_conditions=list(self.export_conditions),
                    options=dict(self.resolve_options),
                ),
            )
            if result:
                logger.debug("%s resolved %r -> %s", plugin.name, importee, result)
                return to_path(result)

        return self.resolver.resolve(importee, importer)
