"""Report exports that no importing module consumes.

During ``analyze`` every module gets its ``imports`` and ``exports``
records.  During ``end`` each module's own exports (re-exports are skipped)
are checked against the modules listed in its ``imported_by``:

- ``default`` is used by a default import (``import b``, or
  ``import { default as b }``) of the same file
- a named export is used by a named import of the same name, or by an
  aggregate import (``import * as ns``, literal ``import()``) of the file
- failing that, an importer that re-exports the name from the same file
  counts as a consumer (``export *`` forwards everything except
  ``default``; ``export * as ns`` forwards everything)

A specifier refers to a module when the importer resolved it to that module
(package names, directory imports and ``#private`` imports included).  Other
specifiers are compared by file name; JavaScript and TypeScript sources are
compared by stem so ``./b.js`` matches ``b.ts``.  Type-only imports count as
usage.  The findings are attached to the graph as ``unused_exports``.
"""

from __future__ import annotations

import logging
import posixpath
from typing import List, Optional

from ..config import SUPPORTED_EXTENSIONS
from ..graph import ModuleGraph
from ..models import ExportRecord, ImportRecord, Module
from ..plugin import Plugin
from ..symbols import collect_exports, collect_imports

logger = logging.getLogger(__name__)


def same_file(specifier_path: Optional[str], module_path: str) -> bool:
    if not specifier_path:
        return False
    left = posixpath.basename(specifier_path)
    right = posixpath.basename(module_path)
    if left == right:
        return True
    left_stem, left_ext = posixpath.splitext(left)
    right_stem, right_ext = posixpath.splitext(right)
    comparable = {"", *SUPPORTED_EXTENSIONS}
    return left_stem == right_stem and left_ext in comparable and right_ext in comparable


def targets(importer: Module, specifier: Optional[str], module: Module) -> bool:
    """Whether *specifier*, written in *importer*, refers to *module*."""
    resolved = importer.resolved_imports.get(specifier) if specifier else None
    if resolved is not None:
        return resolved == module.path
    return same_file(specifier, module.path)


def is_default_import(record: ImportRecord) -> bool:
    return record.kind == "default" or (record.kind == "named" and record.name == "default")


def is_own_export(export: ExportRecord, module: Module) -> bool:
    return export.declaration.package is None and export.declaration.module == module.path


def _imported_directly(export: ExportRecord, module: Module, importer: Module) -> bool:
    for record in importer.imports or []:
        if not targets(importer, record.module, module):
            continue
        if export.name == "default":
            if is_default_import(record):
                return True
        elif record.kind == "aggregate":
            return True
        elif record.kind == "named" and record.name == export.name:
            return True
    return False


def _reexported(export: ExportRecord, module: Module, importer: Module) -> bool:
    for record in importer.exports or []:
        declaration = record.declaration
        if not targets(importer, declaration.package or declaration.module, module):
            continue
        if declaration.name == "*":
            # ``export *`` never forwards the default export.
            if record.name != "*" or export.name != "default":
                return True
        elif declaration.name == export.name:
            return True
    return False


def is_export_used(graph: ModuleGraph, module: Module, export: ExportRecord) -> bool:
    for importer_path in module.imported_by:
        importer = graph.get(importer_path)
        if importer is None:
            continue
        if _imported_directly(export, module, importer) or _reexported(export, module, importer):
            return True
    return False


def find_unused_exports(graph: ModuleGraph) -> List[ExportRecord]:
    unused: List[ExportRecord] = []
    for module in graph.modules.values():
        for export in module.exports or []:
            if not is_own_export(export, module):
                continue
            if not is_export_used(graph, module, export):
                unused.append(export)
    return unused


def _analyze(module: Module) -> None:
    module.imports = collect_imports(module.source, module.path)
    module.exports = collect_exports(module.source, module.path)


def _end(graph: ModuleGraph) -> None:
    graph.unused_exports = find_unused_exports(graph)
    logger.debug("Found %d unused export(s)", len(graph.unused_exports))


def unused_exports() -> Plugin:
    return Plugin(name="find-unused-exports", analyze=_analyze, end=_end)
