"""Attach the collected import records to every visited module."""

from __future__ import annotations

from ..models import Module
from ..plugin import Plugin
from ..symbols import collect_imports


def _analyze(module: Module) -> None:
    module.imports = collect_imports(module.source, module.path)


imports_plugin = Plugin(name="imports-plugin", analyze=_analyze)
