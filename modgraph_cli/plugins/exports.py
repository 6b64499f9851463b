"""Attach the collected export records to every visited module."""

from __future__ import annotations

from ..models import Module
from ..plugin import Plugin
from ..symbols import collect_exports


def _analyze(module: Module) -> None:
    module.exports = collect_exports(module.source, module.path)


exports_plugin = Plugin(name="exports-plugin", analyze=_analyze)
