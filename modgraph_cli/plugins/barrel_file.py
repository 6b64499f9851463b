"""Flag modules that only forward exports from other modules."""

from __future__ import annotations

from ..models import Module
from ..plugin import Plugin
from ..symbols import collect_exports


def is_barrel_file(module: Module, threshold: int) -> bool:
    """A facade module whose export count (``export *`` counts once) exceeds *threshold*."""
    if not module.facade:
        return False
    return len(collect_exports(module.source, module.path)) > threshold


def barrel_file(amount_of_exports_to_consider_module_as_barrel: int = 5) -> Plugin:
    def analyze(module: Module) -> None:
        module.is_barrel_file = is_barrel_file(module, amount_of_exports_to_consider_module_as_barrel)

    return Plugin(name="barrel-file-plugin", analyze=analyze)
