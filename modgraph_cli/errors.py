"""Exception hierarchy for module graph construction.

Every error raised on purpose by the engine inherits from
:class:`ModGraphError` so the CLI can report them uniformly.
"""

from __future__ import annotations

from pathlib import Path
from typing import Union


class ModGraphError(Exception):
    """Base exception for all module graph errors."""


class ConfigurationError(ModGraphError):
    """Invalid build options or plugin definitions; raised before traversal."""


class ResolutionError(ModGraphError):
    """A specifier could not be resolved from its importer."""

    def __init__(self, specifier: str, importer: Union[str, Path]):
        self.specifier = specifier
        self.importer = str(importer)
        super().__init__(f'Failed to resolve "{specifier}" from "{self.importer}".')


class PluginHookError(ModGraphError):
    """A plugin hook raised; wraps the original error with its origin."""

    def __init__(self, plugin_name: str, hook_name: str, original: BaseException):
        self.plugin_name = plugin_name
        self.hook_name = hook_name
        self.original = original
        detail = f"{type(original).__name__}: {original}"
        super().__init__(
            f'[PLUGIN] "{plugin_name}" failed on the "{hook_name}" hook.\n\n{detail}'
        )
