"""Core data models shared by the lexer, builder, graph, and plugins."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional


@dataclass
class ImportDescriptor:
    specifier: Optional[str]
    start: int
    end: int
    is_dynamic: bool = False


@dataclass
class ExportDescriptor:
    name: str
    local_name: Optional[str] = None


@dataclass
class LexResult:
    imports: List[ImportDescriptor] = field(default_factory=list)
    exports: List[ExportDescriptor] = field(default_factory=list)
    facade: bool = False
    has_module_syntax: bool = False


@dataclass
class ImportRecord:
    """An import declared by a module, as seen by analysis plugins."""

    name: Optional[str]
    kind: str  # "default", "named", "aggregate", "side-effect"
    module: str
    is_type_only: bool = False
    alias: Optional[str] = None


@dataclass
class Declaration:
    name: str
    module: Optional[str] = None
    package: Optional[str] = None


@dataclass
class ExportRecord:
    """An export declared by a module; ``declaration`` says where it comes from."""

    name: str
    declaration: Declaration


@dataclass
class Module:
    """One source file discovered during traversal.

    Plugins may attach any extra attribute in their ``analyze`` hook.
    """

    path: str
    href: str
    pathname: str
    source: str = ""
    facade: bool = False
    has_module_syntax: bool = True
    imported_by: List[str] = field(default_factory=list)
    package_root: Optional[Path] = None
    imports: Optional[List[ImportRecord]] = None
    exports: Optional[List[ExportRecord]] = None
    # import specifier (as normalized by the analysis plugins) -> dependency path
    resolved_imports: Dict[str, str] = field(default_factory=dict)


@dataclass
class ExternalModule(Module):
    """A module reached through a bare specifier inside the dependency store."""

    package_name: str = ""
    import_specifier: str = ""
