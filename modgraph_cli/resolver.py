"""Default Node-style module resolution.

Resolves an import specifier from an importer file the way Node's ESM loader
(and bundlers following it) would:

- ``file:`` URLs, absolute paths, and relative specifiers, with extension
  and directory-index probing
- bare specifiers through ``node_modules`` lookup, honouring ``package.json``
  ``exports`` (conditions, subpaths, ``*`` patterns) before main fields
- ``#private`` specifiers through the nearest ``package.json`` ``imports``

Every failure surfaces as :class:`~modgraph_cli.errors.ResolutionError`.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple, Union
from urllib.parse import urlparse
from urllib.request import url2pathname

from .config import (
    BASE_CONDITIONS,
    DEFAULT_EXTENSIONS,
    DEFAULT_MAIN_FIELDS,
    DEFAULT_MODULE_DIRECTORIES,
)
from .errors import ResolutionError
from .specifiers import extract_package_name, is_bare_specifier

logger = logging.getLogger(__name__)

Location = Union[str, Path]

# Keyword options understood by NodeResolver; other options only reach plugins.
RESOLVER_OPTIONS = ("extensions", "main_fields", "module_directories", "preserve_symlinks", "browser")


def to_path(location: Location) -> Path:
    """Accept a ``Path``, a filesystem path string, or a ``file:`` URL."""
    if isinstance(location, Path):
        return location
    if location.startswith("file:"):
        return Path(url2pathname(urlparse(location).path))
    return Path(location)


class NodeResolver:
    """Resolve specifiers to absolute file paths."""

    def __init__(
        self,
        export_conditions: Sequence[str] = (),
        extensions: Sequence[str] = DEFAULT_EXTENSIONS,
        main_fields: Sequence[str] = DEFAULT_MAIN_FIELDS,
        module_directories: Sequence[str] = DEFAULT_MODULE_DIRECTORIES,
        preserve_symlinks: bool = False,
        browser: bool = False,
    ) -> None:
        conditions = list(BASE_CONDITIONS) + list(export_conditions)
        if browser:
            conditions.append("browser")
        self.conditions = set(conditions)
        self.extensions = list(extensions)
        self.main_fields = list(main_fields)
        self.module_directories = list(module_directories)
        self.preserve_symlinks = preserve_symlinks
        self._package_cache: Dict[Path, Optional[Dict[str, Any]]] = {}

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def resolve(self, specifier: str, importer: Location) -> Path:
        importer_path = to_path(importer)
        resolved = self._resolve(specifier, importer_path)
        if resolved is None:
            raise ResolutionError(specifier, importer_path)
        if not self.preserve_symlinks:
            resolved = Path(os.path.realpath(resolved))
        return resolved

    def _resolve(self, specifier: str, importer: Path) -> Optional[Path]:
        if specifier.startswith("file:"):
            return self._resolve_file_or_directory(to_path(specifier))
        if specifier.startswith("#"):
            return self._resolve_package_imports(specifier, importer.parent)
        if specifier.startswith(("./", "../", "/")) or specifier in (".", ".."):
            return self._resolve_file_or_directory(importer.parent / specifier)
        if is_bare_specifier(specifier):
            return self._resolve_package(specifier, importer.parent)
        return None

    # ------------------------------------------------------------------
    # Files and directories
    # ------------------------------------------------------------------

    def _resolve_file(self, path: Path) -> Optional[Path]:
        if path.is_file():
            return path
        for ext in self.extensions:
            candidate = path.with_name(path.name + ext)
            if candidate.is_file():
                return candidate
        return None

    def _resolve_directory(self, directory: Path) -> Optional[Path]:
        if not directory.is_dir():
            return None
        pkg = self._read_package_json(directory)
        if pkg is not None:
            for field_name in self.main_fields:
                entry = pkg.get(field_name)
                if isinstance(entry, str) and entry:
                    found = self._resolve_file_or_directory(directory / entry, allow_main=False)
                    if found is not None:
                        return found
        return self._resolve_file(directory / "index")

    def _resolve_file_or_directory(self, path: Path, allow_main: bool = True) -> Optional[Path]:
        found = self._resolve_file(path)
        if found is not None:
            return found
        if allow_main:
            return self._resolve_directory(path)
        return self._resolve_file(path / "index")

    # ------------------------------------------------------------------
    # Packages
    # ------------------------------------------------------------------

    def _package_dirs(self, name: str, start: Path) -> Iterable[Path]:
        for directory in [start, *start.parents]:
            if directory.name in self.module_directories:
                continue
            for module_dir in self.module_directories:
                candidate = directory / module_dir / name
                if candidate.is_dir():
                    yield candidate

    def _resolve_package(self, specifier: str, start: Path) -> Optional[Path]:
        name = extract_package_name(specifier)
        subpath = specifier[len(name):]  # "" or "/sub/path"

        for package_dir in self._package_dirs(name, start):
            pkg = self._read_package_json(package_dir)
            if pkg is not None and pkg.get("exports") is not None:
                found = self._resolve_exports(package_dir, "." + subpath, pkg["exports"])
            elif subpath:
                found = self._resolve_file_or_directory(package_dir / subpath.lstrip("/"))
            else:
                found = self._resolve_directory(package_dir)
            if found is not None:
                logger.debug("Resolved package %s -> %s", specifier, found)
                return found
        return None

    def _resolve_exports(self, package_dir: Path, subpath: str, exports: Any) -> Optional[Path]:
        if isinstance(exports, (str, list)) or (
            isinstance(exports, dict) and not any(k.startswith(".") for k in exports)
        ):
            exports = {".": exports}
        if not isinstance(exports, dict):
            return None
        return self._resolve_map(package_dir, subpath, exports)

    def _resolve_package_imports(self, specifier: str, start: Path) -> Optional[Path]:
        scope = self._find_package_scope(start)
        if scope is None:
            return None
        package_dir, pkg = scope
        imports = pkg.get("imports")
        if not isinstance(imports, dict):
            return None
        return self._resolve_map(package_dir, specifier, imports, allow_bare=True)

    def _find_package_scope(self, start: Path) -> Optional[Tuple[Path, Dict[str, Any]]]:
        for directory in [start, *start.parents]:
            pkg = self._read_package_json(directory)
            if pkg is not None:
                return directory, pkg
        return None

    # ------------------------------------------------------------------
    # exports / imports maps
    # ------------------------------------------------------------------

    def _resolve_map(
        self,
        package_dir: Path,
        key: str,
        mapping: Dict[str, Any],
        allow_bare: bool = False,
    ) -> Optional[Path]:
        if key in mapping and "*" not in key:
            return self._resolve_target(package_dir, mapping[key], None, allow_bare)

        best: Optional[Tuple[str, str]] = None
        for pattern in mapping:
            if pattern.count("*") != 1:
                continue
            prefix, suffix = pattern.split("*")
            if not key.startswith(prefix) or key == prefix:
                continue
            if suffix and (not key.endswith(suffix) or len(key) < len(pattern)):
                continue
            if best is None or len(prefix) > len(best[0].split("*")[0]):
                match = key[len(prefix): len(key) - len(suffix) if suffix else None]
                best = (pattern, match)

        if best is None:
            return None
        pattern, match = best
        return self._resolve_target(package_dir, mapping[pattern], match, allow_bare)

    def _resolve_target(
        self,
        package_dir: Path,
        target: Any,
        pattern_match: Optional[str],
        allow_bare: bool,
    ) -> Optional[Path]:
        if isinstance(target, str):
            if pattern_match is not None:
                target = target.replace("*", pattern_match)
            if target.startswith("./"):
                candidate = package_dir / target[2:]
                return candidate if candidate.is_file() else None
            if allow_bare and is_bare_specifier(target):
                return self._resolve_package(target, package_dir)
            return None
        if isinstance(target, list):
            for item in target:
                found = self._resolve_target(package_dir, item, pattern_match, allow_bare)
                if found is not None:
                    return found
            return None
        if isinstance(target, dict):
            for condition, value in target.items():
                if condition in self.conditions:
                    found = self._resolve_target(package_dir, value, pattern_match, allow_bare)
                    if found is not None:
                        return found
            return None
        return None

    # ------------------------------------------------------------------
    # package.json
    # ------------------------------------------------------------------

    def _read_package_json(self, directory: Path) -> Optional[Dict[str, Any]]:
        if directory in self._package_cache:
            return self._package_cache[directory]
        pkg: Optional[Dict[str, Any]] = None
        pkg_file = directory / "package.json"
        if pkg_file.is_file():
            try:
                data = json.loads(pkg_file.read_text(encoding="utf-8"))
                pkg = data if isinstance(data, dict) else None
            except (OSError, json.JSONDecodeError) as exc:
                logger.warning("Could not read %s: %s", pkg_file, exc)
        self._package_cache[directory] = pkg
        return pkg


