"""TypeScript-aware resolution.

Resolves specifiers the way ``tsc`` would find their *sources*:

- ``./foo.js`` is looked up as ``foo.ts``/``foo.tsx`` first
- extensionless specifiers probe ``.ts``, ``.tsx``, ``.d.ts`` and ``index``
  files, except for relative specifiers under ``node16``/``nodenext``
- ``compilerOptions.paths`` and ``baseUrl`` apply to non-relative specifiers

When the only match is a ``.d.ts`` file, or nothing matches, the hook returns
None and the default resolver takes over.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from ..plugin import Plugin, ResolveContext, StartContext
from ..specifiers import is_bare_specifier

logger = logging.getLogger(__name__)

TSCONFIG_FILENAME = "tsconfig.json"

# Emitted extension -> source extensions to try, in order.
SOURCE_EXTENSIONS: Dict[str, List[str]] = {
    ".js": [".ts", ".tsx"],
    ".jsx": [".tsx"],
    ".mjs": [".mts"],
    ".cjs": [".cts"],
}
TS_EXTENSIONS = (".ts", ".tsx", ".mts", ".cts")
PROBE_EXTENSIONS = (".ts", ".tsx", ".d.ts")
STRICT_RESOLUTION = {"node16", "nodenext"}

# A string literal, or a comment / trailing comma to drop.
_JSONC_NOISE = re.compile(r'("(?:\\.|[^"\\])*")|//[^\n]*|/\*.*?\*/|,(?=\s*[}\]])', re.S)


def strip_jsonc(text: str) -> str:
    """Remove comments and trailing commas from tsconfig-style JSON."""
    return _JSONC_NOISE.sub(lambda m: m.group(1) or "", text)


def load_tsconfig(path: Path, max_depth: int = 6) -> Dict[str, Any]:
    """``compilerOptions`` of *path*, merged over any relative ``extends`` chain.

    Relative ``baseUrl`` values are made absolute against the file declaring them.
    """
    chain: List[Path] = []
    current: Optional[Path] = path
    while current is not None and current.is_file() and len(chain) < max_depth:
        if current in chain:
            break
        chain.append(current)
        data = json.loads(strip_jsonc(current.read_text(encoding="utf-8")))
        extends = data.get("extends") if isinstance(data, dict) else None
        current = None
        if isinstance(extends, str) and extends.startswith((".", "/")):
            target = chain[-1].parent / extends
            current = target if target.suffix == ".json" else target.with_name(target.name + ".json")

    merged: Dict[str, Any] = {}
    for config_path in reversed(chain):
        data = json.loads(strip_jsonc(config_path.read_text(encoding="utf-8")))
        options = data.get("compilerOptions") if isinstance(data, dict) else None
        if not isinstance(options, dict):
            continue
        options = dict(options)
        if isinstance(options.get("baseUrl"), str):
            options["baseUrl"] = str((config_path.parent / options["baseUrl"]).resolve())
        options.setdefault("pathsBasePath", str(config_path.parent.resolve()))
        merged.update(options)
    return merged


class TypeScriptResolver:
    """Stateful resolver behind the ``typescript`` plugin."""

    def __init__(self, compiler_options: Optional[Dict[str, Any]] = None) -> None:
        self.explicit_options = dict(compiler_options or {})
        self.compiler_options: Dict[str, Any] = dict(self.explicit_options)
        self.root = Path.cwd()

    def configure(self, base_path: Path) -> None:
        self.root = Path(base_path)
        tsconfig = self.root / TSCONFIG_FILENAME
        options = load_tsconfig(tsconfig) if tsconfig.is_file() else {}
        if tsconfig.is_file():
            logger.debug("Loaded %s", tsconfig)
        options.update(self.explicit_options)
        if isinstance(options.get("baseUrl"), str):
            options["baseUrl"] = str((self.root / options["baseUrl"]).resolve())
        self.compiler_options = options

    @property
    def module_resolution(self) -> str:
        return str(self.compiler_options.get("moduleResolution", "")).lower()

    def resolve(self, importee: str, importer: Path) -> Optional[Path]:
        if importee.startswith(("./", "../", "/")) or importee in (".", ".."):
            base = importer.parent / importee
            return self._first_source(base, allow_probe=self.module_resolution not in STRICT_RESOLUTION)

        for candidate in self._path_mappings(importee):
            found = self._first_source(candidate, allow_probe=True)
            if found is not None:
                return found

        base_url = self.compiler_options.get("baseUrl")
        if base_url and is_bare_specifier(importee):
            return self._first_source(Path(base_url) / importee, allow_probe=True)
        return None

    def _path_mappings(self, importee: str) -> Iterable[Path]:
        paths = self.compiler_options.get("paths")
        if not isinstance(paths, dict):
            return []
        anchor = Path(self.compiler_options.get("baseUrl") or self.compiler_options.get("pathsBasePath") or self.root)

        best_key: Optional[str] = None
        best_match = ""
        for key in paths:
            if key == importee:
                best_key, best_match = key, ""
                break
            if key.count("*") != 1:
                continue
            prefix, suffix = key.split("*")
            if importee.startswith(prefix) and importee.endswith(suffix) and len(importee) >= len(key) - 1:
                if best_key is None or len(prefix) > len(best_key.split("*")[0]):
                    best_key = key
                    best_match = importee[len(prefix): len(importee) - len(suffix)]
        if best_key is None:
            return []
        targets = paths[best_key]
        if isinstance(targets, str):
            targets = [targets]
        return [anchor / target.replace("*", best_match) for target in targets if isinstance(target, str)]

    def _first_source(self, base: Path, allow_probe: bool) -> Optional[Path]:
        for candidate in self._candidates(base, allow_probe):
            if candidate.is_file():
                if candidate.name.endswith(".d.ts"):
                    # Declarations are not sources; defer to the default resolver.
                    return None
                return candidate
        return None

    def _candidates(self, base: Path, allow_probe: bool) -> List[Path]:
        suffix = base.suffix
        candidates: List[Path] = []
        if suffix in SOURCE_EXTENSIONS:
            stem = base.with_suffix("")
            candidates.extend(stem.with_name(stem.name + ext) for ext in SOURCE_EXTENSIONS[suffix])
            candidates.append(base)
            return candidates
        if suffix in TS_EXTENSIONS and not base.name.endswith(".d.ts"):
            return [base]
        if not allow_probe:
            return []
        candidates.extend(base.with_name(base.name + ext) for ext in PROBE_EXTENSIONS)
        candidates.extend(base / f"index{ext}" for ext in PROBE_EXTENSIONS)
        return candidates


def typescript(compiler_options: Optional[Dict[str, Any]] = None) -> Plugin:
    resolver = TypeScriptResolver(compiler_options)

    def start(ctx: StartContext) -> None:
        resolver.configure(ctx.base_path)

    def resolve(ctx: ResolveContext) -> Optional[Path]:
        return resolver.resolve(ctx.importee, Path(ctx.importer))

    return Plugin(name="typescript", start=start, resolve=resolve)
