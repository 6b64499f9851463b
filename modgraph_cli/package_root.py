"""Locate the owning package of a file inside a dependency store."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional, Tuple, Union

from .config import DEPENDENCY_STORE
from .specifiers import is_scoped_package, to_unix


def in_dependency_store(path: Union[str, Path], store: str = DEPENDENCY_STORE) -> bool:
    return store in to_unix(str(path)).split("/")


def resolve_package_root(
    resolved_path: Union[str, Path],
    store: str = DEPENDENCY_STORE,
) -> Optional[Tuple[str, Path]]:
    """Return ``(package_name, package_root)`` for a file under *store*.

    The *last* store segment wins, so a dependency nested inside another
    package's own store maps to its immediate owner:

    ``/app/node_modules/a/node_modules/@s/b/lib/x.js`` -> ``("@s/b", /app/node_modules/a/node_modules/@s/b)``
    """
    parts = to_unix(str(resolved_path)).split("/")
    indices = [i for i, part in enumerate(parts) if part == store]
    if not indices:
        return None

    last = indices[-1]
    rest = parts[last + 1:]
    if not rest or not rest[0]:
        return None

    width = 2 if is_scoped_package(rest[0]) else 1
    if len(rest) < width:
        return None
    name_parts = rest[:width]
    package_name = "/".join(name_parts)

    store_dir = "/".join(parts[: last + 1]) or "/"
    package_root = Path(os.path.normpath(os.path.join(store_dir, *name_parts)))
    return package_name, package_root
