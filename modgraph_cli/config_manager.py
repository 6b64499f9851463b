"""Project configuration for the CLI, read from a TOML file.

Example ``modgraph.toml``::

    export_conditions = ["node", "import", "development"]
    ignore_dynamic_import = true
    exclude = ["**/*.test.js"]
    strict = false
    plugins = ["unused-exports"]

    [external]
    exclude = ["lodash"]
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

import toml

from .config import CONFIG_FILENAME
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

KNOWN_KEYS = {
    "export_conditions": list,
    "ignore_dynamic_import": bool,
    "exclude": list,
    "strict": bool,
    "plugins": list,
    "external": dict,
}


def config_path(base_path: Path) -> Path:
    return Path(base_path) / CONFIG_FILENAME


def load_config(base_path: Path) -> Dict[str, Any]:
    """Load build options from the config file in *base_path*.

    Returns:
        Option dictionary keyed like :func:`create_module_graph` keyword
        arguments (plus ``plugins`` as built-in plugin names). Empty when
        no config file exists.

    Raises:
        ConfigurationError: The file is not valid TOML or has unknown keys
            or wrongly typed values.
    """
    path = config_path(base_path)
    if not path.exists():
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = toml.load(f)
    except toml.TomlDecodeError as exc:
        raise ConfigurationError(f"Invalid config file {path}: {exc}") from exc

    for key, value in data.items():
        expected = KNOWN_KEYS.get(key)
        if expected is None:
            raise ConfigurationError(f"Unknown key '{key}' in {path}")
        if not isinstance(value, expected):
            raise ConfigurationError(
                f"'{key}' in {path} must be a {expected.__name__}, got {type(value).__name__}"
            )

    logger.debug("Loaded config from %s", path)
    return data


def merge_options(file_options: Dict[str, Any], cli_options: Dict[str, Any]) -> Dict[str, Any]:
    """Overlay CLI options (None means unset) on file options.

    The ``external`` table is merged key by key.
    """
    merged = dict(file_options)
    for key, value in cli_options.items():
        if value is None:
            continue
        if key == "external" and isinstance(merged.get("external"), dict):
            external = dict(merged["external"])
            external.update({k: v for k, v in value.items() if v is not None})
            merged["external"] = external
        else:
            merged[key] = value
    return merged
