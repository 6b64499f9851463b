"""Defaults shared by the builder, resolver, and CLI."""

from __future__ import annotations

import os

# Name of the config file looked up in the base path; override with MODGRAPH_CONFIG.
CONFIG_FILENAME = os.environ.get("MODGRAPH_CONFIG", "modgraph.toml")

DEPENDENCY_STORE = "node_modules"
DEFAULT_EXPORT_CONDITIONS = ["node", "import"]

# Conditions the default resolver always honours for ESM imports.
BASE_CONDITIONS = ["default", "module", "import"]

DEFAULT_EXTENSIONS = [".mjs", ".js", ".json", ".node"]
DEFAULT_MAIN_FIELDS = ["module", "main"]
DEFAULT_MODULE_DIRECTORIES = [DEPENDENCY_STORE]

SUPPORTED_EXTENSIONS = {".js", ".mjs", ".cjs", ".jsx", ".ts", ".mts", ".cts", ".tsx"}
