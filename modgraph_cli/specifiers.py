"""Predicates over raw import specifiers."""

from __future__ import annotations

import os
from typing import FrozenSet

# Node's ``module.builtinModules`` (without the ``node:`` prefix).
BUILTIN_MODULES: FrozenSet[str] = frozenset({
    "_http_agent", "_http_client", "_http_common", "_http_incoming",
    "_http_outgoing", "_http_server", "_stream_duplex", "_stream_passthrough",
    "_stream_readable", "_stream_transform", "_stream_wrap", "_stream_writable",
    "_tls_common", "_tls_wrap", "assert", "assert/strict", "async_hooks",
    "buffer", "child_process", "cluster", "console", "constants", "crypto",
    "dgram", "diagnostics_channel", "dns", "dns/promises", "domain", "events",
    "fs", "fs/promises", "http", "http2", "https", "inspector",
    "inspector/promises", "module", "net", "os", "path", "path/posix",
    "path/win32", "perf_hooks", "process", "punycode", "querystring",
    "readline", "readline/promises", "repl", "stream", "stream/consumers",
    "stream/promises", "stream/web", "string_decoder", "sys", "timers",
    "timers/promises", "tls", "trace_events", "tty", "url", "util",
    "util/types", "v8", "vm", "wasi", "worker_threads", "zlib",
})

# Only reachable through the ``node:`` scheme.
SCHEME_ONLY_MODULES: FrozenSet[str] = frozenset({"sea", "sqlite", "test", "test/reporters"})


def is_bare_specifier(specifier: str) -> bool:
    """Return True for package specifiers like ``foo`` or ``@scope/bar``."""
    stripped = (specifier or "").replace("'", "").replace('"', "")
    if not stripped:
        return False
    first = stripped[0]
    return first == "@" or (first.isascii() and first.isalpha())


def is_scoped_package(specifier: str) -> bool:
    return specifier.startswith("@")


def extract_package_name(specifier: str) -> str:
    """``@scope/pkg/sub/file.js`` -> ``@scope/pkg``; ``pkg/sub`` -> ``pkg``."""
    parts = specifier.split("/")
    if is_scoped_package(specifier):
        return "/".join(parts[:2])
    return parts[0]


def is_builtin_module(specifier: str) -> bool:
    if specifier.startswith("node:"):
        name = specifier.removeprefix("node:")
        return name in BUILTIN_MODULES or name in SCHEME_ONLY_MODULES
    return specifier in BUILTIN_MODULES


def to_unix(path: str) -> str:
    return path.replace(os.sep, "/").replace("\\", "/")
