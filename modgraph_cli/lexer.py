"""ES module lexer built on Tree-sitter.

Finds the import and export statements of a JavaScript or TypeScript source
file without evaluating it:

- static ``import`` statements, including side-effect and type-only imports
- ``export ... from`` re-exports
- dynamic ``import()`` calls whose argument is a string literal

``require()`` calls are not module syntax and are ignored.  Files whose
extension has no grammar (JSON, CSS, ...) lex to an empty result.
"""

from __future__ import annotations

import importlib
import logging
from functools import lru_cache
from pathlib import PurePosixPath
from typing import Any, Dict, Iterator, List, Optional, Tuple

from tree_sitter import Language, Parser as TSParser

from .models import ExportDescriptor, ImportDescriptor, LexResult

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Language <-> file-extension mapping
# ---------------------------------------------------------------------------
LANGUAGE_MAP: Dict[str, str] = {
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
}

# language -> (grammar module, function returning the Language capsule)
_GRAMMAR_MODULES: Dict[str, Tuple[str, str]] = {
    "javascript": ("tree_sitter_javascript", "language"),
    "typescript": ("tree_sitter_typescript", "language_typescript"),
    "tsx": ("tree_sitter_typescript", "language_tsx"),
}

# Declarations that introduce a binding under a ``name`` field.
_NAMED_DECLARATIONS = {
    "function_declaration",
    "generator_function_declaration",
    "class_declaration",
    "abstract_class_declaration",
    "interface_declaration",
    "type_alias_declaration",
    "enum_declaration",
    "function_signature",
    "module",
    "internal_module",
}

_TRIVIA = {"comment", "hash_bang_line", "empty_statement"}


def language_for(path: str) -> Optional[str]:
    return LANGUAGE_MAP.get(PurePosixPath(path).suffix.lower())


class ModuleLexer:
    """Lazily builds one Tree-sitter parser per language."""

    def __init__(self) -> None:
        self._parsers: Dict[str, Any] = {}

    def _parser_for(self, lang: str) -> Any:
        parser = self._parsers.get(lang)
        if parser is None:
            mod_name, func_name = _GRAMMAR_MODULES[lang]
            mod = importlib.import_module(mod_name)
            # tree-sitter >=0.22 grammar packages expose functions that
            # return the Language capsule.
            parser = TSParser(Language(getattr(mod, func_name)()))
            self._parsers[lang] = parser
            logger.debug("Loaded tree-sitter parser for %s", lang)
        return parser

    def parse_tree(self, source: str, path: str) -> Optional[Tuple[Any, bytes]]:
        """Return ``(tree, source_bytes)`` or None when *path* has no grammar."""
        lang = language_for(path)
        if lang is None:
            return None
        source_bytes = source.encode("utf-8")
        return self._parser_for(lang).parse(source_bytes), source_bytes

    def lex(self, source: str, path: str) -> LexResult:
        parsed = self.parse_tree(source, path)
        if parsed is None:
            return LexResult(has_module_syntax=False)
        tree, source_bytes = parsed
        offsets = _OffsetMap(source, source_bytes)

        result = LexResult()
        for node in walk(tree.root_node):
            if node.type == "import_statement":
                # TypeScript ``import x = require("y")`` has no source field.
                source_node = node.child_by_field_name("source")
                if source_node is None:
                    continue
                result.has_module_syntax = True
                result.imports.append(ImportDescriptor(
                    specifier=string_value(source_node),
                    start=offsets[node.start_byte],
                    end=offsets[node.end_byte],
                ))
            elif node.type == "export_statement":
                result.has_module_syntax = True
                source_node = node.child_by_field_name("source")
                if source_node is not None:
                    result.imports.append(ImportDescriptor(
                        specifier=string_value(source_node),
                        start=offsets[node.start_byte],
                        end=offsets[node.end_byte],
                    ))
                result.exports.extend(_export_descriptors(node))
            elif node.type == "call_expression":
                func = node.child_by_field_name("function")
                if func is None or func.type != "import":
                    continue
                result.imports.append(ImportDescriptor(
                    specifier=_dynamic_specifier(node),
                    start=offsets[node.start_byte],
                    end=offsets[node.end_byte],
                    is_dynamic=True,
                ))
            elif node.type == "meta_property" and node.text.startswith(b"import"):
                result.has_module_syntax = True

        result.facade = is_facade(tree.root_node)
        return result


@lru_cache(maxsize=1)
def get_lexer() -> ModuleLexer:
    return ModuleLexer()


def lex(source: str, path: str) -> LexResult:
    """Lex *source* with the shared :class:`ModuleLexer`."""
    return get_lexer().lex(source, path)


# ===================================================================
# Shared tree helpers (also used by ``symbols``)
# ===================================================================

def walk(root: Any) -> Iterator[Any]:
    """Pre-order traversal without recursion; yields nodes in source order."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def text_of(node: Any) -> str:
    return node.text.decode("utf-8")


def string_value(node: Any) -> Optional[str]:
    """Value of a string literal, or of a template literal without substitutions."""
    if node.type == "template_string":
        if any(child.type == "template_substitution" for child in node.children):
            return None
    elif node.type != "string":
        return text_of(node)
    raw = text_of(node)
    return raw[1:-1] if len(raw) >= 2 else None


def statements(root: Any) -> List[Any]:
    return [child for child in root.named_children if child.type not in _TRIVIA]


def declares_locally(export_node: Any) -> bool:
    return (
        export_node.child_by_field_name("declaration") is not None
        or export_node.child_by_field_name("value") is not None
    )


def is_facade(root: Any) -> bool:
    """True when every statement is an import or an export declaring nothing."""
    body = statements(root)
    if not body:
        return False
    for stmt in body:
        if stmt.type == "import_statement":
            continue
        if stmt.type == "export_statement" and not declares_locally(stmt):
            continue
        return False
    return True


def declared_names(declaration: Any) -> List[str]:
    """Names bound by an exported declaration."""
    if declaration.type == "ambient_declaration":
        inner = [c for c in declaration.named_children if c.type != "comment"]
        return declared_names(inner[0]) if inner else []
    if declaration.type in ("lexical_declaration", "variable_declaration"):
        names: List[str] = []
        for declarator in declaration.named_children:
            if declarator.type != "variable_declarator":
                continue
            target = declarator.child_by_field_name("name")
            if target is not None:
                names.extend(_pattern_names(target))
        return names
    if declaration.type in _NAMED_DECLARATIONS:
        name = declaration.child_by_field_name("name")
        return [text_of(name)] if name is not None else []
    return []


def _pattern_names(pattern: Any) -> List[str]:
    if pattern.type in ("identifier", "shorthand_property_identifier_pattern"):
        return [text_of(pattern)]
    if pattern.type in ("assignment_pattern", "object_assignment_pattern"):
        left = pattern.child_by_field_name("left")
        return _pattern_names(left) if left is not None else []
    if pattern.type == "pair_pattern":
        value = pattern.child_by_field_name("value")
        return _pattern_names(value) if value is not None else []
    names: List[str] = []
    for child in pattern.named_children:
        names.extend(_pattern_names(child))
    return names


def export_specifiers(export_node: Any) -> List[Tuple[str, str]]:
    """``(local, exported)`` pairs of an ``export { ... }`` clause."""
    pairs: List[Tuple[str, str]] = []
    for clause in export_node.named_children:
        if clause.type != "export_clause":
            continue
        for spec in clause.named_children:
            if spec.type != "export_specifier":
                continue
            name = spec.child_by_field_name("name")
            if name is None:
                continue
            alias = spec.child_by_field_name("alias")
            local = string_value(name) or ""
            exported = string_value(alias) if alias is not None else local
            pairs.append((local, exported or local))
    return pairs


def namespace_export_name(export_node: Any) -> Optional[str]:
    """Name bound by ``export * as name from '...'``, if that is the form."""
    for child in export_node.named_children:
        if child.type == "namespace_export":
            names = [c for c in child.named_children if c.type in ("identifier", "string")]
            return string_value(names[-1]) if names else None
    return None


def is_default_export(export_node: Any) -> bool:
    return any(child.type == "default" for child in export_node.children)


def _dynamic_specifier(call: Any) -> Optional[str]:
    args = call.child_by_field_name("arguments")
    if args is None or not args.named_children:
        return None
    first = args.named_children[0]
    if first.type not in ("string", "template_string"):
        return None
    return string_value(first)


def _export_descriptors(node: Any) -> List[ExportDescriptor]:
    reexport = node.child_by_field_name("source") is not None
    if is_default_export(node):
        declaration = node.child_by_field_name("declaration")
        names = declared_names(declaration) if declaration is not None else []
        return [ExportDescriptor(name="default", local_name=names[0] if names else None)]

    declaration = node.child_by_field_name("declaration")
    if declaration is not None:
        return [ExportDescriptor(name=n, local_name=n) for n in declared_names(declaration)]

    namespace = namespace_export_name(node)
    if namespace:
        return [ExportDescriptor(name=namespace)]

    return [
        ExportDescriptor(name=exported, local_name=None if reexport else local)
        for local, exported in export_specifiers(node)
    ]


class _OffsetMap:
    """Maps Tree-sitter byte offsets onto ``str`` indices."""

    def __init__(self, source: str, source_bytes: bytes) -> None:
        self._bytes = source_bytes
        self._ascii = len(source) == len(source_bytes)

    def __getitem__(self, byte_offset: int) -> int:
        if self._ascii:
            return byte_offset
        return len(self._bytes[:byte_offset].decode("utf-8", errors="ignore"))
