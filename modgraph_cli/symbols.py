"""Import/export declaration collection for analysis plugins.

Where the lexer only reports specifiers, this module records *what* a module
imports and exports so plugins can cross-reference them:

- imports: ``default``, ``named``, ``aggregate`` (``import * as ns`` and
  literal dynamic ``import()``), and ``side-effect``
- exports: local declarations point at the module itself; re-exports point
  at the source module, or at the package for bare specifiers
"""

from __future__ import annotations

import posixpath
from typing import Any, List, Optional

from .lexer import (
    declared_names,
    export_specifiers,
    get_lexer,
    is_default_export,
    namespace_export_name,
    statements,
    string_value,
    text_of,
    walk,
)
from .models import Declaration, ExportRecord, ImportRecord
from .specifiers import is_bare_specifier


def normalize_specifier(specifier: str) -> str:
    """``./b.js`` -> ``b.js``; bare specifiers are returned unchanged."""
    if is_bare_specifier(specifier):
        return specifier
    return posixpath.normpath(specifier)


def collect_imports(source: str, path: str) -> List[ImportRecord]:
    parsed = get_lexer().parse_tree(source, path)
    if parsed is None:
        return []
    tree, _ = parsed

    imports: List[ImportRecord] = []
    for node in walk(tree.root_node):
        if node.type == "import_statement":
            imports.extend(_import_records(node))
        elif node.type == "call_expression":
            func = node.child_by_field_name("function")
            if func is None or func.type != "import":
                continue
            args = node.child_by_field_name("arguments")
            first = args.named_children[0] if args is not None and args.named_children else None
            if first is None or first.type not in ("string", "template_string"):
                continue
            specifier = string_value(first)
            if specifier:
                imports.append(ImportRecord(
                    name=None,
                    kind="aggregate",
                    module=normalize_specifier(specifier),
                ))
    return imports


def collect_exports(source: str, path: str) -> List[ExportRecord]:
    parsed = get_lexer().parse_tree(source, path)
    if parsed is None:
        return []
    tree, _ = parsed

    exports: List[ExportRecord] = []
    for stmt in statements(tree.root_node):
        if stmt.type == "export_statement":
            exports.extend(_export_records(stmt, path))
    return exports


def _is_type_only(node: Any) -> bool:
    return any(child.type == "type" for child in node.children)


def _import_records(node: Any) -> List[ImportRecord]:
    source = node.child_by_field_name("source")
    if source is None:
        return []
    specifier = string_value(source)
    if not specifier:
        return []
    module = normalize_specifier(specifier)
    type_only = _is_type_only(node)

    clause = next((c for c in node.named_children if c.type == "import_clause"), None)
    if clause is None:
        return [ImportRecord(name=None, kind="side-effect", module=module)]

    records: List[ImportRecord] = []
    for part in clause.named_children:
        if part.type == "identifier":
            records.append(ImportRecord(
                name=text_of(part), kind="default", module=module, is_type_only=type_only,
            ))
        elif part.type == "namespace_import":
            ident = next((c for c in part.named_children if c.type == "identifier"), None)
            records.append(ImportRecord(
                name=text_of(ident) if ident is not None else None,
                kind="aggregate",
                module=module,
                is_type_only=type_only,
            ))
        elif part.type == "named_imports":
            for spec in part.named_children:
                if spec.type != "import_specifier":
                    continue
                name = spec.child_by_field_name("name")
                if name is None:
                    continue
                alias = spec.child_by_field_name("alias")
                records.append(ImportRecord(
                    name=string_value(name),
                    kind="named",
                    module=module,
                    is_type_only=type_only or _is_type_only(spec),
                    alias=text_of(alias) if alias is not None else None,
                ))
    return records


def _export_records(node: Any, path: str) -> List[ExportRecord]:
    source = node.child_by_field_name("source")
    if source is not None:
        return _reexport_records(node, string_value(source) or "")

    if is_default_export(node):
        declaration = node.child_by_field_name("declaration")
        value = node.child_by_field_name("value")
        local = ""
        if declaration is not None:
            names = declared_names(declaration)
            local = names[0] if names else ""
        elif value is not None and value.type == "identifier":
            local = text_of(value)
        return [ExportRecord(name="default", declaration=Declaration(name=local, module=path))]

    declaration = node.child_by_field_name("declaration")
    if declaration is not None:
        return [
            ExportRecord(name=name, declaration=Declaration(name=name, module=path))
            for name in declared_names(declaration)
        ]

    return [
        ExportRecord(name=exported, declaration=Declaration(name=local, module=path))
        for local, exported in export_specifiers(node)
    ]


def _reexport_records(node: Any, specifier: str) -> List[ExportRecord]:
    def origin(name: str) -> Declaration:
        if is_bare_specifier(specifier):
            return Declaration(name=name, package=specifier)
        return Declaration(name=name, module=normalize_specifier(specifier))

    namespace: Optional[str] = namespace_export_name(node)
    if namespace:
        return [ExportRecord(name=namespace, declaration=origin("*"))]

    if not any(child.type == "export_clause" for child in node.named_children):
        # export * from '...'
        return [ExportRecord(name="*", declaration=origin("*"))]

    return [
        ExportRecord(name=exported, declaration=origin(local))
        for local, exported in export_specifiers(node)
    ]
