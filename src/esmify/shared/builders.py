"""
Node builders

Factory functions for the nodes the rewrite passes synthesize. Every node
built here has no location, so the renderer prints it structurally (single
quoted strings, one statement per line) instead of slicing original text.

Parsed nodes may be passed in as children; they keep their location and are
still reprinted from the original text.
"""

from typing import Iterable, Optional, Sequence, Tuple, Union

from .nodes import (
    CallExpression, ExportDefaultDeclaration, ExportNamedDeclaration, ExportSpecifier,
    ExpressionStatement, Identifier, ImportDeclaration, ImportDefaultSpecifier,
    ImportNamespaceSpecifier, ImportSpecifier, MemberExpression, MetaProperty, Node,
    PropertyName, StringLiteral, VariableDeclaration, VariableDeclarator,
)
from ..utils.config import JSON_IMPORT_ATTRIBUTES

NameOrNode = Union[str, Node]


def identifier(name: str) -> Identifier:
    return Identifier(name)


def string_literal(value: str) -> StringLiteral:
    return StringLiteral(value)


def _ident(value: NameOrNode) -> Node:
    return Identifier(value) if isinstance(value, str) else value


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------

def member(obj: NameOrNode, prop: str) -> MemberExpression:
    """`obj.prop` (non-computed)."""
    return MemberExpression(_ident(obj), PropertyName(prop))


def call(callee: NameOrNode, arguments: Iterable[Node] = ()) -> CallExpression:
    return CallExpression(_ident(callee), tuple(arguments))


def import_meta(prop: str) -> MemberExpression:
    """`import.meta.<prop>`"""
    return MemberExpression(MetaProperty("import", "meta"), PropertyName(prop))


# ---------------------------------------------------------------------------
# Imports
# ---------------------------------------------------------------------------

def import_default(local: str, source: str,
                   attributes: Tuple[Tuple[str, str], ...] = ()) -> ImportDeclaration:
    """`import local from 'source';`"""
    return ImportDeclaration(
        (ImportDefaultSpecifier(Identifier(local)),),
        string_literal(source),
        attributes,
    )


def import_json(local: str, source: str) -> ImportDeclaration:
    """`import local from 'source' with { type: 'json' };`"""
    return import_default(local, source, JSON_IMPORT_ATTRIBUTES)


def import_namespace(local: str, source: str) -> ImportDeclaration:
    """`import * as local from 'source';`"""
    return ImportDeclaration(
        (ImportNamespaceSpecifier(Identifier(local)),),
        string_literal(source),
    )


def import_named(names: Sequence[str], source: str) -> ImportDeclaration:
    """`import { a, b } from 'source';`"""
    specifiers = tuple(ImportSpecifier(Identifier(n), Identifier(n)) for n in names)
    return ImportDeclaration(specifiers, string_literal(source))


def import_declaration(specifiers: Sequence[Node], source: Union[str, StringLiteral],
                       attributes: Tuple[Tuple[str, str], ...] = ()) -> ImportDeclaration:
    """Import with the given specifiers; a parsed source literal keeps its original quotes."""
    literal = string_literal(source) if isinstance(source, str) else source
    return ImportDeclaration(tuple(specifiers), literal, attributes)


def import_side_effect(source: str) -> ImportDeclaration:
    """`import 'source';`"""
    return ImportDeclaration((), string_literal(source))


# ---------------------------------------------------------------------------
# Declarations and statements
# ---------------------------------------------------------------------------

def variable_declaration(kind: str, target: NameOrNode,
                         init: Optional[NameOrNode] = None) -> VariableDeclaration:
    """`kind target = init;` with a single declarator."""
    value = _ident(init) if init is not None else None
    return VariableDeclaration(kind, (VariableDeclarator(_ident(target), value),))


def expression_statement(expression: Node) -> ExpressionStatement:
    return ExpressionStatement(expression)


def export_default(declaration: Node) -> ExportDefaultDeclaration:
    return ExportDefaultDeclaration(declaration)


def export_names(names: Sequence[str]) -> ExportNamedDeclaration:
    """`export { a, b };`"""
    specifiers = tuple(ExportSpecifier(Identifier(n), Identifier(n)) for n in names)
    return ExportNamedDeclaration(specifiers=specifiers)


def export_const(name: str, value: Node) -> ExportNamedDeclaration:
    """`export const name = value;`"""
    return ExportNamedDeclaration(declaration=variable_declaration("const", name, value))
