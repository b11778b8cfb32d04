"""
esmify syntax tree node definitions

A closed set of node kinds, one frozen dataclass per kind. Only the kinds the
rewrite passes inspect or synthesize get their own class; every other piece of
JavaScript syntax becomes an Opaque node that keeps its children (so walks
still reach identifiers and calls nested inside it) and its source text.

Visitor Pattern Support:
- All nodes have accept() for polymorphic dispatch to visit_<tag> methods
- tag doubles as the s-expression head in tree dumps
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import ClassVar, Dict, Iterator, Optional, Tuple, Type, TypeVar, TYPE_CHECKING

from .source_location import SourceLocation

if TYPE_CHECKING:
    from .ast_visitor import ASTVisitor

T = TypeVar('T')

# Fields that describe where a node came from rather than what it is.
TRIVIA_FIELDS = frozenset({"location"})


def _location() -> Optional[SourceLocation]:
    return field(default=None, compare=False, repr=False)


class Node:
    """
    Base class for all syntax tree nodes.

    Nodes parsed from text carry a location; the renderer reprints them from
    the original text. Nodes built by a pass have location None and are
    printed structurally. Nodes are never edited in place.
    """
    tag: ClassVar[str] = "node"
    location: Optional[SourceLocation]

    def accept(self, visitor: 'ASTVisitor[T]') -> T:
        method = getattr(visitor, f"visit_{self.tag.replace('-', '_')}", None)
        if method is None:
            return visitor.generic_visit(self)
        return method(self)

    @property
    def is_synthesized(self) -> bool:
        return self.location is None

    def child_items(self) -> Iterator[Tuple[str, object]]:
        """(field name, value) pairs for every structural field."""
        for f in fields(self):
            if f.name not in TRIVIA_FIELDS:
                yield f.name, getattr(self, f.name)

    def children(self) -> Iterator['Node']:
        """Direct child nodes, in field order."""
        for _, value in self.child_items():
            if isinstance(value, Node):
                yield value
            elif isinstance(value, tuple):
                for item in value:
                    if isinstance(item, Node):
                        yield item


class Expression(Node):
    """Marker base for expression kinds."""


class Statement(Node):
    """Marker base for top-level statement kinds."""


# ---------------------------------------------------------------------------
# Leaves
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Identifier(Expression):
    """A binding or reference name (never a property name)."""
    tag: ClassVar[str] = "identifier"
    name: str
    location: Optional[SourceLocation] = _location()


@dataclass(frozen=True)
class PropertyName(Node):
    """Non-computed property name: `b` in `a.b` and in `{ b: 1 }`."""
    tag: ClassVar[str] = "property-name"
    name: str
    location: Optional[SourceLocation] = _location()


@dataclass(frozen=True)
class StringLiteral(Expression):
    """String literal; value is decoded, raw keeps the quotes as written."""
    tag: ClassVar[str] = "string"
    value: str
    raw: Optional[str] = field(default=None, compare=False)
    location: Optional[SourceLocation] = _location()


@dataclass(frozen=True)
class MetaProperty(Expression):
    """`import.meta`"""
    tag: ClassVar[str] = "meta-property"
    meta: str
    property: str
    location: Optional[SourceLocation] = _location()


@dataclass(frozen=True)
class Comment(Node):
    tag: ClassVar[str] = "comment"
    text: str
    location: Optional[SourceLocation] = _location()

    @property
    def is_block(self) -> bool:
        return self.text.startswith("/*")


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CallExpression(Expression):
    tag: ClassVar[str] = "call"
    callee: Node
    arguments: Tuple[Node, ...] = ()
    optional: bool = False
    location: Optional[SourceLocation] = _location()


@dataclass(frozen=True)
class MemberExpression(Expression):
    """`object.property` or, when computed, `object[property]`."""
    tag: ClassVar[str] = "member"
    object: Node
    property: Node
    computed: bool = False
    optional: bool = False
    location: Optional[SourceLocation] = _location()


@dataclass(frozen=True)
class AssignmentExpression(Expression):
    tag: ClassVar[str] = "assign"
    operator: str
    left: Node
    right: Node
    location: Optional[SourceLocation] = _location()


@dataclass(frozen=True)
class Property(Node):
    """
    Object literal / object pattern entry.

    Shorthand entries (`{ a }`) have key PropertyName("a") and value
    Identifier("a"). In patterns a shorthand default (`{ a = 1 }`) has an
    AssignmentPattern value.
    """
    tag: ClassVar[str] = "property"
    key: Node
    value: Node
    shorthand: bool = False
    computed: bool = False
    location: Optional[SourceLocation] = _location()


@dataclass(frozen=True)
class SpreadElement(Node):
    tag: ClassVar[str] = "spread"
    argument: Node
    location: Optional[SourceLocation] = _location()


@dataclass(frozen=True)
class ObjectExpression(Expression):
    tag: ClassVar[str] = "object"
    properties: Tuple[Node, ...] = ()
    location: Optional[SourceLocation] = _location()


# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ObjectPattern(Node):
    tag: ClassVar[str] = "object-pattern"
    properties: Tuple[Node, ...] = ()
    location: Optional[SourceLocation] = _location()


@dataclass(frozen=True)
class AssignmentPattern(Node):
    """Pattern with a default value: `a = 1`."""
    tag: ClassVar[str] = "assign-pattern"
    left: Node
    right: Node
    location: Optional[SourceLocation] = _location()


@dataclass(frozen=True)
class RestElement(Node):
    tag: ClassVar[str] = "rest"
    argument: Node
    location: Optional[SourceLocation] = _location()


# ---------------------------------------------------------------------------
# Statements and declarations
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class VariableDeclarator(Node):
    tag: ClassVar[str] = "declarator"
    id: Node
    init: Optional[Node] = None
    location: Optional[SourceLocation] = _location()


@dataclass(frozen=True)
class VariableDeclaration(Statement):
    """`const` / `let` / `var` declaration."""
    tag: ClassVar[str] = "variable-declaration"
    kind: str
    declarations: Tuple[VariableDeclarator, ...] = ()
    location: Optional[SourceLocation] = _location()

    @property
    def is_mutable(self) -> bool:
        return self.kind in ("let", "var")


@dataclass(frozen=True)
class ExpressionStatement(Statement):
    tag: ClassVar[str] = "expression-statement"
    expression: Node
    location: Optional[SourceLocation] = _location()


@dataclass(frozen=True)
class ImportDefaultSpecifier(Node):
    tag: ClassVar[str] = "import-default"
    local: Identifier
    location: Optional[SourceLocation] = _location()


@dataclass(frozen=True)
class ImportNamespaceSpecifier(Node):
    tag: ClassVar[str] = "import-namespace"
    local: Identifier
    location: Optional[SourceLocation] = _location()


@dataclass(frozen=True)
class ImportSpecifier(Node):
    """`{ imported as local }`; imported and local are equal for `{ a }`."""
    tag: ClassVar[str] = "import-named"
    imported: Node
    local: Identifier
    location: Optional[SourceLocation] = _location()


@dataclass(frozen=True)
class ImportDeclaration(Statement):
    """
    Static import. No specifiers means a side-effect import (`import 'x';`).
    attributes holds import attributes as (key, value) pairs, e.g. the
    `with { type: 'json' }` of JSON imports.
    """
    tag: ClassVar[str] = "import-declaration"
    specifiers: Tuple[Node, ...]
    source: StringLiteral
    attributes: Tuple[Tuple[str, str], ...] = ()
    location: Optional[SourceLocation] = _location()

    def local_names(self) -> Tuple[str, ...]:
        return tuple(s.local.name for s in self.specifiers)


@dataclass(frozen=True)
class ExportSpecifier(Node):
    tag: ClassVar[str] = "export-specifier"
    local: Identifier
    exported: Identifier
    location: Optional[SourceLocation] = _location()


@dataclass(frozen=True)
class ExportNamedDeclaration(Statement):
    """`export const x = 1;` (declaration) or `export { a, b };` (specifiers)."""
    tag: ClassVar[str] = "export-named"
    declaration: Optional[Node] = None
    specifiers: Tuple[ExportSpecifier, ...] = ()
    location: Optional[SourceLocation] = _location()


@dataclass(frozen=True)
class ExportDefaultDeclaration(Statement):
    tag: ClassVar[str] = "export-default"
    declaration: Node
    location: Optional[SourceLocation] = _location()


# ---------------------------------------------------------------------------
# Everything else
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Opaque(Statement, Expression):
    """
    Syntax the passes never rewrite (functions, loops, template strings, ...).

    kind is the grammar's node type. Always parsed from text, so always
    printed verbatim; children are kept for walks only.
    """
    tag: ClassVar[str] = "opaque"
    kind: str
    children_: Tuple[Node, ...] = ()
    location: Optional[SourceLocation] = _location()

    def child_items(self) -> Iterator[Tuple[str, object]]:
        yield "children", self.children_


NODE_TYPES: Dict[str, Type[Node]] = {
    cls.__name__: cls
    for cls in (
        Node, Expression, Statement,
        Identifier, PropertyName, StringLiteral, MetaProperty, Comment,
        CallExpression, MemberExpression, AssignmentExpression,
        Property, SpreadElement, ObjectExpression,
        ObjectPattern, AssignmentPattern, RestElement,
        VariableDeclarator, VariableDeclaration, ExpressionStatement,
        ImportDefaultSpecifier, ImportNamespaceSpecifier, ImportSpecifier,
        ImportDeclaration, ExportSpecifier, ExportNamedDeclaration,
        ExportDefaultDeclaration, Opaque,
    )
}
