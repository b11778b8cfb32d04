"""
Shared components: node model, arena, shape matching, diagnostics.

Pattern: shared foundational types used by the front end, passes and printer
"""

from .source_location import SourceLocation
from .errors import Error, ErrorReporter, EsmifyError, EsmifySourceError, EsmifyImplementationError
from .nodes import (
    Node, Expression, Statement,
    Identifier, PropertyName, StringLiteral, MetaProperty, Comment,
    CallExpression, MemberExpression, AssignmentExpression,
    Property, SpreadElement, ObjectExpression,
    ObjectPattern, AssignmentPattern, RestElement,
    VariableDeclarator, VariableDeclaration, ExpressionStatement,
    ImportDefaultSpecifier, ImportNamespaceSpecifier, ImportSpecifier, ImportDeclaration,
    ExportSpecifier, ExportNamedDeclaration, ExportDefaultDeclaration, Opaque,
    NODE_TYPES,
)
from .arena import NodeId, StatementEntry, SyntaxTree, StaleNodeError
from .ast_visitor import ASTVisitor, iter_nodes, bound_names, pattern_keys
from .shapes import Shape, ShapePatternError, compile_shape
