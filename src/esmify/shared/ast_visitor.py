"""
AST Visitor Pattern and tree walking

This module provides:
1. iter_nodes: iterative depth-first walk (no recursion limit on deep trees)
2. ASTVisitor: visitor base with visit_<tag> dispatch and a generic fallback
3. Pattern helpers: names bound and property keys declared by a pattern

Design:
- Nodes dispatch through Node.accept() to visit_<tag> methods
- Visitors that only care about a few kinds override those and rely on
  generic_visit for the rest
"""

from typing import Generic, Iterator, List, TypeVar

from .nodes import (
    AssignmentPattern, Identifier, Node, ObjectPattern, Opaque, Property,
    PropertyName, RestElement, StringLiteral,
)

T = TypeVar('T')


def iter_nodes(root: Node) -> Iterator[Node]:
    """Yield root and every node below it, depth first, in source order."""
    stack: List[Node] = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(list(node.children())))


class ASTVisitor(Generic[T]):
    """
    Visitor base class.

    Usage:
        class Counter(ASTVisitor[int]):
            def visit_identifier(self, node):
                return 1
            def generic_visit(self, node):
                return sum(child.accept(self) for child in node.children())
    """

    def visit(self, node: Node) -> T:
        return node.accept(self)

    def generic_visit(self, node: Node) -> T:
        raise NotImplementedError(
            f"{self.__class__.__name__} has no visit_{node.tag.replace('-', '_')}"
        )


# ============================================
# Pattern helpers
# ============================================

def bound_names(pattern: Node) -> List[str]:
    """
    Names a binding pattern introduces, in source order.

    `{ a, b: c, d = 1, ...rest }` binds a, c, d, rest. Array patterns and
    other opaque patterns contribute the identifiers found inside them.
    """
    if isinstance(pattern, Identifier):
        return [pattern.name]
    if isinstance(pattern, ObjectPattern):
        names: List[str] = []
        for prop in pattern.properties:
            if isinstance(prop, Property):
                names.extend(bound_names(prop.value))
            elif isinstance(prop, RestElement):
                names.extend(bound_names(prop.argument))
        return names
    if isinstance(pattern, AssignmentPattern):
        return bound_names(pattern.left)
    if isinstance(pattern, RestElement):
        return bound_names(pattern.argument)
    if isinstance(pattern, Opaque):
        names = []
        for child in pattern.children():
            names.extend(bound_names(child))
        return names
    return []


def pattern_keys(pattern: Node) -> List[str]:
    """Non-computed property keys named by an object pattern: `{ a, b: c }` -> a, b."""
    if not isinstance(pattern, ObjectPattern):
        return []
    keys = []
    for prop in pattern.properties:
        if isinstance(prop, Property) and not prop.computed:
            if isinstance(prop.key, PropertyName):
                keys.append(prop.key.name)
            elif isinstance(prop.key, StringLiteral):
                keys.append(prop.key.value)
    return keys
