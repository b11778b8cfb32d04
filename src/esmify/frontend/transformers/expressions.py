"""
Expression Transformer
Converts tree-sitter expression and pattern nodes to esmify nodes.

Kinds the rewrite passes look at get a dedicated node class; everything else
becomes Opaque with its children converted, so walks still see the calls and
identifiers nested inside functions, loops and templates.
"""

from typing import Any, Callable, Dict, List, Tuple
import logging

from typing_extensions import TypeAlias

from ...shared import (
    AssignmentExpression, AssignmentPattern, CallExpression, Identifier, MemberExpression,
    MetaProperty, Node, ObjectExpression, ObjectPattern, Opaque, Property, PropertyName,
    RestElement, SourceLocation, SpreadElement, VariableDeclaration, VariableDeclarator,
)
from .literals import LiteralParser

logger = logging.getLogger(__name__)

TSNode: TypeAlias = Any  # tree_sitter.Node
TransformHandler: TypeAlias = Callable[[TSNode], Node]

# Leaf kinds that name a binding or a reference
_IDENTIFIER_KINDS = frozenset({"identifier", "shorthand_property_identifier_pattern"})
# Leaf kinds that are property names, never references
_PROPERTY_NAME_KINDS = frozenset({"property_identifier", "private_property_identifier"})


def named_children(ts_node: TSNode) -> List[TSNode]:
    """Named children without comments (comments are extras and may appear anywhere)."""
    return [c for c in ts_node.named_children if c.type != "comment"]


class ExpressionTransformer:
    """
    tree-sitter node -> esmify node, dispatched on node type.

    A `_transform_<type>` method handles one grammar node type; anything
    without one is converted generically (see _transform_generic).
    """

    def __init__(self, source: bytes, file_path: str):
        self.source = source
        self.file_path = file_path
        self._dispatch: Dict[str, TransformHandler] = {}

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _extract_location(self, ts_node: TSNode) -> SourceLocation:
        start_row, start_col = ts_node.start_point
        end_row, end_col = ts_node.end_point
        return SourceLocation(
            file=self.file_path,
            line=start_row + 1,
            column=start_col + 1,
            start=ts_node.start_byte,
            end=ts_node.end_byte,
            end_line=end_row + 1,
            end_column=end_col + 1,
        )

    def _text(self, ts_node: TSNode) -> str:
        return self.source[ts_node.start_byte:ts_node.end_byte].decode("utf-8")

    def transform(self, ts_node: TSNode) -> Node:
        handler = self._dispatch.get(ts_node.type)
        if handler is None:
            handler = getattr(self, f"_transform_{ts_node.type}", self._transform_generic)
            self._dispatch[ts_node.type] = handler
        return handler(ts_node)

    def _transform_all(self, ts_nodes) -> Tuple[Node, ...]:
        return tuple(self.transform(c) for c in ts_nodes)

    def _transform_generic(self, ts_node) -> Node:
        location = self._extract_location(ts_node)
        if ts_node.type in _IDENTIFIER_KINDS:
            return Identifier(self._text(ts_node), location=location)
        if ts_node.type in _PROPERTY_NAME_KINDS:
            return PropertyName(self._text(ts_node), location=location)
        return Opaque(ts_node.type, self._transform_all(named_children(ts_node)), location=location)

    @staticmethod
    def _is_optional(ts_node) -> bool:
        return any(c.type == "optional_chain" for c in ts_node.children)

    # ------------------------------------------------------------------
    # Literals
    # ------------------------------------------------------------------

    def _transform_string(self, ts_node) -> Node:
        return LiteralParser.parse(ts_node, self.source, self._extract_location(ts_node))

    def _transform_meta_property(self, ts_node) -> Node:
        meta, _, prop = self._text(ts_node).partition(".")
        return MetaProperty(meta.strip(), prop.strip(), location=self._extract_location(ts_node))

    # ------------------------------------------------------------------
    # Calls and member access
    # ------------------------------------------------------------------

    def _transform_call_expression(self, ts_node) -> Node:
        arguments = ts_node.child_by_field_name("arguments")
        if arguments is None or arguments.type != "arguments":
            # Tagged template: require`x` is not a module load
            return self._transform_generic(ts_node)
        return CallExpression(
            callee=self.transform(ts_node.child_by_field_name("function")),
            arguments=self._transform_all(named_children(arguments)),
            optional=self._is_optional(ts_node),
            location=self._extract_location(ts_node),
        )

    def _transform_member_expression(self, ts_node) -> Node:
        return MemberExpression(
            object=self.transform(ts_node.child_by_field_name("object")),
            property=self.transform(ts_node.child_by_field_name("property")),
            computed=False,
            optional=self._is_optional(ts_node),
            location=self._extract_location(ts_node),
        )

    def _transform_subscript_expression(self, ts_node) -> Node:
        return MemberExpression(
            object=self.transform(ts_node.child_by_field_name("object")),
            property=self.transform(ts_node.child_by_field_name("index")),
            computed=True,
            optional=self._is_optional(ts_node),
            location=self._extract_location(ts_node),
        )

    def _transform_assignment_expression(self, ts_node) -> Node:
        return AssignmentExpression(
            operator="=",
            left=self.transform(ts_node.child_by_field_name("left")),
            right=self.transform(ts_node.child_by_field_name("right")),
            location=self._extract_location(ts_node),
        )

    def _transform_augmented_assignment_expression(self, ts_node) -> Node:
        return AssignmentExpression(
            operator=self._text(ts_node.child_by_field_name("operator")),
            left=self.transform(ts_node.child_by_field_name("left")),
            right=self.transform(ts_node.child_by_field_name("right")),
            location=self._extract_location(ts_node),
        )

    def _transform_spread_element(self, ts_node) -> Node:
        return SpreadElement(
            argument=self.transform(named_children(ts_node)[0]),
            location=self._extract_location(ts_node),
        )

    # ------------------------------------------------------------------
    # Object literals
    # ------------------------------------------------------------------

    def _transform_object(self, ts_node) -> Node:
        properties = []
        for child in named_children(ts_node):
            if child.type == "shorthand_property_identifier":
                name = self._text(child)
                location = self._extract_location(child)
                properties.append(Property(
                    key=PropertyName(name, location=location),
                    value=Identifier(name, location=location),
                    shorthand=True,
                    location=location,
                ))
            else:
                properties.append(self.transform(child))
        return ObjectExpression(tuple(properties), location=self._extract_location(ts_node))

    def _transform_pair(self, ts_node) -> Node:
        key, computed = self._transform_key(ts_node.child_by_field_name("key"))
        return Property(
            key=key,
            value=self.transform(ts_node.child_by_field_name("value")),
            computed=computed,
            location=self._extract_location(ts_node),
        )

    def _transform_key(self, ts_node) -> Tuple[Node, bool]:
        if ts_node.type == "computed_property_name":
            return self.transform(named_children(ts_node)[0]), True
        return self.transform(ts_node), False

    # ------------------------------------------------------------------
    # Patterns
    # ------------------------------------------------------------------

    def _transform_object_pattern(self, ts_node) -> Node:
        properties = []
        for child in named_children(ts_node):
            location = self._extract_location(child)
            if child.type == "shorthand_property_identifier_pattern":
                name = self._text(child)
                properties.append(Property(
                    key=PropertyName(name, location=location),
                    value=Identifier(name, location=location),
                    shorthand=True,
                    location=location,
                ))
            elif child.type == "object_assignment_pattern":
                properties.append(self._shorthand_with_default(child))
            elif child.type == "pair_pattern":
                key, computed = self._transform_key(child.child_by_field_name("key"))
                properties.append(Property(
                    key=key,
                    value=self.transform(child.child_by_field_name("value")),
                    computed=computed,
                    location=location,
                ))
            else:
                properties.append(self.transform(child))
        return ObjectPattern(tuple(properties), location=self._extract_location(ts_node))

    def _shorthand_with_default(self, ts_node) -> Node:
        """`{ a = 1 }` -> Property(a, AssignmentPattern(a, 1), shorthand)."""
        left = ts_node.child_by_field_name("left")
        location = self._extract_location(ts_node)
        target = self.transform(left)
        value = AssignmentPattern(
            left=target,
            right=self.transform(ts_node.child_by_field_name("right")),
            location=location,
        )
        if isinstance(target, Identifier):
            key: Node = PropertyName(target.name, location=target.location)
            return Property(key=key, value=value, shorthand=True, location=location)
        return value

    def _transform_assignment_pattern(self, ts_node) -> Node:
        return AssignmentPattern(
            left=self.transform(ts_node.child_by_field_name("left")),
            right=self.transform(ts_node.child_by_field_name("right")),
            location=self._extract_location(ts_node),
        )

    def _transform_rest_pattern(self, ts_node) -> Node:
        return RestElement(
            argument=self.transform(named_children(ts_node)[0]),
            location=self._extract_location(ts_node),
        )

    # ------------------------------------------------------------------
    # Declarations (also reached inside function bodies and loops)
    # ------------------------------------------------------------------

    def _transform_variable_declarator(self, ts_node) -> Node:
        value = ts_node.child_by_field_name("value")
        return VariableDeclarator(
            id=self.transform(ts_node.child_by_field_name("name")),
            init=self.transform(value) if value is not None else None,
            location=self._extract_location(ts_node),
        )

    def _transform_lexical_declaration(self, ts_node) -> Node:
        return self._declaration(ts_node, ts_node.children[0].type)

    def _transform_variable_declaration(self, ts_node) -> Node:
        return self._declaration(ts_node, "var")

    def _declaration(self, ts_node, kind: str) -> Node:
        declarators = tuple(
            self.transform(c) for c in named_children(ts_node) if c.type == "variable_declarator"
        )
        return VariableDeclaration(kind, declarators, location=self._extract_location(ts_node))

