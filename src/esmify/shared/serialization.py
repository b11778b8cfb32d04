"""
Syntax Tree Serialization to S-Expressions
==========================================

Converts a SyntaxTree (or a single node) to canonical S-expression format for
testing and debugging. Every node becomes `(tag :field value ...)`; synthesized
nodes are marked with `:synthesized` so a dump shows which statements a pass
built and which still come from the original text.

Uses structured sexpr (nested lists + sexpdata.Symbol),
then pretty-prints for readable output.
"""

from typing import Any

import sexpdata

from .arena import SyntaxTree
from .nodes import Node, Opaque, TRIVIA_FIELDS


def _pretty_dumps(sexpr: Any, indent: int = 0, indent_str: str = "  ", max_line: int = 100) -> str:
    """
    Pretty-print structured sexpr. Keeps short forms on one line; breaks only when needed.
    """
    # Check Symbol before str (sexpdata.Symbol subclasses str)
    if isinstance(sexpr, sexpdata.Symbol):
        return str(sexpr)
    if isinstance(sexpr, (str, int)):
        return sexpdata.dumps(sexpr)
    if isinstance(sexpr, list):
        if not sexpr:
            return "()"
        parts = [_pretty_dumps(e, indent + 1, indent_str, max_line) for e in sexpr]
        one_line = "(" + " ".join(parts) + ")"
        if len(one_line) <= max_line and "\n" not in one_line:
            return one_line
        prefix = indent_str * indent
        next_prefix = indent_str * (indent + 1)
        # First element on same line as ( to avoid orphan (; no space after (
        rest = "\n".join(next_prefix + p for p in parts[1:])
        inner = parts[0] + ("\n" + rest if rest else "")
        return f"({inner}\n{prefix})"
    return str(sexpr)


class TreeSerializer:
    """
    Syntax tree to structured S-expression serializer.

    Use sexpdata.Symbol for tags, field keys and booleans to avoid quotes;
    names and string values stay quoted.
    """

    def __init__(self, include_location: bool = False):
        self.include_location = include_location

    def _sym(self, s: str) -> sexpdata.Symbol:
        return sexpdata.Symbol(s)

    def serialize_tree(self, tree: SyntaxTree) -> list:
        out = [self._sym("program"), self._sym(":file"), tree.file_path]
        if tree.hashbang:
            out.extend([self._sym(":hashbang"), tree.hashbang])
        if tree.header:
            out.extend([self._sym(":header"), [self.serialize_to_sexpr(c) for c in tree.header]])
        for node_id, stmt in tree.statements():
            out.append([self._sym("stmt"), self._sym(str(node_id)), self.serialize_to_sexpr(stmt)])
        return out

    def serialize_to_sexpr(self, value: Any) -> Any:
        """Serialize a node, tuple or scalar field value to structured sexpr."""
        if value is None:
            return self._sym("nil")
        # Store bool as symbol to avoid sexpdata's True->() conversion
        if isinstance(value, bool):
            return self._sym("true" if value else "false")
        if isinstance(value, Node):
            return self._serialize_node(value)
        if isinstance(value, tuple):
            return [self.serialize_to_sexpr(item) for item in value]
        return value

    def _serialize_node(self, node: Node) -> list:
        if isinstance(node, Opaque):
            core = [self._sym(node.tag), self._sym(node.kind)]
            core.extend(self._serialize_node(child) for child in node.children_)
            return self._add_metadata(node, core)
        core = [self._sym(node.tag)]
        for name, value in node.child_items():
            if name in TRIVIA_FIELDS or name == "raw":
                continue
            core.extend([self._sym(f":{name}"), self.serialize_to_sexpr(value)])
        return self._add_metadata(node, core)

    def _add_metadata(self, node: Node, core: list) -> list:
        if node.is_synthesized:
            core.append(self._sym(":synthesized"))
        elif self.include_location:
            loc = node.location
            core.extend([self._sym(":loc"), [loc.line, loc.column]])
        return core


def serialize_tree(tree: SyntaxTree, include_location: bool = False, pretty: bool = True) -> str:
    """
    Serialize a whole tree to an S-expression string.

    Args:
        tree: tree to serialize
        include_location: add `:loc (line column)` to parsed nodes
        pretty: pretty-printed (default) or compact single-line
    """
    sexpr = TreeSerializer(include_location=include_location).serialize_tree(tree)
    if pretty:
        return _pretty_dumps(sexpr)
    return sexpdata.dumps(sexpr)


def serialize_node(node: Node, include_location: bool = False) -> str:
    return _pretty_dumps(TreeSerializer(include_location=include_location).serialize_to_sexpr(node))
