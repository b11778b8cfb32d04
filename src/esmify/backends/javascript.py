"""
JavaScript Renderer

Prints a SyntaxTree back to JavaScript.

- Untouched tree: the original text, unchanged
- Parsed node: its original text (a slice of the source bytes)
- Synthesized node: printed structurally, strings in single quotes,
  one statement per line

Statement trivia follows the arena entry: leading comments above the
statement, trailing comments after it on the same line, a blank line where
the original had one. The Leading Comment Block always prints first.
Lines end with CRLF when the source uses CRLF anywhere, LF otherwise.
"""

from typing import List, Sequence
import logging

from ..shared.arena import StatementEntry, SyntaxTree
from ..shared.ast_visitor import ASTVisitor
from ..shared.errors import EsmifyImplementationError
from ..shared.nodes import (
    AssignmentPattern, Comment, ImportDefaultSpecifier, ImportNamespaceSpecifier,
    ImportSpecifier, Node, Opaque, Property,
)
from ..utils.config import STRING_QUOTE_CHAR
from .base import Renderer

logger = logging.getLogger(__name__)

# Declarations that end without a semicolon after `export default`
_BLOCK_DECLARATIONS = frozenset({
    "function_declaration",
    "generator_function_declaration",
    "class_declaration",
    "function_expression",
    "function",
    "generator_function",
    "class",
})

LF = "\n"
CRLF = "\r\n"

_STRING_ESCAPES = {
    "\\": "\\\\",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\b": "\\b",
    "\f": "\\f",
    "\v": "\\v",
    "\0": "\\0",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def quote_string(value: str, quote: str = STRING_QUOTE_CHAR) -> str:
    """JavaScript string literal for value using the given quote character."""
    out = []
    for ch in value:
        if ch == quote:
            out.append("\\" + ch)
        else:
            out.append(_STRING_ESCAPES.get(ch, ch))
    return quote + "".join(out) + quote


class _NodePrinter(ASTVisitor[str]):
    """Prints one node; parsed nodes come straight from the tree's source."""

    def __init__(self, tree: SyntaxTree):
        self.tree = tree

    def print(self, node: Node) -> str:
        if not node.is_synthesized:
            return self.tree.text_of(node)
        return node.accept(self)

    def _join(self, nodes: Sequence[Node]) -> str:
        return ", ".join(self.print(n) for n in nodes)

    def generic_visit(self, node: Node) -> str:
        raise EsmifyImplementationError(f"cannot print synthesized {type(node).__name__}")

    # ---- leaves -----------------------------------------------------------

    def visit_identifier(self, node) -> str:
        return node.name

    def visit_property_name(self, node) -> str:
        return node.name

    def visit_string(self, node) -> str:
        return quote_string(node.value)

    def visit_meta_property(self, node) -> str:
        return f"{node.meta}.{node.property}"

    def visit_comment(self, node) -> str:
        return node.text

    # ---- expressions ------------------------------------------------------

    def visit_call(self, node) -> str:
        dot = "?." if node.optional else ""
        return f"{self.print(node.callee)}{dot}({self._join(node.arguments)})"

    def visit_member(self, node) -> str:
        obj = self.print(node.object)
        if node.computed:
            return f"{obj}{'?.' if node.optional else ''}[{self.print(node.property)}]"
        return f"{obj}{'?.' if node.optional else '.'}{self.print(node.property)}"

    def visit_assign(self, node) -> str:
        return f"{self.print(node.left)} {node.operator} {self.print(node.right)}"

    def visit_property(self, node: Property) -> str:
        if node.shorthand:
            if isinstance(node.value, AssignmentPattern):
                return self.print(node.value)
            return self.print(node.key)
        key = self.print(node.key)
        if node.computed:
            key = f"[{key}]"
        return f"{key}: {self.print(node.value)}"

    def visit_spread(self, node) -> str:
        return f"...{self.print(node.argument)}"

    def visit_object(self, node) -> str:
        if not node.properties:
            return "{}"
        return "{ " + self._join(node.properties) + " }"

    # ---- patterns ---------------------------------------------------------

    def visit_object_pattern(self, node) -> str:
        if not node.properties:
            return "{}"
        return "{ " + self._join(node.properties) + " }"

    def visit_assign_pattern(self, node) -> str:
        return f"{self.print(node.left)} = {self.print(node.right)}"

    def visit_rest(self, node) -> str:
        return f"...{self.print(node.argument)}"

    # ---- statements -------------------------------------------------------

    def visit_declarator(self, node) -> str:
        if node.init is None:
            return self.print(node.id)
        return f"{self.print(node.id)} = {self.print(node.init)}"

    def visit_variable_declaration(self, node) -> str:
        return f"{node.kind} {self._join(node.declarations)};"

    def visit_expression_statement(self, node) -> str:
        return f"{self.print(node.expression)};"

    def visit_import_declaration(self, node) -> str:
        source = self.print(node.source)
        attributes = ""
        if node.attributes:
            pairs = ", ".join(f"{key}: {quote_string(value)}" for key, value in node.attributes)
            attributes = f" with {{ {pairs} }}"
        if not node.specifiers:
            return f"import {source}{attributes};"

        clause: List[str] = []
        named: List[str] = []
        for spec in node.specifiers:
            if isinstance(spec, ImportDefaultSpecifier):
                clause.append(self.print(spec.local))
            elif isinstance(spec, ImportNamespaceSpecifier):
                clause.append(f"* as {self.print(spec.local)}")
            elif isinstance(spec, ImportSpecifier):
                named.append(self.print(spec))
        if named:
            clause.append("{ " + ", ".join(named) + " }")
        return f"import {', '.join(clause)} from {source}{attributes};"

    def visit_import_named(self, node) -> str:
        imported = self.print(node.imported)
        local = self.print(node.local)
        return imported if imported == local else f"{imported} as {local}"

    def visit_export_specifier(self, node) -> str:
        local = self.print(node.local)
        exported = self.print(node.exported)
        return local if local == exported else f"{local} as {exported}"

    def visit_export_named(self, node) -> str:
        if node.declaration is not None:
            return f"export {self.print(node.declaration)}"
        return "export { " + self._join(node.specifiers) + " };"

    def visit_export_default(self, node) -> str:
        declaration = node.declaration
        text = self.print(declaration)
        if isinstance(declaration, Opaque) and declaration.kind in _BLOCK_DECLARATIONS:
            return f"export default {text}"
        return f"export default {text};"


class JavaScriptRenderer(Renderer):
    """Reprinting renderer for SyntaxTree."""

    def render(self, tree: SyntaxTree) -> str:
        source = tree.source_text
        if not tree.modified:
            return source

        newline = CRLF if CRLF in source else LF
        printer = _NodePrinter(tree)
        lines: List[str] = []
        if tree.hashbang:
            lines.append(tree.hashbang)
        if tree.header:
            lines.append(self._comment_block(tree, tree.header, newline))
            if tree.header_gap:
                lines.append("")

        for index, entry in enumerate(tree.entries()):
            if index > 0 and entry.blank_line_before:
                lines.append("")
            if entry.leading_comments:
                lines.append(self._comment_block(tree, entry.leading_comments, newline))
            lines.append(self._statement(printer, tree, entry))

        if tree.footer:
            lines.append(self._comment_block(tree, tree.footer, newline))

        text = newline.join(lines)
        logger.debug(f"{tree.file_path}: reprinted {len(tree)} statement(s)")
        if source.endswith(LF) or not source:
            text += newline
        return text

    def _statement(self, printer: _NodePrinter, tree: SyntaxTree, entry: StatementEntry) -> str:
        text = printer.print(entry.node)
        if entry.trailing_comments:
            text += " " + " ".join(tree.text_of(c) for c in entry.trailing_comments)
        return text

    @staticmethod
    def _comment_block(tree: SyntaxTree, comments: Sequence[Comment], newline: str) -> str:
        """
        Comments with the original text between them.

        Comments that were adjacent in the source (only whitespace between)
        are sliced as one run; separate runs, e.g. comments inherited from a
        removed statement, go on their own lines.
        """
        runs = []
        start = end = None
        for comment in comments:
            if start is not None and tree.source[end:comment.location.start].strip():
                runs.append(tree.source[start:end].decode("utf-8"))
                start = None
            if start is None:
                start = comment.location.start
            end = comment.location.end
        runs.append(tree.source[start:end].decode("utf-8"))
        return newline.join(runs)
