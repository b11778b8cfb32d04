"""
esmify Syntax Tree Transformer
Converts a tree-sitter parse tree to a SyntaxTree of esmify nodes
"""

from typing import List, Optional, Tuple
import logging

from ...shared import (
    Comment, ExportDefaultDeclaration, ExpressionStatement, ImportDeclaration,
    ImportDefaultSpecifier, ImportNamespaceSpecifier, ImportSpecifier, Node, ObjectExpression,
    Property, PropertyName, StatementEntry, StringLiteral, SyntaxTree,
)
from .expressions import ExpressionTransformer, TSNode, named_children

logger: logging.Logger = logging.getLogger(__name__)


class JavaScriptTransformer(ExpressionTransformer):
    """
    Program-level conversion: statements, imports, default exports and the
    comments between top-level statements.

    Comment placement:
    - comments before the first statement form the tree header
    - a comment starting on the row where a statement ends trails it
    - any other comment leads the next statement
    - comments after the last statement form the footer
    """

    def transform_program(self, root: TSNode) -> SyntaxTree:
        hashbang: Optional[str] = None
        pending: List[Comment] = []
        statements: List[Tuple[object, Tuple[Comment, ...], bool]] = []
        trailing: List[List[Comment]] = []
        header: Tuple[Comment, ...] = ()
        header_gap = False
        last_end_row: Optional[int] = None
        pending_gap = False

        for child in root.named_children:
            if child.type == "hash_bang_line":
                hashbang = self._text(child)
                continue
            if child.type == "comment":
                comment = Comment(self._text(child), location=self._extract_location(child))
                if statements and not pending and child.start_point[0] == last_end_row:
                    trailing[-1].append(comment)
                    last_end_row = child.end_point[0]
                    continue
                if not pending:
                    gap = last_end_row is not None and child.start_point[0] - last_end_row > 1
                    pending_gap = gap
                pending.append(comment)
                last_end_row = child.end_point[0]
                continue

            gap = last_end_row is not None and child.start_point[0] - last_end_row > 1
            if not statements and pending:
                header = tuple(pending)
                header_gap = gap
                pending, gap = [], False
            elif pending:
                gap = pending_gap
            statements.append((self.transform(child), tuple(pending), gap and bool(statements)))
            trailing.append([])
            pending = []
            last_end_row = child.end_point[0]

        if not statements:
            # A file of comments only: keep them as the header
            header, pending = tuple(pending), []

        tree = SyntaxTree(
            self.file_path,
            self.source,
            hashbang=hashbang,
            header=header,
            header_gap=header_gap,
            footer=tuple(pending),
        )
        for (node, leading, blank), trailing_comments in zip(statements, trailing):
            tree.append(StatementEntry(
                node=node,
                leading_comments=leading,
                trailing_comments=tuple(trailing_comments),
                blank_line_before=blank,
            ))
        logger.debug(f"{self.file_path}: {len(tree)} top-level statement(s)")
        return tree

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _transform_expression_statement(self, ts_node) -> Node:
        children = named_children(ts_node)
        if len(children) != 1:
            return self._transform_generic(ts_node)
        return ExpressionStatement(
            expression=self.transform(children[0]),
            location=self._extract_location(ts_node),
        )

    def _transform_export_statement(self, ts_node) -> Node:
        if not any(c.type == "default" for c in ts_node.children):
            return self._transform_generic(ts_node)
        value = ts_node.child_by_field_name("declaration") or ts_node.child_by_field_name("value")
        if value is None:
            return self._transform_generic(ts_node)
        return ExportDefaultDeclaration(
            declaration=self.transform(value),
            location=self._extract_location(ts_node),
        )

    # ------------------------------------------------------------------
    # Imports
    # ------------------------------------------------------------------

    def _transform_import_statement(self, ts_node) -> Node:
        source = ts_node.child_by_field_name("source")
        if source is None:
            return self._transform_generic(ts_node)
        specifiers: List[Node] = []
        attributes: Tuple[Tuple[str, str], ...] = ()
        for child in named_children(ts_node):
            if child.type == "import_clause":
                specifiers.extend(self._import_clause(child))
            elif child.type == "import_attribute":
                attributes = self._import_attributes(child)
        return ImportDeclaration(
            specifiers=tuple(specifiers),
            source=self.transform(source),
            attributes=attributes,
            location=self._extract_location(ts_node),
        )

    def _import_clause(self, ts_node) -> List[Node]:
        specifiers: List[Node] = []
        for child in named_children(ts_node):
            location = self._extract_location(child)
            if child.type == "identifier":
                specifiers.append(ImportDefaultSpecifier(self.transform(child), location=location))
            elif child.type == "namespace_import":
                local = self.transform(named_children(child)[0])
                specifiers.append(ImportNamespaceSpecifier(local, location=location))
            elif child.type == "named_imports":
                for spec in named_children(child):
                    if spec.type == "import_specifier":
                        specifiers.append(self._import_specifier(spec))
        return specifiers

    def _import_specifier(self, ts_node) -> Node:
        imported = self.transform(ts_node.child_by_field_name("name"))
        alias = ts_node.child_by_field_name("alias")
        local = self.transform(alias) if alias is not None else imported
        return ImportSpecifier(imported=imported, local=local, location=self._extract_location(ts_node))

    def _import_attributes(self, ts_node) -> Tuple[Tuple[str, str], ...]:
        attributes = []
        for child in named_children(ts_node):
            node = self.transform(child)
            if not isinstance(node, ObjectExpression):
                continue
            for prop in node.properties:
                if not isinstance(prop, Property):
                    continue
                key = prop.key
                key_text = key.name if isinstance(key, PropertyName) else getattr(key, "value", None)
                if key_text is not None and isinstance(prop.value, StringLiteral):
                    attributes.append((key_text, prop.value.value))
        return tuple(attributes)
