"""
Parser

Pattern: tree-sitter front end, one shared Language per process
"""

from typing import Optional
import logging

import tree_sitter_javascript
from tree_sitter import Language, Parser as TSParser

from ..shared.arena import SyntaxTree
from ..shared.errors import EsmifySourceError
from ..shared.source_location import SourceLocation
from ..utils.config import DEFAULT_FILE_ENCODING
from .transformers.base import JavaScriptTransformer

logger = logging.getLogger("esmify.frontend.parser")

JAVASCRIPT = Language(tree_sitter_javascript.language())


class ParseError(EsmifySourceError):
    """Syntax error in the input file, located at the first error node."""
    def __init__(self, message: str, location: Optional[SourceLocation] = None,
                 source_code: Optional[str] = None):
        super().__init__(
            message,
            location=location,
            error_code="E0001",
            source_code=source_code,
            label="unexpected syntax here",
        )


class Parser:
    """
    JavaScript parser.

    - Takes source text, returns a SyntaxTree
    - Preserves byte offsets so the renderer can reprint untouched nodes
    - Rejects files tree-sitter could only parse with error recovery
    """

    def __init__(self) -> None:
        self.parser = TSParser(JAVASCRIPT)

    def parse(self, source: str, source_file: str = "<input>") -> SyntaxTree:
        source_bytes = source.encode(DEFAULT_FILE_ENCODING)
        ts_tree = self.parser.parse(source_bytes)
        root = ts_tree.root_node
        if root.has_error:
            raise self._error(root, source, source_bytes, source_file)
        transformer = JavaScriptTransformer(source_bytes, source_file)
        return transformer.transform_program(root)

    def _error(self, root, source: str, source_bytes: bytes, source_file: str) -> ParseError:
        bad = _first_error_node(root)
        if bad is None:
            return ParseError("syntax error", source_code=source)
        row, column = bad.start_point
        end_row, end_column = bad.end_point
        location = SourceLocation(
            file=source_file,
            line=row + 1,
            column=column + 1,
            start=bad.start_byte,
            end=bad.end_byte,
            end_line=end_row + 1,
            end_column=end_column + 1,
        )
        if bad.is_missing:
            message = f"syntax error: missing `{bad.type}`"
        else:
            snippet = source_bytes[bad.start_byte:bad.end_byte].decode(DEFAULT_FILE_ENCODING, "replace")
            first_line = snippet.splitlines()[0] if snippet else ""
            message = f"syntax error near `{first_line[:40]}`" if first_line else "syntax error"
        logger.debug(f"parse failed at {location}")
        return ParseError(message, location=location, source_code=source)


def _first_error_node(root):
    """First ERROR or missing node in source order, searching only subtrees that contain one."""
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node
        stack.extend(reversed([c for c in node.children if c.has_error or c.is_missing]))
    return None
