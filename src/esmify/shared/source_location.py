"""
Source Location (Span)

Pattern: tree-sitter byte ranges plus 1-based line/column for diagnostics
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class SourceLocation:
    """
    Source location of a node parsed from text.

    - File, line, column (1-based) for diagnostics
    - start/end are byte offsets into the UTF-8 encoded source; the renderer
      slices the original text with them
    - Immutable (frozen) for hashability

    Synthesized nodes carry no location at all.
    """
    file: str
    line: int
    column: int
    start: int = 0
    end: int = 0
    end_line: int = 0
    end_column: int = 0

    def __str__(self) -> str:
        """Format as file:line:column"""
        return f"{self.file}:{self.line}:{self.column}"

    @property
    def length(self) -> int:
        return self.end - self.start
