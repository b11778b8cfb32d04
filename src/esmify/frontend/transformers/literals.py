"""
Literal Parser
Decodes JavaScript string literals (quotes stripped, escapes resolved)
"""

import re

from ...shared import SourceLocation, StringLiteral

_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}

_LINE_CONTINUATIONS = ("\n", "\r\n", "\r", "\u2028", "\u2029")

_HEX_ESCAPE = re.compile(r"^\\(?:x([0-9A-Fa-f]{2})|u([0-9A-Fa-f]{4})|u\{([0-9A-Fa-f]+)\})$")


class LiteralParser:
    """String literal decoding over tree-sitter `string` nodes."""

    @staticmethod
    def parse(node, source: bytes, location: SourceLocation) -> StringLiteral:
        """
        Build a StringLiteral from a `string` node.

        The node's named children are string_fragment and escape_sequence
        pieces; the quotes are anonymous tokens.
        """
        pieces = []
        for child in node.named_children:
            text = source[child.start_byte:child.end_byte].decode("utf-8")
            if child.type == "escape_sequence":
                pieces.append(LiteralParser.decode_escape(text))
            elif child.type != "comment":
                pieces.append(text)
        raw = source[node.start_byte:node.end_byte].decode("utf-8")
        return StringLiteral(value="".join(pieces), raw=raw, location=location)

    @staticmethod
    def decode_escape(text: str) -> str:
        """Decode one escape sequence (`\\n`, `\\x41`, `\\u{1F600}`, ...)."""
        body = text[1:]
        if body in _LINE_CONTINUATIONS:
            return ""
        if body in _SIMPLE_ESCAPES:
            return _SIMPLE_ESCAPES[body]
        match = _HEX_ESCAPE.match(text)
        if match:
            digits = next(g for g in match.groups() if g is not None)
            return chr(int(digits, 16))
        # Identity escape: \' \" \\ and any other character stand for themselves
        return body
