"""
Shape patterns

Pattern: jscodeshift-style `find(Type, {shape})` queries, written as a small
declarative language and compiled once with lark.

    REQUIRE_CALL = compile_shape(
        'CallExpression(callee=Identifier(name="require"), '
        'arguments=[StringLiteral(value=$source)])'
    )
    for node, captures in REQUIRE_CALL.find_all(tree.walk()):
        captures["source"]   # -> "./util"

The grammar lives in shapes.lark next to this module. Node kinds resolve
against the closed NODE_TYPES registry at compile time, so a misspelled kind
fails when the module defining the pattern is imported, not on first match.
"""

import ast
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, Optional, Tuple, Type
import logging

from lark import Lark, Transformer, v_args
from lark.exceptions import LarkError, VisitError

from .errors import EsmifyImplementationError
from .nodes import NODE_TYPES, Node

logger = logging.getLogger(__name__)

Captures = Dict[str, Any]

_GRAMMAR_PATH = Path(__file__).with_name("shapes.lark")

_PARSER = Lark(
    _GRAMMAR_PATH.read_text(encoding="utf-8"),
    parser="lalr",
    start="start",
    maybe_placeholders=False,
)


class ShapePatternError(EsmifyImplementationError):
    """Malformed shape pattern (syntax error, unknown kind or field, missing reference)."""
    def __init__(self, message: str, pattern: str):
        super().__init__(f"{message}\n    in shape: {pattern}", error_code="E9002")
        self.pattern = pattern


# ---------------------------------------------------------------------------
# Matchers
# ---------------------------------------------------------------------------

class Shape(ABC):
    """Compiled matcher. match() fills captures only when it returns True."""

    @abstractmethod
    def _match(self, value: Any, captures: Captures) -> bool:
        raise NotImplementedError

    def match(self, value: Any) -> Optional[Captures]:
        """Captures dict if value has this shape, else None."""
        captures: Captures = {}
        if self._match(value, captures):
            return captures
        return None

    def matches(self, value: Any) -> bool:
        return self._match(value, {})

    def find_all(self, nodes: Iterable[Node]) -> Iterator[Tuple[Node, Captures]]:
        """(node, captures) for every node in nodes that has this shape."""
        for node in nodes:
            captures: Captures = {}
            if self._match(node, captures):
                yield node, captures

    def any(self, nodes: Iterable[Node]) -> bool:
        return any(self._match(node, {}) for node in nodes)


class NodeShape(Shape):
    def __init__(self, node_type: Type[Node], fields: Tuple[Tuple[str, Shape], ...]):
        self.node_type = node_type
        self.fields = fields

    def _match(self, value: Any, captures: Captures) -> bool:
        if not isinstance(value, self.node_type):
            return False
        for name, shape in self.fields:
            if not shape._match(getattr(value, name, None), captures):
                return False
        return True

    def __repr__(self) -> str:
        inner = ", ".join(f"{n}={s!r}" for n, s in self.fields)
        return f"{self.node_type.__name__}({inner})"


class SequenceShape(Shape):
    """Tuple of items; open_ended allows extra trailing items (`[a, ...]`)."""

    def __init__(self, items: Tuple[Shape, ...], open_ended: bool):
        self.items = items
        self.open_ended = open_ended

    def _match(self, value: Any, captures: Captures) -> bool:
        if not isinstance(value, (tuple, list)):
            return False
        if len(value) < len(self.items):
            return False
        if len(value) > len(self.items) and not self.open_ended:
            return False
        return all(shape._match(item, captures) for shape, item in zip(self.items, value))

    def __repr__(self) -> str:
        items = [repr(i) for i in self.items] + (["..."] if self.open_ended else [])
        return "[" + ", ".join(items) + "]"


class CaptureShape(Shape):
    def __init__(self, name: str, inner: Optional[Shape]):
        self.name = name
        self.inner = inner

    def _match(self, value: Any, captures: Captures) -> bool:
        if self.inner is not None and not self.inner._match(value, captures):
            return False
        captures[self.name] = value
        return True

    def __repr__(self) -> str:
        return f"${self.name}" + (f"@{self.inner!r}" if self.inner is not None else "")


class LiteralShape(Shape):
    def __init__(self, value: Any):
        self.value = value

    def _match(self, value: Any, captures: Captures) -> bool:
        if self.value is None or isinstance(self.value, bool):
            return value is self.value
        return value == self.value

    def __repr__(self) -> str:
        return repr(self.value)


class AnyShape(Shape):
    def _match(self, value: Any, captures: Captures) -> bool:
        return True

    def __repr__(self) -> str:
        return "*"


class AlternativeShape(Shape):
    def __init__(self, options: Tuple[Shape, ...]):
        self.options = options

    def _match(self, value: Any, captures: Captures) -> bool:
        for option in self.options:
            trial: Captures = dict(captures)
            if option._match(value, trial):
                captures.update(trial)
                return True
        return False

    def __repr__(self) -> str:
        return " | ".join(repr(o) for o in self.options)


# ---------------------------------------------------------------------------
# Compiler
# ---------------------------------------------------------------------------

class _Ellipsis:
    pass


_ELLIPSIS = _Ellipsis()


@v_args(inline=True)
class _ShapeBuilder(Transformer):
    """Lark parse tree -> Shape objects."""

    def __init__(self, references: Dict[str, Shape]):
        super().__init__()
        self.references = references

    def node(self, name, *fields):
        node_type = NODE_TYPES.get(str(name))
        if node_type is None:
            raise ValueError(f"unknown node kind '{name}'")
        known = getattr(node_type, "__dataclass_fields__", {})
        for field_name, _ in fields:
            if field_name not in known:
                raise ValueError(f"{node_type.__name__} has no field '{field_name}'")
        return NodeShape(node_type, tuple(fields))

    def field(self, name, shape):
        return (str(name), shape)

    def sequence(self, *items):
        open_ended = bool(items) and items[-1] is _ELLIPSIS
        if any(item is _ELLIPSIS for item in items[:-1]):
            raise ValueError("'...' is only allowed at the end of a sequence")
        shapes = tuple(item for item in items if item is not _ELLIPSIS)
        return SequenceShape(shapes, open_ended)

    def ellipsis(self):
        return _ELLIPSIS

    def capture(self, name, inner=None):
        return CaptureShape(str(name), inner)

    def reference(self, name):
        try:
            return self.references[str(name)]
        except KeyError:
            raise ValueError(f"no shape passed for reference '%{name}'") from None

    def wildcard(self):
        return AnyShape()

    def string(self, token):
        return LiteralShape(ast.literal_eval(str(token)))

    def true(self):
        return LiteralShape(True)

    def false(self):
        return LiteralShape(False)

    def null(self):
        return LiteralShape(None)

    def alternative(self, *options):
        return AlternativeShape(tuple(options))


def compile_shape(pattern: str, **references: Shape) -> Shape:
    """
    Compile a shape pattern.

    Keyword arguments are shapes that the pattern can splice in with %name.
    """
    try:
        tree = _PARSER.parse(pattern)
    except LarkError as e:
        raise ShapePatternError(f"syntax error: {e}", pattern) from e
    try:
        shape = _ShapeBuilder(references).transform(tree)
    except VisitError as e:
        raise ShapePatternError(str(e.orig_exc), pattern) from e
    logger.debug(f"compiled shape {shape!r}")
    return shape
