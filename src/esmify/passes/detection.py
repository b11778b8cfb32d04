"""
CommonJS detection

A file is CommonJS when it calls require(), touches module.exports or
references a bare `exports` identifier anywhere, nested code included.
"""

from ..shared.arena import SyntaxTree
from .patterns import ANY_REQUIRE_CALL, BARE_EXPORTS, MODULE_EXPORTS

_LEGACY_SHAPES = (ANY_REQUIRE_CALL, MODULE_EXPORTS, BARE_EXPORTS)


def uses_commonjs(tree: SyntaxTree) -> bool:
    for node in tree.walk():
        if any(shape.matches(node) for shape in _LEGACY_SHAPES):
            return True
    return False
