"""
esmify Syntax Tree Transformers
===============================

Specialized transformers for different tree-sitter node types.
"""

from .base import JavaScriptTransformer
from .expressions import ExpressionTransformer
from .literals import LiteralParser

__all__ = [
    'JavaScriptTransformer',
    'ExpressionTransformer',
    'LiteralParser',
]
