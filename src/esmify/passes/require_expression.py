"""
Require-Expression Conversion

    require('debug').enable('app:*');  -> import debug from 'debug';   (prepended)
                                          debug.enable('app:*');
    require('./polyfill');             -> import './polyfill.js';

The binding name is the specifier when that is a usable identifier and the
camel-cased base name otherwise (`require('./my-lib').init()` binds myLib).
"""

from dataclasses import dataclass
from typing import Tuple
import logging

from ..analysis.module_system.path_resolver import resolve_module_path
from ..shared.arena import NodeId, SyntaxTree
from ..shared.nodes import Node
from ..shared.shapes import compile_shape
from .base import BasePass, TransformContext
from .bindings import ModuleBindingsPass
from .naming import IdentifierAllocator, expression_identifier
from .patterns import REQUIRE_CALL
from .require import RequireConversionPass

logger = logging.getLogger(__name__)

REQUIRE_METHOD_CALL = compile_shape(
    'ExpressionStatement(expression=CallExpression('
    'callee=MemberExpression(object=%require, property=PropertyName(name=$method), computed=false), '
    'arguments=$arguments))',
    require=REQUIRE_CALL,
)

SIDE_EFFECT_REQUIRE = compile_shape('ExpressionStatement(expression=%require)', require=REQUIRE_CALL)


@dataclass(frozen=True)
class RequireExpression:
    """`require('<source>').<method>(<arguments>);` as a statement of its own."""
    statement: NodeId
    source: str
    method: str
    arguments: Tuple[Node, ...]


class RequireExpressionPass(BasePass):
    requires = [RequireConversionPass]

    def run(self, tree: SyntaxTree, tcx: TransformContext) -> SyntaxTree:
        b = tcx.api.builders
        naming = tcx.get_analysis(RequireConversionPass)
        bindings = tcx.get_analysis(ModuleBindingsPass)
        allocator = IdentifierAllocator(bindings.declared, naming.used)

        for node_id, captures in tcx.api.find(tree, REQUIRE_METHOD_CALL):
            expression = RequireExpression(statement=node_id, **captures)
            specifier = resolve_module_path(expression.source, tcx.file_path)
            name, is_new = allocator.allocate(expression_identifier(expression.source), specifier)
            if is_new:
                tree.prepend(b.import_default(name, specifier))
            call = b.call(b.member(name, expression.method), expression.arguments)
            tree.replace(node_id, b.expression_statement(call))
            logger.debug(f"{tcx.file_path}: require({expression.source!r}).{expression.method}() "
                         f"-> {name}.{expression.method}()")

        for node_id, captures in tcx.api.find(tree, SIDE_EFFECT_REQUIRE):
            specifier = resolve_module_path(captures["source"], tcx.file_path)
            tree.replace(node_id, b.import_side_effect(specifier))
            logger.debug(f"{tcx.file_path}: require({captures['source']!r}) -> import {specifier!r}")

        return tree
