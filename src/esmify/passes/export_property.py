"""
Per-Property Export Conversion

    exports.only = 5;                      -> export default 5;
    exports.foo = 1; exports.bar = 2;      -> export const foo = 1;
                                              export const bar = 2;

`module.exports.<name> = <value>;` is handled the same way. A sole property
export becomes a named export instead when the file already has a default
export, so the output never holds two.
"""

from dataclasses import dataclass
from typing import List
import logging

from ..shared.arena import NodeId, SyntaxTree
from ..shared.nodes import ExportDefaultDeclaration, Node
from ..shared.shapes import compile_shape
from .base import BasePass, TransformContext
from .module_exports import ModuleExportsPass
from .patterns import EXPORTS_TARGET

logger = logging.getLogger(__name__)

PROPERTY_EXPORT = compile_shape(
    'ExpressionStatement(expression=AssignmentExpression(operator="=", '
    'left=MemberExpression(object=%target, property=PropertyName(name=$name), computed=false), '
    'right=$value))',
    target=EXPORTS_TARGET,
)


@dataclass(frozen=True)
class PropertyExport:
    """`exports.<name> = <value>;` as a top-level statement."""
    statement: NodeId
    name: str
    value: Node


def has_default_export(tree: SyntaxTree) -> bool:
    return any(isinstance(stmt, ExportDefaultDeclaration) for _, stmt in tree.statements())


class ExportPropertyPass(BasePass):
    requires = [ModuleExportsPass]

    def run(self, tree: SyntaxTree, tcx: TransformContext) -> SyntaxTree:
        b = tcx.api.builders
        exports: List[PropertyExport] = [
            PropertyExport(statement=node_id, **captures)
            for node_id, captures in tcx.api.find(tree, PROPERTY_EXPORT)
        ]
        if not exports:
            return tree

        if len(exports) == 1 and not has_default_export(tree):
            export = exports[0]
            tree.replace(export.statement, b.export_default(export.value))
            logger.debug(f"{tcx.file_path}: exports.{export.name} -> export default")
            return tree

        for export in exports:
            if export.name == "default":
                tree.replace(export.statement, b.export_default(export.value))
            else:
                tree.replace(export.statement, b.export_const(export.name, export.value))
            logger.debug(f"{tcx.file_path}: exports.{export.name} -> export const {export.name}")
        return tree
