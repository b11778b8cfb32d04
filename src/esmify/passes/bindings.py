"""
Module Bindings Pre-Analysis

Collects every name the original file binds at top level. The naming policy
treats these as taken, so a synthesized import never shadows or redeclares
one of the file's own bindings.
"""

from dataclasses import dataclass
from typing import FrozenSet, Iterator
import logging

from ..shared.arena import SyntaxTree
from ..shared.ast_visitor import bound_names
from ..shared.nodes import (
    ExportDefaultDeclaration, Identifier, ImportDeclaration, Node, Opaque, VariableDeclaration,
)
from .base import BasePass, TransformContext
from .export_shape import ExportShapeAnalysisPass

logger = logging.getLogger(__name__)

_NAMED_DECLARATIONS = frozenset({
    "function_declaration",
    "generator_function_declaration",
    "class_declaration",
})


@dataclass(frozen=True)
class ModuleBindings:
    """Top-level names bound by the file before any rewrite."""
    declared: FrozenSet[str] = frozenset()


def declared_names(statement: Node) -> Iterator[str]:
    """Names one top-level statement binds."""
    if isinstance(statement, VariableDeclaration):
        for declarator in statement.declarations:
            yield from bound_names(declarator.id)
    elif isinstance(statement, ImportDeclaration):
        yield from statement.local_names()
    elif isinstance(statement, ExportDefaultDeclaration):
        yield from declared_names(statement.declaration)
    elif isinstance(statement, Opaque):
        if statement.kind in _NAMED_DECLARATIONS:
            for child in statement.children_:
                if isinstance(child, Identifier):
                    yield child.name
                    break
        elif statement.kind == "export_statement":
            for child in statement.children_:
                yield from declared_names(child)


class ModuleBindingsPass(BasePass):
    requires = [ExportShapeAnalysisPass]

    def run(self, tree: SyntaxTree, tcx: TransformContext) -> SyntaxTree:
        names = set()
        for _, statement in tree.statements():
            names.update(declared_names(statement))
        logger.debug(f"{tcx.file_path}: {len(names)} top-level binding(s)")
        tcx.set_analysis(ModuleBindingsPass, ModuleBindings(frozenset(names)))
        return tree
