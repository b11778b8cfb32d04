"""
Require Conversion

Rewrites top-level `<kind> <target> = require('<literal>');` declarations:

    const x = require('./a')          -> import x from './a.js';
    let x = require('./a')            -> import _x from './a.js';
                                         let x = _x;
    const x = require('./spread-me')  -> import * as x from ...  (x is spread into module.exports)
    const d = require('./data.json')  -> import d from './data.json' with { type: 'json' };
    const { a, b } = require('./util') -> import util from './util/index.js';   (prepended)
                                          const { a, b } = util;

Array patterns and multi-declarator declarations are left as they are.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping
import logging

from ..analysis.module_system.path_resolver import resolve_module_path
from ..shared.arena import NodeId, SyntaxTree
from ..shared.ast_visitor import bound_names, pattern_keys
from ..shared.nodes import Identifier, Node, ObjectPattern
from ..shared.shapes import compile_shape
from ..utils.config import JSON_FILE_EXTENSION, TEMP_NAME_PREFIX
from .base import BasePass, TransformContext
from .bindings import ModuleBindingsPass
from .export_shape import ExportShapeAnalysisPass
from .naming import IdentifierAllocator, module_identifier
from .patterns import REQUIRE_CALL

logger = logging.getLogger(__name__)

REQUIRE_BINDING = compile_shape(
    'VariableDeclaration(kind=$kind, declarations=[VariableDeclarator(id=$target, init=%require)])',
    require=REQUIRE_CALL,
)


@dataclass(frozen=True)
class RequireBinding:
    """One `<kind> <target> = require('<source>')` declaration."""
    statement: NodeId
    kind: str
    target: Node
    source: str

    @property
    def is_mutable(self) -> bool:
        return self.kind in ("let", "var")


@dataclass(frozen=True)
class ImportNaming:
    """Used-Identifier Map after a pass finished allocating import names."""
    used: Mapping[str, str]


class RequireConversionPass(BasePass):
    requires = [ModuleBindingsPass]

    def run(self, tree: SyntaxTree, tcx: TransformContext) -> SyntaxTree:
        shape = tcx.get_analysis(ExportShapeAnalysisPass)
        bindings = tcx.get_analysis(ModuleBindingsPass)
        allocator = IdentifierAllocator(bindings.declared)

        for node_id, captures in tcx.api.find(tree, REQUIRE_BINDING):
            binding = RequireBinding(statement=node_id, **captures)
            specifier = resolve_module_path(binding.source, tcx.file_path)

            if specifier.endswith(JSON_FILE_EXTENSION):
                self._convert_json(tree, tcx, binding, specifier, allocator)
            elif isinstance(binding.target, Identifier):
                self._convert_whole_module(tree, tcx, binding, specifier,
                                           shape.spread_consumers, allocator)
            elif isinstance(binding.target, ObjectPattern):
                self._convert_destructured(tree, tcx, binding, specifier, allocator)
            else:
                logger.debug(f"{tcx.file_path}: require({binding.source!r}) into "
                             f"{binding.target.tag} left unchanged")

        tcx.set_analysis(RequireConversionPass, ImportNaming(MappingProxyType(dict(allocator.used))))
        return tree

    def _convert_json(self, tree: SyntaxTree, tcx: TransformContext, binding: RequireBinding,
                      specifier: str, allocator: IdentifierAllocator) -> None:
        b = tcx.api.builders
        if isinstance(binding.target, Identifier):
            tree.replace(binding.statement, b.import_json(binding.target.name, specifier))
        else:
            name, _ = self._allocate(binding, specifier, allocator)
            tree.replace(
                binding.statement,
                b.import_json(name, specifier),
                b.variable_declaration(binding.kind, binding.target, name),
            )
        logger.debug(f"{tcx.file_path}: require({binding.source!r}) -> JSON import of {specifier!r}")

    def _convert_whole_module(self, tree: SyntaxTree, tcx: TransformContext,
                              binding: RequireBinding, specifier: str,
                              spread_consumers, allocator: IdentifierAllocator) -> None:
        b = tcx.api.builders
        local = binding.target.name
        import_name, is_new = local, True
        if binding.is_mutable:
            import_name, is_new = allocator.allocate(TEMP_NAME_PREFIX + local, specifier)

        if local in spread_consumers:
            declaration = b.import_namespace(import_name, specifier)
        else:
            declaration = b.import_default(import_name, specifier)

        if binding.is_mutable:
            copy = b.variable_declaration(binding.kind, local, import_name)
            if is_new:
                tree.replace(binding.statement, declaration, copy)
            else:
                tree.replace(binding.statement, copy)
        else:
            tree.replace(binding.statement, declaration)
        logger.debug(f"{tcx.file_path}: require({binding.source!r}) -> import {import_name}")

    def _convert_destructured(self, tree: SyntaxTree, tcx: TransformContext,
                              binding: RequireBinding, specifier: str,
                              allocator: IdentifierAllocator) -> None:
        b = tcx.api.builders
        name, is_new = self._allocate(binding, specifier, allocator)
        if is_new:
            tree.prepend(b.import_default(name, specifier))
        tree.replace(binding.statement, b.variable_declaration(binding.kind, binding.target, name))
        logger.debug(f"{tcx.file_path}: require({binding.source!r}) destructured from {name}"
                     f"{'' if is_new else ' (import reused)'}")

    @staticmethod
    def _allocate(binding: RequireBinding, specifier: str, allocator: IdentifierAllocator):
        reserved = frozenset(pattern_keys(binding.target)) | frozenset(bound_names(binding.target))
        return allocator.allocate(module_identifier(specifier), specifier, reserved)
