"""
Special-Global Conversion

When `__dirname` or `__filename` is referenced anywhere, the file gets

    import path from 'path';
    import { fileURLToPath } from 'url';
    const __filename = fileURLToPath(import.meta.url);
    const __dirname = path.dirname(__filename);      (only if __dirname is used)

right after the Leading Comment Block. Existing top-level imports of the
path / url modules lose the specifiers that bind `path` or `fileURLToPath`;
an import left with no specifiers is removed.

`path` and `fileURLToPath` go through the Used-Identifier Map like any other
import name: when the file still binds one of them itself (`var path = ...`,
its own `function fileURLToPath`), the synthesized binding is renamed, and a
remaining default import of the path module is reused instead.
"""

from dataclasses import dataclass
import logging

from ..shared.arena import SyntaxTree
from ..shared.nodes import (
    ImportDeclaration, ImportDefaultSpecifier, ImportNamespaceSpecifier, ImportSpecifier,
)
from ..shared.shapes import compile_shape
from ..utils.config import (
    DIRNAME_GLOBAL, FILE_URL_TO_PATH, FILENAME_GLOBAL, PATH_MODULE, PATH_MODULE_ALIASES,
    URL_MODULE, URL_MODULE_ALIASES,
)
from .base import BasePass, TransformContext
from .bindings import ModuleBindingsPass, declared_names
from .export_property import ExportPropertyPass
from .naming import IdentifierAllocator

logger = logging.getLogger(__name__)

DIRNAME_REFERENCE = compile_shape(f'Identifier(name="{DIRNAME_GLOBAL}")')
FILENAME_REFERENCE = compile_shape(f'Identifier(name="{FILENAME_GLOBAL}")')
MODULE_IMPORT = compile_shape('ImportDeclaration(source=StringLiteral(value=$source), specifiers=[*, ...])')

_REPLACED_BINDINGS = frozenset({PATH_MODULE, FILE_URL_TO_PATH})
_PATH_AND_URL_MODULES = frozenset(PATH_MODULE_ALIASES + URL_MODULE_ALIASES)


@dataclass(frozen=True)
class SpecialGlobalUse:
    """Which of the two globals the file needs bindings for."""
    filename: bool
    dirname: bool

    @property
    def any(self) -> bool:
        return self.filename or self.dirname


class SpecialGlobalsPass(BasePass):
    requires = [ExportPropertyPass]

    def run(self, tree: SyntaxTree, tcx: TransformContext) -> SyntaxTree:
        declared = tcx.get_analysis(ModuleBindingsPass).declared
        uses_dirname = DIRNAME_REFERENCE.any(tree.walk())
        uses_filename = FILENAME_REFERENCE.any(tree.walk())
        # A file that declares the global itself keeps its own binding
        dirname = uses_dirname and DIRNAME_GLOBAL not in declared
        use = SpecialGlobalUse(
            filename=(uses_filename or dirname) and FILENAME_GLOBAL not in declared,
            dirname=dirname,
        )
        if not use.any:
            return tree

        self._drop_existing_imports(tree, tcx)
        allocator = self._allocator(tree)
        path_name, new_path = allocator.allocate(PATH_MODULE, PATH_MODULE)
        to_path_name, _ = allocator.allocate(FILE_URL_TO_PATH, URL_MODULE)

        b = tcx.api.builders
        statements = []
        if new_path:
            statements.append(b.import_default(path_name, PATH_MODULE))
        statements.append(b.import_declaration(
            [ImportSpecifier(b.identifier(FILE_URL_TO_PATH), b.identifier(to_path_name))], URL_MODULE
        ))
        if use.filename:
            statements.append(b.variable_declaration(
                "const", FILENAME_GLOBAL, b.call(to_path_name, [b.import_meta("url")])
            ))
        if use.dirname:
            statements.append(b.variable_declaration(
                "const", DIRNAME_GLOBAL, b.call(b.member(path_name, "dirname"), [b.identifier(FILENAME_GLOBAL)])
            ))
        tree.prepend(*statements)
        logger.debug(f"{tcx.file_path}: synthesized {FILENAME_GLOBAL if use.filename else ''}"
                     f"{' ' + DIRNAME_GLOBAL if use.dirname else ''}")
        return tree

    @staticmethod
    def _allocator(tree: SyntaxTree) -> IdentifierAllocator:
        """Names bound at top level right now; default imports of the path module are reusable."""
        taken = set()
        path_imports = {}
        for _, statement in tree.statements():
            taken.update(declared_names(statement))
            if isinstance(statement, ImportDeclaration) and \
                    statement.source.value in PATH_MODULE_ALIASES:
                for specifier in statement.specifiers:
                    if isinstance(specifier, (ImportDefaultSpecifier, ImportNamespaceSpecifier)):
                        path_imports[specifier.local.name] = PATH_MODULE
        return IdentifierAllocator(taken, path_imports)

    def _drop_existing_imports(self, tree: SyntaxTree, tcx: TransformContext) -> None:
        for node_id, captures in tcx.api.find(tree, MODULE_IMPORT):
            if captures["source"] not in _PATH_AND_URL_MODULES:
                continue
            declaration: ImportDeclaration = tree.get(node_id)
            kept = tuple(s for s in declaration.specifiers if s.local.name not in _REPLACED_BINDINGS)
            if len(kept) == len(declaration.specifiers):
                continue
            if kept:
                tree.replace(node_id, tcx.api.builders.import_declaration(
                    kept, declaration.source, declaration.attributes))
            else:
                tree.remove(node_id)
            logger.debug(f"{tcx.file_path}: dropped existing import of {captures['source']!r}")
