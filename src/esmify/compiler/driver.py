"""
Transform Driver

Pattern: rustc_driver-style orchestration (parse, detect, passes, render)
"""

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import List, Optional
import logging

from ..backends.javascript import JavaScriptRenderer
from ..frontend.parser import Parser
from ..passes.base import PassManager, TransformApi, TransformContext, find_statements
from ..passes.bindings import ModuleBindingsPass
from ..passes.detection import uses_commonjs
from ..passes.export_property import ExportPropertyPass
from ..passes.export_shape import ExportShapeAnalysisPass
from ..passes.module_exports import ModuleExportsPass
from ..passes.require import RequireConversionPass
from ..passes.require_expression import RequireExpressionPass
from ..passes.residue import LegacyResiduePass
from ..passes.special_globals import SpecialGlobalsPass
from ..shared import builders
from ..shared.arena import SyntaxTree
from ..shared.errors import WARNING, Error
from ..shared.serialization import serialize_tree
from ..utils.config import DEFAULT_DUMP_DIR, DUMP_DIR_ENV, DUMP_TREE_PER_PASS_ENV

logger = logging.getLogger(__name__)


def default_api() -> TransformApi:
    """Statement finder, node builders and the JavaScript renderer."""
    return TransformApi(
        find=find_statements,
        builders=builders,
        render=JavaScriptRenderer().render,
    )


@dataclass
class TransformResult:
    """
    Outcome for one file.

    output is None when the file is not CommonJS; it equals source when the
    file is CommonJS but nothing could be rewritten.
    """
    file_path: str
    source: str
    output: Optional[str] = None
    diagnostics: List[Error] = field(default_factory=list)
    tree: Optional[SyntaxTree] = None

    @property
    def detected(self) -> bool:
        return self.output is not None

    @property
    def changed(self) -> bool:
        return self.output is not None and self.output != self.source

    @property
    def warnings(self) -> List[Error]:
        return [d for d in self.diagnostics if d.severity == WARNING]


class TransformDriver:
    """
    Transform driver.

    - Owns the parser and the pass manager (one per process)
    - A fresh TransformContext per file; nothing carries over between files
    - Exceptions escape to the caller; the batch host decides what to do
    """

    def __init__(self, api: Optional[TransformApi] = None):
        self.api = api if api is not None else default_api()
        self.parser = Parser()
        self.pass_manager = PassManager()
        self._register_passes()

    def _register_passes(self) -> None:
        """
        Register the rewrite passes.

        Order comes from each pass's `requires`:
        1. ExportShapeAnalysisPass (spread consumers)
        2. ModuleBindingsPass (top-level names)
        3. RequireConversionPass
        4. RequireExpressionPass
        5. ModuleExportsPass
        6. ExportPropertyPass
        7. SpecialGlobalsPass
        8. LegacyResiduePass (warnings only)
        """
        for pass_class in (
            ExportShapeAnalysisPass,
            ModuleBindingsPass,
            RequireConversionPass,
            RequireExpressionPass,
            ModuleExportsPass,
            ExportPropertyPass,
            SpecialGlobalsPass,
            LegacyResiduePass,
        ):
            self.pass_manager.register_pass(pass_class)

    def transform_tree(self, tree: SyntaxTree, tcx: TransformContext) -> Optional[str]:
        """Run detection, the passes and the renderer on a parsed tree."""
        if not uses_commonjs(tree):
            logger.debug(f"{tcx.file_path}: no CommonJS usage, skipped")
            return None
        logger.debug(f"{tcx.file_path}: CommonJS detected")

        dump_dir = _dump_dir_for(tcx.file_path)
        if dump_dir is not None:
            dump_dir.mkdir(parents=True, exist_ok=True)
            (dump_dir / "00_parsed.sexpr").write_text(
                serialize_tree(tree, include_location=True) + "\n", encoding="utf-8"
            )
        tree = self.pass_manager.run_all(tree, tcx, dump_dir=dump_dir, dump=serialize_tree)
        return tcx.api.render(tree)

    def run(self, source: str, file_path: str = "<input>") -> TransformResult:
        """
        Transform one file's text.

        Raises ParseError when the text is not valid JavaScript.
        """
        tree = self.parser.parse(source, file_path)
        tcx = TransformContext(file_path, source, self.api)
        output = self.transform_tree(tree, tcx)
        return TransformResult(
            file_path=file_path,
            source=source,
            output=output,
            diagnostics=list(tcx.reporter.errors),
            tree=tree,
        )


@lru_cache(maxsize=None)
def _default_driver() -> TransformDriver:
    return TransformDriver()


def transform_file(file_path: str, tree: SyntaxTree, api: TransformApi) -> Optional[str]:
    """
    Rewrite one parsed CommonJS file as ESM.

    Returns the rendered text, or None when the file needs no transformation.
    """
    tcx = TransformContext(file_path, tree.source_text, api)
    return _default_driver().transform_tree(tree, tcx)


def _dump_dir_for(file_path: str) -> Optional[Path]:
    if not os.environ.get(DUMP_TREE_PER_PASS_ENV):
        return None
    root = Path(os.environ.get(DUMP_DIR_ENV, DEFAULT_DUMP_DIR))
    return root / Path(file_path).name
