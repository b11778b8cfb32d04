"""
Test utilities for the esmify test suite.

Helpers to lay out small JavaScript projects on disk and to run pieces of
the pipeline (parse, single pass, render) without the full driver.
"""

import textwrap
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Type

from esmify.backends.javascript import JavaScriptRenderer
from esmify.compiler.driver import default_api
from esmify.frontend.parser import Parser
from esmify.passes.base import BasePass, PassManager, TransformContext
from esmify.shared.arena import SyntaxTree


def js(text: str) -> str:
    """Dedent a triple-quoted JavaScript snippet and drop the first newline."""
    return textwrap.dedent(text).lstrip("\n")


def write_project(root: Path, files: Dict[str, str]) -> Path:
    """Create files (relative path -> content) under root."""
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(js(content), encoding="utf-8")
    return root


def parse_source(source: str, file_path: str = "<input>") -> SyntaxTree:
    return Parser().parse(js(source), file_path)


def render(tree: SyntaxTree) -> str:
    return JavaScriptRenderer().render(tree)


def make_context(tree: SyntaxTree) -> TransformContext:
    return TransformContext(tree.file_path, tree.source_text, default_api())


def run_passes(source: str, passes: Iterable[Type[BasePass]],
               file_path: str = "<input>") -> "PassRun":
    """
    Parse source and run only the given passes (plus nothing else), in
    dependency order. Every dependency must be listed too.
    """
    tree = parse_source(source, file_path)
    tcx = make_context(tree)
    manager = PassManager()
    for pass_class in passes:
        manager.register_pass(pass_class)
    manager.run_all(tree, tcx)
    return PassRun(tree, tcx)


class PassRun:
    """Tree and context after a partial pipeline run."""

    def __init__(self, tree: SyntaxTree, tcx: TransformContext):
        self.tree = tree
        self.tcx = tcx

    @property
    def text(self) -> str:
        return render(self.tree)

    @property
    def lines(self) -> List[str]:
        return self.text.splitlines()

    def analysis(self, pass_class: Type[BasePass]):
        return self.tcx.get_analysis(pass_class)

    def warning_codes(self) -> List[Optional[str]]:
        return [w.code for w in self.tcx.reporter.warnings]
