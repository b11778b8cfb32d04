"""
Base Pass System

Pattern: rustc-style pass manager over one shared per-file context
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, Type
import logging
import time

from ..shared.arena import NodeId, SyntaxTree
from ..shared.errors import ErrorReporter, EsmifyImplementationError
from ..shared.shapes import Captures, Shape

logger = logging.getLogger(__name__)


def find_statements(tree: SyntaxTree, shape: Shape) -> Iterator[Tuple[NodeId, Captures]]:
    """
    (id, captures) for every top-level statement that has the given shape.

    Iterates over a snapshot of the body and re-reads each statement when it
    is reached, so the caller may replace or remove statements as it goes.
    """
    for node_id, _ in tree.statements():
        if not tree.is_live(node_id):
            continue
        captures = shape.match(tree.get(node_id))
        if captures is not None:
            yield node_id, captures


@dataclass(frozen=True)
class TransformApi:
    """
    Capability set handed to the core: shape finder, node factory, renderer.

    find(tree, shape) yields (NodeId, captures) for matching top-level
    statements; builders is the node factory module; render(tree) returns
    the tree as text.
    """
    find: Callable[[SyntaxTree, Shape], Iterator[Tuple[NodeId, Captures]]]
    builders: ModuleType
    render: Callable[[SyntaxTree], str]


class TransformContext:
    """
    Per-file context - single source of truth for one file's transformation.

    - Analysis results stored here (not in passes, never module globals)
    - Created for one file and dropped afterwards; nothing is shared between files
    - Diagnostics go to the per-file reporter
    """

    def __init__(self, file_path: str, source: str, api: TransformApi):
        self.file_path = file_path
        self.api = api
        self.source_files: Dict[str, str] = {file_path: source}
        self.reporter: ErrorReporter = ErrorReporter(self.source_files)
        self._analysis_results: Dict[Type['BasePass'], Any] = {}

    def get_analysis(self, pass_class: Type['BasePass']) -> Any:
        """Get analysis results from a pass"""
        if pass_class not in self._analysis_results:
            raise EsmifyImplementationError(f"Analysis {pass_class.__name__} not available")
        return self._analysis_results[pass_class]

    def set_analysis(self, pass_class: Type['BasePass'], results: Any) -> None:
        """Store analysis results"""
        self._analysis_results[pass_class] = results

    def has_analysis(self, pass_class: Type['BasePass']) -> bool:
        return pass_class in self._analysis_results


class BasePass(ABC):
    """
    Base class for all passes.

    - Explicit dependencies via `requires`
    - Pass results stored in TransformContext (not in the pass)
    - Rewrites mutate the tree in place, one top-level statement at a time
    """
    requires: List[Type['BasePass']] = []  # Dependencies (empty by default)

    @abstractmethod
    def run(self, tree: SyntaxTree, tcx: TransformContext) -> SyntaxTree:
        """Run pass on the tree; returns the same tree."""
        raise NotImplementedError


class PassManager:
    """
    Pass manager with dependency resolution.

    - Automatic dependency resolution (topological sort)
    - Passes run in dependency order, registration order breaks ties
    - Single TransformContext shared across all passes of one file
    """

    def __init__(self):
        self.passes: List[Type[BasePass]] = []
        self._dependency_graph: Dict[Type[BasePass], set] = {}

    def register_pass(self, pass_class: Type[BasePass]) -> None:
        """Register a pass"""
        self.passes.append(pass_class)
        self._dependency_graph[pass_class] = set(pass_class.requires)

    @property
    def order(self) -> List[Type[BasePass]]:
        return self._topological_sort()

    def run_all(self, tree: SyntaxTree, tcx: TransformContext,
                dump_dir: Optional[Path] = None,
                dump: Optional[Callable[[SyntaxTree], str]] = None) -> SyntaxTree:
        """
        Run all passes in dependency order.

        Args:
            tree: parsed file
            tcx: per-file context
            dump_dir: if set, write `NN_after_<Pass>.sexpr` there after each pass
            dump: tree -> text used for those files
        """
        for index, pass_class in enumerate(self._topological_sort(), start=1):
            pass_name = pass_class.__name__
            started = time.perf_counter()
            tree = pass_class().run(tree, tcx)
            elapsed = (time.perf_counter() - started) * 1000
            logger.debug(f"{tcx.file_path}: {pass_name} done in {elapsed:.2f} ms")

            if dump_dir is not None and dump is not None:
                dump_dir.mkdir(parents=True, exist_ok=True)
                (dump_dir / f"{index:02d}_after_{pass_name}.sexpr").write_text(
                    dump(tree) + "\n", encoding="utf-8"
                )
        return tree

    def _topological_sort(self) -> List[Type[BasePass]]:
        """Topological sort of passes by dependencies"""
        unknown = {
            dep.__name__
            for p in self.passes for dep in self._dependency_graph[p]
            if dep not in self._dependency_graph
        }
        if unknown:
            raise EsmifyImplementationError(f"Unregistered pass dependencies: {sorted(unknown)}")

        in_degree = {p: len(self._dependency_graph[p]) for p in self.passes}
        queue = [p for p, degree in in_degree.items() if degree == 0]
        result = []

        while queue:
            pass_class = queue.pop(0)
            result.append(pass_class)

            for other_pass in self.passes:
                if pass_class in self._dependency_graph[other_pass]:
                    in_degree[other_pass] -= 1
                    if in_degree[other_pass] == 0:
                        queue.append(other_pass)

        if len(result) != len(self.passes):
            raise EsmifyImplementationError("Circular dependency detected in passes")

        return result
