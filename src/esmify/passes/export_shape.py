"""
Export Shape Pre-Analysis

Records which bindings a bulk `module.exports = { ...x }` spreads. The import
of such a binding must be a namespace import, so this runs before any
require() is rewritten and before the bulk export itself is rewritten.
"""

from dataclasses import dataclass
from typing import FrozenSet
import logging

from ..shared.arena import SyntaxTree
from ..shared.nodes import Identifier, ObjectExpression, SpreadElement
from .base import BasePass, TransformContext
from .patterns import BULK_EXPORT

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportShape:
    """Names spread into a bulk export object (the Spread-Consumer Set)."""
    spread_consumers: FrozenSet[str] = frozenset()


class ExportShapeAnalysisPass(BasePass):
    """Read-only: computes ExportShape once per file."""
    requires = []

    def run(self, tree: SyntaxTree, tcx: TransformContext) -> SyntaxTree:
        names = set()
        for _, captures in tcx.api.find(tree, BULK_EXPORT):
            value = captures["value"]
            if not isinstance(value, ObjectExpression):
                continue
            for prop in value.properties:
                if isinstance(prop, SpreadElement) and isinstance(prop.argument, Identifier):
                    names.add(prop.argument.name)
        if names:
            logger.debug(f"{tcx.file_path}: spread consumers {sorted(names)}")
        tcx.set_analysis(ExportShapeAnalysisPass, ExportShape(frozenset(names)))
        return tree
