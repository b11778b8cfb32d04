"""
Legacy Residue Check

Read-only. After every rewrite has run, reports a warning for each CommonJS
construct still in the file: require() calls the rules could not convert
(computed specifiers, nested calls), leftover module.exports accesses and
bare `exports` references. Synthesized nodes are never reported.
"""

import logging

from ..shared.arena import SyntaxTree
from .base import BasePass, TransformContext
from .patterns import ANY_REQUIRE_CALL, BARE_EXPORTS, MODULE_EXPORTS
from .special_globals import SpecialGlobalsPass

logger = logging.getLogger(__name__)

# (shape, code, message, help)
_RESIDUE_CHECKS = (
    (ANY_REQUIRE_CALL, "W0001", "`require()` left in place",
     "only top-level `require('<literal>')` bindings and statements are converted"),
    (MODULE_EXPORTS, "W0002", "`module.exports` left in place",
     "only top-level `module.exports = ...` and `module.exports.<name> = ...` are converted"),
    (BARE_EXPORTS, "W0003", "`exports` left in place",
     "only top-level `exports.<name> = ...` assignments are converted"),
)


class LegacyResiduePass(BasePass):
    requires = [SpecialGlobalsPass]

    def run(self, tree: SyntaxTree, tcx: TransformContext) -> SyntaxTree:
        for node in tree.walk():
            if node.is_synthesized:
                continue
            for shape, code, message, help_text in _RESIDUE_CHECKS:
                if shape.matches(node):
                    tcx.reporter.report_warning(message, node.location, code=code, help=help_text)
                    logger.debug(f"{node.location}: {message}")
        return tree
