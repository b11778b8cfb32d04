"""
Bulk Export Conversion

    module.exports = { a };          -> export default { a };
    module.exports = { a, b };       -> export { a, b };
    module.exports = { a, b: 2 };    -> export default { a, b: 2 };
    module.exports = { ...x, a };    -> export default { ...x, a };
    module.exports = {};             -> export default {};
    module.exports = createApp();    -> export default createApp();
"""

from dataclasses import dataclass
from typing import List, Optional
import logging

from ..shared.arena import NodeId, SyntaxTree
from ..shared.nodes import Identifier, Node, ObjectExpression, Property
from .base import BasePass, TransformContext
from .patterns import BULK_EXPORT
from .require_expression import RequireExpressionPass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BulkExport:
    """`module.exports = <value>;` as a top-level statement."""
    statement: NodeId
    value: Node


def shorthand_names(value: ObjectExpression) -> Optional[List[str]]:
    """Names of an object literal made only of shorthand properties, else None."""
    names = []
    for prop in value.properties:
        if not (isinstance(prop, Property) and prop.shorthand and not prop.computed
                and isinstance(prop.value, Identifier)):
            return None
        names.append(prop.value.name)
    return names


class ModuleExportsPass(BasePass):
    requires = [RequireExpressionPass]

    def run(self, tree: SyntaxTree, tcx: TransformContext) -> SyntaxTree:
        b = tcx.api.builders
        for node_id, captures in tcx.api.find(tree, BULK_EXPORT):
            export = BulkExport(statement=node_id, **captures)
            names = None
            if isinstance(export.value, ObjectExpression):
                names = shorthand_names(export.value)

            if names is not None and len(names) > 1:
                tree.replace(node_id, b.export_names(names))
                logger.debug(f"{tcx.file_path}: module.exports -> export {{ {', '.join(names)} }}")
            else:
                tree.replace(node_id, b.export_default(export.value))
                logger.debug(f"{tcx.file_path}: module.exports -> export default")
        return tree
