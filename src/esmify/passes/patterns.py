"""
Shapes of the CommonJS constructs the passes look for.

Compiled once at import time; see shared/shapes.py for the pattern language.
"""

from ..shared.shapes import compile_shape
from ..utils.config import EXPORTS_NAME, MODULE_OBJECT, REQUIRE_FUNCTION

# module.exports
MODULE_EXPORTS = compile_shape(
    f'MemberExpression(object=Identifier(name="{MODULE_OBJECT}"), '
    f'property=PropertyName(name="{EXPORTS_NAME}"), computed=false)'
)

# exports | module.exports
EXPORTS_TARGET = compile_shape(
    f'Identifier(name="{EXPORTS_NAME}") | %module_exports',
    module_exports=MODULE_EXPORTS,
)

# require('<literal>')
REQUIRE_CALL = compile_shape(
    f'CallExpression(callee=Identifier(name="{REQUIRE_FUNCTION}"), '
    'arguments=[StringLiteral(value=$source)])'
)

# require(<anything>) including malformed calls
ANY_REQUIRE_CALL = compile_shape(f'CallExpression(callee=Identifier(name="{REQUIRE_FUNCTION}"))')

# bare `exports` reference (property names never match)
BARE_EXPORTS = compile_shape(f'Identifier(name="{EXPORTS_NAME}")')

# module.exports = <value>;
BULK_EXPORT = compile_shape(
    'ExpressionStatement(expression=AssignmentExpression('
    'operator="=", left=%module_exports, right=$value))',
    module_exports=MODULE_EXPORTS,
)
