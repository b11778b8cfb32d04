"""
Tests for the shape pattern language: compiling, matching, captures and
compile-time errors.
"""

import pytest

from esmify.passes.patterns import ANY_REQUIRE_CALL, BARE_EXPORTS, BULK_EXPORT, EXPORTS_TARGET, MODULE_EXPORTS, REQUIRE_CALL
from esmify.shared import (
    CallExpression, Identifier, MemberExpression, PropertyName, ShapePatternError, StringLiteral,
    compile_shape,
)
from esmify.utils.config import EXPORTS_NAME, MODULE_OBJECT, REQUIRE_FUNCTION
from tests.test_utils import parse_source


def _require(*arguments):
    return CallExpression(Identifier("require"), tuple(arguments))


class TestShapeMatching:
    def test_node_kind_and_fields(self):
        shape = compile_shape('Identifier(name="require")')
        assert shape.matches(Identifier("require"))
        assert not shape.matches(Identifier("define"))
        assert not shape.matches(PropertyName("require"))

    def test_capture(self):
        captures = REQUIRE_CALL.match(_require(StringLiteral("./a")))
        assert captures == {"source": "./a"}

    def test_exact_sequence_length(self):
        assert REQUIRE_CALL.match(_require()) is None
        assert REQUIRE_CALL.match(_require(StringLiteral("a"), StringLiteral("b"))) is None
        assert REQUIRE_CALL.match(_require(Identifier("name"))) is None

    def test_open_ended_sequence(self):
        shape = compile_shape('CallExpression(arguments=[StringLiteral(value=$first), ...])')
        call = _require(StringLiteral("a"), Identifier("b"))
        assert shape.match(call) == {"first": "a"}
        assert shape.match(_require()) is None

    def test_any_require_call_ignores_arguments(self):
        assert ANY_REQUIRE_CALL.matches(_require())
        assert ANY_REQUIRE_CALL.matches(_require(Identifier("name")))

    def test_bool_literal_matches_only_bool(self):
        shape = compile_shape('MemberExpression(computed=false)')
        assert shape.matches(MemberExpression(Identifier("a"), PropertyName("b")))
        assert not shape.matches(MemberExpression(Identifier("a"), Identifier("b"), computed=True))

    def test_null_literal(self):
        shape = compile_shape('VariableDeclarator(init=null)')
        tree = parse_source("let x;")
        declarator = tree.get(tree.body[0]).declarations[0]
        assert shape.matches(declarator)

    def test_wildcard(self):
        shape = compile_shape('CallExpression(callee=*, arguments=[*])')
        assert shape.matches(_require(StringLiteral("x")))

    def test_alternative_and_reference(self):
        assert EXPORTS_TARGET.matches(Identifier("exports"))
        assert EXPORTS_TARGET.matches(MemberExpression(Identifier("module"), PropertyName("exports")))
        assert not EXPORTS_TARGET.matches(MemberExpression(Identifier("module"), PropertyName("id")))

    def test_failed_alternative_leaves_no_captures(self):
        shape = compile_shape('Identifier(name=$a@"x") | Identifier(name=$b)')
        assert shape.match(Identifier("y")) == {"b": "y"}

    def test_capture_with_inner_pattern(self):
        shape = compile_shape('CallExpression(callee=$fn@Identifier(name="require"))')
        captures = shape.match(_require())
        assert captures == {"fn": Identifier("require")}

    def test_module_exports_is_not_computed_access(self):
        assert MODULE_EXPORTS.matches(MemberExpression(Identifier("module"), PropertyName("exports")))
        assert not MODULE_EXPORTS.matches(
            MemberExpression(Identifier("module"), StringLiteral("exports"), computed=True)
        )

    def test_bare_exports_never_matches_property_names(self):
        assert BARE_EXPORTS.matches(Identifier("exports"))
        assert not BARE_EXPORTS.matches(PropertyName("exports"))


class TestShapesOnParsedCode:
    """Shapes run over trees produced by the front end."""

    def test_find_all_over_walk(self):
        tree = parse_source("""
            const a = require('./a');
            function f() { return require('./b'); }
        """)
        sources = [c["source"] for _, c in REQUIRE_CALL.find_all(tree.walk())]
        assert sources == ["./a", "./b"]

    def test_bulk_export_captures_value(self):
        tree = parse_source("module.exports = { a, b };")
        captures = BULK_EXPORT.match(tree.get(tree.body[0]))
        assert captures is not None
        assert [p.key.name for p in captures["value"].properties] == ["a", "b"]

    def test_decoded_string_value(self):
        tree = parse_source("require(\"./\\x61\");")
        captures = REQUIRE_CALL.match(tree.get(tree.body[0]).expression)
        assert captures == {"source": "./a"}

    def test_patterns_use_configured_names(self):
        tree = parse_source(f"{MODULE_OBJECT}.{EXPORTS_NAME} = {REQUIRE_FUNCTION}('./x');\n"
                            f"{EXPORTS_NAME}.y = 1;\n")
        first, second = (tree.get(i) for i in tree.body)
        captures = BULK_EXPORT.match(first)
        assert REQUIRE_CALL.match(captures["value"]) == {"source": "./x"}
        assert EXPORTS_TARGET.match(second.expression.left.object) is not None


class TestShapeCompileErrors:
    def test_syntax_error(self):
        with pytest.raises(ShapePatternError) as exc:
            compile_shape('CallExpression(callee=')
        assert exc.value.error_code == "E9002"
        assert "CallExpression(callee=" in str(exc.value)

    def test_unknown_kind(self):
        with pytest.raises(ShapePatternError, match="unknown node kind 'Callexpression'"):
            compile_shape('Callexpression()')

    def test_unknown_field(self):
        with pytest.raises(ShapePatternError, match="CallExpression has no field 'args'"):
            compile_shape('CallExpression(args=[])')

    def test_missing_reference(self):
        with pytest.raises(ShapePatternError, match="no shape passed for reference '%target'"):
            compile_shape('ExpressionStatement(expression=%target)')

    def test_ellipsis_only_at_end(self):
        with pytest.raises(ShapePatternError, match="only allowed at the end"):
            compile_shape('CallExpression(arguments=[..., *])')
