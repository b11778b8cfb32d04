"""
Tests for the export rewrites: bulk `module.exports = ...` assignments and
per-property `exports.<name> = ...` assignments.
"""

import pytest

from tests.test_utils import js


class TestBulkExport:
    def test_all_shorthand_becomes_named_export(self, transform):
        assert transform("module.exports = { a, b };\n") == "export { a, b };\n"

    def test_single_shorthand_stays_an_object(self, transform):
        assert transform("module.exports = { a };\n") == "export default { a };\n"

    @pytest.mark.parametrize("value", [
        "{ a, b: 2 }",
        "{ a, ...rest }",
        "{ [key]: a, b }",
        "{ a, b() {} }",
        "{}",
    ])
    def test_other_objects_stay_default(self, transform, value):
        assert transform(f"module.exports = {value};\n") == f"export default {value};\n"

    def test_non_object_value(self, transform):
        assert transform("module.exports = createApp();\n") == "export default createApp();\n"

    def test_function_value(self, transform):
        assert transform("module.exports = function handler(req) {\n  return req;\n};\n") == \
            "export default function handler(req) {\n  return req;\n}\n"

    def test_class_value(self, transform):
        assert transform("module.exports = class Store {};\n") == "export default class Store {}\n"

    def test_multiline_object_text_is_kept(self, transform):
        source = """
            module.exports = {
              start,
              stop: halt,
            };
        """
        assert transform(source) == js("""
            export default {
              start,
              stop: halt,
            };
        """)

    def test_nested_assignment_is_left_alone(self, run_transform):
        source = "if (ok) {\n  module.exports = api;\n}\n"
        result = run_transform(source)
        assert result.output == source
        assert [w.code for w in result.warnings] == ["W0002"]


class TestPropertyExport:
    def test_sole_property_becomes_default(self, transform):
        assert transform("exports.only = 5;\n") == "export default 5;\n"

    def test_several_properties_become_named_consts(self, transform):
        source = """
            exports.foo = 1;
            exports.bar = 2;
        """
        assert transform(source) == js("""
            export const foo = 1;
            export const bar = 2;
        """)

    def test_module_exports_property(self, transform):
        assert transform("module.exports.handler = handler;\n") == "export default handler;\n"

    def test_mixed_targets(self, transform):
        source = """
            module.exports.a = 1;
            exports.b = () => 2;
        """
        assert transform(source) == js("""
            export const a = 1;
            export const b = () => 2;
        """)

    def test_existing_default_turns_sole_property_into_named_export(self, transform):
        source = """
            module.exports = app;
            exports.version = '1.0.0';
        """
        assert transform(source) == js("""
            export default app;
            export const version = '1.0.0';
        """)

    def test_default_property_name(self, transform):
        source = """
            exports.default = main;
            exports.helper = makeHelper();
        """
        assert transform(source) == js("""
            export default main;
            export const helper = makeHelper();
        """)

    def test_compound_assignment_is_left_alone(self, run_transform):
        source = "exports.count += 1;\n"
        result = run_transform(source)
        assert result.output == source
        assert [w.code for w in result.warnings] == ["W0003"]

    def test_computed_property_is_left_alone(self, run_transform):
        source = "exports['my-name'] = 1;\n"
        result = run_transform(source)
        assert result.output == source
        assert [w.code for w in result.warnings] == ["W0003"]

    def test_property_read_is_reported(self, run_transform):
        source = "exports.a = 1;\nconsole.log(module.exports.a);\n"
        result = run_transform(source)
        assert result.output == "export default 1;\nconsole.log(module.exports.a);\n"
        assert [w.code for w in result.warnings] == ["W0002"]
