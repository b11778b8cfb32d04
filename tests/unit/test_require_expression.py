"""
Tests for require() used as a statement: method calls on the loaded module
and side-effect-only loads.
"""

from esmify.passes.bindings import ModuleBindingsPass
from esmify.passes.export_shape import ExportShapeAnalysisPass
from esmify.passes.require import RequireConversionPass
from esmify.passes.require_expression import RequireExpressionPass
from tests.test_utils import js, run_passes


class TestRequireMethodCall:
    def test_method_call(self, transform):
        assert transform("require('debug').enable('app:*');\n") == js("""
            import debug from 'debug';
            debug.enable('app:*');
        """)

    def test_identifier_is_sanitized(self, transform):
        assert transform("require('./my-lib').init(1, 2);\n", files={"my-lib.js": ""}) == js("""
            import myLib from './my-lib.js';
            myLib.init(1, 2);
        """)

    def test_scoped_package(self, transform):
        assert transform("require('@org/setup').run();\n") == js("""
            import setup from '@org/setup';
            setup.run();
        """)

    def test_reuses_destructured_import(self, transform):
        source = """
            const { log } = require('debug');
            require('debug').enable('x');
        """
        assert transform(source) == js("""
            import debug from 'debug';
            const { log } = debug;
            debug.enable('x');
        """)

    def test_top_level_name_is_not_shadowed(self, transform):
        source = """
            function debug() {}
            require('debug').enable('x');
        """
        assert transform(source) == js("""
            import _debug from 'debug';
            function debug() {}
            _debug.enable('x');
        """)

    def test_expression_comments_and_spacing_survive(self, transform):
        source = """
            setup();

            // turn logging on
            require('debug').enable('*'); // all namespaces
        """
        assert transform(source) == js("""
            import debug from 'debug';
            setup();

            // turn logging on
            debug.enable('*'); // all namespaces
        """)


class TestSideEffectRequire:
    def test_side_effect_import(self, transform):
        assert transform("require('./polyfill');\n", files={"polyfill.js": ""}) == \
            "import './polyfill.js';\n"

    def test_side_effect_keeps_position(self, transform):
        source = """
            const a = 1;
            require('dotenv/config');
            start(a);
        """
        assert transform(source) == js("""
            const a = 1;
            import 'dotenv/config';
            start(a);
        """)


class TestNotConverted:
    def test_chained_property_access(self, run_transform):
        source = "require('./a').b.c();\n"
        result = run_transform(source)
        assert result.output == source
        assert [w.code for w in result.warnings] == ["W0001"]

    def test_call_result_used_in_expression(self, run_transform):
        source = "app.use(require('cors')());\n"
        result = run_transform(source)
        assert result.output == source
        assert [w.code for w in result.warnings] == ["W0001"]


class TestPassResults:
    def test_only_the_conversion_pass_publishes_import_naming(self):
        run = run_passes("const { log } = require('debug');\nrequire('debug').enable('x');\n", [
            ExportShapeAnalysisPass, ModuleBindingsPass, RequireConversionPass, RequireExpressionPass,
        ])
        assert dict(run.analysis(RequireConversionPass).used) == {"debug": "debug"}
        assert not run.tcx.has_analysis(RequireExpressionPass)
        assert run.lines == ["import debug from 'debug';", "const { log } = debug;", "debug.enable('x');"]
