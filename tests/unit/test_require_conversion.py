"""
Tests for require() binding conversion: whole-module, mutable, namespace,
JSON and destructured imports, plus the naming records the pass publishes.
"""

import pytest

from esmify.passes.bindings import ModuleBindingsPass
from esmify.passes.export_shape import ExportShapeAnalysisPass
from esmify.passes.require import RequireConversionPass
from tests.test_utils import js, run_passes

_ANALYSIS = [ExportShapeAnalysisPass, ModuleBindingsPass, RequireConversionPass]


class TestWholeModuleImport:
    def test_const_default_import(self, transform):
        assert transform("const x = require('./a');\n", files={"a.js": ""}) == \
            "import x from './a.js';\n"

    def test_unresolved_specifier_passes_through(self, transform):
        assert transform("const lodash = require('lodash');\n") == "import lodash from 'lodash';\n"

    def test_let_goes_through_temporary(self, transform):
        assert transform("let x = require('./a');\nx = wrap(x);\n", files={"a.js": ""}) == js("""
            import _x from './a.js';
            let x = _x;
            x = wrap(x);
        """)

    def test_var_goes_through_temporary(self, transform):
        assert transform("var fs = require('fs');\n") == "import _fs from 'fs';\nvar fs = _fs;\n"

    def test_spread_consumer_gets_namespace_import(self, transform):
        source = """
            const base = require('./base');
            const extra = 1;
            module.exports = { ...base, extra };
        """
        assert transform(source, files={"base.js": ""}) == js("""
            import * as base from './base.js';
            const extra = 1;
            export default { ...base, extra };
        """)

    def test_double_quoted_source_is_requoted(self, transform):
        assert transform('const x = require("x");\n') == "import x from 'x';\n"


class TestJsonImport:
    def test_explicit_json(self, transform):
        assert transform("const data = require('./data.json');\n", files={"data.json": "{}"}) == \
            "import data from './data.json' with { type: 'json' };\n"

    def test_json_found_by_probe(self, transform):
        assert transform("const config = require('./config');\n", files={"config.json": "{}"}) == \
            "import config from './config.json' with { type: 'json' };\n"

    def test_destructured_json(self, transform):
        output = transform("const { version } = require('./package.json');\n",
                           files={"package.json": "{}"})
        assert output == js("""
            import packageJson from './package.json' with { type: 'json' };
            const { version } = packageJson;
        """)


class TestDestructuredImport:
    def test_directory_index(self, transform):
        output = transform("const { a, b } = require('./util');\n", files={"util/index.js": ""})
        assert output == js("""
            import util from './util/index.js';
            const { a, b } = util;
        """)

    def test_last_discovered_import_is_first(self, transform):
        source = """
            const { a } = require('./one');
            const { b } = require('./two');
        """
        assert transform(source, files={"one.js": "", "two.js": ""}) == js("""
            import two from './two.js';
            import one from './one.js';
            const { a } = one;
            const { b } = two;
        """)

    def test_camel_cased_base_name(self, transform):
        output = transform("const { trim } = require('./string-utils');\n",
                           files={"string-utils.js": ""})
        assert output == js("""
            import stringUtils from './string-utils.js';
            const { trim } = stringUtils;
        """)

    def test_pattern_naming_the_module_gets_prefix(self, transform):
        output = transform("const { util } = require('./util');\n", files={"util.js": ""})
        assert output == js("""
            import _util from './util.js';
            const { util } = _util;
        """)

    def test_renamed_pattern_binding_gets_prefix(self, transform):
        output = transform("const { helper: util } = require('./util');\n", files={"util.js": ""})
        assert output == js("""
            import _util from './util.js';
            const { helper: util } = _util;
        """)

    def test_top_level_name_is_not_shadowed(self, transform):
        source = """
            const config = loadConfig();
            const { port } = require('./config');
        """
        assert transform(source, files={"config.js": ""}) == js("""
            import _config from './config.js';
            const config = loadConfig();
            const { port } = _config;
        """)

    def test_same_specifier_reuses_import(self, transform):
        source = """
            const { a } = require('./util');
            const { b } = require('./util');
        """
        assert transform(source, files={"util.js": ""}) == js("""
            import util from './util.js';
            const { a } = util;
            const { b } = util;
        """)

    def test_scoped_package_collision_uses_compound_name(self, transform):
        source = """
            const { x } = require('./core');
            const { transform } = require('@babel/core');
        """
        assert transform(source) == js("""
            import babelCore from '@babel/core';
            import core from './core';
            const { x } = core;
            const { transform } = babelCore;
        """)

    def test_let_destructuring_keeps_kind(self, transform):
        assert transform("let { a } = require('m');\n") == "import m from 'm';\nlet { a } = m;\n"


class TestLeftAlone:
    def test_array_pattern(self, run_transform):
        source = "const [first] = require('./list');\n"
        result = run_transform(source)
        assert result.output == source
        assert not result.changed
        assert [w.code for w in result.warnings] == ["W0001"]

    def test_multiple_declarators(self, run_transform):
        source = "const a = require('a'), b = 1;\n"
        result = run_transform(source)
        assert result.output == source
        assert [w.code for w in result.warnings] == ["W0001"]

    def test_nested_require(self, run_transform):
        source = "function load() {\n  return require('./lazy');\n}\n"
        result = run_transform(source)
        assert result.output == source
        assert [w.code for w in result.warnings] == ["W0001"]

    def test_computed_specifier(self, run_transform):
        source = "const plugin = require(name);\n"
        result = run_transform(source)
        assert result.output == source
        assert result.warnings[0].location.line == 1
        assert result.warnings[0].location.column == 16


class TestAnalysisRecords:
    def test_spread_consumers(self):
        run = run_passes("module.exports = { ...a, ...b.c, d };", [ExportShapeAnalysisPass])
        assert run.analysis(ExportShapeAnalysisPass).spread_consumers == frozenset({"a"})

    def test_module_bindings(self):
        run = run_passes("""
            const { a, b: c } = x;
            let d;
            function e() {}
            class F {}
            import g from 'g';
            export const h = 1;
        """, _ANALYSIS[:2])
        assert run.analysis(ModuleBindingsPass).declared == frozenset({"a", "c", "d", "e", "F", "g", "h"})

    def test_import_naming_is_read_only(self):
        run = run_passes("const { a } = require('pkg');", _ANALYSIS)
        naming = run.analysis(RequireConversionPass)
        assert dict(naming.used) == {"pkg": "pkg"}
        with pytest.raises(TypeError):
            naming.used["other"] = "x"
