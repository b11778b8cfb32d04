"""
Tests for the pass pipeline: dependency ordering, CommonJS detection, the
residue check and S-expression tree dumps.
"""

import pytest

from esmify.passes.base import BasePass, PassManager
from esmify.passes.bindings import ModuleBindingsPass
from esmify.passes.detection import uses_commonjs
from esmify.passes.export_property import ExportPropertyPass
from esmify.passes.export_shape import ExportShapeAnalysisPass
from esmify.passes.module_exports import ModuleExportsPass
from esmify.passes.require import RequireConversionPass
from esmify.passes.require_expression import RequireExpressionPass
from esmify.passes.residue import LegacyResiduePass
from esmify.passes.special_globals import SpecialGlobalsPass
from esmify.shared import EsmifyImplementationError, builders
from esmify.shared.serialization import serialize_node, serialize_tree
from tests.test_utils import make_context, parse_source


class _First(BasePass):
    def run(self, tree, tcx):
        tcx.set_analysis(_First, ["first"])
        return tree


class _Second(BasePass):
    requires = [_First]

    def run(self, tree, tcx):
        tcx.set_analysis(_Second, tcx.get_analysis(_First) + ["second"])
        return tree


class _Loop(BasePass):
    def run(self, tree, tcx):
        return tree


_Loop.requires = [_Loop]


class TestPassManager:
    def test_driver_order(self, driver):
        assert driver.pass_manager.order == [
            ExportShapeAnalysisPass,
            ModuleBindingsPass,
            RequireConversionPass,
            RequireExpressionPass,
            ModuleExportsPass,
            ExportPropertyPass,
            SpecialGlobalsPass,
            LegacyResiduePass,
        ]

    def test_dependencies_run_first(self):
        manager = PassManager()
        manager.register_pass(_Second)
        manager.register_pass(_First)
        tree = parse_source("a();")
        tcx = make_context(tree)
        manager.run_all(tree, tcx)
        assert tcx.get_analysis(_Second) == ["first", "second"]

    def test_unregistered_dependency(self):
        manager = PassManager()
        manager.register_pass(_Second)
        with pytest.raises(EsmifyImplementationError, match="_First"):
            manager.order

    def test_cycle(self):
        manager = PassManager()
        manager.register_pass(_Loop)
        with pytest.raises(EsmifyImplementationError, match="Circular"):
            manager.order

    def test_missing_analysis(self):
        tcx = make_context(parse_source("a();"))
        assert not tcx.has_analysis(_First)
        with pytest.raises(EsmifyImplementationError):
            tcx.get_analysis(_First)

    def test_per_pass_dumps(self, tmp_path):
        manager = PassManager()
        manager.register_pass(_First)
        manager.register_pass(_Second)
        tree = parse_source("a();")
        manager.run_all(tree, make_context(tree), dump_dir=tmp_path / "dumps", dump=serialize_tree)
        names = sorted(p.name for p in (tmp_path / "dumps").iterdir())
        assert names == ["01_after__First.sexpr", "02_after__Second.sexpr"]


class TestDetection:
    @pytest.mark.parametrize("source", [
        "const a = require('a');",
        "module.exports = 1;",
        "exports.a = 1;",
        "function f() { return require(name); }",
        "if (x) { module.exports.y = 2; }",
        "console.log(typeof exports);",
    ])
    def test_commonjs(self, source):
        assert uses_commonjs(parse_source(source))

    @pytest.mark.parametrize("source", [
        "import a from 'a';\nexport default a;",
        "const module = {}; module.exported = 1;",
        "obj.exports = 1;",
        "obj.require('x');",
        "const __dirname = '.';",
        "",
    ])
    def test_not_commonjs(self, source):
        assert not uses_commonjs(parse_source(source))

    def test_driver_skips_esm(self, run_transform):
        result = run_transform("import a from 'a';\nconsole.log(__dirname);\n")
        assert result.output is None
        assert not result.detected
        assert result.diagnostics == []


class TestResidue:
    def test_each_construct_is_reported(self, run_transform):
        source = """
            function load(name) {
              return require(name);
            }
            if (debug) {
              module.exports.verbose = true;
            }
            exports.count += 1;
        """
        result = run_transform(source)
        assert [(w.code, w.location.line) for w in result.warnings] == [
            ("W0001", 2), ("W0002", 5), ("W0003", 7),
        ]

    def test_converted_file_is_clean(self, run_transform):
        result = run_transform("const a = require('a');\nmodule.exports = a;\n")
        assert result.diagnostics == []


class TestSerialization:
    def test_parsed_tree(self):
        tree = parse_source("const a = require('x');\n", "app.js")
        text = serialize_tree(tree)
        assert text.startswith('(program\n  :file\n  "app.js"\n  (stmt\n    #0')
        assert '(variable-declaration' in text
        assert '(identifier :name "require")' in text
        assert '(string :value "x")' in text
        assert ":synthesized" not in text

    def test_synthesized_nodes_are_marked(self):
        text = serialize_node(builders.import_default("a", "./a.js"))
        assert text.startswith("(import-declaration")
        assert text.count(":synthesized") >= 1

    def test_locations(self):
        tree = parse_source("// head\nfoo;\n", "app.js")
        text = serialize_tree(tree, include_location=True)
        assert ':header\n  ((comment :text "// head" :loc (1 1)))' in text
        assert '(identifier :name "foo" :loc (2 1))' in text

    def test_opaque_children(self):
        tree = parse_source("f(() => __dirname);\n")
        text = serialize_tree(tree)
        assert "(opaque arrow_function" in text
        assert '(identifier :name "__dirname")' in text
