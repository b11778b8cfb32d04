"""
Tests for the statement arena: stable ids across replacement, retired ids,
insertion order and the modified flag.
"""

import pytest

from esmify.shared import EsmifyImplementationError, StaleNodeError, builders
from tests.test_utils import parse_source


class TestArena:
    def test_ids_are_sequential(self):
        tree = parse_source("a();\nb();\nc();\n")
        assert [i.index for i in tree.body] == [0, 1, 2]
        assert str(tree.body[1]) == "#1"

    def test_fresh_tree_is_unmodified(self):
        tree = parse_source("a();\n")
        assert not tree.modified

    def test_replace_keeps_id_and_trivia(self):
        tree = parse_source("// head\na(); // note\n")
        node_id = tree.body[0]
        ids = tree.replace(node_id, builders.import_side_effect("x"))
        assert ids == [node_id]
        assert tree.body == (node_id,)
        assert [c.text for c in tree.entry(node_id).trailing_comments] == ["// note"]
        assert tree.modified

    def test_replace_with_extra_statements(self):
        tree = parse_source("a();\nb();\n")
        first, second = tree.body
        ids = tree.replace(first, builders.import_default("x", "x"), builders.import_default("y", "y"))
        assert ids[0] == first
        assert tree.body == (first, ids[1], second)
        assert ids[1].index == 2

    def test_remove_retires_id(self):
        tree = parse_source("a();\nb();\n")
        first, second = tree.body
        tree.remove(first)
        assert tree.body == (second,)
        assert not tree.is_live(first)
        with pytest.raises(StaleNodeError) as exc:
            tree.get(first)
        assert exc.value.node_id == first
        assert "E9001" in str(exc.value)

    def test_remove_hands_comments_to_next_statement(self):
        tree = parse_source("a();\n\n// about b\nb(); // b done\n// about c\nc();\n")
        _, second, third = tree.body
        tree.remove(second)
        entry = tree.entry(third)
        assert [c.text for c in entry.leading_comments] == ["// about b", "// b done", "// about c"]
        assert entry.blank_line_before

    def test_remove_last_statement_moves_comments_to_footer(self):
        tree = parse_source("a();\n// about b\nb();\n// end\n")
        tree.remove(tree.body[1])
        assert [c.text for c in tree.footer] == ["// about b", "// end"]

    def test_unknown_id(self):
        tree = parse_source("a();\n")
        other = parse_source("a();\nb();\n")
        with pytest.raises(EsmifyImplementationError):
            tree.get(other.body[1])

    def test_prepend_keeps_given_order(self):
        tree = parse_source("a();\n")
        original = tree.body[0]
        x, y = tree.prepend(builders.import_side_effect("x"), builders.import_side_effect("y"))
        assert tree.body == (x, y, original)

    def test_later_prepend_lands_first(self):
        tree = parse_source("a();\n")
        original = tree.body[0]
        (x,) = tree.prepend(builders.import_side_effect("x"))
        (y,) = tree.prepend(builders.import_side_effect("y"))
        assert tree.body == (y, x, original)

    def test_statements_snapshot_survives_mutation(self):
        tree = parse_source("a();\nb();\nc();\n")
        seen = []
        for node_id, _ in tree.statements():
            if not tree.is_live(node_id):
                continue
            seen.append(node_id.index)
            if node_id.index == 0:
                tree.remove(tree.body[1])
        assert seen == [0, 2]

    def test_text_of_synthesized_node_raises(self):
        tree = parse_source("a();\n")
        with pytest.raises(EsmifyImplementationError):
            tree.text_of(builders.identifier("x"))
