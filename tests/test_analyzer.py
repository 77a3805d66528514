"""
Tests for the argument analyzer.

Verifies metrics, reference collection and warning flags without ever
evaluating against a context.
"""

import pytest
from argexpr.analyzer import (
    ArgsReport,
    ExpressionMetrics,
    analyze_args,
    analyze_expression,
    collect_references,
    expression_depth,
)
from argexpr.expressions import Literal
from argexpr.lexer import tokenize
from argexpr.parser import parse


def p(source):
    return parse(tokenize(source))


ARGS = {
    "path": "/daily/notes",
    "limit": "fm.count ?? 10",
    "date": "2026-01-12",
    "label": "if(fm.on, yes, no)",
    "bad": "fm.a fm.b",
    "word": "daily",
    "url": "https://example.com",
}


class TestExpressionMetrics:
    """Single-tree measurements."""

    def test_none(self):
        assert analyze_expression(None) == ExpressionMetrics()

    def test_leaf(self):
        metrics = analyze_expression(p("42"))
        assert metrics.depth == 1
        assert metrics.node_count == 1
        assert metrics.fm_keys == []

    def test_binary_tree(self):
        metrics = analyze_expression(p("fm.a + fm.b * fm.a"))
        assert metrics.depth == 3
        assert metrics.node_count == 5
        assert metrics.fm_keys == ["a", "b"]

    def test_if_counts_all_branches(self):
        metrics = analyze_expression(p('if(fm.x, "a", "b")'))
        assert metrics.node_count == 4
        assert metrics.depth == 2


class TestExpressionDepth:
    """Depth measurement."""

    def test_leaf(self):
        assert expression_depth(Literal(1)) == 1

    def test_nested(self):
        assert expression_depth(p("1 + 2 * 3")) == 3

    def test_if(self):
        assert expression_depth(p("if(fm.a, 1, -2)")) == 3

    def test_long_chain(self):
        assert expression_depth(p(" + ".join(["1"] * 3000))) == 3000


class TestCollectReferences:
    """Reference keys from a tree."""

    def test_left_to_right_order(self):
        keys = collect_references(p("fm.c + fm.a + fm.b + fm.a"))
        assert keys.fm_keys == ["c", "a", "b"]

    def test_namespaces_split(self):
        keys = collect_references(p("if(file.x, fm.y, fm.z)"))
        assert keys.fm_keys == ["y", "z"]
        assert keys.file_keys == ["x"]

    def test_no_references(self):
        keys = collect_references(p("1 + 2"))
        assert keys.fm_keys == []
        assert keys.file_keys == []


class TestAnalyzeArgs:
    """Argument map classification and warnings."""

    def setup_method(self):
        self.report = analyze_args(ARGS)

    def test_counts(self):
        assert self.report.total_args == 7

    def test_classification(self):
        assert self.report.expression_args == ["limit", "date", "label", "word"]
        assert self.report.literal_args == ["path", "bad", "url"]

    def test_keys_include_unparsable_values(self):
        assert self.report.fm_keys == ["count", "on", "a", "b"]
        assert self.report.file_keys == []

    def test_normalized_sources(self):
        assert self.report.normalized["limit"] == "(fm.count ?? 10)"
        assert self.report.normalized["date"] == "((2026 - 1) - 12)"
        assert self.report.normalized["word"] == '"daily"'
        assert "path" not in self.report.normalized

    def test_depth_and_nodes(self):
        assert self.report.max_expression_depth == 3
        # limit 3 + date 5 + label 4 + word 1
        assert self.report.total_expression_nodes == 13

    def test_unquoted_date_warning(self):
        assert "date: unquoted date '2026-01-12' evaluates as subtraction; quote it" in self.report.warnings

    def test_bare_word_warning(self):
        assert "label: bare words treated as text: yes, no" in self.report.warnings

    def test_single_word_not_flagged(self):
        assert not any(w.startswith("word:") for w in self.report.warnings)

    def test_unparsable_reference_warning(self):
        bad = [w for w in self.report.warnings if w.startswith("bad:")]
        assert len(bad) == 1
        assert "references context keys but is not a valid expression" in bad[0]

    def test_plain_text_not_flagged(self):
        assert not any(w.startswith(("path:", "url:")) for w in self.report.warnings)

    def test_depth_limit_applies(self):
        report = analyze_args({"sum": "(" * 10 + "fm.a" + ")" * 10}, max_depth=5)
        assert report.literal_args == ["sum"]
        assert report.fm_keys == ["a"]
        assert len(report.warnings) == 1

    def test_long_flat_chain(self):
        report = analyze_args({"sum": " + ".join(["fm.a"] * 3000)})
        assert report.expression_args == ["sum"]
        assert report.max_expression_depth == 3000
        assert report.normalized["sum"].count("+") == 2999

    def test_empty(self):
        assert analyze_args({}) == ArgsReport()


class TestArgsReport:
    """Report bookkeeping."""

    def test_warnings_deduplicated(self):
        report = ArgsReport()
        report.add_warning("x")
        report.add_warning("x")
        report.add_warning("y")
        assert report.warnings == ["x", "y"]

    @pytest.mark.parametrize("field_name", ["expression_args", "literal_args", "warnings"])
    def test_independent_defaults(self, field_name):
        first, second = ArgsReport(), ArgsReport()
        getattr(first, field_name).append("x")
        assert getattr(second, field_name) == []
