"""
Tests for evaluate_expression and evaluate_args.

Covers the documented evaluation scenarios, the plain-text fallback and
referenced-key collection.
"""

import logging
import math

import pytest
from argexpr import (
    EvaluatedArgs,
    ExpressionResult,
    FrontmatterContext,
    ReferencedKeys,
    evaluate_args,
    evaluate_expression,
)


def value_of(source, frontmatter=None):
    return evaluate_expression(source, frontmatter).value


class TestScenarios:
    """End-to-end examples."""

    def test_precedence(self):
        assert value_of("2 + 3 * 4") == 14

    def test_reference_comparison(self):
        assert value_of("fm.count > 10", {"count": 15}) is True

    def test_if_on_reference(self):
        assert value_of('if(fm.active, "on", "off")', {"active": True}) == "on"

    def test_quoted_date_is_text(self):
        assert value_of('"2026-01-12"') == "2026-01-12"
        assert value_of("'2026-01-12'") == "2026-01-12"

    def test_unquoted_date_is_subtraction(self):
        assert value_of("2026-01-12") == 2013

    def test_batch_reference(self):
        # The mapping is the frontmatter itself, not {"frontmatter": {...}}
        result = evaluate_args({"a": "fm.x"}, {"x": "hello"})
        assert result.args["a"] == "hello"
        assert result.fm_keys == ["x"]

    def test_nullish_versus_or(self):
        assert value_of('fm.val ?? "default"', {"val": 0}) == 0
        assert value_of('fm.val || "default"', {"val": 0}) == "default"


class TestPassthrough:
    """Input that is not an expression comes back unchanged."""

    @pytest.mark.parametrize("source", [
        "/daily/notes",
        "https://example.com",
        "just some text",
        "a=b+c",
        "50%",
        "#tag",
        "1 2",
        "(unclosed",
        "",
    ])
    def test_returned_verbatim(self, source):
        assert value_of(source) == source

    def test_result_type(self):
        result = evaluate_expression("/daily/notes")
        assert isinstance(result, ExpressionResult)
        assert result.referenced_keys == ReferencedKeys()

    def test_single_bare_word_is_text(self):
        assert value_of("daily") == "daily"

    def test_bare_words_inside_expression(self):
        assert value_of("if(true, yes, no)") == "yes"

    def test_deep_nesting_falls_back(self):
        source = "(" * 500 + "1" + ")" * 500
        assert value_of(source) == source

    def test_fallback_is_logged_at_debug(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="argexpr.api"):
            evaluate_expression("/daily/notes")
        assert "plain text" in caplog.text

    def test_fallback_not_logged_above_debug(self, caplog):
        with caplog.at_level(logging.INFO, logger="argexpr.api"):
            evaluate_expression("/daily/notes")
        assert caplog.records == []


class TestLongChains:
    """Flat operator chains are not nesting and always evaluate."""

    def test_or_chain_past_default_limit(self):
        source = " || ".join(f"fm.k{i}" for i in range(33))
        assert value_of(source, {"k32": "found"}) == "found"

    def test_sum_past_default_limit(self):
        assert value_of(" + ".join(["1"] * 33)) == 33

    def test_very_long_sum(self):
        assert value_of(" + ".join(["1"] * 5000)) == 5000

    def test_very_long_and_chain(self):
        result = evaluate_args({"all": " && ".join(["fm.on"] * 3000)}, {"on": True})
        assert result.args["all"] == "true"
        assert result.fm_keys == ["on"]


class TestReferencedKeys:
    """Key collection runs before parsing."""

    def test_keys_by_namespace(self):
        result = evaluate_expression("fm.a + file.b", {"a": 1, "b": 2})
        assert result.referenced_keys.fm_keys == ["a"]
        assert result.referenced_keys.file_keys == ["b"]

    def test_order_of_first_appearance(self):
        result = evaluate_expression("fm.b + fm.a + fm.b")
        assert result.referenced_keys.fm_keys == ["b", "a"]

    def test_keys_survive_parse_failure(self):
        result = evaluate_expression("fm.a fm.b")
        assert result.value == "fm.a fm.b"
        assert result.referenced_keys.fm_keys == ["a", "b"]

    def test_no_keys_after_lex_failure(self):
        result = evaluate_expression("fm.a = 1")
        assert result.value == "fm.a = 1"
        assert result.referenced_keys.fm_keys == []

    def test_short_circuited_reference_still_reported(self):
        result = evaluate_expression("false && fm.skipped")
        assert result.value is False
        assert result.referenced_keys.fm_keys == ["skipped"]

    def test_nested_path(self):
        result = evaluate_expression("fm.user.name", {"user": {"name": "Alice"}})
        assert result.value == "Alice"
        assert result.referenced_keys.fm_keys == ["user.name"]


class TestContexts:
    """Accepted context forms."""

    def test_mapping(self):
        assert value_of("fm.name", {"name": "Alice"}) == "Alice"

    def test_context_object(self):
        ctx = FrontmatterContext({"name": "Alice"})
        assert evaluate_expression("file.name", ctx).value == "Alice"

    def test_non_ascii_digits_are_not_numbers(self):
        assert value_of("fm.x == 3", {"x": "\u0663"}) is False
        assert value_of("fm.x + 1", {"x": "\u0663"}) == "\u06631"
        assert value_of("fm.x * 1", {"x": "\u0663"}) == 0

    def test_missing_reference_is_absent(self):
        assert value_of("fm.name") is None

    def test_unsupported_context(self):
        with pytest.raises(TypeError):
            evaluate_expression("1", 42)

    def test_invalid_max_depth(self):
        with pytest.raises(ValueError):
            evaluate_expression("1", max_depth=0)
        with pytest.raises(ValueError):
            evaluate_args({"a": "1"}, max_depth=-1)

    def test_custom_max_depth(self):
        source = "(" * 40 + "1" + ")" * 40
        assert value_of(source) == source
        assert evaluate_expression(source, max_depth=64).value == 1


class TestEvaluateArgs:
    """Batch evaluation over an argument map."""

    def test_evaluates_all_args(self):
        result = evaluate_args(
            {"a": "fm.x", "b": 'if(fm.y > 1, "big", "small")'},
            {"x": "hello", "y": 5},
        )
        assert isinstance(result, EvaluatedArgs)
        assert result.args == {"a": "hello", "b": "big"}

    def test_collects_fm_keys(self):
        result = evaluate_args({"a": "fm.foo", "b": "fm.bar"}, {"foo": 1, "bar": 2})
        assert result.fm_keys == ["foo", "bar"]

    def test_keys_deduplicated_across_entries(self):
        result = evaluate_args({"a": "fm.x + fm.y", "b": "fm.y + fm.z", "c": "file.x"})
        assert result.fm_keys == ["x", "y", "z"]
        assert result.file_keys == ["x"]

    def test_plain_values_pass_through(self):
        result = evaluate_args({"path": "/daily/notes", "limit": "10"}, {})
        assert result.args == {"path": "/daily/notes", "limit": "10"}

    def test_quote_handling(self):
        result = evaluate_args({
            "a": '"quoted"',
            "b": "unquoted",
            "c": "'single'",
            "d": "fm.val",
            "e": "2026-01-12",
        }, {"val": "from-fm"})
        assert result.args == {
            "a": "quoted",
            "b": "unquoted",
            "c": "single",
            "d": "from-fm",
            "e": "2013",
        }

    def test_escaped_quotes(self):
        result = evaluate_args({"value": r'"say \"hello\""', "empty": '""'})
        assert result.args == {"value": 'say "hello"', "empty": ""}

    def test_absent_is_undefined(self):
        assert evaluate_args({"a": "fm.missing"}).args["a"] == "undefined"

    def test_booleans_and_numbers(self):
        result = evaluate_args({"show": "fm.count > 1", "half": "1 / 2", "nan": "0 / 0"}, {"count": 3})
        assert result.args == {"show": "true", "half": "0.5", "nan": "NaN"}

    def test_containers_as_json(self):
        result = evaluate_args(
            {"tags": "fm.tags", "meta": "fm.meta"},
            {"tags": ["a", "b"], "meta": {"n": 1}},
        )
        assert result.args == {"tags": '["a","b"]', "meta": '{"n":1}'}

    def test_concatenation(self):
        result = evaluate_args({"msg": '"Date: " + "2026-01-12"'})
        assert result.args["msg"] == "Date: 2026-01-12"

    def test_empty_map(self):
        result = evaluate_args({})
        assert result == EvaluatedArgs()

    def test_order_preserved(self):
        result = evaluate_args({"z": "1", "a": "2", "m": "3"})
        assert list(result.args) == ["z", "a", "m"]

    def test_infinity_text(self):
        assert evaluate_args({"v": "1 / 0"}).args["v"] == "Infinity"
        assert math.isinf(value_of("1 / 0"))
