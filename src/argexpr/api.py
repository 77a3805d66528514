"""
Public entry points: evaluate one argument value, or a whole argument map.

Most argument values are plain text (paths, labels, URLs) that were never
meant to be expressions. Anything that fails to tokenize or parse is
therefore returned verbatim as a string. That is the normal path, not an
error path, and no LexError/ParseError ever reaches the caller.

Referenced keys are collected from the token list before parsing, so:
    - a parse failure still reports the fm./file. keys it saw
    - a lex failure reports no keys at all
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping

from argexpr.context import as_context
from argexpr.errors import LexError, ParseError
from argexpr.evaluator import evaluate, stringify_value
from argexpr.lexer import Token, TokenType, tokenize
from argexpr.parser import DEFAULT_MAX_DEPTH, parse


logger = logging.getLogger(__name__)


@dataclass
class ReferencedKeys:
    """
    Context paths an argument value refers to, split by namespace.

    Each list keeps the order of first appearance without duplicates.
    """

    fm_keys: List[str] = field(default_factory=list)
    file_keys: List[str] = field(default_factory=list)


@dataclass
class ExpressionResult:
    """Outcome of evaluate_expression."""

    value: Any
    referenced_keys: ReferencedKeys = field(default_factory=ReferencedKeys)


@dataclass
class EvaluatedArgs:
    """
    Outcome of evaluate_args.

    Properties:
        args: Argument name -> stringified value, in input order
        fm_keys: fm.* paths referenced anywhere, de-duplicated
        file_keys: file.* paths referenced anywhere, de-duplicated
    """

    args: Dict[str, str] = field(default_factory=dict)
    fm_keys: List[str] = field(default_factory=list)
    file_keys: List[str] = field(default_factory=list)


def _append_unique(target: List[str], keys: List[str]) -> None:
    for key in keys:
        if key not in target:
            target.append(key)


def collect_token_references(tokens: List[Token]) -> ReferencedKeys:
    """Collect fm./file. reference paths from a token list."""
    keys = ReferencedKeys()
    for token in tokens:
        if token.type == TokenType.FM_REF:
            _append_unique(keys.fm_keys, [token.value])
        elif token.type == TokenType.FILE_REF:
            _append_unique(keys.file_keys, [token.value])
    return keys


def _check_max_depth(max_depth: int) -> None:
    if max_depth < 1:
        raise ValueError(f"max_depth must be at least 1, got {max_depth}")


def evaluate_expression(
    source: str,
    context: Any = None,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> ExpressionResult:
    """
    Evaluate a single argument value.

    Args:
        source: Raw argument text, e.g. 'if(fm.active, "on", "off")'
        context: ExpressionContext, frontmatter mapping, or None
        max_depth: Nesting limit handed to the parser

    Returns:
        ExpressionResult with the evaluated value, or the unchanged input
        string when it is not an expression

    Raises:
        TypeError: If context is not a supported context type
        ValueError: If max_depth is below 1

    Examples:
        >>> evaluate_expression("2 + 3 * 4").value
        14.0
        >>> evaluate_expression("/daily/notes").value
        '/daily/notes'
    """
    _check_max_depth(max_depth)
    ctx = as_context(context)

    try:
        tokens = tokenize(source)
    except LexError as e:
        logger.debug("Treating %r as plain text: %s", source, e)
        return ExpressionResult(value=source)

    referenced_keys = collect_token_references(tokens)

    try:
        expr = parse(tokens, max_depth=max_depth)
    except ParseError as e:
        logger.debug("Treating %r as plain text: %s", source, e)
        return ExpressionResult(value=source, referenced_keys=referenced_keys)

    return ExpressionResult(value=evaluate(expr, ctx), referenced_keys=referenced_keys)


def evaluate_args(
    args: Mapping[str, str],
    context: Any = None,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> EvaluatedArgs:
    """
    Evaluate every value of an argument map.

    Each value goes through evaluate_expression and is stringified:
    None -> "undefined", lists/mappings -> JSON text, anything else -> its
    string form. Referenced keys are merged across all entries, keeping
    first-occurrence order.

    Args:
        args: Argument name -> raw argument text
        context: ExpressionContext, frontmatter mapping, or None
        max_depth: Nesting limit handed to the parser

    Returns:
        EvaluatedArgs
    """
    _check_max_depth(max_depth)
    ctx = as_context(context)
    result = EvaluatedArgs()

    for name, raw in args.items():
        outcome = evaluate_expression(raw, ctx, max_depth=max_depth)
        result.args[name] = stringify_value(outcome.value)
        _append_unique(result.fm_keys, outcome.referenced_keys.fm_keys)
        _append_unique(result.file_keys, outcome.referenced_keys.file_keys)

    return result


__all__ = [
    "ReferencedKeys",
    "ExpressionResult",
    "EvaluatedArgs",
    "collect_token_references",
    "evaluate_expression",
    "evaluate_args",
]
