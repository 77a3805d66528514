"""
Argument Analyzer: read-only diagnostics for argument expressions.

Provides lightweight analysis of parsed expressions and argument maps:
    - Expression depth and node counts
    - Referenced fm./file. keys
    - Which argument values are expressions and which are plain text
    - Warning flags for values that probably do not do what was meant

IMPORTANT: Nothing here evaluates against a context or changes input.
It only produces reports.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from argexpr.api import ReferencedKeys, collect_token_references
from argexpr.backends.formatter import format_expression
from argexpr.errors import LexError, ParseError
from argexpr.expressions import (
    Expression,
    ContextReference,
    Namespace,
    child_expressions,
)
from argexpr.lexer import TokenType, tokenize
from argexpr.parser import DEFAULT_MAX_DEPTH, parse


_DATE_LIKE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass
class ExpressionMetrics:
    """Metrics about a single expression tree."""
    depth: int = 0
    node_count: int = 0
    fm_keys: List[str] = field(default_factory=list)
    file_keys: List[str] = field(default_factory=list)


def expression_depth(expr: Expression) -> int:
    """
    Depth of an expression tree (a leaf has depth 1).

    Walks the tree with an explicit stack, so it is safe on long operator
    chains that would overflow a recursive walk.
    """
    deepest = 0
    stack = [(expr, 1)]
    while stack:
        node, depth = stack.pop()
        deepest = max(deepest, depth)
        for child in child_expressions(node):
            stack.append((child, depth + 1))
    return deepest


def collect_references(expr: Expression) -> ReferencedKeys:
    """Context paths referenced by a tree, in left-to-right order."""
    keys = ReferencedKeys()
    stack = [expr]
    while stack:
        node = stack.pop()
        if isinstance(node, ContextReference):
            target = keys.fm_keys if node.namespace == Namespace.FM else keys.file_keys
            if node.path not in target:
                target.append(node.path)
        stack.extend(reversed(child_expressions(node)))
    return keys


def analyze_expression(expr: Optional[Expression]) -> ExpressionMetrics:
    """Measure an expression tree."""
    if expr is None:
        return ExpressionMetrics()

    node_count = 0
    stack = [expr]
    while stack:
        node = stack.pop()
        node_count += 1
        stack.extend(child_expressions(node))

    keys = collect_references(expr)
    return ExpressionMetrics(
        depth=expression_depth(expr),
        node_count=node_count,
        fm_keys=keys.fm_keys,
        file_keys=keys.file_keys,
    )


@dataclass
class ArgsReport:
    """Analysis report for an argument map."""

    total_args: int = 0
    expression_args: List[str] = field(default_factory=list)
    literal_args: List[str] = field(default_factory=list)

    # Canonical source of each argument that parsed as an expression
    normalized: Dict[str, str] = field(default_factory=dict)

    fm_keys: List[str] = field(default_factory=list)
    file_keys: List[str] = field(default_factory=list)

    max_expression_depth: int = 0
    total_expression_nodes: int = 0

    warnings: List[str] = field(default_factory=list)

    def add_warning(self, msg: str) -> None:
        """Add a warning to the report."""
        if msg not in self.warnings:
            self.warnings.append(msg)


def _merge_keys(target: List[str], keys: List[str]) -> None:
    for key in keys:
        if key not in target:
            target.append(key)


def analyze_args(args: Mapping[str, str], max_depth: int = DEFAULT_MAX_DEPTH) -> ArgsReport:
    """
    Classify and measure every value of an argument map.

    Flags:
    - Unquoted dates (2026-01-12), which evaluate as subtraction
    - Bare words inside expressions, which are silently read as text
    - Values that mention fm./file. keys but fail to parse

    Returns an ArgsReport with metrics and warnings.
    """
    report = ArgsReport(total_args=len(args))

    for name, raw in args.items():
        try:
            tokens = tokenize(raw)
        except LexError:
            report.literal_args.append(name)
            continue

        token_keys = collect_token_references(tokens)
        _merge_keys(report.fm_keys, token_keys.fm_keys)
        _merge_keys(report.file_keys, token_keys.file_keys)

        try:
            expr = parse(tokens, max_depth=max_depth)
        except ParseError as e:
            report.literal_args.append(name)
            if token_keys.fm_keys or token_keys.file_keys:
                report.add_warning(f"{name}: references context keys but is not a valid expression ({e})")
            continue

        report.expression_args.append(name)
        report.normalized[name] = format_expression(expr)

        metrics = analyze_expression(expr)
        report.max_expression_depth = max(report.max_expression_depth, metrics.depth)
        report.total_expression_nodes += metrics.node_count

        if _DATE_LIKE.match(raw.strip()):
            report.add_warning(f"{name}: unquoted date {raw.strip()!r} evaluates as subtraction; quote it")

        bare_words = [t.value for t in tokens if t.type == TokenType.IDENTIFIER]
        if bare_words and metrics.node_count > 1:
            report.add_warning(f"{name}: bare words treated as text: {', '.join(bare_words)}")

    return report


__all__ = [
    "ExpressionMetrics",
    "ArgsReport",
    "analyze_expression",
    "analyze_args",
    "collect_references",
    "expression_depth",
]
