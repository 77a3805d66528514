"""
Expression source formatter.

Renders an Expression back into argument-expression syntax. Output is
canonical rather than faithful to the input text:
    - every binary operation is parenthesized
    - strings are double-quoted
    - bare words come back as quoted strings
    - numbers never use exponent notation (the tokenizer cannot read it)

Formatting a parsed tree and parsing the result gives an equivalent tree.
"""

import math
from decimal import Decimal

from argexpr.evaluator import to_js_string
from argexpr.expressions import (
    Expression,
    BinaryExpression,
    UnaryExpression,
    Literal,
    ContextReference,
    IfExpression,
    ContainsExpression,
    LengthExpression,
)


_STRING_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\t": "\\t",
    "\r": "\\r",
}


def _format_string(value: str) -> str:
    return '"' + "".join(_STRING_ESCAPES.get(c, c) for c in value) + '"'


def _format_number(value) -> str:
    if isinstance(value, float):
        if math.isnan(value):
            return "(0 / 0)"
        if math.isinf(value):
            return "(1 / 0)" if value > 0 else "(-1 / 0)"
    text = to_js_string(value)
    if "e" in text:
        text = format(Decimal(repr(float(value))), "f")
    return text


def _format_literal(value) -> str:
    if value is None:
        # No source syntax for an absent literal
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return _format_number(value)
    return _format_string(str(value))


def _is_boolean_literal(expr, value: bool) -> bool:
    return isinstance(expr, Literal) and expr.value is value


def format_expression(expr: Expression) -> str:
    """
    Convert an expression to canonical source text.

    Examples:
        fm.count > 10        -> (fm.count > 10)
        if(fm.on, 'a', 'b')  -> if(fm.on, "a", "b")
    """
    if isinstance(expr, Literal):
        return _format_literal(expr.value)

    if isinstance(expr, ContextReference):
        return f"{expr.namespace.value}.{expr.path}"

    if isinstance(expr, UnaryExpression):
        return f"{expr.operator.value}{format_expression(expr.operand)}"

    if isinstance(expr, BinaryExpression):
        # Walk the left spine iteratively; operator chains can be long
        spine = [expr]
        while isinstance(spine[-1].left, BinaryExpression):
            spine.append(spine[-1].left)
        text = format_expression(spine[-1].left)
        for node in reversed(spine):
            text = f"({text} {node.operator.value} {format_expression(node.right)})"
        return text

    if isinstance(expr, IfExpression):
        condition = format_expression(expr.condition)
        if _is_boolean_literal(expr.then_branch, True) and _is_boolean_literal(expr.else_branch, False):
            return f"if({condition})"
        args = [condition, format_expression(expr.then_branch)]
        if expr.else_branch is not None:
            args.append(format_expression(expr.else_branch))
        return f"if({', '.join(args)})"

    if isinstance(expr, ContainsExpression):
        return f"contains({format_expression(expr.haystack)}, {format_expression(expr.needle)})"

    if isinstance(expr, LengthExpression):
        return f"length({format_expression(expr.operand)})"

    raise TypeError(f"Unsupported Expression type: {type(expr)}")


__all__ = ["format_expression"]
