"""
Tree-walking evaluator for argument expressions.

Reduces an Expression to a runtime value given a context. Runtime values
are None (absent), numbers, strings, booleans, lists and mappings.

The evaluator is total over well-formed trees: every operator has a
defined result for every operand shape, so nothing here raises for
expression input. The coercion helpers below are the semantic core:

    is_truthy      None, False, 0, "" and the strings "undefined", "null",
                   "false", "0" (any case) are falsy; everything else,
                   including [] and {}, is truthy
    to_number      numbers pass through, strings parse their numeric
                   prefix (0 if none), booleans are 1/0, the rest is 0
    loose_equals   None only equals None; otherwise compare as numbers
                   when both sides read as numbers, else compare the
                   lowercased string forms
"""

import json
import math
import re
from collections.abc import Mapping
from datetime import date
from typing import Any

from argexpr.context import ExpressionContext, as_context
from argexpr.expressions import (
    Expression,
    BinaryExpression,
    BinaryOperator,
    UnaryExpression,
    UnaryOperator,
    Literal,
    ContextReference,
    IfExpression,
    ContainsExpression,
    LengthExpression,
)


_FLOAT_PREFIX = re.compile(r"[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)", re.ASCII)

_FALSY_STRINGS = {"undefined", "null", "false", "0"}


# =============================================================================
# Coercions
# =============================================================================

def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_array(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _parse_float(text: str) -> float:
    """Parse the longest numeric prefix of text; NaN when there is none."""
    match = _FLOAT_PREFIX.match(text.lstrip())
    if not match:
        return math.nan
    literal = match.group()
    if literal.endswith("Infinity"):
        return -math.inf if literal.startswith("-") else math.inf
    return float(literal)


def _as_float(value: Any) -> float:
    try:
        return float(value)
    except OverflowError:
        return math.inf if value > 0 else -math.inf


def is_truthy(value: Any) -> bool:
    """Truthiness used by &&, ||, !, if() and the host's enabled= flags."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if _is_number(value):
        return value != 0
    if isinstance(value, str):
        return value != "" and value.lower() not in _FALSY_STRINGS
    return True


def to_number(value: Any) -> float:
    """Numeric coercion for arithmetic and ordering comparisons."""
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if _is_number(value):
        return _as_float(value)
    if isinstance(value, str):
        number = _parse_float(value)
        return 0.0 if math.isnan(number) else number
    return 0.0


def _format_number(value: Any) -> str:
    """
    Shortest text for a number, in the style of a JavaScript host.

    Integral values print without a fraction, and exponent notation is
    only used outside [1e-6, 1e21):
        14.0 -> "14", 0.5 -> "0.5", 1e-7 -> "1e-7", 1e21 -> "1e+21"
    """
    if isinstance(value, int):
        return str(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"

    sign = "-" if value < 0 else ""
    mantissa, _, exponent = repr(abs(value)).partition("e")
    int_part, _, frac_part = mantissa.partition(".")
    digits = int_part + frac_part
    point = len(int_part) + (int(exponent) if exponent else 0)

    while len(digits) > 1 and digits[0] == "0":
        digits = digits[1:]
        point -= 1
    digits = digits.rstrip("0") or "0"
    count = len(digits)

    if count <= point <= 21:
        text = digits + "0" * (point - count)
    elif 0 < point <= 21:
        text = f"{digits[:point]}.{digits[point:]}"
    elif -6 < point <= 0:
        text = "0." + "0" * (-point) + digits
    else:
        power = point - 1
        head = digits[0] if count == 1 else f"{digits[0]}.{digits[1:]}"
        text = f"{head}e{'+' if power >= 0 else '-'}{abs(power)}"
    return sign + text


def to_js_string(value: Any) -> str:
    """
    String form of a runtime value.

    Used for string concatenation, case-insensitive comparison and
    contains(). Lists join their elements with ",", mappings become
    "[object Object]", None becomes "undefined".
    """
    if value is None:
        return "undefined"
    if isinstance(value, bool):
        return "true" if value else "false"
    if _is_number(value):
        return _format_number(value)
    if isinstance(value, str):
        return value
    if _is_array(value):
        return ",".join("" if item is None else to_js_string(item) for item in value)
    if isinstance(value, Mapping):
        return "[object Object]"
    return str(value)


def loose_equals(left: Any, right: Any) -> bool:
    """Equality used by ==, != and contains() on lists."""
    if left is None:
        return right is None
    if right is None:
        return False

    left_number = left if _is_number(left) else _parse_float(to_js_string(left))
    right_number = right if _is_number(right) else _parse_float(to_js_string(right))
    if not math.isnan(left_number) and not math.isnan(right_number):
        return left_number == right_number

    return to_js_string(left).lower() == to_js_string(right).lower()


def _to_json(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if _is_number(value):
        if isinstance(value, float) and not math.isfinite(value):
            return "null"
        return _format_number(value)
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if _is_array(value):
        return "[" + ",".join(_to_json(item) for item in value) + "]"
    if isinstance(value, Mapping):
        entries = (
            f"{json.dumps(str(key), ensure_ascii=False)}:{_to_json(item)}"
            for key, item in value.items()
        )
        return "{" + ",".join(entries) + "}"
    if isinstance(value, date):
        return json.dumps(value.isoformat())
    return json.dumps(str(value), ensure_ascii=False)


def stringify_value(value: Any) -> str:
    """
    Render an evaluated value as an argument string.

    None -> "undefined", lists/mappings -> compact JSON, everything
    else -> its string form.
    """
    if value is None:
        return "undefined"
    if _is_array(value) or isinstance(value, Mapping):
        return _to_json(value)
    return to_js_string(value)


# =============================================================================
# Operators
# =============================================================================

def _divide(left: float, right: float) -> float:
    if right == 0:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


def _add(left: Any, right: Any) -> Any:
    if isinstance(left, str) or isinstance(right, str):
        left_text = "" if left is None else to_js_string(left)
        right_text = "" if right is None else to_js_string(right)
        return left_text + right_text
    return to_number(left) + to_number(right)


_NUMERIC_OPERATORS = {
    BinaryOperator.SUBTRACT: lambda a, b: a - b,
    BinaryOperator.MULTIPLY: lambda a, b: a * b,
    BinaryOperator.DIVIDE: _divide,
    BinaryOperator.GREATER_THAN: lambda a, b: a > b,
    BinaryOperator.GREATER_EQUAL: lambda a, b: a >= b,
    BinaryOperator.LESS_THAN: lambda a, b: a < b,
    BinaryOperator.LESS_EQUAL: lambda a, b: a <= b,
}


def _apply_binary(expr: BinaryExpression, left: Any, context: ExpressionContext) -> Any:
    operator = expr.operator

    # Short-circuit operators return an operand, not a boolean
    if operator == BinaryOperator.AND:
        return _evaluate(expr.right, context) if is_truthy(left) else left
    if operator == BinaryOperator.OR:
        return left if is_truthy(left) else _evaluate(expr.right, context)
    if operator == BinaryOperator.NULLISH:
        return left if left is not None else _evaluate(expr.right, context)

    right = _evaluate(expr.right, context)

    if operator == BinaryOperator.EQUALS:
        return loose_equals(left, right)
    if operator == BinaryOperator.NOT_EQUALS:
        return not loose_equals(left, right)
    if operator == BinaryOperator.ADD:
        return _add(left, right)
    return _NUMERIC_OPERATORS[operator](to_number(left), to_number(right))


def _evaluate_binary(expr: BinaryExpression, context: ExpressionContext) -> Any:
    # Operator chains lean left (a + b + c); fold the left spine in a loop
    # so chain length never costs stack frames.
    spine = [expr]
    while isinstance(spine[-1].left, BinaryExpression):
        spine.append(spine[-1].left)

    value = _evaluate(spine[-1].left, context)
    for node in reversed(spine):
        value = _apply_binary(node, value, context)
    return value


def _evaluate_unary(expr: UnaryExpression, context: ExpressionContext) -> Any:
    operand = _evaluate(expr.operand, context)
    if expr.operator == UnaryOperator.NOT:
        return not is_truthy(operand)
    return -to_number(operand)


def _evaluate_contains(expr: ContainsExpression, context: ExpressionContext) -> bool:
    haystack = _evaluate(expr.haystack, context)
    needle = _evaluate(expr.needle, context)

    if _is_array(haystack):
        return any(loose_equals(item, needle) for item in haystack)
    if isinstance(haystack, str) and needle is not None:
        return to_js_string(needle).lower() in haystack.lower()
    return False


def _evaluate(expr: Expression, context: ExpressionContext) -> Any:
    if isinstance(expr, Literal):
        return expr.value

    if isinstance(expr, ContextReference):
        # fm.* and file.* read the same context
        return context.resolve(expr.path)

    if isinstance(expr, UnaryExpression):
        return _evaluate_unary(expr, context)

    if isinstance(expr, BinaryExpression):
        return _evaluate_binary(expr, context)

    if isinstance(expr, IfExpression):
        if is_truthy(_evaluate(expr.condition, context)):
            return _evaluate(expr.then_branch, context)
        if expr.else_branch is not None:
            return _evaluate(expr.else_branch, context)
        return False

    if isinstance(expr, ContainsExpression):
        return _evaluate_contains(expr, context)

    if isinstance(expr, LengthExpression):
        value = _evaluate(expr.operand, context)
        if isinstance(value, str) or _is_array(value):
            return len(value)
        return 0

    raise TypeError(f"Unsupported Expression type: {type(expr)}")


def evaluate(expr: Expression, context: Any = None) -> Any:
    """
    Evaluate an expression tree.

    Args:
        expr: Expression AST (from argexpr.parser)
        context: ExpressionContext, a frontmatter mapping, or None

    Returns:
        Runtime value: None, number, string, boolean, list or mapping
    """
    return _evaluate(expr, as_context(context))


__all__ = [
    "evaluate",
    "is_truthy",
    "to_number",
    "loose_equals",
    "to_js_string",
    "stringify_value",
]
