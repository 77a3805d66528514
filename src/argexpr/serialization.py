"""
Serialization helpers for expression trees.

Provides lossless JSON/YAML round-trip via an intermediate dict
representation. Each node becomes a dict with a "type" discriminator:

    lit, ref, unary, binary, if, contains, length
"""
from __future__ import annotations

import json
from typing import Any, Dict

import yaml

from argexpr.expressions import (
    Expression,
    BinaryExpression,
    BinaryOperator,
    UnaryExpression,
    UnaryOperator,
    Literal,
    ContextReference,
    Namespace,
    IfExpression,
    ContainsExpression,
    LengthExpression,
)


def expr_to_dict(expr: Expression | None) -> Any:
    if expr is None:
        return None
    if isinstance(expr, Literal):
        return {"type": "lit", "value": expr.value}
    if isinstance(expr, ContextReference):
        return {"type": "ref", "namespace": expr.namespace.value, "path": expr.path}
    if isinstance(expr, UnaryExpression):
        return {
            "type": "unary",
            "operator": expr.operator.value,
            "operand": expr_to_dict(expr.operand),
        }
    if isinstance(expr, BinaryExpression):
        return {
            "type": "binary",
            "operator": expr.operator.value,
            "left": expr_to_dict(expr.left),
            "right": expr_to_dict(expr.right),
        }
    if isinstance(expr, IfExpression):
        return {
            "type": "if",
            "condition": expr_to_dict(expr.condition),
            "then": expr_to_dict(expr.then_branch),
            "else": expr_to_dict(expr.else_branch),
        }
    if isinstance(expr, ContainsExpression):
        return {
            "type": "contains",
            "haystack": expr_to_dict(expr.haystack),
            "needle": expr_to_dict(expr.needle),
        }
    if isinstance(expr, LengthExpression):
        return {"type": "length", "operand": expr_to_dict(expr.operand)}
    raise TypeError(f"Unsupported Expression type: {type(expr)}")


def expr_from_dict(d: Dict[str, Any] | None) -> Expression | None:
    if d is None:
        return None
    t = d.get("type")
    if t == "lit":
        return Literal(d.get("value"))
    if t == "ref":
        return ContextReference(Namespace(d["namespace"]), d["path"])
    if t == "unary":
        op = UnaryOperator(d["operator"])
        return UnaryExpression(operator=op, operand=expr_from_dict(d["operand"]))
    if t == "binary":
        op = BinaryOperator(d["operator"])
        left = expr_from_dict(d["left"])
        right = expr_from_dict(d["right"])
        return BinaryExpression(operator=op, left=left, right=right)
    if t == "if":
        return IfExpression(
            condition=expr_from_dict(d["condition"]),
            then_branch=expr_from_dict(d["then"]),
            else_branch=expr_from_dict(d.get("else")),
        )
    if t == "contains":
        return ContainsExpression(
            haystack=expr_from_dict(d["haystack"]),
            needle=expr_from_dict(d["needle"]),
        )
    if t == "length":
        return LengthExpression(operand=expr_from_dict(d["operand"]))
    raise TypeError(f"Unsupported expression dict type: {t}")


def expr_to_json(expr: Expression) -> str:
    return json.dumps(expr_to_dict(expr), sort_keys=True)


def expr_from_json(s: str) -> Expression | None:
    return expr_from_dict(json.loads(s))


def expr_to_yaml(expr: Expression) -> str:
    return yaml.safe_dump(expr_to_dict(expr), sort_keys=True)


def expr_from_yaml(s: str) -> Expression | None:
    return expr_from_dict(yaml.safe_load(s))


__all__ = [
    "expr_to_dict",
    "expr_from_dict",
    "expr_to_json",
    "expr_from_json",
    "expr_to_yaml",
    "expr_from_yaml",
]
