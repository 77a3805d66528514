"""
Expression AST for argument expressions.

Every parsed argument value becomes a small immutable tree of the node
classes below. The set of node types is closed:

    Literal, ContextReference, UnaryExpression, BinaryExpression,
    IfExpression, ContainsExpression, LengthExpression

ARCHITECTURAL RULE:
    Nodes are structure only. Evaluation lives in argexpr.evaluator,
    metrics in argexpr.analyzer, text rendering in argexpr.backends.
"""

from abc import ABC
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union


class Expression(ABC):
    """
    Base class for all AST expressions.

    It exists to give the node hierarchy a common type.
    It carries no behavior.
    """
    pass


class BinaryOperator(Enum):
    """
    Binary operators, valued by their source symbol.

    || and ?? share a precedence tier but stay distinct here so the
    evaluator can tell them apart.
    """

    # Logical
    AND = "&&"
    OR = "||"
    NULLISH = "??"

    # Equality
    EQUALS = "=="
    NOT_EQUALS = "!="

    # Comparison
    GREATER_THAN = ">"
    GREATER_EQUAL = ">="
    LESS_THAN = "<"
    LESS_EQUAL = "<="

    # Arithmetic
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"


class UnaryOperator(Enum):
    """Prefix operators."""

    NOT = "!"
    NEGATE = "-"


class Namespace(Enum):
    """
    Context reference namespaces.

    Both resolve against the same context; the namespace only decides
    which referenced-key list a path is reported in.
    """

    FM = "fm"
    FILE = "file"


@dataclass(frozen=True)
class Literal(Expression):
    """
    A constant value.

    Examples:
        - 42        -> Literal(42.0)
        - "on"      -> Literal("on")
        - true      -> Literal(True)
        - daily     -> Literal("daily")   (bare word, kept as text)

    Properties:
        value: number, string or boolean; None only in hand-built trees
    """

    value: Union[int, float, str, bool, None]


@dataclass(frozen=True)
class ContextReference(Expression):
    """
    A dotted path into the context.

    Example:
        fm.user.name -> ContextReference(Namespace.FM, "user.name")

    IMPORTANT:
        The path is not validated. A missing key resolves to None
        at evaluation time.
    """

    namespace: Namespace
    path: str


@dataclass(frozen=True)
class UnaryExpression(Expression):
    """
    A prefix operation.

    Example:
        !fm.active -> UnaryExpression(UnaryOperator.NOT, ContextReference(...))
    """

    operator: UnaryOperator
    operand: Expression


@dataclass(frozen=True)
class BinaryExpression(Expression):
    """
    An infix operation.

    Example:
        fm.count > 10

    Becomes:
        BinaryExpression(
            operator=BinaryOperator.GREATER_THAN,
            left=ContextReference(Namespace.FM, "count"),
            right=Literal(10.0)
        )
    """

    operator: BinaryOperator
    left: Expression
    right: Expression


@dataclass(frozen=True)
class IfExpression(Expression):
    """
    The if(...) call form.

    if(c)          -> IfExpression(c, Literal(True), Literal(False))
    if(c, a)       -> IfExpression(c, a, None)
    if(c, a, b)    -> IfExpression(c, a, b)

    With no else branch a falsy condition evaluates to False, not None.
    """

    condition: Expression
    then_branch: Expression
    else_branch: Optional[Expression] = None


@dataclass(frozen=True)
class ContainsExpression(Expression):
    """The contains(haystack, needle) call form."""

    haystack: Expression
    needle: Expression


@dataclass(frozen=True)
class LengthExpression(Expression):
    """The length(operand) call form."""

    operand: Expression


def child_expressions(expr: Expression) -> Tuple[Expression, ...]:
    """Return the direct sub-expressions of a node, left to right."""
    if isinstance(expr, UnaryExpression):
        return (expr.operand,)
    if isinstance(expr, BinaryExpression):
        return (expr.left, expr.right)
    if isinstance(expr, IfExpression):
        if expr.else_branch is None:
            return (expr.condition, expr.then_branch)
        return (expr.condition, expr.then_branch, expr.else_branch)
    if isinstance(expr, ContainsExpression):
        return (expr.haystack, expr.needle)
    if isinstance(expr, LengthExpression):
        return (expr.operand,)
    if isinstance(expr, (Literal, ContextReference)):
        return ()
    raise TypeError(f"Unsupported Expression type: {type(expr)}")


__all__ = [
    "Expression",
    "BinaryOperator",
    "UnaryOperator",
    "Namespace",
    "Literal",
    "ContextReference",
    "UnaryExpression",
    "BinaryExpression",
    "IfExpression",
    "ContainsExpression",
    "LengthExpression",
    "child_expressions",
]
