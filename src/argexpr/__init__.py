"""
Argument Expressions (argexpr) Package

Evaluates single-line argument values such as

    enabled=if(fm.draft, false, true)
    limit=fm.count ?? 10

against a read-only context (typically a note's frontmatter).

Pipeline:
    tokenize -> collect referenced keys -> parse -> evaluate

Values that are not expressions (paths, labels, URLs) pass through
unchanged. That fallback is the contract, not an error path.
"""

from .api import (
    EvaluatedArgs,
    ExpressionResult,
    ReferencedKeys,
    evaluate_args,
    evaluate_expression,
)
from .context import ExpressionContext, FrontmatterContext
from .evaluator import is_truthy

__version__ = "0.1.0"

__all__ = [
    "EvaluatedArgs",
    "ExpressionResult",
    "ReferencedKeys",
    "ExpressionContext",
    "FrontmatterContext",
    "evaluate_args",
    "evaluate_expression",
    "is_truthy",
]
