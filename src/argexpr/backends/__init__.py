"""Backends that render expression trees to other forms."""

from .formatter import format_expression

__all__ = ["format_expression"]
