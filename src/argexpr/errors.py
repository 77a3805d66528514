"""
Error types raised while reading an argument expression.

Both errors stay inside the package: the public API converts them into
"this value is plain text" and returns the input unchanged.
"""

from typing import Optional


class ExpressionError(Exception):
    """Base class for tokenizer and parser failures."""
    pass


class LexError(ExpressionError):
    """Raised when the tokenizer meets a character it does not recognize."""

    def __init__(self, char: str, position: int):
        super().__init__(f"Unexpected character: {char!r} at position {position}")
        self.char = char
        self.position = position


class ParseError(ExpressionError):
    """Raised when the token stream does not form exactly one expression."""

    def __init__(self, message: str, token: Optional[object] = None):
        super().__init__(message)
        self.token = token
