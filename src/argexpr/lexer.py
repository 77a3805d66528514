"""
Tokenizer for argument expressions.

Turns a single-line argument value into an ordered list of tokens that
always ends with exactly one EOF token.

Rules, scanning left to right:
    - Whitespace (space, tab, CR, LF) is skipped
    - Two-character operators win over their one-character prefixes
    - Strings use ' or " and understand \\n, \\t, \\r escapes
    - Numbers are digit runs with at most one decimal point (".5" is valid)
    - Words are letters/digits/underscores/dots; "fm." and "file." prefixes
      become context references, a few exact words become keywords

Anything else raises LexError. The tokenizer never skips or recovers.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Union

from argexpr.errors import LexError


class TokenType(Enum):
    """Token kinds produced by the tokenizer."""

    # Literals
    NUMBER = "NUMBER"
    STRING = "STRING"
    BOOLEAN = "BOOLEAN"

    # Words
    IDENTIFIER = "IDENTIFIER"
    FM_REF = "FM_REF"
    FILE_REF = "FILE_REF"

    # Arithmetic
    PLUS = "PLUS"
    MINUS = "MINUS"
    STAR = "STAR"
    SLASH = "SLASH"

    # Comparison
    EQ = "EQ"
    NEQ = "NEQ"
    GT = "GT"
    LT = "LT"
    GTE = "GTE"
    LTE = "LTE"

    # Logical
    AND = "AND"
    OR = "OR"
    NOT = "NOT"
    NULLISH = "NULLISH"

    # Punctuation
    LPAREN = "LPAREN"
    RPAREN = "RPAREN"
    COMMA = "COMMA"

    # Keywords
    IF = "IF"
    CONTAINS = "CONTAINS"
    LENGTH = "LENGTH"

    EOF = "EOF"


@dataclass(frozen=True)
class Token:
    """
    A single lexical unit.

    Properties:
        type: TokenType of the token
        value: float for numbers, bool for booleans, str for everything else
        raw: Source text the token stands for
    """

    type: TokenType
    value: Union[str, float, bool]
    raw: str


_TWO_CHAR_OPERATORS = {
    "==": TokenType.EQ,
    "!=": TokenType.NEQ,
    ">=": TokenType.GTE,
    "<=": TokenType.LTE,
    "&&": TokenType.AND,
    "||": TokenType.OR,
    "??": TokenType.NULLISH,
}

_ONE_CHAR_OPERATORS = {
    ">": TokenType.GT,
    "<": TokenType.LT,
    "!": TokenType.NOT,
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    ",": TokenType.COMMA,
}

_KEYWORDS = {
    "if": TokenType.IF,
    "contains": TokenType.CONTAINS,
    "length": TokenType.LENGTH,
}

_REFERENCE_PREFIXES = (
    ("fm.", TokenType.FM_REF),
    ("file.", TokenType.FILE_REF),
)

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r"}

_WHITESPACE = " \t\r\n"


def _is_digit(c: str) -> bool:
    return "0" <= c <= "9"


def _is_alpha(c: str) -> bool:
    return ("a" <= c <= "z") or ("A" <= c <= "Z") or c == "_"


def _is_word_char(c: str) -> bool:
    return _is_alpha(c) or _is_digit(c) or c == "."


def _classify_word(word: str) -> Token:
    """Turn a scanned word into a reference, keyword, boolean or identifier."""
    for prefix, token_type in _REFERENCE_PREFIXES:
        if word.startswith(prefix):
            return Token(token_type, word[len(prefix):], word)

    if word == "true":
        return Token(TokenType.BOOLEAN, True, word)
    if word == "false":
        return Token(TokenType.BOOLEAN, False, word)
    if word in _KEYWORDS:
        return Token(_KEYWORDS[word], word, word)

    return Token(TokenType.IDENTIFIER, word, word)


def tokenize(source: str) -> List[Token]:
    """
    Tokenize an argument value.

    Args:
        source: Raw argument text

    Returns:
        List of tokens, terminated by a single EOF token

    Raises:
        LexError: On the first character no rule accepts
    """
    tokens: List[Token] = []
    length = len(source)
    i = 0

    while i < length:
        c = source[i]

        if c in _WHITESPACE:
            i += 1
            continue

        pair = source[i:i + 2]
        if pair in _TWO_CHAR_OPERATORS:
            tokens.append(Token(_TWO_CHAR_OPERATORS[pair], pair, pair))
            i += 2
            continue

        if c in _ONE_CHAR_OPERATORS:
            tokens.append(Token(_ONE_CHAR_OPERATORS[c], c, c))
            i += 1
            continue

        # String literal; an unterminated string runs to the end of input
        if c == '"' or c == "'":
            quote = c
            i += 1
            chars: List[str] = []
            while i < length and source[i] != quote:
                if source[i] == "\\" and i + 1 < length:
                    escaped = source[i + 1]
                    chars.append(_ESCAPES.get(escaped, escaped))
                    i += 2
                else:
                    chars.append(source[i])
                    i += 1
            if i < length:
                i += 1  # closing quote
            text = "".join(chars)
            tokens.append(Token(TokenType.STRING, text, f"{quote}{text}{quote}"))
            continue

        # Number literal; a second dot ends the number
        if _is_digit(c) or (c == "." and i + 1 < length and _is_digit(source[i + 1])):
            start = i
            seen_dot = False
            while i < length and (_is_digit(source[i]) or (source[i] == "." and not seen_dot)):
                if source[i] == ".":
                    seen_dot = True
                i += 1
            raw = source[start:i]
            tokens.append(Token(TokenType.NUMBER, float(raw), raw))
            continue

        if _is_alpha(c):
            start = i
            while i < length and _is_word_char(source[i]):
                i += 1
            tokens.append(_classify_word(source[start:i]))
            continue

        raise LexError(c, i)

    tokens.append(Token(TokenType.EOF, "", ""))
    return tokens


__all__ = [
    "Token",
    "TokenType",
    "tokenize",
]
